"""Resolution of destination regions."""

from __future__ import annotations

import logging
from typing import Callable

from botocore.exceptions import BotoCoreError, ClientError

from .. import metrics
from ..constants import DEFAULT_PROBE_REGION
from ..exceptions import BucketNotFoundError, FatalConfigurationError, SessionError
from ..models import DestinationSpec
from ..services.s3.base import ObjectStore

logger = logging.getLogger(__name__)


class RegionResolver:
    """Determines the region and bucket name of a destination.

    An explicit ``bucket@region`` suffix is authoritative. Otherwise the
    bucket location is looked up through a client bound to the probe region.
    Lookups are not cached: every unsuffixed destination costs one lookup.
    """

    def __init__(
        self,
        store_for_region: Callable[[str], ObjectStore],
        probe_region: str = DEFAULT_PROBE_REGION,
    ) -> None:
        self._store_for_region = store_for_region
        self.probe_region = probe_region
        self._probe_store: ObjectStore | None = None

    def _probe(self) -> ObjectStore:
        if self._probe_store is None:
            self._probe_store = self._store_for_region(self.probe_region)
        return self._probe_store

    def resolve(self, destination: DestinationSpec, source_default_region: str) -> tuple[str, str]:
        """Resolve a destination to ``(region, bucket)``.

        Args:
            destination: Parsed destination spec
            source_default_region: Default region of the source rule

        Raises:
            FatalConfigurationError: If the destination bucket does not exist
            SessionError: If the location lookup fails for another reason
        """
        if destination.region:
            return destination.region, destination.bucket

        try:
            region = self._probe().get_bucket_region(destination.bucket)
        except BucketNotFoundError as e:
            metrics.region_lookups_total.labels(result="not_found").inc()
            logger.error(f"Unable to find bucket {destination.bucket}'s region: not found")
            raise FatalConfigurationError(destination.bucket) from e
        except (ClientError, BotoCoreError) as e:
            metrics.region_lookups_total.labels(result="error").inc()
            raise SessionError(
                f"unable to look up region of bucket {destination.bucket} "
                f"(source default region {source_default_region}): {e}"
            ) from e

        metrics.region_lookups_total.labels(result="success").inc()
        return region, destination.bucket
