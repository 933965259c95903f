"""Copy of one object into one destination."""

from __future__ import annotations

import logging
from typing import Callable

from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import TaskError
from ..services.s3.base import ObjectStore

logger = logging.getLogger(__name__)


class ObjectReplicator:
    """Copies an object into a destination bucket.

    When no explicit ACL is configured the source object's owner and
    grants are written onto the replica after the copy lands.
    """

    def __init__(
        self,
        destination_store: ObjectStore,
        source_region: str,
        store_for_region: Callable[[str], ObjectStore],
    ) -> None:
        self.destination_store = destination_store
        self.source_region = source_region
        self._store_for_region = store_for_region

    def _source_store(self) -> ObjectStore:
        if self.source_region == self.destination_store.region:
            return self.destination_store
        return self._store_for_region(self.source_region)

    def replicate(self, source: str, destination: str, key: str, acl: str | None = None) -> None:
        """Copy ``key`` from ``source`` into ``destination``.

        Raises:
            TaskError: If the copy, the existence poll or ACL propagation fails
        """
        try:
            self.destination_store.copy_object(source, destination, key, acl=acl)
        except (ClientError, BotoCoreError) as e:
            raise TaskError(f"unable to copy {key} from bucket {source!r} to bucket {destination!r}, {e}") from e

        try:
            self.destination_store.wait_until_exists(destination, key)
        except BotoCoreError as e:
            raise TaskError(
                f"error occurred while waiting for item {key!r} to be copied in bucket {destination!r}, {e}"
            ) from e

        if acl:
            return

        try:
            policy = self._source_store().get_object_acl(source, key)
            self.destination_store.put_object_acl(destination, key, policy)
        except (ClientError, BotoCoreError) as e:
            raise TaskError(
                f"unable to propagate acl of {key} from bucket {source!r} to bucket {destination!r}, {e}"
            ) from e
        logger.debug(f"Propagated ACL of {key} from {source} to {destination}")
