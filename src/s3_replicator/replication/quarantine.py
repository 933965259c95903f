"""Tag-based quarantine gate."""

from __future__ import annotations

import logging

from botocore.exceptions import BotoCoreError, ClientError

from ..constants import QUARANTINE_TAG_VALUE
from ..exceptions import QuarantineError
from ..services.s3.base import ObjectStore

logger = logging.getLogger(__name__)


class QuarantineGate:
    """Refuses replication of objects tagged as infected."""

    def __init__(self, store: ObjectStore) -> None:
        self.store = store

    def is_clean(self, bucket: str, key: str) -> bool:
        """Check whether an object may be replicated.

        Raises:
            QuarantineError: If the tag set cannot be fetched (fail-closed)
        """
        try:
            tags = self.store.get_object_tags(bucket, key)
        except (ClientError, BotoCoreError) as e:
            raise QuarantineError(bucket, key, f"unable to fetch tags: {e}") from e

        for name, value in tags.items():
            if value.rstrip("\n") == QUARANTINE_TAG_VALUE:
                logger.warning(f"Object {key} in bucket {bucket} carries tag {name}={QUARANTINE_TAG_VALUE}")
                return False
        return True
