"""Deletion of one object from one destination."""

from __future__ import annotations

from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import TaskError
from ..services.s3.base import ObjectStore


class ObjectRemover:
    """Forwards a deletion to a destination bucket."""

    def __init__(self, destination_store: ObjectStore) -> None:
        self.destination_store = destination_store

    def remove(self, destination: str, key: str) -> None:
        """Delete ``key`` from ``destination`` and wait until it is gone.

        Raises:
            TaskError: If the delete or the absence poll fails
        """
        try:
            self.destination_store.delete_object(destination, key)
        except (ClientError, BotoCoreError) as e:
            raise TaskError(f"unable to delete {key} in bucket {destination!r}, {e}") from e

        try:
            self.destination_store.wait_until_not_exists(destination, key)
        except BotoCoreError as e:
            raise TaskError(
                f"error occurred while waiting for item {key!r} to be removed in bucket {destination!r}, {e}"
            ) from e
