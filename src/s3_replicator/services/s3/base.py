"""Base object store interface."""

from __future__ import annotations

from typing import Any, Protocol


class ObjectStore(Protocol):
    """Protocol defining the storage operations replication relies on."""

    region: str

    def copy_object(
        self, source_bucket: str, destination_bucket: str, key: str, acl: str | None = None
    ) -> None:
        """Copy an object from the source bucket into the destination bucket."""
        ...

    def wait_until_exists(self, bucket: str, key: str) -> None:
        """Block until the object is visible in the bucket."""
        ...

    def delete_object(self, bucket: str, key: str) -> None:
        """Delete an object."""
        ...

    def wait_until_not_exists(self, bucket: str, key: str) -> None:
        """Block until the object is gone from the bucket."""
        ...

    def get_object_acl(self, bucket: str, key: str) -> dict[str, Any]:
        """Get an object's access control policy (``Owner`` and ``Grants``)."""
        ...

    def put_object_acl(self, bucket: str, key: str, policy: dict[str, Any]) -> None:
        """Replace an object's access control policy."""
        ...

    def get_object_tags(self, bucket: str, key: str) -> dict[str, str]:
        """Get an object's tag set."""
        ...

    def get_bucket_region(self, bucket: str) -> str:
        """Look up the region a bucket lives in.

        Raises:
            BucketNotFoundError: If the bucket does not exist
        """
        ...
