"""Exception hierarchy for the S3 Replicator."""

from __future__ import annotations


class ReplicatorError(Exception):
    """Base class for replication errors."""


class ConfigurationError(ReplicatorError):
    """Replication configuration is missing, empty or malformed."""


class FatalConfigurationError(ReplicatorError):
    """A destination bucket could not be located.

    Indicates a misconfigured deployment rather than a transient failure.
    The top-level handler decides whether the process terminates.
    """

    def __init__(self, bucket: str, message: str | None = None) -> None:
        self.bucket = bucket
        super().__init__(message or f"unable to find bucket {bucket}'s region: not found")


class BucketNotFoundError(ReplicatorError):
    """The storage service reported that a bucket does not exist."""

    def __init__(self, bucket: str) -> None:
        self.bucket = bucket
        super().__init__(f"bucket {bucket!r} not found")


class SessionError(ReplicatorError):
    """A client for a destination region could not be established."""


class QuarantineError(ReplicatorError):
    """An object is tagged as infected, or its tags could not be checked."""

    def __init__(self, bucket: str, key: str, reason: str) -> None:
        self.bucket = bucket
        self.key = key
        self.reason = reason
        super().__init__(f"object {key!r} in bucket {bucket!r} is quarantined: {reason}")


class TaskError(ReplicatorError):
    """A replication task reported a failure."""

    def __init__(self, reason: str, task_id: str | None = None) -> None:
        self.reason = reason
        self.task_id = task_id
        super().__init__(reason)
