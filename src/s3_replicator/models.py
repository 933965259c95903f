"""Models for replication rules, change records and tasks."""

from __future__ import annotations

import enum
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .constants import REGION_SEPARATOR


class EventKind(str, enum.Enum):
    """Kind of change reported by a notification record."""

    OBJECT_CREATED = "ObjectCreated"
    OBJECT_REMOVED = "ObjectRemoved"
    TAGS_CHANGED = "TagsChanged"
    OTHER = "Other"


class Operation(str, enum.Enum):
    """Operation a replication task performs on its destination."""

    COPY = "copy"
    DELETE = "delete"


@dataclass(frozen=True)
class DestinationSpec:
    """A replication target, optionally pinned to a region."""

    bucket: str
    region: str | None = None

    @classmethod
    def parse(cls, value: str) -> DestinationSpec:
        """Parse a ``bucket`` or ``bucket@region`` destination."""
        bucket, _, region = value.partition(REGION_SEPARATOR)
        return cls(bucket=bucket, region=region or None)

    def __str__(self) -> str:
        if self.region:
            return f"{self.bucket}{REGION_SEPARATOR}{self.region}"
        return self.bucket


@dataclass(frozen=True)
class ReplicationRule:
    """Replication configuration for one source bucket."""

    source_bucket: str
    region: str
    destinations: tuple[DestinationSpec, ...] = ()
    acl: str | None = None


class RuleTable(Mapping[str, ReplicationRule]):
    """Read-only mapping of source bucket to replication rule."""

    def __init__(self, rules: Mapping[str, ReplicationRule]) -> None:
        self._rules = MappingProxyType(dict(rules))

    def __getitem__(self, source_bucket: str) -> ReplicationRule:
        return self._rules[source_bucket]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def destinations_for(self, source_bucket: str) -> tuple[DestinationSpec, ...]:
        """Return the destinations configured for a bucket (empty if none)."""
        rule = self._rules.get(source_bucket)
        return rule.destinations if rule else ()


@dataclass(frozen=True)
class ChangeRecord:
    """A decoded notification entry."""

    event_name: str
    event_kind: EventKind
    source_bucket: str
    object_key: str


@dataclass(frozen=True)
class ClassifiedBatch:
    """A notification batch with the event kind derived from its first record."""

    event_name: str
    event_kind: EventKind
    records: tuple[ChangeRecord, ...]


@dataclass(frozen=True)
class ReplicationTask:
    """One operation against one destination for one record."""

    task_id: str
    record_index: int
    source_bucket: str
    source_region: str
    destination_bucket: str
    destination_region: str
    object_key: str
    operation: Operation
    acl: str | None = None


@dataclass(frozen=True)
class TaskResult:
    """Outcome of a replication task."""

    task_id: str
    error: str | None = None

    @classmethod
    def success(cls, task_id: str) -> TaskResult:
        return cls(task_id=task_id)

    @classmethod
    def failure(cls, task_id: str, reason: str) -> TaskResult:
        return cls(task_id=task_id, error=reason)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchOutcome:
    """Aggregated result of one replication pass."""

    event_kind: EventKind
    dispatched: int = 0
    received: int = 0
    failures: list[TaskResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def first_failure(self) -> TaskResult | None:
        return self.failures[0] if self.failures else None
