"""Classification of notification batches."""

from __future__ import annotations

import logging
from typing import Any, Mapping
from urllib.parse import unquote_plus

from ..constants import CREATED_EVENTS, EVENT_PREFIX, REMOVED_EVENTS, TAGGING_EVENTS
from ..models import ChangeRecord, ClassifiedBatch, EventKind

logger = logging.getLogger(__name__)


def classify_event_name(event_name: str) -> EventKind:
    """Map a notification event name to an event kind.

    Names are accepted with or without the ``s3:`` prefix.
    """
    if not event_name.startswith(EVENT_PREFIX):
        event_name = EVENT_PREFIX + event_name
    if event_name in CREATED_EVENTS:
        return EventKind.OBJECT_CREATED
    if event_name in REMOVED_EVENTS:
        return EventKind.OBJECT_REMOVED
    if event_name in TAGGING_EVENTS:
        return EventKind.TAGS_CHANGED
    return EventKind.OTHER


def decode_record(entry: Mapping[str, Any]) -> ChangeRecord:
    """Decode one notification entry.

    Object keys arrive form-encoded and are decoded before use.
    """
    event_name = entry.get("eventName") or ""
    s3 = entry.get("s3") or {}
    bucket = (s3.get("bucket") or {}).get("name") or ""
    key = (s3.get("object") or {}).get("key") or ""
    return ChangeRecord(
        event_name=event_name,
        event_kind=classify_event_name(event_name),
        source_bucket=bucket,
        object_key=unquote_plus(key),
    )


def classify_batch(event: Any) -> ClassifiedBatch | None:
    """Decode a notification batch and derive its event kind.

    The kind of the whole batch is taken from its first record. Returns
    None when there is nothing to do: the event is not a notification
    batch, the batch is empty, or the first record has no object key.
    """
    if not isinstance(event, Mapping):
        return None
    entries = event.get("Records") or []
    if not isinstance(entries, list) or not entries:
        return None

    records = tuple(decode_record(entry) for entry in entries if isinstance(entry, Mapping))
    if not records or not records[0].object_key:
        return None

    first = records[0]
    return ClassifiedBatch(
        event_name=EVENT_PREFIX + first.event_name.removeprefix(EVENT_PREFIX),
        event_kind=first.event_kind,
        records=records,
    )
