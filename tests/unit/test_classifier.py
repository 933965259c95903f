"""Tests for notification batch classification."""

from __future__ import annotations

import pytest

from s3_replicator.models import EventKind
from s3_replicator.replication.classifier import classify_batch, classify_event_name, decode_record


class TestClassifyEventName:
    """Test cases for event name classification."""

    @pytest.mark.parametrize(
        "name",
        ["ObjectCreated:Put", "ObjectCreated:Copy", "s3:ObjectCreated:Put", "ObjectCreated:CompleteMultipartUpload"],
    )
    def test_created(self, name) -> None:
        assert classify_event_name(name) is EventKind.OBJECT_CREATED

    def test_delete_marker(self) -> None:
        assert classify_event_name("ObjectRemoved:DeleteMarkerCreated") is EventKind.OBJECT_REMOVED

    def test_tagging(self) -> None:
        assert classify_event_name("ObjectTagging:Put") is EventKind.TAGS_CHANGED

    @pytest.mark.parametrize("name", ["ObjectRemoved:Delete", "ObjectRestore:Completed", ""])
    def test_other(self, name) -> None:
        assert classify_event_name(name) is EventKind.OTHER


class TestDecodeRecord:
    """Test cases for record decoding."""

    def test_key_is_url_decoded(self, make_event) -> None:
        """Test that object keys are decoded before use."""
        record = decode_record(make_event("ObjectCreated:Put", ("photos", "img%2F1.png"))["Records"][0])

        assert record.source_bucket == "photos"
        assert record.object_key == "img/1.png"
        assert record.event_kind is EventKind.OBJECT_CREATED

    def test_plus_decodes_to_space(self, make_event) -> None:
        """Test that form-encoded spaces are decoded."""
        record = decode_record(make_event("ObjectCreated:Put", ("photos", "my+file.txt"))["Records"][0])

        assert record.object_key == "my file.txt"


class TestClassifyBatch:
    """Test cases for batch classification."""

    def test_kind_from_first_record(self, make_event) -> None:
        """Test that the batch kind comes from the first record."""
        event = make_event("ObjectCreated:Put", ("photos", "a.png"), ("photos", "b.png"))
        event["Records"][1]["eventName"] = "ObjectRemoved:DeleteMarkerCreated"

        batch = classify_batch(event)

        assert batch is not None
        assert batch.event_kind is EventKind.OBJECT_CREATED
        assert batch.event_name == "s3:ObjectCreated:Put"
        assert len(batch.records) == 2

    def test_empty_batch_is_noop(self) -> None:
        assert classify_batch({"Records": []}) is None

    def test_missing_records_is_noop(self) -> None:
        assert classify_batch({"detail-type": "Scheduled Event"}) is None

    def test_non_mapping_is_noop(self) -> None:
        assert classify_batch("not an event") is None

    def test_empty_first_key_is_noop(self, make_event) -> None:
        """Test that an empty first object key yields no work."""
        assert classify_batch(make_event("ObjectCreated:Put", ("photos", ""))) is None

    def test_unknown_kind(self, make_event) -> None:
        """Test that unrecognized events classify as other."""
        batch = classify_batch(make_event("ObjectRestore:Post", ("photos", "a.png")))

        assert batch is not None
        assert batch.event_kind is EventKind.OTHER
