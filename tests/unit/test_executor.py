"""Tests for the fan-out/fan-in executor."""

from __future__ import annotations

import threading
from unittest.mock import patch

import pytest

from s3_replicator.exceptions import TaskError
from s3_replicator.models import EventKind, Operation, ReplicationTask
from s3_replicator.replication.executor import CANCELLED_REASON, FanOutExecutor
from s3_replicator.utils.context import get_correlation_id, with_correlation_id


def _task(task_id: str) -> ReplicationTask:
    return ReplicationTask(
        task_id=task_id,
        record_index=0,
        source_bucket="photos",
        source_region="us-east-1",
        destination_bucket=f"backup-{task_id}",
        destination_region="eu-west-1",
        object_key="img/1.png",
        operation=Operation.COPY,
    )


def _fail(message: str):
    def work() -> None:
        raise TaskError(message)

    return work


@pytest.fixture
def executor():
    pool = FanOutExecutor(max_workers=4)
    yield pool
    pool.shutdown()


class TestFanOutExecutor:
    """Test cases for FanOutExecutor."""

    def test_all_succeed(self, executor) -> None:
        """Test that a batch succeeds when every task succeeds."""
        ran = []
        for i in range(6):
            executor.dispatch(_task(str(i)), lambda i=i: ran.append(i))

        outcome = executor.join(6, EventKind.OBJECT_CREATED)

        assert outcome.ok
        assert outcome.dispatched == 6
        assert outcome.received == 6
        assert sorted(ran) == list(range(6))

    def test_first_failure_returned_without_waiting(self, executor) -> None:
        """Test that fail-fast returns on the first failure and leaves other tasks running."""
        release = threading.Event()
        finished = threading.Event()

        def slow() -> None:
            release.wait(timeout=10)
            finished.set()

        executor.dispatch(_task("slow"), slow)
        executor.dispatch(_task("bad"), _fail("unable to copy img/1.png"))

        outcome = executor.join(2, EventKind.OBJECT_CREATED)

        assert not outcome.ok
        assert outcome.received == 1
        assert outcome.first_failure.task_id == "bad"
        assert outcome.first_failure.error == "unable to copy img/1.png"
        assert executor.cancelled.is_set()
        assert not finished.is_set()

        release.set()
        assert finished.wait(timeout=10)

    def test_collect_all(self) -> None:
        """Test that collect-all waits for every result and reports each failure."""
        executor = FanOutExecutor(max_workers=2, failure_policy="collect-all")
        try:
            executor.dispatch(_task("a"), _fail("first"))
            executor.dispatch(_task("b"), lambda: None)
            executor.dispatch(_task("c"), _fail("second"))

            outcome = executor.join(3, EventKind.OBJECT_CREATED)
        finally:
            executor.shutdown()

        assert outcome.received == 3
        assert sorted(f.error for f in outcome.failures) == ["first", "second"]

    def test_unexpected_exception_becomes_failure(self, executor) -> None:
        """Test that an unexpected exception still delivers a result."""

        def broken() -> None:
            raise RuntimeError("boom")

        executor.dispatch(_task("x"), broken)

        outcome = executor.join(1, EventKind.OBJECT_REMOVED)

        assert not outcome.ok
        assert "boom" in outcome.first_failure.error

    def test_cancellation_not_enforced_by_default(self) -> None:
        """Test that tasks queued after a failure still run by default."""
        executor = FanOutExecutor(max_workers=1, failure_policy="collect-all")
        ran = threading.Event()
        try:
            executor.dispatch(_task("bad"), _fail("first"))
            outcome_first = executor.join(1, EventKind.OBJECT_CREATED)
            executor.dispatch(_task("later"), ran.set)
            outcome_second = executor.join(1, EventKind.OBJECT_CREATED)
        finally:
            executor.shutdown()

        assert executor.cancelled.is_set()
        assert not outcome_first.ok
        assert outcome_second.ok
        assert ran.is_set()

    def test_cancellation_enforced(self) -> None:
        """Test that enforced cancellation skips tasks that have not started."""
        executor = FanOutExecutor(max_workers=1, failure_policy="collect-all", enforce_cancellation=True)
        ran = threading.Event()
        try:
            executor.dispatch(_task("bad"), _fail("first"))
            executor.join(1, EventKind.OBJECT_CREATED)
            executor.dispatch(_task("later"), ran.set)
            outcome = executor.join(1, EventKind.OBJECT_CREATED)
        finally:
            executor.shutdown()

        assert not ran.is_set()
        assert outcome.first_failure.error == CANCELLED_REASON

    def test_correlation_id_propagates(self, executor) -> None:
        """Test that tasks see the dispatcher's correlation ID."""
        seen = []
        with with_correlation_id("req-123"):
            executor.dispatch(_task("a"), lambda: seen.append(get_correlation_id()))
        executor.join(1, EventKind.OBJECT_CREATED)

        assert seen == ["req-123"]

    def test_unknown_policy(self) -> None:
        """Test that an unknown policy is rejected."""
        with pytest.raises(ValueError):
            FanOutExecutor(failure_policy="best-effort")


class TestTaskSpanStatus:
    """Test that task spans record the task result."""

    @patch("s3_replicator.replication.executor.set_span_status")
    def test_success_marks_span_ok(self, mock_status, executor) -> None:
        executor.dispatch(_task("0"), lambda: None)

        assert executor.join(1, EventKind.OBJECT_CREATED).ok
        mock_status.assert_called_once_with(True, None)

    @patch("s3_replicator.replication.executor.set_span_status")
    def test_failure_marks_span_error(self, mock_status, executor) -> None:
        """Test that the failure reason becomes the span status description."""
        executor.dispatch(_task("0"), _fail("unable to copy img/1.png"))

        assert not executor.join(1, EventKind.OBJECT_CREATED).ok
        mock_status.assert_called_once_with(False, "unable to copy img/1.png")
