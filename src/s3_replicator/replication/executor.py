"""Concurrent fan-out of replication tasks and fan-in of their results."""

from __future__ import annotations

import contextvars
import logging
import queue
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable

from .. import metrics
from ..constants import DEFAULT_MAX_WORKERS, POLICY_COLLECT_ALL, POLICY_FAIL_FAST
from ..exceptions import TaskError
from ..models import BatchOutcome, EventKind, ReplicationTask, TaskResult
from ..tracing import set_span_status, trace_span
from ..utils.errors import sanitize_exception

logger = logging.getLogger(__name__)

CANCELLED_REASON = "cancelled after an earlier task failed"


class FanOutExecutor:
    """Runs replication tasks on a bounded pool and joins their results.

    Results travel through an unbounded completion queue, so a task whose
    result is never consumed still finishes without blocking. The join
    counts results instead of matching them to tasks. With the fail-fast
    policy it returns on the first failure by arrival order and leaves
    in-flight tasks running. A cancellation event is set on that first
    failure; tasks only honor it when ``enforce_cancellation`` is true.
    """

    def __init__(
        self,
        max_workers: int = DEFAULT_MAX_WORKERS,
        failure_policy: str = POLICY_FAIL_FAST,
        enforce_cancellation: bool = False,
    ) -> None:
        if failure_policy not in (POLICY_FAIL_FAST, POLICY_COLLECT_ALL):
            raise ValueError(f"unsupported failure policy {failure_policy!r}")
        self.failure_policy = failure_policy
        self.enforce_cancellation = enforce_cancellation
        self.cancelled = threading.Event()
        self.dispatched = 0
        self._completions: queue.SimpleQueue[TaskResult] = queue.SimpleQueue()
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="replication")

    def dispatch(self, task: ReplicationTask, work: Callable[[], None]) -> None:
        """Schedule one task. Its result is delivered to the completion queue."""
        ctx = contextvars.copy_context()
        self._pool.submit(ctx.run, self._run, task, work)
        self.dispatched += 1

    def _run(self, task: ReplicationTask, work: Callable[[], None]) -> None:
        if self.enforce_cancellation and self.cancelled.is_set():
            metrics.tasks_total.labels(operation=task.operation.value, result="cancelled").inc()
            self._completions.put(TaskResult.failure(task.task_id, CANCELLED_REASON))
            return

        start_time = time.time()
        attributes = {
            "replication.operation": task.operation.value,
            "replication.source": task.source_bucket,
            "replication.destination": task.destination_bucket,
            "replication.region": task.destination_region,
        }
        with trace_span(f"replication.{task.operation.value}", attributes=attributes):
            try:
                work()
                result = TaskResult.success(task.task_id)
            except TaskError as e:
                logger.error(f"Task {task.task_id} failed: {sanitize_exception(e)}")
                result = TaskResult.failure(task.task_id, str(e))
            except Exception as e:
                # Every dispatched task must deliver a result or the join never completes
                logger.exception(f"Task {task.task_id} raised unexpectedly")
                result = TaskResult.failure(
                    task.task_id,
                    f"unexpected error replicating {task.object_key} to bucket "
                    f"{task.destination_bucket!r}, {e}",
                )
            finally:
                metrics.task_duration_seconds.labels(operation=task.operation.value).observe(
                    time.time() - start_time
                )
            set_span_status(result.ok, result.error)

        metrics.tasks_total.labels(
            operation=task.operation.value, result="success" if result.ok else "error"
        ).inc()
        self._completions.put(result)

    def join(self, expected: int, event_kind: EventKind) -> BatchOutcome:
        """Wait for ``expected`` results.

        Args:
            expected: Number of results to receive
            event_kind: Event kind of the batch, recorded on the outcome

        Returns:
            Outcome carrying the failures received, in arrival order
        """
        outcome = BatchOutcome(event_kind=event_kind, dispatched=self.dispatched)
        received: dict[str, TaskResult] = {}

        for _ in range(expected):
            result = self._completions.get()
            outcome.received += 1
            received[result.task_id] = result
            if result.ok:
                continue

            self.cancelled.set()
            outcome.failures.append(result)
            if self.failure_policy == POLICY_FAIL_FAST:
                break

        if self.failure_policy == POLICY_COLLECT_ALL and len(received) != outcome.received:
            logger.warning(
                f"Received {outcome.received} results for {len(received)} distinct tasks"
            )
        return outcome

    def shutdown(self) -> None:
        """Release the pool without waiting for tasks still in flight."""
        self._pool.shutdown(wait=False)
