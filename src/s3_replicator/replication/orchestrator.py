"""Replication of a notification batch across configured destinations."""

from __future__ import annotations

import logging
from functools import partial
from typing import Any

from .. import metrics
from ..config import Settings
from ..constants import (
    ACTION_COPYING,
    ACTION_DELETING,
    ACTION_IGNORING,
    ACTION_QUARANTINED,
)
from ..exceptions import QuarantineError
from ..logging import log_replication_event
from ..models import (
    BatchOutcome,
    ClassifiedBatch,
    EventKind,
    Operation,
    ReplicationRule,
    ReplicationTask,
    RuleTable,
)
from ..services.aws.client import ClientFactory
from ..tracing import set_span_status, trace_span
from .classifier import classify_batch
from .executor import FanOutExecutor
from .quarantine import QuarantineGate
from .regions import RegionResolver
from .remover import ObjectRemover
from .replicator import ObjectReplicator

logger = logging.getLogger(__name__)

COPY_FAMILY = (EventKind.OBJECT_CREATED, EventKind.TAGS_CHANGED)


class ReplicationOrchestrator:
    """Classifies a batch and fans its records out to every destination."""

    def __init__(
        self,
        rules: RuleTable,
        client_factory: ClientFactory,
        max_workers: int,
        probe_region: str,
        failure_policy: str,
        enforce_cancellation: bool = False,
    ) -> None:
        self.rules = rules
        self.client_factory = client_factory
        self.max_workers = max_workers
        self.failure_policy = failure_policy
        self.enforce_cancellation = enforce_cancellation
        self.resolver = RegionResolver(client_factory.for_region, probe_region=probe_region)

    @classmethod
    def from_settings(cls, rules: RuleTable, settings: Settings) -> ReplicationOrchestrator:
        """Create an orchestrator configured from process settings."""
        return cls(
            rules=rules,
            client_factory=ClientFactory(max_attempts=settings.aws_max_attempts),
            max_workers=settings.max_workers,
            probe_region=settings.probe_region,
            failure_policy=settings.failure_policy,
            enforce_cancellation=settings.enforce_cancellation,
        )

    def process(self, event: Any) -> BatchOutcome | None:
        """Replicate one notification batch.

        Returns:
            The batch outcome, or None when the batch holds nothing to do

        Raises:
            QuarantineError: If a record is tagged infected; the whole batch stops
            FatalConfigurationError: If a destination bucket does not exist
            SessionError: If a destination client cannot be established
        """
        batch = classify_batch(event)
        if batch is None:
            logger.debug("No records to replicate")
            return None

        logger.info(f"S3 event : {batch.event_name}")
        if batch.event_kind is EventKind.OTHER:
            first = batch.records[0]
            log_replication_event(
                logger,
                action=ACTION_IGNORING,
                source=first.source_bucket,
                key=first.object_key,
                message=f"No replication for event {batch.event_name}",
            )
            metrics.batches_total.labels(event_kind=batch.event_kind.value, result="ignored").inc()
            return BatchOutcome(event_kind=batch.event_kind)

        with trace_span("replication.batch", attributes={"replication.event": batch.event_name}):
            try:
                outcome = self._fan_out(batch)
            except Exception as e:
                metrics.batches_total.labels(event_kind=batch.event_kind.value, result="error").inc()
                set_span_status(False, str(e))
                raise
            first = outcome.first_failure
            set_span_status(outcome.ok, first.error if first else None)

        metrics.batches_total.labels(
            event_kind=batch.event_kind.value, result="success" if outcome.ok else "error"
        ).inc()
        return outcome

    def _fan_out(self, batch: ClassifiedBatch) -> BatchOutcome:
        executor = FanOutExecutor(
            max_workers=self.max_workers,
            failure_policy=self.failure_policy,
            enforce_cancellation=self.enforce_cancellation,
        )
        try:
            for index, record in enumerate(batch.records):
                rule = self.rules.get(record.source_bucket)
                if rule is None:
                    logger.warning(f"No replication rule for bucket {record.source_bucket}")
                    continue

                if batch.event_kind is EventKind.TAGS_CHANGED:
                    self._check_quarantine(rule, record.object_key)

                for position, destination in enumerate(rule.destinations):
                    region, bucket = self.resolver.resolve(destination, rule.region)
                    task = ReplicationTask(
                        task_id=f"{index}:{position}:{bucket}",
                        record_index=index,
                        source_bucket=record.source_bucket,
                        source_region=rule.region,
                        destination_bucket=bucket,
                        destination_region=region,
                        object_key=record.object_key,
                        operation=Operation.COPY if batch.event_kind in COPY_FAMILY else Operation.DELETE,
                        acl=rule.acl,
                    )
                    log_replication_event(
                        logger,
                        action=ACTION_COPYING if task.operation is Operation.COPY else ACTION_DELETING,
                        source=task.source_bucket,
                        key=task.object_key,
                        destination=task.destination_bucket,
                        region=task.destination_region,
                        message=f"{task.operation.value} dispatched",
                        task_id=task.task_id,
                    )
                    executor.dispatch(task, self._work_for(task))

            expected = sum(len(self.rules.destinations_for(r.source_bucket)) for r in batch.records)
            return executor.join(expected, batch.event_kind)
        finally:
            executor.shutdown()

    def _check_quarantine(self, rule: ReplicationRule, key: str) -> None:
        gate = QuarantineGate(self.client_factory.for_region(rule.region))
        try:
            clean = gate.is_clean(rule.source_bucket, key)
        except QuarantineError:
            metrics.quarantine_blocked_total.inc()
            raise
        if not clean:
            metrics.quarantine_blocked_total.inc()
            log_replication_event(
                logger,
                action=ACTION_QUARANTINED,
                source=rule.source_bucket,
                key=key,
                message="Object is tagged as infected, replication refused",
                level=logging.WARNING,
            )
            raise QuarantineError(rule.source_bucket, key, "tagged as infected")

    def _work_for(self, task: ReplicationTask) -> partial[None]:
        # The destination client is created here so a session failure halts dispatch
        store = self.client_factory.for_region(task.destination_region)
        if task.operation is Operation.COPY:
            replicator = ObjectReplicator(store, task.source_region, self.client_factory.for_region)
            return partial(
                replicator.replicate,
                task.source_bucket,
                task.destination_bucket,
                task.object_key,
                task.acl,
            )
        remover = ObjectRemover(store)
        return partial(remover.remove, task.destination_bucket, task.object_key)
