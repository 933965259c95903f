"""Prometheus metrics for the S3 Replicator."""

from __future__ import annotations

import logging

from prometheus_client import REGISTRY, Counter, Histogram, push_to_gateway

logger = logging.getLogger(__name__)

# Batch metrics
batches_total = Counter(
    "s3_replicator_batches_total",
    "Total number of notification batches processed",
    ["event_kind", "result"],
)

# Task metrics
tasks_total = Counter(
    "s3_replicator_tasks_total",
    "Total number of replication tasks",
    ["operation", "result"],
)

task_duration_seconds = Histogram(
    "s3_replicator_task_duration_seconds",
    "Duration of replication tasks in seconds",
    ["operation"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# Quarantine metrics
quarantine_blocked_total = Counter(
    "s3_replicator_quarantine_blocked_total",
    "Total number of objects refused by the quarantine gate",
)

# Region resolution metrics
region_lookups_total = Counter(
    "s3_replicator_region_lookups_total",
    "Total number of bucket location lookups",
    ["result"],
)

# API call metrics
api_call_total = Counter(
    "s3_replicator_api_call_total",
    "Total number of storage API calls",
    ["operation", "result"],
)

api_call_duration_seconds = Histogram(
    "s3_replicator_api_call_duration_seconds",
    "Duration of storage API calls in seconds",
    ["operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 30.0],
)


def push_metrics(gateway: str | None, job: str) -> None:
    """Push the registry to a Prometheus Pushgateway.

    Each invocation is short-lived, so metrics are pushed instead of scraped.
    A failed push is logged and does not fail the batch.

    Args:
        gateway: Pushgateway address, or None to skip pushing
        job: Job label for the pushed group
    """
    if not gateway:
        return
    try:
        push_to_gateway(gateway, job=job, registry=REGISTRY)
    except OSError as e:
        logger.warning(f"Failed to push metrics to {gateway}: {e}")
