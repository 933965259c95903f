"""Main entry point for the S3 Replicator."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import uuid
from typing import Any

from . import logging as structured_logging
from . import metrics
from .config import Settings, load_rule_table
from .constants import EXIT_REGION_NOT_FOUND
from .exceptions import ConfigurationError, FatalConfigurationError, ReplicatorError, TaskError
from .models import BatchOutcome, RuleTable
from .replication.orchestrator import ReplicationOrchestrator
from .tracing import initialize_tracing
from .utils.context import with_correlation_id
from .utils.errors import sanitize_exception

logger = logging.getLogger(__name__)


def _summary(outcome: BatchOutcome | None) -> dict[str, Any]:
    if outcome is None:
        return {"status": "noop"}
    return {
        "status": "ok" if outcome.ok else "error",
        "event_kind": outcome.event_kind.value,
        "dispatched": outcome.dispatched,
        "received": outcome.received,
        "failures": [{"task_id": f.task_id, "error": f.error} for f in outcome.failures],
    }


def _exit_fatal(settings: Settings) -> None:
    """Terminate the process with the region-not-found status.

    Worker threads of an abandoned fan-out are non-daemon, so a regular
    interpreter exit would wait for them. Metrics and log handlers are
    flushed first because ``os._exit`` skips interpreter cleanup.
    """
    metrics.push_metrics(settings.pushgateway_url, settings.metrics_job)
    for handler in logging.getLogger().handlers:
        handler.flush()
    os._exit(EXIT_REGION_NOT_FOUND)


def handle_event(
    event: Any,
    context: Any = None,
    settings: Settings | None = None,
    rules: RuleTable | None = None,
) -> dict[str, Any]:
    """Handle one notification batch.

    The replication configuration is loaded once per invocation unless a
    rule table is passed in.

    Raises:
        ConfigurationError: If the configuration is missing or malformed
        QuarantineError: If a record is tagged infected
        SessionError: If a destination client cannot be established
        TaskError: If a replication task failed
    """
    structured_logging.setup_structured_logging()
    initialize_tracing()

    settings = settings or Settings.from_env()
    if rules is None:
        try:
            rules = load_rule_table(settings)
        except ConfigurationError as e:
            logger.error(f"ParseConfig Error: {sanitize_exception(e)}")
            raise

    request_id = getattr(context, "aws_request_id", None) or uuid.uuid4().hex
    with with_correlation_id(request_id):
        orchestrator = ReplicationOrchestrator.from_settings(rules, settings)
        try:
            outcome = orchestrator.process(event)
        except FatalConfigurationError as e:
            logger.critical(f"Fatal configuration error: {e}")
            if settings.exit_on_fatal:
                _exit_fatal(settings)
            raise
        finally:
            metrics.push_metrics(settings.pushgateway_url, settings.metrics_job)

        if outcome is not None and not outcome.ok:
            first = outcome.first_failure
            if len(outcome.failures) == 1:
                raise TaskError(first.error, first.task_id)
            raise TaskError(
                "; ".join(f.error for f in outcome.failures if f.error), first.task_id
            )

        logger.info("Completed...")
        return _summary(outcome)


def lambda_handler(event: Any, context: Any) -> dict[str, Any]:
    """AWS Lambda entry point."""
    return handle_event(event, context)


def main(argv: list[str] | None = None) -> int:
    """Replay a notification batch from a JSON file (or stdin)."""
    parser = argparse.ArgumentParser(
        prog="s3-replicator",
        description="Replicate S3 objects for a notification batch.",
    )
    parser.add_argument(
        "event",
        nargs="?",
        type=argparse.FileType("r"),
        default=sys.stdin,
        help="Path to a notification batch JSON document (default: stdin)",
    )
    args = parser.parse_args(argv)

    try:
        event = json.load(args.event)
    except ValueError as e:
        parser.error(f"invalid event document: {e}")

    try:
        summary = handle_event(event)
    except ReplicatorError as e:
        logger.error(f"Replication failed: {sanitize_exception(e)}")
        return 1

    print(json.dumps(summary))
    return 0


if __name__ == "__main__":
    sys.exit(main())
