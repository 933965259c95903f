"""Structured logging configuration for the S3 Replicator."""

import json
import logging
import os
import sys
from typing import Any

from .constants import CONTROLLER, ENV_LOG_LEVEL
from .utils.context import get_context_dict


def setup_structured_logging(level: str | None = None) -> None:
    """Configure structured JSON logging."""
    level_name = (level or os.getenv(ENV_LOG_LEVEL, "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def log_replication_event(
    logger: logging.Logger,
    action: str,
    source: str,
    key: str,
    message: str,
    destination: str | None = None,
    region: str | None = None,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """Log a structured replication event."""
    log_data = {
        "controller": CONTROLLER,
        "action": action,
        "source": source,
        "key": key,
        "destination": destination,
        "region": region,
        "message": message,
    }
    log_data.update(kwargs)
    logger.log(level, json.dumps(get_context_dict(log_data), default=str))
