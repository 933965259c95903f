"""Utility functions for the S3 Replicator."""

from .context import (
    get_context_dict,
    get_correlation_id,
    with_correlation_id,
)
from .errors import (
    client_error_code,
    is_not_found,
    sanitize_error_message,
    sanitize_exception,
)

__all__ = [
    "get_correlation_id",
    "with_correlation_id",
    "get_context_dict",
    "sanitize_error_message",
    "sanitize_exception",
    "client_error_code",
    "is_not_found",
]
