"""Error helpers: credential redaction and client error inspection."""

import re
from typing import Any

from botocore.exceptions import ClientError

# Patterns that might expose credentials in URLs or SDK messages
SENSITIVE_PATTERNS = [
    r"(X-Amz-Credential=)[^&\s]+",
    r"(X-Amz-Signature=)[^&\s]+",
    r"(X-Amz-Security-Token=)[^&\s]+",
    r"(AWSAccessKeyId=)[^&\s]+",
    r"(Signature=)[^&\s]+",
    r"(https?://)[^/@\s]+:[^/@\s]+@",
]

# Fields to redact completely
SENSITIVE_FIELDS = {
    "aws_access_key_id",
    "aws_secret_access_key",
    "aws_session_token",
    "password",
    "token",
}

NOT_FOUND_CODES = {"404", "NoSuchBucket", "NotFound"}


def sanitize_error_message(message: str) -> str:
    """Sanitize a message to remove credentials.

    Args:
        message: Original message (often an error or a URL)

    Returns:
        Message with signatures, tokens and userinfo redacted
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, r"\1[REDACTED]", sanitized, flags=re.IGNORECASE)

    for field in SENSITIVE_FIELDS:
        sanitized = re.sub(
            rf"{field}[=:\s]+([^\s,;\)&]+)",
            rf"{field}=[REDACTED]",
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def sanitize_exception(error: Exception) -> str:
    """Sanitize exception message."""
    return sanitize_error_message(str(error))


def client_error_code(error: Exception) -> str | None:
    """Return the service error code carried by a botocore ClientError."""
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code")
    return None


def is_not_found(error: Exception) -> bool:
    """Check whether a ClientError reports a missing bucket or object."""
    return client_error_code(error) in NOT_FOUND_CODES


def response_headers(error: ClientError) -> dict[str, Any]:
    """Return the HTTP headers of the failed response, if any."""
    return error.response.get("ResponseMetadata", {}).get("HTTPHeaders", {}) or {}
