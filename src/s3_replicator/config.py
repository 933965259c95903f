"""Runtime settings and replication configuration loading."""

from __future__ import annotations

import base64
import binascii
import logging
import os
from dataclasses import dataclass
from urllib.parse import urlparse

import requests

from .builders.rules import build_rule_table
from .constants import (
    DEFAULT_AWS_MAX_ATTEMPTS,
    DEFAULT_CONFIG_FETCH_TIMEOUT,
    DEFAULT_MAX_WORKERS,
    DEFAULT_METRICS_JOB,
    DEFAULT_PROBE_REGION,
    ENV_AWS_MAX_ATTEMPTS,
    ENV_CONFIG,
    ENV_CONFIG_FETCH_TIMEOUT,
    ENV_CONFIG_URL,
    ENV_ENFORCE_CANCELLATION,
    ENV_EXIT_ON_FATAL,
    ENV_FAILURE_POLICY,
    ENV_MAX_WORKERS,
    ENV_METRICS_JOB,
    ENV_PROBE_REGION,
    ENV_PUSHGATEWAY_URL,
    POLICY_COLLECT_ALL,
    POLICY_FAIL_FAST,
)
from .exceptions import ConfigurationError
from .models import RuleTable
from .utils.errors import sanitize_error_message, sanitize_exception

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Process settings, read once per invocation."""

    config_url: str | None = None
    config_blob: str | None = None
    max_workers: int = DEFAULT_MAX_WORKERS
    probe_region: str = DEFAULT_PROBE_REGION
    failure_policy: str = POLICY_FAIL_FAST
    enforce_cancellation: bool = False
    exit_on_fatal: bool = True
    aws_max_attempts: int = DEFAULT_AWS_MAX_ATTEMPTS
    config_fetch_timeout: float = DEFAULT_CONFIG_FETCH_TIMEOUT
    pushgateway_url: str | None = None
    metrics_job: str = DEFAULT_METRICS_JOB

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from environment variables."""
        failure_policy = os.getenv(ENV_FAILURE_POLICY, POLICY_FAIL_FAST).strip().lower()
        if failure_policy not in (POLICY_FAIL_FAST, POLICY_COLLECT_ALL):
            raise ConfigurationError(f"unsupported failure policy {failure_policy!r}")

        try:
            max_workers = int(os.getenv(ENV_MAX_WORKERS, str(DEFAULT_MAX_WORKERS)))
            aws_max_attempts = int(os.getenv(ENV_AWS_MAX_ATTEMPTS, str(DEFAULT_AWS_MAX_ATTEMPTS)))
            fetch_timeout = float(
                os.getenv(ENV_CONFIG_FETCH_TIMEOUT, str(DEFAULT_CONFIG_FETCH_TIMEOUT))
            )
        except ValueError as e:
            raise ConfigurationError(f"invalid numeric setting: {e}") from e
        if max_workers < 1:
            raise ConfigurationError(f"{ENV_MAX_WORKERS} must be at least 1")

        return cls(
            config_url=os.getenv(ENV_CONFIG_URL) or None,
            config_blob=os.getenv(ENV_CONFIG) or None,
            max_workers=max_workers,
            probe_region=os.getenv(ENV_PROBE_REGION, DEFAULT_PROBE_REGION),
            failure_policy=failure_policy,
            enforce_cancellation=_env_bool(ENV_ENFORCE_CANCELLATION, False),
            exit_on_fatal=_env_bool(ENV_EXIT_ON_FATAL, True),
            aws_max_attempts=aws_max_attempts,
            config_fetch_timeout=fetch_timeout,
            pushgateway_url=os.getenv(ENV_PUSHGATEWAY_URL) or None,
            metrics_job=os.getenv(ENV_METRICS_JOB, DEFAULT_METRICS_JOB),
        )


def fetch_config_url(config_url: str, timeout: float) -> bytes:
    """Fetch the configuration document from an http(s) URL.

    A URL without a scheme is fetched over https.

    Raises:
        ConfigurationError: If the scheme is unsupported or the fetch fails
    """
    parsed = urlparse(config_url)
    if not parsed.scheme:
        parsed = urlparse(f"https://{config_url}")
    if parsed.scheme not in ("http", "https"):
        raise ConfigurationError(f"unsupported config url scheme {parsed.scheme!r}")

    url = parsed.geturl()
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"Failed to fetch configuration from {sanitize_error_message(url)}: {sanitize_exception(e)}")
        raise ConfigurationError(f"unable to fetch configuration: {sanitize_exception(e)}") from e
    return response.content


def decode_config_blob(blob: str | None) -> bytes:
    """Decode a base64 configuration value."""
    try:
        return base64.b64decode(blob or "", validate=True)
    except (binascii.Error, ValueError) as e:
        raise ConfigurationError(f"base64 decode error: {e}") from e


def load_config_data(settings: Settings) -> bytes:
    """Load the raw configuration document.

    Raises:
        ConfigurationError: If the document cannot be obtained or is empty
    """
    if settings.config_url:
        data = fetch_config_url(settings.config_url, settings.config_fetch_timeout)
    else:
        data = decode_config_blob(settings.config_blob)

    if not data:
        raise ConfigurationError("unable to get configuration")
    return data


def load_rule_table(settings: Settings) -> RuleTable:
    """Load and parse the replication rule table."""
    rules = build_rule_table(load_config_data(settings))
    logger.info("Parse config ok")
    return rules
