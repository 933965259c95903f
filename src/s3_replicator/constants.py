"""Constants for the S3 Replicator."""

# Event names (notification records carry them without the "s3:" prefix)
EVENT_PREFIX = "s3:"
EVENT_OBJECT_CREATED_PUT = "s3:ObjectCreated:Put"
EVENT_OBJECT_CREATED_POST = "s3:ObjectCreated:Post"
EVENT_OBJECT_CREATED_COPY = "s3:ObjectCreated:Copy"
EVENT_OBJECT_CREATED_MULTIPART = "s3:ObjectCreated:CompleteMultipartUpload"
EVENT_OBJECT_REMOVED_DELETE_MARKER = "s3:ObjectRemoved:DeleteMarkerCreated"
EVENT_OBJECT_TAGGING_PUT = "s3:ObjectTagging:Put"
EVENT_OBJECT_TAGGING_DELETE = "s3:ObjectTagging:Delete"

CREATED_EVENTS = frozenset(
    {
        EVENT_OBJECT_CREATED_PUT,
        EVENT_OBJECT_CREATED_POST,
        EVENT_OBJECT_CREATED_COPY,
        EVENT_OBJECT_CREATED_MULTIPART,
    }
)
REMOVED_EVENTS = frozenset({EVENT_OBJECT_REMOVED_DELETE_MARKER})
TAGGING_EVENTS = frozenset({EVENT_OBJECT_TAGGING_PUT, EVENT_OBJECT_TAGGING_DELETE})

# Environment variables
ENV_CONFIG_URL = "CONFIG_URL"
ENV_CONFIG = "CONFIG"
ENV_LOG_LEVEL = "LOG_LEVEL"
ENV_MAX_WORKERS = "MAX_WORKERS"
ENV_PROBE_REGION = "PROBE_REGION"
ENV_FAILURE_POLICY = "FAILURE_POLICY"
ENV_ENFORCE_CANCELLATION = "ENFORCE_CANCELLATION"
ENV_EXIT_ON_FATAL = "EXIT_ON_FATAL"
ENV_AWS_MAX_ATTEMPTS = "AWS_MAX_ATTEMPTS"
ENV_CONFIG_FETCH_TIMEOUT = "CONFIG_FETCH_TIMEOUT_SECONDS"
ENV_PUSHGATEWAY_URL = "PUSHGATEWAY_URL"
ENV_METRICS_JOB = "METRICS_JOB"

# Defaults
DEFAULT_PROBE_REGION = "us-east-1"
DEFAULT_MAX_WORKERS = 16
DEFAULT_AWS_MAX_ATTEMPTS = 5
DEFAULT_CONFIG_FETCH_TIMEOUT = 10.0
DEFAULT_METRICS_JOB = "s3-replicator"

# Destination spec separator: "bucket@region"
REGION_SEPARATOR = "@"

# Quarantine
QUARANTINE_TAG_VALUE = "infected"

# Failure policies
POLICY_FAIL_FAST = "fail-fast"
POLICY_COLLECT_ALL = "collect-all"

# Process exit status when a destination bucket cannot be located
EXIT_REGION_NOT_FOUND = 2

# Log actions
ACTION_COPYING = "Copying"
ACTION_DELETING = "Deleting"
ACTION_IGNORING = "Ignoring"
ACTION_QUARANTINED = "Quarantined"

CONTROLLER = "s3-replicator"
