"""Event-driven S3 object replication."""

__version__ = "0.3.0"
