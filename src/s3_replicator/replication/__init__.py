"""Replication decision and execution engine."""

from .classifier import classify_batch, classify_event_name, decode_record
from .executor import FanOutExecutor
from .orchestrator import ReplicationOrchestrator
from .quarantine import QuarantineGate
from .regions import RegionResolver
from .remover import ObjectRemover
from .replicator import ObjectReplicator

__all__ = [
    "classify_batch",
    "classify_event_name",
    "decode_record",
    "FanOutExecutor",
    "ReplicationOrchestrator",
    "QuarantineGate",
    "RegionResolver",
    "ObjectRemover",
    "ObjectReplicator",
]
