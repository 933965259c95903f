"""Builder for the replication rule table."""

from __future__ import annotations

import json
from typing import Any

from ..exceptions import ConfigurationError
from ..models import DestinationSpec, ReplicationRule, RuleTable


def create_rule_from_spec(source_bucket: str, spec: Any) -> ReplicationRule:
    """Create a replication rule from one configuration entry.

    Args:
        source_bucket: Source bucket the entry is keyed by
        spec: Entry of the form ``{"region": ..., "destinations": [...], "acl": ...}``

    Returns:
        Immutable replication rule

    Raises:
        ConfigurationError: If the entry is malformed or replicates into itself
    """
    if not isinstance(spec, dict):
        raise ConfigurationError(f"rule for bucket {source_bucket!r} must be an object")

    region = spec.get("region")
    if not isinstance(region, str) or not region:
        raise ConfigurationError(f"rule for bucket {source_bucket!r} has no region")

    raw_destinations = spec.get("destinations") or []
    if not isinstance(raw_destinations, list) or not all(
        isinstance(d, str) and d for d in raw_destinations
    ):
        raise ConfigurationError(
            f"destinations for bucket {source_bucket!r} must be a list of bucket names"
        )

    destinations = tuple(DestinationSpec.parse(d) for d in raw_destinations)
    for destination in destinations:
        if not destination.bucket:
            raise ConfigurationError(f"empty destination bucket in rule for {source_bucket!r}")
        if destination.bucket == source_bucket:
            raise ConfigurationError(f"bucket {source_bucket!r} cannot replicate into itself")

    # An empty ACL means "propagate the source object's ACL"
    acl = spec.get("acl") or None
    if acl is not None and not isinstance(acl, str):
        raise ConfigurationError(f"acl for bucket {source_bucket!r} must be a string")

    return ReplicationRule(
        source_bucket=source_bucket,
        region=region,
        destinations=destinations,
        acl=acl,
    )


def build_rule_table(data: bytes | str) -> RuleTable:
    """Build the rule table from a JSON configuration document.

    Args:
        data: JSON mapping of source bucket to rule entry

    Returns:
        Read-only rule table

    Raises:
        ConfigurationError: If the document is malformed or empty
    """
    try:
        document = json.loads(data)
    except ValueError as e:
        raise ConfigurationError(f"error unmarshal {e}") from e

    if not isinstance(document, dict):
        raise ConfigurationError("configuration must be a JSON object")
    if not document:
        raise ConfigurationError("unable to get configuration")

    return RuleTable(
        {bucket: create_rule_from_spec(bucket, spec) for bucket, spec in document.items()}
    )
