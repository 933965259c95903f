"""Builders for replication configuration objects."""

from .rules import build_rule_table, create_rule_from_spec

__all__ = ["build_rule_table", "create_rule_from_spec"]
