"""Shared fixtures for unit tests."""

from __future__ import annotations

from typing import Any, Callable
from unittest.mock import MagicMock

import pytest

from s3_replicator.builders.rules import build_rule_table

_SOURCE_ACL = {
    "Owner": {"DisplayName": "owner", "ID": "owner-id"},
    "Grants": [
        {
            "Grantee": {"ID": "owner-id", "Type": "CanonicalUser"},
            "Permission": "FULL_CONTROL",
        }
    ],
}


def _build_store(region: str) -> MagicMock:
    store = MagicMock()
    store.region = region
    store.get_object_acl.return_value = _SOURCE_ACL
    store.get_object_tags.return_value = {}
    return store


def _build_event(event_name: str, *records: tuple[str, str]) -> dict[str, Any]:
    return {
        "Records": [
            {
                "eventName": event_name,
                "s3": {"bucket": {"name": bucket}, "object": {"key": key}},
            }
            for bucket, key in records
        ]
    }


class StoreRegistry:
    """Hands out one mock store per region, like a client factory."""

    def __init__(self) -> None:
        self.stores: dict[str, MagicMock] = {}
        self.for_region = MagicMock(side_effect=self._get)

    def _get(self, region: str) -> MagicMock:
        if region not in self.stores:
            self.stores[region] = _build_store(region)
        return self.stores[region]

    def __getitem__(self, region: str) -> MagicMock:
        return self._get(region)


@pytest.fixture
def source_acl() -> dict[str, Any]:
    """Owner and grants every mock store reports for its objects."""
    return _SOURCE_ACL


@pytest.fixture
def make_store() -> Callable[[str], MagicMock]:
    """Factory for a mock object store bound to a region."""
    return _build_store


@pytest.fixture
def make_event() -> Callable[..., dict[str, Any]]:
    """Factory for a notification batch built from ``(bucket, key)`` pairs."""
    return _build_event


@pytest.fixture
def stores() -> StoreRegistry:
    """Mock client factory keyed by region."""
    return StoreRegistry()


@pytest.fixture
def photos_rules():
    """Rule table replicating ``photos`` into ``backup`` in eu-west-1 with a private ACL."""
    return build_rule_table(
        '{"photos": {"region": "us-east-1", "destinations": ["backup@eu-west-1"], "acl": "private"}}'
    )


@pytest.fixture
def photos_rules_without_acl():
    """Same rule table without an explicit ACL."""
    return build_rule_table(
        '{"photos": {"region": "us-east-1", "destinations": ["backup@eu-west-1"]}}'
    )
