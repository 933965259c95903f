"""Tests for destination region resolution."""

from __future__ import annotations

import pytest
from botocore.exceptions import ClientError

from s3_replicator.exceptions import BucketNotFoundError, FatalConfigurationError, SessionError
from s3_replicator.models import DestinationSpec
from s3_replicator.replication.regions import RegionResolver


class TestRegionResolver:
    """Test cases for RegionResolver."""

    def test_explicit_region_skips_lookup(self, stores) -> None:
        """Test that an explicit region is authoritative."""
        resolver = RegionResolver(stores.for_region)

        assert resolver.resolve(DestinationSpec.parse("backup@eu-west-1"), "us-east-1") == (
            "eu-west-1",
            "backup",
        )
        stores.for_region.assert_not_called()

    def test_lookup_once_per_resolution(self, stores) -> None:
        """Test that an unsuffixed destination is looked up exactly once."""
        stores["us-east-1"].get_bucket_region.return_value = "ap-southeast-2"
        resolver = RegionResolver(stores.for_region)

        assert resolver.resolve(DestinationSpec.parse("backup"), "us-east-1") == (
            "ap-southeast-2",
            "backup",
        )
        stores["us-east-1"].get_bucket_region.assert_called_once_with("backup")

    def test_lookup_uses_probe_region(self, stores) -> None:
        """Test that lookups go through the probe region."""
        stores["eu-central-1"].get_bucket_region.return_value = "eu-west-1"
        resolver = RegionResolver(stores.for_region, probe_region="eu-central-1")

        resolver.resolve(DestinationSpec.parse("backup"), "us-east-1")

        stores.for_region.assert_called_with("eu-central-1")

    def test_not_found_is_fatal(self, stores) -> None:
        """Test that a missing bucket raises a fatal configuration error."""
        stores["us-east-1"].get_bucket_region.side_effect = BucketNotFoundError("missing")
        resolver = RegionResolver(stores.for_region)

        with pytest.raises(FatalConfigurationError) as exc_info:
            resolver.resolve(DestinationSpec.parse("missing"), "us-east-1")

        assert exc_info.value.bucket == "missing"

    def test_other_lookup_error(self, stores) -> None:
        """Test that other lookup failures halt the batch as session errors."""
        stores["us-east-1"].get_bucket_region.side_effect = ClientError(
            {"Error": {"Code": "InternalError", "Message": "boom"}}, "HeadBucket"
        )
        resolver = RegionResolver(stores.for_region)

        with pytest.raises(SessionError):
            resolver.resolve(DestinationSpec.parse("backup"), "us-east-1")
