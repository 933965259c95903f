"""AWS S3 client implementation."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, WaiterError

from ... import metrics
from ...constants import DEFAULT_AWS_MAX_ATTEMPTS
from ...exceptions import BucketNotFoundError, SessionError
from ...utils.errors import is_not_found, response_headers
from ..s3.base import ObjectStore

logger = logging.getLogger(__name__)

BUCKET_REGION_HEADER = "x-amz-bucket-region"


class AWSProvider:
    """AWS S3 provider bound to one region."""

    def __init__(
        self,
        region: str,
        max_attempts: int = DEFAULT_AWS_MAX_ATTEMPTS,
        endpoint: str | None = None,
    ) -> None:
        """Initialize AWS S3 provider.

        Each provider owns its own boto3 session, so providers can be used
        from separate worker threads.

        Args:
            region: AWS region the client talks to
            max_attempts: Retry budget for the SDK's standard retry mode
            endpoint: Optional S3 endpoint URL
        """
        self.region = region
        self.endpoint = endpoint

        config = Config(
            signature_version="s3v4",
            retries={"max_attempts": max_attempts, "mode": "standard"},
        )

        session = boto3.session.Session()
        self.client = session.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint,
            config=config,
        )

    def _call(self, operation: str, func: Callable[..., Any], **kwargs: Any) -> Any:
        start_time = time.time()
        try:
            result = func(**kwargs)
            metrics.api_call_total.labels(operation=operation, result="success").inc()
            return result
        except (ClientError, WaiterError):
            metrics.api_call_total.labels(operation=operation, result="error").inc()
            raise
        finally:
            metrics.api_call_duration_seconds.labels(operation=operation).observe(
                time.time() - start_time
            )

    def copy_object(
        self, source_bucket: str, destination_bucket: str, key: str, acl: str | None = None
    ) -> None:
        """Copy an object into another bucket.

        The copy source is passed in structured form so the SDK escapes the
        ``bucket/key`` reference.
        """
        params: dict[str, Any] = {
            "Bucket": destination_bucket,
            "Key": key,
            "CopySource": {"Bucket": source_bucket, "Key": key},
        }
        if acl:
            params["ACL"] = acl
        try:
            self._call("copy_object", self.client.copy_object, **params)
        except ClientError as e:
            logger.error(f"Failed to copy {key} from {source_bucket} to {destination_bucket}: {e}")
            raise

    def wait_until_exists(self, bucket: str, key: str) -> None:
        """Wait for an object to exist."""
        try:
            waiter = self.client.get_waiter("object_exists")
            self._call("wait_object_exists", waiter.wait, Bucket=bucket, Key=key)
        except WaiterError as e:
            logger.error(f"Object {key} never appeared in bucket {bucket}: {e}")
            raise

    def delete_object(self, bucket: str, key: str) -> None:
        """Delete an object."""
        try:
            self._call("delete_object", self.client.delete_object, Bucket=bucket, Key=key)
        except ClientError as e:
            logger.error(f"Failed to delete {key} in bucket {bucket}: {e}")
            raise

    def wait_until_not_exists(self, bucket: str, key: str) -> None:
        """Wait for an object to disappear."""
        try:
            waiter = self.client.get_waiter("object_not_exists")
            self._call("wait_object_not_exists", waiter.wait, Bucket=bucket, Key=key)
        except WaiterError as e:
            logger.error(f"Object {key} still present in bucket {bucket}: {e}")
            raise

    def get_object_acl(self, bucket: str, key: str) -> dict[str, Any]:
        """Get the owner and grants of an object."""
        try:
            response = self._call("get_object_acl", self.client.get_object_acl, Bucket=bucket, Key=key)
        except ClientError as e:
            logger.error(f"Failed to get ACL of {key} in bucket {bucket}: {e}")
            raise
        return {"Owner": response.get("Owner", {}), "Grants": response.get("Grants", [])}

    def put_object_acl(self, bucket: str, key: str, policy: dict[str, Any]) -> None:
        """Set the owner and grants of an object."""
        try:
            self._call(
                "put_object_acl",
                self.client.put_object_acl,
                Bucket=bucket,
                Key=key,
                AccessControlPolicy={"Owner": policy["Owner"], "Grants": policy["Grants"]},
            )
        except ClientError as e:
            logger.error(f"Failed to put ACL of {key} in bucket {bucket}: {e}")
            raise

    def get_object_tags(self, bucket: str, key: str) -> dict[str, str]:
        """Get the tag set of an object."""
        try:
            response = self._call(
                "get_object_tagging", self.client.get_object_tagging, Bucket=bucket, Key=key
            )
        except ClientError as e:
            logger.error(f"Failed to get tags of {key} in bucket {bucket}: {e}")
            raise
        return {tag["Key"]: tag["Value"] for tag in response.get("TagSet", [])}

    def get_bucket_region(self, bucket: str) -> str:
        """Look up a bucket's region with a HEAD request.

        Redirects and access denials still carry the bucket region header,
        so only a missing bucket is an error.

        Raises:
            BucketNotFoundError: If the bucket does not exist
            SessionError: If the response carries no region
            ClientError: If the lookup fails for another reason
        """
        try:
            response = self._call("head_bucket", self.client.head_bucket, Bucket=bucket)
            headers = response.get("ResponseMetadata", {}).get("HTTPHeaders", {})
            region = response.get("BucketRegion") or headers.get(BUCKET_REGION_HEADER)
        except ClientError as e:
            if is_not_found(e):
                raise BucketNotFoundError(bucket) from e
            region = response_headers(e).get(BUCKET_REGION_HEADER)
            if not region:
                logger.error(f"Failed to get region of bucket {bucket}: {e}")
                raise
        if not region:
            raise SessionError(f"unable to determine region of bucket {bucket}")
        return region


class ClientFactory:
    """Creates one provider per destination region and task."""

    def __init__(self, max_attempts: int = DEFAULT_AWS_MAX_ATTEMPTS, endpoint: str | None = None) -> None:
        self.max_attempts = max_attempts
        self.endpoint = endpoint

    def for_region(self, region: str) -> ObjectStore:
        """Create a provider for a region.

        Raises:
            SessionError: If the client cannot be created
        """
        try:
            return AWSProvider(region=region, max_attempts=self.max_attempts, endpoint=self.endpoint)
        except BotoCoreError as e:
            raise SessionError(f"unable to establish aws session for region {region}: {e}") from e
