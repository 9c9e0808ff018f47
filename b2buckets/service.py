"""B2 native API implementation of the Bucket blueprint."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from b2buckets.base import BucketBlueprint
from b2buckets.base.auth import Authorization
from b2buckets.base.config import B2Config, validate_config
from b2buckets.base.exceptions import B2BucketsError
from b2buckets.base.logger import b2_logger
from b2buckets.base.transport import HttpxTransport, Transport
from b2buckets.domain.bucket import Bucket
from b2buckets.requests import CreateBucket, DeleteBucket, ListBuckets, UpdateBucket
from b2buckets.wire.mapping import (
    decode_bucket,
    decode_bucket_list,
    encode_create_bucket,
    encode_delete_bucket,
    encode_list_buckets,
    encode_update_bucket,
)

T = TypeVar("T")


class Buckets(BucketBlueprint):
    """Bucket management over the B2 native API.

    Every call checks the request's required capabilities against the
    authorization first, so a missing capability fails without touching
    the network.

    Attributes:
        authorization: Account, token, API URL and granted capabilities.
        transport: Sends encoded requests and returns raw response bytes.
    """

    def __init__(self, authorization: Authorization, transport: Transport | None = None) -> None:
        self.authorization = authorization
        self.transport = transport or HttpxTransport()

    @classmethod
    def from_config(cls, config: B2Config | dict) -> Buckets:
        """Build a service from a :class:`B2Config` or a raw config dict."""
        if isinstance(config, dict):
            config = validate_config(config)
        return cls(Authorization.from_config(config), HttpxTransport.from_config(config))

    def _call(
        self,
        operation: str,
        body: dict[str, Any],
        decode: Callable[[bytes], T],
        bucket: str | None = None,
    ) -> T:
        context = {
            "account_id": self.authorization.account_id,
            "operation": operation,
            "bucket": bucket,
        }
        try:
            payload = self.transport.post(
                self.authorization.api_endpoint(operation),
                self.authorization.headers(),
                body,
            )
            result = decode(payload)
        except B2BucketsError as e:
            b2_logger.error(f"{operation} failed: {e}", **context)
            raise
        b2_logger.info(f"{operation} succeeded", **context)
        return result

    def create_bucket(self, request: CreateBucket) -> Bucket:
        """Create a bucket.

        Raises:
            CapabilityError: If the token cannot write buckets, or cannot set
                file lock or encryption when the request asks for them.
            DuplicateBucketNameError: If the name is already taken.
            TooManyBucketsError: If the account is at its bucket limit.
            DataIntegrityError: If the response breaks the wire contract.
        """
        self.authorization.require(request.required_capabilities())
        body = encode_create_bucket(request, self.authorization.account_id)
        return self._call("b2_create_bucket", body, decode_bucket, request.bucket_name)

    def delete_bucket(self, request: DeleteBucket) -> Bucket:
        """Delete a bucket and return its last state.

        Raises:
            BucketNotFoundError: If no bucket has the given ID.
        """
        self.authorization.require(request.required_capabilities())
        body = encode_delete_bucket(request, self.authorization.account_id)
        return self._call("b2_delete_bucket", body, decode_bucket, request.bucket_id)

    def list_buckets(self, request: ListBuckets | None = None) -> list[Bucket]:
        request = request or ListBuckets()
        self.authorization.require(request.required_capabilities())
        body = encode_list_buckets(request, self.authorization.account_id)
        return self._call(
            "b2_list_buckets",
            body,
            decode_bucket_list,
            request.bucket_name or request.bucket_id,
        )

    def update_bucket(self, request: UpdateBucket) -> Bucket:
        """Apply an update to a bucket.

        Raises:
            CapabilityError: If the request changes retention or encryption
                without the matching write capability.
            RevisionConflictError: If ``if_revision_is`` no longer matches.
        """
        self.authorization.require(request.required_capabilities())
        body = encode_update_bucket(request, self.authorization.account_id)
        return self._call("b2_update_bucket", body, decode_bucket, request.bucket_id)

    def close(self) -> None:
        close = getattr(self.transport, "close", None)
        if close is not None:
            close()
