"""b2buckets: validated bucket management for the Backblaze B2 native API.

Build requests with the fail-fast builders, then send them through
:class:`Buckets`::

    from b2buckets import Buckets, CreateBucket, BucketType

    buckets = Buckets.from_config({"capabilities": ["writeBuckets"]})
    request = CreateBucket.builder().name("my-photos").bucket_type(BucketType.PRIVATE).build()
    bucket = buckets.create_bucket(request)
"""

from .base import Authorization, BucketBlueprint, Capability, B2Config, validate_config
from .domain import (
    UNKNOWN,
    Bucket,
    BucketType,
    CorsOperation,
    CorsRule,
    CustomerManagedEncryption,
    LifecycleRule,
    NoEncryption,
    Origin,
    RetentionMode,
    RetentionPeriod,
    RetentionPolicy,
    ServiceManagedEncryption,
)
from .requests import CreateBucket, DeleteBucket, ListBuckets, UpdateBucket
from .service import Buckets

__all__ = [
    "Authorization",
    "BucketBlueprint",
    "Capability",
    "B2Config",
    "validate_config",
    "UNKNOWN",
    "Bucket",
    "BucketType",
    "CorsOperation",
    "CorsRule",
    "CustomerManagedEncryption",
    "LifecycleRule",
    "NoEncryption",
    "Origin",
    "RetentionMode",
    "RetentionPeriod",
    "RetentionPolicy",
    "ServiceManagedEncryption",
    "CreateBucket",
    "DeleteBucket",
    "ListBuckets",
    "UpdateBucket",
    "Buckets",
]
