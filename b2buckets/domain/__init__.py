"""Domain value types and validators.

Everything here is pure: no I/O, no shared state. Constructors validate
their own invariants and raise :mod:`b2buckets.base.exceptions` errors.
"""

from .bucket import Bucket, BucketType
from .cors import CorsOperation, CorsRule, CorsRuleBuilder
from .encryption import (
    CustomerManagedEncryption,
    EncryptionAlgorithm,
    EncryptionConfig,
    EncryptionMode,
    NoEncryption,
    ServiceManagedEncryption,
)
from .gated import UNKNOWN, Readable, Unreadable
from .lifecycle import LifecycleRule, LifecycleRuleBuilder, detect_conflicts
from .origins import Origin, classify_origin, validate_origins
from .retention import (
    FileLockConfiguration,
    PeriodUnit,
    RetentionMode,
    RetentionPeriod,
    RetentionPolicy,
)


__all__ = [
    "Bucket",
    "BucketType",
    "CorsOperation",
    "CorsRule",
    "CorsRuleBuilder",
    "CustomerManagedEncryption",
    "EncryptionAlgorithm",
    "EncryptionConfig",
    "EncryptionMode",
    "NoEncryption",
    "ServiceManagedEncryption",
    "UNKNOWN",
    "Readable",
    "Unreadable",
    "LifecycleRule",
    "LifecycleRuleBuilder",
    "detect_conflicts",
    "Origin",
    "classify_origin",
    "validate_origins",
    "FileLockConfiguration",
    "PeriodUnit",
    "RetentionMode",
    "RetentionPeriod",
    "RetentionPolicy",
]
