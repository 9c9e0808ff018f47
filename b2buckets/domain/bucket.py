"""Bucket snapshots returned by the service."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from b2buckets.domain.cors import CorsRule
from b2buckets.domain.encryption import EncryptionConfig
from b2buckets.domain.gated import UNKNOWN, Gated, Readable, Unreadable, _Unknown
from b2buckets.domain.lifecycle import LifecycleRule
from b2buckets.domain.retention import FileLockConfiguration, RetentionPolicy


class BucketType(str, Enum):
    PUBLIC = "allPublic"
    PRIVATE = "allPrivate"
    # Snapshot buckets can only be created from the web portal.
    SNAPSHOT = "snapshot"


@dataclass(frozen=True)
class Bucket:
    """An immutable snapshot of a bucket.

    ``revision`` increases on every change; pass it to
    ``UpdateBucketBuilder.if_revision_is`` for optimistic concurrency.
    """

    account_id: str
    bucket_id: str
    bucket_name: str
    bucket_type: BucketType
    revision: int
    bucket_info: Mapping[str, Any] = field(default_factory=dict)
    cors_rules: tuple[CorsRule, ...] = ()
    lifecycle_rules: tuple[LifecycleRule, ...] = ()
    file_lock_configuration: Gated[FileLockConfiguration] = field(default_factory=Unreadable)
    default_server_side_encryption: Gated[EncryptionConfig] = field(default_factory=Unreadable)
    options: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "bucket_info", MappingProxyType(dict(self.bucket_info)))

    @property
    def file_lock_enabled(self) -> bool | _Unknown:
        return self._read(self.file_lock_configuration, lambda c: c.is_file_lock_enabled)

    @property
    def retention_policy(self) -> RetentionPolicy | _Unknown:
        return self._read(self.file_lock_configuration, lambda c: c.default_retention)

    @property
    def default_encryption(self) -> EncryptionConfig | _Unknown:
        return self._read(self.default_server_side_encryption, lambda e: e)

    @staticmethod
    def _read(gated: Gated, accessor: Any) -> Any:
        if isinstance(gated, Readable):
            return accessor(gated.value)
        return UNKNOWN
