"""Request objects for the bucket API and the builders that assemble them.

Builders delegate all validation to the domain types; on ``build()`` they
only check that mandatory fields were set. When a builder is given an
:class:`~b2buckets.base.auth.Authorization`, setters for capability-gated
fields (file lock, retention, encryption) fail immediately if the token
lacks the capability.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from b2buckets.base.auth import Authorization, Capability
from b2buckets.base.exceptions import FieldValidationError, MissingFieldError
from b2buckets.domain.bucket import BucketType
from b2buckets.domain.cors import CorsRule, validate_cors_rules
from b2buckets.domain.encryption import (
    CustomerManagedEncryption,
    EncryptionConfig,
    NoEncryption,
    ServiceManagedEncryption,
)
from b2buckets.domain.lifecycle import LifecycleRule, detect_conflicts
from b2buckets.domain.names import validate_bucket_name
from b2buckets.domain.retention import RetentionPolicy

CACHE_CONTROL_KEY = "Cache-Control"
ALL_BUCKET_TYPES = "all"


# --- Requests ---


@dataclass(frozen=True)
class CreateBucket:
    bucket_name: str
    bucket_type: BucketType
    bucket_info: Mapping[str, Any] | None = None
    cors_rules: tuple[CorsRule, ...] | None = None
    file_lock_enabled: bool = False
    lifecycle_rules: tuple[LifecycleRule, ...] | None = None
    default_server_side_encryption: EncryptionConfig | None = None

    @staticmethod
    def builder(authorization: Authorization | None = None) -> CreateBucketBuilder:
        return CreateBucketBuilder(authorization)

    def required_capabilities(self) -> list[Capability]:
        caps = [Capability.WRITE_BUCKETS]
        if self.file_lock_enabled:
            caps.append(Capability.WRITE_BUCKET_RETENTIONS)
        if self.default_server_side_encryption is not None:
            caps.append(Capability.WRITE_BUCKET_ENCRYPTION)
        return caps


@dataclass(frozen=True)
class UpdateBucket:
    """Changes to apply to a bucket; ``None`` fields are left untouched."""

    bucket_id: str
    bucket_type: BucketType | None = None
    bucket_info: Mapping[str, Any] | None = None
    cors_rules: tuple[CorsRule, ...] | None = None
    default_retention: RetentionPolicy | None = None
    default_server_side_encryption: EncryptionConfig | None = None
    lifecycle_rules: tuple[LifecycleRule, ...] | None = None
    if_revision_is: int | None = None

    @staticmethod
    def builder(authorization: Authorization | None = None) -> UpdateBucketBuilder:
        return UpdateBucketBuilder(authorization)

    def required_capabilities(self) -> list[Capability]:
        caps = [Capability.WRITE_BUCKETS]
        if self.default_retention is not None:
            caps.append(Capability.WRITE_BUCKET_RETENTIONS)
        if self.default_server_side_encryption is not None:
            caps.append(Capability.WRITE_BUCKET_ENCRYPTION)
        return caps


@dataclass(frozen=True)
class ListBuckets:
    """Filter for listing buckets: one bucket by ID or name, and/or by type."""

    bucket_id: str | None = None
    bucket_name: str | None = None
    bucket_types: tuple[str, ...] | None = None

    @staticmethod
    def builder() -> ListBucketsBuilder:
        return ListBucketsBuilder()

    def required_capabilities(self) -> list[Capability]:
        return [Capability.LIST_BUCKETS]


@dataclass(frozen=True)
class DeleteBucket:
    bucket_id: str

    def required_capabilities(self) -> list[Capability]:
        return [Capability.DELETE_BUCKETS]


# --- Builders ---


def _settable_type(bucket_type: BucketType | str) -> BucketType:
    try:
        typ = BucketType(bucket_type)
    except ValueError:
        raise FieldValidationError("bucket_type", "unknown bucket type", bucket_type) from None
    if typ is BucketType.SNAPSHOT:
        raise FieldValidationError("bucket_type", "must be allPublic or allPrivate", typ.value)
    return typ


class _BucketSettingsBuilder:
    """Setters shared by the create and update builders."""

    def __init__(self, authorization: Authorization | None = None) -> None:
        self._authorization = authorization
        self._bucket_type: BucketType | None = None
        self._bucket_info: dict[str, Any] | None = None
        self._cache_control: str | None = None
        self._cors_rules: tuple[CorsRule, ...] | None = None
        self._lifecycle_rules: tuple[LifecycleRule, ...] | None = None
        self._encryption: EncryptionConfig | None = None

    def _require(self, capability: Capability) -> None:
        if self._authorization is not None:
            self._authorization.require([capability])

    def bucket_type(self, bucket_type: BucketType | str):
        """Public or private; snapshot buckets cannot be set by clients."""
        self._bucket_type = _settable_type(bucket_type)
        return self

    def bucket_info(self, info: Mapping[str, Any]):
        """Arbitrary metadata stored with the bucket.

        A value set with :meth:`cache_control` overrides a ``Cache-Control``
        key given here.
        """
        if not isinstance(info, Mapping):
            raise FieldValidationError("bucket_info", "must be a JSON object", info)
        self._bucket_info = dict(info)
        return self

    def cache_control(self, value: str):
        """Default ``Cache-Control`` header for files downloaded from the bucket."""
        if not isinstance(value, str) or not value:
            raise FieldValidationError("cache_control", "must be a non-empty string", value)
        self._cache_control = value
        return self

    def cors_rules(self, rules: Iterable[CorsRule]):
        self._cors_rules = tuple(validate_cors_rules(rules))
        return self

    def lifecycle_rules(self, rules: Iterable[LifecycleRule]):
        """Replace the lifecycle rules; overlapping prefixes are rejected as a set."""
        self._lifecycle_rules = tuple(detect_conflicts(rules))
        return self

    def encryption_settings(self, settings: EncryptionConfig):
        self._require(Capability.WRITE_BUCKET_ENCRYPTION)
        if not isinstance(
            settings, (ServiceManagedEncryption, CustomerManagedEncryption, NoEncryption)
        ):
            raise FieldValidationError(
                "default_server_side_encryption", "must be an encryption config", settings
            )
        self._encryption = settings
        return self

    def _merged_info(self) -> dict[str, Any] | None:
        if self._cache_control is None:
            return self._bucket_info
        info = dict(self._bucket_info or {})
        info[CACHE_CONTROL_KEY] = self._cache_control
        return info


class CreateBucketBuilder(_BucketSettingsBuilder):
    """Builder for a :class:`CreateBucket` request.

    See https://www.backblaze.com/b2/docs/b2_create_bucket.html.
    """

    def __init__(self, authorization: Authorization | None = None) -> None:
        super().__init__(authorization)
        self._bucket_name: str | None = None
        self._file_lock_enabled = False

    def name(self, name: str) -> CreateBucketBuilder:
        """Globally unique name: 6-50 letters, digits or '-', not starting with 'b2-'."""
        self._bucket_name = validate_bucket_name(name)
        return self

    def with_file_lock(self) -> CreateBucketBuilder:
        self._require(Capability.WRITE_BUCKET_RETENTIONS)
        self._file_lock_enabled = True
        return self

    def without_file_lock(self) -> CreateBucketBuilder:
        self._file_lock_enabled = False
        return self

    def build(self) -> CreateBucket:
        if self._bucket_name is None:
            raise MissingFieldError("bucket_name")
        if self._bucket_type is None:
            raise MissingFieldError("bucket_type")
        return CreateBucket(
            bucket_name=self._bucket_name,
            bucket_type=self._bucket_type,
            bucket_info=self._merged_info(),
            cors_rules=self._cors_rules or None,
            file_lock_enabled=self._file_lock_enabled,
            lifecycle_rules=self._lifecycle_rules,
            default_server_side_encryption=self._encryption,
        )


class UpdateBucketBuilder(_BucketSettingsBuilder):
    """Builder for an :class:`UpdateBucket` request.

    An empty CORS or lifecycle list removes all existing rules.
    """

    def __init__(self, authorization: Authorization | None = None) -> None:
        super().__init__(authorization)
        self._bucket_id: str | None = None
        self._retention: RetentionPolicy | None = None
        self._if_revision_is: int | None = None

    def bucket_id(self, bucket_id: str) -> UpdateBucketBuilder:
        if not isinstance(bucket_id, str) or not bucket_id:
            raise FieldValidationError("bucket_id", "must be a non-empty string", bucket_id)
        self._bucket_id = bucket_id
        return self

    def retention_policy(self, policy: RetentionPolicy) -> UpdateBucketBuilder:
        """Replace the default retention; ``RetentionPolicy()`` clears it."""
        self._require(Capability.WRITE_BUCKET_RETENTIONS)
        if not isinstance(policy, RetentionPolicy):
            raise FieldValidationError("default_retention", "must be a RetentionPolicy", policy)
        self._retention = policy
        return self

    def if_revision_is(self, revision: int) -> UpdateBucketBuilder:
        """Only apply the update if the bucket is still at ``revision``."""
        if isinstance(revision, bool) or not isinstance(revision, int) or revision < 0:
            raise FieldValidationError("if_revision_is", "must be a non-negative integer", revision)
        self._if_revision_is = revision
        return self

    def build(self) -> UpdateBucket:
        if self._bucket_id is None:
            raise MissingFieldError("bucket_id")
        return UpdateBucket(
            bucket_id=self._bucket_id,
            bucket_type=self._bucket_type,
            bucket_info=self._merged_info(),
            cors_rules=self._cors_rules,
            default_retention=self._retention,
            default_server_side_encryption=self._encryption,
            lifecycle_rules=self._lifecycle_rules,
            if_revision_is=self._if_revision_is,
        )


class ListBucketsBuilder:
    """Builder for a :class:`ListBuckets` filter.

    ``bucket_id`` and ``bucket_name`` are mutually exclusive; the last one
    set wins. Without a type filter the service lists public and private
    buckets.
    """

    def __init__(self) -> None:
        self._bucket_id: str | None = None
        self._bucket_name: str | None = None
        self._bucket_types: tuple[str, ...] | None = None

    def bucket_id(self, bucket_id: str) -> ListBucketsBuilder:
        self._bucket_id, self._bucket_name = bucket_id, None
        return self

    def bucket_name(self, name: str) -> ListBucketsBuilder:
        self._bucket_id, self._bucket_name = None, validate_bucket_name(name)
        return self

    def bucket_types(self, types: Iterable[BucketType | str]) -> ListBucketsBuilder:
        values = []
        for typ in types:
            try:
                values.append(BucketType(typ).value)
            except ValueError:
                raise FieldValidationError("bucket_types", "unknown bucket type", typ) from None
        self._bucket_types = tuple(values)
        return self

    def with_all_bucket_types(self) -> ListBucketsBuilder:
        self._bucket_types = (ALL_BUCKET_TYPES,)
        return self

    def build(self) -> ListBuckets:
        return ListBuckets(self._bucket_id, self._bucket_name, self._bucket_types)
