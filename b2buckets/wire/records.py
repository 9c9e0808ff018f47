"""
Pydantic models of the B2 wire JSON.

These mirror the service's loosely-typed schema field for field: every
discriminant is a plain string and every companion field is optional. The
tagged-union rules live in :mod:`b2buckets.wire.mapping`, not here.
"""

from __future__ import annotations

from typing import Any
from pydantic import BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    """Base for wire records: camelCase aliases, unknown keys ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ── Encryption ────────────────────────────────────────────────────────
class EncryptionRecord(WireModel):
    mode: str | None = Field(default=None, description="'SSE-B2', 'SSE-C' or null")
    algorithm: str | None = Field(default=None)
    customer_key: str | None = Field(default=None, alias="customerKey")
    customer_key_md5: str | None = Field(default=None, alias="customerKeyMd5")


class EncryptionEnvelope(WireModel):
    is_client_authorized_to_read: bool = Field(alias="isClientAuthorizedToRead")
    value: EncryptionRecord | None = Field(default=None)


# ── Retention ─────────────────────────────────────────────────────────
class PeriodRecord(WireModel):
    duration: int = Field(ge=0)
    unit: str = Field(description="'days' or 'years'")


class RetentionRecord(WireModel):
    mode: str | None = Field(default=None, description="'governance', 'compliance' or null")
    period: PeriodRecord | None = Field(default=None)


class FileLockRecord(WireModel):
    is_file_lock_enabled: bool | None = Field(default=None, alias="isFileLockEnabled")
    default_retention: RetentionRecord | None = Field(default=None, alias="defaultRetention")


class FileLockEnvelope(WireModel):
    is_client_authorized_to_read: bool = Field(alias="isClientAuthorizedToRead")
    value: FileLockRecord | None = Field(default=None)


# ── Rules ─────────────────────────────────────────────────────────────
class LifecycleRuleRecord(WireModel):
    file_name_prefix: str = Field(alias="fileNamePrefix")
    days_from_uploading_to_hiding: int | None = Field(
        default=None, alias="daysFromUploadingToHiding"
    )
    days_from_hiding_to_deleting: int | None = Field(
        default=None, alias="daysFromHidingToDeleting"
    )


class CorsRuleRecord(WireModel):
    cors_rule_name: str = Field(alias="corsRuleName")
    allowed_origins: list[str] = Field(alias="allowedOrigins")
    allowed_operations: list[str] = Field(alias="allowedOperations")
    allowed_headers: list[str] | None = Field(default=None, alias="allowedHeaders")
    expose_headers: list[str] | None = Field(default=None, alias="exposeHeaders")
    max_age_seconds: int = Field(alias="maxAgeSeconds")


# ── Buckets ───────────────────────────────────────────────────────────
class BucketRecord(WireModel):
    account_id: str = Field(alias="accountId")
    bucket_id: str = Field(alias="bucketId")
    bucket_name: str = Field(alias="bucketName")
    bucket_type: str = Field(alias="bucketType")
    bucket_info: dict[str, Any] = Field(default_factory=dict, alias="bucketInfo")
    cors_rules: list[CorsRuleRecord] = Field(default_factory=list, alias="corsRules")
    lifecycle_rules: list[LifecycleRuleRecord] = Field(
        default_factory=list, alias="lifecycleRules"
    )
    file_lock_configuration: FileLockEnvelope | None = Field(
        default=None, alias="fileLockConfiguration"
    )
    default_server_side_encryption: EncryptionEnvelope | None = Field(
        default=None, alias="defaultServerSideEncryption"
    )
    revision: int
    options: list[str] | None = Field(default=None)


class BucketListRecord(WireModel):
    buckets: list[BucketRecord] = Field(default_factory=list)


# ── Errors ────────────────────────────────────────────────────────────
class ErrorRecord(WireModel):
    status: int
    code: str
    message: str = ""
