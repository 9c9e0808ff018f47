"""Conversion between domain types and the B2 wire JSON.

Encoders are total: every valid domain value has exactly one wire form.
Tagged unions are written with their discriminant plus *all* companion
fields, unused ones as explicit ``null``, since the service needs explicit
nulls to clear a previous setting on update.

Decoders are the only fallible boundary. A payload whose discriminant does
not match its companion fields, or that otherwise breaks the documented
schema, raises :class:`DataIntegrityError`; decoders never fall back to a
default such as "no encryption".
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Mapping, TypeVar

import pydantic

from b2buckets.base.exceptions import (
    BadRequestError,
    BucketNotFoundError,
    DataIntegrityError,
    DuplicateBucketNameError,
    RevisionConflictError,
    ServiceError,
    TooManyBucketsError,
    UnauthorizedError,
    ValidationError,
)
from b2buckets.domain.bucket import Bucket, BucketType
from b2buckets.domain.cors import CorsRule
from b2buckets.domain.encryption import (
    CustomerManagedEncryption,
    EncryptionConfig,
    EncryptionMode,
    NoEncryption,
    ServiceManagedEncryption,
)
from b2buckets.domain.gated import Gated, Readable, Unreadable
from b2buckets.domain.lifecycle import LifecycleRule
from b2buckets.domain.retention import (
    FileLockConfiguration,
    RetentionPeriod,
    RetentionPolicy,
)
from b2buckets.requests import CreateBucket, DeleteBucket, ListBuckets, UpdateBucket
from b2buckets.wire.records import (
    BucketListRecord,
    BucketRecord,
    CorsRuleRecord,
    EncryptionEnvelope,
    EncryptionRecord,
    ErrorRecord,
    FileLockEnvelope,
    LifecycleRuleRecord,
    PeriodRecord,
    RetentionRecord,
)

M = TypeVar("M", bound=pydantic.BaseModel)

_ERROR_MAP: dict[str, type[ServiceError]] = {
    "bad_request": BadRequestError,
    "bad_bucket_id": BucketNotFoundError,
    "duplicate_bucket_name": DuplicateBucketNameError,
    "too_many_buckets": TooManyBucketsError,
    "conflict": RevisionConflictError,
    "unauthorized": UnauthorizedError,
    "bad_auth_token": UnauthorizedError,
    "expired_auth_token": UnauthorizedError,
}


def _record(model: type[M], payload: Any, what: str) -> M:
    """Parse ``payload`` (bytes, str or a mapping) into a wire record."""
    try:
        if isinstance(payload, (bytes, bytearray, str)):
            return model.model_validate_json(payload)
        return model.model_validate(payload)
    except pydantic.ValidationError as e:
        raise DataIntegrityError(f"Malformed {what}: {e}") from e


@contextmanager
def _contract(what: str) -> Iterator[None]:
    """Re-raise domain validation failures on decoded data as integrity errors."""
    try:
        yield
    except ValidationError as e:
        raise DataIntegrityError(f"Service returned an invalid {what}: {e}") from e


# ── Encryption ────────────────────────────────────────────────────────
def encode_encryption(config: EncryptionConfig) -> dict[str, Any]:
    if isinstance(config, ServiceManagedEncryption):
        record = EncryptionRecord(mode=config.mode.value, algorithm=config.algorithm.value)
    elif isinstance(config, CustomerManagedEncryption):
        record = EncryptionRecord(
            mode=config.mode.value,
            algorithm=config.algorithm.value,
            customer_key=config.customer_key,
            customer_key_md5=config.customer_key_md5,
        )
    elif isinstance(config, NoEncryption):
        record = EncryptionRecord()
    else:
        raise TypeError(f"Not an encryption config: {config!r}")
    return record.model_dump(by_alias=True)


def _encryption_from_record(record: EncryptionRecord) -> EncryptionConfig:
    companions = {
        "algorithm": record.algorithm,
        "customerKey": record.customer_key,
        "customerKeyMd5": record.customer_key_md5,
    }
    if record.mode is None:
        required: tuple[str, ...] = ()
    elif record.mode == EncryptionMode.SERVICE_MANAGED.value:
        required = ("algorithm",)
    elif record.mode == EncryptionMode.CUSTOMER_MANAGED.value:
        required = ("algorithm", "customerKey", "customerKeyMd5")
    else:
        raise DataIntegrityError(f"Unknown encryption mode {record.mode!r}")

    missing = [name for name in required if companions[name] is None]
    unexpected = [
        name for name, value in companions.items() if name not in required and value is not None
    ]
    if missing or unexpected:
        raise DataIntegrityError(
            f"Encryption mode {record.mode!r} does not match its fields "
            f"(missing: {missing or 'none'}, unexpected: {unexpected or 'none'})"
        )

    with _contract("encryption config"):
        if record.mode is None:
            return NoEncryption()
        if record.mode == EncryptionMode.SERVICE_MANAGED.value:
            return ServiceManagedEncryption(record.algorithm)
        return CustomerManagedEncryption(
            algorithm=record.algorithm,
            customer_key=record.customer_key,
            customer_key_md5=record.customer_key_md5,
        )


def decode_encryption(payload: Mapping[str, Any] | bytes | str) -> EncryptionConfig:
    return _encryption_from_record(_record(EncryptionRecord, payload, "encryption config"))


# ── Retention ─────────────────────────────────────────────────────────
def encode_retention(policy: RetentionPolicy) -> dict[str, Any]:
    if policy.mode is None:
        record = RetentionRecord()
    else:
        record = RetentionRecord(
            mode=policy.mode.value,
            period=PeriodRecord(duration=policy.period.duration, unit=policy.period.unit.value),
        )
    return record.model_dump(by_alias=True)


def _retention_from_record(record: RetentionRecord) -> RetentionPolicy:
    if (record.mode is None) != (record.period is None):
        raise DataIntegrityError(
            "Retention mode and period must both be present or both be null "
            f"(mode={record.mode!r}, period={record.period!r})"
        )
    if record.mode is None:
        return RetentionPolicy()
    with _contract("retention policy"):
        return RetentionPolicy(
            mode=record.mode,
            period=RetentionPeriod(record.period.duration, record.period.unit),
        )


def decode_retention(payload: Mapping[str, Any] | bytes | str) -> RetentionPolicy:
    return _retention_from_record(_record(RetentionRecord, payload, "retention policy"))


# ── Permission-gated fields ───────────────────────────────────────────
def _encryption_envelope(envelope: EncryptionEnvelope | None) -> Gated[EncryptionConfig]:
    if envelope is None or not envelope.is_client_authorized_to_read:
        return Unreadable()
    if envelope.value is None:
        raise DataIntegrityError("Readable encryption settings carry no value")
    return Readable(_encryption_from_record(envelope.value))


def _file_lock_envelope(envelope: FileLockEnvelope | None) -> Gated[FileLockConfiguration]:
    if envelope is None or not envelope.is_client_authorized_to_read:
        return Unreadable()
    value = envelope.value
    if value is None or value.is_file_lock_enabled is None or value.default_retention is None:
        raise DataIntegrityError("Readable file lock configuration is incomplete")
    return Readable(
        FileLockConfiguration(
            is_file_lock_enabled=value.is_file_lock_enabled,
            default_retention=_retention_from_record(value.default_retention),
        )
    )


def decode_encryption_envelope(payload: Mapping[str, Any] | bytes | str) -> Gated[EncryptionConfig]:
    return _encryption_envelope(_record(EncryptionEnvelope, payload, "encryption envelope"))


def decode_file_lock_envelope(
    payload: Mapping[str, Any] | bytes | str,
) -> Gated[FileLockConfiguration]:
    return _file_lock_envelope(_record(FileLockEnvelope, payload, "file lock envelope"))


# ── Rules ─────────────────────────────────────────────────────────────
def encode_lifecycle_rule(rule: LifecycleRule) -> dict[str, Any]:
    return LifecycleRuleRecord(
        file_name_prefix=rule.prefix,
        days_from_uploading_to_hiding=rule.hide_after_days,
        days_from_hiding_to_deleting=rule.delete_after_days,
    ).model_dump(by_alias=True)


def _lifecycle_from_record(record: LifecycleRuleRecord) -> LifecycleRule:
    with _contract("lifecycle rule"):
        return LifecycleRule(
            prefix=record.file_name_prefix,
            hide_after_days=record.days_from_uploading_to_hiding,
            delete_after_days=record.days_from_hiding_to_deleting,
        )


def decode_lifecycle_rule(payload: Mapping[str, Any] | bytes | str) -> LifecycleRule:
    return _lifecycle_from_record(_record(LifecycleRuleRecord, payload, "lifecycle rule"))


def encode_cors_rule(rule: CorsRule) -> dict[str, Any]:
    record = CorsRuleRecord(
        cors_rule_name=rule.name,
        allowed_origins=[str(o) for o in rule.allowed_origins],
        allowed_operations=[op.value for op in rule.allowed_operations],
        allowed_headers=list(rule.allowed_headers) if rule.allowed_headers else None,
        expose_headers=list(rule.exposed_headers) if rule.exposed_headers else None,
        max_age_seconds=rule.max_age_seconds,
    )
    return record.model_dump(by_alias=True, exclude_none=True)


def _cors_from_record(record: CorsRuleRecord) -> CorsRule:
    with _contract("CORS rule"):
        return CorsRule(
            name=record.cors_rule_name,
            allowed_origins=tuple(record.allowed_origins),
            allowed_operations=tuple(record.allowed_operations),
            max_age_seconds=record.max_age_seconds,
            allowed_headers=tuple(record.allowed_headers) if record.allowed_headers else None,
            exposed_headers=tuple(record.expose_headers) if record.expose_headers else None,
        )


def decode_cors_rule(payload: Mapping[str, Any] | bytes | str) -> CorsRule:
    return _cors_from_record(_record(CorsRuleRecord, payload, "CORS rule"))


# ── Buckets ───────────────────────────────────────────────────────────
def _bucket_from_record(record: BucketRecord) -> Bucket:
    try:
        bucket_type = BucketType(record.bucket_type)
    except ValueError:
        raise DataIntegrityError(f"Unknown bucket type {record.bucket_type!r}") from None
    return Bucket(
        account_id=record.account_id,
        bucket_id=record.bucket_id,
        bucket_name=record.bucket_name,
        bucket_type=bucket_type,
        revision=record.revision,
        bucket_info=record.bucket_info,
        cors_rules=tuple(_cors_from_record(r) for r in record.cors_rules),
        lifecycle_rules=tuple(_lifecycle_from_record(r) for r in record.lifecycle_rules),
        file_lock_configuration=_file_lock_envelope(record.file_lock_configuration),
        default_server_side_encryption=_encryption_envelope(record.default_server_side_encryption),
        options=tuple(record.options) if record.options is not None else None,
    )


def decode_bucket(payload: Mapping[str, Any] | bytes | str) -> Bucket:
    return _bucket_from_record(_record(BucketRecord, payload, "bucket"))


def decode_bucket_list(payload: Mapping[str, Any] | bytes | str) -> list[Bucket]:
    record = _record(BucketListRecord, payload, "bucket list")
    return [_bucket_from_record(b) for b in record.buckets]


# ── Requests ──────────────────────────────────────────────────────────
def encode_create_bucket(request: CreateBucket, account_id: str) -> dict[str, Any]:
    body: dict[str, Any] = {
        "accountId": account_id,
        "bucketName": request.bucket_name,
        "bucketType": request.bucket_type.value,
        "fileLockEnabled": request.file_lock_enabled,
    }
    if request.bucket_info is not None:
        body["bucketInfo"] = dict(request.bucket_info)
    if request.cors_rules is not None:
        body["corsRules"] = [encode_cors_rule(r) for r in request.cors_rules]
    if request.lifecycle_rules is not None:
        body["lifecycleRules"] = [encode_lifecycle_rule(r) for r in request.lifecycle_rules]
    if request.default_server_side_encryption is not None:
        body["defaultServerSideEncryption"] = encode_encryption(
            request.default_server_side_encryption
        )
    return body


def encode_update_bucket(request: UpdateBucket, account_id: str) -> dict[str, Any]:
    body: dict[str, Any] = {"accountId": account_id, "bucketId": request.bucket_id}
    if request.bucket_type is not None:
        body["bucketType"] = request.bucket_type.value
    if request.bucket_info is not None:
        body["bucketInfo"] = dict(request.bucket_info)
    if request.cors_rules is not None:
        body["corsRules"] = [encode_cors_rule(r) for r in request.cors_rules]
    if request.default_retention is not None:
        body["defaultRetention"] = encode_retention(request.default_retention)
    if request.default_server_side_encryption is not None:
        body["defaultServerSideEncryption"] = encode_encryption(
            request.default_server_side_encryption
        )
    if request.lifecycle_rules is not None:
        body["lifecycleRules"] = [encode_lifecycle_rule(r) for r in request.lifecycle_rules]
    if request.if_revision_is is not None:
        body["ifRevisionIs"] = request.if_revision_is
    return body


def encode_list_buckets(request: ListBuckets, account_id: str) -> dict[str, Any]:
    body: dict[str, Any] = {"accountId": account_id}
    if request.bucket_id is not None:
        body["bucketId"] = request.bucket_id
    if request.bucket_name is not None:
        body["bucketName"] = request.bucket_name
    if request.bucket_types is not None:
        body["bucketTypes"] = list(request.bucket_types)
    return body


def encode_delete_bucket(request: DeleteBucket, account_id: str) -> dict[str, Any]:
    return {"accountId": account_id, "bucketId": request.bucket_id}


# ── Errors ────────────────────────────────────────────────────────────
def decode_service_error(status: int, body: bytes) -> ServiceError:
    """Turn an error response into the matching :class:`ServiceError` subclass."""
    try:
        record = ErrorRecord.model_validate_json(body)
    except pydantic.ValidationError:
        text = body.decode("utf-8", errors="replace") if body else ""
        return ServiceError(status, "unknown", text)
    exc_class = _ERROR_MAP.get(record.code, ServiceError)
    return exc_class(record.status, record.code, record.message)
