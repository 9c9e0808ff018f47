"""JSON wire format of the B2 bucket API."""

from .mapping import (
    decode_bucket,
    decode_bucket_list,
    decode_cors_rule,
    decode_encryption,
    decode_encryption_envelope,
    decode_file_lock_envelope,
    decode_lifecycle_rule,
    decode_retention,
    decode_service_error,
    encode_cors_rule,
    encode_create_bucket,
    encode_delete_bucket,
    encode_encryption,
    encode_lifecycle_rule,
    encode_list_buckets,
    encode_retention,
    encode_update_bucket,
)


__all__ = [
    "decode_bucket",
    "decode_bucket_list",
    "decode_cors_rule",
    "decode_encryption",
    "decode_encryption_envelope",
    "decode_file_lock_envelope",
    "decode_lifecycle_rule",
    "decode_retention",
    "decode_service_error",
    "encode_cors_rule",
    "encode_create_bucket",
    "encode_delete_bucket",
    "encode_encryption",
    "encode_lifecycle_rule",
    "encode_list_buckets",
    "encode_retention",
    "encode_update_bucket",
]
