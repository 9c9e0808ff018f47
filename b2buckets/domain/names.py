"""Validators for bucket names, CORS rule names and file-name prefixes."""

from __future__ import annotations

import re

from b2buckets.base.exceptions import FieldValidationError

RESERVED_NAME_PREFIX = "b2-"
MIN_NAME_LENGTH = 6
MAX_NAME_LENGTH = 50
MAX_FILE_NAME_BYTES = 1024
MAX_FILE_NAME_SEGMENT_BYTES = 250

_NAME_CHARS = re.compile(r"[A-Za-z0-9-]+")


def validate_name(name: str, field: str) -> str:
    """Check a bucket or CORS rule name.

    Names are 6-50 ASCII letters, digits or ``-`` and must not begin with
    the reserved ``b2-`` prefix.
    """
    if not isinstance(name, str):
        raise FieldValidationError(field, "must be a string", name)
    if not MIN_NAME_LENGTH <= len(name) <= MAX_NAME_LENGTH:
        raise FieldValidationError(
            field, f"must be {MIN_NAME_LENGTH}-{MAX_NAME_LENGTH} characters long", name
        )
    if not _NAME_CHARS.fullmatch(name):
        raise FieldValidationError(field, "may only contain ASCII letters, digits and '-'", name)
    if name.startswith(RESERVED_NAME_PREFIX):
        raise FieldValidationError(field, f"must not start with '{RESERVED_NAME_PREFIX}'", name)
    return name


def validate_bucket_name(name: str) -> str:
    return validate_name(name, "bucket_name")


def validate_file_name_prefix(prefix: str, field: str = "file_name_prefix") -> str:
    """Check a file-name prefix used to select files.

    The empty string is valid and matches every file. A prefix may end with
    ``/`` (a folder) but may not start with one or contain ``//``.
    """
    if not isinstance(prefix, str):
        raise FieldValidationError(field, "must be a string", prefix)
    if len(prefix.encode("utf-8")) > MAX_FILE_NAME_BYTES:
        raise FieldValidationError(field, f"must be at most {MAX_FILE_NAME_BYTES} bytes")
    if any(ord(c) < 32 or ord(c) == 127 for c in prefix):
        raise FieldValidationError(field, "must not contain control characters", prefix)
    if "\\" in prefix:
        raise FieldValidationError(field, "must not contain backslashes", prefix)
    if prefix.startswith("/"):
        raise FieldValidationError(field, "must not start with '/'", prefix)
    if "//" in prefix:
        raise FieldValidationError(field, "must not contain '//'", prefix)
    for segment in prefix.split("/"):
        if len(segment.encode("utf-8")) > MAX_FILE_NAME_SEGMENT_BYTES:
            raise FieldValidationError(
                field, f"path segments must be at most {MAX_FILE_NAME_SEGMENT_BYTES} bytes"
            )
    return prefix
