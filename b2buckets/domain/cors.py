"""CORS rules for browser access to bucket contents.

See https://www.backblaze.com/b2/docs/cors_rules.html.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Iterable

from b2buckets.base.exceptions import (
    ByteBudgetError,
    FieldValidationError,
    MissingFieldError,
)
from b2buckets.domain.headers import validate_allowed_headers, validate_exposed_headers
from b2buckets.domain.names import validate_name
from b2buckets.domain.origins import Origin, validate_origins

MAX_AGE_SECONDS = 86400
MAX_STRING_BYTES = 1000
MAX_CORS_RULES = 100


class CorsOperation(str, Enum):
    """Operations a CORS rule can allow."""

    DOWNLOAD_FILE_BY_NAME = "b2_download_file_by_name"
    DOWNLOAD_FILE_BY_ID = "b2_download_file_by_id"
    UPLOAD_FILE = "b2_upload_file"
    UPLOAD_PART = "b2_upload_part"
    # S3-compatible API operations.
    S3_DELETE = "s3_delete"
    S3_GET = "s3_get"
    S3_HEAD = "s3_head"
    S3_POST = "s3_post"
    S3_PUT = "s3_put"


def _operation(value: CorsOperation | str) -> CorsOperation:
    try:
        return CorsOperation(value)
    except ValueError:
        raise FieldValidationError("allowed_operations", "unknown CORS operation", value) from None


def _max_age(value: int | timedelta) -> int:
    seconds = int(value.total_seconds()) if isinstance(value, timedelta) else value
    if isinstance(seconds, bool) or not isinstance(seconds, int):
        raise FieldValidationError("max_age_seconds", "must be a whole number of seconds", value)
    if not 0 <= seconds <= MAX_AGE_SECONDS:
        raise FieldValidationError(
            "max_age_seconds", f"must be between 0 and {MAX_AGE_SECONDS} seconds", seconds
        )
    return seconds


def _utf8_len(values: Iterable[str]) -> int:
    return sum(len(v.encode("utf-8")) for v in values)


@dataclass(frozen=True)
class CorsRule:
    """A validated CORS rule.

    Field checks run in declaration order; the byte budget over all string
    data (name, origins, operation tags and headers) is checked last, so a
    field error is always reported ahead of a budget error.
    """

    name: str
    allowed_origins: tuple[Origin, ...]
    allowed_operations: tuple[CorsOperation, ...]
    max_age_seconds: int
    allowed_headers: tuple[str, ...] | None = None
    exposed_headers: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        validate_name(self.name, "name")

        origins = validate_origins(self.allowed_origins)
        if not origins:
            raise MissingFieldError("allowed_origins")

        operations = tuple(dict.fromkeys(_operation(op) for op in self.allowed_operations))
        if not operations:
            raise MissingFieldError("allowed_operations")

        allowed = None
        if self.allowed_headers:
            allowed = validate_allowed_headers(self.allowed_headers)
        exposed = None
        if self.exposed_headers:
            exposed = validate_exposed_headers(self.exposed_headers)

        object.__setattr__(self, "allowed_origins", origins)
        object.__setattr__(self, "allowed_operations", operations)
        object.__setattr__(self, "allowed_headers", allowed)
        object.__setattr__(self, "exposed_headers", exposed)
        object.__setattr__(self, "max_age_seconds", _max_age(self.max_age_seconds))

        total = self.byte_size
        if total >= MAX_STRING_BYTES:
            breakdown = [f"{field}={size}" for field, size in self.field_byte_sizes().items()]
            raise ByteBudgetError(total, MAX_STRING_BYTES, {self.name: breakdown})

    def field_byte_sizes(self) -> dict[str, int]:
        """UTF-8 size of the string data in each field, in field order."""
        return {
            "name": _utf8_len([self.name]),
            "allowed_origins": _utf8_len(self.allowed_origins),
            "allowed_operations": _utf8_len(op.value for op in self.allowed_operations),
            "allowed_headers": _utf8_len(self.allowed_headers or ()),
            "exposed_headers": _utf8_len(self.exposed_headers or ()),
        }

    @property
    def byte_size(self) -> int:
        """UTF-8 size of all string data in the rule."""
        return sum(self.field_byte_sizes().values())

    @staticmethod
    def builder() -> CorsRuleBuilder:
        return CorsRuleBuilder()


class CorsRuleBuilder:
    """Fail-fast builder for a :class:`CorsRule`.

    Each setter validates its input immediately; list-wide origin and
    header checks run on the whole list every time it changes.
    """

    def __init__(self) -> None:
        self._name: str | None = None
        self._origins: list[Origin] = []
        self._operations: list[CorsOperation] = []
        self._allowed_headers: list[str] | None = None
        self._exposed_headers: list[str] | None = None
        self._max_age: int | None = None

    def name(self, name: str) -> CorsRuleBuilder:
        """Human-readable rule name: 6-50 letters, digits or '-', not starting with 'b2-'."""
        self._name = validate_name(name, "name")
        return self

    def allowed_origins(self, origins: Iterable[str]) -> CorsRuleBuilder:
        """Replace the origin list.

        Examples of valid origins: ``http://www.example.com:8000``,
        ``https://*.example.com``, ``https://*:8765``, ``https://*``,
        ``https`` and ``*``.
        """
        self._origins = list(validate_origins(origins))
        return self

    def add_allowed_origin(self, origin: str) -> CorsRuleBuilder:
        self._origins = list(validate_origins([*self._origins, origin]))
        return self

    def allowed_operations(self, operations: Iterable[CorsOperation | str]) -> CorsRuleBuilder:
        ops = list(dict.fromkeys(_operation(op) for op in operations))
        if not ops:
            raise FieldValidationError("allowed_operations", "at least one operation is required")
        self._operations = ops
        return self

    def add_allowed_operation(self, operation: CorsOperation | str) -> CorsRuleBuilder:
        op = _operation(operation)
        if op not in self._operations:
            self._operations.append(op)
        return self

    def allowed_headers(self, headers: Iterable[str]) -> CorsRuleBuilder:
        """Headers allowed in a preflight request; an empty list allows none."""
        self._allowed_headers = list(validate_allowed_headers(headers)) or None
        return self

    def add_allowed_header(self, header: str) -> CorsRuleBuilder:
        self._allowed_headers = list(
            validate_allowed_headers([*(self._allowed_headers or []), header])
        )
        return self

    def exposed_headers(self, headers: Iterable[str]) -> CorsRuleBuilder:
        self._exposed_headers = list(validate_exposed_headers(headers)) or None
        return self

    def add_exposed_header(self, header: str) -> CorsRuleBuilder:
        self._exposed_headers = list(
            validate_exposed_headers([*(self._exposed_headers or []), header])
        )
        return self

    def max_age(self, age: int | timedelta) -> CorsRuleBuilder:
        """How long a browser may cache the preflight response (at most one day)."""
        self._max_age = _max_age(age)
        return self

    def build(self) -> CorsRule:
        if self._name is None:
            raise MissingFieldError("name")
        if self._max_age is None:
            raise MissingFieldError("max_age_seconds")
        if not self._origins:
            raise MissingFieldError("allowed_origins")
        if not self._operations:
            raise MissingFieldError("allowed_operations")
        return CorsRule(
            name=self._name,
            allowed_origins=tuple(self._origins),
            allowed_operations=tuple(self._operations),
            max_age_seconds=self._max_age,
            allowed_headers=tuple(self._allowed_headers) if self._allowed_headers else None,
            exposed_headers=tuple(self._exposed_headers) if self._exposed_headers else None,
        )


def validate_cors_rules(rules: Iterable[CorsRule]) -> list[CorsRule]:
    rules = list(rules)
    if len(rules) > MAX_CORS_RULES:
        raise FieldValidationError(
            "cors_rules", f"a bucket can have at most {MAX_CORS_RULES} CORS rules", len(rules)
        )
    for rule in rules:
        if not isinstance(rule, CorsRule):
            raise FieldValidationError("cors_rules", "entries must be CorsRule", rule)
    return rules
