"""
b2buckets exception hierarchy.

Every failure raised by the library inherits from :class:`B2BucketsError`.
Validation errors are split into single-field failures and structural
failures (cross-field or cross-item), which carry a report keyed by the
conflicting group rather than a flat message.
"""

from __future__ import annotations

from typing import Any


# ── Base ──────────────────────────────────────────────────────────────
class B2BucketsError(Exception):
    """Root exception for all b2buckets errors."""


# ── Validation ────────────────────────────────────────────────────────
class ValidationError(B2BucketsError):
    """Base exception for values rejected before they reach the network."""


class FieldValidationError(ValidationError):
    """A single field failed a local constraint (range, charset, length).

    Attributes:
        field: Name of the offending field.
        constraint: Human-readable description of the violated constraint.
        value: The rejected value, if any.
    """

    def __init__(self, field: str, constraint: str, value: Any = None) -> None:
        self.field = field
        self.constraint = constraint
        self.value = value
        if value is None:
            message = f"{field}: {constraint}"
        else:
            message = f"{field}: {constraint} (got {value!r})"
        super().__init__(message)


class MissingFieldError(FieldValidationError):
    """A mandatory field was never set on a builder."""

    def __init__(self, field: str) -> None:
        super().__init__(field, "missing required field")


class StructuralValidationError(ValidationError):
    """A constraint spanning several fields or list items failed.

    Attributes:
        report: Mapping of group key to the entries that conflict with it.
            Keys and values are emitted in a deterministic order.
    """

    def __init__(self, message: str, report: dict[str, list[str]] | None = None) -> None:
        self.report: dict[str, list[str]] = report or {}
        super().__init__(message)


class OriginConflictError(StructuralValidationError):
    """Entries of a CORS origin list overlap or exclude each other."""


class HeaderConflictError(StructuralValidationError):
    """A header list combines ``*`` with other entries."""


class LifecycleConflictError(StructuralValidationError):
    """Lifecycle rule prefixes overlap.

    ``conflicts`` maps each prefix to every other prefix that starts with it.
    """

    @property
    def conflicts(self) -> dict[str, list[str]]:
        return self.report


class ByteBudgetError(StructuralValidationError):
    """The string data of a CORS rule exceeds the service's byte budget."""

    def __init__(
        self, total_bytes: int, limit: int, report: dict[str, list[str]] | None = None
    ) -> None:
        self.total_bytes = total_bytes
        self.limit = limit
        super().__init__(
            f"CORS rule string data is {total_bytes} bytes; it must be less than {limit}",
            report,
        )


class IncompatibleFieldsError(StructuralValidationError):
    """Fields that must be set together (or at least one of) are inconsistent."""


# ── Data integrity ────────────────────────────────────────────────────
class DataIntegrityError(B2BucketsError):
    """A service response violates the documented wire contract."""


# ── Authorization ─────────────────────────────────────────────────────
class CapabilityError(B2BucketsError):
    """The authorization does not grant a capability the request needs."""

    def __init__(self, capability: str) -> None:
        self.capability = capability
        super().__init__(f"Authorization lacks the '{capability}' capability")


# ── Service ───────────────────────────────────────────────────────────
class ServiceError(B2BucketsError):
    """The service answered with an error envelope.

    Attributes:
        status: HTTP status code.
        code: B2 error code (e.g. ``duplicate_bucket_name``).
        message: Human-readable message from the service.
    """

    def __init__(self, status: int, code: str, message: str) -> None:
        self.status = status
        self.code = code
        self.message = message
        super().__init__(f"[{status}] {code}: {message}")


class BadRequestError(ServiceError):
    """The service rejected the request parameters."""


class BucketNotFoundError(ServiceError):
    """Bucket ID or name does not exist."""


class DuplicateBucketNameError(ServiceError):
    """Bucket name is already in use."""


class TooManyBucketsError(ServiceError):
    """The account has reached its bucket limit."""


class RevisionConflictError(ServiceError):
    """``ifRevisionIs`` did not match the bucket's current revision."""


class UnauthorizedError(ServiceError):
    """The token is invalid, expired, or not allowed to perform the call."""


# ── Transport ─────────────────────────────────────────────────────────
class TransportError(B2BucketsError):
    """The request never produced a response (connection, timeout, ...)."""
