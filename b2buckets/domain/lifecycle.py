"""Lifecycle rules: automatic hiding and deletion of files under a prefix.

No file may be subject to more than one rule, so within a bucket no rule's
prefix may be a prefix of another's. :func:`detect_conflicts` reports every
such pair grouped by the shorter prefix. Nested prefixes are listed under
each of their ancestors, so for::

    ["Docs/Photos/", "Docs/", "Docs/Documents/", "Legal/Taxes/",
     "Docs/Photos/Vacations/", "Archive/"]

the report is::

    {
        "Docs/": ["Docs/Documents/", "Docs/Photos/", "Docs/Photos/Vacations/"],
        "Docs/Photos/": ["Docs/Photos/Vacations/"],
    }

The empty prefix matches every file; if present it must be the only rule.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable

from b2buckets.base.exceptions import (
    FieldValidationError,
    IncompatibleFieldsError,
    LifecycleConflictError,
    MissingFieldError,
)
from b2buckets.domain.names import validate_file_name_prefix

MAX_DAYS = 65535
MAX_LIFECYCLE_RULES = 100


def _whole_days(value: int | timedelta, field: str) -> int:
    """Truncate to whole days and check the 1..65535 range."""
    days = value.days if isinstance(value, timedelta) else value
    if isinstance(days, bool) or not isinstance(days, int):
        raise FieldValidationError(field, "must be a whole number of days", value)
    if days < 1:
        raise FieldValidationError(field, "must be at least 1 day", days)
    if days > MAX_DAYS:
        raise FieldValidationError(field, f"must be at most {MAX_DAYS} days", days)
    return days


@dataclass(frozen=True)
class LifecycleRule:
    """Hide files ``hide_after_days`` after upload and/or delete them
    ``delete_after_days`` after they were hidden.

    Rules order by prefix.
    """

    prefix: str
    hide_after_days: int | None = None
    delete_after_days: int | None = None

    def __post_init__(self) -> None:
        validate_file_name_prefix(self.prefix)
        if self.hide_after_days is not None:
            object.__setattr__(
                self, "hide_after_days", _whole_days(self.hide_after_days, "hide_after_days")
            )
        if self.delete_after_days is not None:
            object.__setattr__(
                self, "delete_after_days", _whole_days(self.delete_after_days, "delete_after_days")
            )
        if self.hide_after_days is None and self.delete_after_days is None:
            raise IncompatibleFieldsError(
                "A lifecycle rule needs at least one of hide_after_days or delete_after_days",
                {self.prefix: ["hide_after_days", "delete_after_days"]},
            )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, LifecycleRule):
            return NotImplemented
        return self.prefix < other.prefix

    @staticmethod
    def builder() -> LifecycleRuleBuilder:
        return LifecycleRuleBuilder()


class LifecycleRuleBuilder:
    """Fail-fast builder for a :class:`LifecycleRule`."""

    def __init__(self) -> None:
        self._prefix: str | None = None
        self._hide_after: int | None = None
        self._delete_after: int | None = None

    def filename_prefix(self, prefix: str) -> LifecycleRuleBuilder:
        """Select files whose names start with ``prefix``; ``""`` selects all files."""
        self._prefix = validate_file_name_prefix(prefix)
        return self

    def hide_after_upload(self, days: int | timedelta) -> LifecycleRuleBuilder:
        self._hide_after = _whole_days(days, "hide_after_days")
        return self

    def delete_after_hide(self, days: int | timedelta) -> LifecycleRuleBuilder:
        """Days after a file was hidden (explicitly or by a newer upload) to delete it."""
        self._delete_after = _whole_days(days, "delete_after_days")
        return self

    def build(self) -> LifecycleRule:
        if self._prefix is None:
            raise MissingFieldError("prefix")
        return LifecycleRule(self._prefix, self._hide_after, self._delete_after)


def find_prefix_conflicts(prefixes: Iterable[str]) -> dict[str, list[str]]:
    """Map each prefix to the sorted, distinct prefixes that start with it.

    Keys are emitted in lexicographic order. Only prefixes with at least one
    conflict appear. Identical prefixes conflict with each other.
    """
    ordered = sorted(prefixes)
    conflicts: dict[str, list[str]] = {}
    for i, prefix in enumerate(ordered):
        # Everything starting with `prefix` sorts right after it.
        for other in ordered[i + 1:]:
            if not other.startswith(prefix):
                break
            group = conflicts.setdefault(prefix, [])
            if not group or group[-1] != other:
                group.append(other)
    return conflicts


def detect_conflicts(rules: Iterable[LifecycleRule]) -> list[LifecycleRule]:
    """Validate a bucket's lifecycle rules as a set.

    Returns:
        The rules sorted by prefix.

    Raises:
        FieldValidationError: If there are more than 100 rules or an entry
            is not a :class:`LifecycleRule`.
        LifecycleConflictError: If any prefix is a prefix of another.
    """
    rules = list(rules)
    if len(rules) > MAX_LIFECYCLE_RULES:
        raise FieldValidationError(
            "lifecycle_rules", f"a bucket can have at most {MAX_LIFECYCLE_RULES} rules", len(rules)
        )
    for rule in rules:
        if not isinstance(rule, LifecycleRule):
            raise FieldValidationError("lifecycle_rules", "entries must be LifecycleRule", rule)

    conflicts = find_prefix_conflicts(rule.prefix for rule in rules)
    if conflicts:
        raise LifecycleConflictError("Lifecycle rule prefixes overlap", conflicts)
    return sorted(rules, key=lambda rule: rule.prefix)
