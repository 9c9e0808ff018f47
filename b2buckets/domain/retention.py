"""File retention (file lock) settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum

from b2buckets.base.exceptions import FieldValidationError, IncompatibleFieldsError

MAX_PERIOD_DURATION = 2**32 - 1
# A retention year is 52 weeks.
WEEKS_PER_YEAR = 52


class RetentionMode(str, Enum):
    GOVERNANCE = "governance"
    COMPLIANCE = "compliance"


class PeriodUnit(str, Enum):
    DAYS = "days"
    YEARS = "years"


@dataclass(frozen=True)
class RetentionPeriod:
    """A retention duration as B2 expresses it: a count and a unit."""

    duration: int
    unit: PeriodUnit = PeriodUnit.DAYS

    def __post_init__(self) -> None:
        if isinstance(self.duration, bool) or not isinstance(self.duration, int):
            raise FieldValidationError("period.duration", "must be an integer", self.duration)
        if not 1 <= self.duration <= MAX_PERIOD_DURATION:
            raise FieldValidationError(
                "period.duration", f"must be between 1 and {MAX_PERIOD_DURATION}", self.duration
            )
        try:
            object.__setattr__(self, "unit", PeriodUnit(self.unit))
        except ValueError:
            raise FieldValidationError("period.unit", "must be 'days' or 'years'", self.unit) from None

    @classmethod
    def from_timedelta(cls, value: timedelta) -> RetentionPeriod:
        """Whole days of ``value``; the remainder is dropped."""
        return cls(value.days, PeriodUnit.DAYS)

    def to_timedelta(self) -> timedelta:
        if self.unit is PeriodUnit.YEARS:
            return timedelta(weeks=self.duration * WEEKS_PER_YEAR)
        return timedelta(days=self.duration)


@dataclass(frozen=True)
class RetentionPolicy:
    """A default retention policy.

    ``mode`` and ``period`` are both set or both ``None``; the latter means
    "no policy".
    """

    mode: RetentionMode | None = None
    period: RetentionPeriod | None = None

    def __post_init__(self) -> None:
        if (self.mode is None) != (self.period is None):
            raise IncompatibleFieldsError(
                "Retention mode and period must be set together",
                {"retention": ["mode", "period"]},
            )
        if self.mode is not None:
            try:
                object.__setattr__(self, "mode", RetentionMode(self.mode))
            except ValueError:
                raise FieldValidationError(
                    "mode", "must be 'governance' or 'compliance'", self.mode
                ) from None
        if self.period is not None and not isinstance(self.period, RetentionPeriod):
            raise FieldValidationError("period", "must be a RetentionPeriod", self.period)

    @classmethod
    def new(cls, mode: RetentionMode, duration: timedelta | RetentionPeriod) -> RetentionPolicy:
        period = duration if isinstance(duration, RetentionPeriod) else RetentionPeriod.from_timedelta(duration)
        return cls(mode, period)

    @classmethod
    def disabled(cls) -> RetentionPolicy:
        return cls()

    @property
    def is_enabled(self) -> bool:
        return self.mode is not None


@dataclass(frozen=True)
class FileLockConfiguration:
    """File-lock state of a bucket as reported by the service."""

    is_file_lock_enabled: bool = False
    default_retention: RetentionPolicy = field(default_factory=RetentionPolicy)
