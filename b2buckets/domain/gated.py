"""Permission-gated response fields.

Some bucket fields are only visible when the token may read them. The
service wraps them as ``{"isClientAuthorizedToRead": bool, "value": T}``.
They decode to :class:`Readable` or :class:`Unreadable`; the value of an
unreadable field is :data:`UNKNOWN`, never an empty or default value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class _Unknown:
    """Sentinel for a value the caller is not allowed to read."""

    _instance: _Unknown | None = None

    def __new__(cls) -> _Unknown:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNKNOWN"

    def __bool__(self) -> bool:
        return False


UNKNOWN = _Unknown()


@dataclass(frozen=True)
class Readable(Generic[T]):
    value: T

    @property
    def can_read(self) -> bool:
        return True


@dataclass(frozen=True)
class Unreadable:
    @property
    def can_read(self) -> bool:
        return False

    @property
    def value(self) -> _Unknown:
        return UNKNOWN


Gated = Union[Readable[T], Unreadable]
