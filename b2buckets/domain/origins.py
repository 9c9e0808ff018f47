"""CORS origin grammar.

An origin is one of:

* ``*``: every origin;
* ``<scheme>``, e.g. ``https``: every host and port of that scheme;
* ``<scheme>://<host>[:<port>]``, e.g. ``https://*.example.com`` or
  ``http://www.example.com:8000``.

An origin holds at most one ``*``, and only in the host, either as the
whole host or as its leftmost label. A bare scheme is broader than
``<scheme>://*``: the latter only covers the scheme's default port.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Union

from b2buckets.base.exceptions import FieldValidationError, OriginConflictError

ALLOWED_SCHEMES = frozenset({"http", "https"})
WILDCARD = "*"

_FIELD = "allowed_origins"
_SCHEME = re.compile(r"[A-Za-z]+")
_HOST_LABEL = re.compile(r"[A-Za-z0-9-]+")
_PORT = re.compile(r"[0-9]{1,5}")


@dataclass(frozen=True)
class Universal:
    """The ``*`` origin."""


@dataclass(frozen=True)
class SchemeOnly:
    """A bare scheme such as ``https``."""

    scheme: str


@dataclass(frozen=True)
class Full:
    """A ``scheme://host[:port]`` origin; ``host`` may hold one wildcard label."""

    scheme: str
    host: str
    port: int | None = None

    @property
    def has_wildcard(self) -> bool:
        return WILDCARD in self.host


OriginClass = Union[Universal, SchemeOnly, Full]


def _reject(origin: str, constraint: str) -> FieldValidationError:
    return FieldValidationError(_FIELD, constraint, origin)


def _parse_scheme(token: str, origin: str) -> str:
    if not _SCHEME.fullmatch(token):
        raise _reject(origin, "scheme must be alphabetic")
    scheme = token.lower()
    if scheme not in ALLOWED_SCHEMES:
        raise _reject(origin, f"scheme must be one of {', '.join(sorted(ALLOWED_SCHEMES))}")
    return scheme


def _parse_host(host: str, origin: str) -> str:
    if not host:
        raise _reject(origin, "host must not be empty")
    for index, label in enumerate(host.split(".")):
        if label == WILDCARD:
            if index != 0:
                raise _reject(origin, "wildcard must be the leftmost host label")
        elif WILDCARD in label:
            raise _reject(origin, "wildcard must be a whole host label")
        elif not _HOST_LABEL.fullmatch(label):
            raise _reject(origin, "host labels may only contain letters, digits and '-'")
    return host.lower()


def _parse_port(text: str, origin: str) -> int:
    if WILDCARD in text:
        raise _reject(origin, "wildcard is not allowed in the port")
    if not _PORT.fullmatch(text) or not 1 <= int(text) <= 65535:
        raise _reject(origin, "port must be a number between 1 and 65535")
    return int(text)


def classify_origin(origin: str) -> OriginClass:
    """Parse and classify a single origin string.

    Raises:
        FieldValidationError: If the string is not a valid origin.
    """
    if not isinstance(origin, str) or not origin:
        raise _reject(origin, "must be a non-empty string")
    if origin.count(WILDCARD) > 1:
        raise _reject(origin, "may contain at most one '*'")
    if origin == WILDCARD:
        return Universal()

    if "://" not in origin:
        if WILDCARD in origin:
            raise _reject(origin, "wildcard is only allowed in the host of 'scheme://host'")
        return SchemeOnly(_parse_scheme(origin, origin))

    scheme_text, _, authority = origin.partition("://")
    if WILDCARD in scheme_text:
        raise _reject(origin, "wildcard is not allowed in the scheme")
    scheme = _parse_scheme(scheme_text, origin)

    if any(c in authority for c in "/?#@"):
        raise _reject(origin, "must be 'scheme://host[:port]' without path or credentials")
    host, sep, port_text = authority.partition(":")
    port = _parse_port(port_text, origin) if sep else None
    return Full(scheme, _parse_host(host, origin), port)


class Origin(str):
    """A string that has been validated as a CORS origin."""

    __slots__ = ()

    def __new__(cls, value: str) -> Origin:
        classify_origin(value)
        return super().__new__(cls, value)

    @property
    def kind(self) -> OriginClass:
        return classify_origin(self)


def _host_covers(pattern: str, host: str) -> bool:
    if pattern == WILDCARD:
        return True
    if pattern.startswith(WILDCARD + "."):
        return host.endswith(pattern[1:])
    return pattern == host


def _broader_of(a: Origin, b: Origin) -> tuple[Origin, Origin] | None:
    """Return ``(broader, narrower)`` if two non-universal origins overlap."""
    ka, kb = a.kind, b.kind
    if ka.scheme != kb.scheme:
        return None
    if isinstance(ka, SchemeOnly):
        return a, b
    if isinstance(kb, SchemeOnly):
        return b, a
    if ka.has_wildcard and _host_covers(ka.host, kb.host):
        return a, b
    if kb.has_wildcard and _host_covers(kb.host, ka.host):
        return b, a
    if ka.host == kb.host and ka.port == kb.port:
        return a, b
    return None


def validate_origins(items: Iterable[str]) -> tuple[Origin, ...]:
    """Validate a whole origin list.

    Every entry is classified first; the first malformed entry is reported
    as a :class:`FieldValidationError`. List-level conflicts are checked
    afterwards and reported as an :class:`OriginConflictError` whose report
    maps the broader entry to the entries it overlaps, in input order.

    Returns:
        The origins in input order.
    """
    origins = tuple(Origin(item) for item in items)

    universal = [i for i, o in enumerate(origins) if isinstance(o.kind, Universal)]
    if universal and len(origins) > 1:
        others = [o for i, o in enumerate(origins) if i != universal[0]]
        raise OriginConflictError(
            "'*' must be the only origin in the list", {WILDCARD: [str(o) for o in others]}
        )

    report: dict[str, list[str]] = {}
    for i, a in enumerate(origins):
        for b in origins[i + 1:]:
            pair = _broader_of(a, b)
            if pair is None:
                continue
            broader, narrower = pair
            group = report.setdefault(str(broader), [])
            if str(narrower) not in group:
                group.append(str(narrower))

    if report:
        raise OriginConflictError("CORS origins overlap", report)
    return origins
