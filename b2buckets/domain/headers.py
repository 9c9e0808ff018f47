"""Header lists of a CORS rule.

Allowed headers (matched against ``Access-Control-Request-Headers``) may be
a complete header name, a name prefix ending in ``*``, or ``*`` alone; a
``*`` entry must be the only one. Exposed headers must be complete names.
"""

from __future__ import annotations

import re
from typing import Iterable

from b2buckets.base.exceptions import FieldValidationError, HeaderConflictError

WILDCARD = "*"

# RFC 7230 token characters, minus '*', which only appears as a suffix here.
_TOKEN = re.compile(r"[!#$%&'+\-.^_`|~0-9A-Za-z]+")


def validate_header_name(header: str, field: str = "exposed_headers") -> str:
    if not isinstance(header, str) or not _TOKEN.fullmatch(header):
        raise FieldValidationError(field, "must be a complete HTTP header name", header)
    return header


def validate_header_pattern(pattern: str, field: str = "allowed_headers") -> str:
    if pattern == WILDCARD:
        return pattern
    if isinstance(pattern, str) and pattern.endswith(WILDCARD):
        stem = pattern[:-1]
        if _TOKEN.fullmatch(stem):
            return pattern
        raise FieldValidationError(field, "header prefix must be a valid header name stem", pattern)
    return validate_header_name(pattern, field)


def validate_allowed_headers(headers: Iterable[str]) -> tuple[str, ...]:
    """Validate each allowed-header pattern, then the list as a whole."""
    patterns = tuple(dict.fromkeys(validate_header_pattern(h) for h in headers))
    if WILDCARD in patterns and len(patterns) > 1:
        others = list(patterns)
        others.remove(WILDCARD)
        raise HeaderConflictError("'*' must be the only allowed header", {WILDCARD: others})
    return patterns


def validate_exposed_headers(headers: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(validate_header_name(h) for h in headers))
