"""HTTP transport for the B2 API.

The bucket service only needs ``post(url, headers, json_body) -> bytes``.
:class:`HttpxTransport` implements it with :mod:`httpx`, turning network
failures into :class:`TransportError` and non-2xx answers into the
matching :class:`ServiceError` subclass. Transient failures are retried
with exponential backoff.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx

from b2buckets.base.config import B2Config
from b2buckets.base.exceptions import ServiceError, TransportError
from b2buckets.base.logger import b2_logger
from b2buckets.base.retry import retry
from b2buckets.wire.mapping import decode_service_error

# Statuses B2 documents as safe to retry.
_RETRYABLE_STATUSES = frozenset({408, 429, 500, 503})


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, ServiceError):
        return exc.status in _RETRYABLE_STATUSES
    return True


class Transport(ABC):
    """Abstract interface for sending API calls."""

    @abstractmethod
    def post(self, url: str, headers: dict[str, str], json_body: dict[str, Any]) -> bytes:
        """POST a JSON body and return the raw response bytes.

        Args:
            url: Full endpoint URL.
            headers: Request headers (including ``Authorization``).
            json_body: JSON-serialisable request body.

        Returns:
            The response body of a successful call.

        Raises:
            TransportError: If no response was received.
            ServiceError: If the service answered with an error envelope.
        """
        pass


class HttpxTransport(Transport):
    """:mod:`httpx` implementation of :class:`Transport`.

    Attributes:
        client: The underlying ``httpx.Client``.
        max_attempts: Attempts per call, including the first.
        base_delay: Initial backoff delay in seconds.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.client = client or httpx.Client(timeout=httpx.Timeout(timeout))
        self.max_attempts = max_attempts
        self.base_delay = base_delay

    @classmethod
    def from_config(cls, config: B2Config) -> HttpxTransport:
        return cls(
            timeout=config.timeout,
            max_attempts=config.max_attempts,
            base_delay=config.base_delay,
        )

    def post(self, url: str, headers: dict[str, str], json_body: dict[str, Any]) -> bytes:
        send = retry(
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            retryable_exceptions=(TransportError, ServiceError),
            should_retry=_is_transient,
        )(self._post_once)
        return send(url, headers, json_body)

    def _post_once(self, url: str, headers: dict[str, str], json_body: dict[str, Any]) -> bytes:
        try:
            response = self.client.post(url, headers=headers, json=json_body)
        except httpx.TransportError as e:
            raise TransportError(f"POST {url} failed: {e}") from e

        if response.is_success:
            return response.content

        error = decode_service_error(response.status_code, response.content)
        b2_logger.debug(f"Service returned {error.status} {error.code}", operation=url.rsplit("/", 1)[-1])
        raise error

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
