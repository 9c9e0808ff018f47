"""Authorization context and capability checks.

An :class:`Authorization` carries the account ID, token, API URL and the
capabilities the token grants. Requests check capabilities locally, before
any network interaction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from b2buckets.base.config import B2Config
from b2buckets.base.exceptions import CapabilityError


API_VERSION = "v2"


class Capability(str, Enum):
    """Named permissions an application key may grant."""

    LIST_KEYS = "listKeys"
    WRITE_KEYS = "writeKeys"
    DELETE_KEYS = "deleteKeys"
    LIST_ALL_BUCKET_NAMES = "listAllBucketNames"
    LIST_BUCKETS = "listBuckets"
    READ_BUCKETS = "readBuckets"
    WRITE_BUCKETS = "writeBuckets"
    DELETE_BUCKETS = "deleteBuckets"
    READ_BUCKET_RETENTIONS = "readBucketRetentions"
    WRITE_BUCKET_RETENTIONS = "writeBucketRetentions"
    READ_BUCKET_ENCRYPTION = "readBucketEncryption"
    WRITE_BUCKET_ENCRYPTION = "writeBucketEncryption"
    LIST_FILES = "listFiles"
    READ_FILES = "readFiles"
    SHARE_FILES = "shareFiles"
    WRITE_FILES = "writeFiles"
    DELETE_FILES = "deleteFiles"


@dataclass(frozen=True)
class Authorization:
    """An issued account authorization.

    Attributes:
        account_id: The B2 account ID.
        authorization_token: Token sent in the ``Authorization`` header.
        api_url: Base URL for API calls.
        capabilities: Capabilities granted to the token.
    """

    account_id: str
    authorization_token: str
    api_url: str
    capabilities: frozenset[Capability] = field(default_factory=frozenset)

    @classmethod
    def from_config(cls, config: B2Config) -> Authorization:
        """Build an authorization from a validated config.

        Unknown capability names are ignored; the service grants capabilities
        this client does not model.
        """
        known = {c.value: c for c in Capability}
        return cls(
            account_id=config.account_id,
            authorization_token=config.authorization_token,
            api_url=config.api_url,
            capabilities=frozenset(known[c] for c in config.capabilities if c in known),
        )

    def has_capability(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def require(self, capabilities: Iterable[Capability]) -> None:
        """Raise :class:`CapabilityError` for the first capability not granted."""
        for capability in capabilities:
            if capability not in self.capabilities:
                raise CapabilityError(capability.value)

    def api_endpoint(self, operation: str) -> str:
        """Full URL for an API operation, e.g. ``b2_list_buckets``."""
        return f"{self.api_url}/b2api/{API_VERSION}/{operation}"

    def headers(self) -> dict[str, str]:
        return {"Authorization": self.authorization_token}
