"""
Pydantic configuration model for the B2 client.

Validates the account identity and transport settings at initialization
time instead of failing on the first request.
"""

from __future__ import annotations

import os
from typing import Any
from pydantic import BaseModel, ConfigDict, Field, model_validator


class B2Config(BaseModel):
    """Configuration for talking to the B2 bucket API.

    Identity is resolved in order:
    1. Explicit values passed in the config dict.
    2. Environment variables (B2_ACCOUNT_ID, B2_AUTHORIZATION_TOKEN, B2_API_URL).

    The token is the one returned by ``b2_authorize_account``; obtaining it is
    up to the caller.
    """

    model_config = ConfigDict(extra="forbid")

    account_id: str | None = Field(default=None, description="B2 account ID")
    authorization_token: str | None = Field(
        default=None, description="Account authorization token"
    )
    api_url: str | None = Field(
        default=None, description="API base URL (e.g. 'https://api001.backblazeb2.com')"
    )
    capabilities: list[str] = Field(
        default_factory=list, description="Capabilities granted to the token"
    )
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    max_attempts: int = Field(default=3, ge=1, description="Attempts per request")
    base_delay: float = Field(default=1.0, ge=0, description="Initial retry delay in seconds")

    @model_validator(mode="before")
    @classmethod
    def resolve_from_env(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Fall back to environment variables for missing identity values."""
        env_map = {
            "account_id": "B2_ACCOUNT_ID",
            "authorization_token": "B2_AUTHORIZATION_TOKEN",
            "api_url": "B2_API_URL",
        }
        for field, env_var in env_map.items():
            if not values.get(field):
                values[field] = os.environ.get(env_var)
        return values

    @model_validator(mode="after")
    def validate_identity(self) -> B2Config:
        """Ensure the account, token and API URL are all known."""
        missing = [
            name
            for name in ("account_id", "authorization_token", "api_url")
            if not getattr(self, name)
        ]
        if missing:
            raise ValueError(
                f"Missing B2 settings: {', '.join(missing)}. Set them explicitly or via "
                "B2_ACCOUNT_ID / B2_AUTHORIZATION_TOKEN / B2_API_URL."
            )
        self.api_url = self.api_url.rstrip("/")
        return self


def validate_config(config: dict) -> B2Config:
    """Validate and return a typed config model.

    Args:
        config: Raw configuration dictionary.

    Returns:
        A validated :class:`B2Config`.

    Raises:
        pydantic.ValidationError: If the config is invalid.
    """
    return B2Config(**config)


__all__ = [
    "B2Config",
    "validate_config",
]
