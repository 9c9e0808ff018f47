"""Server-side encryption settings.

:data:`EncryptionConfig` is one of:

* :class:`ServiceManagedEncryption`: B2 manages the key (``SSE-B2``);
* :class:`CustomerManagedEncryption`: the caller supplies the key (``SSE-C``);
* :class:`NoEncryption`.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Union

from b2buckets.base.exceptions import FieldValidationError


class EncryptionAlgorithm(str, Enum):
    """AES256 is the only algorithm B2 supports."""

    AES256 = "AES256"


class EncryptionMode(str, Enum):
    SERVICE_MANAGED = "SSE-B2"
    CUSTOMER_MANAGED = "SSE-C"


def _algorithm(value: EncryptionAlgorithm | str) -> EncryptionAlgorithm:
    try:
        return EncryptionAlgorithm(value)
    except ValueError:
        raise FieldValidationError("algorithm", "unsupported encryption algorithm", value) from None


def _b64decode(value: str, field: str) -> bytes:
    if not isinstance(value, str) or not value:
        raise FieldValidationError(field, "must be a non-empty base64 string", value)
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        raise FieldValidationError(field, "must be valid base64", value) from None


@dataclass(frozen=True)
class ServiceManagedEncryption:
    algorithm: EncryptionAlgorithm = EncryptionAlgorithm.AES256

    def __post_init__(self) -> None:
        object.__setattr__(self, "algorithm", _algorithm(self.algorithm))

    @property
    def mode(self) -> EncryptionMode:
        return EncryptionMode.SERVICE_MANAGED

    def to_headers(self) -> dict[str, str]:
        return {"X-Bz-Server-Side-Encryption": self.algorithm.value}


@dataclass(frozen=True)
class CustomerManagedEncryption:
    """Encryption with a caller-supplied key.

    Attributes:
        algorithm: Encryption algorithm.
        customer_key: Base64 encoding of the raw key.
        customer_key_md5: Base64 encoding of the raw key's MD5 digest.
    """

    algorithm: EncryptionAlgorithm
    customer_key: str
    customer_key_md5: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "algorithm", _algorithm(self.algorithm))
        key = _b64decode(self.customer_key, "customer_key")
        digest = _b64decode(self.customer_key_md5, "customer_key_md5")
        if digest != hashlib.md5(key).digest():
            raise FieldValidationError(
                "customer_key_md5", "must be the MD5 digest of the customer key"
            )

    @classmethod
    def from_key(
        cls,
        key: bytes | str,
        algorithm: EncryptionAlgorithm = EncryptionAlgorithm.AES256,
    ) -> CustomerManagedEncryption:
        """Derive the base64 key and digest from a raw key."""
        raw = key.encode("utf-8") if isinstance(key, str) else key
        return cls(
            algorithm=algorithm,
            customer_key=base64.b64encode(raw).decode("ascii"),
            customer_key_md5=base64.b64encode(hashlib.md5(raw).digest()).decode("ascii"),
        )

    @property
    def mode(self) -> EncryptionMode:
        return EncryptionMode.CUSTOMER_MANAGED

    def to_headers(self) -> dict[str, str]:
        return {
            "X-Bz-Server-Side-Encryption-Customer-Algorithm": self.algorithm.value,
            "X-Bz-Server-Side-Encryption-Customer-Key": self.customer_key,
            "X-Bz-Server-Side-Encryption-Customer-Key-Md5": self.customer_key_md5,
        }

    def __repr__(self) -> str:
        return f"CustomerManagedEncryption(algorithm={self.algorithm.value!r}, customer_key='***')"


@dataclass(frozen=True)
class NoEncryption:
    @property
    def mode(self) -> None:
        return None

    def to_headers(self) -> dict[str, str]:
        return {}


EncryptionConfig = Union[ServiceManagedEncryption, CustomerManagedEncryption, NoEncryption]
