"""
Key Derivation
==============

Derives the MAC key from the caller's secret key and a salt, namespacing
signatures so a value signed under one salt is not valid under another.

This is NOT password hardening: there is no iteration count and no deliberate
slowness. Use long random secret keys.

Strategies:
- ``Concat``: ``digest(salt + secret_key)``
- ``DjangoConcat`` (default): ``digest(salt + "signer" + secret_key)``
- ``Hmac``: ``hmac(key=secret_key, message=salt)``
"""

import hmac
import logging
from abc import ABC, abstractmethod
from typing import Dict, Type, Union

from .algorithm import DigestMethod, resolve_digest
from .error_handling import SigningConfigurationError

logger = logging.getLogger(__name__)

KeyMaterial = Union[str, bytes]


def want_bytes(value: KeyMaterial) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


class DeriveKey(ABC):
    """Interface for key derivation strategies."""

    name: str = ""

    @abstractmethod
    def derive_key(
        self, secret_key: KeyMaterial, salt: KeyMaterial, digest_method: DigestMethod
    ) -> bytes:
        """
        Derive the signing key.

        Args:
            secret_key: Caller supplied secret key
            salt: Namespace for the signatures
            digest_method: hashlib name or constructor

        Returns:
            Derived key, sized to the digest output
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Concat(DeriveKey):
    name = "concat"

    def derive_key(self, secret_key, salt, digest_method):
        digest = resolve_digest(digest_method)()
        digest.update(want_bytes(salt))
        digest.update(want_bytes(secret_key))
        return digest.digest()


class DjangoConcat(DeriveKey):
    name = "django-concat"

    def derive_key(self, secret_key, salt, digest_method):
        digest = resolve_digest(digest_method)()
        digest.update(want_bytes(salt))
        digest.update(b"signer")
        digest.update(want_bytes(secret_key))
        return digest.digest()


class Hmac(DeriveKey):
    name = "hmac"

    def derive_key(self, secret_key, salt, digest_method):
        mac = hmac.new(want_bytes(secret_key), digestmod=resolve_digest(digest_method))
        mac.update(want_bytes(salt))
        return mac.digest()


KEY_DERIVATIONS: Dict[str, Type[DeriveKey]] = {
    Concat.name: Concat,
    DjangoConcat.name: DjangoConcat,
    Hmac.name: Hmac,
}

DEFAULT_KEY_DERIVATION = DjangoConcat.name


def get_key_derivation(name: Union[str, DeriveKey]) -> DeriveKey:
    """Look up a key derivation strategy by name ("concat", "django-concat", "hmac")."""
    if isinstance(name, DeriveKey):
        return name
    normalized = name.lower().replace("_", "-")
    try:
        return KEY_DERIVATIONS[normalized]()
    except KeyError:
        raise SigningConfigurationError(
            f"Unknown key derivation: {name}",
            {"key_derivation": name, "available": sorted(KEY_DERIVATIONS)},
        ) from None
