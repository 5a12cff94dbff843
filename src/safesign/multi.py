"""
Key Rotation Fallbacks
======================

Sign with a primary signer or serializer while still accepting tokens issued
under older keys.

- Signing always goes through the primary.
- Unsigning tries the primary first, then each fallback in the order it was
  added, stopping at the first success.
- If every fallback fails, the primary's error is raised.

Fallbacks only need an ``unsign_to_string(signed_value) -> str`` method, so
any ``Signer``, ``Serializer`` or ``MultiSigner`` can be used. Timestamp
signers and timed serializers do not provide it: a fallback returns the bare
payload, and tokens accepted that way could never be checked for expiry.

Usage:
    primary = Serializer(default_builder("new key").build())
    fallback = Serializer(default_builder("old key").build())

    multi = MultiSerializer(primary).add_fallback(fallback)
    multi.unsign(old_token)  # accepted through the fallback
"""

import logging
from typing import Any, List, Optional, Protocol, runtime_checkable

from .error_handling import BadSignature, PayloadInvalid, SerializationError
from .serializer import parse

logger = logging.getLogger(__name__)


@runtime_checkable
class UnsignToString(Protocol):
    """Anything able to verify a token and return its payload as a string."""

    def unsign_to_string(self, signed_value: str) -> str: ...


def _check_unsign_to_string(obj: Any, role: str) -> None:
    if not isinstance(obj, UnsignToString):
        raise TypeError(
            f"{role} must provide unsign_to_string(), got {type(obj).__name__}"
        )


class _FallbackChain:
    def __init__(self):
        self.fallbacks: List[UnsignToString] = []

    def add_fallback(self, fallback: UnsignToString):
        """
        Register ``fallback``; fallbacks are tried in registration order.

        Add the fallback most likely to succeed first.
        """
        _check_unsign_to_string(fallback, "Fallback")
        self.fallbacks.append(fallback)
        return self

    def _unsign_with_fallbacks(self, signed_value: str) -> Optional[str]:
        for index, fallback in enumerate(self.fallbacks):
            try:
                unsigned = fallback.unsign_to_string(signed_value)
            except BadSignature:
                continue
            logger.info(f"Value unsigned with fallback #{index} ({type(fallback).__name__})")
            return unsigned
        return None


class MultiSigner(_FallbackChain):
    """Rotation-aware wrapper around a ``Signer`` for plain strings."""

    def __init__(self, primary_signer):
        super().__init__()
        _check_unsign_to_string(primary_signer, "Primary signer")
        self.primary_signer = primary_signer

    def sign(self, value: str) -> str:
        return self.primary_signer.sign(value)

    def unsign(self, signed_value: str) -> str:
        """
        Verify with the primary, then with each fallback.

        Raises:
            BadSignature: The primary's error, when no fallback succeeds
        """
        try:
            return self.primary_signer.unsign_to_string(signed_value)
        except BadSignature as e:
            primary_error = e

        unsigned = self._unsign_with_fallbacks(signed_value)
        if unsigned is None:
            raise primary_error
        return unsigned

    def unsign_to_string(self, signed_value: str) -> str:
        return self.unsign(signed_value)


class MultiSerializer(_FallbackChain):
    """
    Rotation-aware wrapper around a ``Serializer``.

    When the primary succeeds, no fallback is consulted.
    """

    def __init__(self, primary_serializer):
        super().__init__()
        _check_unsign_to_string(primary_serializer, "Primary serializer")
        self.primary_serializer = primary_serializer

    def sign(self, value: Any) -> str:
        return self.primary_serializer.sign(value)

    def unsign(self, signed_value: str) -> Any:
        """
        Verify and deserialize with the primary, then with each fallback.

        Raises:
            PayloadInvalid: A fallback verified the value but it does not parse
            BadSignature: The primary's error, when no fallback succeeds
        """
        try:
            return self.primary_serializer.unsign(signed_value)
        except BadSignature as e:
            primary_error = e

        unsigned = self._unsign_with_fallbacks(signed_value)
        if unsigned is None:
            raise primary_error

        try:
            return parse(unsigned)
        except SerializationError as e:
            raise PayloadInvalid(signed_value, e) from e

    def unsign_to_string(self, signed_value: str) -> str:
        try:
            return self.primary_serializer.unsign_to_string(signed_value)
        except BadSignature as e:
            primary_error = e

        unsigned = self._unsign_with_fallbacks(signed_value)
        if unsigned is None:
            raise primary_error
        return unsigned
