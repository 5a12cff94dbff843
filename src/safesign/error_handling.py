"""
Standardized Error Handling for Safesign
========================================

This module defines the exception taxonomy raised while signing and unsigning
values, plus the decorator used to convert collaborator failures (JSON
encoding, payload decoding) into that taxonomy.

Hierarchy:
- SafeSignError
  - InvalidSeparator
  - SigningConfigurationError
  - DecodeError (InvalidByte, InvalidLength, InvalidLastSymbol)
  - PayloadError (SerializationError, EncodingError)
  - BadSignature
    - SeparatorNotFound
    - SignatureMismatch
    - PayloadInvalid
    - BadTimedSignature
      - TimestampMissing, TimestampInvalid, TimestampExpired
      - TimedSeparatorNotFound, TimedSignatureMismatch, TimedPayloadInvalid
"""

import functools
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional, Type

logger = logging.getLogger(__name__)


class SafeSignError(Exception):
    """Base exception for all signing-related errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.context = context or {}
        super().__init__(message)

        # Failures are usually caused by untrusted input, keep them quiet
        context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        logger.debug(
            f"Signing error: {message}" + (f" ({context_str})" if context_str else "")
        )


class InvalidSeparator(SafeSignError, ValueError):
    """Raised when a separator collides with the URL-safe base64 alphabet."""

    def __init__(self, separator: str):
        self.separator = separator
        super().__init__(
            f"Separator {separator!r} is in the base64 alphabet, and thus cannot be used",
            {"separator": separator},
        )


class SigningConfigurationError(SafeSignError, ValueError):
    """Raised when a digest, algorithm or key derivation cannot be resolved."""

    pass


# =============================================================================
# Base64 decoding errors
# =============================================================================


class DecodeError(SafeSignError, ValueError):
    """Raised when URL-safe base64 text cannot be decoded."""

    pass


class InvalidByte(DecodeError):
    """A character outside of the URL-safe alphabet was found."""

    def __init__(self, offset: int, byte: str):
        self.offset = offset
        self.byte = byte
        super().__init__(
            f"Invalid byte {byte!r} at offset {offset}",
            {"offset": offset, "byte": byte},
        )


class InvalidLength(DecodeError):
    """The encoded or decoded length is not the one expected."""

    def __init__(self, message: str = "Invalid length", context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)


class InvalidLastSymbol(DecodeError):
    """The last symbol carries bits that do not belong to any decoded byte."""

    def __init__(self, offset: int, byte: str):
        self.offset = offset
        self.byte = byte
        super().__init__(
            f"Invalid last symbol {byte!r} at offset {offset}",
            {"offset": offset, "byte": byte},
        )


# =============================================================================
# Payload errors (serialization / encoding collaborators)
# =============================================================================


class PayloadError(SafeSignError):
    """Raised when a payload collaborator fails."""

    pass


class SerializationError(PayloadError):
    """Raised when a value cannot be serialized to or parsed from JSON."""

    pass


class EncodingError(PayloadError):
    """Raised when an encoded payload cannot be decoded back to text."""

    pass


# =============================================================================
# Unsigning errors
# =============================================================================


class BadSignature(SafeSignError):
    """Raised when a signed value cannot be unsigned."""

    pass


class SeparatorNotFound(BadSignature):
    """The signed value did not contain the expected separator."""

    def __init__(self, separator: Any):
        self.separator = separator
        super().__init__(
            f"Separator {str(separator)!r} not found in value.",
            {"separator": str(separator)},
        )


class SignatureMismatch(BadSignature):
    """The signature did not match what we expected it to be."""

    def __init__(self, signature: str, value: str):
        self.signature = signature
        self.value = value
        super().__init__(
            f"Signature {signature!r} does not match.", {"signature": signature}
        )


class PayloadInvalid(BadSignature):
    """The signature matched but the payload cannot be parsed."""

    def __init__(self, value: str, error: PayloadError):
        self.value = value
        self.error = error
        super().__init__(
            f"Payload cannot be parsed because {error}.",
            {"error_type": type(error).__name__},
        )


class BadTimedSignature(BadSignature):
    """Raised when a timestamp-signed value cannot be unsigned."""

    @classmethod
    def from_bad_signature(cls, error: BadSignature) -> "BadTimedSignature":
        """Map an untimed unsigning error onto the timed taxonomy."""
        if isinstance(error, BadTimedSignature):
            return error
        if isinstance(error, SeparatorNotFound):
            return TimedSeparatorNotFound(error.separator)
        if isinstance(error, SignatureMismatch):
            return TimedSignatureMismatch(error.signature, error.value)
        if isinstance(error, PayloadInvalid):
            return TimedPayloadInvalid(error.value, error.error)
        return BadTimedSignature(str(error), dict(error.context))


class TimedSeparatorNotFound(SeparatorNotFound, BadTimedSignature):
    """Separator missing from a timestamp-signed value."""

    pass


class TimedSignatureMismatch(SignatureMismatch, BadTimedSignature):
    """Signature mismatch on a timestamp-signed value."""

    pass


class TimedPayloadInvalid(PayloadInvalid, BadTimedSignature):
    """Unparseable payload on a timestamp-signed value."""

    pass


class TimestampMissing(BadTimedSignature):
    """The value was signed with the right key but carries no timestamp."""

    def __init__(self, value: str):
        self.value = value
        super().__init__("Timestamp missing")


class TimestampInvalid(BadTimedSignature):
    """The timestamp was signed but cannot be decoded to a point in time."""

    def __init__(self, timestamp: str):
        self.timestamp = timestamp
        super().__init__(
            f"Timestamp {timestamp!r} is invalid", {"timestamp": timestamp}
        )


class TimestampExpired(BadTimedSignature):
    """The timestamp is older than the allowed max age."""

    def __init__(self, timestamp: datetime, max_age: timedelta, value: Any):
        self.timestamp = timestamp
        self.max_age = max_age
        self.value = value
        super().__init__(
            f"Timestamp {timestamp.isoformat()} is older than {max_age} and is expired.",
            {"timestamp": timestamp.isoformat(), "max_age": str(max_age)},
        )


def with_error_handling(
    error_type: Type[SafeSignError] = SafeSignError,
    context: Optional[Dict[str, Any]] = None,
):
    """
    Decorator converting unexpected exceptions into a SafeSignError subtype.

    Args:
        error_type: Type of SafeSignError to raise
        context: Additional context to include in error
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except SafeSignError:
                raise
            except Exception as e:
                error_context = (context or {}).copy()
                error_context.update(
                    {
                        "function": func.__name__,
                        "original_error": str(e),
                        "original_error_type": type(e).__name__,
                    }
                )
                raise error_type(f"Error in {func.__name__}: {e}", error_context) from e

        return wrapper

    return decorator
