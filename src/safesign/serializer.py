"""
Signed Serializers
==================

Serializes values to JSON, optionally re-encodes the JSON text, and signs the
result. The signers never look inside the payload; they only see the string
produced here.

Encodings:
- ``NullEncoding``: the JSON text is signed as-is
- ``URLSafeEncoding``: the JSON text is wrapped in unpadded URL-safe base64

Usage:
    from safesign import default_builder
    from safesign.serializer import Serializer, URLSafeEncoding

    serializer = Serializer(default_builder("secret key").build(), URLSafeEncoding())
    token = serializer.sign({"user_id": 42})
    assert serializer.unsign(token) == {"user_id": 42}
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from . import b64, json_utils
from . import timestamp as timestamp_codec
from .error_handling import (
    BadSignature,
    BadTimedSignature,
    DecodeError,
    EncodingError,
    PayloadInvalid,
    SerializationError,
    SignatureMismatch,
    TimedSignatureMismatch,
    with_error_handling,
)
from .separator import Separator
from .timed import TimestampSigner, UnsignedValue

if TYPE_CHECKING:
    from .signer import Signer

logger = logging.getLogger(__name__)


class Encoding(ABC):
    """Text transform applied between serialization and signing."""

    @abstractmethod
    def encode(self, serialized_input: str) -> str:
        pass

    @abstractmethod
    def decode(self, encoded_input: str) -> str:
        """
        Reverse ``encode``.

        Raises:
            EncodingError: ``encoded_input`` was not produced by ``encode``
        """
        pass


class NullEncoding(Encoding):
    """Passthrough encoding."""

    def encode(self, serialized_input: str) -> str:
        return serialized_input

    def decode(self, encoded_input: str) -> str:
        return encoded_input


class URLSafeEncoding(Encoding):
    """Unpadded URL-safe base64 of the UTF-8 text."""

    def encode(self, serialized_input: str) -> str:
        return b64.encode(serialized_input)

    def decode(self, encoded_input: str) -> str:
        try:
            return b64.decode(encoded_input).decode("utf-8")
        except DecodeError as e:
            raise EncodingError(f"Payload is not valid base64: {e}") from e
        except UnicodeDecodeError as e:
            raise EncodingError(
                f"Payload is not valid UTF-8: {e.reason}", {"offset": e.start}
            ) from e


@with_error_handling(SerializationError)
def serialize(value: Any) -> str:
    return json_utils.dumps(value)


@with_error_handling(SerializationError)
def parse(serialized: str) -> Any:
    return json_utils.loads(serialized)


def decode_payload(value: str, encoding: Encoding) -> str:
    """Undo ``encoding``, reporting failures as ``PayloadInvalid``."""
    try:
        return encoding.decode(value)
    except EncodingError as e:
        raise PayloadInvalid(value, e) from e


def deserialize(value: str, encoding: Encoding) -> Any:
    """Decode and parse a verified payload, reporting failures as ``PayloadInvalid``."""
    decoded = decode_payload(value, encoding)
    try:
        return parse(decoded)
    except SerializationError as e:
        raise PayloadInvalid(value, e) from e


class Serializer:
    """Signs JSON-serializable values with a ``Signer``."""

    def __init__(self, signer: "Signer", encoding: Optional[Encoding] = None):
        self.signer = signer
        self.encoding = encoding if encoding is not None else NullEncoding()

    @classmethod
    def with_signer(cls, signer: "Signer", encoding: Optional[Encoding] = None) -> "Serializer":
        return cls(signer, encoding)

    @property
    def separator(self) -> Separator:
        return self.signer.separator

    def sign(self, value: Any) -> str:
        """
        Serialize and sign ``value``.

        Raises:
            SerializationError: ``value`` is not JSON serializable
        """
        return self.signer.sign(self.encoding.encode(serialize(value)))

    def unsign(self, signed_value: str) -> Any:
        """
        Verify ``signed_value`` and return the deserialized value.

        Raises:
            SeparatorNotFound, SignatureMismatch: Verification failed
            PayloadInvalid: Verified, but the payload cannot be parsed
        """
        return deserialize(self.signer.unsign(signed_value), self.encoding)

    def unsign_to_string(self, signed_value: str) -> str:
        """Verify ``signed_value`` and return the decoded (still serialized) payload."""
        return decode_payload(self.signer.unsign(signed_value), self.encoding)


class TimedSerializer:
    """Signs JSON-serializable values together with a timestamp."""

    def __init__(self, signer: TimestampSigner, encoding: Optional[Encoding] = None):
        self.signer = signer
        self.encoding = encoding if encoding is not None else NullEncoding()

    @classmethod
    def with_signer(cls, signer: TimestampSigner, encoding: Optional[Encoding] = None) -> "TimedSerializer":
        return cls(signer, encoding)

    @property
    def separator(self) -> Separator:
        return self.signer.separator

    def sign(self, value: Any) -> str:
        return self.sign_with_timestamp(value, timestamp_codec.now())

    def sign_with_timestamp(self, value: Any, timestamp: timestamp_codec.TimestampLike) -> str:
        return self.signer.sign_with_timestamp(self.encoding.encode(serialize(value)), timestamp)

    def unsign(self, signed_value: str) -> UnsignedValue[Any]:
        """
        Verify ``signed_value`` and return the deserialized value and timestamp.

        Raises:
            BadTimedSignature: Any verification, timestamp or payload failure
        """
        unsigned = self.signer.unsign(signed_value)
        try:
            value = deserialize(unsigned.value, self.encoding)
        except BadSignature as e:
            raise BadTimedSignature.from_bad_signature(e) from e
        return UnsignedValue(value, unsigned.timestamp)


class UnverifiedValue:
    """
    A parsed but not yet verified signed value.

    Lets callers look at the payload (e.g. to pick the right key) before
    checking the signature. Nothing read from ``unverified_value`` can be
    trusted until ``verify`` succeeds.
    """

    def __init__(self, unverified_value: Any, raw_value: str, signature: str):
        self.unverified_value = unverified_value
        self._raw_value = raw_value
        self._signature = signature

    @classmethod
    def from_str(cls, separator: Separator, encoding: Encoding, signed_value: str) -> "UnverifiedValue":
        raw_value, signature = separator.split(signed_value)
        return cls(deserialize(raw_value, encoding), raw_value, signature)

    def verify(self, signer: "Signer") -> Any:
        """
        Return the value if its signature is valid for ``signer``.

        Raises:
            SignatureMismatch: The signature does not match
        """
        if signer.verify_encoded_signature(self._raw_value, self._signature):
            return self.unverified_value
        raise SignatureMismatch(self._signature, self._raw_value)


class UnverifiedTimedValue:
    """Timed counterpart of ``UnverifiedValue``."""

    def __init__(self, unverified_value: Any, unverified_timestamp: datetime, raw_value: str, signature: str):
        self.unverified_value = unverified_value
        self.unverified_timestamp = unverified_timestamp
        self._raw_value = raw_value
        self._signature = signature

    @classmethod
    def from_str(cls, separator: Separator, encoding: Encoding, signed_value: str) -> "UnverifiedTimedValue":
        try:
            raw_value, signature = separator.split(signed_value)
            raw_serialized_value, encoded_timestamp = separator.split(raw_value)
            timestamp = timestamp_codec.decode(encoded_timestamp)
            value = deserialize(raw_serialized_value, encoding)
        except BadSignature as e:
            raise BadTimedSignature.from_bad_signature(e) from e
        return cls(value, timestamp, raw_value, signature)

    def verify(self, timestamp_signer: TimestampSigner) -> UnsignedValue[Any]:
        """
        Return the value and timestamp if the signature is valid.

        Raises:
            TimedSignatureMismatch: The signature does not match
        """
        signer = timestamp_signer.as_signer()
        if signer.verify_encoded_signature(self._raw_value, self._signature):
            return UnsignedValue(self.unverified_value, self.unverified_timestamp)
        raise TimedSignatureMismatch(self._signature, self._raw_value)


def serializer_with_signer(signer: "Signer", encoding: Optional[Encoding] = None) -> Serializer:
    """Factory function for a ``Serializer``."""
    return Serializer(signer, encoding)


def timed_serializer_with_signer(
    signer: TimestampSigner, encoding: Optional[Encoding] = None
) -> TimedSerializer:
    """Factory function for a ``TimedSerializer``."""
    return TimedSerializer(signer, encoding)
