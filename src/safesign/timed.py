"""
Timestamp Signer
================

Adds an authenticated timestamp to signed values:
``<value><sep><base64(timestamp)><sep><base64(signature)>``.

The timestamp is folded into the same MAC computation as the value, so a
timestamp cannot be moved onto another value's signature.
"""

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Generic, Optional, TypeVar, Union

from . import timestamp as timestamp_codec
from .error_handling import (
    BadSignature,
    BadTimedSignature,
    SeparatorNotFound,
    TimestampExpired,
    TimestampMissing,
)
from .separator import Separator

if TYPE_CHECKING:
    from .signer import Signer

logger = logging.getLogger(__name__)

T = TypeVar("T")

MaxAge = Union[timedelta, int, float]


def to_timedelta(max_age: MaxAge) -> timedelta:
    if isinstance(max_age, timedelta):
        return max_age
    return timedelta(seconds=max_age)


class UnsignedValue(Generic[T]):
    """
    A value that passed signature verification, with its signing timestamp.

    Only produced by a successful ``unsign``.
    """

    __slots__ = ("value", "timestamp")

    def __init__(self, value: T, timestamp: datetime):
        self.value = value
        self.timestamp = timestamp

    def value_if_not_expired(self, max_age: MaxAge, now: Optional[datetime] = None) -> T:
        """
        Return the value unless its timestamp is older than ``max_age``.

        A timestamp in the future (clock skew, forward-dated tokens) is
        never considered expired.

        Raises:
            TimestampExpired: More than ``max_age`` elapsed since signing
        """
        max_age = to_timedelta(max_age)
        current = timestamp_codec.to_datetime(now) if now is not None else timestamp_codec.now()
        elapsed = current - self.timestamp

        if elapsed > max_age and elapsed >= timedelta(0):
            raise TimestampExpired(self.timestamp, max_age, self.value)
        return self.value

    def __iter__(self):
        # Allows ``value, timestamp = signer.unsign(token)``
        yield self.value
        yield self.timestamp

    def __repr__(self) -> str:
        return f"UnsignedValue(value={self.value!r}, timestamp={self.timestamp.isoformat()!r})"


class TimestampSigner:
    """
    Wraps a ``Signer`` and signs values together with a timestamp.

    Usage:
        signer = default_builder("secret key").build().into_timestamp_signer()
        signed = signer.sign("hello world!")
        value = signer.unsign(signed).value_if_not_expired(60)
    """

    def __init__(self, signer: "Signer"):
        self._signer = signer

    def as_signer(self) -> "Signer":
        """The wrapped signer, for signing without timestamps."""
        return self._signer

    @property
    def separator(self) -> Separator:
        return self._signer.separator

    def sign_with_timestamp(self, value: str, timestamp: timestamp_codec.TimestampLike) -> str:
        """Sign ``value`` with an arbitrary ``timestamp``."""
        encoded_timestamp = timestamp_codec.encode(timestamp)
        sep = self.separator.char

        signature = (
            self._signer.get_signer()
            .input_chained(value.encode("utf-8"))
            .input_chained(self.separator.encode())
            .input_chained(encoded_timestamp.encode("ascii"))
            .sign()
        )
        return "".join((value, sep, encoded_timestamp, sep, signature.base64_encode()))

    def sign(self, value: str) -> str:
        """Sign ``value`` with the current time."""
        return self.sign_with_timestamp(value, timestamp_codec.now())

    def unsign(self, signed_value: str) -> UnsignedValue[str]:
        """
        Verify ``signed_value`` and return its value and timestamp.

        Raises:
            TimedSeparatorNotFound: No separator in ``signed_value``
            TimedSignatureMismatch: Signature malformed or not matching
            TimestampMissing: Correctly signed, but without a timestamp
            TimestampInvalid: The signed timestamp cannot be decoded
        """
        try:
            payload = self._signer.unsign(signed_value)
        except BadSignature as e:
            raise BadTimedSignature.from_bad_signature(e) from e

        try:
            value, encoded_timestamp = self.separator.split(payload)
        except SeparatorNotFound:
            raise TimestampMissing(payload) from None

        return UnsignedValue(value, timestamp_codec.decode(encoded_timestamp))

    def validate(self, signed_value: str, max_age: Optional[MaxAge] = None) -> bool:
        """Return True if ``signed_value`` unsigns (and is not expired), without raising."""
        try:
            unsigned = self.unsign(signed_value)
            if max_age is not None:
                unsigned.value_if_not_expired(max_age)
        except BadSignature:
            return False
        return True

    def __repr__(self) -> str:
        return f"TimestampSigner({self._signer!r})"
