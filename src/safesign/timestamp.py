"""
Compact Timestamp Codec
=======================

Timestamps are stored as seconds since ``LEGACY_EPOCH`` (2011-01-01T00:00:00Z),
written as a big-endian integer with its leading zero bytes stripped, then
base64 encoded. This matches tokens produced by itsdangerous 0.x, so tokens
stay interchangeable with deployments still on that format. Changing the
epoch breaks compatibility with every token issued before the change.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Union

from . import b64
from .error_handling import DecodeError, TimestampInvalid

LEGACY_EPOCH = 1293840000

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

TIMESTAMP_SIZE = 8

TimestampLike = Union[datetime, int, float]


def now() -> datetime:
    return datetime.now(timezone.utc)


def to_datetime(timestamp: TimestampLike) -> datetime:
    """Normalize to an aware UTC datetime. Naive datetimes are taken as UTC."""
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is None:
            return timestamp.replace(tzinfo=timezone.utc)
        return timestamp.astimezone(timezone.utc)
    return UNIX_EPOCH + timedelta(seconds=timestamp)


def to_unix_seconds(timestamp: TimestampLike) -> int:
    if isinstance(timestamp, datetime):
        delta = to_datetime(timestamp) - UNIX_EPOCH
        return delta.days * 86400 + delta.seconds
    return math.floor(timestamp)


def encode(timestamp: TimestampLike) -> str:
    """
    Encode ``timestamp`` (second precision) into its compact base64 form.

    Raises:
        ValueError: The timestamp predates ``LEGACY_EPOCH`` or is too large
    """
    delta = to_unix_seconds(timestamp) - LEGACY_EPOCH
    if delta < 0:
        raise ValueError(f"Cannot encode timestamps before the legacy epoch ({LEGACY_EPOCH})")
    if delta >= 1 << (8 * TIMESTAMP_SIZE):
        raise ValueError("Timestamp does not fit in 8 bytes")

    significant = delta.to_bytes(TIMESTAMP_SIZE, "big").lstrip(b"\x00")
    return b64.encode(significant)


def decode(encoded: str) -> datetime:
    """
    Decode a compact timestamp back to an aware UTC datetime.

    Raises:
        TimestampInvalid: Bad base64, more than 8 bytes, or out of datetime range
    """
    try:
        raw = b64.decode(encoded)
    except DecodeError as e:
        raise TimestampInvalid(encoded) from e

    if len(raw) > TIMESTAMP_SIZE:
        raise TimestampInvalid(encoded)

    seconds = int.from_bytes(raw.rjust(TIMESTAMP_SIZE, b"\x00"), "big") + LEGACY_EPOCH
    try:
        return UNIX_EPOCH + timedelta(seconds=seconds)
    except OverflowError as e:
        raise TimestampInvalid(encoded) from e
