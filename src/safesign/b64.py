"""
URL-Safe Base64 Codec
=====================

Unpadded URL-safe base64 used to render signatures and timestamps inside
signed tokens.

Two flavours are provided:
- ``encode`` / ``decode`` operate on buffers of any length.
- ``Base64SizedEncoder`` operates on a fixed input size, with the encoded
  length known up front via ``output_size``.

Decoding is strict: padding, characters outside of the alphabet and trailing
bits in the last symbol are rejected, so every byte string has exactly one
accepted encoding.
"""

import base64
import logging
import string
from typing import Union

from .error_handling import InvalidByte, InvalidLastSymbol, InvalidLength

logger = logging.getLogger(__name__)

URL_SAFE_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits + "-_"

# '=' is not emitted (no padding) but still may not be used as a separator
BASE64_ALPHABET = frozenset(URL_SAFE_ALPHABET + "=")

_SYMBOL_VALUES = {symbol: index for index, symbol in enumerate(URL_SAFE_ALPHABET)}


def output_size(input_size: int) -> int:
    """
    Length of the unpadded base64 encoding of ``input_size`` bytes.

    3 input bytes become 4 symbols; a leftover byte needs 2 symbols and two
    leftover bytes need 3.
    """
    if input_size < 0:
        raise ValueError("input_size must be non-negative")
    remainder = input_size % 3
    return (input_size // 3) * 4 + remainder + min(remainder, 1)


def in_alphabet(char: str) -> bool:
    """Return whether ``char`` belongs to the URL-safe base64 alphabet."""
    return char in BASE64_ALPHABET


def encode(data: Union[bytes, bytearray, str]) -> str:
    """Encode ``data`` as unpadded URL-safe base64."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _validate(encoded: str) -> None:
    for offset, symbol in enumerate(encoded):
        if symbol not in _SYMBOL_VALUES:
            raise InvalidByte(offset, symbol)

    remainder = len(encoded) % 4
    if remainder == 1:
        raise InvalidLength(
            "Encoded length cannot be produced by base64",
            {"encoded_length": len(encoded)},
        )

    # The unused low bits of the final symbol must be zero
    unused_bits_mask = {2: 0x0F, 3: 0x03}.get(remainder)
    if unused_bits_mask is not None:
        last = encoded[-1]
        if _SYMBOL_VALUES[last] & unused_bits_mask:
            raise InvalidLastSymbol(len(encoded) - 1, last)


def decode(encoded: Union[str, bytes]) -> bytes:
    """
    Decode unpadded URL-safe base64.

    Raises:
        InvalidByte: A character outside of the alphabet (padding included)
        InvalidLength: The length is not a valid unpadded base64 length
        InvalidLastSymbol: The last symbol has non-zero trailing bits
    """
    if isinstance(encoded, (bytes, bytearray)):
        try:
            encoded = encoded.decode("ascii")
        except UnicodeDecodeError as e:
            raise InvalidByte(e.start, chr(encoded[e.start])) from e

    _validate(encoded)
    padded = encoded + "=" * (-len(encoded) % 4)
    return base64.b64decode(padded, altchars=b"-_", validate=True)


class Base64SizedEncoder:
    """
    Codec for byte strings of one fixed length.

    The encoded size is derived from the input size at construction, so
    framing buffers can be sized before anything is encoded, and decoded
    values of any other length are rejected.

    Example:
        >>> encoder = Base64SizedEncoder(20)
        >>> encoder.output_size
        27
    """

    def __init__(self, input_size: int):
        if input_size < 0:
            raise ValueError("input_size must be non-negative")
        self.input_size = input_size
        self.output_size = output_size(input_size)

    def encode(self, data: bytes) -> str:
        if len(data) != self.input_size:
            raise ValueError(
                f"Expected {self.input_size} bytes to encode, got {len(data)}"
            )
        encoded = encode(data)
        assert len(encoded) == self.output_size
        return encoded

    def decode(self, encoded: Union[str, bytes]) -> bytes:
        """Decode ``encoded``, requiring exactly ``input_size`` bytes of output."""
        if len(encoded) != self.output_size:
            raise InvalidLength(
                "Encoded length does not match the expected size",
                {"expected": self.output_size, "actual": len(encoded)},
            )
        decoded = decode(encoded)
        if len(decoded) != self.input_size:
            raise InvalidLength(
                "Decoded length does not match the expected size",
                {"expected": self.input_size, "actual": len(decoded)},
            )
        return decoded

    def __repr__(self) -> str:
        return f"Base64SizedEncoder(input_size={self.input_size})"
