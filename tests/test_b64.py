"""
Tests for the URL-safe base64 codec.

Covers the unpadded size formula, the fixed-size encoder, strict decoding
and the alphabet check used by separators.
"""

import pytest

from safesign import b64
from safesign.error_handling import (
    DecodeError,
    InvalidByte,
    InvalidLastSymbol,
    InvalidLength,
)


class TestOutputSize:
    """Test the unpadded base64 size formula."""

    @pytest.mark.parametrize(
        "input_size,expected",
        [(0, 0), (1, 2), (2, 3), (3, 4), (4, 6), (5, 7), (6, 8), (8, 11), (20, 27), (32, 43), (64, 86)],
    )
    def test_output_size(self, input_size, expected):
        assert b64.output_size(input_size) == expected

    def test_negative_size_rejected(self):
        with pytest.raises(ValueError):
            b64.output_size(-1)


class TestBase64SizedEncoder:
    """Test the fixed-size encoder against known encodings of repeated 'a'."""

    @pytest.mark.parametrize(
        "size,expected",
        [
            (1, "YQ"),
            (2, "YWE"),
            (3, "YWFh"),
            (4, "YWFhYQ"),
            (5, "YWFhYWE"),
            (6, "YWFhYWFh"),
            (7, "YWFhYWFhYQ"),
            (8, "YWFhYWFhYWE"),
            (9, "YWFhYWFhYWFh"),
            (10, "YWFhYWFhYWFhYQ"),
            (11, "YWFhYWFhYWFhYWE"),
            (12, "YWFhYWFhYWFhYWFh"),
            (13, "YWFhYWFhYWFhYWFhYQ"),
            (14, "YWFhYWFhYWFhYWFhYWE"),
            (15, "YWFhYWFhYWFhYWFhYWFh"),
        ],
    )
    def test_encode_known_values(self, size, expected):
        encoder = b64.Base64SizedEncoder(size)
        encoded = encoder.encode(b"a" * size)

        assert encoded == expected
        assert len(encoded) == encoder.output_size

    def test_encode_rejects_wrong_input_size(self):
        encoder = b64.Base64SizedEncoder(3)
        with pytest.raises(ValueError):
            encoder.encode(b"ab")

    def test_decode_exact_size(self):
        encoder = b64.Base64SizedEncoder(3)
        assert encoder.decode("YWFh") == b"aaa"

    def test_decode_rejects_truncated(self):
        encoder = b64.Base64SizedEncoder(3)
        with pytest.raises(InvalidLength):
            encoder.decode("YWE")

    def test_decode_rejects_oversized(self):
        encoder = b64.Base64SizedEncoder(3)
        with pytest.raises(InvalidLength):
            encoder.decode("YWFhYQ")

    def test_decode_rejects_padding(self):
        encoder = b64.Base64SizedEncoder(2)
        with pytest.raises(DecodeError):
            encoder.decode("YWE=")

    def test_zero_size(self):
        encoder = b64.Base64SizedEncoder(0)
        assert encoder.output_size == 0
        assert encoder.encode(b"") == ""
        assert encoder.decode("") == b""


class TestFreeFunctions:
    """Test the variable-length encode/decode helpers."""

    def test_encode_is_url_safe_and_unpadded(self):
        assert b64.encode(b"\xfb\xff") == "-_8"
        assert b64.encode("hello world") == "aGVsbG8gd29ybGQ"

    def test_decode(self):
        assert b64.decode("-_8") == b"\xfb\xff"
        assert b64.decode(b"aGVsbG8gd29ybGQ") == b"hello world"
        assert b64.decode("") == b""

    def test_decode_invalid_byte(self):
        with pytest.raises(InvalidByte) as exc_info:
            b64.decode("ab+c")
        assert exc_info.value.offset == 2
        assert exc_info.value.byte == "+"

    def test_decode_rejects_standard_alphabet(self):
        with pytest.raises(InvalidByte):
            b64.decode("ab/c")

    def test_decode_invalid_length(self):
        with pytest.raises(InvalidLength):
            b64.decode("abcde")

    def test_decode_invalid_last_symbol(self):
        # "YR" would decode to b"a" too if trailing bits were ignored
        assert b64.decode("YQ") == b"a"
        with pytest.raises(InvalidLastSymbol) as exc_info:
            b64.decode("YR")
        assert exc_info.value.offset == 1

    def test_decode_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            b64.decode("!!")


class TestAlphabet:
    """Test the alphabet membership check."""

    @pytest.mark.parametrize("char", list("azAZ09-_="))
    def test_in_alphabet(self, char):
        assert b64.in_alphabet(char)

    @pytest.mark.parametrize("char", list(".!:|+/ ~é"))
    def test_not_in_alphabet(self, char):
        assert not b64.in_alphabet(char)
