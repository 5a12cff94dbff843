"""Separator joining the segments of a signed token."""

from typing import Tuple

from . import b64
from .error_handling import InvalidSeparator, SeparatorNotFound

DEFAULT_SEPARATOR = "."


class Separator:
    """
    A single character that is guaranteed not to appear in URL-safe base64.

    Example:
        >>> Separator("!")
        Separator('!')
    """

    __slots__ = ("_char",)

    def __init__(self, char: str = DEFAULT_SEPARATOR):
        if not isinstance(char, str) or len(char) != 1 or b64.in_alphabet(char):
            raise InvalidSeparator(char)
        self._char = char

    @property
    def char(self) -> str:
        return self._char

    def encode(self) -> bytes:
        return self._char.encode("utf-8")

    def split(self, value: str) -> Tuple[str, str]:
        """
        Split ``value`` on the last occurrence of the separator.

        Raises:
            SeparatorNotFound: The separator does not occur in ``value``
        """
        head, sep, tail = value.rpartition(self._char)
        if not sep:
            raise SeparatorNotFound(self)
        return head, tail

    def __str__(self) -> str:
        return self._char

    def __repr__(self) -> str:
        return f"Separator({self._char!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Separator):
            return NotImplemented
        return self._char == other._char

    def __hash__(self) -> int:
        return hash(self._char)
