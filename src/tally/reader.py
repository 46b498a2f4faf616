"""TokenReader — whitespace-delimited token stream with typed reads."""

from __future__ import annotations

import re
import sys
from collections.abc import Iterable, Iterator

_INTEGER = re.compile(r"[+-]?[0-9]+")


class TokenReader:
    """Reads whitespace-separated tokens lazily from lines of text.

    Line boundaries carry no meaning; a command may span lines and a
    line may hold several commands.
    """

    def __init__(self, lines: Iterable[str]):
        self._tokens = self._split(lines)
        self._position = 0

    @classmethod
    def from_text(cls, text: str) -> TokenReader:
        return cls(text.splitlines())

    @staticmethod
    def _split(lines: Iterable[str]) -> Iterator[str]:
        for line in lines:
            yield from line.split()

    @property
    def position(self) -> int:
        """1-based index of the last token consumed (0 before any read)."""
        return self._position

    def next_word(self, expected: str = "token") -> str:
        from tally import MalformedInputError

        token = next(self._tokens, None)
        if token is None:
            raise MalformedInputError(expected)
        self._position += 1
        return token

    def next_int(self, expected: str = "integer") -> int:
        from tally import MalformedInputError

        token = self.next_word(expected)
        if not _INTEGER.fullmatch(token):
            raise MalformedInputError(expected, token=token, position=self._position)
        try:
            return int(token)
        except ValueError:
            # over the interpreter's int_max_str_digits limit
            limit = sys.get_int_max_str_digits()
            raise MalformedInputError(
                f"{expected} of at most {limit} digits", token=token, position=self._position
            ) from None

