"""Tally — an in-memory key/counter ledger driven by a command stream."""

from __future__ import annotations

from importlib.metadata import version as _pkg_version

try:
    __version__ = _pkg_version("tally")
except Exception:  # pragma: no cover — editable installs, test envs
    __version__ = "0.0.0-dev"


class TallyError(Exception):
    """Base class for all tally errors."""

    pass


class MalformedInputError(TallyError):
    """Raised when the command stream does not match the input grammar.

    *position* is the 1-based index of the offending token, or ``None``
    when input ended early. *expected* names what the reader wanted.
    """

    def __init__(self, expected: str, token: str | None = None, position: int | None = None):
        self.expected = expected
        self.token = token
        self.position = position
        if token is None:
            msg = f"Malformed input: expected {expected}, got end of input"
        else:
            shown = token if len(token) <= 40 else token[:37] + "..."
            msg = f"Malformed input: expected {expected}, got '{shown}' at token {position}"
        super().__init__(msg)


class TallyConfigError(TallyError):
    """Raised for invalid test-case files and other load-time problems."""

    pass


from tally.commands import Command, CommandTag  # noqa: E402
from tally.ledger import Ledger  # noqa: E402
from tally.processor import CommandProcessor, RunStats  # noqa: E402
from tally.reader import TokenReader  # noqa: E402

__all__ = [
    "__version__",
    "Command",
    "CommandProcessor",
    "CommandTag",
    "Ledger",
    "MalformedInputError",
    "RunStats",
    "TallyConfigError",
    "TallyError",
    "TokenReader",
]
