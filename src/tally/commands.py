"""Command value type and tag dispatch."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from tally.reader import TokenReader


class CommandTag(IntEnum):
    ACCUMULATE = 1
    RESET = 2
    QUERY = 3

    @classmethod
    def from_raw(cls, raw: int) -> CommandTag:
        """Map a raw tag to its operation. Anything other than 1 or 2 queries."""
        if raw == cls.ACCUMULATE:
            return cls.ACCUMULATE
        if raw == cls.RESET:
            return cls.RESET
        return cls.QUERY


@dataclass(frozen=True)
class Command:
    """One parsed command.

    ``raw_tag`` keeps the tag exactly as read (e.g. 7 for a query
    spelled with tag 7); ``amount`` is only set for accumulate.
    """

    tag: CommandTag
    key: str
    amount: int | None = None
    raw_tag: int | None = None

    @classmethod
    def read(cls, reader: TokenReader) -> Command:
        """Consume one command from *reader*.

        Raises MalformedInputError on a non-integer tag or amount, or if
        input ends mid-command.
        """
        raw = reader.next_int("command tag")
        tag = CommandTag.from_raw(raw)
        key = reader.next_word("key")
        amount = None
        if tag is CommandTag.ACCUMULATE:
            amount = reader.next_int("amount")
        return cls(tag=tag, key=key, amount=amount, raw_tag=raw)
