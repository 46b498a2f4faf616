"""CommandProcessor — the command loop over a Ledger."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TextIO

from tally.commands import Command, CommandTag
from tally.ledger import Ledger
from tally.otel import get_tracer
from tally.reader import TokenReader

logger = logging.getLogger(__name__)


@dataclass
class RunStats:
    """Counts from one processor run."""

    commands: int = 0
    queries: int = 0
    keys: int = 0


class CommandProcessor:
    """Reads a command count N, then applies exactly N commands.

    The processor owns its Ledger; pass one in to share or inspect state.
    Only queries produce output. Malformed input raises
    MalformedInputError at the offending token; results already yielded
    stay emitted and nothing after the failure is.
    """

    def __init__(self, ledger: Ledger | None = None):
        self.ledger = ledger if ledger is not None else Ledger()
        self._tracer = get_tracer("tally")

    def apply(self, command: Command) -> int | None:
        """Apply one command. Returns the value for queries, else None."""
        if command.tag is CommandTag.ACCUMULATE:
            value = self.ledger.accumulate(command.key, command.amount)
            logger.debug("accumulate %s %+d -> %d", command.key, command.amount, value)
            return None
        if command.tag is CommandTag.RESET:
            self.ledger.reset(command.key)
            logger.debug("reset %s", command.key)
            return None
        value = self.ledger.query(command.key)
        logger.debug("query %s (tag %s) -> %d", command.key, command.raw_tag, value)
        return value

    def process(self, reader: TokenReader, stats: RunStats | None = None) -> Iterator[int]:
        """Read N, then yield each query result in input order.

        Nothing past the N-th command is read, so trailing input is
        neither validated nor consumed.
        """
        count = reader.next_int("command count")
        if count < 0:
            logger.warning("Negative command count %d; no commands processed", count)

        for _ in range(count):
            command = Command.read(reader)
            result = self.apply(command)
            if stats is not None:
                stats.commands += 1
            if result is not None:
                if stats is not None:
                    stats.queries += 1
                yield result

    def run(self, stdin: Iterable[str], stdout: TextIO) -> RunStats:
        """Stream commands from *stdin*, write one line per query to *stdout*."""
        stats = RunStats()
        with self._tracer.start_as_current_span("tally.run") as span:
            try:
                for value in self.process(TokenReader(stdin), stats):
                    stdout.write(f"{value}\n")
            finally:
                stats.keys = len(self.ledger)
                span.set_attribute("tally.commands", stats.commands)
                span.set_attribute("tally.queries", stats.queries)
                span.set_attribute("tally.keys", stats.keys)
        return stats

    def process_text(self, text: str) -> list[int]:
        """Process a whole input string and return the query results."""
        return list(self.process(TokenReader.from_text(text)))
