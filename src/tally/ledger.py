"""Ledger — the key to counter mapping."""

from __future__ import annotations

from collections.abc import Iterator


class Ledger:
    """In-memory mapping from string keys to integer counters.

    Counters are Python ints, which are arbitrary precision: sums never
    overflow and never wrap. The practical bound is on input instead:
    TokenReader rejects integer tokens longer than the interpreter's
    int_max_str_digits limit (4300 by default, see
    sys.set_int_max_str_digits).

    Every operation materializes the key it touches. In particular
    query() is NOT a pure read: an absent key is stored with 0 before
    0 is returned, so a later accumulate() starts from that stored 0.

    State is lost when the instance is discarded.
    """

    def __init__(self):
        self._counters: dict[str, int] = {}

    def accumulate(self, key: str, amount: int) -> int:
        """Add *amount* to *key*, inserting it with *amount* if absent."""
        if key in self._counters:
            self._counters[key] += amount
        else:
            self._counters[key] = amount
        return self._counters[key]

    def reset(self, key: str) -> None:
        self._counters[key] = 0

    def query(self, key: str) -> int:
        """Return the value for *key*, inserting 0 first if it is absent."""
        return self._counters.setdefault(key, 0)

    def snapshot(self) -> dict[str, int]:
        """Plain copy of the current state."""
        return dict(self._counters)

    def __contains__(self, key: object) -> bool:
        return key in self._counters

    def __len__(self) -> int:
        return len(self._counters)

    def __iter__(self) -> Iterator[str]:
        return iter(self._counters)

    def __repr__(self) -> str:
        return f"Ledger({self._counters!r})"
