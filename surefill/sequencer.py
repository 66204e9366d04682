"""Monotonic counter that is the root of every unique value."""
from __future__ import annotations

from itertools import count
from typing import Iterator


class Sequencer:
    """Produces strictly increasing positive integers.

    Advancing an itertools.count is a single atomic step under the GIL so
    concurrent callers never observe the same value and never block.
    Construct one per isolation scope and share it by reference.
    """

    def __init__(self, start: int = 0) -> None:
        self._counter: Iterator[int] = count(start + 1)

    def next_long(self) -> int:
        """Return the next value of the counter."""
        return next(self._counter)


# Process wide sequencer used by the module level unique_* functions.
SEQUENCER: Sequencer = Sequencer()
