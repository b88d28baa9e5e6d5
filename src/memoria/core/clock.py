"""Simulation clock helpers.

Stores and the manager only need a zero-argument callable returning the
current tick. ManualClock is the default and is driven by the host loop.
"""

from collections.abc import Callable

Clock = Callable[[], int]


class ManualClock:
    """Tick counter advanced explicitly by the owner."""

    def __init__(self, start: int = 0):
        self.ticks = start

    def __call__(self) -> int:
        return self.ticks

    def advance(self, ticks: int = 1) -> int:
        """Move the clock forward, return the new tick."""
        self.ticks += ticks
        return self.ticks

    def set(self, ticks: int) -> None:
        self.ticks = ticks
