import logging
from pathlib import Path

import pytest

HERE = Path(__file__).parent

logger = logging.getLogger("ipsbench")
logger.setLevel(logging.DEBUG)


class FakeClock:
    """
    A deterministic clock that only advances when told to, or by a fixed tick
    on every read, which models the overhead of reading the clock itself.

    Time is kept in integer nanoseconds to avoid drift from float accumulation.
    """

    def __init__(self, tick: float = 0.0) -> None:
        self.ns = 0
        self.reads = 0
        self.tick_ns = round(tick * 1e9)

    def __call__(self) -> float:
        self.reads += 1
        self.ns += self.tick_ns
        return self.ns / 1e9

    def advance(self, seconds: float) -> None:
        self.ns += round(seconds * 1e9)

    def costing(self, seconds: float):
        """Returns an action that takes exactly ``seconds`` on this clock per call."""

        def action() -> None:
            self.advance(seconds)

        return action


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ticking_clock() -> FakeClock:
    """A clock that moves forward one millisecond each time it is read."""
    return FakeClock(tick=0.001)


@pytest.fixture(scope="session")
def testfolder() -> str:
    """A test directory for benchmark collection."""
    return str(HERE / "benchmarks")
