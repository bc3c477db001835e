"""Types for work units, measurements, and comparison reports."""

import enum
import sys
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from typing import Any

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from ipsbench.errors import ExecutionError


class Phase(enum.Enum):
    """The lifecycle of a single work unit inside a benchmark run."""

    PENDING = "pending"
    WARMING = "warming"
    MEASURING = "measuring"
    COMPLETED = "completed"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class WorkUnit:
    """
    A named unit of work whose throughput is measured.

    Parameters
    ----------
    name: str
        A unique display name for the unit, used in reports.
    action: Callable[[], Any]
        The zero-argument callable to invoke repeatedly. Its return value is discarded.
    """

    name: str
    action: Callable[[], Any] = field(repr=False)


@dataclass(frozen=True)
class MeasurementResult:
    """The throughput statistics of a single work unit after a completed measurement."""

    name: str
    iterations_per_second: float
    """Total iterations divided by the elapsed measurement time."""
    error_margin_percent: float
    """Confidence half-width of the per-batch throughput, relative to its mean, in percent."""
    total_iterations: int
    elapsed_seconds: float
    batches: int = 0
    """Number of timed batches in the measurement phase."""
    samples: tuple[float, ...] = field(default=(), repr=False)
    """Per-batch throughput samples, in iterations per second."""

    def to_json(self) -> dict[str, Any]:
        d = asdict(self)
        d["samples"] = list(self.samples)
        return d


@dataclass(frozen=True)
class ComparisonEntry:
    result: MeasurementResult
    slowdown_factor: float = 1.0

    @property
    def name(self) -> str:
        return self.result.name

    @property
    def iterations_per_second(self) -> float:
        return self.result.iterations_per_second


@dataclass(frozen=True)
class ComparisonReport:
    """
    A ranked comparison of measured work units, i.e. the return value of a call
    to ``ipsbench.run()``.

    Entries are sorted by throughput, fastest first. Units that failed during
    the run are not ranked, and are listed in ``failures`` instead.
    """

    entries: tuple[ComparisonEntry, ...] = ()
    """Measured units, sorted by iterations per second in descending order."""
    failures: tuple[ExecutionError, ...] = ()
    """Units whose action raised an exception, in registration order."""
    run: str = ""
    """A name describing the run."""
    context: dict[str, Any] = field(default_factory=dict, hash=False)
    """Key-value pairs describing the environment of the benchmark run."""
    timestamp: int = 0
    """A Unix timestamp indicating when the run was started."""

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    @property
    def fastest(self) -> ComparisonEntry | None:
        return self.entries[0] if self.entries else None

    @property
    def results(self) -> list[MeasurementResult]:
        return [e.result for e in self.entries]

    @property
    def success(self) -> bool:
        """Whether every unit in the run completed without an error."""
        return not self.failures

    def with_metadata(self, run: str, context: dict[str, Any], timestamp: int) -> Self:
        return self.__class__(
            entries=self.entries,
            failures=self.failures,
            run=run,
            context=context,
            timestamp=timestamp,
        )

    def to_json(self) -> dict[str, Any]:
        """
        Export a comparison report to JSON.

        Exceptions in ``failures`` are represented by their type name and message.

        Returns
        -------
        dict[str, Any]
            A JSON representation of the report.
        """
        entries = []
        for e in self.entries:
            d = e.result.to_json()
            d["slowdown_factor"] = e.slowdown_factor
            entries.append(d)
        failures = [
            {
                "name": f.name,
                "phase": str(f.phase),
                "error_type": type(f.cause).__name__,
                "error_message": str(f.cause),
            }
            for f in self.failures
        ]
        return {
            "run": self.run,
            "context": self.context,
            "timestamp": self.timestamp,
            "entries": entries,
            "failures": failures,
        }
