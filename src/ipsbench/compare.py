"""Contains machinery to rank measurement results against each other."""

import math
import operator
from collections.abc import Iterable

from ipsbench.errors import ExecutionError
from ipsbench.types import ComparisonEntry, ComparisonReport, MeasurementResult


def slowdown(fastest: MeasurementResult, result: MeasurementResult) -> float:
    """How many times slower ``result`` is than ``fastest``, by iterations per second."""
    if result.iterations_per_second <= 0:
        return math.inf
    return fastest.iterations_per_second / result.iterations_per_second


def compare(
    results: Iterable[MeasurementResult], failures: Iterable[ExecutionError] = ()
) -> ComparisonReport:
    """
    Rank measurement results by throughput, fastest first.

    Results with equal throughput keep their input order. The fastest entry has
    a slowdown factor of exactly 1.0, every other entry the ratio of the fastest
    throughput to its own.

    Parameters
    ----------
    results: Iterable[MeasurementResult]
        The measurement results to rank.
    failures: Iterable[ExecutionError]
        Failed units to carry over into the report unranked.

    Returns
    -------
    ComparisonReport
        The ranked comparison.
    """
    ranked = sorted(results, key=operator.attrgetter("iterations_per_second"), reverse=True)
    entries: list[ComparisonEntry] = []
    for i, res in enumerate(ranked):
        factor = 1.0 if i == 0 else slowdown(ranked[0], res)
        entries.append(ComparisonEntry(result=res, slowdown_factor=factor))
    return ComparisonReport(entries=tuple(entries), failures=tuple(failures))
