import math

import pytest

from ipsbench import ExecutionError, MeasurementResult, compare
from ipsbench.types import Phase


def result(name: str, ips: float) -> MeasurementResult:
    return MeasurementResult(
        name=name,
        iterations_per_second=ips,
        error_margin_percent=1.0,
        total_iterations=int(ips),
        elapsed_seconds=1.0,
    )


RESULTS = [result("b", 250.0), result("a", 1000.0), result("d", 10.0), result("c", 500.0)]


def test_compare_sorts_descending() -> None:
    report = compare(RESULTS)

    assert [e.name for e in report.entries] == ["a", "c", "b", "d"]
    for a, b in zip(report.entries, report.entries[1:]):
        assert a.iterations_per_second >= b.iterations_per_second


def test_slowdown_factors() -> None:
    report = compare(RESULTS)

    assert report.entries[0].slowdown_factor == 1.0
    assert [e.slowdown_factor for e in report.entries[1:]] == [2.0, 4.0, 100.0]
    assert all(e.slowdown_factor >= 1.0 for e in report.entries)
    assert report.fastest is not None and report.fastest.name == "a"


def test_compare_is_deterministic() -> None:
    first = compare(RESULTS)
    for _ in range(5):
        assert compare(RESULTS) == first
    # the input is not modified.
    assert [r.name for r in RESULTS] == ["b", "a", "d", "c"]


def test_ties_keep_input_order() -> None:
    report = compare([result("x", 100.0), result("y", 100.0), result("z", 200.0)])

    assert [e.name for e in report.entries] == ["z", "x", "y"]
    assert report.entries[1].slowdown_factor == pytest.approx(2.0)
    assert report.entries[2].slowdown_factor == pytest.approx(2.0)


def test_compare_empty_and_single() -> None:
    empty = compare([])
    assert empty.entries == ()
    assert empty.fastest is None

    single = compare([result("only", 5.0)])
    assert single.entries[0].slowdown_factor == 1.0


def test_zero_throughput_is_infinitely_slower() -> None:
    report = compare([result("fast", 10.0), result("stalled", 0.0)])
    assert math.isinf(report.entries[1].slowdown_factor)


def test_failures_are_carried_over() -> None:
    failure = ExecutionError("broken", RuntimeError("oops"), Phase.MEASURING)
    report = compare(RESULTS, [failure])

    assert report.failures == (failure,)
    assert not report.success
    assert len(report) == len(RESULTS)
