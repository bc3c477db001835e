import io

import pytest

from ipsbench import ExecutionError, MeasurementResult, compare
from ipsbench.reporter import ConsoleReporter, format_comparison
from ipsbench.types import ComparisonReport, Phase


@pytest.fixture
def report() -> ComparisonReport:
    results = [
        MeasurementResult("slow", 1000.0, 2.5, 1000, 1.0),
        MeasurementResult("fast", 3520.0, 0.8, 3520, 1.0),
    ]
    failures = [ExecutionError("broken", RuntimeError("[bad] things"), Phase.WARMING)]
    return compare(results, failures).with_metadata(
        run="test-run", context={"python": {"version": "3.12"}}, timestamp=1
    )


def test_format_comparison(report: ComparisonReport) -> None:
    lines = format_comparison(report)

    assert len(lines) == 2
    assert lines[0].strip() == "fast: 3,520.0 i/s"
    assert lines[1].strip() == "slow: 1,000.0 i/s - 3.52x slower"
    assert format_comparison(ComparisonReport()) == []


def test_console_reporter(report: ComparisonReport) -> None:
    buf = io.StringIO()
    ConsoleReporter(file=buf, width=200).write(report)
    out = buf.getvalue()

    assert "Context values:" in out
    assert "test-run" in out
    for column in ["Benchmark", "i/s", "± error (%)", "Iterations", "Time (s)"]:
        assert column in out
    # ranked fastest first.
    assert out.index("3,520.0") < out.index("1,000.0")
    assert "Failures" in out
    assert "broken" in out
    assert "RuntimeError: [bad] things" in out
    assert "3.52x slower" in out
    assert out.index("Comparison:") > out.index("Failures")


def test_console_reporter_without_context_or_failures() -> None:
    buf = io.StringIO()
    report = compare([MeasurementResult("only", 10.0, 0.0, 10, 1.0)])
    ConsoleReporter(file=buf, width=200).write(report, show_context=False)
    out = buf.getvalue()

    assert "Context values:" not in out
    assert "Failures" not in out
    assert "slower" not in out
    assert "only: 10.0 i/s" in out


def test_report_to_json(report: ComparisonReport) -> None:
    d = report.to_json()

    assert d["run"] == "test-run"
    assert [e["name"] for e in d["entries"]] == ["fast", "slow"]
    assert d["entries"][1]["slowdown_factor"] == pytest.approx(3.52)
    assert d["failures"] == [
        {
            "name": "broken",
            "phase": "warming",
            "error_type": "RuntimeError",
            "error_message": "[bad] things",
        }
    ]
