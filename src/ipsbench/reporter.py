"""
An interface for displaying comparison reports of benchmark runs.
"""

import json
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ipsbench.types import ComparisonReport


def format_ips(ips: float) -> str:
    return f"{ips:,.1f}"


def format_comparison(report: ComparisonReport) -> list[str]:
    """
    Format the comparison section of a report, one line per ranked entry.

    Every entry but the fastest ends in ``"<factor>x slower"``.

    Examples
    --------
    ``fast: 1,000,000.0 i/s``, ``slow: 1,000.0 i/s - 1000.00x slower``
    """
    if not report.entries:
        return []
    width = max(len(e.name) for e in report.entries)
    ipswidth = max(len(format_ips(e.iterations_per_second)) for e in report.entries)
    lines = []
    for i, entry in enumerate(report.entries):
        line = f"{entry.name:>{width}}: {format_ips(entry.iterations_per_second):>{ipswidth}} i/s"
        if i:
            line += f" - {entry.slowdown_factor:.2f}x slower"
        lines.append(line)
    return lines


class BenchmarkReporter:
    """
    The base interface for a benchmark reporter class.

    A benchmark reporter consumes the comparison report of a previous run, and
    subsequently displays or forwards it in the way specified by the respective
    implementation's ``write()`` method.
    """

    def write(self, report: ComparisonReport, **options: Any) -> None:
        raise NotImplementedError


class ConsoleReporter(BenchmarkReporter):
    """
    Displays comparison reports in the console.

    Wraps a ``rich.Console()`` to display values in rich-text tables.
    """

    def __init__(self, **kwargs: Any):
        """
        Initialize a console reporter.

        Parameters
        ----------
        **kwargs: Any
            Keyword arguments, forwarded directly to ``rich.Console()``.
        """
        self.console = Console(**kwargs)

    def write(self, report: ComparisonReport, **options: Any) -> None:
        """
        Display a comparison report in the console.

        Gives a summary of all present context values directly above the results,
        as a pretty-printed JSON object. Below that, the measured units are shown
        fastest first, followed by any failed units, and the comparison section.

        Parameters
        ----------
        report: ComparisonReport
            The report to display.
        options: Any
            Display options. ``show_context=False`` hides the context values.
        """
        if report.context and options.get("show_context", True):
            self.console.print("Context values:")
            self.console.print_json(json.dumps(report.context, default=str))

        t = Table(title=report.run or None)
        for column in ["Benchmark", "i/s", "± error (%)", "Iterations", "Time (s)"]:
            t.add_column(column, justify="left" if column == "Benchmark" else "right")
        for entry in report.entries:
            res = entry.result
            t.add_row(
                res.name,
                format_ips(res.iterations_per_second),
                f"{res.error_margin_percent:.1f}",
                str(res.total_iterations),
                f"{res.elapsed_seconds:.3f}",
            )
        self.console.print(t, overflow="ellipsis")

        if report.failures:
            ft = Table(title="Failures")
            for column in ["Benchmark", "Phase", "Error"]:
                ft.add_column(column)
            for failure in report.failures:
                errmsg = f"{type(failure.cause).__name__}: {failure.cause}"
                ft.add_row(failure.name, str(failure.phase), "[red]ERROR: [/red]" + escape(errmsg))
            self.console.print(ft, overflow="ellipsis")

        lines = format_comparison(report)
        if lines:
            self.console.print("Comparison:", highlight=False)
            for line in lines:
                self.console.print("  " + line, highlight=False, markup=False)
