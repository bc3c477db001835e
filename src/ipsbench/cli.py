"""The ``ipsbench`` command line interface."""

import argparse
import json
import logging
import sys
from typing import Any

from ipsbench import __version__
from ipsbench.config import IPSBenchConfig, RunConfig, parse_ipsbench_config
from ipsbench.context import builtin_providers
from ipsbench.reporter import ConsoleReporter
from ipsbench.runner import collect, run

logger = logging.getLogger("ipsbench")

LOG_LEVELS = ("NOTSET", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_logging(level: str) -> None:
    """Attach a stderr handler to the ``ipsbench`` logger, unless ``level`` is NOTSET."""
    if level == "NOTSET":
        return
    logger.setLevel(level)
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(fmt="[{levelname:<4} {name}:L{lineno}] {message}", style="{")
    )
    logger.addHandler(handler)


def parse_context(values: list[str]) -> dict[str, Any]:
    """Resolve ``--context`` values, either builtin provider names or ``key=value`` pairs."""
    context: dict[str, Any] = {}
    for val in values:
        if val in builtin_providers:
            context.update(builtin_providers[val]())
            continue
        key, sep, value = val.partition("=")
        if not sep or not key:
            raise ValueError(
                f"context values need to be of the form <key>=<value> or one of "
                f"{', '.join(builtin_providers)}, got {val!r}"
            )
        context[key] = value
    return context


def construct_parser(config: IPSBenchConfig) -> argparse.ArgumentParser:
    defaults = config.run
    parser = argparse.ArgumentParser("ipsbench", description=__doc__)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        default=config.log_level,
        choices=LOG_LEVELS,
        metavar="<level>",
        help=f"Log level of the ipsbench logger, default: {config.log_level} (no logging).",
    )
    subparsers = parser.add_subparsers(title="Available commands", dest="command", metavar="")
    run_parser = subparsers.add_parser("run", help="Run and compare benchmarks.")
    run_parser.add_argument(
        "benchmarks",
        nargs="?",
        default="benchmarks",
        metavar="<benchmarks>",
        help="A Python file, directory of files, or module name containing registries.",
    )
    run_parser.add_argument("-n", "--name", metavar="<name>", help="A name for the run.")
    run_parser.add_argument(
        "-w",
        "--warmup",
        type=float,
        default=defaults.warmup_seconds,
        metavar="<seconds>",
        help="Warmup time per benchmark, default: %(default)s.",
    )
    run_parser.add_argument(
        "-t",
        "--time",
        type=float,
        default=defaults.measure_seconds,
        metavar="<seconds>",
        help="Measurement time per benchmark, default: %(default)s.",
    )
    run_parser.add_argument(
        "-b",
        "--batch-size",
        type=int,
        default=defaults.batch_size_hint,
        metavar="<N>",
        help="Iterations in the first timed batch, default: 1.",
    )
    run_parser.add_argument(
        "--confidence",
        type=float,
        default=defaults.confidence,
        metavar="<level>",
        help="Confidence level of the error margin, default: %(default)s.",
    )
    run_parser.add_argument(
        "--context",
        action="append",
        default=list(config.context),
        metavar="<key=value>",
        help=f"Context values to attach to the report, or one of {', '.join(builtin_providers)}.",
    )
    run_parser.add_argument(
        "--json", action="store_true", help="Print the report as JSON instead of tables."
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """The main ``ipsbench`` CLI entry point."""
    try:
        config = parse_ipsbench_config()
        parser = construct_parser(config)
        args = parser.parse_args(argv)
        configure_logging(args.log_level)
        if args.command is None:
            parser.print_help()
            return 1

        run_config = RunConfig(
            warmup_seconds=args.warmup,
            measure_seconds=args.time,
            batch_size_hint=args.batch_size,
            target_batch_seconds=config.run.target_batch_seconds,
            max_batch_size=config.run.max_batch_size,
            confidence=args.confidence,
        )
        context = parse_context(args.context)
        registry = collect(args.benchmarks)
        logger.debug(f"Collected {len(registry)} benchmark(s) from {args.benchmarks}.")
        report = run(registry, run_config, name=args.name, context=context)
        if args.json:
            sys.stdout.write(json.dumps(report.to_json(), indent=2, default=str) + "\n")
        else:
            ConsoleReporter().write(report)
        return 0 if report.success else 1
    except Exception as e:
        sys.stderr.write(f"error: {e}\n")
        return 1
