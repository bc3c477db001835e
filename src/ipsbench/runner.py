"""The measurement engine, timing each registered work unit and ranking the results."""

import logging
import os
import platform
import time
import uuid
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any, NamedTuple

from ipsbench.compare import compare
from ipsbench.config import RunConfig
from ipsbench.context import Context, ContextProvider
from ipsbench.errors import ExecutionError
from ipsbench.registry import Registry
from ipsbench.types import ComparisonReport, MeasurementResult, Phase, WorkUnit
from ipsbench.util import Clock, default_clock, error_margin, load_module, python_files

logger = logging.getLogger("ipsbench.runner")

MAX_BATCH_GROWTH = 10
"""The largest factor by which a batch may grow from one batch to the next."""


def next_batch_size(batch: int, elapsed: float, target: float, limit: int) -> int:
    """
    Scale a batch size so that the next batch takes roughly ``target`` seconds.

    Growth per step is capped at ``MAX_BATCH_GROWTH``, to not overshoot on
    batches too short for the clock to resolve. The result lies between 1 and ``limit``.
    """
    if elapsed <= 0:
        scaled = batch * MAX_BATCH_GROWTH
    else:
        scaled = min(round(batch * target / elapsed), batch * MAX_BATCH_GROWTH)
    return max(1, min(scaled, limit))


class _LoopStats(NamedTuple):
    total: int
    elapsed: float
    batches: int
    samples: list[float]
    next_batch: int
    calibrated: bool


def _timed_loop(
    action: Callable[[], Any],
    budget: float,
    batch: int,
    config: RunConfig,
    clock: Clock,
    calibrated: bool = False,
) -> _LoopStats:
    """
    Call ``action`` in batches until ``budget`` seconds have elapsed.

    The clock is read once per batch boundary. Throughput samples are only kept
    once the batch size has settled, i.e. stopped growing at the maximum rate,
    unless no batch ever settles.
    """
    target, limit = config.target_batch_seconds, config.max_batch_size
    start = last = clock()
    total = batches = 0
    samples: list[float] = []
    unsettled: list[float] = []
    while True:
        for _ in range(batch):
            action()
        now = clock()
        total += batch
        batches += 1
        dt = now - last
        if dt > 0:
            (samples if calibrated else unsettled).append(batch / dt)
        elapsed = now - start
        if elapsed >= budget:
            nxt = next_batch_size(batch, dt, target, limit)
            return _LoopStats(total, elapsed, batches, samples or unsettled, nxt, calibrated)
        nxt = next_batch_size(batch, dt, min(target, budget - elapsed), limit)
        calibrated = calibrated or nxt < batch * MAX_BATCH_GROWTH
        batch = nxt
        last = now


def measure(
    unit: WorkUnit,
    config: RunConfig | None = None,
    clock: Clock = default_clock,
) -> MeasurementResult:
    """
    Warm up and measure a single work unit.

    Parameters
    ----------
    unit: WorkUnit
        The work unit to measure.
    config: RunConfig | None
        Time budgets and batching parameters. Defaults to ``RunConfig()``.
    clock: Clock
        The clock to read batch timestamps from.

    Returns
    -------
    MeasurementResult
        The throughput statistics of the unit.

    Raises
    ------
    ConfigurationError
        If the config is invalid.
    ExecutionError
        If the unit's action raised an exception during warmup or measurement.
    """
    config = (config or RunConfig()).validate()
    batch = min(config.batch_size_hint or 1, config.max_batch_size)
    calibrated = False

    phase = Phase.PENDING
    try:
        if config.warmup_seconds > 0:
            phase = Phase.WARMING
            logger.debug(f"Warming up benchmark {unit.name!r} for {config.warmup_seconds}s.")
            warm = _timed_loop(unit.action, config.warmup_seconds, batch, config, clock)
            batch, calibrated = warm.next_batch, warm.calibrated

        phase = Phase.MEASURING
        logger.debug(
            f"Measuring benchmark {unit.name!r} for {config.measure_seconds}s, "
            f"starting at {batch} iteration(s) per batch."
        )
        stats = _timed_loop(
            unit.action, config.measure_seconds, batch, config, clock, calibrated=calibrated
        )
    except Exception as e:
        logger.debug(f"Benchmark {unit.name!r} failed while {phase}: {e!r}")
        raise ExecutionError(unit.name, e, phase) from e

    return MeasurementResult(
        name=unit.name,
        iterations_per_second=stats.total / stats.elapsed,
        error_margin_percent=error_margin(stats.samples, config.confidence),
        total_iterations=stats.total,
        elapsed_seconds=stats.elapsed,
        batches=stats.batches,
        samples=tuple(stats.samples),
    )


def collect(path_or_module: str | os.PathLike[str]) -> Registry:
    """
    Discover registries in a module or source file, and merge them into one.

    Every module-level ``Registry`` instance contributes its units, in the order
    the registries appear in the module. Directories are searched recursively,
    file by file in sorted order.

    Parameters
    ----------
    path_or_module: str | os.PathLike[str]
        A Python file, a directory of Python files, or an importable module name.

    Raises
    ------
    ValueError
        If the given path is not a Python file, directory, or module name.
    DuplicateNameError
        If two discovered units share a name.
    """
    path = Path(path_or_module)
    if path.is_dir():
        modules = [load_module(p) for p in python_files(path)]
    else:
        modules = [load_module(path_or_module)]

    registry = Registry()
    for module in modules:
        registries = [v for v in vars(module).values() if isinstance(v, Registry)]
        logger.debug(f"Found {len(registries)} registries in module {module.__name__!r}.")
        for unit in (u for r in registries for u in r.units()):
            registry.register(unit.name, unit.action)
    return registry


def run(
    benchmarks: Registry | Iterable[WorkUnit],
    config: RunConfig | Mapping[str, Any] | None = None,
    *,
    name: str | None = None,
    context: Context | Iterable[ContextProvider] = (),
    clock: Clock = default_clock,
) -> ComparisonReport:
    """
    Measure every work unit of a registry, and rank the results.

    Units are measured one after another in registration order. A unit whose action
    raises an exception is recorded as a failure and excluded from the ranking,
    while the remaining units are still measured.

    Parameters
    ----------
    benchmarks: Registry | Iterable[WorkUnit]
        The registry (or sequence of work units with unique names) to measure.
    config: RunConfig | Mapping[str, Any] | None
        Time budgets and batching parameters. Mappings are converted with
        ``RunConfig.from_dict()``. Defaults to ``RunConfig()``.
    name: str | None
        A name for the run. If None, a name will be automatically generated.
    context: Context | Iterable[ContextProvider]
        Additional context to attach to the report, like CPU or Python version info.
    clock: Clock
        The clock used to time batches, ``time.perf_counter`` by default.

    Returns
    -------
    ComparisonReport
        The measured units sorted by throughput, fastest first, plus the failed units.

    Raises
    ------
    ConfigurationError
        If the config is invalid. Raised before any unit is run.
    """
    if config is None:
        cfg = RunConfig()
    elif isinstance(config, RunConfig):
        cfg = config
    else:
        cfg = RunConfig.from_dict(config)
    cfg.validate()

    if not isinstance(benchmarks, Registry):
        registry = Registry()
        for unit in benchmarks:
            registry.register(unit.name, unit.action)
        benchmarks = registry

    _run = name or "ipsbench-" + platform.node() + "-" + uuid.uuid1().hex[:8]

    if isinstance(context, dict):
        ctx = dict(context)
    else:
        ctx = dict()
        for provider in context:
            val = provider()
            duplicates = set(ctx.keys()) & set(val.keys())
            if duplicates:
                dupe, *_ = duplicates
                raise ValueError(f"got multiple values for context key {dupe!r}")
            ctx.update(val)

    timestamp = int(time.time())
    results: list[MeasurementResult] = []
    failures: list[ExecutionError] = []

    for unit in benchmarks.units():
        try:
            res = measure(unit, cfg, clock)
        except ExecutionError as e:
            logger.warning(f"Benchmark {unit.name!r} failed while {e.phase}: {e.cause!r}")
            failures.append(e)
            continue
        logger.info(
            f"Benchmark {unit.name!r}: {res.iterations_per_second:.1f} i/s "
            f"(± {res.error_margin_percent:.1f}%), {res.total_iterations} iterations "
            f"in {res.elapsed_seconds:.2f}s"
        )
        results.append(res)

    report = compare(results, failures)
    return report.with_metadata(run=_run, context=ctx, timestamp=timestamp)

