"""Various utilities related to benchmark collection, timing, and statistics."""

import importlib.util
import math
import os
import statistics
import sys
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from types import ModuleType

Clock = Callable[[], float]
"""A monotonic clock returning the current time in (fractional) seconds."""

default_clock: Clock = time.perf_counter


def error_margin(samples: Sequence[float], confidence: float = 0.95) -> float:
    """
    Compute the relative error margin of a series of throughput samples, in percent.

    The margin is the coefficient of variation of the samples, divided by the square
    root of the sample count and scaled by the two-sided normal quantile for the given
    confidence level. In other words, the half-width of a confidence interval around
    the sample mean, relative to that mean.

    Parameters
    ----------
    samples: Sequence[float]
        Throughput samples, for example iterations per second measured per batch.
    confidence: float
        The confidence level, between 0 and 1.

    Returns
    -------
    float
        The error margin in percent. Zero if fewer than two samples are given.

    Examples
    --------
    >>> error_margin([100.0, 100.0, 100.0])
    0.0
    """
    n = len(samples)
    if n < 2:
        return 0.0
    mean = statistics.fmean(samples)
    if mean <= 0:
        return 0.0
    cv = statistics.stdev(samples) / mean
    z = statistics.NormalDist().inv_cdf((1 + confidence) / 2)
    return 100.0 * z * cv / math.sqrt(n)


_loaded_files: dict[Path, ModuleType] = {}


def python_files(directory: str | os.PathLike[str]) -> list[Path]:
    """All Python files below ``directory``, sorted by path, skipping bytecode caches."""
    return sorted(
        p for p in Path(directory).rglob("*.py") if "__pycache__" not in p.parts and p.is_file()
    )


def load_module(target: str | os.PathLike[str]) -> ModuleType:
    """
    Load a Python source file, or import a module by its dotted name.

    Files are executed once per process, and later calls for the same file return
    the same module object, so registries inside it are not created twice.

    Raises
    ------
    ValueError
        If ``target`` is neither an existing Python file nor an importable module.
    """
    path = Path(target)
    if path.is_file():
        if path.suffix != ".py":
            raise ValueError(f"path {str(target)!r} is not a Python file")
        key = path.resolve()
        if key not in _loaded_files:
            modname = f"_ipsbench_collected_{len(_loaded_files)}_{path.stem}"
            spec = importlib.util.spec_from_file_location(modname, key)
            if spec is None or spec.loader is None:
                raise RuntimeError(f"could not import module from {path}")
            module = importlib.util.module_from_spec(spec)
            sys.modules[modname] = module
            try:
                spec.loader.exec_module(module)
            except BaseException:
                del sys.modules[modname]
                raise
            _loaded_files[key] = module
        return _loaded_files[key]

    name = str(target)
    try:
        return importlib.import_module(name)
    except ModuleNotFoundError as e:
        # only a missing target is a usage error, missing imports inside it are not.
        if e.name is not None and not name.startswith(e.name):
            raise
    except (TypeError, ValueError):
        pass
    raise ValueError(f"expected a module name, Python file, or directory, got {name!r}")
