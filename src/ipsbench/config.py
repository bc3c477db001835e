"""
Run configuration for benchmark measurements, and utilities for parsing
a ``[tool.ipsbench]`` config block out of a pyproject.toml file.
"""

import logging
import math
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    from typing import Self

    import tomllib
else:
    import tomli as tomllib
    from typing_extensions import Self

from ipsbench.errors import ConfigurationError

logger = logging.getLogger("ipsbench.config")


@dataclass(frozen=True)
class RunConfig:
    """
    Time budgets and batching parameters for a benchmark run.

    Use ``validate()`` to check the values, which ``ipsbench.run()`` does before
    measuring anything.
    """

    warmup_seconds: float = 2.0
    """Duration of the unmeasured warmup phase per unit. Zero skips the warmup."""
    measure_seconds: float = 5.0
    """Duration of the measurement phase per unit."""
    batch_size_hint: int | None = None
    """Number of iterations in the first timed batch, defaults to 1."""
    target_batch_seconds: float = 0.1
    """Wall time each batch should take after calibration."""
    max_batch_size: int = 1_000_000
    """Upper bound on the iterations per batch, which keeps the time budget responsive
    even when the clock does not resolve a batch at all."""
    confidence: float = 0.95
    """Confidence level of the reported error margin."""

    def validate(self) -> Self:
        """
        Check all values for validity.

        Returns
        -------
        Self
            The config itself, for chaining.

        Raises
        ------
        ConfigurationError
            If any of the values are out of range.
        """

        def _is_number(v: Any) -> bool:
            return isinstance(v, int | float) and not isinstance(v, bool) and math.isfinite(v)

        if not _is_number(self.warmup_seconds) or self.warmup_seconds < 0:
            raise ConfigurationError(
                f"warmup duration must be a non-negative number of seconds, "
                f"got {self.warmup_seconds!r}"
            )
        if not _is_number(self.measure_seconds) or self.measure_seconds <= 0:
            raise ConfigurationError(
                f"measurement duration must be a positive number of seconds, "
                f"got {self.measure_seconds!r}"
            )
        if not _is_number(self.target_batch_seconds) or self.target_batch_seconds <= 0:
            raise ConfigurationError(
                f"target batch duration must be a positive number of seconds, "
                f"got {self.target_batch_seconds!r}"
            )
        hint = self.batch_size_hint
        if hint is not None and (not isinstance(hint, int) or isinstance(hint, bool) or hint < 1):
            raise ConfigurationError(f"batch size hint must be a positive integer, got {hint!r}")
        limit = self.max_batch_size
        if not isinstance(limit, int) or isinstance(limit, bool) or limit < 1:
            raise ConfigurationError(
                f"maximum batch size must be a positive integer, got {limit!r}"
            )
        if not _is_number(self.confidence) or not 0 < self.confidence < 1:
            raise ConfigurationError(
                f"confidence level must lie strictly between 0 and 1, got {self.confidence!r}"
            )
        return self

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> Self:
        """
        Build a run config from a mapping of its field names.

        Keys may be given in snake_case or kebab-case. Missing keys take their defaults.

        Raises
        ------
        ConfigurationError
            If the mapping contains a key that is not a config field.
        """
        names = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for k, v in d.items():
            key = k.replace("-", "_")
            if key not in names:
                raise ConfigurationError(f"unknown run configuration key {k!r}")
            kwargs[key] = v
        return cls(**kwargs)


# maps keys of the [tool.ipsbench] table to run config fields.
_TOML_RUN_KEYS = {
    "warmup": "warmup_seconds",
    "time": "measure_seconds",
    "batch-size": "batch_size_hint",
    "target-batch-time": "target_batch_seconds",
    "max-batch-size": "max_batch_size",
    "confidence": "confidence",
}


@dataclass(frozen=True)
class IPSBenchConfig:
    log_level: str = "NOTSET"
    """Log level to use for the ``ipsbench`` module root logger."""
    run: RunConfig = field(default_factory=RunConfig)
    """Default time budgets for ``ipsbench run``."""
    context: list[str] = field(default_factory=list)
    """Names of builtin context providers to attach to every run."""

    @classmethod
    def from_toml(cls, d: dict[str, Any]) -> Self:
        """
        Returns an ipsbench CLI config by processing fields obtained from
        parsing a [tool.ipsbench] block in a pyproject.toml file.

        Parameters
        ----------
        d: dict[str, Any]
            Mapping containing the [tool.ipsbench] table contents,
            as obtained by ``tomllib.load()``.

        Returns
        -------
        Self
            An ipsbench config instance with the values from pyproject.toml,
            and defaults for values that were not set explicitly.
        """
        log_level = d.get("log-level", "NOTSET")
        run = RunConfig.from_dict({v: d[k] for k, v in _TOML_RUN_KEYS.items() if k in d})
        context = list(d.get("context", []))
        return cls(log_level=log_level, run=run.validate(), context=context)


def locate_pyproject(stop: os.PathLike[str] = Path.home()) -> os.PathLike[str] | None:
    """
    Locate a pyproject.toml file by walking up from the current directory,
    and checking for file existence, stopping at ``stop`` (by default, the
    current user home directory).

    If no pyproject.toml file can be found at any level, returns None.

    Returns
    -------
    os.PathLike[str] | None
        The path to pyproject.toml.
    """
    cwd = Path.cwd()
    for p in (cwd, *cwd.parents):
        if (pyproject_cand := (p / "pyproject.toml")).exists():
            return pyproject_cand
        if p == stop:
            break
    logger.debug(f"could not locate pyproject.toml in directory {cwd}")
    return None


def parse_ipsbench_config(pyproject_path: str | os.PathLike[str] | None = None) -> IPSBenchConfig:
    """
    Load an ipsbench config from a given pyproject.toml file.

    If no path to the pyproject.toml file is given, an attempt at autodiscovery
    will be made. If that is unsuccessful, a default config is returned.

    Parameters
    ----------
    pyproject_path: str | os.PathLike[str] | None
        Path to the current project's pyproject.toml file, optional.

    Returns
    -------
    IPSBenchConfig
        The loaded config if found, or a default config.
    """
    pyproject_path = pyproject_path or locate_pyproject()
    if pyproject_path is None:
        return IPSBenchConfig.from_toml({})

    with open(pyproject_path, "rb") as fp:
        pyproject = tomllib.load(fp)
        return IPSBenchConfig.from_toml(pyproject.get("tool", {}).get("ipsbench", {}))
