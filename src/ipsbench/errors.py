"""Exceptions raised while registering, configuring, and running benchmarks."""

from typing import Any


class IPSBenchError(Exception):
    """Base exception for all ``ipsbench`` errors."""


class DuplicateNameError(IPSBenchError, ValueError):
    """Raised when a work unit name is registered twice in the same registry."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"a benchmark named {name!r} is already registered")


class ConfigurationError(IPSBenchError, ValueError):
    """Raised for invalid run configuration values, before any measurement begins."""


class ExecutionError(IPSBenchError):
    """
    Raised when a work unit's action fails during warmup or measurement.

    The runner records these per unit instead of aborting the whole run.

    Parameters
    ----------
    name: str
        Name of the failed work unit.
    cause: BaseException
        The exception raised by the unit's action.
    phase: Any
        The phase the unit was in when it failed.
    """

    def __init__(self, name: str, cause: BaseException, phase: Any = None):
        self.name = name
        self.cause = cause
        self.phase = phase
        super().__init__(f"benchmark {name!r} failed: {cause}")

    def __reduce__(self):
        return self.__class__, (self.name, self.cause, self.phase)
