"""A framework for measuring and comparing the throughput of Python callables."""

from .compare import compare
from .config import RunConfig
from .errors import ConfigurationError, DuplicateNameError, ExecutionError, IPSBenchError
from .registry import Registry
from .runner import collect, measure, run
from .types import ComparisonEntry, ComparisonReport, MeasurementResult, Phase, WorkUnit

__version__ = "0.1.0"
