"""Context providers describing the host a benchmark run was measured on."""

import platform
import sys
from collections.abc import Callable, Sequence
from typing import Any

Context = dict[str, Any]
"""A dictionary of context key-value pairs attached to a report."""

ContextProvider = Callable[[], Context]
"""A function providing a dictionary of context values."""


def platform_info() -> Context:
    return {"platform": {"system": platform.system(), "release": platform.release()}}


class PythonInfo:
    """
    Describes the running interpreter, whose implementation and build largely
    determine call overhead, plus the installed versions of selected packages.

    Packages that are not installed map to an empty string.
    """

    key = "python"

    def __init__(self, packages: Sequence[str] = ()):
        self.packages = tuple(packages)

    def __call__(self) -> Context:
        from importlib.metadata import PackageNotFoundError, version

        def installed(pkg: str) -> str:
            try:
                return version(pkg)
            except PackageNotFoundError:
                return ""

        info = {
            "version": platform.python_version(),
            "implementation": platform.python_implementation(),
            "compiler": platform.python_compiler(),
            # free-threaded builds have a very different call cost profile.
            "gil_enabled": getattr(sys, "_is_gil_enabled", lambda: True)(),
            "packages": {pkg: installed(pkg) for pkg in self.packages},
        }
        return {self.key: info}


class CPUInfo:
    """Describes the host CPU and its memory, with the clock speed in MHz and memory in MB."""

    key = "cpu"

    def __call__(self) -> Context:
        try:
            import psutil
        except ModuleNotFoundError:
            raise ModuleNotFoundError(
                f"context provider {self.__class__.__name__}() needs `psutil` installed. "
                f"To install, run `{sys.executable} -m pip install --upgrade psutil`."
            )

        try:
            freq = psutil.cpu_freq()
        except (RuntimeError, NotImplementedError, OSError):
            freq = None

        info = {
            "architecture": platform.machine(),
            "processor": platform.processor(),
            "num_cpus": psutil.cpu_count(logical=False),
            "num_logical_cpus": psutil.cpu_count(),
            # some ARM devices and VMs report no clock speed at all.
            "frequency_mhz": float(freq.current) if freq else 0.0,
            "memory_mb": psutil.virtual_memory().total / 1e6,
        }
        return {self.key: info}


builtin_providers: dict[str, ContextProvider] = {
    "cpu": CPUInfo(),
    "python": PythonInfo(),
    "platform": platform_info,
}
