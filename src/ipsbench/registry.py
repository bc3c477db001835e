"""A registry collecting named units of work before a benchmark run."""

import inspect
from collections.abc import Callable, Iterator
from typing import Any, overload

from ipsbench.errors import DuplicateNameError
from ipsbench.types import WorkUnit


def _check_nullary(name: str, action: Callable) -> None:
    if not callable(action):
        raise TypeError(f"action for benchmark {name!r} is not callable: {action!r}")
    try:
        sig = inspect.signature(action)
    except (TypeError, ValueError):
        # some builtins and extension types have no signature, so we trust the caller.
        return
    required = [
        p.name
        for p in sig.parameters.values()
        if p.default is inspect.Parameter.empty
        and p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]
    if required:
        raise TypeError(
            f"action for benchmark {name!r} must be callable without arguments, "
            f"but requires parameter(s) {', '.join(map(repr, required))}"
        )


class Registry:
    """
    An ordered collection of named work units.

    Names are unique within a registry, and the registration order determines
    the order in which units are measured and failures are listed.

    Examples
    --------
    >>> registry = Registry()
    >>> registry.register("sum", lambda: sum(range(100)))
    >>> @registry.benchmark("sorted")
    ... def sort_list():
    ...     return sorted([3, 1, 2])
    >>> [u.name for u in registry.units()]
    ['sum', 'sorted']
    """

    def __init__(self) -> None:
        self._units: dict[str, WorkUnit] = {}

    def register(self, name: str, action: Callable[[], Any]) -> None:
        """
        Register a named unit of work.

        Parameters
        ----------
        name: str
            A non-empty display name, unique within this registry.
        action: Callable[[], Any]
            The callable to benchmark. Must be invocable without arguments.

        Raises
        ------
        DuplicateNameError
            If a unit with the same name is already registered.
        ValueError
            If the name is empty.
        TypeError
            If the action is not callable, or requires arguments.
        """
        if not isinstance(name, str) or not name:
            raise ValueError(f"benchmark name must be a non-empty string, got {name!r}")
        if name in self._units:
            raise DuplicateNameError(name)
        _check_nullary(name, action)
        self._units[name] = WorkUnit(name=name, action=action)

    @overload
    def benchmark(self, func: Callable[[], Any]) -> Callable[[], Any]: ...

    @overload
    def benchmark(
        self, func: str | None = None
    ) -> Callable[[Callable[[], Any]], Callable[[], Any]]: ...

    def benchmark(self, func=None):
        """
        Register a function as a work unit, usable as a decorator with or without a name.

        The decorated function is returned unchanged. If no name is given, the
        function's ``__name__`` is used.
        """
        if callable(func):
            self.register(func.__name__, func)
            return func

        def decorator(fn: Callable[[], Any]) -> Callable[[], Any]:
            self.register(func or fn.__name__, fn)
            return fn

        return decorator

    def units(self) -> tuple[WorkUnit, ...]:
        """Return the registered work units in registration order."""
        return tuple(self._units.values())

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self) -> Iterator[WorkUnit]:
        return iter(self.units())

    def __contains__(self, name: object) -> bool:
        return name in self._units

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({', '.join(map(repr, self._units))})"
