"""
Compares eight ways of invoking the same small function.

Run with ``ipsbench run examples/invocation/benchmarks.py``.
"""

import types
from functools import partial

import ipsbench


class Processor:
    def plus_two(self, arg: int) -> int:
        return arg + 2


class Runner:
    def callback_run(self, arg, fn):
        return fn(arg)

    def dispatch(self, arg, obj, method_name):
        return getattr(obj, method_name)(arg)


def plus_two(arg: int) -> int:
    return arg + 2


plus_two_lambda = lambda arg: arg + 2  # noqa: E731
plus_two_partial = partial(plus_two)

processor = Processor()
runner = Runner()

method = processor.plus_two
rebinder = Processor()
# the same function, bound to a different receiver.
rebound = types.MethodType(Processor.plus_two, rebinder)

invocations = ipsbench.Registry()
invocations.register("Direct call", lambda: processor.plus_two(2))
invocations.register("Via getattr", lambda: runner.dispatch(2, processor, "plus_two"))
invocations.register("Inline callback", lambda: runner.callback_run(2, lambda arg: arg + 2))
invocations.register("Lambda", lambda: runner.callback_run(2, plus_two_lambda))
invocations.register("Partial", lambda: runner.callback_run(2, plus_two_partial))
invocations.register("Bound method", lambda: runner.callback_run(2, method))
invocations.register("Rebound direct call", lambda: rebinder.plus_two(2))
invocations.register("Rebound method", lambda: runner.callback_run(2, rebound))


if __name__ == "__main__":
    from ipsbench.reporter import ConsoleReporter

    ConsoleReporter().write(ipsbench.run(invocations))
