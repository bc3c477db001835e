import ipsbench

arithmetic = ipsbench.Registry()


@arithmetic.benchmark
def add():
    return 1 + 1


@arithmetic.benchmark("multiply")
def mul():
    return 3 * 7
