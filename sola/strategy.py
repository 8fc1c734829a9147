# -*- coding: utf-8 -*-
#
# Copyright 2019 Klimaat

"""
Execution strategies for the per-layer compute of the raster driver.

A strategy maps a function over an iterable of argument tuples and yields
results in input order.  The iterable is consumed in the calling thread so
stores that are not thread-safe (netCDF, HDF5) are only read from there.
"""

import os
from collections import deque
from concurrent.futures import ThreadPoolExecutor

from sola.errors import InvalidInput


class Sequential(object):
    """
    Compute one layer at a time in the calling thread.
    """

    def map(self, func, items):
        for args in items:
            yield func(*args)

    def __repr__(self):
        return "Sequential()"


class Threaded(object):
    """
    Compute layers on a thread pool with at most max_pending layers in
    flight; results are still yielded in input order.
    """

    def __init__(self, workers=None, max_pending=None):
        if workers is not None and workers <= 0:
            workers = None
        self.workers = workers
        if max_pending is None:
            max_pending = 2 * (workers or min(32, (os.cpu_count() or 1) + 4))
        self.max_pending = max(1, int(max_pending))

    def __repr__(self):
        return "Threaded(workers=%r, max_pending=%r)" % (
            self.workers,
            self.max_pending,
        )

    def map(self, func, items):
        pending = deque()
        with ThreadPoolExecutor(
            max_workers=self.workers, thread_name_prefix="sola"
        ) as executor:
            try:
                for args in items:
                    # Backpressure
                    while len(pending) >= self.max_pending:
                        yield pending.popleft().result()
                    pending.append(executor.submit(func, *args))

                while pending:
                    yield pending.popleft().result()
            finally:
                for future in pending:
                    future.cancel()


STRATEGIES = {"sequential": Sequential, "threaded": Threaded}


def get_strategy(strategy=None, workers=None):
    """
    Resolve strategy by name ("sequential", "threaded") or return a given
    strategy object unchanged.
    """
    if strategy is None:
        return Sequential()

    if hasattr(strategy, "map"):
        return strategy

    name = str(strategy).lower()
    if name not in STRATEGIES:
        raise InvalidInput(
            "Unknown strategy %r; expected one of %s"
            % (strategy, ", ".join(sorted(STRATEGIES))),
            field="strategy",
            value=strategy,
        )

    if name == "threaded":
        return Threaded(workers=workers)

    return Sequential()
