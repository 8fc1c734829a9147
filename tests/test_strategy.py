"""
Tests for execution strategies.
"""

import threading
import time

import pytest

from sola.errors import InvalidInput
from sola.strategy import Sequential, Threaded, get_strategy


def square(x, delay=0.0):
    time.sleep(delay)
    return x * x


class TestSequential:
    def test_order(self):
        items = [(k,) for k in range(5)]
        assert list(Sequential().map(square, items)) == [0, 1, 4, 9, 16]

    def test_lazy(self):
        consumed = []

        def items():
            for k in range(3):
                consumed.append(k)
                yield (k,)

        results = Sequential().map(square, items())
        assert consumed == []
        next(results)
        assert consumed == [0]


class TestThreaded:
    def test_order(self):
        # Later items finish first
        items = [(k, 0.05 * (5 - k) / 5) for k in range(5)]
        assert list(Threaded(workers=5).map(square, items)) == [0, 1, 4, 9, 16]

    def test_bounded(self):
        lock = threading.Lock()
        state = {"running": 0, "peak": 0}

        def work(x):
            with lock:
                state["running"] += 1
                state["peak"] = max(state["peak"], state["running"])
            time.sleep(0.01)
            with lock:
                state["running"] -= 1
            return x

        items = [(k,) for k in range(20)]
        results = list(Threaded(workers=8, max_pending=3).map(work, items))
        assert results == list(range(20))
        assert state["peak"] <= 3

    def test_error_propagates(self):
        def fail(x):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            list(Threaded(workers=2).map(fail, [(1,), (2,)]))

    def test_workers(self):
        assert Threaded(workers=0).workers is None
        assert Threaded(workers=2).max_pending == 4
        assert Threaded(workers=2, max_pending=0).max_pending == 1


class TestGetStrategy:
    def test_names(self):
        assert isinstance(get_strategy(), Sequential)
        assert isinstance(get_strategy("Sequential"), Sequential)
        threaded = get_strategy("threaded", workers=2)
        assert isinstance(threaded, Threaded)
        assert threaded.workers == 2

    def test_object(self):
        strategy = Threaded()
        assert get_strategy(strategy) is strategy

    def test_unknown(self):
        with pytest.raises(InvalidInput):
            get_strategy("gpu")
