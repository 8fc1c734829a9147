"""
Tests for progress observers.
"""

import io

import pytest

import sola.progress
from sola.progress import (
    CallbackProgress,
    Progress,
    TqdmProgress,
    get_progress,
)


class TestProgress:
    def test_eta(self, monkeypatch):
        clock = iter([100.0, 110.0])

        class Clock:
            @staticmethod
            def time():
                return next(clock)

        monkeypatch.setattr(sola.progress, "time", Clock)
        progress = Progress()
        progress.start(4)
        assert progress.eta(0, 4) is None
        assert progress.eta(1, 4) == pytest.approx(30.0)

    def test_silent(self):
        with Progress() as progress:
            progress.start(2)
            progress.update(1, 2)


class TestCallbackProgress:
    def test_fraction(self):
        calls = []
        progress = CallbackProgress(lambda f, eta: calls.append((f, eta)))
        progress.start(4)
        progress.update(1, 4, 3.0)
        progress.update(4, 4, 0.0)
        assert calls == [(0.25, 3.0), (1.0, 0.0)]

    def test_empty(self):
        calls = []
        progress = CallbackProgress(lambda f, eta: calls.append(f))
        progress.update(0, 0)
        assert calls == [1.0]

    def test_not_callable(self):
        with pytest.raises(TypeError):
            CallbackProgress("print")


class TestTqdmProgress:
    def test_bar(self):
        progress = TqdmProgress(desc="test", file=io.StringIO())
        progress.start(3)
        progress.update(2, 3)
        assert progress.bar.n == 2
        progress.update(3, 3)
        assert progress.bar.n == 3
        progress.close()
        assert progress.bar is None


class TestGetProgress:
    def test_resolve(self):
        assert type(get_progress(None, show_progress=False)) is Progress
        assert isinstance(get_progress(None, show_progress=True), TqdmProgress)
        assert isinstance(get_progress(print), CallbackProgress)
        observer = Progress()
        assert get_progress(observer) is observer
