# -*- coding: utf-8 -*-
#
# Copyright 2019 Klimaat

"""
Progress observers for long raster passes.

The driver calls start(total) once, update(completed, total, eta) after
every layer and close() at the end.  ETA is extrapolated from the mean
elapsed time per completed layer.
"""

import time

from tqdm import tqdm


class Progress(object):
    """
    Silent observer; also the base class for the others.
    """

    def start(self, total):
        self.total = total
        self.t0 = time.time()

    def eta(self, completed, total):
        """
        Seconds remaining, extrapolated from time spent so far; None until
        a layer has completed.
        """
        if completed <= 0:
            return None
        elapsed = time.time() - self.t0
        return elapsed / completed * (total - completed)

    def update(self, completed, total, eta=None):
        pass

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *ignored):
        self.close()


class TqdmProgress(Progress):
    """
    Progress bar on stderr.
    """

    def __init__(self, desc=None, **kwargs):
        self.desc = desc
        self.kwargs = kwargs
        self.bar = None

    def start(self, total):
        super(TqdmProgress, self).start(total)
        self.bar = tqdm(desc=self.desc, total=total, unit="layer", **self.kwargs)

    def update(self, completed, total, eta=None):
        if self.bar is not None:
            self.bar.update(completed - self.bar.n)

    def close(self):
        if self.bar is not None:
            self.bar.close()
            self.bar = None


class CallbackProgress(Progress):
    """
    Report to callback(fraction, eta_seconds).
    """

    def __init__(self, callback):
        if not callable(callback):
            raise TypeError("callback must be callable")
        self.callback = callback

    def update(self, completed, total, eta=None):
        fraction = completed / total if total else 1.0
        self.callback(fraction, eta)


def get_progress(observer=None, show_progress=True, desc=None):
    """
    Resolve an observer: a Progress is used as is, a plain callable is
    wrapped, None gives a tqdm bar or nothing depending on show_progress.
    """
    if isinstance(observer, Progress):
        return observer
    if observer is not None:
        return CallbackProgress(observer)
    if show_progress:
        return TqdmProgress(desc=desc)
    return Progress()
