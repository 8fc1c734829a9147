# -*- coding: utf-8 -*-
#
# Copyright 2019 Klimaat

"""
Cell-by-cell, layer-by-layer solar radiation over a raster of sunshine
duration.
"""

import time
import warnings

import numpy as np

from sola.config import load_config
from sola.errors import (
    InvalidInput,
    LayerWarning,
    MissingAttributeWarning,
    MissingPrecondition,
)
from sola.progress import get_progress
from sola.solar import solar_radiation
from sola.strategy import get_strategy
from sola.util import DelayedKeyboardInterrupt, syslog_elapsed_time

# Name and units of the output raster
OUTPUT_NAME = "rs"
OUTPUT_UNITS = "MJ m-2 day-1"


def check_preconditions(grid):
    """
    Return per-cell latitudes and per-layer dates of grid, raising
    MissingPrecondition if either is wholly absent and warning if either
    is partly absent.
    """

    if grid is None or grid.grid is None or grid.cell_count() == 0:
        raise MissingPrecondition(
            "cell coordinates",
            "The raster needs a grid of latitudes and longitudes.",
        )

    lats = grid.latitudes()
    missing = np.isnan(lats)
    if missing.all():
        raise MissingPrecondition(
            "latitude", "None of the %d cells has a latitude." % lats.size
        )
    if missing.any():
        warnings.warn(
            "%d of %d cells have no latitude; their estimates will be missing"
            % (missing.sum(), lats.size),
            MissingAttributeWarning,
            stacklevel=3,
        )

    dates = grid.dates()
    missing = np.isnat(dates)
    if missing.all():
        raise MissingPrecondition(
            "layer dates",
            "Provide a date for each layer, e.g. from the time variable.",
        )
    if missing.any():
        warnings.warn(
            "%d of %d layers have no date; they will be left missing"
            % (missing.sum(), dates.size),
            MissingAttributeWarning,
            stacklevel=3,
        )

    return lats, dates


def check_output(out, grid):
    """
    Raise InvalidInput unless out has the cells and layers of grid.
    """
    if out.cell_count() != grid.cell_count():
        raise InvalidInput(
            "Output has %d cells, input %d" % (out.cell_count(), grid.cell_count()),
            field="out",
        )
    if out.layer_count() != grid.layer_count():
        raise InvalidInput(
            "Output has %d layers, input %d"
            % (out.layer_count(), grid.layer_count()),
            field="out",
        )


def apply_na_neg(ssd, na_neg=True):
    """
    Negative sunshine becomes missing (na_neg) or zero (not na_neg).
    """
    ssd = np.array(ssd, dtype=float)
    with np.errstate(invalid="ignore"):
        neg = ssd < 0
    ssd[neg] = np.nan if na_neg else 0.0
    return ssd


def raster_solar_radiation(
    grid,
    show_progress=True,
    na_neg=True,
    out=None,
    observer=None,
    strategy=None,
    overwrite=True,
    config=None,
    A=None,
    B=None,
    on_invalid=None,
    method=None,
):
    """
    Estimate daily solar radiation (MJ/m²/day) for every cell and layer of
    grid, a LayerStore of sunshine duration (h).

    Each layer is passed with the latitudes of all cells and its date to
    solar_radiation() and written to the same layer of out (default: an
    in-memory raster like grid), which is returned.

    A layer that cannot be read or computed (storage error, no date,
    invalid input) is written as missing with a LayerWarning.  With
    overwrite=False, layers that out reports as already written are skipped,
    so an interrupted pass into a file-backed store can be resumed.  SIGINT
    is held off while a layer is being written.

    observer is a Progress, or a callable(fraction, eta_seconds); if None,
    a tqdm bar is shown when show_progress.  Unset A, B, on_invalid, method
    and strategy come from config (default: load_config()).
    """

    t0 = time.time()

    if config is None:
        config = load_config()

    A = config.a if A is None else A
    B = config.b if B is None else B
    on_invalid = config.on_invalid if on_invalid is None else on_invalid
    method = config.declination if method is None else method
    if strategy is None:
        strategy = config.strategy
    strategy = get_strategy(strategy, workers=config.workers or None)

    lats, dates = check_preconditions(grid)

    if out is None:
        out = grid.like(name=OUTPUT_NAME, units=OUTPUT_UNITS)
    else:
        check_output(out, grid)

    nt = grid.layer_count()
    if overwrite:
        layers = list(range(nt))
    else:
        layers = [k for k in range(nt) if not out.isfull(k)]
        if show_progress and len(layers) < nt:
            print(
                "%d of %d layers already written... skipping" % (nt - len(layers), nt)
            )

    def read():
        # Reads stay in the calling thread
        for k in layers:
            error = None
            try:
                ssd = grid.values_of_layer(k)
            except (OSError, RuntimeError) as e:
                ssd, error = None, "read failed: %s" % e
            yield k, ssd, dates[k], error

    def compute(k, ssd, date, error):
        if error is not None:
            return k, None, error
        if np.isnat(date):
            return k, None, "no date"
        try:
            rs = solar_radiation(
                lats,
                date,
                apply_na_neg(ssd, na_neg),
                A=A,
                B=B,
                on_invalid=on_invalid,
                method=method,
            )
        except ValueError as e:
            return k, None, str(e)
        return k, rs, None

    missing = np.full(grid.cell_count(), np.nan)

    progress = get_progress(observer, show_progress, desc=grid.name)
    progress.start(len(layers))

    try:
        for done, (k, rs, reason) in enumerate(strategy.map(compute, read()), 1):

            if rs is None:
                warnings.warn(
                    "Layer %d (%s) left missing: %s" % (k, dates[k], reason),
                    LayerWarning,
                    stacklevel=2,
                )
                rs = missing

            with DelayedKeyboardInterrupt():
                out.write_layer(k, rs)
                out.flush()

            progress.update(done, len(layers), progress.eta(done, len(layers)))

    finally:
        progress.close()

    syslog_elapsed_time(
        time.time() - t0, "sola %s %d layers" % (grid.name or "raster", len(layers))
    )

    return out
