# -*- coding: utf-8 -*-
#
# Copyright 2019 Klimaat

"""
Gridded time series of per-cell values, one layer per date.

LayerStore is the interface the raster driver talks to; subclasses supply
storage (in memory here, netCDF in sola.netcdf, HDF5 in sola.hyperslab).
Cells are numbered row-major: cell k is row k // nx, column k % nx.
"""

import numpy as np
import pandas as pd

from sola.dates import NaT, to_date
from sola.errors import InvalidInput
from sola.grid import Grid, RectilinearGrid


class LayerStore(object):
    """
    Base class for gridded layer stores.
    """

    # Grid geometry; None if the store has no cell coordinates
    grid = None

    # Variable name and units of the stored values
    name = None
    units = None

    def __enter__(self):
        return self

    def __exit__(self, *ignored):
        self.close()

    def close(self):
        pass

    def flush(self):
        pass

    def __len__(self):
        """
        Number of layers.
        """
        return self.layer_count()

    @property
    def shape(self):
        """
        (ny, nx, nt)
        """
        if self.grid is None:
            return None
        return self.grid.shape + (self.layer_count(),)

    def cell_count(self):
        if self.grid is None:
            return 0
        return len(self.grid)

    def cell_index(self, index):
        """
        Return (i, j) of cell index
        """
        return divmod(index, self.grid.shape[1])

    def latitude_of_cell(self, index):
        i, j = self.cell_index(index)
        return self.grid[i, j][0]

    def longitude_of_cell(self, index):
        i, j = self.cell_index(index)
        return self.grid[i, j][1]

    def latitudes(self):
        """
        Latitude of every cell, in cell order.
        """
        i, j = self.grid.indices()
        return np.asarray(self.grid[i.ravel(), j.ravel()][0], dtype=float)

    def longitudes(self):
        """
        Longitude of every cell, in cell order.
        """
        i, j = self.grid.indices()
        return np.asarray(self.grid[i.ravel(), j.ravel()][1], dtype=float)

    def layer_count(self):
        raise NotImplementedError

    def date_of_layer(self, index):
        raise NotImplementedError

    def dates(self):
        """
        Date of every layer as datetime64[D]; NaT where undefined.
        """
        return np.array(
            [self.date_of_layer(k) for k in range(self.layer_count())],
            dtype="<M8[D]",
        )

    def values_of_layer(self, index):
        raise NotImplementedError

    def write_layer(self, index, values):
        raise NotImplementedError

    def isfull(self, index):
        """
        Whether layer index has been written.  Stores that cannot tell
        answer False.
        """
        return False

    def like(self, name=None, units=None):
        """
        Return an empty (NaN) in-memory raster on the same grid and dates.
        """
        return Raster(
            np.full(self.shape, np.nan),
            grid=self.grid,
            dates=self.dates(),
            name=name,
            units=units,
        )

    def layer(self, index):
        """
        Layer index as a 2-D (ny, nx) array.
        """
        return np.reshape(self.values_of_layer(index), self.grid.shape)

    def series(self, lat, lon):
        """
        Extract time series at the cell nearest to (lat, lon) as a pandas
        Series indexed by layer date.
        """
        if hasattr(lat, "__len__") or hasattr(lon, "__len__"):
            raise ValueError("Specify only single location.")

        i, j = self.grid(lat, lon, snap=True, limit=True)
        k = i * self.grid.shape[1] + j

        data = [self.values_of_layer(t)[k] for t in range(self.layer_count())]

        return pd.Series(
            index=pd.DatetimeIndex(self.dates()), data=data, name=self.name
        )

    def plot(self, index, ax=None, **kwargs):
        """
        Map of layer index.
        """
        import matplotlib.pyplot as plt

        if ax is None:
            _, ax = plt.subplots()

        mesh = ax.pcolormesh(
            self.grid.lons(),
            self.grid.lats(),
            self.layer(index),
            shading="nearest",
            **kwargs
        )
        label = self.name or ""
        if self.units:
            label += " (%s)" % self.units
        ax.figure.colorbar(mesh, ax=ax, label=label)
        date = self.date_of_layer(index)
        if not np.isnat(date):
            ax.set_title(str(date))
        ax.set_xlabel("Longitude")
        ax.set_ylabel("Latitude")

        return ax


class Raster(LayerStore):
    """
    In-memory raster; data is (ny, nx, nt) with time last.
    """

    def __init__(self, data, grid=None, dates=None, name=None, units=None):

        data = np.asarray(data, dtype=float)
        if data.ndim == 2:
            data = data[..., np.newaxis]
        if data.ndim != 3:
            raise InvalidInput(
                "Raster data must be (ny, nx, nt), got %d dimensions" % data.ndim,
                field="data",
            )

        if grid is not None and tuple(grid.shape) != data.shape[:2]:
            raise InvalidInput(
                "Grid shape %r does not match data %r" % (grid.shape, data.shape[:2]),
                field="grid",
            )

        self.data = data
        self.grid = grid
        self.name = name
        self.units = units

        nt = data.shape[-1]
        if dates is None:
            self._dates = np.full(nt, NaT)
        else:
            dates = np.atleast_1d(to_date(dates))
            if len(dates) > nt:
                raise InvalidInput(
                    "%d dates given for %d layers" % (len(dates), nt), field="dates"
                )
            # Short date list: remaining layers have no date
            self._dates = np.concatenate([dates, np.full(nt - len(dates), NaT)])

        self._full = np.zeros(nt, dtype=bool)

    @classmethod
    def from_arrays(cls, data, lats, lons, dates=None, **kwargs):
        """
        Build from row latitudes and column longitudes.
        """
        return cls(data, grid=RectilinearGrid(lats, lons), dates=dates, **kwargs)

    @classmethod
    def from_grid(cls, data, shape, origin, delta, dates=None, **kwargs):
        """
        Build on a regular grid.
        """
        return cls(data, grid=Grid(shape, origin, delta), dates=dates, **kwargs)

    def __repr__(self):
        return "%s(shape=%r, name=%r)" % (
            self.__class__.__name__,
            self.data.shape,
            self.name,
        )

    @property
    def shape(self):
        return self.data.shape

    def cell_count(self):
        return self.data.shape[0] * self.data.shape[1]

    def layer_count(self):
        return self.data.shape[-1]

    def date_of_layer(self, index):
        return self._dates[index]

    def dates(self):
        return self._dates.copy()

    def values_of_layer(self, index):
        return self.data[..., index].ravel()

    def write_layer(self, index, values):
        self.data[..., index] = np.reshape(values, self.data.shape[:2])
        self._full[index] = True

    def isfull(self, index):
        return bool(self._full[index])
