# -*- coding: utf-8 -*-
#
# Copyright 2019 Klimaat

import os

import numpy as np
import netCDF4

from sola.dates import NaT
from sola.errors import InvalidInput
from sola.grid import RectilinearGrid
from sola.raster import LayerStore

# Recognized coordinate variable names
LAT_NAMES = ["lat", "latitude", "y"]
LON_NAMES = ["lon", "longitude", "x"]
TIME_NAMES = ["time", "t"]


def find_variable(nc, names):
    """
    Return first variable in nc named in names, or None.
    """
    for name in names:
        if name in nc.variables:
            return nc.variables[name]
    return None


def read_dates(time):
    """
    Convert a CF time variable into datetime64[D]; NaT where the value is
    masked or is not a valid calendar day.
    """
    dates = np.full(time.shape[0], NaT)

    if not hasattr(time, "units"):
        return dates

    t = time[:]
    ok = ~np.ma.getmaskarray(t)
    if not ok.any():
        return dates

    stamps = netCDF4.num2date(
        np.ma.getdata(t)[ok],
        units=time.units,
        calendar=getattr(time, "calendar", "standard"),
    )

    for k, stamp in zip(np.flatnonzero(ok), np.atleast_1d(stamps)):
        try:
            dates[k] = np.datetime64(
                "%04d-%02d-%02d" % (stamp.year, stamp.month, stamp.day), "D"
            )
        except ValueError:
            # e.g. Feb 30 of a 360-day calendar
            continue

    return dates


class NetCDFRaster(LayerStore):
    """
    Layer store backed by a netCDF file holding a (time, lat, lon) variable.
    """

    def __init__(self, path, variable=None, mode="r"):
        self.path = os.path.abspath(path)
        self.variable = variable
        self.nc = None
        self.connect(mode=mode)

    def connect(self, mode="r"):
        """
        Connect to an existing netCDF file
        """
        self.close()
        self.nc = netCDF4.Dataset(self.path, mode=mode)
        try:
            self.setup()
        except Exception:
            self.close()
            raise

    def setup(self):

        nc = self.nc

        if self.variable is None:
            # First 3-D variable
            candidates = [k for k, v in nc.variables.items() if v.ndim == 3]
            if not candidates:
                raise InvalidInput(
                    "No (time, lat, lon) variable in %s" % self.path, field="variable"
                )
            self.variable = candidates[0]
        elif self.variable not in nc.variables:
            raise InvalidInput(
                "No variable %r in %s" % (self.variable, self.path),
                field="variable",
                value=self.variable,
            )

        self.var = nc.variables[self.variable]
        self.var.set_auto_mask(True)
        self.name = self.variable
        self.units = getattr(self.var, "units", None)

        dims = list(self.var.dimensions)

        time = find_variable(nc, TIME_NAMES)
        if time is not None and time.dimensions and time.dimensions[0] in dims:
            self.t_axis = dims.index(time.dimensions[0])
        else:
            self.t_axis = 0

        lat = find_variable(nc, LAT_NAMES)
        lon = find_variable(nc, LON_NAMES)

        if lat is None or lon is None:
            # Nothing to locate cells by
            self.grid = None
            self.transpose = False
        else:
            self.grid = RectilinearGrid(
                np.ma.filled(np.ma.asarray(lat[:], dtype=float), np.nan),
                np.ma.filled(np.ma.asarray(lon[:], dtype=float), np.nan),
            )
            # Stored as (lon, lat)?
            space = [d for i, d in enumerate(dims) if i != self.t_axis]
            self.transpose = bool(lat.dimensions) and space[-1] == lat.dimensions[0]

        if time is None:
            self._dates = np.full(self.layer_count(), NaT)
        else:
            self._dates = read_dates(time)

    @classmethod
    def create(cls, path, like, variable="rs", units="MJ m-2 day-1", long_name=None):
        """
        Create a netCDF file with a (time, lat, lon) variable on the grid
        and dates of store like, filled with missing values, and open it
        for writing.
        """

        if like.grid is None:
            raise InvalidInput("Template raster has no grid", field="like")

        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)

        ny, nx = like.grid.shape
        dates = like.dates()

        with netCDF4.Dataset(os.path.abspath(path), "w") as nc:

            nc.createDimension("time", len(dates))
            nc.createDimension("lat", ny)
            nc.createDimension("lon", nx)

            time = nc.createVariable("time", "f8", ("time",))
            time.units = "days since 1970-01-01"
            time.calendar = "standard"
            days = (dates - np.datetime64("1970-01-01", "D")).astype(np.int64)
            time[:] = np.ma.masked_array(days.astype(float), mask=np.isnat(dates))

            lat = nc.createVariable("lat", "f8", ("lat",))
            lat.units = "degrees_north"
            lat[:] = like.grid.lats()

            lon = nc.createVariable("lon", "f8", ("lon",))
            lon.units = "degrees_east"
            lon[:] = like.grid.lons()

            var = nc.createVariable(
                variable,
                "f4",
                ("time", "lat", "lon"),
                zlib=True,
                fill_value=netCDF4.default_fillvals["f4"],
            )
            var.units = units
            if long_name:
                var.long_name = long_name

        return cls(path, variable=variable, mode="r+")

    def close(self):
        if self.nc is not None and self.nc.isopen():
            self.nc.close()

    def flush(self):
        if self.nc is not None and self.nc.isopen():
            self.nc.sync()

    def __repr__(self):
        return "%s(path=%r, variable=%r)" % (
            self.__class__.__name__,
            self.path,
            self.variable,
        )

    def layer_count(self):
        return self.var.shape[self.t_axis]

    def date_of_layer(self, index):
        return self._dates[index]

    def dates(self):
        return self._dates.copy()

    def _index(self, index):
        i = [slice(None)] * self.var.ndim
        i[self.t_axis] = index
        return tuple(i)

    def _read(self, index):
        x = self.var[self._index(index)]
        return x.T if self.transpose else x

    def values_of_layer(self, index):
        x = np.ma.asarray(self._read(index), dtype=float)
        return np.ma.filled(x, np.nan).ravel()

    def write_layer(self, index, values):
        x = np.reshape(np.asarray(values, dtype=float), self.grid.shape)
        if self.transpose:
            x = x.T
        self.var[self._index(index)] = np.ma.masked_invalid(x)

    def isfull(self, index):
        """
        A layer counts as written once any cell holds a value.
        """
        return not np.ma.getmaskarray(self._read(index)).all()
