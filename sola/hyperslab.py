# -*- coding: utf-8 -*-
#
# Copyright 2019 Klimaat

import os
import numpy as np
import h5py

from sola.grid import RectilinearGrid
from sola.raster import LayerStore
from sola.util import DelayedKeyboardInterrupt


class HyperSlab(LayerStore):
    """
    One year of gridded layers in an HDF5 file, stored as scaled int16.

    Layer t is dated t0 + t·freq hours, t0 being New Year's + hour0; with
    the default freq=24 there is one layer per day.
    """

    def __init__(self, path, **kwargs):
        self.path = os.path.abspath(path)
        self.hdf = None
        if os.path.isfile(self.path):
            self.connect(mode="r")

    def connect(self, mode="r", **kwargs):
        """
        Connect to an existing hdf5 file
        """
        self.close()
        self.hdf = h5py.File(self.path, mode=mode, **kwargs)
        self.setup()

    def setup(self):

        # Insert HDF attributes into class attributes
        for attr in ["year", "freq", "scale", "offset", "missing", "hour0"]:
            setattr(self, attr, self.hdf.attrs[attr])

        for attr in ["name", "units"]:
            value = self.hdf.attrs.get(attr, "")
            setattr(self, attr, value if value else None)

        # Hyperslab time origin; New Year's + hour0 to closest minute
        self.t0 = np.datetime64("%04d-01-01" % self.year) + np.timedelta64(
            int(np.rint(self.hour0 * 60)), "m"
        )

        # Span between slabs
        self.dt = np.timedelta64(int(self.freq), "h")

        self.grid = RectilinearGrid(self.hdf["lat"][:], self.hdf["lon"][:])

    def close(self):
        if self:
            self.hdf.close()
            self.hdf = None

    def flush(self):
        if self:
            self.hdf.flush()

    def __str__(self):
        return self.path

    def __repr__(self):
        return "%s(path=%r)" % (self.__class__.__name__, self.path)

    def __bool__(self):
        """
        Check if initialized.
        """
        return False if self.hdf is None else True

    def to_int(self, x):
        """
        Convert to integer; storage representation.
        """
        # Handle masked arrays, converted to regular if necessary
        x = np.ma.filled(np.ma.asarray(x, dtype=float), fill_value=np.nan)
        with np.errstate(invalid="ignore"):
            i = np.rint((x - self.offset) / self.scale)
        return np.where(np.isnan(x), self.missing, i).astype(np.int16)

    def to_float(self, i, dtype=float):
        """
        Convert to float; real representation
        """
        return np.where(
            i == self.missing,
            np.nan,
            np.array(i * self.scale + self.offset, dtype=dtype),
        )

    def __getitem__(self, i):
        """
        Numpy indexing into full data array.
        """
        if self:
            return self.to_float(self.hdf["data"][i])

    def create(
        self,
        grid,
        year=1970,
        freq=24,
        scale=0.01,
        offset=0,
        hour0=0,
        missing=np.iinfo(np.int16).max,
        name=None,
        units=None,
        **kwargs
    ):
        """
        Create a data hyperslab of (ny, nx, nt) for the cells of grid.

        scale and offset fix the storable range: offset + scale·int16.
        """

        # Initialize HDF file
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        self.hdf = h5py.File(self.path, "w", libver="latest")

        # Set attrs
        self.hdf.attrs["year"] = year
        self.hdf.attrs["freq"] = freq
        self.hdf.attrs["scale"] = scale
        self.hdf.attrs["offset"] = offset
        self.hdf.attrs["missing"] = missing
        self.hdf.attrs["hour0"] = hour0
        self.hdf.attrs["name"] = name or ""
        self.hdf.attrs["units"] = units or ""

        # Cell coordinates
        self.hdf.create_dataset("lat", data=np.asarray(grid.lats(), dtype=float))
        self.hdf.create_dataset("lon", data=np.asarray(grid.lons(), dtype=float))

        # Setup attributes etc.
        self.setup()

        # Length of time series
        nt = len(self)

        # Total shape
        shape = tuple(grid.shape) + (nt,)

        # Create a dataset of integers
        self.hdf.create_dataset(
            "data", shape=shape, dtype=np.int16, fillvalue=missing, **kwargs
        )

        # Create a boolean dataset initialized to False to store
        # whether given time slice has been filled
        self.hdf.create_dataset("full", shape=(nt,), dtype=bool, fillvalue=False)

        # Create int16 datasets initialized to missing to store
        # the minimum and maximum value of a given time slice
        self.hdf.create_dataset("min", shape=(nt,), dtype=np.int16, fillvalue=missing)
        self.hdf.create_dataset("max", shape=(nt,), dtype=np.int16, fillvalue=missing)

        # Flush buffers
        self.hdf.flush()

        # Re-open in read mode
        self.connect(mode="r")

        return self

    def fill(self, t, x):
        """
        Fill hyperslab starting at integer index t with slab x.
        NB. x is already scaled and integer.
        """

        if not isinstance(t, (int, np.integer)):
            raise NotImplementedError("Need integer t")

        if self.ndim() != x.ndim:
            raise ValueError(
                "Fill requires that inserted slab has same "
                "dimensionality as existing"
            )

        if self.shape[:-1] != x.shape[:-1]:
            raise ValueError(
                "Fill requires that inserted slab non-time dimensions are equal"
            )
        nt = x.shape[-1]

        # Per-slice extremes, ignoring missing
        valid = np.ma.masked_equal(x, self.missing)
        axes = tuple(range(x.ndim - 1))
        xmin = np.ma.filled(valid.min(axis=axes), self.missing)
        xmax = np.ma.filled(valid.max(axis=axes), self.missing)

        with DelayedKeyboardInterrupt():

            self.connect(mode="r+")
            self.hdf["data"][..., t : (t + nt)] = x
            self.hdf["full"][t : (t + nt)] = True
            self.hdf["min"][t : (t + nt)] = xmin
            self.hdf["max"][t : (t + nt)] = xmax
            self.flush()
            self.connect(mode="r")

    @property
    def shape(self):
        return self.hdf["data"].shape if self else None

    def ndim(self):
        return self.hdf["data"].ndim if self else None

    def ind2date(self, i):
        """
        Given integer index i, return corresponding datetime64
        """
        return self.t0 + np.array(i, dtype="timedelta64[h]") * self.freq

    def time(self):
        return self.t0 + np.arange(len(self)) * self.dt

    def isleap(self):
        if self.year % 4 == 0 and (self.year % 100 != 0 or self.year % 400 == 0):
            return True
        return False

    def __len__(self):
        """
        Length of time series.
        """
        if self:
            if self.freq:
                days = 365
                if self.isleap():
                    days = 366
                return int((days * 24) // self.freq)
            else:
                return 1
        return 0

    def layer_count(self):
        return len(self)

    def date_of_layer(self, index):
        return self.ind2date(index).astype("<M8[D]")

    def dates(self):
        return self.time().astype("<M8[D]")

    def values_of_layer(self, index):
        return self[..., index].ravel()

    def write_layer(self, index, values):
        x = np.reshape(values, self.grid.shape + (1,))
        self.fill(int(index), self.to_int(x))

    def isfull(self, t=np.s_[:]):
        """
        Check whether all of the layers in indices t are full.
        """
        return bool(np.all(self.hdf["full"][t]))

    def count(self, t=np.s_[:]):
        """
        Count full
        """
        return int(self.hdf["full"][t].sum())

    def min(self, t=np.s_[:]):
        """
        Return minimum time series
        """
        return self.to_float(self.hdf["min"][t])

    def max(self, t=np.s_[:]):
        """
        Return maximum time series
        """
        return self.to_float(self.hdf["max"][t])
