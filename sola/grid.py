# -*- coding: utf-8 -*-
#
# Copyright 2019 Klimaat

import numpy as np


def center(lon, rad=False):
    """
    Ensure longitude is within -180 to +180
    """
    if rad:
        return ((lon + np.pi) % (2 * np.pi)) - np.pi
    else:
        return ((lon + 180.0) % 360) - 180.0


def _item(x, like):
    return np.asarray(x).item() if np.isscalar(like) else x


class Grid(object):
    """
    Regular latitude/longitude grid.

    Row i and column j map to latitude origin[0] + i·delta[0] and longitude
    origin[1] + j·delta[1].
    """

    def __init__(
        self,
        shape=(181, 360),
        origin=(-90, -180),
        delta=(1, 1),
        periodic=True,
        **kwargs
    ):

        self.shape = tuple(shape)
        self.origin = origin
        self.delta = delta
        self.periodic = periodic

        # Default coordinates in map'd space
        self.y0, self.x0 = origin
        self.dy, self.dx = delta

    def __repr__(self):
        return "%s(shape=%r, origin=%r, delta=%r)" % (
            self.__class__.__name__,
            self.shape,
            self.origin,
            self.delta,
        )

    def __getitem__(self, args):
        """
        Given (i, j), what is corresponding (lat, lon)?
        """

        # Convert to x, y
        x, y = self.ij2xy(*map(np.asarray, args))

        # Convert to lat, lon
        lat, lon = self.xy2ll(x, y)

        return _item(lat, args[0]), _item(lon, args[1])

    def __call__(self, lat, lon, snap=False, limit=False):
        """
        Return location in grid given latitude, longitude.
        """

        # Convert to x, y
        x, y = self.ll2xy(np.asarray(lat, dtype=float), np.asarray(lon, dtype=float))

        # Find i, j
        i, j = self.xy2ij(x, y)

        if limit:
            eps = np.finfo(float).eps
            i = np.clip(i, -0.5 + eps, self.shape[0] - 0.5 - eps)
            j = np.clip(j, -0.5 + eps, self.shape[1] - 0.5 - eps)

        if snap:
            i, j = np.rint(i).astype(int), np.rint(j).astype(int)

        if self.periodic:
            j %= self.shape[1]

        return _item(i, lat), _item(j, lon)

    def __len__(self):
        """
        Number of cells.
        """
        return self.shape[0] * self.shape[1]

    def lats(self):
        return self[np.arange(self.shape[0]), 0][0]

    def lons(self):
        return self[0, np.arange(self.shape[1])][1]

    def indices(self):
        """
        Return a full set of i, j indices
        """
        return np.meshgrid(
            np.arange(self.shape[0]), np.arange(self.shape[1]), indexing="ij"
        )

    def ij2xy(self, i, j):
        """
        Convert grid indices to (x,y)-coordinates
        """
        return self.x0 + self.dx * j, self.y0 + self.dy * i

    def xy2ij(self, x, y):
        """
        Convert (x,y)-coordinates to grid indices.
        """
        i, j = (y - self.y0) / self.dy, (x - self.x0) / self.dx

        if self.periodic:
            j %= self.shape[1]

        return i, j

    def ll2xy(self, lat, lon):
        """
        Default projection x=lon, y=lat.
        """
        return center(lon), lat

    def xy2ll(self, x, y):
        """
        Default projection lat=y, lon=x
        """
        return np.clip(y, -90, 90), center(x)


class RectilinearGrid(Grid):
    """
    Grid given by explicit latitude (rows) and longitude (columns) vectors,
    e.g. as read from a netCDF file.  Spacing may be irregular.

    Latitudes are returned exactly as given; validating them is left to the
    caller.
    """

    def __init__(self, lats, lons, **kwargs):

        self._lats = np.asarray(lats, dtype=float).ravel()

        # Unwrap so longitudes are monotonic across the dateline
        lons = np.asarray(lons, dtype=float).ravel()
        jumps = np.nan_to_num(np.diff(lons, prepend=lons[:1]))
        self._lons = lons - 360 * np.cumsum(np.rint(jumps / 360))

        super(RectilinearGrid, self).__init__(
            shape=(len(self._lats), len(self._lons)),
            origin=(0, 0),
            delta=(1, 1),
            periodic=False,
            **kwargs
        )

    def __repr__(self):
        return "%s(shape=%r)" % (self.__class__.__name__, self.shape)

    @staticmethod
    def _invert(v, coords):
        """
        Piece-wise interpolate v into monotonic coords, returning index.
        """
        idx = np.arange(len(coords), dtype=float)
        if len(coords) > 1 and coords[0] > coords[-1]:
            return np.interp(v, coords[::-1], idx[::-1])
        return np.interp(v, coords, idx)

    @staticmethod
    def _lookup(v, coords):
        """
        Coordinate at index v; exact at whole indices so one missing
        coordinate does not spill into its neighbours.
        """
        v = np.asarray(v, dtype=float)
        i = np.rint(v)
        exact = np.isclose(v, i) & (i >= 0) & (i < len(coords))
        k = np.clip(np.nan_to_num(i), 0, len(coords) - 1).astype(int)
        return np.where(exact, coords[k], np.interp(v, np.arange(len(coords)), coords))

    def ll2xy(self, lat, lon):
        """
        Convert (lat, lon) to (x, y) in index space.
        """

        # Bring longitude into the span of the stored longitudes
        lon0 = np.nanmin(self._lons)
        lon = lon0 + (lon - lon0) % 360

        return self._invert(lon, self._lons), self._invert(lat, self._lats)

    def xy2ll(self, x, y):
        """
        Convert (x, y) in index space to (lat, lon)
        """
        return self._lookup(y, self._lats), center(self._lookup(x, self._lons))
