# -*- coding: utf-8 -*-
#
# Copyright 2019 Klimaat

"""
Date coercion and day of year.

Anything date-like is funnelled through to_date(), which returns numpy
datetime64[D] with NaT where a value is missing.  Accepted forms:

- calendar dates: datetime.date, datetime.datetime, numpy.datetime64,
  pandas.Timestamp (time of day is truncated)
- strings parseable by pandas, e.g. "2023-03-15"
- real numbers, reinterpreted as days since 1970-01-01
- any sequence of the above
"""

import datetime
import numbers
import warnings

import numpy as np
import pandas as pd

from sola.errors import (
    InvalidInput,
    InvalidDateWarning,
    NumericDateWarning,
    TimeZoneWarning,
)

NaT = np.datetime64("NaT", "D")


def from_epoch_days(days):
    """
    Convert days since 1970-01-01 into datetime64[D]; fractions are floored.
    """
    days = np.asarray(days, dtype=float)
    dates = np.full(days.shape, NaT)
    ok = np.isfinite(days)
    dates[ok] = np.floor(days[ok]).astype(np.int64).astype("<M8[D]")
    return dates


class _Coercion(object):
    """
    Per-call bookkeeping so each condition warns once, not once per element.
    """

    def __init__(self):
        self.present = 0
        self.failed = []
        self.numeric = False
        self.tz = False

    def __call__(self, x):

        if x is None or x is pd.NaT:
            return NaT

        if isinstance(x, (bool, np.bool_)):
            raise InvalidInput("Invalid date input: %r" % (x,), field="date", value=x)

        if isinstance(x, numbers.Real):
            if np.isnan(x):
                return NaT
            self.present += 1
            self.numeric = True
            return from_epoch_days(x)[()]

        if isinstance(x, np.datetime64):
            if np.isnat(x):
                return NaT
            self.present += 1
            return x.astype("<M8[D]")

        if isinstance(x, datetime.datetime):
            # Includes pandas.Timestamp and pandas.NaT
            if pd.isna(x):
                return NaT
            self.present += 1
            if x.tzinfo is not None:
                self.tz = True
            return np.datetime64(x.date(), "D")

        if isinstance(x, datetime.date):
            self.present += 1
            return np.datetime64(x, "D")

        if isinstance(x, str):
            if not x.strip():
                return NaT
            self.present += 1
            ts = pd.to_datetime(x, errors="coerce")
            if pd.isna(ts):
                self.failed.append(x)
                return NaT
            if ts.tzinfo is not None:
                self.tz = True
            return np.datetime64(ts.date(), "D")

        raise InvalidInput(
            "Invalid date input type: %s" % type(x).__name__, field="date", value=x
        )

    def warn(self):
        """
        Emit the advisory warnings collected during coercion.
        """
        if self.failed and len(self.failed) == self.present:
            raise InvalidInput(
                "Invalid date input: %r" % (self.failed[0],),
                field="date",
                value=self.failed[0],
            )
        if self.numeric:
            warnings.warn(
                "Numeric values are treated as days since 1970-01-01. "
                "Consider using date-like strings or date objects for clarity.",
                NumericDateWarning,
                stacklevel=3,
            )
        if self.tz:
            warnings.warn(
                "Time zone aware input detected; the local calendar day is "
                "used. Ensure the time zone is correct.",
                TimeZoneWarning,
                stacklevel=3,
            )
        if self.failed:
            warnings.warn(
                "%d date(s) could not be parsed and are treated as missing, "
                "e.g. %r" % (len(self.failed), self.failed[0]),
                InvalidDateWarning,
                stacklevel=3,
            )


def to_date(dates):
    """
    Coerce date-like input to datetime64[D].

    Returns a numpy.datetime64 scalar for scalar input and an array
    otherwise.  Missing values (None, NaN, NaT, "") become NaT.
    Raises InvalidInput if nothing present can be parsed.
    """

    if isinstance(dates, (pd.Series, pd.Index)):
        dates = dates.to_numpy()

    arr = np.asarray(dates)

    if arr.dtype.kind == "M":
        out = arr.astype("<M8[D]")

    elif arr.dtype.kind in "iuf":
        out = from_epoch_days(arr)
        if np.isfinite(arr).any():
            warnings.warn(
                "Numeric values are treated as days since 1970-01-01. "
                "Consider using date-like strings or date objects for clarity.",
                NumericDateWarning,
                stacklevel=2,
            )

    elif arr.dtype.kind == "b":
        raise InvalidInput("Invalid date input: booleans are not dates", field="date")

    else:
        # Strings and objects, element by element
        coerce = _Coercion()
        out = np.array([coerce(x) for x in arr.ravel()], dtype="<M8[D]")
        out = out.reshape(arr.shape)
        coerce.warn()

    if out.ndim == 0:
        return out[()]

    return out


def doy(dates):
    """
    Day of year (1-366) of datetime64[D] as float; NaN where NaT.
    """
    dates = np.asarray(dates, dtype="<M8[D]")
    days = (dates - dates.astype("<M8[Y]")).astype("<m8[D]").astype(np.int64) + 1
    return np.where(np.isnat(dates), np.nan, days.astype(float))


def day_of_year(dates):
    """
    Calculate the day of the year (1-365/366) of date-like input.

    Integer output when nothing is missing, otherwise float with NaN in
    the missing positions.  Scalar in, scalar out.
    """
    j = doy(to_date(dates))

    if j.ndim == 0:
        return np.nan if np.isnan(j) else int(j)

    if np.isnan(j).any():
        return j

    return j.astype(int)
