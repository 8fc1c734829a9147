# -*- coding: utf-8 -*-
#
# Copyright 2019 Klimaat

"""
Daily solar geometry and radiation from latitude, date and sunshine duration.

Ref: Allen, R.G., Pereira, L.S., Raes, D. & Smith, M. 1998. "Crop
     Evapotranspiration", FAO Irrigation and Drainage Paper 56, Chapter 3.

All functions are element-wise over latitude/date/sunshine inputs; shorter
inputs are repeated cyclically to the length of the longest one.  Scalar
inputs give a scalar result.
"""

import numbers

import numpy as np

from sola.dates import to_date, doy
from sola.errors import InvalidInput

# Solar constant (MJ/m²/min)
GSC = 0.0820

# Tolerance (radians) on the polar day/night test of day_length
POLAR_TOLERANCE = 1e-6

# Floor for day length (h) before dividing sunshine by it
MIN_DAY_LENGTH = 1e-6


def as_numeric(x, field):
    """
    Convert x to a float array; None becomes NaN.  Anything else that is
    not a real number raises InvalidInput.
    """
    arr = np.asarray(x)

    if arr.dtype.kind in "iuf":
        return arr.astype(float)

    if arr.dtype.kind == "O":
        flat = [np.nan if v is None else v for v in arr.ravel()]
        if all(
            isinstance(v, numbers.Real) and not isinstance(v, (bool, np.bool_))
            for v in flat
        ):
            return np.array(flat, dtype=float).reshape(arr.shape)

    label = field.replace("_", " ").capitalize()
    raise InvalidInput("%s must be numeric." % label, field=field)


def check_latitude(latitude):
    """
    Return latitude (degrees) as float array; raise if outside [-90, 90].
    Missing (NaN) latitudes pass through.
    """
    lat = as_numeric(latitude, "latitude")
    bad = (lat < -90) | (lat > 90)
    if np.any(bad):
        raise InvalidInput(
            "Latitude must be between -90 and 90 degrees.",
            field="latitude",
            value=float(np.atleast_1d(lat)[np.atleast_1d(bad)][0]),
        )
    return lat


def recycle(*args):
    """
    Flatten args and repeat each cyclically to the longest length.
    """
    arrs = [np.atleast_1d(a).ravel() for a in args]
    n = max(a.size for a in arrs)
    if n and any(a.size == 0 for a in arrs):
        raise InvalidInput("Cannot recycle an empty input to length %d." % n)
    return [np.resize(a, n) for a in arrs]


def squeeze(x, scalar):
    """
    Return a Python float for scalar calls, the array otherwise.
    """
    if scalar:
        return np.asarray(x).ravel()[0].item()
    return x


def declination_fao56(j):
    """
    Solar declination (radians) given day of year j.
    FAO-56 eqn. 24.
    """
    return 0.409 * np.sin(2 * np.pi / 365 * j - 1.39)


def declination_ashrae(j):
    """
    Solar declination (radians) given day of year j.
    Ref. ASHRAE HOF 2017, Chap 14, eqn. 10 (Cooper 1969).
    """
    return np.radians(23.45 * np.sin(2 * np.pi * (j + 284) / 365))


def declination_method(method=None):
    """
    Resolve a declination formula by name (default FAO-56) or callable.
    """

    if method is None:
        method = "FAO56"

    if callable(method):
        return method

    method = method.upper()
    if method in ["FAO56", "FAO"]:
        return declination_fao56
    elif method in ["ASHRAE", "COOPER"]:
        return declination_ashrae
    else:
        raise NotImplementedError(method)


def _sunset_hour_angle(sinLat, cosLat, sinDec, cosDec):
    """
    Sunset hour angle (radians) given sines and cosines of latitude and
    declination.  The arccos argument is clamped so that polar day (π) and
    polar night (0) come out instead of NaN.
    """
    h0 = np.arccos(np.clip(-sinDec / cosDec * sinLat / cosLat, -1, 1))
    return np.clip(h0, 0, np.pi)


def _day_length(lat, dec, h0):
    """
    Day length (h) given latitude, declination and sunset hour angle
    (radians).  FAO-56 eqn. 34 with explicit polar day and night.
    """
    return np.where(
        lat + dec > np.pi / 2 - POLAR_TOLERANCE,
        24.0,
        np.where(lat + dec < -np.pi / 2 + POLAR_TOLERANCE, 0.0, 24 / np.pi * h0),
    )


def _extraterrestrial_radiation(lat, dec, h0, j):
    """
    Daily extraterrestrial radiation (MJ/m²/day) given latitude,
    declination, sunset hour angle (radians) and day of year j.
    FAO-56 eqns. 21 and 23.
    """

    # Inverse relative distance Earth-Sun
    dr = 1 + 0.033 * np.cos(2 * np.pi * j / 365)

    Ra = (
        (24 * 60 / np.pi)
        * GSC
        * dr
        * (np.cos(lat) * np.cos(dec) * np.sin(h0) + np.sin(lat) * np.sin(dec) * h0)
    )

    # Round-off at polar night
    return np.maximum(Ra, 0)


def _geometry(lat, dates, method=None):
    """
    Return latitude, declination, sunset hour angle (radians) and day of
    year for recycled latitude (degrees) and datetime64[D] arrays.
    """
    lat = np.radians(lat)
    j = doy(dates)
    dec = declination_method(method)(j)
    h0 = _sunset_hour_angle(np.sin(lat), np.cos(lat), np.sin(dec), np.cos(dec))
    return lat, dec, h0, j


def declination(dates, degrees=False, method=None):
    """
    Calculate the solar declination for date-like input.

    Radians by default, degrees if requested.  Missing dates give NaN.
    """
    dec = declination_method(method)(doy(to_date(dates)))

    if degrees:
        dec = np.degrees(dec)

    return squeeze(dec, np.ndim(dec) == 0)


def sunset_hour_angle(dates, latitude, degrees=False, method=None):
    """
    Calculate the sunset hour angle, within [0, π], for date-like input
    and latitude (degrees).

    Radians by default, degrees if requested.  Raises InvalidInput for
    latitudes outside [-90, 90].
    """
    scalar = np.ndim(dates) == 0 and np.ndim(latitude) == 0

    lat = check_latitude(latitude)
    lat, dates = recycle(lat, to_date(dates))

    _, _, h0, _ = _geometry(lat, dates, method=method)

    if degrees:
        h0 = np.degrees(h0)

    return squeeze(h0, scalar)


def day_length(latitude, dates, method=None):
    """
    Calculate the maximum possible sunshine duration N (h) given latitude
    (degrees) and date-like input.

    24 h in continuous daylight and 0 h in continuous night, judged on
    latitude + declination against ±π/2.  Raises InvalidInput for latitudes
    outside [-90, 90].
    """
    scalar = np.ndim(dates) == 0 and np.ndim(latitude) == 0

    lat = check_latitude(latitude)
    lat, dates = recycle(lat, to_date(dates))

    lat, dec, h0, _ = _geometry(lat, dates, method=method)

    return squeeze(_day_length(lat, dec, h0), scalar)


def extraterrestrial_radiation(latitude, dates, method=None):
    """
    Calculate daily extraterrestrial radiation Ra (MJ/m²/day) on a
    horizontal surface given latitude (degrees) and date-like input.

    Raises InvalidInput for latitudes outside [-90, 90] or unparseable
    dates.
    """
    scalar = np.ndim(dates) == 0 and np.ndim(latitude) == 0

    lat = check_latitude(latitude)
    lat, dates = recycle(lat, to_date(dates))

    lat, dec, h0, j = _geometry(lat, dates, method=method)

    return squeeze(_extraterrestrial_radiation(lat, dec, h0, j), scalar)


def solar_radiation(
    latitude,
    dates,
    sunshine_duration,
    day_length=None,
    extraterrestrial_radiation=None,
    A=0.25,
    B=0.50,
    on_invalid="mask",
    method=None,
):
    """
    Estimate daily solar radiation Rs (MJ/m²/day) with the Angstrom-Prescott
    model, FAO-56 eqn. 35:

        Rs = (A + B·n/N)·Ra

    where n is sunshine duration (h), N day length (h) and Ra the
    extraterrestrial radiation.  N and Ra are calculated from latitude and
    date unless supplied.

    Element-wise policies:
    - latitude outside [-90, 90] or sunshine outside [0, 24] are masked to
      NaN (on_invalid="mask") or raise InvalidInput (on_invalid="raise")
    - missing latitude, sunshine or date give NaN for that element only
    - N that is zero, negative or NaN is replaced by 1e-6
    - sunshine is capped at N
    - any other NaN estimate is replaced by zero

    The declination is FAO-56 eqn. 24 unless method (or the config) says
    otherwise.  method="ASHRAE" uses the 23.45° Cooper form and reproduces
    the figures of earlier releases of this model, e.g. 17.36 rather than
    17.39 for 8 h at 35°N on 2023-03-15.
    """

    if on_invalid not in ("mask", "raise"):
        raise InvalidInput(
            "on_invalid must be 'mask' or 'raise', not %r" % (on_invalid,),
            field="on_invalid",
            value=on_invalid,
        )

    scalar = all(np.ndim(x) == 0 for x in (latitude, dates, sunshine_duration))

    lat = as_numeric(latitude, "latitude")
    ssd = as_numeric(sunshine_duration, "sunshine_duration")
    lat, dates, ssd = recycle(lat, to_date(dates), ssd)
    n = lat.size

    bad_lat = (lat < -90) | (lat > 90)
    bad_ssd = (ssd < 0) | (ssd > 24)

    if on_invalid == "raise":
        if bad_lat.any():
            raise InvalidInput(
                "Latitude must be between -90 and 90 degrees.",
                field="latitude",
                value=float(lat[bad_lat][0]),
            )
        if bad_ssd.any():
            raise InvalidInput(
                "Sunshine duration must be a number between 0 and 24.",
                field="sunshine_duration",
                value=float(ssd[bad_ssd][0]),
            )

    lat = np.where(bad_lat, np.nan, lat)
    ssd = np.where(bad_ssd, np.nan, ssd)

    missing = np.isnan(lat) | np.isnan(ssd) | np.isnat(dates)
    if missing.all():
        return squeeze(np.full(n, np.nan), scalar)

    phi, dec, h0, j = _geometry(lat, dates, method=method)

    if day_length is None:
        N = _day_length(phi, dec, h0)
    else:
        N = np.resize(as_numeric(day_length, "day_length").ravel(), n)

    if extraterrestrial_radiation is None:
        Ra = _extraterrestrial_radiation(phi, dec, h0, j)
    else:
        Ra = as_numeric(extraterrestrial_radiation, "extraterrestrial_radiation")
        Ra = np.resize(Ra.ravel(), n)

    # Avoid division by zero
    N = np.where(np.isnan(N) | (N <= 0), MIN_DAY_LENGTH, N)

    # Sunshine cannot exceed day length
    ssd = np.minimum(ssd, N)

    with np.errstate(invalid="ignore"):
        Rs = (A + B * (ssd / N)) * Ra

    Rs = np.where(np.isnan(Rs), 0.0, Rs)
    Rs = np.where(missing, np.nan, Rs)

    return squeeze(Rs, scalar)


def test():

    for lat, date, ssd in [
        (35.0, "2023-03-15", 8),
        (-15.0, "2024-06-21", 10),
        (50.0, "2023-11-01", 6),
    ]:
        print(
            lat,
            date,
            ssd,
            solar_radiation(lat, date, ssd),
            solar_radiation(lat, date, ssd, method="ASHRAE"),
        )


if __name__ == "__main__":
    test()
