# -*- coding: utf-8 -*-
#
# Copyright 2019 Klimaat

__version__ = "0.1.0"

from sola.dates import to_date, day_of_year
from sola.solar import (
    declination,
    sunset_hour_angle,
    day_length,
    extraterrestrial_radiation,
    solar_radiation,
)
from sola.grid import Grid, RectilinearGrid
from sola.raster import LayerStore, Raster
from sola.netcdf import NetCDFRaster
from sola.hyperslab import HyperSlab
from sola.progress import Progress, TqdmProgress, CallbackProgress
from sola.strategy import Sequential, Threaded, get_strategy
from sola.config import Config, load_config
from sola.driver import raster_solar_radiation
from sola.errors import (
    SolaError,
    InvalidInput,
    MissingPrecondition,
    ConfigError,
    SolaWarning,
    NumericDateWarning,
    TimeZoneWarning,
    InvalidDateWarning,
    MissingAttributeWarning,
    LayerWarning,
)
