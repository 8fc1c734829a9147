# -*- coding: utf-8 -*-
#
# Copyright 2019 Klimaat

"""
Defaults for the estimator and raster driver, read from an ini file:

    [angstrom]
    a = 0.25
    b = 0.50

    [solar]
    declination = FAO56
    on_invalid = mask

    [raster]
    strategy = sequential
    workers = 0

The file is $SOLA_CONFIG if set, else $XDG_CONFIG_HOME/sola.conf, else
~/.config/sola.conf.  A missing file gives the defaults above.
"""

import os
import configparser

from sola.errors import ConfigError

DEFAULTS = {
    "angstrom": {"a": "0.25", "b": "0.50"},
    "solar": {"declination": "FAO56", "on_invalid": "mask"},
    "raster": {"strategy": "sequential", "workers": "0"},
}

DECLINATIONS = ["FAO56", "FAO", "ASHRAE", "COOPER"]
ON_INVALID = ["mask", "raise"]
STRATEGIES = ["sequential", "threaded"]


def get_config_path():
    if "SOLA_CONFIG" in os.environ:
        return os.path.expanduser(os.environ["SOLA_CONFIG"])
    elif "XDG_CONFIG_HOME" in os.environ:
        return os.path.join(os.environ["XDG_CONFIG_HOME"], "sola.conf")
    else:
        return os.path.join(os.path.expanduser("~"), ".config", "sola.conf")


class Config(object):
    """
    Validated view of a ConfigParser.
    """

    def __init__(self, parser=None, path=None):
        if parser is None:
            parser = configparser.ConfigParser()
        for section, options in DEFAULTS.items():
            if not parser.has_section(section):
                parser.add_section(section)
            for key, value in options.items():
                if not parser.has_option(section, key):
                    parser.set(section, key, value)
        self.parser = parser
        self.path = path

        # Validate everything up front
        for attr in ["a", "b", "declination", "on_invalid", "strategy", "workers"]:
            getattr(self, attr)

    def __repr__(self):
        return "%s(path=%r)" % (self.__class__.__name__, self.path)

    def _float(self, section, key):
        try:
            return self.parser.getfloat(section, key)
        except ValueError:
            raise ConfigError(
                "%s.%s" % (section, key),
                "expected a number, got %r" % self.parser.get(section, key),
            )

    def _choice(self, section, key, choices, upper=False):
        value = self.parser.get(section, key).strip()
        value = value.upper() if upper else value.lower()
        if value not in choices:
            raise ConfigError(
                "%s.%s" % (section, key),
                "expected one of %s, got %r" % (", ".join(choices), value),
            )
        return value

    @property
    def a(self):
        return self._float("angstrom", "a")

    @property
    def b(self):
        return self._float("angstrom", "b")

    @property
    def declination(self):
        return self._choice("solar", "declination", DECLINATIONS, upper=True)

    @property
    def on_invalid(self):
        return self._choice("solar", "on_invalid", ON_INVALID)

    @property
    def strategy(self):
        return self._choice("raster", "strategy", STRATEGIES)

    @property
    def workers(self):
        try:
            workers = self.parser.getint("raster", "workers")
        except ValueError:
            raise ConfigError(
                "raster.workers",
                "expected an integer, got %r" % self.parser.get("raster", "workers"),
            )
        if workers < 0:
            raise ConfigError("raster.workers", "must be >= 0, got %d" % workers)
        return workers


def load_config(path=None):
    """
    Read configuration from path (default get_config_path()).
    """
    if path is None:
        path = get_config_path()

    parser = configparser.ConfigParser()
    try:
        parser.read(path)
    except configparser.Error as e:
        raise ConfigError(path, str(e))

    return Config(parser, path=path)
