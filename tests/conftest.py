"""Shared pytest fixtures."""

import syslog

import numpy as np
import pytest

import matplotlib

matplotlib.use("Agg")

from sola.config import Config
from sola.raster import Raster


@pytest.fixture(autouse=True)
def no_user_config(tmp_path, monkeypatch):
    """Point configuration lookup at a file that does not exist."""
    monkeypatch.setenv("SOLA_CONFIG", str(tmp_path / "missing.conf"))


@pytest.fixture(autouse=True)
def no_syslog(monkeypatch):
    """Capture syslog messages instead of sending them."""
    messages = []
    monkeypatch.setattr(syslog, "syslog", messages.append)
    return messages


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def sunshine():
    """Sunshine duration (h) on 2 x 3 cells over 4 days."""
    data = np.array(
        [
            [[8.0, 6.0, 10.0, 0.0], [4.0, 12.0, 2.0, 9.0], [7.0, 7.5, 3.0, 11.0]],
            [[5.0, 1.0, 13.0, 6.5], [0.5, 8.5, 9.5, 4.5], [10.5, 2.5, 6.0, 12.0]],
        ]
    )
    return Raster.from_arrays(
        data,
        lats=[35.0, 50.0],
        lons=[-75.0, -74.0, -73.0],
        dates=["2023-03-15", "2023-03-16", "2023-06-21", "2023-11-01"],
        name="ssd",
        units="h",
    )
