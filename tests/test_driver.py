"""
Tests for the raster driver.
"""

import warnings

import numpy as np
import pytest

from sola.config import load_config
from sola.driver import apply_na_neg, raster_solar_radiation
from sola.errors import (
    InvalidInput,
    LayerWarning,
    MissingAttributeWarning,
    MissingPrecondition,
)
from sola.grid import RectilinearGrid
from sola.progress import Progress
from sola.raster import Raster
from sola.solar import extraterrestrial_radiation, solar_radiation
from sola.strategy import Threaded


def one_cell(ssd, date="2023-03-15", lat=35.0):
    return Raster(
        np.full((1, 1, 1), ssd, dtype=float),
        grid=RectilinearGrid([lat], [0.0]),
        dates=[date],
    )


class TestScenario:
    def test_one_cell_matches_scalar(self, config):
        out = raster_solar_radiation(one_cell(8), show_progress=False, config=config)
        assert out.data[0, 0, 0] == pytest.approx(17.39, abs=0.05)
        assert out.data[0, 0, 0] == solar_radiation(35.0, "2023-03-15", 8)

    def test_every_layer(self, sunshine, config):
        out = raster_solar_radiation(sunshine, show_progress=False, config=config)
        assert out.shape == sunshine.shape
        assert out.name == "rs"
        assert out.units == "MJ m-2 day-1"
        for k, date in enumerate(sunshine.dates()):
            expected = solar_radiation(
                sunshine.latitudes(), date, sunshine.values_of_layer(k)
            )
            np.testing.assert_array_equal(out.values_of_layer(k), expected)

    def test_input_untouched(self, sunshine, config):
        before = sunshine.data.copy()
        raster_solar_radiation(sunshine, show_progress=False, config=config)
        np.testing.assert_array_equal(sunshine.data, before)

    def test_elapsed_time_to_syslog(self, sunshine, config, no_syslog):
        raster_solar_radiation(sunshine, show_progress=False, config=config)
        assert len(no_syslog) == 1
        assert "Elapsed" in no_syslog[0]


class TestNegativeSunshine:
    def test_na_neg(self, config):
        out = raster_solar_radiation(one_cell(-1), show_progress=False, config=config)
        assert np.isnan(out.data[0, 0, 0])

    def test_zero(self, config):
        out = raster_solar_radiation(
            one_cell(-1), show_progress=False, na_neg=False, config=config
        )
        ra = extraterrestrial_radiation(35.0, "2023-03-15")
        assert out.data[0, 0, 0] == pytest.approx(0.25 * ra)

    def test_apply_na_neg(self):
        np.testing.assert_array_equal(
            apply_na_neg([-1, 0, np.nan, 5]), [np.nan, 0, np.nan, 5]
        )
        np.testing.assert_array_equal(
            apply_na_neg([-1, 0, np.nan, 5], na_neg=False), [0, 0, np.nan, 5]
        )


class TestPreconditions:
    def test_no_grid(self):
        raster = Raster(np.zeros((1, 1, 1)), dates=["2023-03-15"])
        with pytest.raises(MissingPrecondition) as e:
            raster_solar_radiation(raster, show_progress=False)
        assert e.value.what == "cell coordinates"

    def test_no_latitudes(self):
        raster = one_cell(8, lat=np.nan)
        with pytest.raises(MissingPrecondition) as e:
            raster_solar_radiation(raster, show_progress=False)
        assert e.value.what == "latitude"

    def test_no_dates(self):
        raster = Raster(np.zeros((1, 1, 2)), grid=RectilinearGrid([35], [0]))
        with pytest.raises(MissingPrecondition) as e:
            raster_solar_radiation(raster, show_progress=False)
        assert e.value.what == "layer dates"

    def test_some_latitudes_missing(self, config):
        raster = Raster(
            np.full((2, 1, 1), 8.0),
            grid=RectilinearGrid([35, np.nan], [0]),
            dates=["2023-03-15"],
        )
        with pytest.warns(MissingAttributeWarning):
            out = raster_solar_radiation(raster, show_progress=False, config=config)
        assert out.data[0, 0, 0] == pytest.approx(solar_radiation(35, "2023-03-15", 8))
        assert np.isnan(out.data[1, 0, 0])

    def test_output_mismatch(self, sunshine):
        out = Raster(np.zeros((2, 3, 1)))
        with pytest.raises(InvalidInput) as e:
            raster_solar_radiation(sunshine, show_progress=False, out=out)
        assert e.value.field == "out"


class TestLayerFailures:
    def test_missing_date(self, config):
        raster = Raster(
            np.full((1, 1, 2), 8.0),
            grid=RectilinearGrid([35], [0]),
            dates=["2023-03-15"],
        )
        with pytest.warns(LayerWarning) as record:
            out = raster_solar_radiation(raster, show_progress=False, config=config)
        assert MissingAttributeWarning in [w.category for w in record]
        assert not np.isnan(out.data[0, 0, 0])
        assert np.isnan(out.data[0, 0, 1])
        assert out.isfull(1)

    def test_invalid_layer_continues(self, config):
        data = np.full((1, 2, 3), 8.0)
        data[0, 1, 1] = 30.0
        raster = Raster(
            data,
            grid=RectilinearGrid([35], [0, 1]),
            dates=["2023-03-15", "2023-03-16", "2023-03-17"],
        )
        with pytest.warns(LayerWarning, match="Layer 1"):
            out = raster_solar_radiation(
                raster, show_progress=False, on_invalid="raise", config=config
            )
        assert np.all(np.isnan(out.data[..., 1]))
        assert not np.any(np.isnan(out.data[..., 0]))
        assert not np.any(np.isnan(out.data[..., 2]))

    @pytest.mark.parametrize("strategy", ["sequential", "threaded"])
    def test_unreadable_layer_continues(self, sunshine, config, strategy):
        class Flaky(Raster):
            def values_of_layer(self, index):
                if index == 2:
                    raise OSError("bad block")
                return super(Flaky, self).values_of_layer(index)

        raster = Flaky(
            sunshine.data, grid=sunshine.grid, dates=sunshine.dates(), name="ssd"
        )
        with pytest.warns(LayerWarning, match="Layer 2.*read failed: bad block"):
            out = raster_solar_radiation(
                raster, show_progress=False, strategy=strategy, config=config
            )
        assert np.all(np.isnan(out.data[..., 2]))
        assert not np.any(np.isnan(out.data[..., [0, 1, 3]]))
        assert out.isfull(2)

    def test_invalid_masked_by_default(self, config):
        data = np.full((1, 2, 1), 8.0)
        data[0, 1, 0] = 30.0
        raster = Raster(
            data, grid=RectilinearGrid([35], [0, 1]), dates=["2023-03-15"]
        )
        with warnings.catch_warnings():
            warnings.simplefilter("error", LayerWarning)
            out = raster_solar_radiation(raster, show_progress=False, config=config)
        assert not np.isnan(out.data[0, 0, 0])
        assert np.isnan(out.data[0, 1, 0])


class TestStrategy:
    def test_threaded_matches_sequential(self, sunshine, config):
        sequential = raster_solar_radiation(
            sunshine, show_progress=False, config=config
        )
        threaded = raster_solar_radiation(
            sunshine,
            show_progress=False,
            strategy=Threaded(workers=3, max_pending=2),
            config=config,
        )
        np.testing.assert_array_equal(threaded.data, sequential.data)

    def test_by_name(self, sunshine, config):
        out = raster_solar_radiation(
            sunshine, show_progress=False, strategy="threaded", config=config
        )
        assert not np.any(np.isnan(out.data))


class TestResume:
    def test_skips_written_layers(self, sunshine, config):
        out = sunshine.like()
        out.write_layer(0, np.full(6, -999.0))
        raster_solar_radiation(
            sunshine, show_progress=False, out=out, overwrite=False, config=config
        )
        np.testing.assert_array_equal(out.values_of_layer(0), -999.0)
        assert not np.any(np.isnan(out.data[..., 1:]))

    def test_overwrite(self, sunshine, config):
        out = sunshine.like()
        out.write_layer(0, np.full(6, -999.0))
        raster_solar_radiation(sunshine, show_progress=False, out=out, config=config)
        assert np.all(out.values_of_layer(0) > 0)

    def test_skip_message(self, sunshine, config, capsys):
        out = sunshine.like()
        out.write_layer(0, np.zeros(6))
        raster_solar_radiation(
            sunshine, show_progress=True, out=out, overwrite=False, config=config
        )
        assert "1 of 4 layers already written... skipping" in capsys.readouterr().out


class TestProgress:
    def test_callback(self, sunshine, config):
        calls = []
        raster_solar_radiation(
            sunshine,
            observer=lambda fraction, eta: calls.append((fraction, eta)),
            config=config,
        )
        assert [c[0] for c in calls] == [0.25, 0.5, 0.75, 1.0]
        assert calls[-1][1] == 0
        assert all(eta >= 0 for _, eta in calls)

    def test_observer(self, sunshine, config):
        class Recorder(Progress):
            def __init__(self):
                self.updates = []
                self.closed = False

            def update(self, completed, total, eta=None):
                self.updates.append((completed, total))

            def close(self):
                self.closed = True

        recorder = Recorder()
        raster_solar_radiation(sunshine, observer=recorder, config=config)
        assert recorder.updates == [(1, 4), (2, 4), (3, 4), (4, 4)]
        assert recorder.closed

    def test_tqdm(self, sunshine, config, capsys):
        raster_solar_radiation(sunshine, show_progress=True, config=config)
        assert "4/4" in capsys.readouterr().err


class TestConfig:
    def test_coefficients_from_file(self, sunshine, tmp_path):
        path = tmp_path / "sola.conf"
        path.write_text("[angstrom]\na = 0.18\nb = 0.55\n")
        out = raster_solar_radiation(
            one_cell(0), show_progress=False, config=load_config(str(path))
        )
        ra = extraterrestrial_radiation(35.0, "2023-03-15")
        assert out.data[0, 0, 0] == pytest.approx(0.18 * ra)

    def test_arguments_override(self, tmp_path):
        path = tmp_path / "sola.conf"
        path.write_text("[angstrom]\na = 0.18\n")
        out = raster_solar_radiation(
            one_cell(0), show_progress=False, A=0.3, config=load_config(str(path))
        )
        ra = extraterrestrial_radiation(35.0, "2023-03-15")
        assert out.data[0, 0, 0] == pytest.approx(0.3 * ra)

    def test_environment(self, tmp_path, monkeypatch):
        path = tmp_path / "env.conf"
        path.write_text("[solar]\ndeclination = ASHRAE\n")
        monkeypatch.setenv("SOLA_CONFIG", str(path))
        out = raster_solar_radiation(one_cell(8), show_progress=False)
        assert out.data[0, 0, 0] == pytest.approx(
            solar_radiation(35.0, "2023-03-15", 8, method="ASHRAE")
        )
