"""Tests for the naive benchmark models."""

import numpy as np
import pandas as pd
import pytest

from ts_core import TimeSeries
from ts_core.exceptions import InsufficientDataError, ParameterError
from ts_core.forecasting.models.naive import FittedNaive, NaiveModel


def _weekly_sales() -> pd.Series:
    # 3 weeks of daily data with a fixed weekday pattern plus growth
    dates = pd.date_range("2025-01-06", periods=21, freq="D")
    pattern = [100.0, 110.0, 120.0, 130.0, 150.0, 200.0, 180.0]
    values = [pattern[i % 7] + i for i in range(21)]
    return pd.Series(values, index=dates)


def test_naive_repeats_last_value() -> None:
    """Test that the naive method repeats the last observation."""
    model = NaiveModel()

    fitted = model.train(TimeSeries.from_values([1.0, 3.0, 2.0, 5.0]))
    result = model.forecast(fitted, steps=3)

    assert isinstance(fitted, FittedNaive)
    assert result.mean.tolist() == [5.0, 5.0, 5.0]
    assert np.isnan(fitted.residuals.iloc[0])
    assert fitted.residuals.iloc[1:].tolist() == [2.0, -1.0, 3.0]


def test_naive_sd_grows_with_sqrt_horizon() -> None:
    """Test random-walk interval widths."""
    model = NaiveModel()

    fitted = model.train(TimeSeries.from_values([1.0, 3.0, 2.0, 5.0]))
    result = model.forecast(fitted, steps=4)

    sigma = np.sqrt(fitted.sigma2)
    np.testing.assert_allclose(result.sd.to_numpy(), sigma * np.sqrt([1, 2, 3, 4]))


def test_seasonal_naive_repeats_last_week() -> None:
    """Test that seasonal naive uses the same weekday one week earlier."""
    series = TimeSeries(_weekly_sales(), period=7)
    model = NaiveModel(method="seasonal")

    fitted = model.train(series)
    result = model.forecast(fitted, steps=9)

    last_week = series.values[-7:].tolist()
    assert result.mean.tolist() == last_week + last_week[:2]
    assert result.index[0] == pd.Timestamp("2025-01-27")
    # second lap of the season has wider intervals
    assert result.sd.iloc[7] == pytest.approx(result.sd.iloc[0] * np.sqrt(2))


def test_seasonal_naive_requires_period() -> None:
    """Test that seasonal naive needs a period of at least 2."""
    model = NaiveModel(method="seasonal")
    with pytest.raises(ParameterError, match="period"):
        model.train(TimeSeries.from_values([1.0, 2.0, 3.0]))


def test_seasonal_naive_insufficient_data() -> None:
    """Test that seasonal naive needs more than one season."""
    model = NaiveModel(method="seasonal", seasonal_period=7)
    with pytest.raises(InsufficientDataError):
        model.train(TimeSeries.from_values(np.arange(7.0)))


def test_drift_extends_first_to_last_line() -> None:
    """Test that the drift method extrapolates the average change."""
    model = NaiveModel(method="drift")

    fitted = model.train(TimeSeries.from_values([2.0, 5.0, 4.0, 8.0]))
    result = model.forecast(fitted, steps=2)

    assert fitted.params["slope"] == pytest.approx(2.0)
    np.testing.assert_allclose(result.mean.to_numpy(), [10.0, 12.0])


def test_mean_method_forecasts_average() -> None:
    """Test that the mean method forecasts the historical average."""
    model = NaiveModel(method="mean")

    fitted = model.train(TimeSeries.from_values([2.0, 4.0, 6.0]))
    result = model.forecast(fitted, steps=2)

    assert result.mean.tolist() == [4.0, 4.0]
    assert result.sd.iloc[0] == pytest.approx(result.sd.iloc[1])


def test_unknown_method() -> None:
    """Test that unknown methods raise ParameterError."""
    with pytest.raises(ParameterError, match="Unknown naive method"):
        NaiveModel(method="last_week")


def test_naive_model_populates_debug_info() -> None:
    """Test that NaiveModel populates debug_ after forecast()."""
    model = NaiveModel()
    assert model.debug_ is None

    fitted = model.train(TimeSeries.from_values([1.0, 2.0, 3.0]))
    model.forecast(fitted, steps=2)

    assert model.debug_ is not None
    assert model.debug_.model_name == "naive"
    assert model.debug_.data["method"] == "naive"
    assert model.debug_.data["horizon_steps"] == 2
    assert model.debug_.data["last_observation"] == 3.0
