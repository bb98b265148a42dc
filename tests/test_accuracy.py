"""Tests for forecast accuracy metrics."""

import numpy as np
import pandas as pd
import pytest

from ts_core.exceptions import InsufficientDataError
from ts_core.forecasting import accuracy
from ts_core.forecasting.types import ForecastResult


def _forecast(mean, sd, levels=(80, 95)) -> ForecastResult:
    index = pd.RangeIndex(10, 10 + len(mean))
    return ForecastResult.from_moments(
        pd.Series(mean, index=index, dtype=float),
        pd.Series(sd, index=index, dtype=float),
        levels=levels,
        model_name="test",
    )


def test_mae_and_rmse() -> None:
    """Test the basic point metrics."""
    actual = [1.0, 2.0, 3.0, 4.0]
    forecast = [2.0, 2.0, 2.0, 2.0]

    assert accuracy.mae(actual, forecast) == pytest.approx(1.0)
    assert accuracy.rmse(actual, forecast) == pytest.approx(np.sqrt(1.5))


def test_shape_mismatch_raises() -> None:
    """Test that actual and forecast must have the same shape."""
    with pytest.raises(ValueError, match="Shape mismatch"):
        accuracy.mae([1.0, 2.0], [1.0])


def test_mape_and_smape() -> None:
    """Test percentage metrics on non-zero data."""
    actual = [100.0, 200.0]
    forecast = [110.0, 180.0]

    assert accuracy.mape(actual, forecast) == pytest.approx(10.0)
    expected_smape = (200 * 10 / 210 + 200 * 20 / 380) / 2
    assert accuracy.smape(actual, forecast) == pytest.approx(expected_smape)


def test_mape_is_nan_when_actual_is_zero() -> None:
    """Test that MAPE is undefined (NaN) when an actual value is zero."""
    assert np.isnan(accuracy.mape([0.0, 10.0], [1.0, 10.0]))
    pe = accuracy.percentage_errors([0.0, 10.0], [1.0, 9.0])
    assert np.isnan(pe[0])
    assert pe[1] == pytest.approx(10.0)


def test_smape_is_nan_when_both_are_zero() -> None:
    """Test that sMAPE is undefined when actual and forecast are both zero."""
    assert np.isnan(accuracy.smape([0.0, 1.0], [0.0, 1.0]))


def test_mase_against_naive_scale() -> None:
    """Test MASE with a hand-computed in-sample naive scale."""
    training = [1.0, 3.0, 2.0, 4.0]  # |diffs| = 2, 1, 2 -> scale 5/3

    score = accuracy.mase([5.0, 6.0], [4.0, 4.0], training)

    assert score == pytest.approx(1.5 / (5.0 / 3.0))


def test_seasonal_mase_and_rmsse() -> None:
    """Test scaled errors with a seasonal naive scale."""
    training = [1.0, 2.0, 3.0, 5.0]  # lag-2 diffs = 2, 3

    assert accuracy.naive_scale(training, period=2) == pytest.approx(2.5)
    assert accuracy.naive_scale(training, period=2, power=2) == pytest.approx(6.5)
    assert accuracy.rmsse([1.0], [3.0], training, period=2) == pytest.approx(
        np.sqrt(4.0 / 6.5)
    )


def test_mase_is_nan_for_constant_training() -> None:
    """Test that scaled errors are NaN when the training series is constant."""
    assert np.isnan(accuracy.mase([1.0], [2.0], [5.0, 5.0, 5.0]))
    assert np.isnan(accuracy.rmsse([1.0], [2.0], [5.0, 5.0, 5.0]))


def test_naive_scale_needs_enough_training_data() -> None:
    """Test that the scale needs more than one season of training data."""
    with pytest.raises(InsufficientDataError):
        accuracy.naive_scale([1.0, 2.0], period=2)


def test_pinball_loss_asymmetry() -> None:
    """Test pinball loss above and below the quantile."""
    loss = accuracy.pinball_loss([10.0, 10.0], [8.0, 12.0], prob=0.9)

    np.testing.assert_allclose(loss, [0.9 * 2.0, 0.1 * 2.0])
    assert accuracy.quantile_score([10.0, 10.0], [8.0, 12.0], 0.9) == pytest.approx(1.0)


def test_pinball_loss_rejects_invalid_probability() -> None:
    """Test that probabilities outside (0, 1) are rejected."""
    with pytest.raises(ValueError, match="probability"):
        accuracy.pinball_loss([1.0], [1.0], prob=1.0)


def test_winkler_score_inside_and_at_bounds() -> None:
    """Test that observations inside or on the interval cost only its width."""
    scores = accuracy.winkler_score(
        [5.0, 2.0, 8.0], [2.0, 2.0, 2.0], [8.0, 8.0, 8.0], level=95, average=False
    )

    np.testing.assert_allclose(scores, [6.0, 6.0, 6.0])


def test_winkler_score_penalizes_misses() -> None:
    """Test the 2/alpha penalty for observations outside the interval."""
    score = accuracy.winkler_score([10.0], [2.0], [8.0], level=80)

    assert score == pytest.approx(6.0 + (2.0 / 0.2) * 2.0)


def test_winkler_score_rejects_invalid_level() -> None:
    """Test that levels outside (0, 100) are rejected."""
    with pytest.raises(ValueError, match="level"):
        accuracy.winkler_score([1.0], [0.0], [2.0], level=100)


def test_crps_of_perfect_quantiles_is_zero() -> None:
    """Test that CRPS is zero when every quantile equals the observation."""
    actual = np.array([3.0, 4.0, 5.0])
    probs = [0.1, 0.5, 0.9]
    quantiles = np.repeat(actual[:, None], 3, axis=1)

    scores = accuracy.crps(actual, quantiles, probs, average=False)

    np.testing.assert_allclose(scores, 0.0)


def test_crps_is_twice_mean_pinball() -> None:
    """Test the quantile-grid CRPS definition."""
    actual = np.array([10.0])
    quantiles = pd.DataFrame([[8.0, 12.0]], columns=[0.25, 0.75])

    score = accuracy.crps(actual, quantiles)

    expected = 2.0 * np.mean([0.25 * 2.0, 0.25 * 2.0])
    assert score == pytest.approx(expected)


def test_crps_requires_probabilities_for_arrays() -> None:
    """Test that array quantiles need explicit probabilities."""
    with pytest.raises(ValueError, match="probs"):
        accuracy.crps([1.0], np.array([[1.0]]))


def test_crps_gaussian_closed_form() -> None:
    """Test the normal CRPS against known values."""
    # CRPS of N(0, 1) at its mean is 2 phi(0) - 1/sqrt(pi)
    expected = 2.0 / np.sqrt(2.0 * np.pi) - 1.0 / np.sqrt(np.pi)
    assert accuracy.crps_gaussian([0.0], [0.0], [1.0]) == pytest.approx(expected)
    # Zero spread reduces to absolute error
    assert accuracy.crps_gaussian([3.0], [1.0], [0.0]) == pytest.approx(2.0)


def test_crps_gaussian_close_to_dense_quantile_grid() -> None:
    """Test that a dense quantile grid approximates the closed form."""
    forecast = _forecast([0.0, 1.0], [1.0, 2.0])
    actual = np.array([0.5, -1.0])
    probs = np.linspace(0.01, 0.99, 99)

    grid = accuracy.crps(actual, forecast.quantiles(probs).to_numpy(), probs)
    exact = accuracy.crps_gaussian(actual, forecast.mean, forecast.sd)

    assert grid == pytest.approx(exact, rel=0.05)


def test_skill_score() -> None:
    """Test relative improvement over a benchmark."""
    assert accuracy.skill_score(2.0, 1.0) == pytest.approx(0.5)
    assert accuracy.skill_score(2.0, 3.0) == pytest.approx(-0.5)
    assert np.isnan(accuracy.skill_score(0.0, 1.0))

    scores = accuracy.skill_score([4.0, 0.0], [1.0, 1.0])
    assert scores[0] == pytest.approx(0.75)
    assert np.isnan(scores[1])


def test_forecast_interval_stored_and_on_demand() -> None:
    """Test that interval() returns stored levels and computes others."""
    forecast = _forecast([10.0, 20.0], [1.0, 2.0])

    stored = forecast.interval(80)
    extra = forecast.interval(50)

    assert stored is forecast.intervals[80]
    assert 50 not in forecast.intervals
    np.testing.assert_allclose(extra["upper"] - extra["lower"], [1.34898, 2.69796], rtol=1e-4)
    assert (extra["lower"] > stored["lower"]).all()
    assert (extra["upper"] < stored["upper"]).all()


def test_accuracy_report_collects_metrics() -> None:
    """Test the combined report for a ForecastResult."""
    forecast = _forecast([10.0, 11.0, 12.0], [1.0, 1.5, 2.0])
    actual = pd.Series([10.5, 10.0, 13.0], index=pd.RangeIndex(10, 13))

    report = accuracy.accuracy_report(
        forecast, actual, training=[8.0, 9.0, 10.0, 9.0], probs=[0.1, 0.5, 0.9]
    )

    assert set(report) == {
        "mae",
        "rmse",
        "mape",
        "smape",
        "mase",
        "rmsse",
        "winkler_80",
        "winkler_95",
        "crps",
        "crps_grid",
    }
    assert report["mae"] == pytest.approx(2.5 / 3)
    assert report["mase"] == pytest.approx((2.5 / 3) / 1.0)


def test_accuracy_report_rejects_wrong_length() -> None:
    """Test that unaligned actuals must match the horizon."""
    forecast = _forecast([1.0, 2.0], [1.0, 1.0])
    with pytest.raises(ValueError, match="Expected 2"):
        accuracy.accuracy_report(forecast, [1.0, 2.0, 3.0])
