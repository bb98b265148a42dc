"""Tests for differencing and its inversion."""

import numpy as np
import pytest

from ts_core.exceptions import InsufficientDataError, ParameterError
from ts_core.forecasting.differencing import Differencer, difference


def test_difference_lag_one() -> None:
    """Test a single first difference."""
    assert difference([1.0, 3.0, 6.0, 10.0]).tolist() == [2.0, 3.0, 4.0]


def test_difference_seasonal_lag() -> None:
    """Test a lag-m difference."""
    assert difference([1.0, 2.0, 3.0, 5.0, 7.0], lag=3).tolist() == [4.0, 5.0]


def test_differencer_round_trip_recovers_series() -> None:
    """Test that integrate() undoes seasonal plus ordinary differencing."""
    rng = np.random.default_rng(7)
    y = np.cumsum(rng.normal(size=30)) + np.tile([1.0, -2.0, 0.5, 3.0], 8)[:30]
    differencer = Differencer(d=1, seasonal_d=1, period=4)

    w = differencer.difference(y)

    assert len(w) == len(y) - differencer.n_lost
    assert differencer.n_lost == 5
    np.testing.assert_allclose(differencer.integrate(w), y)


def test_integrate_forecast_continues_from_tail() -> None:
    """Test that zero differences continue the last level (d=1)."""
    differencer = Differencer(d=1)
    differencer.difference([1.0, 2.0, 4.0])

    assert differencer.integrate_forecast([0.0, 0.0]).tolist() == [4.0, 4.0]
    assert differencer.integrate_forecast([1.0, 1.0]).tolist() == [5.0, 6.0]


def test_integrate_forecast_seasonal_repeats_last_season() -> None:
    """Test that zero seasonal differences repeat the last season."""
    differencer = Differencer(seasonal_d=1, period=3)
    differencer.difference([1.0, 2.0, 3.0, 4.0, 5.0, 6.0])

    result = differencer.integrate_forecast(np.zeros(5))

    assert result.tolist() == [4.0, 5.0, 6.0, 4.0, 5.0]


def test_polynomial_coefficients() -> None:
    """Test (1 - L)(1 - L^2) expands correctly."""
    differencer = Differencer(d=1, seasonal_d=1, period=2)

    assert differencer.polynomial().tolist() == [1.0, -1.0, -1.0, 1.0]
    assert Differencer().polynomial().tolist() == [1.0]


def test_differencer_rejects_short_series() -> None:
    """Test that series no longer than the total lag are rejected."""
    differencer = Differencer(d=1, seasonal_d=1, period=4)
    with pytest.raises(InsufficientDataError):
        differencer.difference(np.arange(5.0))


def test_differencer_validation() -> None:
    """Test invalid differencing orders."""
    with pytest.raises(ParameterError):
        Differencer(d=-1)
    with pytest.raises(ParameterError, match="period"):
        Differencer(seasonal_d=1, period=1)
