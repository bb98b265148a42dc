"""Forecast accuracy metrics.

Point metrics (MAE, RMSE, MAPE, sMAPE, MASE, RMSSE), distributional
metrics (quantile/pinball score, Winkler interval score, CRPS) and skill
scores relative to a benchmark.

Undefined values are returned as NaN instead of raising: percentage errors
where the actual value is zero, scaled errors for a constant training series,
and skill scores against a zero benchmark. Every other input problem (shape
mismatch, invalid probability or level) raises ValueError.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd
from scipy.stats import norm

from ts_core.exceptions import InsufficientDataError
from ts_core.forecasting.types import ForecastResult


def _pair(actual, forecast) -> tuple[np.ndarray, np.ndarray]:
    y = np.asarray(actual, dtype=float)
    f = np.asarray(forecast, dtype=float)
    if y.shape != f.shape:
        raise ValueError(f"Shape mismatch: actual {y.shape} vs forecast {f.shape}")
    return y, f


def _reduce(values: np.ndarray, average: bool) -> float | np.ndarray:
    return float(np.mean(values)) if average else values


def mae(actual, forecast) -> float:
    """Mean absolute error."""
    y, f = _pair(actual, forecast)
    return float(np.mean(np.abs(y - f)))


def rmse(actual, forecast) -> float:
    """Root mean squared error."""
    y, f = _pair(actual, forecast)
    return float(np.sqrt(np.mean((y - f) ** 2)))


def percentage_errors(actual, forecast) -> np.ndarray:
    """100 * (y - f) / y per element, NaN where y == 0."""
    y, f = _pair(actual, forecast)
    out = np.full(y.shape, np.nan)
    nonzero = y != 0
    out[nonzero] = 100.0 * (y[nonzero] - f[nonzero]) / y[nonzero]
    return out


def mape(actual, forecast) -> float:
    """Mean absolute percentage error; NaN if any actual value is zero."""
    return float(np.mean(np.abs(percentage_errors(actual, forecast))))


def smape(actual, forecast) -> float:
    """Symmetric MAPE, 200 |y - f| / (|y| + |f|); NaN if any denominator is zero."""
    y, f = _pair(actual, forecast)
    denom = np.abs(y) + np.abs(f)
    out = np.full(y.shape, np.nan)
    nonzero = denom != 0
    out[nonzero] = 200.0 * np.abs(y[nonzero] - f[nonzero]) / denom[nonzero]
    return float(np.mean(out))


def naive_scale(training, period: int = 1, power: int = 1) -> float:
    """Mean of |y_t - y_{t-m}|**power over the training data.

    Raises:
        InsufficientDataError: If the training series has no lag-m pairs.
    """
    x = np.asarray(training, dtype=float)
    x = x[~np.isnan(x)]
    if len(x) <= period:
        raise InsufficientDataError(
            f"Need more than {period} training observations to compute the naive scale"
        )
    diffs = x[period:] - x[:-period]
    return float(np.mean(np.abs(diffs) ** power))


def mase(actual, forecast, training, period: int = 1) -> float:
    """Mean absolute scaled error; NaN when the training series is constant."""
    y, f = _pair(actual, forecast)
    scale = naive_scale(training, period, power=1)
    if scale == 0:
        return np.nan
    return float(np.mean(np.abs(y - f)) / scale)


def rmsse(actual, forecast, training, period: int = 1) -> float:
    """Root mean squared scaled error; NaN when the training series is constant."""
    y, f = _pair(actual, forecast)
    scale = naive_scale(training, period, power=2)
    if scale == 0:
        return np.nan
    return float(np.sqrt(np.mean((y - f) ** 2) / scale))


def pinball_loss(actual, quantile_forecast, prob: float) -> np.ndarray:
    """Per-element pinball loss for the ``prob`` quantile."""
    if not 0.0 < prob < 1.0:
        raise ValueError(f"Quantile probability must be in (0, 1), got {prob}")
    y, q = _pair(actual, quantile_forecast)
    return np.where(y >= q, prob * (y - q), (1.0 - prob) * (q - y))


def quantile_score(actual, quantile_forecast, prob: float, average: bool = True):
    """Quantile (pinball) score for one quantile level."""
    return _reduce(pinball_loss(actual, quantile_forecast, prob), average)


def winkler_score(actual, lower, upper, level: float, average: bool = True):
    """Winkler interval score for a central ``level``% prediction interval.

    Interval width plus 2/alpha times the distance by which the observation
    falls outside [lower, upper]. Observations on a bound are not penalized.
    """
    if not 0.0 < level < 100.0:
        raise ValueError(f"Interval level must be in (0, 100), got {level}")
    y, lo = _pair(actual, lower)
    _, hi = _pair(actual, upper)
    alpha = 1.0 - level / 100.0
    score = (hi - lo) + (2.0 / alpha) * (
        np.clip(lo - y, 0.0, None) + np.clip(y - hi, 0.0, None)
    )
    return _reduce(score, average)


def crps(actual, quantiles, probs: Sequence[float] | None = None, average: bool = True):
    """CRPS approximated over a quantile grid.

    CRPS is the integral of twice the pinball loss over all quantile levels;
    here the integral is replaced by the average over the supplied grid.

    Args:
        actual: Observations, shape (h,).
        quantiles: Quantile forecasts, shape (h, K). A DataFrame whose
            columns are the probabilities can be passed without ``probs``.
        probs: The K quantile probabilities.
        average: Average over horizons (True) or return one score per horizon.
    """
    if probs is None:
        if not isinstance(quantiles, pd.DataFrame):
            raise ValueError("probs is required unless quantiles is a DataFrame")
        probs = [float(c) for c in quantiles.columns]
    q = np.asarray(quantiles, dtype=float)
    y = np.asarray(actual, dtype=float)
    if q.ndim != 2 or q.shape != (len(y), len(probs)):
        raise ValueError(
            f"quantiles must have shape ({len(y)}, {len(probs)}), got {q.shape}"
        )
    losses = np.column_stack(
        [pinball_loss(y, q[:, k], prob) for k, prob in enumerate(probs)]
    )
    return _reduce(2.0 * losses.mean(axis=1), average)


def crps_gaussian(actual, mean, sd, average: bool = True):
    """Closed-form CRPS of a normal forecast; |y - mean| where sd is zero."""
    y, mu = _pair(actual, mean)
    _, sigma = _pair(actual, sd)
    if np.any(sigma < 0):
        raise ValueError("Standard deviations must be non-negative")

    score = np.abs(y - mu)
    spread = sigma > 0
    z = (y[spread] - mu[spread]) / sigma[spread]
    score[spread] = sigma[spread] * (
        z * (2.0 * norm.cdf(z) - 1.0) + 2.0 * norm.pdf(z) - 1.0 / np.sqrt(np.pi)
    )
    return _reduce(score, average)


def skill_score(benchmark, candidate):
    """Relative improvement (benchmark - candidate) / benchmark.

    Works on scalars or arrays; NaN wherever the benchmark score is zero.
    """
    b = np.asarray(benchmark, dtype=float)
    c = np.asarray(candidate, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        score = np.where(b != 0, (b - c) / np.where(b != 0, b, 1.0), np.nan)
    return float(score) if score.ndim == 0 else score


def _align_actual(forecast: ForecastResult, actual) -> np.ndarray:
    if isinstance(actual, pd.Series) and forecast.index.isin(actual.index).all():
        return actual.reindex(forecast.index).to_numpy(dtype=float)
    values = np.asarray(actual, dtype=float)
    if len(values) != forecast.horizon:
        raise ValueError(
            f"Expected {forecast.horizon} actual values for the forecast, got {len(values)}"
        )
    return values


def accuracy_report(
    forecast: ForecastResult,
    actual,
    training=None,
    period: int = 1,
    probs: Sequence[float] | None = None,
) -> dict[str, float]:
    """All applicable metrics for one forecast against held-out actuals.

    Args:
        forecast: ForecastResult to score.
        actual: Held-out observations (Series aligned by index, or values in
            horizon order).
        training: Training observations; enables MASE and RMSSE.
        period: Seasonal period used for the MASE/RMSSE scale.
        probs: Optional quantile grid; adds a grid CRPS next to the
            closed-form Gaussian CRPS.

    Returns:
        Dictionary of metric name to value (NaN where undefined).
    """
    y = _align_actual(forecast, actual)
    mean = forecast.mean.to_numpy(dtype=float)
    report = {
        "mae": mae(y, mean),
        "rmse": rmse(y, mean),
        "mape": mape(y, mean),
        "smape": smape(y, mean),
    }
    if training is not None:
        report["mase"] = mase(y, mean, training, period)
        report["rmsse"] = rmsse(y, mean, training, period)

    for level in sorted(forecast.intervals):
        bounds = forecast.interval(level)
        report[f"winkler_{level:g}"] = winkler_score(
            y, bounds["lower"].to_numpy(), bounds["upper"].to_numpy(), level
        )

    report["crps"] = crps_gaussian(y, mean, forecast.sd.to_numpy(dtype=float))
    if probs is not None:
        report["crps_grid"] = crps(y, forecast.quantiles(probs).to_numpy(), probs)
    return report
