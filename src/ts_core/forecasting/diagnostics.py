"""Stationarity, seasonality and residual diagnostics.

These helpers drive automatic ARIMA differencing and give a quick
white-noise check on model residuals. All tests come from statsmodels.
"""

from __future__ import annotations

import logging
import warnings

import numpy as np
import pandas as pd
from statsmodels.stats.diagnostic import acorr_ljungbox
from statsmodels.tools.sm_exceptions import InterpolationWarning
from statsmodels.tsa.seasonal import STL
from statsmodels.tsa.stattools import kpss

from ts_core.exceptions import StationarityWarning
from ts_core.forecasting.config import (
    KPSS_ALPHA,
    MAX_D,
    MAX_SEASONAL_D,
    SEASONAL_STRENGTH_THRESHOLD,
)
from ts_core.forecasting.differencing import difference

logger = logging.getLogger(__name__)

# KPSS needs a handful of points to estimate its long-run variance
_MIN_KPSS_OBS = 4


def kpss_pvalue(values) -> float:
    """KPSS level-stationarity p-value (statsmodels clips it to [0.01, 0.1])."""
    x = np.asarray(values, dtype=float)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", InterpolationWarning)
        _, pvalue, _, _ = kpss(x, regression="c", nlags="auto")
    return float(pvalue)


def is_stationary(values, alpha: float = KPSS_ALPHA) -> bool:
    """True unless KPSS rejects level stationarity at ``alpha``.

    Constant and very short series are treated as stationary.
    """
    x = np.asarray(values, dtype=float)
    if len(x) < _MIN_KPSS_OBS or np.ptp(x) == 0:
        return True
    return kpss_pvalue(x) >= alpha


def kpss_ndiffs(values, alpha: float = KPSS_ALPHA, max_d: int = MAX_D) -> int:
    """Number of ordinary differences needed for KPSS stationarity.

    Differences one more time while KPSS rejects stationarity, up to
    ``max_d``. If the series still fails at the maximum, a
    StationarityWarning is issued and ``max_d`` is returned.
    """
    x = np.asarray(values, dtype=float)
    d = 0
    while d < max_d and not is_stationary(x, alpha):
        x = difference(x)
        d += 1
        logger.debug(f"KPSS rejected stationarity, differencing (d={d})")

    if d == max_d and not is_stationary(x, alpha):
        message = f"Series is still non-stationary after {max_d} differences"
        logger.warning(message)
        warnings.warn(message, StationarityWarning, stacklevel=2)
    return d


def seasonal_strength(values, period: int) -> float:
    """STL seasonal strength, max(0, 1 - Var(R) / Var(S + R)).

    Returns 0.0 when the series is too short for two full seasons or the
    period is below 2.
    """
    x = np.asarray(values, dtype=float)
    if period < 2 or len(x) < 2 * period + 1 or np.ptp(x) == 0:
        return 0.0

    result = STL(x, period=period, robust=True).fit()
    remainder = np.asarray(result.resid)
    seasonal = np.asarray(result.seasonal)
    total = np.var(seasonal + remainder)
    if total == 0:
        return 0.0
    return float(max(0.0, 1.0 - np.var(remainder) / total))


def nsdiffs(
    values,
    period: int,
    threshold: float = SEASONAL_STRENGTH_THRESHOLD,
    max_seasonal_d: int = MAX_SEASONAL_D,
) -> int:
    """Number of seasonal differences, taken while seasonal strength > threshold."""
    x = np.asarray(values, dtype=float)
    seasonal_d = 0
    while seasonal_d < max_seasonal_d and seasonal_strength(x, period) > threshold:
        x = difference(x, lag=period)
        seasonal_d += 1
    return seasonal_d


def ljung_box(residuals, lags: int | None = None, model_df: int = 0) -> dict[str, float]:
    """Ljung-Box portmanteau test on residuals.

    Args:
        residuals: Residual series (NaNs are dropped).
        lags: Number of autocorrelation lags; defaults to min(10, n // 5).
        model_df: Degrees of freedom used by the model (subtracted from lags).

    Returns:
        Dictionary with "statistic", "pvalue" and "lags".
    """
    resid = pd.Series(np.asarray(residuals, dtype=float)).dropna()
    if lags is None:
        lags = max(1, min(10, len(resid) // 5))
    table = acorr_ljungbox(resid, lags=[lags], model_df=model_df, return_df=True)
    return {
        "statistic": float(table["lb_stat"].iloc[0]),
        "pvalue": float(table["lb_pvalue"].iloc[0]),
        "lags": int(lags),
    }
