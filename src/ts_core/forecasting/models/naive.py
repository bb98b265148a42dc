"""Naive benchmark forecasting models.

These models carry no estimated dynamics and serve as the benchmarks that
skill scores and MASE are measured against:

- "naive": repeat the last observation
- "seasonal": repeat the observation from the same phase of the last season
- "drift": extend the line between the first and last observation
- "mean": forecast the historical average
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np
import pandas as pd

from ts_core.exceptions import InsufficientDataError, ParameterError
from ts_core.forecasting.config import INTERVAL_LEVELS
from ts_core.forecasting.models.base import FittedModel, ForecastModel, check_horizon
from ts_core.forecasting.types import ForecastResult, ModelDebugInfo
from ts_core.series import TimeSeries, as_time_series

METHODS = ("naive", "seasonal", "drift", "mean")


@dataclass
class FittedNaive(FittedModel):
    """Trained naive model; ``params`` holds the method and its statistic."""

    method: str = "naive"


class NaiveModel(ForecastModel):
    """Naive benchmark forecaster.

    This is a simple baseline that captures the last level (or last season)
    without any statistical modeling. Interval widths follow the usual
    random-walk results: sigma * sqrt(h) for "naive", sigma * sqrt(k + 1)
    with k full seasons for "seasonal", sigma * sqrt(h (1 + h / T)) for
    "drift" and sigma * sqrt(1 + 1 / T) for "mean".
    """

    name = "naive"

    def __init__(self, method: str = "naive", seasonal_period: int | None = None) -> None:
        """Initialize the naive model.

        Args:
            method: One of "naive", "seasonal", "drift", "mean".
            seasonal_period: Season length for "seasonal". If None, taken
                from the series.

        Raises:
            ParameterError: If the method is unknown.
        """
        super().__init__()
        if method not in METHODS:
            raise ParameterError(f"Unknown naive method '{method}'. Options: {METHODS}")
        self.method = method
        self.seasonal_period = seasonal_period

    def train(self, series: TimeSeries | pd.Series, **_kwargs: Any) -> FittedNaive:
        """Compute in-sample fitted values and the residual variance.

        Args:
            series: Training series without missing values
            **_kwargs: Additional parameters (unused, for interface compatibility)

        Returns:
            FittedNaive

        Raises:
            InsufficientDataError: If fewer than 2 observations, or not more
                than one season for the seasonal method
        """
        ts = as_time_series(series, period=self.seasonal_period)
        ts.require_complete()
        y = ts.values
        n = len(y)
        if n < 2:
            raise InsufficientDataError(f"Insufficient data: only {n} observations")

        fitted = np.full(n, np.nan)
        params: dict[str, Any] = {"method": self.method}
        n_params = 0

        if self.method == "naive":
            fitted[1:] = y[:-1]
        elif self.method == "seasonal":
            m = ts.period
            if m < 2:
                raise ParameterError("Seasonal naive requires a seasonal period >= 2")
            if n <= m:
                raise InsufficientDataError(
                    f"Insufficient data: {n} observations for seasonal period {m}"
                )
            fitted[m:] = y[:-m]
            params["period"] = m
        elif self.method == "drift":
            slope = (y[-1] - y[0]) / (n - 1)
            fitted[1:] = y[:-1] + slope
            params["slope"] = float(slope)
            n_params = 1
        else:
            fitted[:] = y.mean()
            params["mean"] = float(y.mean())
            n_params = 1

        residuals = y - fitted
        n_eff = int(np.sum(~np.isnan(residuals)))
        sigma2 = float(np.nansum(residuals**2) / max(n_eff - n_params, 1))

        return FittedNaive(
            series=ts,
            fitted=pd.Series(fitted, index=ts.index),
            residuals=pd.Series(residuals, index=ts.index),
            sigma2=sigma2,
            n_params=n_params,
            params=params,
            method=self.method,
        )

    def forecast(
        self,
        model: FittedNaive,
        steps: int,
        levels: Sequence[float] = INTERVAL_LEVELS,
        **_kwargs: Any,
    ) -> ForecastResult:
        """Generate benchmark forecasts.

        Args:
            model: FittedNaive from train()
            steps: Number of periods to forecast ahead
            levels: Prediction interval confidence levels in percent
            **_kwargs: Additional parameters (unused, for interface compatibility)

        Returns:
            ForecastResult with point forecasts and normal intervals
        """
        check_horizon(steps)
        y = model.series.values
        n = len(y)
        h = np.arange(1, steps + 1)
        sigma = np.sqrt(model.sigma2)

        if model.method == "naive":
            mean = np.full(steps, y[-1])
            sd = sigma * np.sqrt(h)
        elif model.method == "seasonal":
            m = model.params["period"]
            mean = y[n - m + (h - 1) % m]
            sd = sigma * np.sqrt((h - 1) // m + 1)
        elif model.method == "drift":
            mean = y[-1] + h * model.params["slope"]
            sd = sigma * np.sqrt(h * (1.0 + h / n))
        else:
            mean = np.full(steps, model.params["mean"])
            sd = np.full(steps, sigma * np.sqrt(1.0 + 1.0 / n))

        index = model.series.future_index(steps)
        result = ForecastResult.from_moments(
            mean=pd.Series(mean, index=index),
            sd=pd.Series(sd, index=index),
            levels=levels,
            model_name=self.name,
        )

        # Populate generic debug channel with model-specific payload
        self.debug_ = ModelDebugInfo(
            model_name=self.name,
            data={
                "method": model.method,
                "horizon_steps": steps,
                "sigma2": model.sigma2,
                "last_observation": float(y[-1]),
            },
        )
        return result
