"""Base model interface for forecasting models.

This module defines the abstract base class that all forecasting models must implement,
enabling a consistent interface for different model types (ETS, ARIMA, naive benchmarks).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Sequence

import numpy as np
import pandas as pd

from ts_core.exceptions import ParameterError
from ts_core.forecasting.types import ForecastResult, ModelDebugInfo
from ts_core.series import TimeSeries


def information_criteria(sse: float, n_obs: int, n_params: int) -> tuple[float, float]:
    """AIC and small-sample corrected AIC from a sum of squared errors.

    AIC = T ln(SSE/T) + 2(k+2) and AICc adds 2(k+2)(k+3)/(T-k-3).

    Returns:
        (aic, aicc). AICc is inf when T <= k + 3; both are inf for T == 0.
    """
    if n_obs <= 0:
        return np.inf, np.inf
    # A perfect fit would give ln(0); floor the SSE so scores stay finite.
    sse = max(sse, np.finfo(float).tiny * n_obs)
    aic = n_obs * np.log(sse / n_obs) + 2.0 * (n_params + 2)
    denom = n_obs - n_params - 3
    if denom <= 0:
        return aic, np.inf
    aicc = aic + 2.0 * (n_params + 2) * (n_params + 3) / denom
    return aic, aicc


@dataclass
class FittedModel:
    """Common fields of a trained model.

    Attributes:
        series: Training series.
        fitted: One-step-ahead in-sample predictions.
        residuals: Observed minus fitted, one per training timestamp.
        sigma2: Innovation variance used for prediction intervals.
        n_params: Number of estimated quantities (for information criteria).
        params: Model-specific parameter values.
    """

    series: TimeSeries
    fitted: pd.Series
    residuals: pd.Series
    sigma2: float
    n_params: int
    params: dict[str, Any] = field(default_factory=dict)

    @property
    def sse(self) -> float:
        return float(np.nansum(self.residuals.to_numpy() ** 2))

    @property
    def n_obs(self) -> int:
        return int(self.residuals.notna().sum())

    @property
    def aic(self) -> float:
        return information_criteria(self.sse, self.n_obs, self.n_params)[0]

    @property
    def aicc(self) -> float:
        return information_criteria(self.sse, self.n_obs, self.n_params)[1]


class ForecastModel(ABC):
    """Abstract base class for forecasting models.

    All forecasting models must implement the train() and forecast() methods
    to provide a consistent interface for the forecasting pipeline. After
    forecast() the model exposes ``debug_`` with model-specific details.
    """

    name: str = "model"

    def __init__(self) -> None:
        self.debug_: ModelDebugInfo | None = None

    @abstractmethod
    def train(self, series: TimeSeries | pd.Series, **kwargs: Any) -> FittedModel:
        """Train the forecasting model on a time series.

        Args:
            series: TimeSeries (or pandas Series) without missing values
            **kwargs: Model-specific options

        Returns:
            Trained model object

        Raises:
            InsufficientDataError: If the series is too short
            DataQualityError: If the series has missing values
        """
        pass

    @abstractmethod
    def forecast(
        self,
        model: FittedModel,
        steps: int,
        levels: Sequence[float] = (80, 95),
        **kwargs: Any,
    ) -> ForecastResult:
        """Generate a forecast distribution from a trained model.

        Args:
            model: Trained model object (from train() method)
            steps: Number of periods to forecast ahead
            levels: Prediction interval confidence levels in percent
            **kwargs: Model-specific forecast parameters

        Returns:
            ForecastResult indexed by the future time labels
        """
        pass

    def fit_forecast(
        self,
        series: TimeSeries | pd.Series,
        steps: int,
        levels: Sequence[float] = (80, 95),
    ) -> tuple[FittedModel, ForecastResult]:
        """Train on ``series`` and forecast ``steps`` ahead in one call."""
        fitted = self.train(series)
        return fitted, self.forecast(fitted, steps=steps, levels=levels)


def check_horizon(steps: int) -> None:
    """Raise ParameterError unless ``steps`` is a positive integer."""
    if int(steps) != steps or steps < 1:
        raise ParameterError(f"Forecast horizon must be a positive integer, got {steps}")
