"""Time series forecasting module.

This module provides exponential smoothing, ARIMA and naive benchmark
models, plus a batch API that forecasts every key of a long-format table.

Example:
    >>> import pandas as pd
    >>> from ts_core.forecasting import ForecastConfig, run_forecast, evaluate_forecast
    >>> from ts_core.forecasting.api import split_holdout
    >>>
    >>> df = pd.read_csv("sales.csv", parse_dates=["date"])  # key, date, value
    >>> config = ForecastConfig(horizon=14, period=7)
    >>> train, test = split_holdout(df, holdout=14, config=config)
    >>>
    >>> # Run forecast (automatic ARIMA unless config.model is set)
    >>> result = run_forecast(train, config)
    >>> print(result.forecast.head())  # key, date, mean, sd, lo_80, hi_80, ...
    >>>
    >>> # Score against the held-out data
    >>> print(evaluate_forecast(result, test, config))
"""

from ts_core.forecasting.api import (
    ForecastConfig,
    ForecastRunResult,
    evaluate_forecast,
    run_forecast,
)
from ts_core.forecasting.models import ARIMAModel, ETSModel, NaiveModel
from ts_core.forecasting.types import ForecastResult, ModelDebugInfo

__all__ = [
    "ARIMAModel",
    "ETSModel",
    "ForecastConfig",
    "ForecastResult",
    "ForecastRunResult",
    "ModelDebugInfo",
    "NaiveModel",
    "evaluate_forecast",
    "run_forecast",
]
