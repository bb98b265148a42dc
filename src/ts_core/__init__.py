"""ts_core - time series forecasting and forecast evaluation.

This package provides a small, dependency-light forecasting toolkit built on
pandas, numpy, scipy and statsmodels:

- **Series**: a validated time-indexed container with a seasonal period
- **Models**: exponential smoothing (ETS), ARIMA with automatic order
  selection, and naive benchmarks
- **Accuracy**: point, scaled, interval and distributional error metrics

Module Structure:
    ts_core.series: TimeSeries container and missing value handling
    ts_core.forecasting: Models, batch API and CLI
    ts_core.forecasting.accuracy: Forecast accuracy metrics
    ts_core.forecasting.diagnostics: KPSS, seasonal strength, Ljung-Box

Quick Start:
    >>> import pandas as pd
    >>> from ts_core import TimeSeries
    >>> from ts_core.forecasting import ETSModel, ARIMAModel
    >>> from ts_core.forecasting.accuracy import mase
    >>>
    >>> ts = TimeSeries(sales, period=7)  # pandas Series with a DatetimeIndex
    >>> model = ETSModel(trend="add", damped=True, seasonal="add")
    >>> fitted = model.train(ts)
    >>> result = model.forecast(fitted, steps=14, levels=(80, 95))
    >>> print(result.to_frame().head())
    >>>
    >>> # Automatic ARIMA
    >>> arima = ARIMAModel()
    >>> result = arima.forecast(arima.train(ts), steps=14)
"""

__version__ = "0.1.0"

from ts_core.exceptions import (
    ConfigError,
    DataQualityError,
    InsufficientDataError,
    ParameterError,
    SeriesIndexError,
    StationarityWarning,
    TSCoreError,
)
from ts_core.series import TimeSeries

__all__ = [
    "ConfigError",
    "DataQualityError",
    "InsufficientDataError",
    "ParameterError",
    "SeriesIndexError",
    "StationarityWarning",
    "TSCoreError",
    "TimeSeries",
    "__version__",
]
