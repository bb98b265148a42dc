"""Forecasting models module.

Forecasting Model Checklist
===========================

When adding a new forecasting model, follow this checklist so it works with
the batch API and exposes debug information:

1. Subclass ForecastModel and call ``super().__init__()`` (sets ``debug_``).

2. Return a FittedModel (or a dataclass extending it) from train():
   ```python
   def train(self, series, **kwargs) -> FittedModel:
       ts = as_time_series(series, period=self.seasonal_period)
       ts.require_complete()
       ...
       return FittedModel(series=ts, fitted=..., residuals=..., sigma2=..., n_params=...)
   ```

3. Return a ForecastResult from forecast() and populate ``debug_`` afterwards:
   ```python
   def forecast(self, model, steps, levels=INTERVAL_LEVELS, **kwargs) -> ForecastResult:
       check_horizon(steps)
       ...
       result = ForecastResult.from_moments(mean, sd, levels, model_name=self.name)
       self.debug_ = ModelDebugInfo(model_name=self.name, data={...})
       return result
   ```

4. Important constraints:
   - Residuals are observed minus fitted, one per training timestamp
     (NaN where no one-step prediction exists)
   - Use ``name`` consistently; run_forecast(debug=True) stores debug info as
     debug[model_name][key]
   - Raise ts_core exceptions (InsufficientDataError, ParameterError, ...)
     so the batch API can skip a key instead of aborting the run
"""

from ts_core.forecasting.models.arima import ARIMAModel, FittedARIMA
from ts_core.forecasting.models.base import FittedModel, ForecastModel
from ts_core.forecasting.models.ets import ETSModel, FittedETS
from ts_core.forecasting.models.naive import FittedNaive, NaiveModel

__all__ = [
    "ARIMAModel",
    "ETSModel",
    "FittedARIMA",
    "FittedETS",
    "FittedModel",
    "FittedNaive",
    "ForecastModel",
    "NaiveModel",
]
