"""Public API for batch forecasting.

This module runs one forecasting model per series key of a long-format
DataFrame and scores the results against held-out data, entirely in memory.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from ts_core.exceptions import ConfigError, DataQualityError, TSCoreError
from ts_core.forecasting.accuracy import accuracy_report
from ts_core.forecasting.config import (
    FORECAST_STEPS,
    INTERVAL_LEVELS,
    MIN_OBSERVATIONS,
    SEASONAL_PERIOD,
)
from ts_core.forecasting.data.preparation import build_series, series_keys
from ts_core.forecasting.models.arima import ARIMAModel
from ts_core.forecasting.models.base import FittedModel, ForecastModel
from ts_core.forecasting.types import ForecastResult, HasDebugInfo, ModelDebugInfo
from ts_core.series import FILL_METHODS

logger = logging.getLogger(__name__)

SINGLE_SERIES_KEY = "series"


@dataclass
class ForecastConfig:
    """Configuration for batch forecasting.

    Attributes:
        horizon: Number of steps ahead to forecast (default: 10).
        key_column: Column identifying each series; None for a single series.
        date_column: Column holding the time index.
        value_column: Column holding the observations.
        keys: Optional list of keys to forecast. If None, uses every key in the data.
        levels: Prediction interval confidence levels in percent.
        period: Seasonal period of every series (1 = non-seasonal).
        freq: Pandas frequency alias. If None, inferred per series.
        fill_method: Missing value policy ("ffill", "interpolate", "zero",
            "trim") or None to leave gaps (models will then reject the series).
        min_observations: Keys with fewer observations are skipped.
        model: Optional forecast model instance. If None, uses ARIMAModel (automatic).
    """

    horizon: int = FORECAST_STEPS
    key_column: Optional[str] = "key"
    date_column: str = "date"
    value_column: str = "value"
    keys: Optional[List[str]] = None  # if None, infer from data
    levels: Tuple[float, ...] = INTERVAL_LEVELS
    period: int = SEASONAL_PERIOD
    freq: Optional[str] = None
    fill_method: Optional[str] = "ffill"
    min_observations: int = MIN_OBSERVATIONS
    model: Optional[ForecastModel] = None  # if None, use ARIMAModel

    def __post_init__(self) -> None:
        if self.horizon < 1:
            raise ConfigError(f"horizon must be >= 1, got {self.horizon}")
        if self.period < 1:
            raise ConfigError(f"period must be >= 1, got {self.period}")
        if self.min_observations < 2:
            raise ConfigError(f"min_observations must be >= 2, got {self.min_observations}")
        if self.fill_method is not None and self.fill_method not in FILL_METHODS:
            raise ConfigError(
                f"Unknown fill_method '{self.fill_method}'. Options: {FILL_METHODS}"
            )
        bad_levels = [level for level in self.levels if not 0 < level < 100]
        if bad_levels:
            raise ConfigError(f"Interval levels must be in (0, 100), got {bad_levels}")


@dataclass
class ForecastRunResult:
    """Result of a batch forecasting run.

    Attributes:
        forecast: DataFrame with columns: key, date, mean, sd, lo_<L>, hi_<L>
        forecasts: ForecastResult per key
        fitted: Trained model per key
        metadata: Dictionary with additional metadata (keys, horizon, counts, etc.)
        debug: Optional nested dictionary of debug info.
            Structure: debug[model_name][key] = ModelDebugInfo
            Only populated when run_forecast is called with debug=True.
    """

    forecast: pd.DataFrame
    forecasts: Dict[str, ForecastResult] = field(default_factory=dict)
    fitted: Dict[str, FittedModel] = field(default_factory=dict)
    metadata: Dict[str, object] = field(default_factory=dict)
    debug: Optional[Dict[str, Dict[str, ModelDebugInfo]]] = None


def _forecasts_to_dataframe(forecasts: Dict[str, ForecastResult]) -> pd.DataFrame:
    """Stack per-key forecasts into one long DataFrame."""
    frames = []
    for key, result in forecasts.items():
        frame = result.to_frame()
        frame.index.name = "date"
        frame = frame.reset_index()
        frame.insert(0, "key", key)
        frames.append(frame)

    if not frames:
        return pd.DataFrame(columns=["key", "date", "mean", "sd"])
    return pd.concat(frames, ignore_index=True)


def _collect_debug(
    debug_info: Dict[str, Dict[str, ModelDebugInfo]], model: HasDebugInfo, label: str
) -> None:
    """Store the model's latest debug info under debug[model_name][label]."""
    info = model.debug_
    if info is not None:
        debug_info.setdefault(info.model_name, {})[label] = info


def _validate_columns(data: pd.DataFrame, config: ForecastConfig) -> None:
    required = [config.date_column, config.value_column]
    if config.key_column is not None:
        required.insert(0, config.key_column)
    missing_columns = [col for col in required if col not in data.columns]
    if missing_columns:
        raise DataQualityError(
            f"Missing required columns in data: {missing_columns}. Required: {required}"
        )


def run_forecast(
    data: pd.DataFrame,
    config: Optional[ForecastConfig] = None,
    debug: bool = False,
) -> ForecastRunResult:
    """Fit the configured model to every series key and forecast.

    This function:
    - does NOT read or write any files,
    - does NOT parse CLI arguments or read environment variables,
    - MAY log progress via the logging module.

    Args:
        data: Long-format table with key, date and value columns (names from config).
        config: ForecastConfig for horizon, model and column names. If None, uses defaults.
        debug: If True, collects debug information from the model per key.

    Returns:
        ForecastRunResult containing the long forecast table, per-key results
        and run metadata.

    Raises:
        DataQualityError: If required columns are missing.
        DataQualityError: If no forecasts are generated.
    """
    if config is None:
        config = ForecastConfig()
    _validate_columns(data, config)

    df = data.copy()
    if not pd.api.types.is_numeric_dtype(df[config.date_column]):
        df[config.date_column] = pd.to_datetime(df[config.date_column])

    available = series_keys(df, config.key_column)
    if config.key_column is None:
        keys = available
    elif config.keys is None:
        keys = available
    else:
        keys = list(config.keys)
        missing_keys = [k for k in keys if k not in set(available)]
        if missing_keys:
            logger.warning(
                f"Keys not found in data: {missing_keys}. Available keys: {available}"
            )

    model = config.model if config.model is not None else ARIMAModel()
    logger.info(
        f"Running {model.name} forecast for {len(keys)} series, horizon {config.horizon}"
    )

    debug_info: Optional[Dict[str, Dict[str, ModelDebugInfo]]] = {} if debug else None
    forecasts: Dict[str, ForecastResult] = {}
    fitted_models: Dict[str, FittedModel] = {}
    failed: Dict[str, str] = {}

    for key in keys:
        label = SINGLE_SERIES_KEY if key is None else key
        if key is not None and key not in set(available):
            failed[label] = "key not found"
            continue

        try:
            series = build_series(
                df,
                value_column=config.value_column,
                date_column=config.date_column,
                key_column=config.key_column,
                key=key,
                period=config.period,
                freq=config.freq,
                fill_method=config.fill_method,
            )

            if len(series) < config.min_observations:
                logger.warning(f"{label}: insufficient data ({len(series)} obs), skipping")
                failed[label] = f"insufficient data ({len(series)} obs)"
                continue

            logger.debug(f"Training {model.name} for {label}...")
            trained = model.train(series)
            result = model.forecast(trained, steps=config.horizon, levels=config.levels)
        except (TSCoreError, ValueError) as e:
            logger.warning(f"Error forecasting {label}: {e}")
            failed[label] = str(e)
            continue

        forecasts[label] = result
        fitted_models[label] = trained

        if debug_info is not None:
            _collect_debug(debug_info, model, label)

    logger.info(f"Forecast summary: {len(forecasts)} successful, {len(failed)} failed")

    if not forecasts:
        raise DataQualityError(
            "No forecasts were generated. Check data availability and model training errors."
        )

    return ForecastRunResult(
        forecast=_forecasts_to_dataframe(forecasts),
        forecasts=forecasts,
        fitted=fitted_models,
        metadata={
            "keys": list(forecasts),
            "model": model.name,
            "horizon": config.horizon,
            "levels": list(config.levels),
            "successful_forecasts": len(forecasts),
            "failed_forecasts": len(failed),
            "failures": failed,
        },
        debug=debug_info,
    )


def split_holdout(
    data: pd.DataFrame,
    holdout: int,
    config: Optional[ForecastConfig] = None,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Split the last ``holdout`` rows of every key off as a test set.

    Returns:
        (train, test) DataFrames.
    """
    if config is None:
        config = ForecastConfig()
    if holdout < 1:
        raise ConfigError(f"holdout must be >= 1, got {holdout}")
    _validate_columns(data, config)

    df = data.sort_values(
        [c for c in (config.key_column, config.date_column) if c is not None]
    )
    if config.key_column is None:
        position = pd.Series(range(len(df)), index=df.index)
        size = pd.Series(len(df), index=df.index)
    else:
        grouped = df.groupby(config.key_column)
        position = grouped.cumcount()
        size = grouped[config.date_column].transform("size")

    is_test = position >= size - holdout
    return df.loc[~is_test].reset_index(drop=True), df.loc[is_test].reset_index(drop=True)


def evaluate_forecast(
    result: ForecastRunResult,
    actuals: pd.DataFrame,
    config: Optional[ForecastConfig] = None,
    probs: Optional[Sequence[float]] = None,
) -> pd.DataFrame:
    """Score a forecasting run against held-out actuals, one row per key.

    MASE and RMSSE are scaled by each key's training series (taken from
    result.fitted) with the configured seasonal period.

    Args:
        result: Output of run_forecast.
        actuals: Long-format table of held-out observations (same columns as
            the training data).
        config: The ForecastConfig used for the run. If None, uses defaults.
        probs: Optional quantile grid for the grid CRPS.

    Returns:
        DataFrame with a "key" column and one column per metric.

    Raises:
        DataQualityError: If required columns are missing.
    """
    if config is None:
        config = ForecastConfig()
    _validate_columns(actuals, config)

    df = actuals.copy()
    if not pd.api.types.is_numeric_dtype(df[config.date_column]):
        df[config.date_column] = pd.to_datetime(df[config.date_column])

    rows = []
    for label, forecast in result.forecasts.items():
        if config.key_column is None:
            key_rows = df
        else:
            key_rows = df.loc[df[config.key_column] == label]
        actual = key_rows.set_index(config.date_column)[config.value_column].sort_index()
        actual = actual.reindex(forecast.index)
        if actual.isna().all():
            logger.warning(f"No held-out actuals for {label}, skipping evaluation")
            continue

        fitted = result.fitted[label]
        report = accuracy_report(
            forecast,
            actual,
            training=fitted.series.values,
            period=fitted.series.period,
            probs=probs,
        )
        rows.append({"key": label, **report})

    return pd.DataFrame(rows)
