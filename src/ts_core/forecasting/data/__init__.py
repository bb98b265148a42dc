"""Data loading and preparation utilities."""

from ts_core.forecasting.data.loaders import load_series_table
from ts_core.forecasting.data.preparation import build_series, series_keys

__all__ = ["load_series_table", "build_series", "series_keys"]
