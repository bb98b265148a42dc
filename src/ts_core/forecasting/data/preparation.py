"""Data preparation utilities for time series forecasting.

This module turns long-format tables (one row per key and date) into
TimeSeries objects suitable for forecasting models.
"""

from __future__ import annotations

import logging

import pandas as pd

from ts_core.exceptions import DataQualityError
from ts_core.series import TimeSeries

logger = logging.getLogger(__name__)


def series_keys(df: pd.DataFrame, key_column: str | None) -> list:
    """Sorted distinct keys, or a single None key when there is no key column."""
    if key_column is None:
        return [None]
    return sorted(df[key_column].dropna().unique().tolist())


def build_series(
    df: pd.DataFrame,
    value_column: str,
    date_column: str,
    key_column: str | None = None,
    key=None,
    period: int = 1,
    freq: str | None = None,
    fill_method: str | None = "ffill",
) -> TimeSeries:
    """Build a regular TimeSeries for one key.

    Rows are sorted by date. The frequency is taken from ``freq`` or inferred,
    falling back to the smallest spacing when dates are missing. The series
    is reindexed so omitted steps become explicit missing values, which are
    then filled with ``fill_method`` (None leaves them missing).

    Args:
        df: Long-format table
        value_column: Column holding the observations
        date_column: Column holding the time index
        key_column: Column identifying the series, or None for a single series
        key: Key value to select when key_column is given
        period: Seasonal period of the series
        freq: Pandas frequency alias; inferred when None
        fill_method: Missing value policy passed to TimeSeries.fill_missing

    Returns:
        TimeSeries for the selected key

    Raises:
        DataQualityError: If the key has no rows or no regular frequency
        SeriesIndexError: If the key has duplicate dates
    """
    rows = df if key_column is None else df.loc[df[key_column] == key]
    if rows.empty:
        raise DataQualityError(f"No rows found for key {key!r}")

    series = rows.set_index(date_column)[value_column].sort_index()
    ts = TimeSeries(series, period=period, freq=freq)

    if ts.freq is None and len(ts) > 1:
        raise DataQualityError(
            f"Could not infer a regular frequency for key {key!r}; pass freq explicitly"
        )
    if ts.freq is not None:
        ts = ts.regularize()

    if fill_method is not None and ts.has_missing:
        logger.debug(f"Filling {int(ts.data.isna().sum())} missing values for key {key!r}")
        ts = ts.fill_missing(fill_method)
    return ts
