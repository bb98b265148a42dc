"""Time-indexed series container.

TimeSeries wraps a pandas Series with a validated index and an optional
seasonal period. All forecasting models accept either a TimeSeries or a
plain pandas Series (which is wrapped with period 1).
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd
from pandas.tseries.frequencies import to_offset

from ts_core.exceptions import ConfigError, DataQualityError, SeriesIndexError

logger = logging.getLogger(__name__)

FILL_METHODS = ("ffill", "interpolate", "zero", "trim")


class TimeSeries:
    """Ordered observations with a strictly increasing index.

    Attributes:
        data: The underlying float Series. Missing observations are NaN.
        period: Seasonal period m (1 means non-seasonal).
        freq: Pandas frequency alias for a DatetimeIndex, or the integer step
            for an integer index. None if the series is irregular.
    """

    def __init__(
        self,
        data: pd.Series,
        period: int = 1,
        freq: str | int | None = None,
    ) -> None:
        if period < 1:
            raise ConfigError(f"Seasonal period must be >= 1, got {period}")

        series = pd.Series(data, dtype=float, copy=True)
        index = series.index

        if not index.is_unique:
            duplicates = index[index.duplicated()].unique().tolist()
            raise SeriesIndexError(f"Duplicate index values: {duplicates[:5]}")
        if not index.is_monotonic_increasing:
            raise SeriesIndexError("Index must be strictly increasing")

        self.data = series
        self.period = int(period)
        self.freq = freq if freq is not None else _infer_freq(index)

    @classmethod
    def from_values(cls, values, period: int = 1, start: int = 0) -> TimeSeries:
        """Build a series over an integer index starting at ``start``."""
        values = np.asarray(values, dtype=float)
        index = pd.RangeIndex(start, start + len(values))
        return cls(pd.Series(values, index=index), period=period, freq=1)

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"TimeSeries(n={len(self)}, period={self.period}, freq={self.freq!r})"

    @property
    def values(self) -> np.ndarray:
        return self.data.to_numpy(dtype=float)

    @property
    def index(self) -> pd.Index:
        return self.data.index

    @property
    def has_missing(self) -> bool:
        return bool(self.data.isna().any())

    def regularize(self) -> TimeSeries:
        """Reindex onto a regular grid so omitted steps become explicit NaN.

        Raises:
            DataQualityError: If the frequency is unknown.
        """
        if self.freq is None:
            raise DataQualityError("Cannot regularize a series without a known frequency")
        if len(self) == 0:
            return self

        index = self.index
        if isinstance(index, pd.DatetimeIndex):
            full = pd.date_range(start=index[0], end=index[-1], freq=self.freq)
        else:
            full = pd.RangeIndex(int(index[0]), int(index[-1]) + 1, int(self.freq))

        if len(full) != len(index):
            logger.debug(f"Regularized series: {len(full) - len(index)} missing steps")
        return TimeSeries(self.data.reindex(full), period=self.period, freq=self.freq)

    def fill_missing(self, method: str = "ffill") -> TimeSeries:
        """Fill missing observations.

        Args:
            method: One of "ffill", "interpolate", "zero", "trim". "trim"
                drops leading and trailing gaps and refuses interior ones.

        Returns:
            New TimeSeries without missing values.

        Raises:
            ConfigError: If the method is unknown.
            DataQualityError: If "trim" leaves interior gaps, or missing
                values remain after filling (e.g. a leading gap with ffill).
        """
        if method not in FILL_METHODS:
            raise ConfigError(f"Unknown fill method '{method}'. Options: {FILL_METHODS}")

        data = self.data
        if method == "ffill":
            data = data.ffill()
        elif method == "interpolate":
            data = data.interpolate(method="linear", limit_area="inside")
        elif method == "zero":
            data = data.fillna(0.0)
        else:
            first = data.first_valid_index()
            last = data.last_valid_index()
            if first is None:
                data = data.iloc[0:0]
            else:
                data = data.loc[first:last]

        if data.isna().any():
            raise DataQualityError(
                f"{int(data.isna().sum())} missing values remain after '{method}' fill"
            )
        return TimeSeries(data, period=self.period, freq=self.freq)

    def future_index(self, steps: int) -> pd.Index:
        """Index labels for horizons 1..steps after the last observation."""
        index = self.index
        if len(index) == 0:
            return pd.RangeIndex(1, steps + 1)

        last = index[-1]
        if isinstance(index, pd.DatetimeIndex):
            freq = self.freq or "D"
            offset = to_offset(freq)
            return pd.date_range(start=last + offset, periods=steps, freq=offset)

        step = int(self.freq) if isinstance(self.freq, (int, np.integer)) else 1
        start = int(last) + step
        return pd.RangeIndex(start, start + step * steps, step)

    def require_complete(self) -> None:
        """Raise DataQualityError if any observation is missing."""
        if self.has_missing:
            raise DataQualityError(
                f"Series has {int(self.data.isna().sum())} missing values; "
                "call fill_missing() before fitting"
            )


def as_time_series(series: TimeSeries | pd.Series, period: int | None = None) -> TimeSeries:
    """Wrap a pandas Series (or pass a TimeSeries through)."""
    if isinstance(series, TimeSeries):
        if period is not None and period != series.period:
            return TimeSeries(series.data, period=period, freq=series.freq)
        return series
    return TimeSeries(series, period=period or 1)


def _infer_freq(index: pd.Index) -> str | int | None:
    if isinstance(index, pd.DatetimeIndex):
        if index.freqstr is not None:
            return index.freqstr
        if len(index) >= 3:
            freq = pd.infer_freq(index)
            if freq is not None:
                return freq
        return _step_freq(index)
    if len(index) >= 2 and pd.api.types.is_integer_dtype(index):
        steps = np.diff(np.asarray(index, dtype=np.int64))
        return int(steps.min())
    if len(index) < 2 and pd.api.types.is_integer_dtype(index):
        return 1
    return None


def _step_freq(index: pd.DatetimeIndex) -> str | None:
    """Smallest spacing of a gapped DatetimeIndex, if every step is a multiple of it."""
    if len(index) < 2:
        return None
    deltas = index[1:] - index[:-1]
    step = deltas.min()
    if step <= pd.Timedelta(0) or (deltas % step != pd.Timedelta(0)).any():
        return None
    return to_offset(step).freqstr
