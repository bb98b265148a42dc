"""Shared types for forecasting models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

import numpy as np
import pandas as pd
from scipy.stats import norm


@dataclass(frozen=True)
class ModelDebugInfo:
    """Generic container for model-specific debug information.

    This provides a standard way for forecasting models to expose
    introspection/debug information in a consistent format.

    Attributes:
        model_name: Short identifier for the model, e.g. "ets", "arima".
        version: Optional version string if model behavior changes over time.
        data: Arbitrary model-specific payload (dict of JSON-like values).
            Each model can populate this with its own schema.
    """

    model_name: str
    version: str | None = None
    data: dict[str, Any] = field(default_factory=dict)


class HasDebugInfo(Protocol):
    """Protocol for models that expose debug information.

    Example:
        def inspect_model_debug(model: HasDebugInfo) -> Optional[ModelDebugInfo]:
            return model.debug_

    """

    debug_: ModelDebugInfo | None


@dataclass(frozen=True)
class ModelState:
    """Exponential smoothing state after one observation.

    Attributes:
        level: Smoothed baseline.
        trend: Smoothed per-step change (additive) or growth rate
            (multiplicative); None when the model has no trend.
        seasonal: Seasonal values indexed by phase (length m), or None.
    """

    level: float
    trend: float | None = None
    seasonal: np.ndarray | None = None


def interval_columns(level: int | float) -> tuple[str, str]:
    """Column names used for a prediction interval, e.g. ("lo_95", "hi_95")."""
    label = f"{level:g}"
    return f"lo_{label}", f"hi_{label}"


@dataclass(frozen=True)
class ForecastResult:
    """Gaussian forecast distribution for horizons 1..h.

    Attributes:
        mean: Point forecasts indexed by future time labels.
        sd: Forecast standard deviation per horizon.
        intervals: Confidence level (e.g. 80, 95) -> DataFrame with
            "lower" and "upper" columns on the same index as mean.
        model_name: Short identifier of the producing model.
    """

    mean: pd.Series
    sd: pd.Series
    intervals: dict[float, pd.DataFrame] = field(default_factory=dict)
    model_name: str = ""

    @classmethod
    def from_moments(
        cls,
        mean: pd.Series,
        sd: pd.Series,
        levels: Sequence[float],
        model_name: str = "",
    ) -> ForecastResult:
        """Build symmetric normal intervals from mean and standard deviation."""
        intervals = {}
        for level in levels:
            z = norm.ppf(0.5 + level / 200.0)
            intervals[level] = pd.DataFrame(
                {"lower": mean - z * sd, "upper": mean + z * sd}, index=mean.index
            )
        return cls(mean=mean, sd=sd, intervals=intervals, model_name=model_name)

    @property
    def horizon(self) -> int:
        return len(self.mean)

    @property
    def index(self) -> pd.Index:
        return self.mean.index

    def interval(self, level: float) -> pd.DataFrame:
        """Interval for a confidence level, computed on demand if not stored."""
        if level in self.intervals:
            return self.intervals[level]
        z = norm.ppf(0.5 + level / 200.0)
        return pd.DataFrame(
            {"lower": self.mean - z * self.sd, "upper": self.mean + z * self.sd},
            index=self.mean.index,
        )

    def quantiles(self, probs: Sequence[float]) -> pd.DataFrame:
        """Forecast quantiles; one column per probability in ``probs``."""
        columns = {}
        for p in probs:
            if not 0.0 < p < 1.0:
                raise ValueError(f"Quantile probability must be in (0, 1), got {p}")
            columns[p] = self.mean + norm.ppf(p) * self.sd
        return pd.DataFrame(columns, index=self.mean.index)

    def to_frame(self) -> pd.DataFrame:
        """Flat table with mean, sd and lo_/hi_ columns per level."""
        df = pd.DataFrame({"mean": self.mean, "sd": self.sd})
        for level in sorted(self.intervals):
            lo, hi = interval_columns(level)
            df[lo] = self.intervals[level]["lower"]
            df[hi] = self.intervals[level]["upper"]
        return df
