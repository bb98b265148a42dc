"""Ordinary and seasonal differencing with stored inverse-integration state.

Differencer records, for every differencing step, the values needed to undo
it: the first ``lag`` values of the series it was applied to (to rebuild the
whole series) and the last ``lag`` values (to continue it into the future).
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from ts_core.exceptions import InsufficientDataError, ParameterError


@dataclass(frozen=True)
class DifferenceStep:
    """One lag-k differencing step and the values needed to invert it."""

    lag: int
    head: np.ndarray
    tail: np.ndarray


@dataclass
class Differencer:
    """Apply D seasonal (lag m) and d ordinary differences.

    Seasonal differences are applied first. The two operators commute, so the
    order only matters for which head/tail values get stored.

    Examples:
        >>> diff = Differencer(d=1)
        >>> w = diff.difference([1.0, 3.0, 6.0, 10.0])
        >>> w.tolist()
        [2.0, 3.0, 4.0]
        >>> diff.integrate(w).tolist()
        [1.0, 3.0, 6.0, 10.0]
    """

    d: int = 0
    seasonal_d: int = 0
    period: int = 1
    steps: list[DifferenceStep] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.d < 0 or self.seasonal_d < 0:
            raise ParameterError(
                f"Differencing orders must be >= 0, got d={self.d}, D={self.seasonal_d}"
            )
        if self.seasonal_d > 0 and self.period < 2:
            raise ParameterError("Seasonal differencing requires a period >= 2")

    @property
    def lags(self) -> list[int]:
        return [self.period] * self.seasonal_d + [1] * self.d

    @property
    def n_lost(self) -> int:
        """Number of observations consumed by differencing."""
        return sum(self.lags)

    def difference(self, values) -> np.ndarray:
        """Difference ``values`` and remember the inversion state.

        Raises:
            InsufficientDataError: If the series is not longer than the
                total differencing lag.
        """
        x = np.asarray(values, dtype=float)
        if len(x) <= self.n_lost:
            raise InsufficientDataError(
                f"Cannot difference {len(x)} observations with d={self.d}, "
                f"D={self.seasonal_d}, m={self.period}"
            )

        self.steps = []
        for lag in self.lags:
            self.steps.append(DifferenceStep(lag=lag, head=x[:lag].copy(), tail=x[-lag:].copy()))
            x = x[lag:] - x[:-lag]
        return x

    def integrate(self, differenced) -> np.ndarray:
        """Rebuild the original series from its differences and stored heads."""
        x = np.asarray(differenced, dtype=float)
        for step in reversed(self.steps):
            restored = np.empty(len(x) + step.lag)
            restored[: step.lag] = step.head
            for i in range(len(x)):
                restored[i + step.lag] = x[i] + restored[i]
            x = restored
        return x

    def integrate_forecast(self, forecasts) -> np.ndarray:
        """Map forecasts of the differenced series back to the original scale."""
        x = np.asarray(forecasts, dtype=float)
        for step in reversed(self.steps):
            extended = np.concatenate([step.tail, np.empty(len(x))])
            for i in range(len(x)):
                extended[i + step.lag] = x[i] + extended[i]
            x = extended[step.lag :]
        return x

    def polynomial(self) -> np.ndarray:
        """Coefficients of (1 - L)^d (1 - L^m)^D, lowest power first."""
        poly = np.array([1.0])
        for lag in self.lags:
            factor = np.zeros(lag + 1)
            factor[0] = 1.0
            factor[lag] = -1.0
            poly = np.convolve(poly, factor)
        return poly


def difference(values, lag: int = 1) -> np.ndarray:
    """Single lag-k difference, x[t] - x[t-lag]."""
    x = np.asarray(values, dtype=float)
    return x[lag:] - x[:-lag]
