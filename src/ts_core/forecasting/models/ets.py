"""Exponential smoothing (ETS) model.

Level, trend and seasonal components are updated once per observation with
the Holt-Winters recursions. Each component can be additive, multiplicative
or absent, and the trend can be damped. Smoothing parameters that are not
supplied are estimated by minimizing the sum of squared one-step errors.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np
import pandas as pd
from scipy.optimize import minimize

from ts_core.exceptions import DataQualityError, InsufficientDataError, ParameterError
from ts_core.forecasting.config import DAMPING_BOUNDS, INTERVAL_LEVELS, SMOOTHING_BOUNDS
from ts_core.forecasting.models.base import FittedModel, ForecastModel, check_horizon
from ts_core.forecasting.types import ForecastResult, ModelDebugInfo, ModelState
from ts_core.series import TimeSeries, as_time_series

logger = logging.getLogger(__name__)

COMPONENT_TYPES = (None, "add", "mul")
_LABELS = {None: "N", "add": "A", "mul": "M"}
_START_VALUES = {"alpha": 0.5, "beta": 0.1, "gamma": 0.1, "phi": 0.95}
_PENALTY = 1e300


@dataclass
class FittedETS(FittedModel):
    """Trained exponential smoothing model.

    Attributes:
        states: Per-observation state trajectory (level, trend, season).
        final_state: State after the last observation, used to forecast.
        method: Short label such as "ETS(A,Ad,N)".
    """

    states: pd.DataFrame | None = None
    final_state: ModelState | None = None
    method: str = ""


def _check_unit_interval(name: str, value: float | None) -> None:
    if value is not None and not 0.0 <= value <= 1.0:
        raise ParameterError(f"{name} must be in [0, 1], got {value}")


def smooth(
    y: np.ndarray,
    initial: ModelState,
    alpha: float,
    beta: float = 0.0,
    gamma: float = 0.0,
    phi: float = 1.0,
    trend: str | None = None,
    seasonal: str | None = None,
) -> tuple[np.ndarray, np.ndarray, ModelState]:
    """Run the smoothing recursions over ``y``.

    Args:
        y: Observations.
        initial: State before the first observation.
        alpha, beta, gamma, phi: Smoothing and damping parameters.
        trend, seasonal: Component types ("add", "mul" or None).

    Returns:
        (fitted, trajectory, final_state) where fitted holds the one-step
        predictions and trajectory is an (n, 3) array of level, trend and
        the seasonal value written at each step (NaN for absent components).
    """
    n = len(y)
    level = np.float64(initial.level)
    slope = np.float64(initial.trend) if trend is not None else np.float64(0.0)
    season = (
        np.array(initial.seasonal, dtype=float) if seasonal is not None else np.zeros(1)
    )
    m = len(season)

    fitted = np.empty(n)
    trajectory = np.full((n, 3), np.nan)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        for t in range(n):
            if trend == "add":
                base = level + phi * slope
            elif trend == "mul":
                base = level * slope**phi
            else:
                base = level

            phase = t % m
            s_prev = season[phase]
            if seasonal == "add":
                fitted[t] = base + s_prev
                adjusted = y[t] - s_prev
            elif seasonal == "mul":
                fitted[t] = base * s_prev
                adjusted = y[t] / s_prev
            else:
                fitted[t] = base
                adjusted = y[t]

            new_level = alpha * adjusted + (1.0 - alpha) * base

            if trend == "add":
                slope = beta * (new_level - level) + (1.0 - beta) * phi * slope
            elif trend == "mul":
                slope = beta * (new_level / level) + (1.0 - beta) * slope**phi

            if seasonal == "add":
                season[phase] = gamma * (y[t] - base) + (1.0 - gamma) * s_prev
            elif seasonal == "mul":
                season[phase] = gamma * (y[t] / base) + (1.0 - gamma) * s_prev

            level = new_level
            trajectory[t, 0] = level
            if trend is not None:
                trajectory[t, 1] = slope
            if seasonal is not None:
                trajectory[t, 2] = season[phase]

    final = ModelState(
        level=float(level),
        trend=float(slope) if trend is not None else None,
        seasonal=season.copy() if seasonal is not None else None,
    )
    return fitted, trajectory, final


def initial_state(
    y: np.ndarray,
    period: int,
    trend: str | None = None,
    seasonal: str | None = None,
) -> ModelState:
    """Heuristic starting state.

    Without seasonality the trend starts at the first difference (ratio for
    a multiplicative trend) and the level is placed one step before the
    first observation, so an undamped first prediction equals y[0]. With
    seasonality the level is the first season's mean, seasonal values are
    the first season's deviations (ratios) from it, and the trend is the
    per-step change between the first two season means.
    """
    if seasonal is None:
        level = float(y[0])
        if trend == "add":
            slope = float(y[1] - y[0])
            level -= slope
        elif trend == "mul":
            slope = float(y[1] / y[0])
            level /= slope
        else:
            slope = None
        return ModelState(level=level, trend=slope)

    m = period
    first = y[:m]
    level = float(first.mean())
    if seasonal == "add":
        season = first - level
    else:
        season = first / level

    slope = None
    if trend is not None:
        if len(y) >= 2 * m:
            second_mean = float(y[m : 2 * m].mean())
            if trend == "add":
                slope = (second_mean - level) / m
            else:
                slope = (second_mean / level) ** (1.0 / m)
        else:
            slope = 0.0 if trend == "add" else 1.0
    return ModelState(level=level, trend=slope, seasonal=np.asarray(season, dtype=float))


class ETSModel(ForecastModel):
    """Exponential smoothing with optional trend, damping and seasonality.

    Examples:
        >>> model = ETSModel(alpha=0.5)
        >>> fitted = model.train(TimeSeries.from_values([10, 12, 11, 13, 12, 14]))
        >>> float(model.forecast(fitted, steps=1).mean.iloc[0])
        13.0
    """

    name = "ets"

    def __init__(
        self,
        error: str = "add",
        trend: str | None = None,
        seasonal: str | None = None,
        damped: bool = False,
        seasonal_period: int | None = None,
        alpha: float | None = None,
        beta: float | None = None,
        gamma: float | None = None,
        phi: float | None = None,
    ) -> None:
        """Initialize ETSModel.

        Args:
            error: Error type, "add" or "mul".
            trend: Trend type, "add", "mul" or None.
            seasonal: Seasonal type, "add", "mul" or None.
            damped: Whether to damp the trend.
            seasonal_period: Season length m. If None, taken from the series.
            alpha, beta, gamma: Fixed smoothing parameters in [0, 1];
                None means estimate.
            phi: Fixed damping parameter in (0, 1); None means estimate.

        Raises:
            ParameterError: If a component type or parameter is invalid.
        """
        super().__init__()
        if error not in ("add", "mul"):
            raise ParameterError(f"error must be 'add' or 'mul', got {error!r}")
        if trend not in COMPONENT_TYPES:
            raise ParameterError(f"trend must be one of {COMPONENT_TYPES}, got {trend!r}")
        if seasonal not in COMPONENT_TYPES:
            raise ParameterError(f"seasonal must be one of {COMPONENT_TYPES}, got {seasonal!r}")
        if damped and trend is None:
            raise ParameterError("damped=True requires a trend component")
        if beta is not None and trend is None:
            raise ParameterError("beta given but the model has no trend")
        if gamma is not None and seasonal is None:
            raise ParameterError("gamma given but the model has no seasonal component")
        if seasonal_period is not None and seasonal_period < 1:
            raise ParameterError(f"seasonal_period must be >= 1, got {seasonal_period}")

        _check_unit_interval("alpha", alpha)
        _check_unit_interval("beta", beta)
        _check_unit_interval("gamma", gamma)
        if phi is not None:
            if not damped:
                raise ParameterError("phi given but damped=False")
            if not 0.0 < phi < 1.0:
                raise ParameterError(f"phi must be in (0, 1), got {phi}")

        self.error = error
        self.trend = trend
        self.seasonal = seasonal
        self.damped = damped
        self.seasonal_period = seasonal_period
        self.alpha = alpha
        self.beta = beta
        self.gamma = gamma
        self.phi = phi

    @property
    def method(self) -> str:
        trend = _LABELS[self.trend] + ("d" if self.damped else "")
        return f"ETS({_LABELS[self.error]},{trend},{_LABELS[self.seasonal]})"

    def _parameter_names(self) -> list[str]:
        names = ["alpha"]
        if self.trend is not None:
            names.append("beta")
        if self.seasonal is not None:
            names.append("gamma")
        if self.damped:
            names.append("phi")
        return names

    def train(self, series: TimeSeries | pd.Series, **_kwargs: Any) -> FittedETS:
        """Estimate free parameters and run the smoothing recursions.

        Args:
            series: Training series without missing values
            **_kwargs: Additional parameters (unused, for interface compatibility)

        Returns:
            FittedETS with fitted values, residuals and state trajectory

        Raises:
            ParameterError: If seasonality is requested with a period below 2
            InsufficientDataError: If fewer than 2 observations, or fewer than
                one full season when seasonal
            DataQualityError: If multiplicative components meet non-positive data
        """
        ts = as_time_series(series, period=self.seasonal_period)
        ts.require_complete()
        y = ts.values
        n = len(y)
        m = ts.period if self.seasonal is not None else 1

        if self.seasonal is not None and m < 2:
            raise ParameterError("Seasonal component requires a seasonal period >= 2")
        if n < 2:
            raise InsufficientDataError(f"Insufficient data: only {n} observations")
        if self.seasonal is not None and n < m:
            raise InsufficientDataError(
                f"Insufficient data: {n} observations for seasonal period {m}"
            )
        if "mul" in (self.error, self.trend, self.seasonal) and np.any(y <= 0):
            raise DataQualityError(
                "Multiplicative components require strictly positive observations"
            )

        start = initial_state(y, m, trend=self.trend, seasonal=self.seasonal)
        names = self._parameter_names()
        fixed = {name: getattr(self, name) for name in names if getattr(self, name) is not None}
        free = [name for name in names if name not in fixed]

        def run(values: dict[str, float]) -> tuple[np.ndarray, np.ndarray, ModelState]:
            return smooth(
                y,
                start,
                alpha=values["alpha"],
                beta=values.get("beta", 0.0),
                gamma=values.get("gamma", 0.0),
                phi=values.get("phi", 1.0),
                trend=self.trend,
                seasonal=self.seasonal,
            )

        if free:
            bounds = [DAMPING_BOUNDS if name == "phi" else SMOOTHING_BOUNDS for name in free]
            x0 = [
                float(np.clip(_START_VALUES[name], low, high))
                for name, (low, high) in zip(free, bounds)
            ]

            def objective(x: np.ndarray) -> float:
                fitted_values = run({**fixed, **dict(zip(free, x))})[0]
                sse = float(np.sum((y - fitted_values) ** 2))
                return sse if np.isfinite(sse) else _PENALTY

            result = minimize(objective, x0, method="L-BFGS-B", bounds=bounds)
            if not result.success:
                logger.debug(f"{self.method}: optimizer did not converge: {result.message}")
            estimated = {name: float(value) for name, value in zip(free, result.x)}
        else:
            estimated = {}

        params = {**fixed, **estimated}
        fitted_values, trajectory, final = run(params)
        if not np.all(np.isfinite(fitted_values)):
            raise DataQualityError(f"{self.method} produced non-finite fitted values")

        residuals = y - fitted_values
        n_states = 1 + (self.trend is not None) + ((m - 1) if self.seasonal is not None else 0)
        n_params = len(free) + n_states
        dof = max(n - n_params, 1)
        if self.error == "mul":
            sigma2 = float(np.sum((residuals / fitted_values) ** 2) / dof)
        else:
            sigma2 = float(np.sum(residuals**2) / dof)

        states = pd.DataFrame(trajectory, index=ts.index, columns=["level", "trend", "season"])
        logger.debug(f"Trained {self.method} on {n} observations: {params}")

        return FittedETS(
            series=ts,
            fitted=pd.Series(fitted_values, index=ts.index),
            residuals=pd.Series(residuals, index=ts.index),
            sigma2=sigma2,
            n_params=n_params,
            params=params,
            states=states,
            final_state=final,
            method=self.method,
        )

    def forecast(
        self,
        model: FittedETS,
        steps: int,
        levels: Sequence[float] = INTERVAL_LEVELS,
        **_kwargs: Any,
    ) -> ForecastResult:
        """Project the final state forward.

        Args:
            model: FittedETS from train()
            steps: Number of periods to forecast ahead
            levels: Prediction interval confidence levels in percent
            **_kwargs: Additional parameters (unused, for interface compatibility)

        Returns:
            ForecastResult with point forecasts and normal intervals
        """
        check_horizon(steps)
        state = model.final_state
        params = model.params
        alpha = params["alpha"]
        beta = params.get("beta", 0.0)
        gamma = params.get("gamma", 0.0)
        phi = params.get("phi", 1.0)

        h = np.arange(1, steps + 1)
        if self.damped:
            phi_h = np.cumsum(phi**h)
        else:
            phi_h = h.astype(float)

        if self.trend == "add":
            mean = state.level + phi_h * state.trend
        elif self.trend == "mul":
            mean = state.level * state.trend**phi_h
        else:
            mean = np.full(steps, state.level)

        m = len(state.seasonal) if state.seasonal is not None else 1
        n = len(model.series)
        if self.seasonal is not None:
            seasonal_values = state.seasonal[(n + h - 1) % m]
            if self.seasonal == "add":
                mean = mean + seasonal_values
            else:
                mean = mean * seasonal_values

        # Variance multipliers c_j for j = 1..h-1 in the innovations form.
        j = np.arange(1, steps)
        phi_j = np.cumsum(phi**j) if self.damped else j.astype(float)
        seasonal_hit = ((j % m) == 0).astype(float) if self.seasonal is not None else 0.0
        c = alpha + alpha * beta * phi_j + gamma * seasonal_hit
        variance = model.sigma2 * np.concatenate(([1.0], 1.0 + np.cumsum(c**2)))
        sd = np.sqrt(variance)
        if self.error == "mul":
            sd = sd * np.abs(mean)

        index = model.series.future_index(steps)
        result = ForecastResult.from_moments(
            mean=pd.Series(mean, index=index),
            sd=pd.Series(sd, index=index),
            levels=levels,
            model_name=self.name,
        )

        self.debug_ = ModelDebugInfo(
            model_name=self.name,
            version="v1",
            data={
                "method": model.method,
                "params": dict(params),
                "sigma2": model.sigma2,
                "aicc": model.aicc,
                "horizon_steps": steps,
            },
        )
        return result
