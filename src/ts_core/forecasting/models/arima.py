"""ARIMA model with explicit differencing and automatic order selection.

The series is differenced (D seasonal, d ordinary), an ARMA model with an
optional intercept is estimated on the differenced values with SARIMAX from
statsmodels, and forecasts are produced by running the ARMA recursion forward
and integrating back to the original scale.

In automatic mode D is chosen from the STL seasonal strength, d by repeated
KPSS tests, and (p, q)(P, Q) by a grid search that minimizes AICc.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field
from itertools import product
from typing import Any, Sequence

import numpy as np
import pandas as pd
from statsmodels.tools.sm_exceptions import ConvergenceWarning, HessianInversionWarning
from statsmodels.tsa.statespace.sarimax import SARIMAX

from ts_core.exceptions import DataQualityError, InsufficientDataError, ParameterError
from ts_core.forecasting.config import (
    AICC_TIE_TOLERANCE,
    INTERVAL_LEVELS,
    MAX_D,
    MAX_P,
    MAX_Q,
    MAX_SEASONAL_D,
    MAX_SEASONAL_P,
    MAX_SEASONAL_Q,
)
from ts_core.forecasting.diagnostics import kpss_ndiffs, nsdiffs
from ts_core.forecasting.differencing import Differencer, difference
from ts_core.forecasting.models.base import FittedModel, ForecastModel, check_horizon
from ts_core.forecasting.types import ForecastResult, ModelDebugInfo
from ts_core.series import TimeSeries, as_time_series

logger = logging.getLogger(__name__)


@dataclass
class ARMACoefficients:
    """Reduced-form ARMA recursion on the differenced series.

    w_t = intercept + sum_i ar[i-1] * w_{t-i} + e_t + sum_j ma[j-1] * e_{t-j}
    """

    ar: np.ndarray
    ma: np.ndarray
    intercept: float = 0.0

    @property
    def ar_polynomial(self) -> np.ndarray:
        """1 - sum ar_i L^i, lowest power first."""
        return np.concatenate(([1.0], -self.ar))


@dataclass
class FittedARIMA(FittedModel):
    """Trained ARIMA model.

    Attributes:
        order: (p, d, q).
        seasonal_order: (P, D, Q, m).
        include_constant: Whether an intercept was estimated.
        coefficients: Reduced-form AR/MA coefficients and intercept.
        differencer: Differencing state used to integrate forecasts.
        differenced: Differenced training values.
        innovations: Conditional one-step errors on the differenced scale.
        candidates: Orders and AICc of every model tried (auto mode).
    """

    order: tuple[int, int, int] = (0, 0, 0)
    seasonal_order: tuple[int, int, int, int] = (0, 0, 0, 1)
    include_constant: bool = False
    coefficients: ARMACoefficients | None = None
    differencer: Differencer | None = None
    differenced: np.ndarray | None = None
    innovations: np.ndarray | None = None
    candidates: list[dict[str, Any]] = field(default_factory=list)

    @property
    def label(self) -> str:
        p, d, q = self.order
        sp, sd, sq, m = self.seasonal_order
        text = f"ARIMA({p},{d},{q})"
        if sp or sd or sq:
            text += f"({sp},{sd},{sq})[{m}]"
        return text + (" w/ const" if self.include_constant else "")


def _validate_orders(
    order: tuple[int, int, int],
    seasonal_order: tuple[int, int, int, int],
    include_constant: bool | None,
) -> None:
    if len(order) != 3 or any(int(v) != v or v < 0 for v in order):
        raise ParameterError(f"order must be three non-negative integers, got {order}")
    if len(seasonal_order) != 4 or any(int(v) != v or v < 0 for v in seasonal_order):
        raise ParameterError(
            f"seasonal_order must be four non-negative integers, got {seasonal_order}"
        )
    sp, sd, sq, m = seasonal_order
    if (sp or sd or sq) and m < 2:
        raise ParameterError("Seasonal orders require a seasonal period >= 2")
    if include_constant and order[1] + sd > 1:
        raise ParameterError(
            "A constant with more than one difference implies a quadratic trend; "
            f"got d={order[1]}, D={sd}"
        )


def arma_innovations(w: np.ndarray, coefficients: ARMACoefficients) -> np.ndarray:
    """Conditional one-step errors of the ARMA recursion.

    Errors for the first len(ar) values (which lack AR history) are NaN and
    enter the MA terms as zero.
    """
    a = coefficients.ar
    b = coefficients.ma
    n_ar = len(a)
    n_ma = len(b)
    errors = np.full(len(w), np.nan)
    shocks = np.zeros(len(w))

    for t in range(n_ar, len(w)):
        prediction = coefficients.intercept
        if n_ar:
            prediction += a @ w[t - n_ar : t][::-1]
        if n_ma:
            k = min(n_ma, t)
            if k:
                prediction += b[:k] @ shocks[t - k : t][::-1]
        errors[t] = w[t] - prediction
        shocks[t] = errors[t]
    return errors


def psi_weights(ar_polynomial: np.ndarray, ma: np.ndarray, steps: int) -> np.ndarray:
    """MA(infinity) weights psi_0..psi_{steps-1} for a (possibly integrated) model."""
    a = -np.asarray(ar_polynomial[1:], dtype=float)
    psi = np.zeros(steps)
    psi[0] = 1.0
    for j in range(1, steps):
        value = ma[j - 1] if j <= len(ma) else 0.0
        for i in range(1, min(j, len(a)) + 1):
            value += a[i - 1] * psi[j - i]
        psi[j] = value
    return psi


def _seasonal_lag_polynomial(coefs: Sequence[float], period: int, sign: float) -> np.ndarray:
    poly = np.zeros(len(coefs) * period + 1)
    poly[0] = 1.0
    for i, value in enumerate(coefs, start=1):
        poly[i * period] = sign * value
    return poly


def estimate_arma(
    w: np.ndarray,
    p: int,
    q: int,
    seasonal_p: int = 0,
    seasonal_q: int = 0,
    period: int = 1,
    include_constant: bool = False,
) -> ARMACoefficients:
    """Maximum likelihood ARMA(p,q)(P,Q)m estimation on a stationary series.

    Raises:
        InsufficientDataError: If there are too few values for the order.
    """
    n_params = p + q + seasonal_p + seasonal_q + int(include_constant)
    max_ar_lag = p + seasonal_p * period
    if len(w) <= max_ar_lag + n_params + 1:
        raise InsufficientDataError(
            f"Insufficient data: {len(w)} differenced observations for "
            f"ARMA({p},{q})({seasonal_p},{seasonal_q})[{period}]"
        )

    if p == q == seasonal_p == seasonal_q == 0:
        intercept = float(np.mean(w)) if include_constant else 0.0
        return ARMACoefficients(ar=np.zeros(0), ma=np.zeros(0), intercept=intercept)

    seasonal = (seasonal_p, 0, seasonal_q, period) if (seasonal_p or seasonal_q) else (0, 0, 0, 0)
    # Many candidate orders are non-stationary or non-invertible; that's fine
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", ConvergenceWarning)
        warnings.simplefilter("ignore", HessianInversionWarning)
        warnings.simplefilter("ignore", RuntimeWarning)
        warnings.simplefilter("ignore", UserWarning)
        model = SARIMAX(
            w,
            order=(p, 0, q),
            seasonal_order=seasonal,
            trend="c" if include_constant else "n",
            enforce_stationarity=False,
            enforce_invertibility=False,
        )
        res = model.fit(disp=False)

    params = dict(zip(model.param_names, np.asarray(res.params, dtype=float)))
    ar = np.concatenate(([1.0], [-params[f"ar.L{i}"] for i in range(1, p + 1)]))
    seasonal_ar = _seasonal_lag_polynomial(
        [params[f"ar.S.L{i * period}"] for i in range(1, seasonal_p + 1)], period, -1.0
    )
    ma = np.concatenate(([1.0], [params[f"ma.L{j}"] for j in range(1, q + 1)]))
    seasonal_ma = _seasonal_lag_polynomial(
        [params[f"ma.S.L{j * period}"] for j in range(1, seasonal_q + 1)], period, 1.0
    )

    reduced_ar = np.convolve(ar, seasonal_ar)
    reduced_ma = np.convolve(ma, seasonal_ma)
    coefficients = ARMACoefficients(
        ar=-reduced_ar[1:],
        ma=reduced_ma[1:],
        intercept=float(params.get("intercept", 0.0)),
    )
    if not (np.all(np.isfinite(coefficients.ar)) and np.all(np.isfinite(coefficients.ma))):
        raise ValueError("Estimation produced non-finite coefficients")
    return coefficients


class ARIMAModel(ForecastModel):
    """ARIMA / seasonal ARIMA with optional automatic order selection.

    Leave ``order`` as None to select d, D and the ARMA orders automatically.
    """

    name = "arima"

    def __init__(
        self,
        order: tuple[int, int, int] | None = None,
        seasonal_order: tuple[int, int, int, int] | None = None,
        include_constant: bool | None = None,
        seasonal_period: int | None = None,
        max_p: int = MAX_P,
        max_q: int = MAX_Q,
        max_seasonal_p: int = MAX_SEASONAL_P,
        max_seasonal_q: int = MAX_SEASONAL_Q,
        max_d: int = MAX_D,
        max_seasonal_d: int = MAX_SEASONAL_D,
    ) -> None:
        """Initialize ARIMAModel.

        Args:
            order: (p, d, q). None selects orders automatically.
            seasonal_order: (P, D, Q, m). Ignored in automatic mode except for m.
            include_constant: Estimate an intercept (mean or drift). None means
                d + D == 0 for fixed orders, and "try both where allowed" in
                automatic mode.
            seasonal_period: Season length m. If None, taken from
                seasonal_order or the series.
            max_p, max_q, max_seasonal_p, max_seasonal_q: Search bounds.
            max_d, max_seasonal_d: Differencing bounds.

        Raises:
            ParameterError: If orders are invalid or a constant is combined
                with more than one difference.
        """
        super().__init__()
        if order is not None:
            if seasonal_order is None:
                seasonal_order = (0, 0, 0, seasonal_period or 1)
            _validate_orders(tuple(order), tuple(seasonal_order), include_constant)
            order = tuple(int(v) for v in order)
            seasonal_order = tuple(int(v) for v in seasonal_order)
        elif seasonal_order is not None and seasonal_period is None:
            seasonal_period = int(seasonal_order[3])

        if min(max_p, max_q, max_seasonal_p, max_seasonal_q, max_d, max_seasonal_d) < 0:
            raise ParameterError("Search bounds must be non-negative")

        self.order = order
        self.seasonal_order = seasonal_order
        self.include_constant = include_constant
        self.seasonal_period = seasonal_period
        self.max_p = max_p
        self.max_q = max_q
        self.max_seasonal_p = max_seasonal_p
        self.max_seasonal_q = max_seasonal_q
        self.max_d = max_d
        self.max_seasonal_d = max_seasonal_d

    @property
    def auto(self) -> bool:
        return self.order is None

    def train(self, series: TimeSeries | pd.Series, **_kwargs: Any) -> FittedARIMA:
        """Difference, estimate and (in auto mode) select the ARIMA model.

        Args:
            series: Training series without missing values
            **_kwargs: Additional parameters (unused, for interface compatibility)

        Returns:
            FittedARIMA for the selected or requested orders

        Raises:
            InsufficientDataError: If the series is too short for the orders
            DataQualityError: If no candidate model could be estimated
        """
        period = self.seasonal_period
        if period is None and self.seasonal_order is not None:
            period = self.seasonal_order[3]
        ts = as_time_series(series, period=period)
        ts.require_complete()

        if self.auto:
            return self._train_auto(ts)

        p, d, q = self.order
        sp, sd, sq, m = self.seasonal_order
        constant = self.include_constant
        if constant is None:
            constant = d + sd == 0

        differencer = Differencer(d=d, seasonal_d=sd, period=m)
        w = differencer.difference(ts.values)
        coefficients = estimate_arma(w, p, q, sp, sq, m, constant)
        return self._build_fitted(
            ts, (p, d, q), (sp, sd, sq, m), constant, differencer, w, coefficients
        )

    def _train_auto(self, ts: TimeSeries) -> FittedARIMA:
        y = ts.values
        m = ts.period

        seasonal_d = nsdiffs(y, m, max_seasonal_d=self.max_seasonal_d) if m >= 2 else 0
        x = y
        for _ in range(seasonal_d):
            x = difference(x, lag=m)
        d = kpss_ndiffs(x, max_d=self.max_d)
        logger.debug(f"Selected differencing d={d}, D={seasonal_d} (m={m})")

        if self.include_constant and d + seasonal_d > 1:
            raise ParameterError(
                f"include_constant=True but automatic differencing chose d={d}, D={seasonal_d}"
            )
        if self.include_constant is None:
            constants = [True, False] if d + seasonal_d <= 1 else [False]
        else:
            constants = [self.include_constant]

        differencer = Differencer(d=d, seasonal_d=seasonal_d, period=m)
        w = differencer.difference(y)

        seasonal_range_p = range(self.max_seasonal_p + 1) if m >= 2 else range(1)
        seasonal_range_q = range(self.max_seasonal_q + 1) if m >= 2 else range(1)

        best: FittedARIMA | None = None
        candidates: list[dict[str, Any]] = []

        # Grid search over ARMA orders; candidates are scored by AICc
        # (lower is better) and near-ties go to the model with fewer parameters.
        for p, q, sp, sq in product(
            range(self.max_p + 1), range(self.max_q + 1), seasonal_range_p, seasonal_range_q
        ):
            for constant in constants:
                try:
                    coefficients = estimate_arma(w, p, q, sp, sq, m, constant)
                except (InsufficientDataError, ValueError, np.linalg.LinAlgError) as e:
                    logger.debug(f"Skipping ARIMA({p},{d},{q})({sp},{seasonal_d},{sq}): {e}")
                    continue

                fitted = self._build_fitted(
                    ts, (p, d, q), (sp, seasonal_d, sq, m), constant, differencer, w, coefficients
                )
                candidates.append(
                    {"label": fitted.label, "aicc": fitted.aicc, "n_params": fitted.n_params}
                )
                if _is_better(fitted, best):
                    best = fitted

        if best is None:
            raise DataQualityError("No valid ARIMA model found during order search")

        best.candidates = candidates
        logger.debug(f"Selected {best.label} (AICc={best.aicc:.3f}) from {len(candidates)}")
        return best

    def _build_fitted(
        self,
        ts: TimeSeries,
        order: tuple[int, int, int],
        seasonal_order: tuple[int, int, int, int],
        include_constant: bool,
        differencer: Differencer,
        w: np.ndarray,
        coefficients: ARMACoefficients,
    ) -> FittedARIMA:
        innovations = arma_innovations(w, coefficients)
        n_params = sum(order) - order[1] + seasonal_order[0] + seasonal_order[2]
        n_params += int(include_constant)

        # One-step errors on the differenced scale equal those on the original scale.
        residuals = np.concatenate((np.full(differencer.n_lost, np.nan), innovations))
        y = ts.values
        n_eff = int(np.sum(~np.isnan(innovations)))
        sse = float(np.nansum(innovations**2))
        sigma2 = sse / max(n_eff - n_params, 1)

        return FittedARIMA(
            series=ts,
            fitted=pd.Series(y - residuals, index=ts.index),
            residuals=pd.Series(residuals, index=ts.index),
            sigma2=sigma2,
            n_params=n_params,
            params={
                "ar": coefficients.ar.tolist(),
                "ma": coefficients.ma.tolist(),
                "intercept": coefficients.intercept,
            },
            order=order,
            seasonal_order=seasonal_order,
            include_constant=include_constant,
            coefficients=coefficients,
            differencer=differencer,
            differenced=w,
            innovations=innovations,
        )

    def forecast(
        self,
        model: FittedARIMA,
        steps: int,
        levels: Sequence[float] = INTERVAL_LEVELS,
        **_kwargs: Any,
    ) -> ForecastResult:
        """Run the ARMA recursion forward and integrate to the original scale.

        Args:
            model: FittedARIMA from train()
            steps: Number of periods to forecast ahead
            levels: Prediction interval confidence levels in percent
            **_kwargs: Additional parameters (unused, for interface compatibility)

        Returns:
            ForecastResult with point forecasts and normal intervals
        """
        check_horizon(steps)
        coefficients = model.coefficients
        a = coefficients.ar
        b = coefficients.ma

        history = list(model.differenced)
        shocks = list(np.nan_to_num(model.innovations, nan=0.0))
        forecasts_w = np.empty(steps)
        for h in range(steps):
            value = coefficients.intercept
            for i in range(1, len(a) + 1):
                if len(history) >= i:
                    value += a[i - 1] * history[-i]
            for j in range(1, len(b) + 1):
                if len(shocks) >= j:
                    value += b[j - 1] * shocks[-j]
            forecasts_w[h] = value
            history.append(value)
            shocks.append(0.0)

        mean = model.differencer.integrate_forecast(forecasts_w)

        # Variance grows through the psi-weights of the integrated AR polynomial.
        full_ar = np.convolve(coefficients.ar_polynomial, model.differencer.polynomial())
        psi = psi_weights(full_ar, b, steps)
        sd = np.sqrt(model.sigma2 * np.cumsum(psi**2))

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
                "label": model.label,
                "order": model.order,
                "seasonal_order": model.seasonal_order,
                "include_constant": model.include_constant,
                "aicc": model.aicc,
                "sigma2": model.sigma2,
                "candidates_tried": len(model.candidates),
                "horizon_steps": steps,
            },
        )
        return result


def _is_better(candidate: FittedARIMA, best: FittedARIMA | None) -> bool:
    if best is None:
        return True
    if candidate.aicc < best.aicc - AICC_TIE_TOLERANCE:
        return True
    tied = abs(candidate.aicc - best.aicc) <= AICC_TIE_TOLERANCE
    return bool(tied and candidate.n_params < best.n_params)

