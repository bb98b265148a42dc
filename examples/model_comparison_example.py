"""Example: Comparing ETS, ARIMA and Naive Forecasts

This example builds a synthetic daily sales table for two stores with a
weekly pattern, holds out the last two weeks, and compares ETS, automatic
ARIMA and the seasonal naive benchmark on the held-out data.

The seasonal naive model is the benchmark: a positive skill score means the
model beats repeating last week.
"""

import numpy as np
import pandas as pd

from ts_core.forecasting import (
    ARIMAModel,
    ETSModel,
    ForecastConfig,
    NaiveModel,
    evaluate_forecast,
    run_forecast,
)
from ts_core.forecasting.accuracy import skill_score
from ts_core.forecasting.api import split_holdout

# Build synthetic data: 16 weeks of daily sales for two stores
rng = np.random.default_rng(42)
dates = pd.date_range("2025-01-06", periods=16 * 7, freq="D")
weekly = np.array([0.9, 0.95, 1.0, 1.05, 1.2, 1.4, 1.1])

frames = []
for store, base in [("downtown", 500.0), ("airport", 320.0)]:
    trend = base + 1.5 * np.arange(len(dates))
    sales = trend * np.tile(weekly, 16) + rng.normal(0.0, 15.0, len(dates))
    frames.append(pd.DataFrame({"key": store, "date": dates, "value": sales}))
sales_df = pd.concat(frames, ignore_index=True)

print("=" * 80)
print("Model comparison on a 14-day holdout")
print("=" * 80)
print(f"Loaded {len(sales_df)} rows for {sales_df['key'].nunique()} stores")

models = {
    "seasonal naive": NaiveModel(method="seasonal"),
    "ets": ETSModel(trend="add", damped=True, seasonal="mul"),
    "arima": ARIMAModel(max_p=2, max_q=2),
}

scores = {}
for label, model in models.items():
    config = ForecastConfig(horizon=14, period=7, model=model)
    train_df, test_df = split_holdout(sales_df, holdout=14, config=config)

    print(f"\nRunning {label} forecast...")
    result = run_forecast(train_df, config=config, debug=True)
    scores[label] = evaluate_forecast(result, test_df, config).set_index("key")

    for store, info in result.debug[model.name].items():
        summary = info.data.get("label") or info.data.get("method")
        print(f"  {store}: {summary}")

print("\n" + "=" * 80)
print("MASE by store (lower is better):")
print("=" * 80)
mase = pd.DataFrame({label: table["mase"] for label, table in scores.items()})
print(mase.round(3))

print("\nCRPS skill vs seasonal naive (higher is better):")
benchmark = scores["seasonal naive"]["crps"]
for label in ["ets", "arima"]:
    skill = skill_score(benchmark.to_numpy(), scores[label]["crps"].to_numpy())
    print(f"  {label}: {np.round(skill, 3).tolist()}")
