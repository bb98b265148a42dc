"""CLI wrapper for the forecasting pipeline.

This module provides a command-line interface for running forecasts.
All core forecasting logic is in ts_core.forecasting.api.

Usage:
    python -m ts_core.forecasting.pipeline --file sales.csv --horizon 14 --model ets --period 7
    python -m ts_core.forecasting.pipeline --file sales.csv --holdout 14 --verbose
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import pandas as pd

from ts_core.forecasting.api import (
    ForecastConfig,
    evaluate_forecast,
    run_forecast,
    split_holdout,
)
from ts_core.forecasting.config import FORECAST_STEPS
from ts_core.forecasting.data.loaders import load_series_table
from ts_core.forecasting.models import ARIMAModel, ETSModel, NaiveModel
from ts_core.forecasting.models.base import ForecastModel

logger = logging.getLogger(__name__)


def build_model(name: str, period: int) -> ForecastModel:
    """Instantiate the model selected on the command line."""
    if name == "ets":
        if period > 1:
            return ETSModel(trend="add", damped=True, seasonal="add", seasonal_period=period)
        return ETSModel(trend="add", damped=True)
    if name == "naive":
        return NaiveModel(method="seasonal" if period > 1 else "naive")
    return ARIMAModel(seasonal_period=period)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run time series forecasts from a CSV file.")
    parser.add_argument(
        "--file",
        type=str,
        required=True,
        help="Path to a long-format CSV (key, date, value columns).",
    )
    parser.add_argument(
        "--horizon",
        type=int,
        default=FORECAST_STEPS,
        help=f"Number of steps to forecast ahead (default: {FORECAST_STEPS})",
    )
    parser.add_argument(
        "--model",
        type=str,
        default="arima",
        choices=["ets", "arima", "naive"],
        help="Forecast model to use (default: arima). Options: ets, arima, naive",
    )
    parser.add_argument(
        "--period",
        type=int,
        default=1,
        help="Seasonal period, e.g. 7 for daily data with weekly seasonality (default: 1)",
    )
    parser.add_argument("--key-column", default="key", help="Series key column (default: key)")
    parser.add_argument("--date-column", default="date", help="Date column (default: date)")
    parser.add_argument("--value-column", default="value", help="Value column (default: value)")
    parser.add_argument(
        "--holdout",
        type=int,
        default=None,
        help="Hold out the last N observations per key and report accuracy on them.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point for the forecasting pipeline.

    Parses command-line arguments, loads data, runs forecasts, and prints the
    forecast table (plus an accuracy table when --holdout is given).

    Returns:
        Process exit code.
    """
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    print("=" * 60)
    print("Forecasting Pipeline")
    print("=" * 60)

    try:
        print("\n[1/3] Loading series data...")
        df = load_series_table(args.file, date_column=args.date_column)
        print(f"[OK] Loaded {len(df)} rows from {args.file}")

        key_column = args.key_column if args.key_column in df.columns else None
        horizon = args.holdout if args.holdout else args.horizon
        config = ForecastConfig(
            horizon=horizon,
            key_column=key_column,
            date_column=args.date_column,
            value_column=args.value_column,
            period=args.period,
            model=build_model(args.model, args.period),
        )

        train_df, test_df = df, None
        if args.holdout:
            train_df, test_df = split_holdout(df, args.holdout, config)
            print(f"  Holding out the last {args.holdout} observations per series")

        print(f"\n[2/3] Generating {horizon}-step forecasts using {args.model} model...")
        result = run_forecast(train_df, config=config)
        print(f"[OK] Generated forecasts for {result.metadata['successful_forecasts']} series")

        print("\n[3/3] Results")
        print("=" * 60)
        with pd.option_context("display.width", 120, "display.max_rows", 200):
            print(result.forecast.to_string(index=False, float_format="{:.3f}".format))
            if test_df is not None:
                scores = evaluate_forecast(result, test_df, config)
                print("\nAccuracy on held-out data:")
                print(scores.to_string(index=False, float_format="{:.4f}".format))
        print("=" * 60)
        print("\n[OK] Pipeline completed successfully")
        return 0

    except Exception as e:
        logger.error(f"Pipeline failed: {e}")
        print(f"\n[ERROR] Pipeline failed: {e}")
        raise


def cli() -> None:
    """Console script entry point."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    cli()
