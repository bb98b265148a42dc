"""Smoke test for the batch forecasting API and CLI.

These tests verify that the forecasting API can be imported and that
forecasts can be run and evaluated end-to-end on small synthetic data.
"""

import warnings
from pathlib import Path

import numpy as np
import pandas as pd
import pytest
from statsmodels.tools.sm_exceptions import ConvergenceWarning

from ts_core.exceptions import ConfigError, DataQualityError
from ts_core.forecasting import (
    ETSModel,
    ForecastConfig,
    ForecastRunResult,
    NaiveModel,
    evaluate_forecast,
    run_forecast,
)
from ts_core.forecasting.api import split_holdout
from ts_core.forecasting.data import build_series, load_series_table
from ts_core.forecasting.pipeline import main

warnings.filterwarnings("ignore", category=ConvergenceWarning)


def _long_table(num_days: int = 40) -> pd.DataFrame:
    dates = pd.date_range("2025-01-01", periods=num_days, freq="D")
    rng = np.random.default_rng(0)
    frames = []
    for key, base in [("north", 100.0), ("south", 250.0)]:
        frames.append(
            pd.DataFrame(
                {
                    "key": key,
                    "date": dates,
                    "value": base + np.arange(num_days) + rng.normal(0.0, 2.0, num_days),
                }
            )
        )
    return pd.concat(frames, ignore_index=True)


def test_forecasting_smoke() -> None:
    """Test that the batch API runs with minimal synthetic data."""
    df = _long_table()
    config = ForecastConfig(horizon=3, model=ETSModel(trend="add"))

    result = run_forecast(df, config=config)

    assert isinstance(result, ForecastRunResult)
    assert not result.forecast.empty
    assert list(result.forecast.columns) == [
        "key",
        "date",
        "mean",
        "sd",
        "lo_80",
        "hi_80",
        "lo_95",
        "hi_95",
    ]
    assert len(result.forecast) == 6
    assert set(result.forecast["key"]) == {"north", "south"}
    assert result.forecast["date"].min() == pd.Timestamp("2025-02-10")

    assert result.metadata["horizon"] == 3
    assert result.metadata["model"] == "ets"
    assert result.metadata["successful_forecasts"] == 2
    assert result.debug is None


def test_run_forecast_default_model_is_arima() -> None:
    """Test that the default config uses automatic ARIMA."""
    df = _long_table()
    config = ForecastConfig(horizon=2, keys=["north"])

    result = run_forecast(df, config=config)

    assert result.metadata["model"] == "arima"
    assert result.metadata["keys"] == ["north"]
    assert len(result.forecast) == 2


def test_run_forecast_exposes_debug_info() -> None:
    """Test that run_forecast exposes debug info when debug=True."""
    df = _long_table()
    config = ForecastConfig(horizon=3, model=NaiveModel())

    result = run_forecast(df, config=config, debug=True)

    assert result.debug is not None
    assert "naive" in result.debug
    assert set(result.debug["naive"]) == {"north", "south"}
    info = result.debug["naive"]["north"]
    assert info.model_name == "naive"
    assert info.data["horizon_steps"] == 3


def test_run_forecast_skips_short_keys() -> None:
    """Test that keys below min_observations are skipped, not fatal."""
    df = _long_table()
    short = pd.DataFrame(
        {"key": "tiny", "date": pd.date_range("2025-01-01", periods=3), "value": 1.0}
    )
    config = ForecastConfig(horizon=2, model=NaiveModel())

    result = run_forecast(pd.concat([df, short], ignore_index=True), config=config)

    assert "tiny" not in result.forecasts
    assert result.metadata["failed_forecasts"] == 1
    assert "tiny" in result.metadata["failures"]


def test_run_forecast_fails_when_nothing_is_produced() -> None:
    """Test that DataQualityError is raised if every key fails."""
    df = _long_table(num_days=5)
    with pytest.raises(DataQualityError, match="No forecasts"):
        run_forecast(df, config=ForecastConfig(model=NaiveModel()))


def test_run_forecast_missing_columns() -> None:
    """Test that missing required columns raise DataQualityError."""
    df = _long_table().rename(columns={"value": "sales"})
    with pytest.raises(DataQualityError, match="Missing required columns"):
        run_forecast(df)


def test_run_forecast_single_series_without_key_column() -> None:
    """Test forecasting a table without a key column."""
    df = _long_table()
    df = df.loc[df["key"] == "north", ["date", "value"]]
    config = ForecastConfig(horizon=2, key_column=None, model=NaiveModel(method="drift"))

    result = run_forecast(df, config=config)

    assert list(result.forecasts) == ["series"]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"horizon": 0},
        {"period": 0},
        {"min_observations": 1},
        {"fill_method": "backfill"},
        {"levels": (80, 100)},
    ],
)
def test_forecast_config_validation(kwargs: dict) -> None:
    """Test that invalid configuration values raise ConfigError."""
    with pytest.raises(ConfigError):
        ForecastConfig(**kwargs)


def test_split_holdout_and_evaluate() -> None:
    """Test holding out the tail of every key and scoring the forecasts."""
    df = _long_table()
    config = ForecastConfig(horizon=5, model=NaiveModel(method="drift"))

    train, test = split_holdout(df, holdout=5, config=config)
    result = run_forecast(train, config=config)
    scores = evaluate_forecast(result, test, config, probs=[0.1, 0.5, 0.9])

    assert len(train) == 70
    assert len(test) == 10
    assert test.groupby("key")["date"].min().eq(pd.Timestamp("2025-02-05")).all()
    assert list(scores["key"]) == ["north", "south"]
    for column in ["mae", "rmse", "mape", "smape", "mase", "rmsse", "crps", "crps_grid"]:
        assert scores[column].notna().all()
    # drift errors stay on the scale of the noise
    assert (scores["mase"] < 3.0).all()


def test_build_series_fills_gaps() -> None:
    """Test that build_series regularizes and fills missing dates."""
    df = pd.DataFrame(
        {
            "key": ["a"] * 4,
            "date": pd.to_datetime(["2025-01-01", "2025-01-02", "2025-01-04", "2025-01-05"]),
            "value": [1.0, 2.0, 4.0, 5.0],
        }
    )

    ts = build_series(
        df, "value", "date", key_column="key", key="a", freq="D", fill_method="interpolate"
    )

    assert len(ts) == 5
    assert ts.values.tolist() == [1.0, 2.0, 3.0, 4.0, 5.0]


def test_build_series_infers_gaps_without_freq() -> None:
    """Test that omitted dates are found when freq is left to inference."""
    dates = pd.date_range("2025-01-01", periods=30, freq="D").delete(12)
    df = pd.DataFrame({"key": "a", "date": dates, "value": np.arange(29.0)})

    ts = build_series(df, "value", "date", key_column="key", key="a", fill_method=None)

    assert len(ts) == 30
    assert ts.freq == "D"
    assert np.isnan(ts.values[12])


def test_build_series_rejects_irregular_dates() -> None:
    """Test that dates without a common step raise DataQualityError."""
    df = pd.DataFrame(
        {
            "date": pd.to_datetime(["2025-01-01", "2025-01-03", "2025-01-06", "2025-01-10"]),
            "value": [1.0, 2.0, 3.0, 4.0],
        }
    )

    with pytest.raises(DataQualityError, match="regular frequency"):
        build_series(df, "value", "date")


def test_build_series_unknown_key() -> None:
    """Test that selecting a key without rows raises DataQualityError."""
    with pytest.raises(DataQualityError, match="No rows"):
        build_series(_long_table(), "value", "date", key_column="key", key="east")


def test_load_series_table_missing_file(tmp_path: Path) -> None:
    """Test that a missing CSV raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        load_series_table(tmp_path / "missing.csv")


def test_cli_runs_with_holdout(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    """Test the CLI end-to-end on a CSV file."""
    csv_path = tmp_path / "series.csv"
    _long_table().to_csv(csv_path, index=False)

    exit_code = main(["--file", str(csv_path), "--model", "naive", "--holdout", "4"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Accuracy on held-out data" in out
    assert "Pipeline completed successfully" in out
