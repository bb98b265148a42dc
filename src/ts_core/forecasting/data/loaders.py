"""Data loading utilities for the forecasting pipeline."""

from __future__ import annotations

from pathlib import Path

import pandas as pd


def load_series_table(csv_path: str | Path, date_column: str = "date") -> pd.DataFrame:
    """Load a long-format series table from a CSV file.

    Args:
        csv_path: Path to a CSV with at least a date column and a value column
            (and optionally a key column identifying each series).
        date_column: Name of the date column to parse.

    Returns:
        DataFrame with the date column parsed to datetime

    Raises:
        FileNotFoundError: If the CSV file does not exist
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Series data not found at {csv_path}")

    df = pd.read_csv(csv_path)
    if date_column in df.columns:
        df[date_column] = pd.to_datetime(df[date_column])
    return df
