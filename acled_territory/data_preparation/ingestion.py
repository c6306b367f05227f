"""Load an ACLED export into an event table.
"""
from __future__ import annotations
import logging
import os
import pandas as pd

from acled_territory.core.constants import EXPECTED_COLUMNS, ID_COLUMN, ID_COLUMN_SOURCE
from acled_territory.core.data_helpers import resolve_columns

LOGGER = logging.getLogger(__name__)


def normalize_columns(df: pd.DataFrame, id_column: str = ID_COLUMN_SOURCE) -> pd.DataFrame:
    """Return a copy with lowercase column names and the row key renamed to `id`.
    Args:
        df: raw ACLED table.
        id_column: name of the identifier column in the export (case-insensitive).
    """
    source = resolve_columns(df, [id_column])[id_column]
    out = df.rename(columns={c: c.lower() for c in df.columns})
    if source is not None and source.lower() != ID_COLUMN:
        out = out.rename(columns={source.lower(): ID_COLUMN})
    return out


def validate_columns(df: pd.DataFrame, expected: list | None = None) -> None:
    """Raise ValueError listing every expected column absent from `df`."""
    expected = EXPECTED_COLUMNS if expected is None else expected
    missing = [c for c in expected if c not in df.columns]
    if missing:
        raise ValueError(f"Missing expected columns {missing}; available columns: {df.columns.tolist()}")


def load_events(csv_path: str, id_column: str = ID_COLUMN_SOURCE, expected: list | None = None) -> pd.DataFrame:
    """Load an ACLED CSV export and return the event table.
    Args:
        csv_path: path to the delimited export.
        id_column: identifier column to rename to `id`.
        expected: columns that must be present after renaming (default: EXPECTED_COLUMNS).
    Returns:
        pd.DataFrame with lowercase columns, `id` as the row key and a parsed `event_date`.
    """
    if not os.path.exists(csv_path):
        raise FileNotFoundError(f"Source CSV not found: {csv_path}")
    df = pd.read_csv(csv_path)
    LOGGER.info("Loaded %d rows from %s", len(df), csv_path)
    df = normalize_columns(df, id_column=id_column)
    validate_columns(df, expected)
    df["event_date"] = pd.to_datetime(df["event_date"])
    df["notes"] = df["notes"].fillna("").astype(str)
    return df
