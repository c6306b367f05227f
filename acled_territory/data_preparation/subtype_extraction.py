"""Small helper to restrict the event table to the sub-event types under study.
Usage: import `filter_sub_events` from this module to get the two-class table.
"""
from __future__ import annotations
import logging
import pandas as pd

from acled_territory.core.constants import SUB_EVENT_CLASSES, TARGET_COLUMN

LOGGER = logging.getLogger(__name__)


def filter_sub_events(df: pd.DataFrame, classes: list | None = None, column: str = TARGET_COLUMN) -> pd.DataFrame:
    """Return rows where `column` equals one of `classes` exactly.
    Args:
        df: event table.
        classes: sub-event types to keep (default: SUB_EVENT_CLASSES).
        column: column to match against (default: 'sub_event_type').
    Returns:
        New pd.DataFrame with only rows for the requested classes; `df` is untouched.
    """
    classes = SUB_EVENT_CLASSES if classes is None else list(classes)
    if column not in df.columns:
        raise ValueError(f"Column '{column}' not found: columns={df.columns.tolist()}")
    mask = df[column].isin(classes)
    out = df.loc[mask].reset_index(drop=True)
    if out.empty:
        raise ValueError(f"No rows with {column} in {classes}")
    absent = [c for c in classes if c not in set(out[column])]
    if absent:
        raise ValueError(f"Sub-event types absent after filtering: {absent}")
    LOGGER.info("Kept %d of %d rows for %s", len(out), len(df), classes)
    return out


def class_balance(df: pd.DataFrame, column: str = TARGET_COLUMN) -> pd.DataFrame:
    """Counts and proportions per class, largest first."""
    counts = df[column].value_counts()
    return pd.DataFrame({
        column: counts.index,
        'n': counts.values,
        'prop': (counts / counts.sum()).values,
    })
