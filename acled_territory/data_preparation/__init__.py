"""Data preparation utilities for ACLED event data."""

from .ingestion import load_events, normalize_columns, validate_columns
from .subtype_extraction import filter_sub_events, class_balance

__all__ = [
    'load_events',
    'normalize_columns',
    'validate_columns',
    'filter_sub_events',
    'class_balance',
]
