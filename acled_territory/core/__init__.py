"""Core utilities and constants."""

from acled_territory.core.data_helpers import (
    get_data_path,
    get_results_dir,
    get_n_jobs,
    setup_results_environment,
    paths_for_results,
    resolve_columns,
)

__all__ = [
    'get_data_path',
    'get_results_dir',
    'get_n_jobs',
    'setup_results_environment',
    'paths_for_results',
    'resolve_columns',
]
