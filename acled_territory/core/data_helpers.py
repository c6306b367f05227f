import os
from typing import Dict, Optional

from acled_territory.core.constants import CSV_SRC, RESULTS_DIR


def get_data_path() -> str:
    """Get the source CSV path from environment variable.

    Returns:
        Path of the ACLED export. Defaults to CSV_SRC if ACLED_CSV is not set.
    """
    return os.environ.get('ACLED_CSV', CSV_SRC)


def get_results_dir() -> str:
    """Get the results directory from environment variable.

    Returns:
        Directory for tables, plots and the report.
        Defaults to RESULTS_DIR if the RESULTS_DIR env var is not set.
    """
    return os.environ.get('RESULTS_DIR', RESULTS_DIR)


def get_n_jobs() -> int:
    """Get the number of tuning worker processes from environment variable.

    Returns:
        Worker count, 1 (inline execution) if N_JOBS is unset or invalid.
    """
    val = os.environ.get('N_JOBS')
    if val is not None:
        try:
            n = int(val)
            if n >= 1:
                return n
        except ValueError:
            pass
    return 1


def setup_results_environment(results_dir: Optional[str] = None) -> str:
    """Create the results directory and return its path.

    Args:
        results_dir: Output directory. If None, reads from RESULTS_DIR env var.
    """
    results_dir = results_dir or get_results_dir()
    os.makedirs(results_dir, exist_ok=True)
    return results_dir


def paths_for_results(results_dir: str) -> Dict[str, str]:
    """Get standard artifact paths inside a results directory.

    Returns:
        Dictionary mapping artifact name -> path. CSV tables, PNG plots and
        the Markdown report all live side by side in results_dir.
    """
    tables = [
        'class_balance',
        'unigram_counts',
        'bigram_counts',
        'cooccurrence_pairs',
        'tf_idf',
        'lda_top_terms',
        'stm_beta',
        'stm_gamma',
        'tuning_results',
        'tuning_metrics',
        'test_metrics',
        'confusion_matrix',
        'feature_importances',
    ]
    plots = [
        'top_unigrams',
        'top_bigrams',
        'tf_idf_plot',
        'cooccurrence_network',
        'lda_top_terms_plot',
        'stm_gamma_plot',
        'tuning_curve',
        'feature_importances_plot',
        'confusion_matrix_plot',
    ]
    paths = {name: os.path.join(results_dir, f'{name}.csv') for name in tables}
    paths.update({name: os.path.join(results_dir, f'{name}.png') for name in plots})
    paths['report'] = os.path.join(results_dir, 'report.md')
    paths['results_dir'] = results_dir
    return paths


def resolve_columns(df, candidates):
    """Resolve column names case-insensitively.

    candidates: iterable of column names to find; returns a dict mapping the
    canonical name -> actual column present in df (or None).
    """
    cols_lower = {c.lower(): c for c in df.columns}
    out = {}
    for name in candidates:
        out[name] = cols_lower.get(name.lower(), None)
    return out
