"""Bootstrap grid search over the L1 penalty.

Every (resample, penalty) pair is an independent task: clone the workflow,
fit it on the in-bag rows and score the out-of-bag rows. Tasks run inline or
on a process pool; results are merged by their (resample_id, penalty) key.
"""
from __future__ import annotations
import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Dict, List, Tuple

import numpy as np
import pandas as pd
from sklearn.base import clone
from sklearn.metrics import roc_auc_score
from tqdm import tqdm

from acled_territory.core.constants import N_BOOTSTRAPS, PENALTY_LEVELS, PENALTY_RANGE, RANDOM_SEED
from acled_territory.core.metrics_helpers import confusion_counts, ppv_npv

LOGGER = logging.getLogger(__name__)

METRICS = ('roc_auc', 'ppv', 'npv')


def penalty_grid(levels: int = PENALTY_LEVELS, log10_range: tuple = PENALTY_RANGE) -> np.ndarray:
    """`levels` penalties evenly spaced on the log10 scale, inclusive of both ends."""
    lo, hi = log10_range
    return np.logspace(lo, hi, num=levels)


def penalty_to_c(penalty: float, n_samples: int) -> float:
    """Inverse regularization strength for a mean-loss penalty (glmnet scaling): C = 1 / (n * penalty)."""
    return 1.0 / (n_samples * penalty)


def stratified_bootstraps(y, n_resamples: int = N_BOOTSTRAPS,
                          random_state: int = RANDOM_SEED) -> List[Tuple[str, np.ndarray, np.ndarray]]:
    """Bootstrap resamples drawn within each class.

    Returns a list of (resample_id, in_bag_indices, out_of_bag_indices); every
    resample has the size and class counts of `y`.
    """
    y = np.asarray(y)
    rng = np.random.default_rng(random_state)
    all_idx = np.arange(len(y))
    by_class = [all_idx[y == cls] for cls in np.unique(y)]
    width = len(str(n_resamples))
    resamples = []
    for i in range(n_resamples):
        in_bag = np.concatenate([rng.choice(idx, size=len(idx), replace=True) for idx in by_class])
        in_bag.sort()
        oob = np.setdiff1d(all_idx, in_bag)
        resamples.append((f'Bootstrap{i + 1:0{width}d}', in_bag, oob))
    return resamples


def score_predictions(y_true, prob, threshold: float = 0.5) -> Dict[str, float]:
    """ROC-AUC, PPV and NPV for positive-class probabilities; NaN where undefined."""
    y_true = np.asarray(y_true)
    pred = (np.asarray(prob) >= threshold).astype(int)
    out = ppv_npv(confusion_counts(y_true, pred, positive=1))
    if len(np.unique(y_true)) < 2:
        out['roc_auc'] = float('nan')
    else:
        out['roc_auc'] = float(roc_auc_score(y_true, prob))
    return out


# per-process copy of the workflow and training data, set once by the pool initializer
_WORKER_DATA: dict = {}


def _init_worker(workflow, X, y) -> None:
    _WORKER_DATA.update(workflow=workflow, X=X, y=y)


def _run_task(task: dict) -> Dict[str, float]:
    return evaluate_candidate(dict(task, **_WORKER_DATA))


def evaluate_candidate(task: dict) -> Dict[str, float]:
    """Fit one penalty on one resample's in-bag rows and score its out-of-bag rows."""
    X, y = task['X'], np.asarray(task['y'])
    in_bag, oob = task['in_bag'], task['oob']
    model = clone(task['workflow'])
    model.set_params(model__C=penalty_to_c(task['penalty'], len(in_bag)))
    model.fit(X.iloc[in_bag], y[in_bag])
    prob = model.predict_proba(X.iloc[oob])[:, 1]
    return score_predictions(y[oob], prob)


def tune_penalty(workflow, X: pd.DataFrame, y, penalties, resamples, n_jobs: int = 1,
                 progress: bool = False) -> pd.DataFrame:
    """Evaluate every penalty on every resample.

    Returns one row per (resample_id, penalty, metric) with its `estimate`,
    ordered by resample then penalty.
    """
    y = np.asarray(y)
    tasks = {}
    for resample_id, in_bag, oob in resamples:
        for penalty in penalties:
            tasks[(resample_id, float(penalty))] = {'in_bag': in_bag, 'oob': oob, 'penalty': float(penalty)}
    LOGGER.info("Tuning %d penalties x %d resamples (%d tasks, n_jobs=%d)",
                len(penalties), len(resamples), len(tasks), n_jobs)

    results = {}
    if n_jobs > 1:
        # the data crosses to each worker once; tasks carry only indices and the penalty
        with ProcessPoolExecutor(max_workers=n_jobs, initializer=_init_worker,
                                 initargs=(workflow, X, y)) as executor:
            futures = {executor.submit(_run_task, task): key for key, task in tasks.items()}
            for future in tqdm(as_completed(futures), total=len(futures), desc='Tuning', disable=not progress):
                results[futures[future]] = future.result()
    else:
        for key, task in tqdm(tasks.items(), total=len(tasks), desc='Tuning', disable=not progress):
            results[key] = evaluate_candidate(dict(task, workflow=workflow, X=X, y=y))

    rows = []
    for (resample_id, penalty) in sorted(results):
        metrics = results[(resample_id, penalty)]
        for name in METRICS:
            rows.append({'resample_id': resample_id, 'penalty': penalty, 'metric': name, 'estimate': metrics[name]})
    return pd.DataFrame(rows)


def collect_metrics(results: pd.DataFrame) -> pd.DataFrame:
    """Mean, standard error and count of every metric per penalty; NaN estimates are skipped."""
    grouped = results.groupby(['penalty', 'metric'])['estimate']
    out = grouped.agg(mean='mean', n='count', std='std').reset_index()
    out['std_err'] = out['std'] / np.sqrt(out['n'])
    return out.drop(columns='std')


def select_best(metrics: pd.DataFrame, metric: str = 'roc_auc') -> float:
    """Penalty with the highest mean `metric`; ties go to the larger penalty."""
    sub = metrics[metrics['metric'] == metric].dropna(subset=['mean'])
    if sub.empty:
        raise ValueError(f"No finite '{metric}' estimates to select from")
    best = sub.sort_values(['mean', 'penalty'], ascending=[False, False]).iloc[0]
    return float(best['penalty'])
