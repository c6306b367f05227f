import numpy as np
from statsmodels.stats.proportion import proportion_confint


def confusion_counts(y_true, y_pred, positive=1) -> dict:
    """Count tp, fp, tn, fn for a binary prediction.

    Returns dict(tp=int, fp=int, tn=int, fn=int).
    """
    y_true = np.asarray(y_true) == positive
    y_pred = np.asarray(y_pred) == positive
    return {
        'tp': int((y_true & y_pred).sum()),
        'fp': int((~y_true & y_pred).sum()),
        'tn': int((~y_true & ~y_pred).sum()),
        'fn': int((y_true & ~y_pred).sum()),
    }


def _ratio(num: int, den: int) -> float:
    return num / den if den > 0 else float('nan')


def ppv_npv(counts: dict) -> dict:
    """Positive and negative predictive value; NaN when a class is never predicted."""
    return {
        'ppv': _ratio(counts['tp'], counts['tp'] + counts['fp']),
        'npv': _ratio(counts['tn'], counts['tn'] + counts['fn']),
    }


def rates(counts: dict) -> dict:
    total = sum(counts.values())
    return {
        'accuracy': _ratio(counts['tp'] + counts['tn'], total),
        'sensitivity': _ratio(counts['tp'], counts['tp'] + counts['fn']),
        'specificity': _ratio(counts['tn'], counts['tn'] + counts['fp']),
    }


def predictive_value_intervals(counts: dict, alpha: float = 0.05) -> dict:
    """Wilson score intervals for PPV and NPV.

    Returns dict with ppv_lo, ppv_hi, npv_lo, npv_hi (NaN for empty denominators).
    """
    out = {}
    for name, hits, total in (
        ('ppv', counts['tp'], counts['tp'] + counts['fp']),
        ('npv', counts['tn'], counts['tn'] + counts['fn']),
    ):
        if total == 0:
            out[f'{name}_lo'] = out[f'{name}_hi'] = float('nan')
            continue
        lo, hi = proportion_confint(hits, total, alpha=alpha, method='wilson')
        out[f'{name}_lo'] = float(lo)
        out[f'{name}_hi'] = float(hi)
    return out
