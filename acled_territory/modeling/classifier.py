"""LASSO logistic regression separating the two territorial sub-event types."""
from __future__ import annotations
import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.base import clone
from sklearn.linear_model import LogisticRegression
from sklearn.metrics import confusion_matrix, roc_auc_score
from sklearn.model_selection import train_test_split
from sklearn.pipeline import Pipeline

from acled_territory.core.constants import (
    MAX_TOKENS, NGRAM_RANGE, POSITIVE_CLASS, RANDOM_SEED, TARGET_COLUMN, TOP_IMPORTANCES, TRAIN_PROP,
)
from acled_territory.core.metrics_helpers import confusion_counts, ppv_npv, predictive_value_intervals, rates
from acled_territory.modeling.features import PREDICTORS, build_preprocessor, feature_names
from acled_territory.modeling.tuning import penalty_to_c

LOGGER = logging.getLogger(__name__)


@dataclass
class FinalFit:
    workflow: Pipeline
    penalty: float
    metrics: pd.DataFrame
    confusion: pd.DataFrame
    predictions: pd.DataFrame

    def metric(self, name: str) -> float:
        return float(self.metrics.set_index('metric').loc[name, 'estimate'])


def split_events(df: pd.DataFrame, target_col: str = TARGET_COLUMN, train_prop: float = TRAIN_PROP,
                 random_state: int = RANDOM_SEED):
    """Stratified (train, test) partitions of `df`."""
    train, test = train_test_split(
        df, train_size=train_prop, stratify=df[target_col], random_state=random_state,
    )
    LOGGER.info("Split %d rows into %d train / %d test", len(df), len(train), len(test))
    return train.reset_index(drop=True), test.reset_index(drop=True)


def encode_target(series: pd.Series, positive: str = POSITIVE_CLASS) -> np.ndarray:
    """1 for the positive class, 0 for the other; exactly two classes required."""
    classes = sorted(series.dropna().unique())
    if len(classes) != 2 or positive not in classes:
        raise ValueError(f"Expected two classes including '{positive}', found {classes}")
    return (series == positive).astype(int).to_numpy()


def build_workflow(stop_words, max_tokens: int = MAX_TOKENS, ngram_range: tuple = NGRAM_RANGE,
                   random_state: int = RANDOM_SEED) -> Pipeline:
    """Preprocessor followed by an L1-penalized logistic regression; C is set per candidate."""
    return Pipeline([
        ('preprocess', build_preprocessor(stop_words, max_tokens=max_tokens, ngram_range=ngram_range)),
        ('model', LogisticRegression(
            penalty='l1',
            solver='liblinear',
            max_iter=1000,
            random_state=random_state,
        )),
    ])


def finalize_workflow(workflow: Pipeline, penalty: float, n_samples: int) -> Pipeline:
    """Unfitted copy of `workflow` with the chosen penalty fixed."""
    final = clone(workflow)
    final.set_params(model__C=penalty_to_c(penalty, n_samples))
    return final


def last_fit(workflow: Pipeline, penalty: float, train: pd.DataFrame, test: pd.DataFrame,
             target_col: str = TARGET_COLUMN, positive: str = POSITIVE_CLASS) -> FinalFit:
    """Fit on the whole training partition and evaluate once on the test partition."""
    y_train = encode_target(train[target_col], positive)
    y_test = encode_target(test[target_col], positive)
    final = finalize_workflow(workflow, penalty, len(train))
    final.fit(train[PREDICTORS], y_train)

    prob = final.predict_proba(test[PREDICTORS])[:, 1]
    pred = (prob >= 0.5).astype(int)
    counts = confusion_counts(y_test, pred, positive=1)
    values = {'roc_auc': float(roc_auc_score(y_test, prob))}
    values.update(rates(counts))
    values.update(ppv_npv(counts))
    values.update(predictive_value_intervals(counts))
    metrics = pd.DataFrame({'metric': list(values), 'estimate': list(values.values())})

    negative = sorted(c for c in test[target_col].unique() if c != positive)[0]
    labels = [positive, negative]
    cm = confusion_matrix(y_test, pred, labels=[1, 0])
    confusion = pd.DataFrame(cm, index=pd.Index(labels, name='truth'), columns=pd.Index(labels, name='prediction'))

    id_col = 'id' if 'id' in test.columns else None
    predictions = pd.DataFrame({
        'truth': test[target_col].to_numpy(),
        'prediction': np.where(pred == 1, positive, negative),
        f'prob_{positive}': prob,
    })
    if id_col:
        predictions.insert(0, id_col, test[id_col].to_numpy())
    LOGGER.info("Test ROC-AUC %.3f at penalty %.3g", values['roc_auc'], penalty)
    return FinalFit(workflow=final, penalty=penalty, metrics=metrics, confusion=confusion, predictions=predictions)


def feature_importances(workflow: Pipeline, top_n: int = TOP_IMPORTANCES) -> pd.DataFrame:
    """Non-zero coefficients ranked by magnitude, top `top_n` for each sign.

    `sign` is POS for features pushing towards the positive class, NEG otherwise.
    """
    names = feature_names(workflow.named_steps['preprocess'])
    coef = workflow.named_steps['model'].coef_.ravel()
    imp = pd.DataFrame({'variable': names, 'coefficient': coef})
    imp = imp[imp['coefficient'] != 0].copy()
    imp['importance'] = imp['coefficient'].abs()
    imp['sign'] = np.where(imp['coefficient'] > 0, 'POS', 'NEG')
    imp = imp.sort_values(['sign', 'importance', 'variable'], ascending=[False, False, True])
    return imp.groupby('sign', sort=False).head(top_n).reset_index(drop=True)
