"""Tests for the split, the feature pipeline and the finalized classifier."""

import numpy as np
import pytest

from acled_territory.core.constants import POSITIVE_CLASS
from acled_territory.text import DEFAULT_STOP_WORDS
from acled_territory.modeling import (
    build_preprocessor, build_workflow, collect_metrics, encode_target, feature_importances, feature_names,
    finalize_workflow, last_fit, penalty_grid, select_best, split_events, stratified_bootstraps, tune_penalty,
)
from acled_territory.modeling.features import PREDICTORS


def test_split_is_stratified(events):
    uneven = events.iloc[[i for i in range(len(events)) if i % 2 == 0 or i % 6 == 1]].reset_index(drop=True)
    train, test = split_events(uneven, random_state=11)
    full = (uneven["sub_event_type"] == POSITIVE_CLASS).mean()
    for part in (train, test):
        assert abs((part["sub_event_type"] == POSITIVE_CLASS).mean() - full) < 0.05
    assert len(train) + len(test) == len(uneven)
    assert not set(train["id"]) & set(test["id"])


def test_encode_target_requires_two_classes(events):
    y = encode_target(events["sub_event_type"])
    assert set(np.unique(y)) == {0, 1}
    with pytest.raises(ValueError):
        encode_target(events["sub_event_type"].head(1))


def test_preprocessor_features(events):
    prep = build_preprocessor(DEFAULT_STOP_WORDS, max_tokens=30)
    matrix = prep.fit_transform(events[PREDICTORS])
    names = feature_names(prep)
    assert matrix.shape == (len(events), len(names))
    assert sum(n.startswith("notes__") for n in names) <= 30
    assert any(n.startswith("date__event_date_month_") for n in names)
    assert any(n.startswith("date__event_date_dow_") for n in names)
    assert any(n.startswith("region__admin2_") for n in names)
    assert "numeric__fatalities" in names
    assert not any(n == "event_date" for n in names)
    assert np.allclose(matrix.mean(axis=0), 0.0, atol=1e-8)


def test_preprocessor_fit_on_train_only(events):
    train, test = split_events(events, random_state=5)
    prep = build_preprocessor(DEFAULT_STOP_WORDS, max_tokens=30).fit(train[PREDICTORS])
    vocab = prep.named_steps["columns"].named_transformers_["notes"].vocabulary_
    out = prep.transform(test.assign(notes="zzzunseen " * 3)[PREDICTORS])
    assert "zzzunseen" not in vocab
    assert out.shape[1] == len(feature_names(prep))


def test_tuned_classifier_separates_distinctive_token(separable_events):
    train, test = split_events(separable_events, random_state=2)
    y_train = encode_target(train["sub_event_type"], POSITIVE_CLASS)
    workflow = build_workflow(DEFAULT_STOP_WORDS)
    resamples = stratified_bootstraps(y_train, n_resamples=3, random_state=2)
    penalties = penalty_grid(levels=4, log10_range=(-4, -1))
    metrics = collect_metrics(tune_penalty(workflow, train[PREDICTORS], y_train, penalties, resamples))
    best = select_best(metrics)
    assert best in set(penalties)

    final = last_fit(workflow, best, train, test)
    assert final.metric("roc_auc") > 0.95
    assert final.confusion.values.sum() == len(test)
    assert list(final.confusion.index) == [POSITIVE_CLASS, "Non-state actor overtakes territory"]
    assert len(final.predictions) == len(test)

    importances = feature_importances(final.workflow, top_n=20)
    assert set(importances["sign"]) <= {"POS", "NEG"}
    assert importances.groupby("sign").size().max() <= 20
    assert (importances["importance"] > 0).all()
    assert "notes__recaptured" in set(importances.loc[importances["sign"] == "POS", "variable"])


def test_workflow_is_l1_penalized(separable_events):
    workflow = build_workflow(DEFAULT_STOP_WORDS)
    assert workflow.named_steps["model"].get_params()["penalty"] == "l1"
    y = encode_target(separable_events["sub_event_type"])
    final = finalize_workflow(workflow, 0.1, len(separable_events)).fit(separable_events[PREDICTORS], y)
    coef = final.named_steps["model"].coef_.ravel()
    assert (coef == 0).mean() > 0.5
    assert coef.any()
