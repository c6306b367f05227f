"""End-to-end run of the analysis script on a small synthetic export."""

import os

import pandas as pd
import pytest

from conftest import GOV, NSA
from territorial_control_analysis import run_analysis


@pytest.fixture
def outputs(raw_csv, tmp_path):
    return run_analysis(
        raw_csv,
        str(tmp_path / "results"),
        n_resamples=2,
        penalty_levels=3,
        penalty_range=(-3.0, -1.0),
        cooccurrence_min_count=20,
        make_plots=True,
    )


def test_only_territorial_rows_survive(outputs):
    events = outputs['events']
    assert len(events) == 100
    assert set(events['sub_event_type']) == {GOV, NSA}
    assert 'id' in events.columns


def test_planted_bigram_is_government_only(outputs):
    top = outputs['top_bigrams']
    gov = top.loc[top['sub_event_type'] == GOV, 'bigram'].tolist()
    nsa = top.loc[top['sub_event_type'] == NSA, 'bigram'].tolist()
    assert len(gov) <= 20 and len(nsa) <= 20
    assert 'regains control' in gov
    assert 'regains control' not in nsa


def test_classifier_outputs(outputs):
    assert outputs['best_penalty'] in set(outputs['tuning_metrics']['penalty'])
    assert len(outputs['tuning_results']) == 2 * 3 * 3
    assert len(outputs['train']) + len(outputs['test']) == 100
    assert outputs['final_fit'].confusion.values.sum() == len(outputs['test'])
    assert outputs['stm'].gamma['document'].nunique() == 2
    assert outputs['lda'].n_topics == 6


def test_artifacts_written(outputs):
    paths = outputs['paths']
    for name in ('class_balance', 'unigram_counts', 'bigram_counts', 'cooccurrence_pairs', 'tf_idf',
                 'lda_top_terms', 'stm_gamma', 'tuning_metrics', 'test_metrics', 'confusion_matrix',
                 'feature_importances', 'top_unigrams', 'cooccurrence_network', 'tuning_curve', 'report'):
        assert os.path.exists(paths[name]), name
    balance = pd.read_csv(paths['class_balance'])
    assert balance['n'].sum() == 100
    with open(paths['report']) as fh:
        report = fh.read()
    assert report.startswith('# Territorial control in Syria')
    assert 'top_unigrams.png' in report
    assert 'tied at the cut-off' in report


def test_missing_file_propagates(tmp_path):
    with pytest.raises(FileNotFoundError):
        run_analysis(str(tmp_path / "missing.csv"), str(tmp_path / "results"), make_plots=False)
