"""Tests for the class-level topic models."""

import numpy as np
import pandas as pd
import pytest

from acled_territory.text.tokenization import DEFAULT_STOP_WORDS
from acled_territory.modeling import (
    TopicModelResult, document_term_matrix, document_topics, fit_lda, fit_structural_topic_model, top_terms,
)
from acled_territory.text import count_tokens, unnest_unigrams


@pytest.fixture
def dtm(events):
    counts = count_tokens(unnest_unigrams(events, DEFAULT_STOP_WORDS), "word")
    return document_term_matrix(counts, "word")


def test_document_term_matrix_one_row_per_class(dtm, events):
    assert dtm.documents == sorted(events["sub_event_type"].unique())
    assert dtm.counts.shape == (2, len(dtm.terms))
    assert dtm.terms == sorted(dtm.terms)


def test_lda_beta_is_a_distribution(dtm):
    result = fit_lda(dtm, n_topics=6, random_state=1234)
    assert result.n_topics == 6
    sums = result.beta.groupby("topic")["beta"].sum()
    assert np.allclose(sums, 1.0)
    gamma_sums = result.gamma.groupby("document")["gamma"].sum()
    assert np.allclose(gamma_sums, 1.0)


def test_lda_same_seed_same_top_terms(dtm):
    first = top_terms(fit_lda(dtm, n_topics=6, random_state=1234), n=10)
    second = top_terms(fit_lda(dtm, n_topics=6, random_state=1234), n=10)
    for topic in range(1, 7):
        assert first[first["topic"] == topic]["term"].tolist() == second[second["topic"] == topic]["term"].tolist()


def test_top_terms_keeps_ties_and_orders_by_beta():
    beta = pd.DataFrame({
        "topic": [1, 1, 1, 1, 2, 2, 2, 2],
        "term": ["a", "b", "c", "d", "a", "b", "c", "d"],
        "beta": [0.4, 0.3, 0.15, 0.15, 0.1, 0.2, 0.3, 0.4],
    })
    result = TopicModelResult(model="test", beta=beta, gamma=pd.DataFrame())
    top = top_terms(result, n=3)
    assert top[top["topic"] == 1]["term"].tolist() == ["a", "b", "c", "d"]
    assert top[top["topic"] == 2]["term"].tolist() == ["d", "c", "b"]
    assert "a" in top["term"].tolist() and top["term"].duplicated().any()


def test_structural_model_gamma_per_document(dtm):
    result = fit_structural_topic_model(dtm, n_topics=2)
    assert result.n_topics == 2
    for doc in dtm.documents:
        gamma = document_topics(result, doc)
        assert list(gamma.index) == [1, 2]
        assert gamma.sum() == pytest.approx(1.0)
        assert (gamma >= 0).all()
    assert np.allclose(result.beta.groupby("topic")["beta"].sum(), 1.0)


def test_structural_model_is_deterministic(dtm):
    first = fit_structural_topic_model(dtm, n_topics=2)
    second = fit_structural_topic_model(dtm, n_topics=2)
    pd.testing.assert_frame_equal(first.beta, second.beta)
    pd.testing.assert_frame_equal(first.gamma, second.gamma)


def test_document_topics_unknown_document(dtm):
    result = fit_structural_topic_model(dtm, n_topics=2)
    with pytest.raises(KeyError):
        document_topics(result, "Looting/property destruction")
