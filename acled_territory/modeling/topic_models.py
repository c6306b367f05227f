"""Topic models over the class-level document-term matrix.

Documents are sub-event types: every record of a class is pooled into one
document, so the matrix has one row per class. Two models are fit on it:

- LDA (scikit-learn `LatentDirichletAllocation`, variational Bayes) with a
  fixed seed.
- A structural variant with spectral initialization: a KL-divergence
  non-negative factorization (the PLSA objective) started from an SVD-based
  `nndsvda` initialization, so it needs no seed.

Both return a `TopicModelResult` holding tidy `beta` (topic x term) and
`gamma` (document x topic) tables.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List

import numpy as np
import pandas as pd
from scipy import sparse
from sklearn.decomposition import LatentDirichletAllocation, NMF

from acled_territory.core.constants import LDA_N_TOPICS, RANDOM_SEED, STM_N_TOPICS, TARGET_COLUMN, TOP_TERMS_PER_TOPIC

LOGGER = logging.getLogger(__name__)

# randomized_svd inside the spectral initialization takes a state; pin it
_SVD_STATE = 0


@dataclass(frozen=True)
class DocumentTermMatrix:
    counts: sparse.csr_matrix
    documents: List[str]
    terms: List[str]


@dataclass(frozen=True)
class TopicModelResult:
    model: str
    beta: pd.DataFrame
    gamma: pd.DataFrame

    @property
    def n_topics(self) -> int:
        return int(self.beta['topic'].nunique())


def document_term_matrix(counts: pd.DataFrame, term_col: str, doc_col: str = TARGET_COLUMN,
                         n_col: str = 'n') -> DocumentTermMatrix:
    """Cast a (document, term, count) table to a sparse matrix, rows and columns sorted."""
    documents = sorted(counts[doc_col].unique())
    terms = sorted(counts[term_col].unique())
    rows = pd.Categorical(counts[doc_col], categories=documents).codes
    cols = pd.Categorical(counts[term_col], categories=terms).codes
    mat = sparse.csr_matrix(
        (counts[n_col].to_numpy(dtype=np.float64), (rows, cols)),
        shape=(len(documents), len(terms)),
    )
    mat.sum_duplicates()
    return DocumentTermMatrix(counts=mat, documents=list(documents), terms=list(terms))


def _normalize_rows(mat: np.ndarray) -> np.ndarray:
    totals = mat.sum(axis=1, keepdims=True)
    uniform = np.full_like(mat, 1.0 / mat.shape[1])
    return np.where(totals > 0, mat / np.where(totals > 0, totals, 1.0), uniform)


def _tidy(model: str, dtm: DocumentTermMatrix, beta: np.ndarray, gamma: np.ndarray) -> TopicModelResult:
    n_topics = beta.shape[0]
    topics = np.arange(1, n_topics + 1)
    beta_df = pd.DataFrame({
        'topic': np.repeat(topics, len(dtm.terms)),
        'term': np.tile(dtm.terms, n_topics),
        'beta': beta.ravel(),
    })
    gamma_df = pd.DataFrame({
        'document': np.repeat(dtm.documents, n_topics),
        'topic': np.tile(topics, len(dtm.documents)),
        'gamma': gamma.ravel(),
    })
    return TopicModelResult(model=model, beta=beta_df, gamma=gamma_df)


def fit_lda(dtm: DocumentTermMatrix, n_topics: int = LDA_N_TOPICS,
            random_state: int = RANDOM_SEED) -> TopicModelResult:
    """Fit LDA; identical input and seed give identical results."""
    lda = LatentDirichletAllocation(
        n_components=n_topics,
        learning_method='batch',
        random_state=random_state,
    )
    gamma = lda.fit_transform(dtm.counts)
    beta = _normalize_rows(lda.components_)
    LOGGER.info("LDA: %d topics over %d documents x %d terms (perplexity %.1f)",
                n_topics, len(dtm.documents), len(dtm.terms), lda.perplexity(dtm.counts))
    return _tidy('lda', dtm, beta, _normalize_rows(gamma))


def fit_structural_topic_model(dtm: DocumentTermMatrix, n_topics: int = STM_N_TOPICS,
                               max_iter: int = 1000) -> TopicModelResult:
    """Fit the spectral-initialized structural variant; deterministic for a given input."""
    nmf = NMF(
        n_components=n_topics,
        init='nndsvda',
        solver='mu',
        beta_loss='kullback-leibler',
        max_iter=max_iter,
        random_state=_SVD_STATE,
    )
    loadings = nmf.fit_transform(dtm.counts)
    # fold topic mass into the loadings before normalizing both factors
    mass = nmf.components_.sum(axis=1)
    beta = _normalize_rows(nmf.components_)
    gamma = _normalize_rows(loadings * mass[np.newaxis, :])
    LOGGER.info("Structural model: %d topics, %d iterations, reconstruction error %.3f",
                n_topics, nmf.n_iter_, nmf.reconstruction_err_)
    return _tidy('stm', dtm, beta, gamma)


def top_terms(result: TopicModelResult, n: int = TOP_TERMS_PER_TOPIC) -> pd.DataFrame:
    """The `n` highest-beta terms per topic.

    Terms tied with the n-th are all kept, so a topic can list more than `n`
    terms.
    """
    parts = [
        grp.nlargest(n, 'beta', keep='all')
        for _, grp in result.beta.groupby('topic', sort=True)
    ]
    out = pd.concat(parts, ignore_index=True)
    return out.sort_values(['topic', 'beta', 'term'], ascending=[True, False, True]).reset_index(drop=True)


def document_topics(result: TopicModelResult, document: str) -> pd.Series:
    """Topic probabilities (gamma) of one document, indexed by topic."""
    rows = result.gamma[result.gamma['document'] == document]
    if rows.empty:
        raise KeyError(f"Unknown document: {document}")
    return rows.set_index('topic')['gamma']
