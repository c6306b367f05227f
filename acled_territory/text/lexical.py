"""Frequency, co-occurrence and tf-idf statistics over token rows."""
from __future__ import annotations
import logging

import networkx as nx
import numpy as np
import pandas as pd
from scipy import sparse

from acled_territory.core.constants import COOCCURRENCE_MIN_COUNT, ID_COLUMN, TARGET_COLUMN, TOP_TOKENS

LOGGER = logging.getLogger(__name__)


def count_tokens(tokens: pd.DataFrame, token_col: str, group_col: str = TARGET_COLUMN) -> pd.DataFrame:
    """Occurrences per (group, token), sorted by `n` descending."""
    counts = tokens.groupby([group_col, token_col]).size().reset_index(name='n')
    return counts.sort_values(['n', group_col, token_col], ascending=[False, True, True]).reset_index(drop=True)


def top_tokens_by_group(counts: pd.DataFrame, token_col: str, n: int = TOP_TOKENS,
                        group_col: str = TARGET_COLUMN, value_col: str = 'n') -> pd.DataFrame:
    """The `n` highest-valued tokens of every group."""
    ordered = counts.sort_values([group_col, value_col, token_col], ascending=[True, False, True])
    return ordered.groupby(group_col, sort=True).head(n).reset_index(drop=True)


def _binary_doc_term(doc_ids: pd.Series, terms: pd.Series):
    doc_idx, _ = pd.factorize(doc_ids)
    term_codes = pd.Categorical(terms, categories=sorted(terms.unique()))
    vocab = np.asarray(term_codes.categories)
    mat = sparse.csr_matrix(
        (np.ones(len(doc_idx), dtype=np.int64), (doc_idx, term_codes.codes)),
        shape=(doc_idx.max() + 1 if len(doc_idx) else 0, len(vocab)),
    )
    mat.sum_duplicates()
    mat.data[:] = 1
    return mat, vocab


def pairwise_cooccurrence(tokens: pd.DataFrame, token_col: str = 'word', doc_col: str = ID_COLUMN,
                          group_col: str = TARGET_COLUMN) -> pd.DataFrame:
    """Count, per group, the documents containing both tokens of every pair.

    Each unordered pair is stored once with item1 < item2.
    Returns columns (group_col, item1, item2, n) sorted by n descending.
    """
    frames = []
    for group, sub in tokens.groupby(group_col, sort=True):
        mat, vocab = _binary_doc_term(sub[doc_col], sub[token_col])
        co = sparse.triu(mat.T @ mat, k=1).tocoo()
        frames.append(pd.DataFrame({
            group_col: group,
            'item1': vocab[co.row],
            'item2': vocab[co.col],
            'n': co.data.astype(int),
        }))
        LOGGER.info("%s: %d co-occurring pairs over %d documents", group, co.nnz, mat.shape[0])
    if not frames:
        return pd.DataFrame(columns=[group_col, 'item1', 'item2', 'n'])
    out = pd.concat(frames, ignore_index=True)
    return out.sort_values(['n', group_col, 'item1', 'item2'], ascending=[False, True, True, True]).reset_index(drop=True)


def cooccurrence_graph(pairs: pd.DataFrame, min_count: int = COOCCURRENCE_MIN_COUNT,
                       group: str | None = None, group_col: str = TARGET_COLUMN) -> nx.Graph:
    """Word network of pairs with at least `min_count` shared documents."""
    if group is not None:
        pairs = pairs[pairs[group_col] == group]
    kept = pairs[pairs['n'] >= min_count]
    graph = nx.Graph()
    for item1, item2, n in zip(kept['item1'], kept['item2'], kept['n']):
        graph.add_edge(item1, item2, n=int(n))
    return graph


def tf_idf(counts: pd.DataFrame, term_col: str, doc_col: str = TARGET_COLUMN, n_col: str = 'n') -> pd.DataFrame:
    """Attach tf, idf and tf_idf to a (document, term, count) table.

    tf = n / total terms in the document; idf = ln(documents / documents with the term).
    """
    out = counts[[doc_col, term_col, n_col]].copy()
    totals = out.groupby(doc_col)[n_col].transform('sum')
    out['tf'] = out[n_col] / totals
    n_docs = out[doc_col].nunique()
    doc_freq = out.groupby(term_col)[doc_col].transform('nunique')
    out['idf'] = np.log(n_docs / doc_freq)
    out['tf_idf'] = out['tf'] * out['idf']
    return out.sort_values(['tf_idf', doc_col, term_col], ascending=[False, True, True]).reset_index(drop=True)
