"""Explode event notes into unigram and bigram token rows.

Token rows keep the record identifier and its sub-event type so that every
downstream count can be grouped by class or by record. The stop-word set is
always passed in by the caller.
"""
from __future__ import annotations
import re
from typing import Iterable, List

import pandas as pd
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS

from acled_territory.core.constants import DOMAIN_STOP_WORDS, ID_COLUMN, TARGET_COLUMN, TEXT_COLUMN

TOKEN_PATTERN = r"[a-z0-9]+(?:'[a-z0-9]+)*"
_TOKEN_RE = re.compile(TOKEN_PATTERN)
_HAS_ALPHA = re.compile(r"[a-z]")


def build_stop_words(extra: Iterable[str] | None = DOMAIN_STOP_WORDS,
                     base: Iterable[str] | None = ENGLISH_STOP_WORDS) -> frozenset:
    """Union of a standard stop-word list and domain exclusions, lowercased."""
    words = set()
    for source in (base, extra):
        if source:
            words.update(w.lower() for w in source)
    return frozenset(words)


DEFAULT_STOP_WORDS = build_stop_words()


def tokenize(text) -> List[str]:
    """Lowercase `text` and split it into word tokens, dropping punctuation."""
    if text is None or (isinstance(text, float) and pd.isna(text)):
        return []
    return _TOKEN_RE.findall(str(text).lower())


def token_passes(token: str, stop_words: frozenset) -> bool:
    """True iff the token is not a stop word and contains a lowercase letter."""
    return token not in stop_words and _HAS_ALPHA.search(token) is not None


def bigrams(tokens: List[str]) -> List[tuple]:
    return list(zip(tokens, tokens[1:]))


def _explode(df: pd.DataFrame, text_col: str, id_col: str, group_col: str, token_col: str, make_tokens) -> pd.DataFrame:
    rows = []
    for rec_id, group, text in zip(df[id_col], df[group_col], df[text_col]):
        for tok in make_tokens(text):
            rows.append((rec_id, group, tok))
    return pd.DataFrame(rows, columns=[id_col, group_col, token_col])


def unnest_unigrams(df: pd.DataFrame, stop_words: frozenset, text_col: str = TEXT_COLUMN,
                    id_col: str = ID_COLUMN, group_col: str = TARGET_COLUMN) -> pd.DataFrame:
    """One row per surviving word: (id, sub_event_type, word)."""
    def words(text):
        return [t for t in tokenize(text) if token_passes(t, stop_words)]
    return _explode(df, text_col, id_col, group_col, 'word', words)


def unnest_bigrams(df: pd.DataFrame, stop_words: frozenset, text_col: str = TEXT_COLUMN,
                   id_col: str = ID_COLUMN, group_col: str = TARGET_COLUMN) -> pd.DataFrame:
    """One row per surviving adjacent word pair: (id, sub_event_type, bigram).

    Pairs are taken from the raw token sequence; a pair is kept only when
    both halves pass the unigram filter, then rejoined as "word1 word2".
    """
    def pairs(text):
        return [
            f"{w1} {w2}" for w1, w2 in bigrams(tokenize(text))
            if token_passes(w1, stop_words) and token_passes(w2, stop_words)
        ]
    return _explode(df, text_col, id_col, group_col, 'bigram', pairs)
