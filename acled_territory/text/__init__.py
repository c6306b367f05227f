"""Tokenization and lexical statistics for event notes."""

from .tokenization import DEFAULT_STOP_WORDS, build_stop_words, tokenize, token_passes, unnest_unigrams, unnest_bigrams
from .lexical import count_tokens, top_tokens_by_group, pairwise_cooccurrence, cooccurrence_graph, tf_idf

__all__ = [
    'DEFAULT_STOP_WORDS',
    'build_stop_words',
    'tokenize',
    'token_passes',
    'unnest_unigrams',
    'unnest_bigrams',
    'count_tokens',
    'top_tokens_by_group',
    'pairwise_cooccurrence',
    'cooccurrence_graph',
    'tf_idf',
]
