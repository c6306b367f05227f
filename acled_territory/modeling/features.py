"""Feature engineering for the sub-event classifier.

The preprocessor is fit on the training partition only and then applied
unchanged to any other rows.
"""
from __future__ import annotations

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.compose import ColumnTransformer
from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder, StandardScaler

from acled_territory.core.constants import MAX_TOKENS, NGRAM_RANGE, TEXT_COLUMN
from acled_territory.text.tokenization import TOKEN_PATTERN

DATE_COLUMN = 'event_date'
REGION_COLUMN = 'admin2'
NUMERIC_COLUMNS = ['fatalities']
PREDICTORS = [DATE_COLUMN, TEXT_COLUMN, REGION_COLUMN] + NUMERIC_COLUMNS


class CalendarFeatures(BaseEstimator, TransformerMixin):
    """Replace a date column by its month and day-of-week names."""

    def fit(self, X, y=None):
        self.feature_names_in_ = np.asarray(_columns(X), dtype=object)
        return self

    def transform(self, X):
        frame = X if isinstance(X, pd.DataFrame) else pd.DataFrame(X, columns=self.feature_names_in_)
        out = {}
        for col in frame.columns:
            dates = pd.to_datetime(frame[col])
            out[f'{col}_month'] = dates.dt.strftime('%b')
            out[f'{col}_dow'] = dates.dt.strftime('%a')
        return pd.DataFrame(out, index=frame.index)

    def get_feature_names_out(self, input_features=None):
        cols = self.feature_names_in_ if input_features is None else input_features
        return np.asarray([f'{c}_{part}' for c in cols for part in ('month', 'dow')], dtype=object)


def _columns(X):
    if isinstance(X, pd.DataFrame):
        return list(X.columns)
    return [f'x{i}' for i in range(np.asarray(X).shape[1])]


def build_preprocessor(stop_words, max_tokens: int = MAX_TOKENS, ngram_range: tuple = NGRAM_RANGE) -> Pipeline:
    """Unfitted preprocessing pipeline producing z-scored numeric predictors.

    - event_date -> month and day-of-week dummies (raw date dropped)
    - notes -> tf-idf over the `max_tokens` most frequent 1..2-grams, stop words removed
    - admin2 -> one-hot dummies
    - fatalities -> as is
    """
    columns = ColumnTransformer(
        [
            ('date', Pipeline([
                ('calendar', CalendarFeatures()),
                ('dummies', OneHotEncoder(handle_unknown='ignore')),
            ]), [DATE_COLUMN]),
            ('notes', TfidfVectorizer(
                lowercase=True,
                token_pattern=TOKEN_PATTERN,
                stop_words=sorted(stop_words),
                ngram_range=ngram_range,
                max_features=max_tokens,
            ), TEXT_COLUMN),
            ('region', OneHotEncoder(handle_unknown='ignore'), [REGION_COLUMN]),
            ('numeric', 'passthrough', NUMERIC_COLUMNS),
        ],
        sparse_threshold=0.0,
    )
    return Pipeline([
        ('columns', columns),
        ('normalize', StandardScaler()),
    ])


def feature_names(preprocessor: Pipeline) -> np.ndarray:
    """Names of the engineered columns of a fitted preprocessor."""
    return preprocessor.named_steps['columns'].get_feature_names_out()
