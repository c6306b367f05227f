"""Topic models and the tuned sub-event classifier."""

from .topic_models import (
    DocumentTermMatrix, TopicModelResult, document_term_matrix, fit_lda,
    fit_structural_topic_model, top_terms, document_topics,
)
from .features import CalendarFeatures, build_preprocessor, feature_names
from .tuning import penalty_grid, penalty_to_c, stratified_bootstraps, tune_penalty, collect_metrics, select_best
from .classifier import FinalFit, split_events, encode_target, build_workflow, finalize_workflow, last_fit, feature_importances

__all__ = [
    'DocumentTermMatrix',
    'TopicModelResult',
    'document_term_matrix',
    'fit_lda',
    'fit_structural_topic_model',
    'top_terms',
    'document_topics',
    'CalendarFeatures',
    'build_preprocessor',
    'feature_names',
    'penalty_grid',
    'penalty_to_c',
    'stratified_bootstraps',
    'tune_penalty',
    'collect_metrics',
    'select_best',
    'FinalFit',
    'split_events',
    'encode_target',
    'build_workflow',
    'finalize_workflow',
    'last_fit',
    'feature_importances',
]
