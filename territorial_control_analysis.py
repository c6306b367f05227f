#!/usr/bin/env python3
"""Territorial-control analysis of ACLED Syria events.

Compares "Government regains territory" with "Non-state actor overtakes
territory" records: word and bigram frequencies, co-occurrence networks,
tf-idf, two topic models and a bootstrapped, tuned LASSO classifier.

Usage:
    ACLED_CSV=datasets/2017-01-01-2021-12-31-Syria.csv python territorial_control_analysis.py --n-jobs 4

Outputs (in RESULTS_DIR, default results/territorial_control/):
- one CSV per stage table, PNG plots and report.md
"""
from __future__ import annotations

import argparse
import logging

from acled_territory.core.constants import (
    COOCCURRENCE_MIN_COUNT, LDA_N_TOPICS, N_BOOTSTRAPS, PENALTY_LEVELS, PENALTY_RANGE,
    POSITIVE_CLASS, RANDOM_SEED, STM_N_TOPICS, TOP_IMPORTANCES, TOP_TERMS_PER_TOPIC, TOP_TOKENS,
)
from acled_territory.core.data_helpers import get_data_path, get_n_jobs, paths_for_results, setup_results_environment
from acled_territory.data_preparation import class_balance, filter_sub_events, load_events
from acled_territory.text import (
    DEFAULT_STOP_WORDS, count_tokens, pairwise_cooccurrence, tf_idf, top_tokens_by_group, unnest_bigrams,
    unnest_unigrams,
)
from acled_territory.modeling import (
    build_workflow, collect_metrics, document_term_matrix, encode_target, feature_importances, fit_lda,
    fit_structural_topic_model, last_fit, penalty_grid, select_best, split_events, stratified_bootstraps,
    top_terms, tune_penalty,
)
from acled_territory.modeling.features import PREDICTORS
from acled_territory.analysis import visualize_reports as viz
from acled_territory.analysis.report import write_report

LOGGER = logging.getLogger("territorial_control")


def run_analysis(csv_path: str, results_dir: str | None = None, *,
                 stop_words=DEFAULT_STOP_WORDS,
                 random_state: int = RANDOM_SEED,
                 n_resamples: int = N_BOOTSTRAPS,
                 penalty_levels: int = PENALTY_LEVELS,
                 penalty_range: tuple = PENALTY_RANGE,
                 cooccurrence_min_count: int = COOCCURRENCE_MIN_COUNT,
                 n_jobs: int = 1,
                 make_plots: bool = True,
                 progress: bool = False) -> dict:
    """Run every stage in order and write tables, plots and the report.

    Returns a dict of the in-memory stage outputs.
    """
    results_dir = setup_results_environment(results_dir)
    paths = paths_for_results(results_dir)

    # --- Ingest & filter
    events = filter_sub_events(load_events(csv_path))
    balance = class_balance(events)
    print(f"Territorial-control rows: {len(events):,}")
    print(balance.to_string(index=False))

    # --- Tokenize & clean
    unigrams = unnest_unigrams(events, stop_words)
    bigram_rows = unnest_bigrams(events, stop_words)
    LOGGER.info("%d unigram rows, %d bigram rows", len(unigrams), len(bigram_rows))

    # --- Lexical analysis
    unigram_counts = count_tokens(unigrams, 'word')
    bigram_counts = count_tokens(bigram_rows, 'bigram')
    top_unigrams = top_tokens_by_group(unigram_counts, 'word', n=TOP_TOKENS)
    top_bigrams = top_tokens_by_group(bigram_counts, 'bigram', n=TOP_TOKENS)
    pairs = pairwise_cooccurrence(unigrams, token_col='word')
    term_stats = tf_idf(unigram_counts, 'word')
    top_tf_idf = top_tokens_by_group(term_stats, 'word', n=TOP_TOKENS, value_col='tf_idf')

    # --- Topic models (documents = sub-event types)
    dtm = document_term_matrix(unigram_counts, 'word')
    lda = fit_lda(dtm, n_topics=LDA_N_TOPICS, random_state=random_state)
    lda_top = top_terms(lda, n=TOP_TERMS_PER_TOPIC)
    stm = fit_structural_topic_model(dtm, n_topics=STM_N_TOPICS)
    stm_top = top_terms(stm, n=TOP_TERMS_PER_TOPIC)

    # --- Classification
    train, test = split_events(events, random_state=random_state)
    y_train = encode_target(train['sub_event_type'], POSITIVE_CLASS)
    workflow = build_workflow(stop_words, random_state=random_state)
    resamples = stratified_bootstraps(y_train, n_resamples=n_resamples, random_state=random_state)
    penalties = penalty_grid(levels=penalty_levels, log10_range=penalty_range)
    tuning = tune_penalty(workflow, train[PREDICTORS], y_train, penalties, resamples,
                          n_jobs=n_jobs, progress=progress)
    tuning_metrics = collect_metrics(tuning)
    best_penalty = select_best(tuning_metrics, metric='roc_auc')
    final = last_fit(workflow, best_penalty, train, test)
    importances = feature_importances(final.workflow, top_n=TOP_IMPORTANCES)

    print(f"\nSelected L1 penalty: {best_penalty:.4g}")
    print(final.metrics.to_string(index=False))
    print(final.confusion.to_string())

    # --- Tables
    tables = {
        'class_balance': balance,
        'unigram_counts': unigram_counts,
        'bigram_counts': bigram_counts,
        'cooccurrence_pairs': pairs,
        'tf_idf': term_stats,
        'lda_top_terms': lda_top,
        'stm_beta': stm.beta,
        'stm_gamma': stm.gamma,
        'tuning_results': tuning,
        'tuning_metrics': tuning_metrics,
        'test_metrics': final.metrics,
        'feature_importances': importances,
    }
    for name, df in tables.items():
        df.to_csv(paths[name], index=False)
    final.confusion.to_csv(paths['confusion_matrix'])

    # --- Plots
    plots = {}
    if make_plots:
        plots['top_unigrams'] = viz.plot_top_tokens(top_unigrams, 'word', paths['top_unigrams'], title='Most common words')
        plots['top_bigrams'] = viz.plot_top_tokens(top_bigrams, 'bigram', paths['top_bigrams'], title='Most common bigrams')
        plots['tf_idf_plot'] = viz.plot_top_tokens(top_tf_idf, 'word', paths['tf_idf_plot'], value_col='tf_idf',
                                                   title='Highest tf-idf words')
        plots['cooccurrence_network'] = viz.plot_cooccurrence_network(
            pairs, paths['cooccurrence_network'], min_count=cooccurrence_min_count, random_state=random_state)
        plots['lda_top_terms_plot'] = viz.plot_topic_terms(lda_top, paths['lda_top_terms_plot'], title='LDA top terms')
        plots['stm_gamma_plot'] = viz.plot_document_topics(stm.gamma, paths['stm_gamma_plot'])
        plots['tuning_curve'] = viz.plot_tuning_curve(tuning_metrics, paths['tuning_curve'], best_penalty=best_penalty)
        plots['feature_importances_plot'] = viz.plot_feature_importances(importances, paths['feature_importances_plot'])
        plots['confusion_matrix_plot'] = viz.plot_confusion_matrix(final.confusion, paths['confusion_matrix_plot'])

    # --- Report
    sections = [
        {'title': 'Data', 'text': f"{len(events):,} events from `{csv_path}`.",
         'tables': {'Class balance': balance}},
        {'title': 'Word frequencies',
         'tables': {'Top words': top_unigrams, 'Top bigrams': top_bigrams},
         'plots': {'Top words': plots.get('top_unigrams'), 'Top bigrams': plots.get('top_bigrams')}},
        {'title': 'Word co-occurrence',
         'text': f"Pairs of words sharing at least {cooccurrence_min_count} records are drawn.",
         'tables': {'Most frequent pairs': pairs},
         'plots': {'Co-occurrence network': plots.get('cooccurrence_network')}},
        {'title': 'tf-idf', 'tables': {'Highest tf-idf words': top_tf_idf},
         'plots': {'tf-idf': plots.get('tf_idf_plot')}},
        {'title': 'Topic models',
         'text': ["Each sub-event type is one document.",
                  f"Top-{TOP_TERMS_PER_TOPIC} term lists keep every term tied at the cut-off, so a topic can list more."],
         'tables': {f'LDA ({LDA_N_TOPICS} topics) top terms': lda_top,
                    f'Structural model ({STM_N_TOPICS} topics) top terms': stm_top,
                    'Structural model gamma': stm.gamma},
         'plots': {'LDA top terms': plots.get('lda_top_terms_plot'),
                   'Structural model gamma': plots.get('stm_gamma_plot')}},
        {'title': 'Classifier',
         'text': [f"Positive class: {POSITIVE_CLASS}.",
                  f"{len(train):,} training / {len(test):,} test records; "
                  f"{len(resamples)} bootstrap resamples x {len(penalties)} penalties.",
                  f"Selected L1 penalty: {best_penalty:.4g}."],
         'tables': {'Held-out metrics': final.metrics,
                    'Confusion matrix': final.confusion.reset_index(),
                    'Feature importances': importances},
         'plots': {'Tuning curve': plots.get('tuning_curve'),
                   'Feature importances': plots.get('feature_importances_plot'),
                   'Confusion matrix': plots.get('confusion_matrix_plot')}},
    ]
    write_report(paths['report'], 'Territorial control in Syria (ACLED)', sections)
    print(f"\nWrote report to {paths['report']}")

    return {
        'events': events,
        'class_balance': balance,
        'unigrams': unigrams,
        'bigrams': bigram_rows,
        'unigram_counts': unigram_counts,
        'bigram_counts': bigram_counts,
        'top_unigrams': top_unigrams,
        'top_bigrams': top_bigrams,
        'cooccurrence_pairs': pairs,
        'tf_idf': term_stats,
        'lda': lda,
        'lda_top_terms': lda_top,
        'stm': stm,
        'train': train,
        'test': test,
        'tuning_results': tuning,
        'tuning_metrics': tuning_metrics,
        'best_penalty': best_penalty,
        'final_fit': final,
        'feature_importances': importances,
        'paths': paths,
    }


def parse_args():
    p = argparse.ArgumentParser(description='ACLED territorial-control text analysis')
    p.add_argument('csv_path', nargs='?', default=get_data_path(),
                   help='ACLED export (default: ACLED_CSV env var or constants.CSV_SRC)')
    p.add_argument('--results-dir', default=None,
                   help='Output directory (default: RESULTS_DIR env var or results/territorial_control)')
    p.add_argument('--seed', type=int, default=RANDOM_SEED, help=f'Random seed (default: {RANDOM_SEED})')
    p.add_argument('--n-resamples', type=int, default=N_BOOTSTRAPS,
                   help=f'Bootstrap resamples for tuning (default: {N_BOOTSTRAPS})')
    p.add_argument('--penalty-levels', type=int, default=PENALTY_LEVELS,
                   help=f'Number of L1 penalties in the grid (default: {PENALTY_LEVELS})')
    p.add_argument('--n-jobs', type=int, default=get_n_jobs(),
                   help='Tuning worker processes (default: N_JOBS env var or 1)')
    p.add_argument('--min-count', type=int, default=COOCCURRENCE_MIN_COUNT,
                   help=f'Minimum shared records for a network edge (default: {COOCCURRENCE_MIN_COUNT})')
    p.add_argument('--no-plots', action='store_true', help='Skip PNG plots')
    p.add_argument('--verbose', action='store_true')
    return p.parse_args()


def main():
    args = parse_args()
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING,
                        format="[%(levelname)s] %(message)s")
    if args.n_jobs < 1:
        raise SystemExit('--n-jobs must be >= 1')

    try:
        run_analysis(
            args.csv_path,
            args.results_dir,
            random_state=args.seed,
            n_resamples=args.n_resamples,
            penalty_levels=args.penalty_levels,
            cooccurrence_min_count=args.min_count,
            n_jobs=args.n_jobs,
            make_plots=not args.no_plots,
            progress=args.verbose,
        )
    except Exception as e:
        LOGGER.exception("Analysis failed: %s", e)
        raise


if __name__ == "__main__":
    main()
