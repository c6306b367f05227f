"""Static plots for the territorial-control report.

Every function draws one figure and writes it to `out` as PNG.
"""
from __future__ import annotations
import logging
import math

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import networkx as nx
import numpy as np
import pandas as pd

from acled_territory.core.constants import COOCCURRENCE_MIN_COUNT, LABEL_MAP, RANDOM_SEED, TARGET_COLUMN
from acled_territory.text.lexical import cooccurrence_graph

LOGGER = logging.getLogger(__name__)


def short_label(name) -> str:
    """Short class label for plot titles and axes; unknown names pass through."""
    return LABEL_MAP.get(name, str(name))


def _save(fig, out: str) -> str:
    fig.tight_layout()
    fig.savefig(out, dpi=200)
    plt.close(fig)
    LOGGER.info("Wrote %s", out)
    return out


def plot_top_tokens(top: pd.DataFrame, token_col: str, out: str, value_col: str = "n",
                    group_col: str = TARGET_COLUMN, title: str = "") -> str:
    groups = sorted(top[group_col].unique())
    fig, axes = plt.subplots(1, max(1, len(groups)), figsize=(6 * max(1, len(groups)), 6), squeeze=False)
    for ax, group in zip(axes[0], groups):
        sub = top[top[group_col] == group].sort_values(value_col)
        ax.barh(sub[token_col], sub[value_col])
        ax.set_title(short_label(group))
        ax.set_xlabel(value_col)
    if title:
        fig.suptitle(title)
    return _save(fig, out)


def plot_cooccurrence_network(pairs: pd.DataFrame, out: str, min_count: int = COOCCURRENCE_MIN_COUNT,
                              group_col: str = TARGET_COLUMN, random_state: int = RANDOM_SEED) -> str:
    groups = sorted(pairs[group_col].unique())
    fig, axes = plt.subplots(1, max(1, len(groups)), figsize=(8 * max(1, len(groups)), 8), squeeze=False)
    for ax, group in zip(axes[0], groups):
        ax.set_title(short_label(group))
        ax.axis("off")
        graph = cooccurrence_graph(pairs, min_count=min_count, group=group, group_col=group_col)
        if graph.number_of_edges() == 0:
            ax.text(0.5, 0.5, f"no pairs with n >= {min_count}", ha="center", va="center")
            continue
        pos = nx.spring_layout(graph, seed=random_state)
        weights = np.array([d["n"] for _, _, d in graph.edges(data=True)], dtype=float)
        widths = 0.5 + 4.0 * weights / weights.max()
        nx.draw_networkx_edges(graph, pos, ax=ax, width=widths, alpha=weights / weights.max(), edge_color="tab:blue")
        nx.draw_networkx_nodes(graph, pos, ax=ax, node_size=40, node_color="tab:orange")
        nx.draw_networkx_labels(graph, pos, ax=ax, font_size=8)
    return _save(fig, out)


def plot_topic_terms(top: pd.DataFrame, out: str, title: str = "") -> str:
    topics = sorted(top["topic"].unique())
    ncols = min(3, len(topics))
    nrows = math.ceil(len(topics) / ncols)
    fig, axes = plt.subplots(nrows, ncols, figsize=(5 * ncols, 4 * nrows), squeeze=False)
    flat = axes.ravel()
    for ax, topic in zip(flat, topics):
        sub = top[top["topic"] == topic].sort_values("beta")
        ax.barh(sub["term"], sub["beta"])
        ax.set_title(f"Topic {topic}")
        ax.set_xlabel("beta")
    for ax in flat[len(topics):]:
        ax.axis("off")
    if title:
        fig.suptitle(title)
    return _save(fig, out)


def plot_document_topics(gamma: pd.DataFrame, out: str) -> str:
    pivot = gamma.pivot(index="document", columns="topic", values="gamma")
    pivot.index = [short_label(d) for d in pivot.index]
    ax = pivot.plot(kind="bar", rot=0, figsize=(8, 5))
    ax.set_ylabel("gamma")
    ax.set_title("Topic probabilities per document")
    return _save(ax.get_figure(), out)


def plot_tuning_curve(metrics: pd.DataFrame, out: str, best_penalty: float | None = None,
                      metric: str = "roc_auc") -> str:
    sub = metrics[metrics["metric"] == metric].sort_values("penalty")
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.errorbar(sub["penalty"], sub["mean"], yerr=sub["std_err"], marker="o", ms=3, capsize=2)
    if best_penalty is not None:
        ax.axvline(best_penalty, color="tab:red", linestyle="--", label=f"selected {best_penalty:.3g}")
        ax.legend()
    ax.set_xscale("log")
    ax.set_xlabel("L1 penalty")
    ax.set_ylabel(f"mean {metric} (bootstrap)")
    ax.set_title("Penalty tuning")
    return _save(fig, out)


def plot_feature_importances(importances: pd.DataFrame, out: str) -> str:
    fig, axes = plt.subplots(1, 2, figsize=(14, 7), squeeze=False)
    for ax, sign in zip(axes[0], ("POS", "NEG")):
        sub = importances[importances["sign"] == sign].sort_values("importance")
        ax.barh(sub["variable"], sub["importance"], color="tab:green" if sign == "POS" else "tab:red")
        ax.set_title(sign)
        ax.set_xlabel("|coefficient|")
    return _save(fig, out)


def plot_confusion_matrix(confusion: pd.DataFrame, out: str) -> str:
    fig, ax = plt.subplots(figsize=(6, 5))
    ax.imshow(confusion.values, cmap="Blues")
    ax.set_xticks(range(confusion.shape[1]))
    ax.set_xticklabels([short_label(c) for c in confusion.columns])
    ax.set_yticks(range(confusion.shape[0]))
    ax.set_yticklabels([short_label(c) for c in confusion.index])
    ax.set_xlabel("prediction")
    ax.set_ylabel("truth")
    for i in range(confusion.shape[0]):
        for j in range(confusion.shape[1]):
            ax.text(j, i, str(confusion.values[i, j]), ha="center", va="center")
    return _save(fig, out)
