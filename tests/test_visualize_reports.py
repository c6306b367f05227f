"""Tests for class labels on the report plots."""

import os

import pandas as pd

from acled_territory.analysis import visualize_reports as viz
from conftest import GOV, NSA


def test_short_label():
    assert viz.short_label(GOV) == "GOV"
    assert viz.short_label(NSA) == "NSA"
    assert viz.short_label("Armed clash") == "Armed clash"


def test_confusion_matrix_axes_use_short_labels(tmp_path, monkeypatch):
    figures = []

    def keep(fig, out):
        figures.append(fig)
        fig.savefig(out)
        return out

    monkeypatch.setattr(viz, "_save", keep)
    confusion = pd.DataFrame([[20, 3], [4, 18]],
                             index=pd.Index([GOV, NSA], name="truth"),
                             columns=pd.Index([GOV, NSA], name="prediction"))
    out = viz.plot_confusion_matrix(confusion, str(tmp_path / "cm.png"))
    assert os.path.exists(out)
    ax = figures[0].axes[0]
    assert [t.get_text() for t in ax.get_xticklabels()] == ["GOV", "NSA"]
    assert [t.get_text() for t in ax.get_yticklabels()] == ["GOV", "NSA"]


def test_document_topics_plot_uses_short_labels(tmp_path, monkeypatch):
    figures = []

    def keep(fig, out):
        figures.append(fig)
        return out

    monkeypatch.setattr(viz, "_save", keep)
    gamma = pd.DataFrame({
        "document": [GOV, GOV, NSA, NSA],
        "topic": [1, 2, 1, 2],
        "gamma": [0.9, 0.1, 0.2, 0.8],
    })
    viz.plot_document_topics(gamma, str(tmp_path / "gamma.png"))
    labels = [t.get_text() for t in figures[0].axes[0].get_xticklabels()]
    assert labels == ["GOV", "NSA"]
