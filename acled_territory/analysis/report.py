"""Render the analysis outputs into a Markdown report.

A report is a list of sections; each section is a dict with a `title` and any
of `text` (str or list of lines), `tables` (mapping caption -> DataFrame) and
`plots` (mapping caption -> PNG path).
"""
from __future__ import annotations
import os
from typing import Iterable

import pandas as pd


def _table_block(caption: str, df: pd.DataFrame, max_rows: int) -> list:
    shown = df.head(max_rows)
    lines = [f"**{caption}**", "", "```", shown.to_string(index=False), "```"]
    if len(df) > max_rows:
        lines.append(f"_{len(df) - max_rows} more rows not shown_")
    lines.append("")
    return lines


def render_report(title: str, sections: Iterable[dict], base_dir: str, max_rows: int = 40) -> str:
    lines = [f"# {title}", ""]
    for section in sections:
        lines += [f"## {section['title']}", ""]
        text = section.get("text")
        if text:
            lines += [text] if isinstance(text, str) else list(text)
            lines.append("")
        for caption, df in section.get("tables", {}).items():
            lines += _table_block(caption, df, max_rows)
        for caption, path in section.get("plots", {}).items():
            if path is None:
                continue
            lines += [f"![{caption}]({os.path.relpath(path, base_dir)})", ""]
    return "\n".join(lines)


def write_report(path: str, title: str, sections: Iterable[dict], max_rows: int = 40) -> str:
    """Write the rendered report to `path` and return the path."""
    base_dir = os.path.dirname(os.path.abspath(path))
    content = render_report(title, sections, base_dir, max_rows=max_rows)
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(content)
    return path
