"""Helpers for writing solver outputs to disk."""

from __future__ import annotations

import os
from typing import Sequence

from config import CFG
from models import RegionResult


def _resolve_output_path(base_dir: str, configured_name: str, fallback: str) -> str:
    """Return the absolute path where an output artifact should be written."""

    name = (configured_name or "").strip() or fallback
    if os.path.isabs(name):
        return name
    return os.path.join(base_dir, name)


def write_results(results: Sequence[RegionResult], base_dir: str) -> str:
    """Write one verdict line per region plus the feasible total."""

    path = _resolve_output_path(base_dir, CFG.RESULTS_OUT, "results.txt")
    os.makedirs(os.path.dirname(path), exist_ok=True)

    feasible = sum(1 for r in results if r.ok)
    undetermined = sum(1 for r in results if r.undetermined)
    with open(path, "w", encoding="utf-8") as f:
        if not results:
            f.write("No regions\n")
        for r in results:
            f.write(f"{r.summary()}\n")
        f.write(f"feasible: {feasible} of {len(results)}")
        if undetermined:
            f.write(f" (undetermined: {undetermined})")
        f.write("\n")
    return path


def write_layout_view_html(svg: str, legend_html: str, base_dir: str, grid_label: str = "") -> str:
    """Write the rendered SVG/legend preview to the configured HTML file."""

    path = _resolve_output_path(base_dir, CFG.LAYOUT_HTML, "layout_view.html")
    os.makedirs(os.path.dirname(path), exist_ok=True)

    heading = f"Layout View: {grid_label}" if grid_label else "Layout View"
    with open(path, "w", encoding="utf-8") as vf:
        vf.write(
            f"""<!doctype html>
<html><head><meta charset='utf-8'><title>Layout View</title></head>
<body>
<h1>{heading}</h1>
<section>{svg}</section>
<section><h3>Legend</h3><ul>{legend_html}</ul></section>
</body></html>"""
        )
    return path


__all__ = ["write_results", "write_layout_view_html"]
