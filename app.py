# app.py: puzzle form, solve endpoint, progress polling
from __future__ import annotations
import os
import time
from typing import Any, Dict, List, Tuple

from flask import Flask, request, render_template, send_from_directory, jsonify, url_for

from solver.board import BoardCapacityError
from solver.orchestrator import PuzzleReport, solve_puzzle
from config import CFG
from io_files import write_results, write_layout_view_html
from render import render_witness

from progress import (
    reset as progress_reset,
    as_json as progress_json,
    start_timer as progress_start,
    set_status, set_elapsed, set_done, set_result_url,
)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def _results_location() -> Tuple[str, str]:
    # Same resolution io_files uses, against the BASE_DIR in effect now.
    name = (CFG.RESULTS_OUT or "").strip() or "results.txt"
    return os.path.split(os.path.abspath(os.path.join(BASE_DIR, name)))


def _layout_location() -> Tuple[str, str]:
    name = (CFG.LAYOUT_HTML or "").strip() or "layout_view.html"
    return os.path.split(os.path.abspath(os.path.join(BASE_DIR, name)))


def _empty_result(reason: str = "") -> Dict[str, Any]:
    return {
        "ok": False,
        "reason": reason,
        "rows": [],
        "region_count": 0,
        "feasible": 0,
        "undetermined": 0,
        "elapsed_str": "0.00s",
        "svg": "",
        "legend": "",
        "witness_label": "",
        "results_filename": _results_location()[1],
        "layout_filename": _layout_location()[1],
    }


LAST_RESULT: Dict[str, Any] = _empty_result()

app = Flask(__name__, template_folder="templates")


@app.after_request
def _no_cache_progress(resp):
    if request.path == "/progress3":
        resp.headers["Cache-Control"] = "no-store, max-age=0"
        resp.headers["Pragma"] = "no-cache"
        resp.headers["Expires"] = "0"
    return resp


@app.route("/")
def index():
    return render_template("index.html")


@app.route("/result/latest")
def result_latest():
    return render_template("result.html", **LAST_RESULT)


def _elapsed_since(t0: float) -> str:
    return f"{max(0.0, time.time() - t0):.2f}s"


def _puzzle_text_from_request() -> str:
    payload = request.get_json(silent=True)
    if isinstance(payload, dict) and isinstance(payload.get("puzzle"), str):
        return payload["puzzle"]
    upload = request.files.get("puzzle_file")
    if upload is not None and upload.filename:
        return upload.read().decode("utf-8", errors="replace")
    return request.form.get("puzzle") or request.args.get("puzzle") or ""


def _finalize_solver_progress(ok_flag: bool, text: str) -> None:
    """Close the run in the progress view; ``text`` becomes its message."""
    set_done(ok_flag, reason=text)


def _report_rows(report: PuzzleReport) -> List[Dict[str, Any]]:
    return [
        {
            "region": res.region.describe(),
            "status": res.status,
            "method": res.method,
            "reason": res.reason,
            "nodes": res.nodes,
        }
        for res in report.results
    ]


def _wants_json() -> bool:
    return request.is_json or request.args.get("format") == "json"


def _respond():
    if _wants_json():
        return jsonify({k: v for k, v in LAST_RESULT.items() if k not in ("svg", "legend")})
    return render_template("result.html", **LAST_RESULT)


@app.route("/solve", methods=["POST"])
def solve():
    progress_reset()
    progress_start()
    set_status("Solving")

    t0 = time.time()
    text = _puzzle_text_from_request()

    try:
        report = solve_puzzle(text)
    except BoardCapacityError as e:
        report = PuzzleReport(error=str(e))
    except Exception as e:
        app.logger.exception("solve failed")
        report = PuzzleReport(error=f"solver exception: {type(e).__name__}: {e}")

    set_elapsed(time.time() - t0)
    LAST_RESULT.clear()
    LAST_RESULT.update(_empty_result(report.error or ""))

    if not report.ok:
        _finalize_solver_progress(False, report.error or "")
        LAST_RESULT["elapsed_str"] = _elapsed_since(t0)
        set_result_url(url_for("result_latest"))
        return _respond()

    summary = f"{report.feasible} of {len(report.results)} regions feasible"
    if report.undetermined:
        summary += f", {report.undetermined} undetermined"
    _finalize_solver_progress(True, summary)

    try:
        LAST_RESULT["results_filename"] = os.path.basename(write_results(report.results, BASE_DIR))
    except OSError:
        app.logger.warning("could not write %s", LAST_RESULT["results_filename"])

    # Only the first feasible region with a witness is drawn.
    witness = next((r for r in report.results if r.ok and r.placements), None)
    if witness is not None:
        label = witness.region.describe()
        svg_markup, legend_html = render_witness(witness, report.shapes)
        LAST_RESULT.update({"svg": svg_markup, "legend": legend_html, "witness_label": label})
        try:
            layout_path = write_layout_view_html(svg_markup, legend_html, BASE_DIR, grid_label=label)
            LAST_RESULT["layout_filename"] = os.path.basename(layout_path)
        except OSError:
            app.logger.warning("could not write %s", LAST_RESULT["layout_filename"])

    LAST_RESULT.update({
        "ok": True,
        "reason": summary,
        "rows": _report_rows(report),
        "region_count": len(report.results),
        "feasible": report.feasible,
        "undetermined": report.undetermined,
        "elapsed_str": _elapsed_since(t0),
    })
    set_result_url(url_for("result_latest"))
    return _respond()


@app.route("/download/results")
def download_results():
    directory, filename = _results_location()
    return send_from_directory(directory, filename, as_attachment=True)


@app.route("/download/html")
def download_html():
    directory, filename = _layout_location()
    return send_from_directory(directory, filename, as_attachment=True)


@app.route("/progress3")
def progress3():
    return jsonify(progress_json())


if __name__ == "__main__":
    app.run(debug=False)
