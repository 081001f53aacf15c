"""Run progress shared between the solver, the web UI and the attempt log.

State lives in one lock-protected dict and is mirrored to a JSON file after
every change, so a second process (a spawned worker, another server worker)
polling ``snapshot()`` sees the same run.
"""

from __future__ import annotations

import json
import logging
import os
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional

PROGRESS_LOCK = threading.Lock()

_HERE = Path(__file__).resolve().parent


def _state_file_path() -> Path:
    configured = os.environ.get("PROGRESS_STATE_FILE")
    return Path(configured) if configured else _HERE / "logs" / "progress_state.json"


STATE_FILE = _state_file_path()
STATE_FILE_TMP = STATE_FILE.with_name(STATE_FILE.name + ".tmp")
_LAST_STATE_MTIME: float = 0.0


def _init_logger() -> logging.Logger:
    logger = logging.getLogger("solver.attempt_log")
    if logger.handlers:
        return logger
    try:
        log_path = _HERE / "logs" / "solver_attempts.log"
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError:
        # No writable log directory: attempt logging stays off.
        return logger
    handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
    )
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger


ATTEMPT_LOGGER = _init_logger()


def log_attempt_detail(event: str, **fields: Any) -> None:
    """Write ``event | key=value ...`` to the attempt log, skipping empty fields."""
    if not ATTEMPT_LOGGER.handlers:
        return
    extras = " ".join(f"{k}={v}" for k, v in fields.items() if v is not None and v != "")
    if extras:
        ATTEMPT_LOGGER.info("%s | %s", event, extras)
    else:
        ATTEMPT_LOGGER.info("%s", event)


def _fmt_seconds(seconds: Optional[float]) -> Optional[str]:
    return None if seconds is None else f"{max(0.0, seconds):.2f}s"


def _fresh_state(run_id: int = 0) -> Dict[str, Any]:
    return {
        "status": "Idle",          # Idle | Solving | Solved | Error
        "phase": "",               # parse | regions
        "phase_total": "",
        "attempt": "",             # e.g. "region 3: 12x5"
        "grid": "",                # e.g. "12 × 5"
        "percent": 0.0,
        "regions_total": 0,
        "regions_done": 0,
        "feasible": 0,
        "undetermined": 0,
        "elapsed_start": None,     # wall-clock start of the run
        "elapsed": 0.0,
        "message": "",
        "done": False,
        "ok": None,
        "result_url": "",
        "run_id": run_id,          # bumped by every reset()
    }


PROGRESS: Dict[str, Any] = _fresh_state()

# Open spans for the attempt log: kind -> (label, started_at).
_SPANS: Dict[str, tuple] = {}
_RUN_START: Optional[float] = None


def _close_span(kind: str, now: float, reason: Optional[str] = None) -> None:
    span = _SPANS.pop(kind, None)
    if span is None:
        return
    label, started = span
    fields = {kind: label, "duration": _fmt_seconds(now - started), "reason": reason}
    if kind == "attempt":
        fields["phase"] = _SPANS.get("phase", ("",))[0]
    log_attempt_detail(f"{kind.capitalize()} finished", **fields)


def _open_span(kind: str, label: str) -> None:
    current = _SPANS.get(kind)
    if current is not None and current[0] == label:
        return
    now = time.time()
    if kind == "phase":
        _close_span("attempt", now, reason="phase_change")
    _close_span(kind, now, reason="switch" if kind == "attempt" else None)
    if label:
        _SPANS[kind] = (label, now)
        log_attempt_detail(f"{kind.capitalize()} started", **{kind: label})


def _persist_locked() -> None:
    global _LAST_STATE_MTIME
    try:
        STATE_FILE.parent.mkdir(parents=True, exist_ok=True)
        with STATE_FILE_TMP.open("w", encoding="utf-8") as fh:
            json.dump(PROGRESS, fh, ensure_ascii=False, separators=(",", ":"))
        STATE_FILE_TMP.replace(STATE_FILE)
        _LAST_STATE_MTIME = STATE_FILE.stat().st_mtime
    except OSError:
        # An unwritable state file only costs cross-process visibility.
        pass


def _load_persisted_locked(force: bool = False) -> None:
    global _LAST_STATE_MTIME
    try:
        mtime = STATE_FILE.stat().st_mtime
        if not force and mtime <= _LAST_STATE_MTIME:
            return
        data = json.loads(STATE_FILE.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return
    if isinstance(data, dict):
        PROGRESS.update({k: v for k, v in data.items() if k in PROGRESS})
        _LAST_STATE_MTIME = mtime


def _touch_elapsed_locked() -> None:
    t0 = PROGRESS.get("elapsed_start")
    if t0 is not None:
        PROGRESS["elapsed"] = time.time() - float(t0)


def _update(**fields: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS.update(fields)
        _persist_locked()


def _fmt_elapsed(seconds: float) -> str:
    seconds = max(0.0, float(seconds))
    if seconds < 60:
        return f"{int(seconds)}s"
    m, s = divmod(int(seconds), 60)
    if m < 60:
        return f"{m}m {s}s"
    h, m = divmod(m, 60)
    return f"{h}h {m}m"


# ------------------------------
# Run lifecycle
# ------------------------------

def reset() -> None:
    global _RUN_START
    with PROGRESS_LOCK:
        _close_span("attempt", time.time(), reason="reset")
        _SPANS.clear()
        _RUN_START = None
        try:
            run_id = int(PROGRESS.get("run_id", 0)) + 1
        except (TypeError, ValueError):
            run_id = 1
        PROGRESS.clear()
        PROGRESS.update(_fresh_state(run_id))
        log_attempt_detail("Progress reset", run_id=run_id)
        _persist_locked()


def start_timer() -> None:
    global _RUN_START
    with PROGRESS_LOCK:
        _RUN_START = time.time()
        PROGRESS["elapsed_start"] = _RUN_START
        PROGRESS["elapsed"] = 0.0
        log_attempt_detail("Run timer started")
        _persist_locked()


def set_done(ok: Any = None, *, reason: Any = None) -> None:
    """Mark the run complete.

    ``ok`` decides the final status when given; otherwise an idle run is
    reported as ``"Solved"``. ``reason`` is surfaced via ``message``.
    """
    global _RUN_START
    with PROGRESS_LOCK:
        now = time.time()
        _touch_elapsed_locked()
        if ok is not None:
            PROGRESS["ok"] = bool(ok)
            PROGRESS["status"] = "Solved" if ok else "Error"
        elif PROGRESS.get("status") in ("", "Idle", None):
            PROGRESS["ok"] = True
            PROGRESS["status"] = "Solved"
        if reason is not None:
            PROGRESS["message"] = str(reason)
        PROGRESS["percent"] = 100.0
        PROGRESS["done"] = True

        _close_span("attempt", now, reason="run_complete")
        _SPANS.pop("phase", None)
        log_attempt_detail(
            "Run finished",
            status=PROGRESS["status"],
            ok=PROGRESS["ok"],
            duration=_fmt_seconds(now - _RUN_START) if _RUN_START is not None else None,
            regions=PROGRESS["regions_done"],
            feasible=PROGRESS["feasible"],
            undetermined=PROGRESS["undetermined"],
            message=PROGRESS["message"],
        )
        _RUN_START = None
        _persist_locked()


# ------------------------------
# Setters
# ------------------------------

def set_status(v: Any) -> None:
    _update(status=str(v))


def set_phase(v: Any) -> None:
    phase = "" if v is None else str(v)
    with PROGRESS_LOCK:
        PROGRESS["phase"] = phase
        _open_span("phase", phase)
        _persist_locked()


def set_phase_total(v: Any) -> None:
    _update(phase_total="" if v is None else str(v))


def set_attempt(v: Any) -> None:
    attempt = "" if v is None else str(v)
    with PROGRESS_LOCK:
        PROGRESS["attempt"] = attempt
        _open_span("attempt", attempt)
        _persist_locked()


def set_grid(w: Any, h: Any) -> None:
    _update(grid=f"{w} × {h}")


def set_regions_total(n: Any) -> None:
    _update(regions_total=max(0, int(n)), regions_done=0, feasible=0, undetermined=0)


def record_region(status: str) -> None:
    """Count one finished region and advance the percentage."""
    with PROGRESS_LOCK:
        PROGRESS["regions_done"] += 1
        if status in ("feasible", "undetermined"):
            PROGRESS[status] += 1
        total = PROGRESS["regions_total"]
        if total:
            PROGRESS["percent"] = min(100.0, 100.0 * PROGRESS["regions_done"] / total)
        _touch_elapsed_locked()
        _persist_locked()


def set_elapsed(seconds: Any) -> None:
    try:
        value = max(0.0, float(seconds))
    except (TypeError, ValueError):
        value = 0.0
    _update(elapsed=value)


def set_result_url(url: Any) -> None:
    _update(result_url="" if url is None else str(url))


# ------------------------------
# Snapshots for the UI
# ------------------------------

def snapshot() -> Dict[str, Any]:
    with PROGRESS_LOCK:
        _load_persisted_locked()
        _touch_elapsed_locked()
        out = {k: v for k, v in PROGRESS.items() if k != "elapsed_start"}
        out["elapsed_str"] = _fmt_elapsed(PROGRESS["elapsed"])
        return out


def as_json() -> Dict[str, Any]:
    # Alias used by /progress3
    return snapshot()


with PROGRESS_LOCK:
    _load_persisted_locked(force=True)
