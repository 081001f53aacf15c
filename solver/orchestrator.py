# Orchestrator: per-region evaluation (prune → enumerate → block fill → search → CP-SAT)
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import multiprocessing as mp

from config import CFG
from models import FEASIBLE, INFEASIBLE, UNDETERMINED, Region, RegionResult, Shape
from progress import (
    set_phase, set_phase_total, set_attempt, set_grid, set_status,
    set_regions_total, record_region, log_attempt_detail,
)
from shapes import parse_puzzle
from solver.backtrack import backtrack_search
from solver.board import check_capacity
from solver.constructive import quick_block_fill
from solver.placements import compute_placements

logger = logging.getLogger(__name__)


# ---------- helpers ----------

def _solver_settings(**overrides: Any) -> Dict[str, Any]:
    """Snapshot the CFG knobs so spawned workers see the caller's values."""
    settings = {
        "node_limit": CFG.BACKTRACK_NODE_LIMIT,
        "max_seconds": CFG.BACKTRACK_TIME_LIMIT,
        "block_fill": CFG.BLOCK_FILL,
        "cp_sat": CFG.CP_SAT_FALLBACK,
        "cp_sat_seconds": CFG.CP_SAT_TIME_LIMIT,
        "cp_sat_isolate": CFG.CP_SAT_ISOLATE,
        "max_board_cells": CFG.MAX_BOARD_CELLS,
    }
    settings.update({k: v for k, v in overrides.items() if v is not None})
    return settings


def _required_area(region: Region, shapes: Sequence[Shape]) -> int:
    return sum(c * s.size for c, s in zip(region.counts, shapes))


def _run_cp_sat(region: Region, placements, settings: Dict[str, Any]):
    seconds = float(settings["cp_sat_seconds"])
    if settings.get("cp_sat_isolate"):
        from solver.cp_isolate import run_cp_sat_isolated

        status, witness, reason, crash = run_cp_sat_isolated(
            region.width, region.height, placements, region.counts, seconds
        )
        if crash:
            reason = f"{reason} ({crash})"
        return status, witness, reason

    from solver.cp_sat import try_pack_cp_sat

    return try_pack_cp_sat(region.width, region.height, placements, region.counts, seconds)


# ---------- public entrypoints ----------

def evaluate_region(
    region: Region,
    shapes: Sequence[Shape],
    *,
    node_limit: Optional[int] = None,
    max_seconds: Optional[float] = None,
    block_fill: Optional[bool] = None,
    cp_sat: Optional[bool] = None,
) -> RegionResult:
    """Decide one region. Raises ``BoardCapacityError`` for unusable boards."""
    settings = _solver_settings(
        node_limit=node_limit, max_seconds=max_seconds, block_fill=block_fill, cp_sat=cp_sat
    )
    return _evaluate(region, shapes, settings)


def _evaluate(region: Region, shapes: Sequence[Shape], settings: Dict[str, Any]) -> RegionResult:
    t0 = time.time()
    region = region.aligned(len(shapes))
    W, H = region.width, region.height

    def _result(status: str, method: str, reason: str, placements=None, nodes: int = 0) -> RegionResult:
        return RegionResult(
            region=region,
            status=status,
            method=method,
            reason=reason,
            placements=list(placements or []),
            nodes=nodes,
            elapsed=time.time() - t0,
        )

    if not any(region.counts):
        return _result(FEASIBLE, "trivial", "no pieces required")

    needed = _required_area(region, shapes)
    if needed > W * H:
        return _result(INFEASIBLE, "area_prune", f"pieces need {needed} cells, board has {W * H}")

    check_capacity(W, H, settings.get("max_board_cells"))
    placements = compute_placements(W, H, shapes)

    for pos, (cnt, opts) in enumerate(zip(region.counts, placements)):
        if cnt > 0 and not opts:
            return _result(INFEASIBLE, "no_placements", f"shape {pos} does not fit on {W}x{H}")

    if settings.get("block_fill"):
        witness = quick_block_fill(W, H, shapes, region.counts)
        if witness is not None:
            return _result(FEASIBLE, "block_fill", "every piece fits its own slot", witness)

    outcome = backtrack_search(
        W,
        H,
        [s.size for s in shapes],
        placements,
        region.counts,
        node_limit=settings.get("node_limit"),
        max_seconds=settings.get("max_seconds"),
    )
    if outcome.status != UNDETERMINED or not settings.get("cp_sat"):
        return _result(outcome.status, "backtracking", outcome.reason, outcome.placements, outcome.nodes)

    logger.info("region %s undetermined after %d nodes; trying CP-SAT", region.describe(), outcome.nodes)
    status, witness, reason = _run_cp_sat(region, placements, settings)
    return _result(status, "cp_sat", reason, witness, outcome.nodes)


def _evaluate_worker(args) -> RegionResult:
    region, shapes, settings = args
    # Spawned children re-read config from the environment.
    CFG.MAX_BOARD_CELLS = settings["max_board_cells"]
    return _evaluate(region, shapes, settings)


def evaluate_regions(
    regions: Sequence[Region],
    shapes: Sequence[Shape],
    *,
    workers: Optional[int] = None,
    **overrides: Any,
) -> List[RegionResult]:
    """Evaluate every region independently, preserving input order."""
    settings = _solver_settings(**overrides)
    n = len(regions)
    workers = max(1, int(workers if workers is not None else CFG.WORKERS))

    set_phase("regions")
    set_phase_total(n)
    set_regions_total(n)
    log_attempt_detail("Run setup", regions=n, shapes=len(shapes), workers=workers)

    def _record(idx: int, res: RegionResult) -> None:
        record_region(res.status)
        log_attempt_detail(
            "Region evaluated",
            index=idx,
            region=res.region.describe(),
            status=res.status,
            method=res.method,
            nodes=res.nodes,
            elapsed=f"{res.elapsed:.3f}s",
        )

    results: List[RegionResult] = []
    if workers == 1 or n <= 1:
        for idx, region in enumerate(regions):
            set_attempt(f"region {idx + 1}: {region.width}x{region.height}")
            set_grid(region.width, region.height)
            res = _evaluate(region, shapes, settings)
            _record(idx, res)
            results.append(res)
        return results

    # Pool workers are daemonic and may not spawn the isolated CP-SAT child.
    settings["cp_sat_isolate"] = False
    ctx = mp.get_context("spawn")
    jobs = [(region, list(shapes), settings) for region in regions]
    set_attempt(f"{n} regions on {workers} workers")
    with ctx.Pool(processes=min(workers, n)) as pool:
        for idx, res in enumerate(pool.imap(_evaluate_worker, jobs)):
            _record(idx, res)
            results.append(res)
    return results


def count_feasible_regions(regions: Sequence[Region], shapes: Sequence[Shape], **kwargs: Any) -> int:
    return sum(1 for res in evaluate_regions(regions, shapes, **kwargs) if res.ok)


@dataclass
class PuzzleReport:
    shapes: List[Shape] = field(default_factory=list)
    results: List[RegionResult] = field(default_factory=list)
    error: Optional[str] = None
    elapsed: float = 0.0

    @property
    def feasible(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def undetermined(self) -> int:
        return sum(1 for r in self.results if r.undetermined)

    @property
    def ok(self) -> bool:
        return self.error is None


def solve_puzzle(text: str, **kwargs: Any) -> PuzzleReport:
    """Parse a puzzle and evaluate all of its regions."""
    t0 = time.time()
    set_status("Solving")
    set_phase("parse")
    shapes, regions, err = parse_puzzle(text)
    if err:
        log_attempt_detail("Parse failed", reason=err)
        return PuzzleReport(error=f"Bad puzzle: {err}", elapsed=time.time() - t0)

    results = evaluate_regions(regions, shapes, **kwargs)
    report = PuzzleReport(shapes=list(shapes), results=results, elapsed=time.time() - t0)
    log_attempt_detail(
        "Puzzle solved",
        regions=len(results),
        feasible=report.feasible,
        undetermined=report.undetermined,
        elapsed=f"{report.elapsed:.3f}s",
    )
    return report


__all__ = [
    "evaluate_region",
    "evaluate_regions",
    "count_feasible_regions",
    "PuzzleReport",
    "solve_puzzle",
]
