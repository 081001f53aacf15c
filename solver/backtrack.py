# solver/backtrack.py
from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from models import FEASIBLE, INFEASIBLE, UNDETERMINED, Placement
from solver.board import OccupancyBoard

logger = logging.getLogger(__name__)

# Deadline is polled every this many nodes; time.time() per node is wasteful.
_CLOCK_STRIDE = 256


@dataclass
class SearchOutcome:
    status: str
    nodes: int = 0
    area_pruned: int = 0
    limit_hit: bool = False
    timed_out: bool = False
    placements: List[Placement] = field(default_factory=list)

    @property
    def reason(self) -> str:
        if self.status == FEASIBLE:
            return "all pieces placed"
        if self.timed_out:
            return "time_limit"
        if self.limit_hit:
            return "node_limit"
        return "exhausted"


def backtrack_search(
    width: int,
    height: int,
    shape_sizes: Sequence[int],
    placements: Sequence[Sequence[Placement]],
    counts: Sequence[int],
    *,
    node_limit: Optional[int] = None,
    max_seconds: Optional[float] = None,
    board: Optional[OccupancyBoard] = None,
) -> SearchOutcome:
    """Depth-first search for a non-overlapping choice of every required piece.

    Each call picks the required shape with the fewest precomputed placements,
    tries them in enumeration order on a copy of the board and recurses. A
    branch is cut when the occupied area plus the area still owed exceeds the
    board. The first success wins; its placement stack is the witness.

    ``node_limit`` (accepted placements) and ``max_seconds`` bound the work.
    Running out of either reports ``UNDETERMINED`` instead of ``INFEASIBLE``.
    """

    total_cells = int(width) * int(height)
    remaining: List[int] = [int(c) for c in counts]
    sizes = [int(s) for s in shape_sizes]
    option_counts = [len(p) for p in placements]
    if not (len(remaining) == len(sizes) == len(option_counts)):
        raise ValueError("counts, shape sizes and placements must align")

    limit = int(node_limit) if node_limit and node_limit > 0 else None
    deadline = time.time() + float(max_seconds) if max_seconds and max_seconds > 0 else None

    nodes = 0
    area_pruned = 0
    limit_hit = False
    timed_out = False
    stack: List[Placement] = []

    def _budget_exhausted() -> bool:
        nonlocal limit_hit, timed_out
        if limit_hit or timed_out:
            return True
        if limit is not None and nodes >= limit:
            limit_hit = True
            return True
        if deadline is not None and nodes % _CLOCK_STRIDE == 0 and time.time() >= deadline:
            timed_out = True
            return True
        return False

    def _search(current: OccupancyBoard) -> bool:
        nonlocal nodes, area_pruned
        if not any(remaining):
            return True

        needed = sum(c * s for c, s in zip(remaining, sizes))
        if current.population() + needed > total_cells:
            area_pruned += 1
            return False

        best_shape: Optional[int] = None
        best_options = 0
        for i, cnt in enumerate(remaining):
            if cnt == 0:
                continue
            opts = option_counts[i]
            if opts == 0:
                return False
            if best_shape is None or opts < best_options:
                best_shape = i
                best_options = opts

        for pl in placements[best_shape]:
            if not current.disjoint(pl):
                continue
            if _budget_exhausted():
                return False
            nodes += 1
            remaining[best_shape] -= 1
            child = current.copy()
            child.union(pl)
            stack.append(pl)
            if _search(child):
                return True
            stack.pop()
            remaining[best_shape] += 1

        return False

    depth_needed = sum(remaining) + 64
    if depth_needed > sys.getrecursionlimit():
        sys.setrecursionlimit(depth_needed)

    start = board.copy() if board is not None else OccupancyBoard(width, height)
    solved = _search(start)

    if solved:
        status = FEASIBLE
    elif limit_hit or timed_out:
        status = UNDETERMINED
    else:
        status = INFEASIBLE

    outcome = SearchOutcome(
        status=status,
        nodes=nodes,
        area_pruned=area_pruned,
        limit_hit=limit_hit,
        timed_out=timed_out,
        placements=list(stack) if solved else [],
    )
    logger.debug(
        "backtrack %dx%d: %s after %d nodes (%d area prunes)",
        width, height, outcome.reason, nodes, area_pruned,
    )
    return outcome


__all__ = ["SearchOutcome", "backtrack_search"]
