import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from ortools.sat.python import cp_model as _cp

from config import CFG
from models import FEASIBLE, INFEASIBLE, UNDETERMINED, Placement

logger = logging.getLogger(__name__)


def _mask_bits(mask: int):
    idx = 0
    while mask:
        if mask & 1:
            yield idx
        mask >>= 1
        idx += 1


def try_pack_cp_sat(
    width: int,
    height: int,
    placements: Sequence[Sequence[Placement]],
    counts: Sequence[int],
    max_seconds: Optional[float] = None,
    workers: Optional[int] = None,
) -> Tuple[str, List[Placement], str]:
    """Decide a region with CP-SAT over the precomputed placements.

    One boolean per placement; each shape uses exactly its required number
    of placements and each board cell is covered at most once. Returns
    ``(status, witness, reason)``; a solver timeout maps to ``UNDETERMINED``.
    """

    if len(placements) != len(counts):
        raise ValueError("counts and placements must align")

    m = _cp.CpModel()
    cell_to_vars: Dict[int, List[_cp.IntVar]] = defaultdict(list)
    chosen: List[List[Tuple[_cp.IntVar, Placement]]] = []

    for i, options in enumerate(placements):
        need = int(counts[i])
        if need == 0:
            chosen.append([])
            continue
        if len(options) < need:
            return INFEASIBLE, [], f"shape {i} has {len(options)} placements for {need} pieces"
        row: List[Tuple[_cp.IntVar, Placement]] = []
        for k, pl in enumerate(options):
            v = m.new_bool_var(f"p_{i}_{k}")
            row.append((v, pl))
            for cell in _mask_bits(pl.mask):
                cell_to_vars[cell].append(v)
        m.add(sum(v for v, _ in row) == need)
        chosen.append(row)

    for cell, vars_here in cell_to_vars.items():
        if len(vars_here) > 1:
            m.add_at_most_one(vars_here)

    seconds = CFG.CP_SAT_TIME_LIMIT if max_seconds is None else max_seconds
    solver = _cp.CpSolver()
    if seconds and seconds > 0:
        solver.parameters.max_time_in_seconds = float(seconds)
    solver.parameters.num_workers = int(workers or CFG.CP_SAT_WORKERS or 1)
    solver.parameters.log_search_progress = False

    res = solver.solve(m)
    logger.debug("cp-sat %dx%d: %s", width, height, solver.status_name(res))

    if res in (_cp.OPTIMAL, _cp.FEASIBLE):
        witness = [pl for row in chosen for v, pl in row if solver.value(v)]
        return FEASIBLE, witness, "CP-SAT found a packing"
    if res == _cp.INFEASIBLE:
        return INFEASIBLE, [], "Proven infeasible by CP-SAT"
    if res == _cp.MODEL_INVALID:
        return UNDETERMINED, [], "CP-SAT rejected the model"
    return UNDETERMINED, [], "CP-SAT stopped before a verdict (time limit)"


__all__ = ["try_pack_cp_sat"]
