import pytest

pytest.importorskip("ortools")

from models import FEASIBLE, INFEASIBLE, Shape  # noqa: E402
from solver.cp_sat import try_pack_cp_sat  # noqa: E402
from solver.placements import compute_placements  # noqa: E402

SQUARE = Shape.from_cells(0, [(0, 0), (1, 0), (0, 1), (1, 1)])
L_TROMINO = Shape.from_cells(1, [(0, 0), (1, 0), (0, 1)])


def test_cp_sat_finds_disjoint_witness():
    shapes = [SQUARE, L_TROMINO]
    placements = compute_placements(4, 3, shapes)
    status, witness, reason = try_pack_cp_sat(4, 3, placements, [1, 2], max_seconds=10, workers=1)
    assert status == FEASIBLE
    assert reason
    assert sorted(p.shape for p in witness) == [0, 1, 1]
    seen = 0
    for pl in witness:
        assert seen & pl.mask == 0
        seen |= pl.mask


def test_cp_sat_proves_infeasible():
    placements = compute_placements(3, 3, [SQUARE])
    status, witness, reason = try_pack_cp_sat(3, 3, placements, [2], max_seconds=10, workers=1)
    assert status == INFEASIBLE
    assert witness == []
    assert reason == "Proven infeasible by CP-SAT"


def test_cp_sat_short_circuits_when_placements_run_out():
    placements = compute_placements(2, 2, [SQUARE])
    status, witness, reason = try_pack_cp_sat(2, 2, placements, [2], max_seconds=10)
    assert status == INFEASIBLE
    assert "placements" in reason


def test_cp_sat_rejects_misaligned_counts():
    placements = compute_placements(2, 2, [SQUARE])
    with pytest.raises(ValueError):
        try_pack_cp_sat(2, 2, placements, [1, 1])


def test_isolated_run_matches_in_process():
    from solver.cp_isolate import run_cp_sat_isolated

    placements = compute_placements(3, 3, [SQUARE])
    status, witness, reason, crash = run_cp_sat_isolated(3, 3, placements, [2], max_seconds=10)
    assert crash is None
    assert status == INFEASIBLE
    assert witness == []
