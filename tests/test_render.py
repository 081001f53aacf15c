from models import FEASIBLE, Region, RegionResult, Shape
from render import render_witness
from solver.placements import make_placement

DOMINO = Shape.from_cells(0, [(0, 0), (1, 0)], label="A")


def test_render_witness_draws_each_piece():
    placements = [make_placement(DOMINO, 0, 0, 0, 2), make_placement(DOMINO, 0, 0, 1, 2)]
    result = RegionResult(Region(2, 2, (2,)), FEASIBLE, "backtracking", placements=placements)

    svg, legend = render_witness(result, [DOMINO])

    assert svg.startswith("<svg")
    assert svg.count("<g ") == 2
    # frame plus two cells per domino
    assert svg.count("<rect") == 5
    assert legend.count("<li>") == 1
    assert "shape A" in legend


def test_render_colors_are_stable():
    placements = [make_placement(DOMINO, 0, 0, 0, 2)]
    result = RegionResult(Region(2, 1, (1,)), FEASIBLE, "block_fill", placements=placements)
    assert render_witness(result, [DOMINO]) == render_witness(result, [DOMINO])
