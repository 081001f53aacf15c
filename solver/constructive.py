# solver/constructive.py
from typing import Dict, List, Optional, Sequence, Tuple

from models import Orientation, Placement, Shape
from solver.placements import make_placement


def _pick_orientation(shape: Shape, portrait: bool) -> Tuple[int, Orientation]:
    fits = [
        (idx, o) for idx, o in enumerate(shape.orientations)
        if o.width == o.height or (o.width < o.height) == portrait
    ]
    if not fits:
        fits = list(enumerate(shape.orientations))
    return min(fits, key=lambda t: (max(t[1].width, t[1].height), t[0]))


def quick_block_fill(
    width: int,
    height: int,
    shapes: Sequence[Shape],
    counts: Sequence[int],
) -> Optional[List[Placement]]:
    """
    Slot-grid constructive fill.

    Every required piece gets its own slot, a rectangle as large as the
    biggest bounding box among the required shapes (all pieces upright, then
    all lying down). If the board holds at least as many slots as pieces the
    layout is built directly, without any search. This is a sufficient test
    only: ``None`` says nothing about feasibility.

    Returns the witness placements on success, or ``None``.
    """
    # keyed by catalog position; Shape.index need not be unique
    required = [(pos, shape, int(cnt)) for pos, (shape, cnt) in enumerate(zip(shapes, counts)) if cnt > 0]
    if not required:
        return []
    total = sum(cnt for _, _, cnt in required)

    for portrait in (True, False):
        chosen: Dict[int, Tuple[int, Orientation]] = {
            pos: _pick_orientation(shape, portrait) for pos, shape, _ in required
        }
        slot_w = max(o.width for _, o in chosen.values())
        slot_h = max(o.height for _, o in chosen.values())
        cols = width // slot_w
        rows = height // slot_h
        if cols * rows < total:
            continue

        placed: List[Placement] = []
        slot = 0
        for pos, shape, cnt in required:
            o_idx, _ = chosen[pos]
            for _ in range(cnt):
                row, col = divmod(slot, cols)
                placed.append(make_placement(shape, o_idx, col * slot_w, row * slot_h, width, index=pos))
                slot += 1
        return placed

    return None


__all__ = ["quick_block_fill"]
