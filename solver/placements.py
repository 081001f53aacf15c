# solver/placements.py
from typing import List, Optional, Sequence

from models import Cell, Placement, Shape
from solver.board import check_capacity


def shape_placements(width: int, height: int, shape: Shape, index: Optional[int] = None) -> List[Placement]:
    """Every in-bounds translation of every orientation of ``shape``.

    Orientation index ascending, then offsets in row-major order. An
    orientation whose bounding box exceeds the board contributes nothing.
    Placements carry ``index`` (the shape's catalog position) when given,
    else ``shape.index``.
    """
    out: List[Placement] = []
    size = shape.size
    sid = shape.index if index is None else index
    for o_idx, orient in enumerate(shape.orientations):
        if orient.width > width or orient.height > height:
            continue
        offsets = [cy * width + cx for cx, cy in orient.cells]
        for oy in range(height - orient.height + 1):
            row_base = oy * width
            for ox in range(width - orient.width + 1):
                base = row_base + ox
                mask = 0
                for off in offsets:
                    mask |= 1 << (base + off)
                out.append(Placement(sid, o_idx, ox, oy, mask, size))
    return out


def make_placement(
    shape: Shape, orientation: int, x: int, y: int, width: int, index: Optional[int] = None
) -> Placement:
    mask = 0
    for cx, cy in shape.orientations[orientation].cells:
        mask |= 1 << ((y + cy) * width + (x + cx))
    return Placement(shape.index if index is None else index, orientation, x, y, mask, shape.size)


def compute_placements(width: int, height: int, shapes: Sequence[Shape]) -> List[List[Placement]]:
    """One placement list per shape, stamped with the shape's list position."""
    check_capacity(width, height)
    return [shape_placements(width, height, shape, i) for i, shape in enumerate(shapes)]


def placement_counts(placements: Sequence[Sequence[Placement]]) -> List[int]:
    return [len(p) for p in placements]


def mask_cells(mask: int, width: int) -> List[Cell]:
    """Decode a mask back into ``(x, y)`` board cells."""
    cells: List[Cell] = []
    idx = 0
    while mask:
        if mask & 1:
            y, x = divmod(idx, width)
            cells.append((x, y))
        mask >>= 1
        idx += 1
    return cells


__all__ = ["make_placement", "shape_placements", "compute_placements", "placement_counts", "mask_cells"]
