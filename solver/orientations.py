# solver/orientations.py
from typing import Iterable, List, Set, Tuple

from models import Cell, Orientation

# Quarter turns about the origin, applied after the optional reflection.
_ROTATIONS = (
    lambda x, y: (x, y),
    lambda x, y: (-y, x),
    lambda x, y: (-x, -y),
    lambda x, y: (y, -x),
)


def normalize_cells(cells: Iterable[Cell]) -> Tuple[Cell, ...]:
    """Shift ``cells`` so min x and min y are zero; return them sorted."""
    pts = [(int(x), int(y)) for x, y in cells]
    if not pts:
        raise ValueError("shape must have at least one cell")
    min_x = min(x for x, _ in pts)
    min_y = min(y for _, y in pts)
    return tuple(sorted((x - min_x, y - min_y) for x, y in pts))


def transform_cells(cells: Iterable[Cell], flip: bool, rot: int) -> Tuple[Cell, ...]:
    rotate = _ROTATIONS[rot % 4]
    out = []
    for x, y in cells:
        if flip:
            x = -x
        out.append(rotate(x, y))
    return normalize_cells(out)


def generate_orientations(cells: Iterable[Cell]) -> List[Orientation]:
    """
    All geometrically distinct orientations of a footprint under the eight
    symmetries of the square, in (flip, rotation) order. Symmetric shapes
    yield fewer than eight; a 2x2 block yields one.
    """
    base = normalize_cells(cells)
    seen: Set[Tuple[Cell, ...]] = set()
    result: List[Orientation] = []

    for flip in (False, True):
        for rot in range(4):
            key = transform_cells(base, flip, rot)
            if key in seen:
                continue
            seen.add(key)
            result.append(Orientation(cells=key))

    return result


__all__ = ["normalize_cells", "transform_cells", "generate_orientations"]
