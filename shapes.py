# shapes.py: puzzle text parser (shape diagrams + region lines)
from __future__ import annotations
import re
from typing import List, Optional, Sequence, Tuple

from models import Cell, Region, Shape

_REGION_RE = re.compile(r"^\s*(?P<w>[0-9]+)\s*x\s*(?P<h>[0-9]+)\s*:(?P<rest>.*)$")
_COUNT_RE = re.compile(r"^[0-9]+$")
_ROW_RE = re.compile(r"^[#.]+$")

ParseResult = Tuple[List[Shape], List[Region], Optional[str]]


def is_region_line(line: str) -> bool:
    return bool(_REGION_RE.match(line or ""))


def parse_shape_block(rows: Sequence[str]) -> Tuple[Optional[List[Cell]], Optional[str]]:
    """Return (cells, error) for one diagram of ``#`` (filled) and ``.`` rows."""
    if not rows:
        return None, "empty shape block"
    width = len(rows[0])
    cells: List[Cell] = []
    for y, row in enumerate(rows):
        if not _ROW_RE.match(row):
            return None, f"unexpected character in shape row {row!r}"
        if len(row) != width:
            return None, f"shape rows have different lengths ({width} vs {len(row)})"
        for x, ch in enumerate(row):
            if ch == "#":
                cells.append((x, y))
    if not cells:
        return None, "shape with no '#' cells"
    return cells, None


def _split_blocks(lines: Sequence[str]) -> List[Tuple[Optional[str], List[str]]]:
    blocks: List[Tuple[Optional[str], List[str]]] = []
    label: Optional[str] = None
    rows: List[str] = []

    def _flush():
        nonlocal label, rows
        if rows:
            blocks.append((label, rows))
        label, rows = None, []

    for raw in lines:
        line = raw.strip()
        if not line:
            _flush()
            continue
        if line.endswith(":"):
            _flush()
            label = line[:-1].strip()
            continue
        rows.append(line)
    _flush()
    return blocks


def _parse_region(line: str, num_shapes: int) -> Tuple[Optional[Region], Optional[str]]:
    m = _REGION_RE.match(line)
    if not m:
        return None, f"bad region line {line.strip()!r}"
    w, h = int(m.group("w")), int(m.group("h"))
    if w <= 0 or h <= 0:
        return None, f"region {w}x{h} must have positive dimensions"
    counts: List[int] = []
    for tok in m.group("rest").split():
        if not _COUNT_RE.match(tok):
            return None, f"bad count {tok!r} in region {w}x{h}"
        counts.append(int(tok))
    region = Region(w, h, tuple(counts), label=line.strip())
    return region.aligned(num_shapes), None


def parse_puzzle(text: str) -> ParseResult:
    """
    Return (shapes, regions, error_message_or_None).

    Shape blocks come first, each an optional ``N:`` header plus ``#``/``.``
    rows; the first ``WxH: c0 c1 ...`` line starts the regions. Region counts
    are padded with zeros or truncated to the number of shapes.
    """
    if not text or not text.strip():
        return [], [], "nothing parsed from request"

    lines = text.splitlines()
    region_start = next((i for i, ln in enumerate(lines) if is_region_line(ln)), None)
    if region_start is None:
        return [], [], "no region lines found"

    shapes: List[Shape] = []
    for label, rows in _split_blocks(lines[:region_start]):
        cells, err = parse_shape_block(rows)
        if err:
            where = f"shape {label}" if label else f"shape #{len(shapes)}"
            return [], [], f"{where}: {err}"
        shapes.append(Shape.from_cells(len(shapes), cells, label=label))
    if not shapes:
        return [], [], "no shapes found before the region lines"

    regions: List[Region] = []
    for line in lines[region_start:]:
        if not line.strip():
            continue
        region, err = _parse_region(line, len(shapes))
        if err:
            return [], [], err
        regions.append(region)

    return shapes, regions, None


__all__ = ["is_region_line", "parse_shape_block", "parse_puzzle"]
