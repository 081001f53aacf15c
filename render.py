import random
from typing import Dict, Sequence, Tuple

from config import CFG
from models import RegionResult, Shape
from solver.placements import mask_cells


def _color(name: str) -> str:
    rng = random.Random(name)
    r = rng.randint(40, 200)
    g = rng.randint(40, 200)
    b = rng.randint(40, 200)
    return f"rgb({r},{g},{b})"


def _shape_name(shapes: Sequence[Shape], idx: int) -> str:
    if 0 <= idx < len(shapes) and shapes[idx].label:
        return f"shape {shapes[idx].label}"
    return f"shape {idx}"


def render_witness(result: RegionResult, shapes: Sequence[Shape]) -> Tuple[str, str]:
    """SVG of a region's witness packing, one colored group per placed piece."""
    W, H = result.region.width, result.region.height
    scale = max(4, int(CFG.SVG_SCALE))
    svg_w = W * scale + 2
    svg_h = H * scale + 2

    palette: Dict[str, str] = {}
    groups = []
    for n, pl in enumerate(result.placements):
        name = _shape_name(shapes, pl.shape)
        color = palette.setdefault(name, _color(name))
        cells = "".join(
            f'<rect x="{1 + x * scale}" y="{1 + y * scale}" width="{scale}" height="{scale}"/>'
            for x, y in mask_cells(pl.mask, W)
        )
        groups.append(
            f'<g fill="{color}" stroke="black" stroke-width="1"><title>{name} #{n}</title>{cells}</g>'
        )

    grid = f'<rect x="1" y="1" width="{svg_w-2}" height="{svg_h-2}" fill="none" stroke="black" stroke-width="2"/>'
    svg = (
        f'<svg class="layout-svg" xmlns="http://www.w3.org/2000/svg" '
        f'width="{svg_w}" height="{svg_h}" '
        f'viewBox="0 0 {svg_w} {svg_h}" preserveAspectRatio="xMinYMin meet">'
        f'{grid}{"".join(groups)}</svg>'
    )

    legend = "".join(f"<li><span class='swatch' style='background:{c}'></span>{n}</li>" for n, c in palette.items())
    return svg, legend
