from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

Cell = Tuple[int, int]

FEASIBLE = "feasible"
INFEASIBLE = "infeasible"
UNDETERMINED = "undetermined"


@dataclass(frozen=True)
class Orientation:
    cells: Tuple[Cell, ...]  # normalized, sorted

    @property
    def width(self) -> int:
        return max(x for x, _ in self.cells) + 1

    @property
    def height(self) -> int:
        return max(y for _, y in self.cells) + 1


@dataclass(frozen=True)
class Shape:
    index: int
    cells: Tuple[Cell, ...]
    orientations: Tuple[Orientation, ...]
    label: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.cells)

    @classmethod
    def from_cells(cls, index: int, cells: Iterable[Cell], label: Optional[str] = None) -> "Shape":
        from solver.orientations import generate_orientations, normalize_cells

        base = normalize_cells(cells)
        return cls(
            index=int(index),
            cells=base,
            orientations=tuple(generate_orientations(base)),
            label=label,
        )


@dataclass(frozen=True)
class Placement:
    shape: int
    orientation: int
    x: int
    y: int
    mask: int
    size: int


@dataclass(frozen=True)
class Region:
    width: int
    height: int
    counts: Tuple[int, ...]
    label: Optional[str] = None

    @property
    def area(self) -> int:
        return self.width * self.height

    def aligned(self, n: int) -> "Region":
        """Return a copy whose counts line up with a catalog of ``n`` shapes."""
        counts = tuple(self.counts[:n]) + (0,) * max(0, n - len(self.counts))
        if counts == self.counts:
            return self
        return Region(self.width, self.height, counts, self.label)

    def describe(self) -> str:
        return f"{self.width}x{self.height}: {' '.join(str(c) for c in self.counts)}".rstrip()


@dataclass
class RegionResult:
    region: Region
    status: str
    method: str
    reason: str = ""
    placements: List[Placement] = field(default_factory=list)
    nodes: int = 0
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status == FEASIBLE

    @property
    def undetermined(self) -> bool:
        return self.status == UNDETERMINED

    def summary(self) -> str:
        return f"{self.region.describe()} -> {self.status} ({self.method})"
