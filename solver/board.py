# solver/board.py
from __future__ import annotations

from typing import List, Optional, Union

from config import CFG
from models import Placement

WORD_BITS = 64


class BoardCapacityError(ValueError):
    """Raised when a board cannot be represented by the occupancy bitset."""


def check_capacity(width: int, height: int, limit: Optional[int] = None) -> int:
    """Return the board's cell count, failing fast on unusable dimensions."""

    if width <= 0 or height <= 0:
        raise BoardCapacityError(f"Bad board: {width}x{height} must have positive dimensions")
    cells = width * height
    cap = int(CFG.MAX_BOARD_CELLS if limit is None else limit)
    if cap > 0 and cells > cap:
        raise BoardCapacityError(
            f"Board {width}x{height} has {cells} cells; capacity is {cap} (RP_MAX_BOARD_CELLS)"
        )
    return cells


def _bits_of(other: Union["OccupancyBoard", Placement, int]) -> int:
    if isinstance(other, OccupancyBoard):
        return other.bits
    if isinstance(other, Placement):
        return other.mask
    return int(other)


class OccupancyBoard:
    """
    Cells claimed by accepted placements, one bit per cell at ``y*width + x``.

    Only ``union`` mutates, and it only ever sets bits. A search branch works
    on its own ``copy()``; backtracking discards the copy.
    """

    __slots__ = ("width", "height", "cells", "bits")

    def __init__(self, width: int, height: int, bits: int = 0):
        self.width = int(width)
        self.height = int(height)
        self.cells = check_capacity(self.width, self.height)
        if bits >> self.cells:
            raise ValueError("mask has bits outside the board")
        self.bits = bits

    @property
    def num_words(self) -> int:
        return (self.cells + WORD_BITS - 1) // WORD_BITS

    def words(self) -> List[int]:
        mask = (1 << WORD_BITS) - 1
        return [(self.bits >> (i * WORD_BITS)) & mask for i in range(self.num_words)]

    def copy(self) -> "OccupancyBoard":
        clone = OccupancyBoard.__new__(OccupancyBoard)
        clone.width = self.width
        clone.height = self.height
        clone.cells = self.cells
        clone.bits = self.bits
        return clone

    def union(self, other: Union["OccupancyBoard", Placement, int]) -> "OccupancyBoard":
        self.bits |= _bits_of(other)
        return self

    def disjoint(self, other: Union["OccupancyBoard", Placement, int]) -> bool:
        return (self.bits & _bits_of(other)) == 0

    def population(self) -> int:
        return bin(self.bits).count("1")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OccupancyBoard):
            return NotImplemented
        return (self.width, self.height, self.bits) == (other.width, other.height, other.bits)

    def __repr__(self) -> str:
        return f"OccupancyBoard({self.width}x{self.height}, population={self.population()})"


__all__ = ["WORD_BITS", "BoardCapacityError", "check_capacity", "OccupancyBoard"]
