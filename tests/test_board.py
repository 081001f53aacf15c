import pytest

from config import CFG
from models import Placement
from solver.board import WORD_BITS, BoardCapacityError, OccupancyBoard, check_capacity


def test_word_count_rounds_up():
    assert OccupancyBoard(8, 8).num_words == 1
    assert OccupancyBoard(13, 5).num_words == 2
    assert OccupancyBoard(1, 1).num_words == 1
    assert len(OccupancyBoard(10, 13).words()) == (130 + WORD_BITS - 1) // WORD_BITS


def test_union_disjoint_population():
    board = OccupancyBoard(4, 4)
    assert board.population() == 0
    assert board.disjoint(0b1111)

    board.union(0b0011)
    assert board.population() == 2
    assert not board.disjoint(0b0110)
    assert board.disjoint(0b1100)

    board.union(Placement(0, 0, 2, 0, 0b1100, 2))
    assert board.population() == 4
    assert board.bits == 0b1111


def test_union_accepts_another_board():
    a = OccupancyBoard(3, 3, bits=0b000000011)
    b = OccupancyBoard(3, 3, bits=0b110000000)
    assert a.disjoint(b)
    a.union(b)
    assert a.population() == 4


def test_copy_is_independent():
    parent = OccupancyBoard(5, 2, bits=0b1)
    child = parent.copy()
    child.union(0b10)
    assert parent.population() == 1
    assert child.population() == 2
    assert child == OccupancyBoard(5, 2, bits=0b11)


def test_words_split_high_cells():
    board = OccupancyBoard(10, 10)
    board.union(1 << 70)
    assert board.words() == [0, 1 << 6]


def test_bits_outside_board_rejected():
    with pytest.raises(ValueError):
        OccupancyBoard(2, 2, bits=1 << 4)


def test_capacity_error_when_board_too_large(monkeypatch):
    monkeypatch.setattr(CFG, "MAX_BOARD_CELLS", 100)
    assert check_capacity(10, 10) == 100
    with pytest.raises(BoardCapacityError):
        OccupancyBoard(11, 10)


def test_capacity_error_for_non_positive_dimensions():
    with pytest.raises(BoardCapacityError):
        check_capacity(0, 5)
    with pytest.raises(ValueError):
        OccupancyBoard(3, -1)
