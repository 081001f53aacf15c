import pytest

from shapes import is_region_line, parse_puzzle, parse_shape_block

PUZZLE = """\
0:
##
##

1:
#.
##

3x3: 2 0
2x3: 0 2
4x4: 4
1x1: 0 0 7
"""


def test_parse_puzzle_reads_shapes_and_regions():
    shapes, regions, err = parse_puzzle(PUZZLE)
    assert err is None
    assert [s.label for s in shapes] == ["0", "1"]
    assert [s.index for s in shapes] == [0, 1]
    assert [s.size for s in shapes] == [4, 3]
    assert shapes[1].cells == ((0, 0), (0, 1), (1, 1))
    assert [(r.width, r.height) for r in regions] == [(3, 3), (2, 3), (4, 4), (1, 1)]


def test_region_counts_are_aligned_to_catalog():
    _, regions, _ = parse_puzzle(PUZZLE)
    assert regions[2].counts == (4, 0)
    assert regions[3].counts == (0, 0)


def test_shapes_without_headers_are_numbered_in_order():
    text = "#\n\n##\n\n2x1: 0 1\n"
    shapes, regions, err = parse_puzzle(text)
    assert err is None
    assert [s.label for s in shapes] == [None, None]
    assert [s.size for s in shapes] == [1, 2]
    assert regions[0].counts == (0, 1)


@pytest.mark.parametrize(
    "text, fragment",
    [
        ("", "nothing parsed"),
        ("0:\n##\n", "no region lines"),
        ("3x3: 1\n", "no shapes found"),
        ("0:\n#x\n\n3x3: 1\n", "unexpected character"),
        ("0:\n##\n#\n\n3x3: 1\n", "different lengths"),
        ("0:\n..\n\n3x3: 1\n", "no '#' cells"),
        ("0:\n##\n\n3x3: 1 a\n", "bad count 'a'"),
        ("0:\n#\n\n3x3: ²\n", "bad count '²'"),
        ("0:\n#\n\n3x3: -1\n", "bad count '-1'"),
        ("0:\n##\n\n0x3: 1\n", "positive dimensions"),
        ("0:\n##\n\n3x3: 1\nnot a region\n", "bad region line"),
    ],
)
def test_parse_errors(text, fragment):
    shapes, regions, err = parse_puzzle(text)
    assert shapes == [] and regions == []
    assert err is not None
    assert fragment in err


def test_shape_error_names_the_block():
    _, _, err = parse_puzzle("4:\n#?\n\n2x2: 1\n")
    assert err.startswith("shape 4:")


def test_parse_shape_block_cells():
    cells, err = parse_shape_block(["#.", ".#"])
    assert err is None
    assert cells == [(0, 0), (1, 1)]
    assert parse_shape_block([]) == (None, "empty shape block")


def test_is_region_line():
    assert is_region_line("12x5: 1 0 1 0 2 2")
    assert is_region_line("4x4:")
    assert not is_region_line("0:")
    assert not is_region_line("##.")
