import itertools
import types

import pytest

import cli
import solver.backtrack as backtrack
from config import CFG

PUZZLE = "0:\n##\n##\n\n1:\n#.\n##\n\n3x3: 2 0\n2x3: 0 2\n4x4: 4 0\n1x1: 0 0\n"


@pytest.fixture(autouse=True)
def _restore_results_out(monkeypatch):
    monkeypatch.setattr(CFG, "RESULTS_OUT", CFG.RESULTS_OUT)


def _write(tmp_path, text):
    path = tmp_path / "puzzle.txt"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_main_prints_summaries_then_count(tmp_path, capsys):
    code = cli.main([_write(tmp_path, PUZZLE), "--no-cp-sat"])
    out = capsys.readouterr().out.splitlines()
    assert code == 0
    assert out[0] == "3x3: 2 0 -> infeasible (backtracking)"
    assert out[-1] == "3"
    assert len(out) == 5


def test_quiet_prints_only_count(tmp_path, capsys):
    code = cli.main([_write(tmp_path, PUZZLE), "--quiet"])
    assert code == 0
    assert capsys.readouterr().out == "3\n"


def test_results_file_written(tmp_path, capsys):
    target = tmp_path / "out" / "verdicts.txt"
    code = cli.main([_write(tmp_path, PUZZLE), "--quiet", "--results", str(target)])
    capsys.readouterr()
    assert code == 0
    assert target.read_text(encoding="utf-8").splitlines()[-1] == "feasible: 3 of 4"


def test_node_limit_leaves_region_undetermined(tmp_path, capsys):
    code = cli.main([_write(tmp_path, PUZZLE), "--no-cp-sat", "--no-block-fill", "--node-limit", "1"])
    captured = capsys.readouterr()
    assert code == 0
    assert "3x3: 2 0 -> undetermined (backtracking)" in captured.out
    assert "undetermined:" in captured.err


def test_parse_error_exit_code(tmp_path, capsys):
    code = cli.main([_write(tmp_path, "just words\n")])
    assert code == cli.EXIT_PARSE_ERROR
    assert "Bad puzzle" in capsys.readouterr().err


def test_capacity_error_exit_code(tmp_path, capsys, monkeypatch):
    monkeypatch.setattr(CFG, "MAX_BOARD_CELLS", 10)
    code = cli.main([_write(tmp_path, "0:\n#\n\n5x5: 1\n")])
    assert code == cli.EXIT_CAPACITY_ERROR
    assert "capacity" in capsys.readouterr().err


def test_time_limit_leaves_region_undetermined(tmp_path, capsys, monkeypatch):
    ticks = itertools.count()
    monkeypatch.setattr(backtrack, "time", types.SimpleNamespace(time=lambda: float(next(ticks))))
    code = cli.main([_write(tmp_path, PUZZLE), "--no-cp-sat", "--time-limit", "0.5"])
    captured = capsys.readouterr()
    assert code == 0
    assert "3x3: 2 0 -> undetermined (backtracking)" in captured.out
    assert "undetermined:" in captured.err
