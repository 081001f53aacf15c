import pytest

import app as app_module
from config import CFG

PUZZLE = "0:\n##\n##\n\n1:\n#.\n##\n\n3x3: 2 0\n2x3: 0 2\n4x4: 4 0\n1x1: 0 0\n"


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(app_module, "BASE_DIR", str(tmp_path))
    monkeypatch.setattr(CFG, "CP_SAT_FALLBACK", False)
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as c:
        yield c


def test_index_renders_form(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert b"<textarea" in resp.data


def test_solve_json_reports_counts(client, tmp_path):
    resp = client.post("/solve", json={"puzzle": PUZZLE})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["ok"] is True
    assert data["region_count"] == 4
    assert data["feasible"] == 3
    assert data["reason"] == "3 of 4 regions feasible"
    assert [row["status"] for row in data["rows"]] == ["infeasible", "feasible", "feasible", "feasible"]
    assert "svg" not in data
    assert (tmp_path / "results.txt").exists()

    progress = client.get("/progress3")
    assert progress.headers["Cache-Control"] == "no-store, max-age=0"
    snap = progress.get_json()
    assert snap["status"] == "Solved"
    assert snap["done"] is True
    assert snap["feasible"] == 3


def test_solve_form_renders_result_page(client):
    resp = client.post("/solve", data={"puzzle": PUZZLE})
    assert resp.status_code == 200
    assert b"3 of 4 regions feasible" in resp.data
    assert b"<svg" in resp.data

    latest = client.get("/result/latest")
    assert latest.status_code == 200
    assert b"2x3: 0 2" in latest.data


def test_solve_bad_puzzle_reports_error(client):
    resp = client.post("/solve?format=json", data={"puzzle": "nothing to see"})
    data = resp.get_json()
    assert data["ok"] is False
    assert data["reason"].startswith("Bad puzzle:")
    assert data["rows"] == []

    snap = client.get("/progress3").get_json()
    assert snap["status"] == "Error"
    assert snap["ok"] is False


def test_solve_capacity_error_is_reported(client, monkeypatch):
    monkeypatch.setattr(CFG, "MAX_BOARD_CELLS", 10)
    resp = client.post("/solve", json={"puzzle": "0:\n#\n\n5x5: 1\n"})
    data = resp.get_json()
    assert data["ok"] is False
    assert "capacity" in data["reason"]


def test_downloads_serve_latest_outputs(client):
    client.post("/solve", json={"puzzle": PUZZLE})
    results = client.get("/download/results")
    assert results.status_code == 200
    assert results.data.decode("utf-8").splitlines()[-1] == "feasible: 3 of 4"
    layout = client.get("/download/html")
    assert layout.status_code == 200
    assert b"<svg" in layout.data
