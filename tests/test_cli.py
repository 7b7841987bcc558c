from __future__ import annotations

import json

import pytest

from map_coloring.cli import EXIT_BAD_INPUT, EXIT_SOLVED, EXIT_STEP_LIMIT, EXIT_UNSATISFIABLE, main


def test_list(capsys):
    assert main(["list"]) == 0
    out = capsys.readouterr().out
    assert "australia" in out
    assert "petersen" in out


def test_solve_prints_steps_and_coloring(capsys):
    assert main(["solve", "triangle", "-k", "3"]) == EXIT_SOLVED
    out = capsys.readouterr().out
    assert "[TRY      ] Trying to color A..." in out
    assert "[SUCCESS  ] Successfully colored C." in out
    assert "Solved successfully with 3 colors!" in out
    assert "Steps: 9" in out


def test_solve_unsatisfiable(capsys):
    assert main(["solve", "triangle", "-k", "2", "--quiet-steps"]) == EXIT_UNSATISFIABLE
    out = capsys.readouterr().out
    assert "Backtracking" not in out
    assert "No solution found with 2 colors." in out


def test_solve_with_z3(capsys):
    pytest.importorskip("z3")
    assert main(["solve", "australia", "-k", "3", "--solver", "z3"]) == EXIT_SOLVED
    assert "Steps: 0" in capsys.readouterr().out


def test_bad_inputs(tmp_path, capsys):
    assert main(["solve", "atlantis"]) == EXIT_BAD_INPUT
    assert main(["solve", "triangle", "-k", "0"]) == EXIT_BAD_INPUT
    bad = tmp_path / "dangling.json"
    bad.write_text(json.dumps({"nodes": [{"id": "a"}], "edges": [["a", "b"]]}), encoding="utf-8")
    assert main(["solve", str(bad)]) == EXIT_BAD_INPUT
    err = capsys.readouterr().err
    assert "unknown node" in err


def test_step_limit(capsys):
    assert main(["solve", "wheel5", "-k", "3", "--max-steps", "10", "--quiet-steps"]) == EXIT_STEP_LIMIT
    assert "within 10 steps" in capsys.readouterr().err


def test_html_outputs(tmp_path):
    pytest.importorskip("plotly")
    replay = tmp_path / "replay.html"
    assert main(["solve", "square", "-k", "2", "--quiet-steps", "--out", str(replay)]) == EXIT_SOLVED
    assert replay.exists()
    graph_html = tmp_path / "map.html"
    assert main(["visualize", "square", "--out", str(graph_html)]) == 0
    assert "plotly" in graph_html.read_text(encoding="utf-8")


def test_bad_map_files(tmp_path, capsys):
    assert main(["solve", str(tmp_path)]) == EXIT_BAD_INPUT
    nullmeta = tmp_path / "nullmeta.json"
    nullmeta.write_text(json.dumps({"nodes": [{"id": "a"}], "meta": None}), encoding="utf-8")
    assert main(["solve", str(nullmeta)]) == EXIT_BAD_INPUT
    assert "'meta' must be an object" in capsys.readouterr().err
