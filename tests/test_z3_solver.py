from __future__ import annotations

import pytest

from map_coloring.graph import build_graph
from map_coloring.maps import BUILTIN_MAPS
from map_coloring.solver import solve_graph, solve_with_backtracking, verify_coloring

pytest.importorskip("z3")


def test_triangle(triangle):
    assert not solve_graph(triangle, 2, solver="z3").solved
    outcome = solve_graph(triangle, 3, solver="z3")
    assert outcome.solved
    assert outcome.meta["solver"] == "z3"
    assert verify_coloring(triangle, outcome.coloring, 3)


@pytest.mark.parametrize("key", list(BUILTIN_MAPS))
@pytest.mark.parametrize("k", [1, 2, 3, 4])
def test_agrees_with_backtracking(key, k):
    g = build_graph(BUILTIN_MAPS[key])
    expected = solve_with_backtracking(g, k).solved
    outcome = solve_graph(g, k, solver="z3")
    assert outcome.solved is expected
    if expected:
        assert verify_coloring(g, outcome.coloring, k)


def test_empty_graph(map_def):
    outcome = solve_graph(build_graph(map_def("", [])), 1, solver="z3")
    assert outcome.solved
    assert outcome.coloring == {}


def test_unknown_solver_name(triangle):
    with pytest.raises(ValueError, match="Unknown solver"):
        solve_graph(triangle, 3, solver="dsatur")  # type: ignore[arg-type]
