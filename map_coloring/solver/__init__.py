from typing import Mapping, Optional

from ..graph import Graph, NodeId
from .backtracking import SolveSequence, advance, check_color_count, create_solve_sequence, solve_with_backtracking
from .types import ColorMapping, OutcomeStatus, SearchStep, SolveOutcome, SolverName, StepKind
from .z3_solver import solve_with_z3

SOLVER_CHOICES: tuple[SolverName, ...] = ("backtracking", "z3")


def solve_graph(graph: Graph, k: int, *, solver: SolverName = "backtracking", timeout_ms: int | None = 30_000) -> SolveOutcome:
    if solver == "backtracking":
        return solve_with_backtracking(graph, k)
    if solver == "z3":
        return solve_with_z3(graph, k, timeout_ms=timeout_ms)
    raise ValueError(f"Unknown solver {solver!r}. Choose one of: {', '.join(SOLVER_CHOICES)}")


def verify_coloring(graph: Graph, coloring: Optional[Mapping[NodeId, Optional[int]]], k: int) -> bool:
    """True if every node has a color in [0, k) and no edge joins equal colors."""
    if coloring is None:
        return False
    for node_id in graph.node_ids():
        c = coloring.get(node_id)
        if c is None or not 0 <= c < k:
            return False
    return all(coloring[u] != coloring[v] for u, v in graph.unique_edges())


__all__ = [
    "ColorMapping",
    "OutcomeStatus",
    "SearchStep",
    "SolveOutcome",
    "SolveSequence",
    "SolverName",
    "StepKind",
    "SOLVER_CHOICES",
    "advance",
    "check_color_count",
    "create_solve_sequence",
    "solve_graph",
    "solve_with_backtracking",
    "solve_with_z3",
    "verify_coloring",
]
