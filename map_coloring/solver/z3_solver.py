from __future__ import annotations

import base64
import logging
from typing import Dict

from ..graph import Graph, NodeId
from .backtracking import check_color_count
from .types import OutcomeStatus, SolveOutcome

LOG = logging.getLogger(__name__)


def solve_with_z3(graph: Graph, k: int, *, timeout_ms: int | None = 30_000) -> SolveOutcome:
    """Decide k-colorability with Z3.

    No steps are produced; this is a one-shot answer used to cross-check the
    backtracking search or when only the final coloring matters.
    """

    try:
        import z3  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("z3-solver is required. Install with: pip install z3-solver") from e

    check_color_count(k)
    nodes = graph.node_ids()

    # One Int var per node: 0..k-1 (color index)
    col = {n: z3.Int(_z3_name("col", n)) for n in nodes}

    s = z3.Solver()
    if timeout_ms is not None:
        s.set(timeout=timeout_ms)

    for n in nodes:
        s.add(z3.And(col[n] >= 0, col[n] < k))

    for u, v in graph.unique_edges():
        s.add(col[u] != col[v])

    # Symmetry breaking: the first node takes color 0.
    if nodes:
        s.add(col[nodes[0]] == 0)

    chk = s.check()
    if chk == z3.unknown:
        reason = s.reason_unknown()
        raise ValueError(f"Solver returned UNKNOWN (no answer reported). Reason: {reason}")
    if chk != z3.sat:
        LOG.info("Z3 reports no %d-coloring (status %s)", k, chk)
        return SolveOutcome(OutcomeStatus.UNSATISFIABLE, k, None, meta={"solver": "z3"})

    model = s.model()
    coloring: Dict[NodeId, int] = {}
    for n in nodes:
        coloring[n] = int(model.eval(col[n], model_completion=True).as_long())
    return SolveOutcome(OutcomeStatus.SOLVED, k, coloring, meta={"solver": "z3"})


def _z3_name(prefix: str, raw: str) -> str:
    """Encode arbitrary strings into collision-free Z3-safe names."""
    raw_bytes = raw.encode("utf-8")
    enc = base64.urlsafe_b64encode(raw_bytes).decode("ascii").rstrip("=")
    # Avoid empty names and keep them readable-ish for debugging.
    if not enc:
        enc = "empty"
    return f"{prefix}_{enc}"
