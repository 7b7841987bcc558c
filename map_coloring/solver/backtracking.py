from __future__ import annotations

import logging
import threading
from typing import Iterator, List, Optional, Tuple, Union

from ..errors import CallerMisuseError, InvalidColorCountError
from ..graph import Graph, NodeId
from .types import ColorMapping, OutcomeStatus, SearchStep, SolveOutcome, StepKind

LOG = logging.getLogger(__name__)

Advance = Union[SearchStep, SolveOutcome]


def check_color_count(k: int) -> int:
    if isinstance(k, bool) or not isinstance(k, int):
        raise InvalidColorCountError(f"Color count must be an integer, got {k!r}")
    if k < 1:
        raise InvalidColorCountError(f"Color count must be at least 1, got {k}")
    return k


class SolveSequence:
    """Chronological backtracking k-coloring that stops after every event.

    Nodes are colored in graph order, colors tried from 0 upwards. Each call to
    `advance()` runs the search just far enough to produce the next
    `SearchStep`, or the final `SolveOutcome` once the search is over.

    The suspended recursion lives in `_frames`: frame `i` belongs to the i-th
    node in order and holds the next color that node should try. Frames below
    the top always belong to colored nodes.
    """

    def __init__(self, graph: Graph, k: int) -> None:
        self.graph = graph
        self.k = check_color_count(k)
        self._order: List[NodeId] = graph.node_ids()
        self._neighbors = {u: graph.neighbors(u) for u in self._order}
        self._mapping: ColorMapping = {u: None for u in self._order}
        self._frames: List[int] = [0] if self._order else []
        # Feasible (node, color) announced by the last TRY, assigned on the next advance.
        self._pending: Optional[Tuple[NodeId, int]] = None
        self._outcome: Optional[SolveOutcome] = None
        self._delivered = False
        self._steps = 0
        self._lock = threading.Lock()
        if not self._order:
            self._outcome = self._finish(solved=True)

    @property
    def finished(self) -> bool:
        return self._delivered

    @property
    def outcome(self) -> Optional[SolveOutcome]:
        """The final outcome, once `advance()` has returned it."""
        return self._outcome if self._delivered else None

    @property
    def steps_emitted(self) -> int:
        return self._steps

    def advance(self) -> Advance:
        if not self._lock.acquire(blocking=False):
            raise CallerMisuseError("Solve sequence is already being advanced by another caller")
        try:
            if self._delivered:
                raise CallerMisuseError("Solve sequence already finished; create a new one to solve again")
            if self._outcome is None:
                step = self._next_step()
                if step is not None:
                    self._steps += 1
                    return step
            self._delivered = True
            assert self._outcome is not None
            return self._outcome
        finally:
            self._lock.release()

    def __iter__(self) -> Iterator[SearchStep]:
        """Yield steps until the search ends; the outcome is then in `.outcome`."""
        while not self._delivered:
            item = self.advance()
            if isinstance(item, SearchStep):
                yield item

    def _feasible(self, node: NodeId, color: int) -> bool:
        mapping = self._mapping
        return all(mapping[nb] != color for nb in self._neighbors[node])

    def _next_step(self) -> Optional[SearchStep]:
        mapping = self._mapping
        frames = self._frames

        if self._pending is not None:
            node, color = self._pending
            self._pending = None
            mapping[node] = color
            frames.append(0)
            return SearchStep.snapshot(StepKind.SUCCESS, node, mapping, color)

        depth = len(frames) - 1
        if depth == len(self._order):
            self._outcome = self._finish(solved=True)
            return None

        node = self._order[depth]
        color = frames[-1]
        if color < self.k:
            frames[-1] = color + 1
            # A rejected color produces this TRY and nothing else.
            if self._feasible(node, color):
                self._pending = (node, color)
            return SearchStep.snapshot(StepKind.TRY, node, mapping, color)

        # Every color failed for `node`: undo the node before it, or give up.
        frames.pop()
        if not frames:
            self._outcome = self._finish(solved=False)
            return None
        parent = self._order[depth - 1]
        withdrawn = mapping[parent]
        assert withdrawn is not None
        mapping[parent] = None
        LOG.debug("Backtracking from %r (withdrawing color %d)", parent, withdrawn)
        return SearchStep.snapshot(StepKind.BACKTRACK, parent, mapping, withdrawn)

    def _finish(self, *, solved: bool) -> SolveOutcome:
        if solved:
            coloring = {u: c for u, c in self._mapping.items() if c is not None}
            LOG.info("Colored %d node(s) with k=%d after %d step(s)", len(coloring), self.k, self._steps)
            return SolveOutcome(OutcomeStatus.SOLVED, self.k, coloring, steps=self._steps)
        LOG.info("No %d-coloring exists (%d step(s) explored)", self.k, self._steps)
        return SolveOutcome(OutcomeStatus.UNSATISFIABLE, self.k, None, steps=self._steps)


def create_solve_sequence(graph: Graph, k: int) -> SolveSequence:
    return SolveSequence(graph, k)


def advance(sequence: SolveSequence) -> Advance:
    return sequence.advance()


def solve_with_backtracking(graph: Graph, k: int) -> SolveOutcome:
    """Run a solve sequence to completion, discarding the intermediate steps."""
    seq = SolveSequence(graph, k)
    while True:
        item = seq.advance()
        if isinstance(item, SolveOutcome):
            return item
