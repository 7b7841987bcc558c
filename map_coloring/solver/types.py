from __future__ import annotations

import enum
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Literal, Mapping, Optional

from ..graph import NodeId

SolverName = Literal["backtracking", "z3"]

ColorMapping = Dict[NodeId, Optional[int]]  # None => not yet colored


class StepKind(str, enum.Enum):
    TRY = "TRY"
    SUCCESS = "SUCCESS"
    BACKTRACK = "BACKTRACK"


@dataclass(frozen=True)
class SearchStep:
    """One observable event of the backtracking search.

    `mapping` is a read-only snapshot taken when the step was emitted; the
    solver keeps mutating its own buffer afterwards. `color` is the candidate
    color for TRY, the color just assigned for SUCCESS and the color just
    withdrawn for BACKTRACK.
    """

    kind: StepKind
    node_id: NodeId
    mapping: Mapping[NodeId, Optional[int]]
    color: int

    @staticmethod
    def snapshot(kind: StepKind, node_id: NodeId, mapping: ColorMapping, color: int) -> "SearchStep":
        return SearchStep(kind=kind, node_id=node_id, mapping=MappingProxyType(dict(mapping)), color=color)

    def to_dict(self) -> Dict[str, object]:
        return {"type": self.kind.value, "nodeId": self.node_id, "color": self.color, "mapping": dict(self.mapping)}


class OutcomeStatus(str, enum.Enum):
    SOLVED = "solved"
    UNSATISFIABLE = "unsatisfiable"


@dataclass(frozen=True)
class SolveOutcome:
    status: OutcomeStatus
    num_colors: int
    coloring: Optional[Dict[NodeId, int]] = None  # None => unsatisfiable
    steps: int = 0
    meta: Dict[str, object] = field(default_factory=dict, compare=False)

    @property
    def solved(self) -> bool:
        return self.status is OutcomeStatus.SOLVED

    def colors_used(self) -> int:
        if not self.coloring:
            return 0
        return len(set(self.coloring.values()))

    def to_dict(self) -> Dict[str, object]:
        return {
            "status": self.status.value,
            "num_colors": self.num_colors,
            "coloring": None if self.coloring is None else dict(self.coloring),
            "steps": self.steps,
        }
