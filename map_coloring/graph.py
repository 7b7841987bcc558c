from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Tuple

from .errors import MalformedGraphError

if TYPE_CHECKING:
    from .maps import MapDefinition

NodeId = str

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class Node:
    id: NodeId
    label: str = ""
    pos: Tuple[float, float] = (0.0, 0.0)

    def __post_init__(self) -> None:
        if not self.label:
            object.__setattr__(self, "label", self.id)


@dataclass(frozen=True)
class Edge:
    source: NodeId
    target: NodeId
    path: Optional[str] = None  # rendering hint only


class Graph:
    """An undirected graph with an ordered node list and an adjacency index.

    Node order matters: it is the order the solver visits nodes in. Neighbor
    lists keep first-seen order, so two graphs built from the same definition
    compare equal and drive identical searches.
    """

    def __init__(self) -> None:
        self.nodes: List[Node] = []
        self.edges: List[Edge] = []
        self._by_id: Dict[NodeId, Node] = {}
        # dict-as-ordered-set
        self._adj: Dict[NodeId, Dict[NodeId, None]] = {}
        self._frozen = False

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError("Graph is frozen")

    def add_node(self, node: Node) -> None:
        self._check_mutable()
        if node.id in self._by_id:
            raise MalformedGraphError(f"Duplicate node id: {node.id!r}")
        self.nodes.append(node)
        self._by_id[node.id] = node
        self._adj[node.id] = {}

    def add_edge(self, edge: Edge) -> None:
        self._check_mutable()
        u, v = edge.source, edge.target
        missing = [n for n in (u, v) if n not in self._by_id]
        if missing:
            raise MalformedGraphError(
                f"Edge {u!r} -> {v!r} references unknown node(s): {', '.join(repr(m) for m in missing)}"
            )
        self.edges.append(edge)
        if u == v:
            LOG.debug("Ignoring self-edge on %r", u)
            return
        if v in self._adj[u]:
            LOG.debug("Collapsing duplicate edge %r -- %r", u, v)
            return
        self._adj[u][v] = None
        self._adj[v][u] = None

    def freeze(self) -> "Graph":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def neighbors(self, u: NodeId) -> Tuple[NodeId, ...]:
        return tuple(self._adj[u])

    def degree(self, u: NodeId) -> int:
        return len(self._adj[u])

    def max_degree(self) -> int:
        return max((len(nbs) for nbs in self._adj.values()), default=0)

    def node_ids(self) -> List[NodeId]:
        return [n.id for n in self.nodes]

    @property
    def adjacency(self) -> Dict[NodeId, List[NodeId]]:
        return {u: list(nbs) for u, nbs in self._adj.items()}

    def unique_edges(self) -> Iterator[Tuple[NodeId, NodeId]]:
        """Yield each adjacent pair once, in node order."""
        seen = set()
        for node in self.nodes:
            for v in self._adj[node.id]:
                if v not in seen:
                    yield (node.id, v)
            seen.add(node.id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._by_id

    def __len__(self) -> int:
        return len(self.nodes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Graph):
            return NotImplemented
        return self.nodes == other.nodes and self.edges == other.edges and self.adjacency == other.adjacency

    def __repr__(self) -> str:
        return f"Graph(nodes={len(self.nodes)}, edges={sum(1 for _ in self.unique_edges())})"

    def require_node(self, node_id: NodeId) -> Node:
        try:
            return self._by_id[node_id]
        except KeyError as e:
            raise KeyError(f"Unknown node: {node_id!r}") from e

    def to_networkx(self):
        """Convert to a networkx.Graph for ad-hoc experimentation."""
        import networkx as nx

        g = nx.Graph()
        for node in self.nodes:
            g.add_node(node.id, label=node.label, pos=node.pos)
        g.add_edges_from(self.unique_edges())
        return g


def build_graph(map_def: MapDefinition) -> Graph:
    """Build a frozen, adjacency-indexed graph from a raw map definition.

    Raises MalformedGraphError on duplicate node ids or edges that point at
    nodes the definition does not declare.
    """

    g = Graph()
    for node in map_def.nodes:
        g.add_node(node)
    for edge in map_def.edges:
        g.add_edge(edge)
    LOG.debug("Built graph %r for map %r", g, map_def.name or "<unnamed>")
    return g.freeze()
