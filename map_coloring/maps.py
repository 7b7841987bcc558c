from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from .graph import Edge, Node

LOG = logging.getLogger(__name__)


class MapFormatError(ValueError):
    pass


@dataclass
class MapDefinition:
    """A map to color: nodes (regions) and the borders between them.

    - `nodes` keep their declared order; the solver visits them in that order.
    - `edges` may repeat pairs or contain self-edges; the graph builder
      normalizes them.
    - `meta` is free-form and carried through untouched.
    """

    nodes: List[Node]
    edges: List[Edge]
    name: str = ""
    meta: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_file(path: str | Path) -> "MapDefinition":
        path = Path(path)
        mdef = MapDefinition.from_json(path.read_text(encoding="utf-8"))
        if not mdef.name:
            mdef.name = path.stem
        return mdef

    @staticmethod
    def from_json(text: str) -> "MapDefinition":
        try:
            obj = json.loads(text)
        except json.JSONDecodeError as e:
            raise MapFormatError(f"Invalid JSON: {e}") from e
        return MapDefinition.from_dict(obj)

    @staticmethod
    def from_dict(obj: Mapping[str, Any]) -> "MapDefinition":
        if not isinstance(obj, Mapping):
            raise MapFormatError("Map definition must be a JSON object")
        raw_nodes = obj.get("nodes")
        raw_edges = obj.get("edges", [])
        if not isinstance(raw_nodes, list):
            raise MapFormatError("Map definition needs a 'nodes' list")
        if not isinstance(raw_edges, list):
            raise MapFormatError("'edges' must be a list")
        meta = obj.get("meta", {})
        if not isinstance(meta, Mapping):
            raise MapFormatError("'meta' must be an object")

        nodes: List[Node] = []
        for i, nd in enumerate(raw_nodes):
            if not isinstance(nd, Mapping) or "id" not in nd:
                raise MapFormatError(f"Node #{i} must be an object with an 'id'")
            try:
                pos = (float(nd.get("x", 0.0)), float(nd.get("y", 0.0)))
            except (TypeError, ValueError) as e:
                raise MapFormatError(f"Node {nd['id']!r} has a non-numeric position") from e
            nodes.append(Node(id=str(nd["id"]), label=str(nd.get("label") or ""), pos=pos))

        edges: List[Edge] = []
        for i, ed in enumerate(raw_edges):
            # Accept both {"source","target"} objects and [u, v] pairs.
            if isinstance(ed, Mapping):
                if "source" not in ed or "target" not in ed:
                    raise MapFormatError(f"Edge #{i} needs 'source' and 'target'")
                path = ed.get("path")
                edges.append(Edge(str(ed["source"]), str(ed["target"]), None if path is None else str(path)))
            elif isinstance(ed, (list, tuple)) and len(ed) == 2:
                edges.append(Edge(str(ed[0]), str(ed[1])))
            else:
                raise MapFormatError(f"Edge #{i} must be an object or a [source, target] pair")

        return MapDefinition(
            nodes=nodes,
            edges=edges,
            name=str(obj.get("name", "")),
            meta=dict(meta),
        )

    def to_dict(self) -> Dict[str, Any]:
        edges = []
        for e in self.edges:
            ed: Dict[str, Any] = {"source": e.source, "target": e.target}
            if e.path is not None:
                ed["path"] = e.path
            edges.append(ed)
        return {
            "name": self.name,
            "nodes": [{"id": n.id, "label": n.label, "x": n.pos[0], "y": n.pos[1]} for n in self.nodes],
            "edges": edges,
            "meta": dict(self.meta),
        }


def _map(name: str, nodes: Sequence[Tuple[str, str, float, float]], edges: Sequence[Tuple[str, str]]) -> MapDefinition:
    return MapDefinition(
        nodes=[Node(id=i, label=label, pos=(x, y)) for i, label, x, y in nodes],
        edges=[Edge(u, v) for u, v in edges],
        name=name,
    )


def _ring(prefix: str, count: int, radius: float, cx: float = 300.0, cy: float = 300.0) -> List[Tuple[str, str, float, float]]:
    out = []
    for i in range(count):
        angle = 2 * math.pi * i / count - math.pi / 2
        out.append((f"{prefix}{i}", f"{prefix}{i}", round(cx + radius * math.cos(angle), 2), round(cy + radius * math.sin(angle), 2)))
    return out


def _petersen() -> MapDefinition:
    nodes = _ring("O", 5, 250.0) + _ring("I", 5, 110.0)
    edges = []
    for i in range(5):
        edges.append((f"O{i}", f"O{(i + 1) % 5}"))
        edges.append((f"O{i}", f"I{i}"))
        edges.append((f"I{i}", f"I{(i + 2) % 5}"))
    return _map("Petersen graph", nodes, edges)


BUILTIN_MAPS: Dict[str, MapDefinition] = {
    "australia": _map(
        "Australia",
        [
            ("WA", "Western Australia", 120.0, 260.0),
            ("NT", "Northern Territory", 270.0, 130.0),
            ("SA", "South Australia", 290.0, 300.0),
            ("Q", "Queensland", 430.0, 160.0),
            ("NSW", "New South Wales", 460.0, 330.0),
            ("V", "Victoria", 410.0, 430.0),
            ("T", "Tasmania", 430.0, 540.0),
        ],
        [
            ("WA", "NT"),
            ("WA", "SA"),
            ("NT", "SA"),
            ("NT", "Q"),
            ("SA", "Q"),
            ("SA", "NSW"),
            ("SA", "V"),
            ("Q", "NSW"),
            ("NSW", "V"),
        ],
    ),
    "triangle": _map(
        "Triangle",
        [("A", "A", 300.0, 100.0), ("B", "B", 150.0, 400.0), ("C", "C", 450.0, 400.0)],
        [("A", "B"), ("B", "C"), ("A", "C")],
    ),
    "square": _map(
        "Square",
        [("A", "A", 150.0, 150.0), ("B", "B", 450.0, 150.0), ("C", "C", 450.0, 450.0), ("D", "D", 150.0, 450.0)],
        [("A", "B"), ("B", "C"), ("C", "D"), ("D", "A")],
    ),
    "wheel5": _map(
        "Wheel (5 spokes)",
        [("H", "Hub", 300.0, 300.0)] + _ring("R", 5, 220.0),
        [("H", f"R{i}") for i in range(5)] + [(f"R{i}", f"R{(i + 1) % 5}") for i in range(5)],
    ),
    "petersen": _petersen(),
}


def list_builtin_maps() -> List[str]:
    return list(BUILTIN_MAPS)


def get_builtin_map(key: str) -> MapDefinition:
    try:
        return BUILTIN_MAPS[key]
    except KeyError as e:
        raise KeyError(f"Unknown map {key!r}. Choose one of: {', '.join(BUILTIN_MAPS)}") from e


def load_map(ref: str | Path) -> MapDefinition:
    """Resolve a builtin map key or a path to a JSON map definition."""
    if isinstance(ref, str) and ref in BUILTIN_MAPS:
        return BUILTIN_MAPS[ref]
    path = Path(ref)
    if path.exists():
        return MapDefinition.from_file(path)
    raise KeyError(f"{str(ref)!r} is neither a builtin map ({', '.join(BUILTIN_MAPS)}) nor an existing file")


def load_maps_dir(directory: str | Path) -> Dict[str, MapDefinition]:
    maps: Dict[str, MapDefinition] = {}
    base = Path(directory)
    if not base.is_dir():
        return maps
    for path in sorted(base.glob("*.json")):
        try:
            maps[path.stem] = MapDefinition.from_file(path)
        except (OSError, ValueError) as e:
            LOG.warning("Skipping map file %s: %s", path, e)
    return maps
