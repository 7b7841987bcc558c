from __future__ import annotations

from typing import Sequence, Tuple

import pytest

from map_coloring.graph import Edge, Graph, Node, build_graph
from map_coloring.maps import MapDefinition


def make_map(node_ids: Sequence[str], edges: Sequence[Tuple[str, str]], name: str = "") -> MapDefinition:
    return MapDefinition(
        nodes=[Node(id=n, pos=(float(i), 0.0)) for i, n in enumerate(node_ids)],
        edges=[Edge(u, v) for u, v in edges],
        name=name,
    )


@pytest.fixture
def triangle() -> Graph:
    return build_graph(make_map("ABC", [("A", "B"), ("B", "C"), ("A", "C")], name="triangle"))


@pytest.fixture
def path_graph():
    def _build(n: int) -> Graph:
        ids = [f"n{i}" for i in range(n)]
        return build_graph(make_map(ids, list(zip(ids, ids[1:]))))

    return _build


@pytest.fixture
def map_def():
    return make_map
