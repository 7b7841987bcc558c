from __future__ import annotations

import pytest

from map_coloring.errors import MalformedGraphError
from map_coloring.graph import Edge, Graph, Node, build_graph
from map_coloring.maps import BUILTIN_MAPS


@pytest.mark.parametrize("key", list(BUILTIN_MAPS))
def test_adjacency_is_symmetric(key):
    mdef = BUILTIN_MAPS[key]
    g = build_graph(mdef)
    for e in mdef.edges:
        assert e.target in g.neighbors(e.source)
        assert e.source in g.neighbors(e.target)
    for u, nbs in g.adjacency.items():
        for v in nbs:
            assert u in g.neighbors(v)


def test_self_edge_does_not_make_node_adjacent_to_itself(map_def):
    g = build_graph(map_def("AB", [("A", "A"), ("A", "B")]))
    assert g.neighbors("A") == ("B",)
    assert g.degree("A") == 1


def test_duplicate_and_reversed_edges_collapse(map_def):
    g = build_graph(map_def("ABC", [("A", "B"), ("B", "A"), ("A", "B"), ("A", "C")]))
    assert g.neighbors("A") == ("B", "C")
    assert g.neighbors("B") == ("A",)
    assert list(g.unique_edges()) == [("A", "B"), ("A", "C")]
    # The raw edge list is carried through untouched for the renderer.
    assert len(g.edges) == 4


def test_isolated_nodes_get_empty_neighbor_lists(map_def):
    g = build_graph(map_def("ABZ", [("A", "B")]))
    assert g.adjacency == {"A": ["B"], "B": ["A"], "Z": []}


def test_node_order_is_preserved(map_def):
    g = build_graph(map_def(["q", "b", "z", "a"], []))
    assert g.node_ids() == ["q", "b", "z", "a"]


def test_dangling_edge_is_rejected(map_def):
    with pytest.raises(MalformedGraphError, match="unknown node"):
        build_graph(map_def("AB", [("A", "B"), ("B", "X")]))


def test_duplicate_node_ids_are_rejected():
    from map_coloring.maps import MapDefinition

    mdef = MapDefinition(nodes=[Node("A"), Node("A", label="again")], edges=[])
    with pytest.raises(MalformedGraphError, match="Duplicate"):
        build_graph(mdef)


def test_malformed_graph_error_is_a_value_error():
    assert issubclass(MalformedGraphError, ValueError)


def test_rebuild_is_structurally_equal():
    mdef = BUILTIN_MAPS["australia"]
    assert build_graph(mdef) == build_graph(mdef)
    assert build_graph(mdef) is not build_graph(mdef)


def test_built_graph_is_frozen(map_def):
    g = build_graph(map_def("AB", [("A", "B")]))
    assert g.frozen
    with pytest.raises(RuntimeError):
        g.add_node(Node("C"))
    with pytest.raises(RuntimeError):
        g.add_edge(Edge("A", "B"))


def test_unfrozen_graph_can_be_grown_by_hand():
    g = Graph()
    g.add_node(Node("x", label="Ex"))
    g.add_node(Node("y"))
    g.add_edge(Edge("x", "y", path="M0 0"))
    assert g.require_node("x").label == "Ex"
    assert g.require_node("y").label == "y"
    assert "x" in g and "nope" not in g
    assert len(g) == 2
    with pytest.raises(KeyError):
        g.require_node("nope")


def test_max_degree(map_def):
    assert build_graph(map_def("", [])).max_degree() == 0
    assert build_graph(BUILTIN_MAPS["wheel5"]).max_degree() == 5
    assert build_graph(BUILTIN_MAPS["australia"]).degree("SA") == 5


def test_to_networkx_matches_adjacency():
    nx = pytest.importorskip("networkx")
    g = build_graph(BUILTIN_MAPS["petersen"])
    ng = g.to_networkx()
    assert ng.number_of_nodes() == 10
    assert ng.number_of_edges() == 15
    assert all(d == 3 for _, d in ng.degree())
    assert nx.is_connected(ng)
