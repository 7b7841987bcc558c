from __future__ import annotations

import pytest

from map_coloring.solver import create_solve_sequence
from map_coloring.viz import DEFAULT_PALETTE, build_plotly_figure, build_step_animation, palette_for

go = pytest.importorskip("plotly.graph_objects")


def test_palette_for_cycles():
    assert palette_for(3) == DEFAULT_PALETTE[:3]
    assert len(palette_for(13)) == 13
    assert palette_for(12)[10] == DEFAULT_PALETTE[0]
    assert palette_for(2, ["#000", "#fff", "#f00"]) == ["#000", "#fff"]


def test_static_figure_colors_nodes(triangle):
    fig = build_plotly_figure(triangle, mapping={"A": 0, "B": None, "C": 1}, num_colors=2, highlighted="A")
    nodes = fig.data[1]
    assert list(nodes.marker.color) == [DEFAULT_PALETTE[0], "#cccccc", DEFAULT_PALETTE[1]]
    assert list(nodes.marker.size) == [30, 22, 22]
    # three edges, each drawn as a segment plus a gap
    assert len(fig.data[0].x) == 9


def test_step_animation_has_a_frame_per_step_plus_outcome(triangle):
    seq = create_solve_sequence(triangle, 3)
    steps = list(seq)
    fig = build_step_animation(triangle, steps, outcome=seq.outcome)
    assert len(fig.frames) == len(steps) + 1
    assert "SUCCESS C" in fig.frames[8].layout.title.text
    assert "solved with 3 colors" in fig.frames[-1].layout.title.text
