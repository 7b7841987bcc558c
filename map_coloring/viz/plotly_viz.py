from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from ..graph import Graph, NodeId
from ..solver import SearchStep, SolveOutcome, StepKind

DEFAULT_PALETTE = [
    "#1f77b4",  # blue
    "#ff7f0e",  # orange
    "#2ca02c",  # green
    "#d62728",  # red
    "#9467bd",  # purple
    "#8c564b",  # brown
    "#e377c2",  # pink
    "#7f7f7f",  # gray
    "#bcbd22",  # olive
    "#17becf",  # cyan
]

UNCOLORED = "#cccccc"

_HIGHLIGHT = {
    StepKind.TRY: "#ffd700",
    StepKind.SUCCESS: "#00e676",
    StepKind.BACKTRACK: "#ff1744",
}


def palette_for(k: int, palette: Optional[Sequence[str]] = None) -> List[str]:
    """Return exactly k colors, cycling the base palette when it runs short."""
    base = list(palette or DEFAULT_PALETTE)
    return [base[i % len(base)] for i in range(k)]


def _edge_trace(graph: Graph):
    import plotly.graph_objects as go

    ex, ey = [], []
    for u, v in graph.unique_edges():
        pu = graph.require_node(u).pos
        pv = graph.require_node(v).pos
        ex += [pu[0], pv[0], None]
        ey += [pu[1], pv[1], None]
    return go.Scatter(
        x=ex,
        y=ey,
        mode="lines",
        line=dict(width=2, color="rgba(160,160,160,0.6)"),
        hoverinfo="none",
        name="borders",
    )


def _node_trace(
    graph: Graph,
    mapping: Optional[Mapping[NodeId, Optional[int]]],
    colors: Sequence[str],
    highlighted: Optional[NodeId] = None,
    highlight_kind: Optional[StepKind] = None,
):
    import plotly.graph_objects as go

    nx, ny, ntext, ncolor, nsize, nline = [], [], [], [], [], []
    for node in graph.nodes:
        nx.append(node.pos[0])
        ny.append(node.pos[1])
        c = None if mapping is None else mapping.get(node.id)
        ntext.append(f"{node.label}<br>id={node.id}<br>color={'-' if c is None else c}")
        ncolor.append(UNCOLORED if c is None else colors[c % len(colors)])
        is_hl = node.id == highlighted
        nsize.append(30 if is_hl else 22)
        nline.append(_HIGHLIGHT.get(highlight_kind, "#ffffff") if is_hl else "#333333")

    return go.Scatter(
        x=nx,
        y=ny,
        mode="markers+text",
        marker=dict(size=nsize, color=ncolor, line=dict(width=3, color=nline)),
        text=[n.id for n in graph.nodes],
        textposition="middle center",
        hovertext=ntext,
        hoverinfo="text",
        name="regions",
    )


def _layout(fig, title: str) -> None:
    fig.update_layout(
        title=title,
        showlegend=False,
        # Map coordinates grow downwards like screen coordinates.
        xaxis=dict(visible=False),
        yaxis=dict(visible=False, scaleanchor="x", scaleratio=1, autorange="reversed"),
        margin=dict(l=0, r=0, t=40, b=0),
    )


def build_plotly_figure(
    graph: Graph,
    *,
    mapping: Optional[Mapping[NodeId, Optional[int]]] = None,
    highlighted: Optional[NodeId] = None,
    palette: Optional[Sequence[str]] = None,
    num_colors: Optional[int] = None,
    title: str = "Map Coloring",
):
    import plotly.graph_objects as go

    colors = palette_for(num_colors or len(palette or DEFAULT_PALETTE), palette)
    fig = go.Figure(data=[_edge_trace(graph), _node_trace(graph, mapping, colors, highlighted)])
    _layout(fig, title)
    return fig


def build_step_animation(
    graph: Graph,
    steps: Sequence[SearchStep],
    *,
    outcome: Optional[SolveOutcome] = None,
    palette: Optional[Sequence[str]] = None,
    num_colors: Optional[int] = None,
    title: str = "Map Coloring",
    frame_ms: int = 300,
):
    """One animation frame per search step, plus a closing frame for the outcome."""
    import plotly.graph_objects as go

    if num_colors is None and outcome is not None:
        num_colors = outcome.num_colors
    colors = palette_for(num_colors or len(palette or DEFAULT_PALETTE), palette)
    edges = _edge_trace(graph)

    frames = []
    for i, step in enumerate(steps):
        frames.append(
            go.Frame(
                name=str(i),
                data=[edges, _node_trace(graph, step.mapping, colors, step.node_id, step.kind)],
                layout=go.Layout(title=f"{title}: {step.kind.value} {step.node_id} (color {step.color})"),
            )
        )
    if outcome is not None:
        label = "solved" if outcome.solved else "no solution"
        frames.append(
            go.Frame(
                name=str(len(frames)),
                data=[edges, _node_trace(graph, outcome.coloring or {}, colors)],
                layout=go.Layout(title=f"{title}: {label} with {outcome.num_colors} colors"),
            )
        )

    empty: Dict[NodeId, Optional[int]] = {n: None for n in graph.node_ids()}
    fig = go.Figure(data=[edges, _node_trace(graph, empty, colors)], frames=frames)
    _layout(fig, title)
    fig.update_layout(
        updatemenus=[
            dict(
                type="buttons",
                showactive=False,
                buttons=[
                    dict(
                        label="Play",
                        method="animate",
                        args=[None, dict(frame=dict(duration=frame_ms, redraw=True), fromcurrent=True)],
                    ),
                    dict(
                        label="Pause",
                        method="animate",
                        args=[[None], dict(frame=dict(duration=0, redraw=False), mode="immediate")],
                    ),
                ],
            )
        ],
        sliders=[
            dict(
                steps=[
                    dict(method="animate", label=f.name, args=[[f.name], dict(mode="immediate", frame=dict(duration=0))])
                    for f in frames
                ],
            )
        ],
    )
    return fig


def write_plotly_html(fig, out_path: str | Path) -> Path:
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.write_html(str(out_path), include_plotlyjs="cdn", full_html=True)
    return out_path
