from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from .driver import StepDriver, StepLimitExceeded, describe_outcome, describe_step
from .graph import build_graph
from .maps import BUILTIN_MAPS, MapDefinition, load_map
from .solver import SOLVER_CHOICES, SolveOutcome, create_solve_sequence, solve_graph
from .viz import build_plotly_figure, build_step_animation, write_plotly_html

EXIT_SOLVED = 0
EXIT_UNSATISFIABLE = 1
EXIT_BAD_INPUT = 2
EXIT_STEP_LIMIT = 3


def _load(ref: str) -> MapDefinition:
    try:
        return load_map(ref)
    except KeyError as e:
        raise ValueError(str(e.args[0])) from e


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="map_coloring", description="Step-by-step backtracking map coloring")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("-d", "--debug", action="store_true", help="Debug output (one line per search step)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("list", help="List the builtin maps")

    p_viz = sub.add_parser("visualize", help="Render a map to an HTML file")
    p_viz.add_argument("map", type=str, help="Builtin map name or path to a .json map definition")
    p_viz.add_argument("--out", type=str, default="out/map.html", help="Output HTML path")

    p_solve = sub.add_parser("solve", help="Color a map and print every search step")
    p_solve.add_argument("map", type=str, help="Builtin map name or path to a .json map definition")
    p_solve.add_argument("-k", "--colors", type=int, default=4, help="Number of colors (default: 4)")
    p_solve.add_argument("--solver", choices=SOLVER_CHOICES, default="backtracking", help="Solver backend")
    p_solve.add_argument("--delay", type=float, default=0.0, help="Seconds to wait between steps")
    p_solve.add_argument("--max-steps", type=int, default=None, help="Give up after this many steps")
    p_solve.add_argument("--quiet-steps", action="store_true", help="Only print the final outcome")
    p_solve.add_argument("--timeout-ms", type=int, default=30_000, help="Solver timeout in milliseconds (z3 only)")
    p_solve.add_argument("--out", type=str, default=None, help="Write an animated HTML replay to this path")

    args = parser.parse_args(list(argv) if argv is not None else None)

    level = logging.DEBUG if args.debug else logging.INFO if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    if args.cmd == "list":
        for key, mdef in BUILTIN_MAPS.items():
            g = build_graph(mdef)
            print(f"{key:<12} {mdef.name:<20} nodes={len(g)} edges={sum(1 for _ in g.unique_edges())} max_degree={g.max_degree()}")
        return 0

    try:
        mdef = _load(args.map)
        graph = build_graph(mdef)
    except (OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT

    if args.cmd == "visualize":
        fig = build_plotly_figure(graph, title=f"Map: {mdef.name or args.map}")
        out = write_plotly_html(fig, args.out)
        print(f"Wrote map visualization: {out}")
        return 0

    if args.cmd == "solve":
        labels = {n.id: n.label for n in graph.nodes}
        try:
            if args.solver == "backtracking":
                seq = create_solve_sequence(graph, args.colors)

                def on_step(step):
                    if not args.quiet_steps:
                        print(f"[{step.kind.value:<9}] {describe_step(step, labels)}")

                driver = StepDriver(seq, delay=args.delay, on_step=on_step, max_steps=args.max_steps)
                outcome: SolveOutcome = driver.run()
                steps = driver.steps
            else:
                outcome = solve_graph(graph, args.colors, solver=args.solver, timeout_ms=args.timeout_ms)
                steps = []
        except StepLimitExceeded as e:
            print(f"error: {e}", file=sys.stderr)
            return EXIT_STEP_LIMIT
        except ValueError as e:
            print(f"error: {e}", file=sys.stderr)
            return EXIT_BAD_INPUT

        print(describe_outcome(outcome))
        if outcome.solved:
            for node in graph.nodes:
                print(f"  {node.label}: {outcome.coloring[node.id]}")  # type: ignore[index]
        print(f"Steps: {len(steps)}, nodes={len(graph)}, edges={sum(1 for _ in graph.unique_edges())}")

        if args.out:
            fig = build_step_animation(graph, steps, outcome=outcome, title=mdef.name or args.map)
            out = write_plotly_html(fig, args.out)
            print(f"Wrote step replay: {out}")
        return EXIT_SOLVED if outcome.solved else EXIT_UNSATISFIABLE

    raise AssertionError("unreachable")
