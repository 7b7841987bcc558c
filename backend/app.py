from __future__ import annotations

import logging
import os
import sys
import threading
import uuid
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, List, Optional

# Allow running `python backend/app.py` from repo root.
_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from map_coloring.driver import describe_outcome, describe_step
from map_coloring.errors import CallerMisuseError, MalformedGraphError
from map_coloring.graph import Graph, build_graph
from map_coloring.maps import BUILTIN_MAPS, MapDefinition, load_maps_dir
from map_coloring.solver import SOLVER_CHOICES, SearchStep, SolveOutcome, SolveSequence, solve_graph

LOG = logging.getLogger(__name__)

MAX_COLORS = int(os.environ.get("MAX_COLORS", "12"))
MAX_SESSIONS = int(os.environ.get("MAX_SESSIONS", "64"))
MAX_STEPS = 1_000_000


def _maps_dir() -> Path:
    return Path(os.environ.get("MAPS_DIR", str(_ROOT / "maps")))


def _all_maps() -> Dict[str, MapDefinition]:
    maps: Dict[str, MapDefinition] = dict(BUILTIN_MAPS)
    for key, mdef in load_maps_dir(_maps_dir()).items():
        if key in maps:
            LOG.warning("User map %r shadows a builtin map; ignoring it", key)
            continue
        maps[key] = mdef
    return maps


def _graph_payload(graph: Graph) -> Dict[str, Any]:
    nodes = []
    for node in graph.nodes:
        nodes.append(
            {
                "id": node.id,
                "label": node.label,
                "x": float(node.pos[0]),
                "y": float(node.pos[1]),
            }
        )
    edges = []
    for e in graph.edges:
        ed: Dict[str, Any] = {"source": e.source, "target": e.target}
        if e.path is not None:
            ed["path"] = e.path
        edges.append(ed)
    return {
        "nodes": nodes,
        "edges": edges,
        "adjacencyList": graph.adjacency,
        "maxDegree": graph.max_degree(),
    }


def _step_payload(step: SearchStep, graph: Graph) -> Dict[str, Any]:
    labels = {n.id: n.label for n in graph.nodes}
    out = step.to_dict()
    out["status"] = describe_step(step, labels)
    return out


def _outcome_payload(outcome: SolveOutcome) -> Dict[str, Any]:
    out = outcome.to_dict()
    out["message"] = describe_outcome(outcome)
    return out


class MapPayload(BaseModel):
    name: str = ""
    nodes: List[Dict[str, Any]]
    edges: List[Any] = Field(default_factory=list)


class GraphRequest(BaseModel):
    map: Optional[MapPayload] = None
    map_key: Optional[str] = None


class SolveRequest(GraphRequest):
    k: int = Field(default=4, ge=1, le=MAX_COLORS)
    solver: str = Field(default="backtracking")
    timeout_ms: Optional[int] = Field(default=30_000, ge=1)
    max_steps: int = Field(default=100_000, ge=1, le=MAX_STEPS)
    include_steps: bool = True


class SessionRequest(GraphRequest):
    k: int = Field(default=4, ge=1, le=MAX_COLORS)


class _Session:
    def __init__(self, graph: Graph, sequence: SolveSequence) -> None:
        self.graph = graph
        self.sequence = sequence


class SessionStore:
    """In-process solve sessions, oldest evicted first once full."""

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self._sessions: "OrderedDict[str, _Session]" = OrderedDict()
        self._lock = threading.Lock()

    def create(self, graph: Graph, k: int) -> str:
        session = _Session(graph, SolveSequence(graph, k))
        session_id = uuid.uuid4().hex
        with self._lock:
            self._sessions[session_id] = session
            while len(self._sessions) > self.capacity:
                evicted, _ = self._sessions.popitem(last=False)
                LOG.info("Evicted solve session %s", evicted)
        return session_id

    def get(self, session_id: str) -> _Session:
        with self._lock:
            try:
                return self._sessions[session_id]
            except KeyError:
                raise HTTPException(status_code=404, detail="Unknown session") from None

    def discard(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)


def _resolve_graph(req: GraphRequest) -> Graph:
    if (req.map is None) == (req.map_key is None):
        raise HTTPException(status_code=400, detail="Provide exactly one of 'map' or 'map_key'")
    if req.map_key is not None:
        maps = _all_maps()
        if req.map_key not in maps:
            raise HTTPException(status_code=404, detail=f"Unknown map {req.map_key!r}")
        mdef = maps[req.map_key]
    else:
        assert req.map is not None
        try:
            mdef = MapDefinition.from_dict(req.map.model_dump())
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
    try:
        return build_graph(mdef)
    except MalformedGraphError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


app = FastAPI(title="Map Coloring API", version="0.1.0")
sessions = SessionStore(MAX_SESSIONS)

cors_raw = os.environ.get("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
cors_list = [c.strip() for c in cors_raw.split(",") if c.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_list or ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/maps")
def list_maps() -> Dict[str, Any]:
    entries = []
    for key, mdef in _all_maps().items():
        entry: Dict[str, Any] = {
            "key": key,
            "name": mdef.name or key,
            "source": "builtin" if key in BUILTIN_MAPS else "user",
            "nodes": len(mdef.nodes),
            "edges": len(mdef.edges),
            "error": None,
        }
        try:
            entry["max_degree"] = build_graph(mdef).max_degree()
        except MalformedGraphError as e:
            entry["error"] = str(e)
        entries.append(entry)
    return {"maps": entries}


@app.get("/maps/{key}")
def get_map(key: str) -> Dict[str, Any]:
    maps = _all_maps()
    if key not in maps:
        raise HTTPException(status_code=404, detail="Map not found")
    return {"key": key, "map": maps[key].to_dict()}


@app.post("/graph")
def graph(req: GraphRequest) -> Dict[str, Any]:
    return {"graph": _graph_payload(_resolve_graph(req))}


@app.post("/solve")
def solve(req: SolveRequest) -> Dict[str, Any]:
    g = _resolve_graph(req)
    if req.solver not in SOLVER_CHOICES:
        raise HTTPException(status_code=400, detail=f"Unknown solver {req.solver!r}")
    steps: List[Dict[str, Any]] = []
    try:
        if req.solver == "backtracking":
            seq = SolveSequence(g, req.k)
            while True:
                item = seq.advance()
                if isinstance(item, SolveOutcome):
                    outcome = item
                    break
                if seq.steps_emitted > req.max_steps:
                    raise HTTPException(status_code=422, detail=f"Search exceeded {req.max_steps} steps")
                if req.include_steps:
                    steps.append(_step_payload(item, g))
        else:
            outcome = solve_graph(g, req.k, solver="z3", timeout_ms=req.timeout_ms)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return {"outcome": _outcome_payload(outcome), "steps": steps, "graph": _graph_payload(g)}


@app.post("/sessions")
def create_session(req: SessionRequest) -> Dict[str, Any]:
    g = _resolve_graph(req)
    session_id = sessions.create(g, req.k)
    return {"session_id": session_id, "k": req.k, "graph": _graph_payload(g)}


@app.post("/sessions/{session_id}/advance")
def advance_session(session_id: str) -> Dict[str, Any]:
    session = sessions.get(session_id)
    try:
        item = session.sequence.advance()
    except CallerMisuseError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    if isinstance(item, SolveOutcome):
        return {"done": True, "outcome": _outcome_payload(item)}
    return {"done": False, "step": _step_payload(item, session.graph), "index": session.sequence.steps_emitted - 1}


@app.delete("/sessions/{session_id}")
def delete_session(session_id: str) -> Dict[str, Any]:
    if not sessions.discard(session_id):
        raise HTTPException(status_code=404, detail="Unknown session")
    return {"deleted": True}
