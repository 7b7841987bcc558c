from .errors import CallerMisuseError, InvalidColorCountError, MalformedGraphError
from .graph import Edge, Graph, Node, NodeId, build_graph
from .maps import MapDefinition, MapFormatError

__version__ = "0.1.0"

__all__ = [
    "CallerMisuseError",
    "Edge",
    "Graph",
    "InvalidColorCountError",
    "MalformedGraphError",
    "MapDefinition",
    "MapFormatError",
    "Node",
    "NodeId",
    "build_graph",
]
