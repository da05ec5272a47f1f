"""
In-memory data graph snapshot: nodes, edges and the graph holding them.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Mapping, Tuple


@dataclass(frozen=True)
class Node:
    """A data node. Identity is the only thing compared or hashed."""
    id: Any
    labels: FrozenSet[str] = field(default_factory=frozenset, compare=False)
    properties: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'labels': sorted(self.labels),
            'properties': {key: _jsonable(value) for key, value in self.properties.items()}
        }

    def __str__(self) -> str:
        labels = ":".join(sorted(self.labels))
        return f"({self.id}:{labels})"


@dataclass(frozen=True)
class Edge:
    """A directed data edge between two data nodes."""
    id: Any
    type: str = field(compare=False)
    source: Node = field(compare=False)
    target: Node = field(compare=False)
    properties: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'type': self.type,
            'source': self.source.id,
            'target': self.target.id,
            'properties': {key: _jsonable(value) for key, value in self.properties.items()}
        }

    def __str__(self) -> str:
        return f"{self.source}-[{self.id}:{self.type}]->{self.target}"


class Graph:
    """
    Immutable snapshot of the data partition.

    Nodes and edges keep the order they were enumerated in, which is the
    order every validator reports violations in.
    """

    def __init__(self, nodes=(), edges=()):
        self._nodes: Tuple[Node, ...] = tuple(nodes)
        self._edges: Tuple[Edge, ...] = tuple(edges)

        incoming: Dict[Any, List[Edge]] = {node.id: [] for node in self._nodes}
        outgoing: Dict[Any, List[Edge]] = {node.id: [] for node in self._nodes}
        for edge in self._edges:
            outgoing.setdefault(edge.source.id, []).append(edge)
            incoming.setdefault(edge.target.id, []).append(edge)
        self._incoming = {node_id: tuple(edges) for node_id, edges in incoming.items()}
        self._outgoing = {node_id: tuple(edges) for node_id, edges in outgoing.items()}

    @property
    def nodes(self) -> Tuple[Node, ...]:
        return self._nodes

    @property
    def edges(self) -> Tuple[Edge, ...]:
        return self._edges

    def incoming(self, node: Node) -> Tuple[Edge, ...]:
        """Edges whose target is `node`, in insertion order."""
        return self._incoming.get(node.id, ())

    def outgoing(self, node: Node) -> Tuple[Edge, ...]:
        """Edges whose source is `node`, in insertion order."""
        return self._outgoing.get(node.id, ())

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"Graph(nodes={len(self._nodes)}, edges={len(self._edges)})"


def _jsonable(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if hasattr(value, 'iso_format'):
        return value.iso_format()
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    return str(value)
