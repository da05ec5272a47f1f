"""
Data models for conformance results.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List

from db.errors import MalformedTypeSpec
from db.models import Edge, Node
from db.schema import Cardinality, SchemaEdgeType


class Direction(Enum):
    """Which end of an edge type a cardinality bound is anchored on."""
    INCOMING = "incoming"  # targetIncomingMin/Max, counted on target nodes
    OUTGOING = "outgoing"  # sourceOutgoingMin/Max, counted on source nodes


@dataclass(frozen=True)
class CardinalityViolation:
    """A node whose count of matching edges falls outside an edge type's bounds."""
    node: Node
    edge_type: SchemaEdgeType
    direction: Direction
    count: int
    bounds: Cardinality

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'node': self.node.id,
            'edge_type': str(self.edge_type),
            'direction': self.direction.value,
            'count': self.count,
            'min': self.bounds.min,
            'max': self.bounds.max
        }

    def __str__(self) -> str:
        return (f"{self.node} has {self.count} {self.direction.value} "
                f"{self.edge_type} edges, expected {self.bounds}")


def distinct_nodes(violations: List[CardinalityViolation]) -> List[Node]:
    """Collapse violations to one entry per node, keeping first-seen order."""
    seen = {}
    for violation in violations:
        seen.setdefault(violation.node.id, violation.node)
    return list(seen.values())


@dataclass
class ValidationReport:
    """Outcome of one run of all four validators."""
    timestamp: datetime
    violating_nodes: List[Node] = field(default_factory=list)
    violating_edges: List[Edge] = field(default_factory=list)
    incoming_violations: List[CardinalityViolation] = field(default_factory=list)
    outgoing_violations: List[CardinalityViolation] = field(default_factory=list)
    schema_issues: List[MalformedTypeSpec] = field(default_factory=list)
    elapsed_ms: float = 0.0

    @property
    def violation_count(self) -> int:
        return (len(self.violating_nodes) + len(self.violating_edges)
                + len(self.incoming_violations) + len(self.outgoing_violations))

    @property
    def is_conformant(self) -> bool:
        return self.violation_count == 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'timestamp': self.timestamp.isoformat(),
            'conformant': self.is_conformant,
            'violating_nodes': [node.to_dict() for node in self.violating_nodes],
            'violating_edges': [edge.to_dict() for edge in self.violating_edges],
            'incoming_violations': [violation.to_dict() for violation in self.incoming_violations],
            'outgoing_violations': [violation.to_dict() for violation in self.outgoing_violations],
            'schema_issues': [str(issue) for issue in self.schema_issues],
            'elapsed_ms': round(self.elapsed_ms, 2),
            'summary': self._generate_summary()
        }

    def _generate_summary(self) -> Dict[str, Any]:
        """Generate summary statistics."""
        return {
            'violating_nodes': len(self.violating_nodes),
            'violating_edges': len(self.violating_edges),
            'incoming_violations': len(self.incoming_violations),
            'outgoing_violations': len(self.outgoing_violations),
            'nodes_with_cardinality_violations': len(
                distinct_nodes(self.incoming_violations + self.outgoing_violations)
            ),
            'schema_issues': len(self.schema_issues),
            'total_violations': self.violation_count
        }
