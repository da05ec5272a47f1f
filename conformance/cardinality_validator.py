"""
Check cardinality bounds declared on edge types.

An edge type may bound how many matching edges each node of its target type
receives (targetIncomingMin/Max) and how many each node of its source type
sends (sourceOutgoingMin/Max). A matching edge conforms to the edge type and
its far endpoint conforms to the type at the far end.

A node violating several edge types is reported once per violated edge type.
Use distinct_nodes() for one entry per node.
"""

from typing import Iterator, List

from db.models import Graph, Node
from db.schema import Schema, SchemaEdgeType
from conformance.checker import edge_conforms, node_conforms
from conformance.models import CardinalityViolation, Direction


def count_matching_edges(graph: Graph, node: Node, edge_type: SchemaEdgeType, direction: Direction) -> int:
    """
    Count the node's edges that match an edge type.

    Args:
        graph: Data graph snapshot
        node: Node anchored at the near end of the edge type
        edge_type: The edge type
        direction: INCOMING counts edges into the node, OUTGOING edges out of it

    Returns:
        Number of matching edges
    """
    if direction is Direction.INCOMING:
        return sum(
            1 for edge in graph.incoming(node)
            if edge_conforms(edge, edge_type) and node_conforms(edge.source, edge_type.source)
        )
    return sum(
        1 for edge in graph.outgoing(node)
        if edge_conforms(edge, edge_type) and node_conforms(edge.target, edge_type.target)
    )


def iter_violations(graph: Graph, schema: Schema, direction: Direction) -> Iterator[CardinalityViolation]:
    constrained = [
        edge_type for edge_type in schema.edge_types
        if not getattr(edge_type, direction.value).is_default
    ]
    if not constrained:
        return

    for node in graph.nodes:
        for edge_type in constrained:
            anchor = edge_type.target if direction is Direction.INCOMING else edge_type.source
            if not node_conforms(node, anchor):
                continue
            bounds = getattr(edge_type, direction.value)
            count = count_matching_edges(graph, node, edge_type, direction)
            if not bounds.contains(count):
                yield CardinalityViolation(
                    node=node,
                    edge_type=edge_type,
                    direction=direction,
                    count=count,
                    bounds=bounds
                )


def find_incoming_violations(graph: Graph, schema: Schema) -> List[CardinalityViolation]:
    """Violations of targetIncomingMin/Max, by node order then edge type order."""
    return list(iter_violations(graph, schema, Direction.INCOMING))


def find_outgoing_violations(graph: Graph, schema: Schema) -> List[CardinalityViolation]:
    """Violations of sourceOutgoingMin/Max, by node order then edge type order."""
    return list(iter_violations(graph, schema, Direction.OUTGOING))


def validate_incoming_edges(graph: Graph, schema: Schema) -> List[Node]:
    """
    Find nodes receiving too few or too many matching edges.

    Returns:
        One node per violated edge type, in node order
    """
    return [violation.node for violation in find_incoming_violations(graph, schema)]


def validate_outgoing_edges(graph: Graph, schema: Schema) -> List[Node]:
    """
    Find nodes sending too few or too many matching edges.

    Returns:
        One node per violated edge type, in node order
    """
    return [violation.node for violation in find_outgoing_violations(graph, schema)]
