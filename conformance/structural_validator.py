"""
Find data nodes and edges that conform to no schema type at all.
"""

from typing import List

from db.models import Edge, Graph, Node
from db.schema import Schema
from conformance.checker import edge_matches, node_conforms


def validate_nodes(graph: Graph, schema: Schema) -> List[Node]:
    """
    Find nodes matching no node type.

    Args:
        graph: Data graph snapshot
        schema: Schema snapshot

    Returns:
        Violating nodes, in the graph's node order
    """
    return [
        node for node in graph.nodes
        if not any(node_conforms(node, node_type) for node_type in schema.node_types)
    ]


def validate_edges(graph: Graph, schema: Schema) -> List[Edge]:
    """
    Find edges matching no edge type.

    An edge must conform to the type together with both of its endpoints,
    so an edge with well-formed properties still violates when it connects
    the wrong kinds of nodes or runs in the wrong direction.

    Args:
        graph: Data graph snapshot
        schema: Schema snapshot

    Returns:
        Violating edges, in the graph's edge order
    """
    return [
        edge for edge in graph.edges
        if not any(edge_matches(edge, edge_type) for edge_type in schema.edge_types)
    ]
