"""
Run every validator over one snapshot.
"""

import time
from datetime import datetime

from common.logger import logger
from db.models import Graph
from db.schema import Schema
from conformance.cardinality_validator import (
    find_incoming_violations,
    find_outgoing_violations,
    iter_violations,
)
from conformance.checker import edge_matches, node_conforms
from conformance.models import Direction, ValidationReport
from conformance.structural_validator import validate_edges, validate_nodes


def validate(graph: Graph, schema: Schema) -> ValidationReport:
    """
    Enumerate every violation in the graph.

    Args:
        graph: Data graph snapshot
        schema: Schema snapshot

    Returns:
        ValidationReport with all four violation lists
    """
    start = time.perf_counter()

    logger.info("Validating node types...")
    violating_nodes = validate_nodes(graph, schema)
    logger.info(f"  {len(violating_nodes)} node(s) match no node type")

    logger.info("Validating edge types...")
    violating_edges = validate_edges(graph, schema)
    logger.info(f"  {len(violating_edges)} edge(s) match no edge type")

    logger.info("Validating cardinality bounds...")
    incoming = find_incoming_violations(graph, schema)
    outgoing = find_outgoing_violations(graph, schema)
    logger.info(f"  {len(incoming)} incoming and {len(outgoing)} outgoing violation(s)")

    return ValidationReport(
        timestamp=datetime.now(),
        violating_nodes=violating_nodes,
        violating_edges=violating_edges,
        incoming_violations=incoming,
        outgoing_violations=outgoing,
        schema_issues=list(schema.issues),
        elapsed_ms=(time.perf_counter() - start) * 1000
    )


def is_conformant(graph: Graph, schema: Schema) -> bool:
    """
    Check whether the graph conforms, stopping at the first violation.

    Faster than validate() when only a yes/no answer is needed.
    """
    for node in graph.nodes:
        if not any(node_conforms(node, node_type) for node_type in schema.node_types):
            logger.debug(f"First violation: node {node} matches no node type")
            return False

    for edge in graph.edges:
        if not any(edge_matches(edge, edge_type) for edge_type in schema.edge_types):
            logger.debug(f"First violation: edge {edge} matches no edge type")
            return False

    for direction in Direction:
        violation = next(iter_violations(graph, schema, direction), None)
        if violation is not None:
            logger.debug(f"First violation: {violation}")
            return False

    return True
