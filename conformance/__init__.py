"""
Conformance checking of a data graph against a schema graph.

The checker decides whether one element matches one type. The structural
validator reports elements matching no type; the cardinality validator
reports nodes whose matching edge counts fall outside declared bounds.
"""

from conformance.cardinality_validator import (
    find_incoming_violations,
    find_outgoing_violations,
    validate_incoming_edges,
    validate_outgoing_edges,
)
from conformance.checker import edge_conforms, edge_matches, node_conforms
from conformance.models import CardinalityViolation, Direction, ValidationReport, distinct_nodes
from conformance.structural_validator import validate_edges, validate_nodes
from conformance.validator import is_conformant, validate

__all__ = [
    "CardinalityViolation",
    "Direction",
    "ValidationReport",
    "distinct_nodes",
    "edge_conforms",
    "edge_matches",
    "find_incoming_violations",
    "find_outgoing_violations",
    "is_conformant",
    "node_conforms",
    "validate",
    "validate_edges",
    "validate_incoming_edges",
    "validate_nodes",
    "validate_outgoing_edges",
]
