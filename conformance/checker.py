"""
Structural conformance of single data elements to single schema types.

These checks never compare identities: a type is matched purely by its
labels and property specs, so two schema nodes with the same structure are
interchangeable.
"""

from typing import Any, FrozenSet, Mapping, Optional

from db.models import Edge, Node
from db.schema import RESERVED_KEYS, PropertySpec, SchemaEdgeType, SchemaNodeType
from db.sources import DATA_LABEL, SCHEMA_LABEL

ROLE_LABELS: FrozenSet[str] = frozenset({DATA_LABEL, SCHEMA_LABEL})


def strip_role_tags(labels: FrozenSet[str], role_labels: FrozenSet[str] = ROLE_LABELS) -> FrozenSet[str]:
    return frozenset(labels) - role_labels


def properties_conform(properties: Mapping[str, Any], specs: Mapping[str, PropertySpec],
                       ignored: FrozenSet[str] = frozenset()) -> bool:
    """
    Check a property map against a spec map.

    Every present property must be declared with a type accepting its value,
    and every mandatory declared property must be present.

    Args:
        properties: The element's properties
        specs: The type's declared properties
        ignored: Keys left out on both sides

    Returns:
        True if the property map conforms
    """
    for name, value in properties.items():
        if name in ignored:
            continue
        spec = specs.get(name)
        if spec is None or not spec.accepts(value):
            return False

    for name, spec in specs.items():
        if name in ignored or spec.optional:
            continue
        if name not in properties:
            return False

    return True


def node_conforms(node: Node, node_type: Optional[SchemaNodeType],
                  role_labels: FrozenSet[str] = ROLE_LABELS) -> bool:
    """Check that a node has exactly the type's labels and conforming properties."""
    if node_type is None:
        return False
    if strip_role_tags(node.labels, role_labels) != strip_role_tags(node_type.labels, role_labels):
        return False
    return properties_conform(node.properties, node_type.properties)


def edge_conforms(edge: Edge, edge_type: SchemaEdgeType) -> bool:
    """Check an edge's type and properties, ignoring its endpoints."""
    if edge.type != edge_type.type:
        return False
    return properties_conform(edge.properties, edge_type.properties, ignored=RESERVED_KEYS)


def edge_matches(edge: Edge, edge_type: SchemaEdgeType,
                 role_labels: FrozenSet[str] = ROLE_LABELS) -> bool:
    """
    Check an edge and both of its endpoints against an edge type.

    Endpoints are checked in the declared direction only.
    """
    return (
        edge_conforms(edge, edge_type)
        and node_conforms(edge.source, edge_type.source, role_labels)
        and node_conforms(edge.target, edge_type.target, role_labels)
    )
