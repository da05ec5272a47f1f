"""
Turn source records into Graph and Schema snapshots.

Role tags are stripped here: Node.labels and SchemaNodeType.labels hold only
the labels that take part in type comparison.
"""

from typing import Any, Dict, Iterable, List, Tuple

from common.logger import logger
from db.errors import MalformedTypeSpec
from db.models import Edge, Graph, Node
from db.schema import (
    RESERVED_KEYS,
    Schema,
    SchemaEdgeType,
    SchemaNodeType,
    parse_cardinality,
    parse_property_specs,
)
from db.sources import EdgeRecord, GraphSource, NodeRecord


def build_graph(node_records: Iterable[NodeRecord], edge_records: Iterable[EdgeRecord],
                role_label: str) -> Graph:
    """
    Build the data graph.

    Args:
        node_records: Data nodes in creation order
        edge_records: Data edges in creation order
        role_label: The data role label to strip

    Returns:
        Graph snapshot. Edges whose endpoints are not data nodes are skipped.
    """
    nodes: Dict[Any, Node] = {}
    for record in node_records:
        nodes[record.id] = Node(
            id=record.id,
            labels=frozenset(record.labels) - {role_label},
            properties=dict(record.properties)
        )

    edges: List[Edge] = []
    for record in edge_records:
        source = nodes.get(record.source_id)
        target = nodes.get(record.target_id)
        if source is None or target is None:
            logger.warning(
                f"Skipping data edge {record.id} [:{record.type}]: endpoint "
                f"{record.source_id if source is None else record.target_id} is not a data node"
            )
            continue
        edges.append(Edge(
            id=record.id,
            type=record.type,
            source=source,
            target=target,
            properties=dict(record.properties)
        ))

    return Graph(nodes=nodes.values(), edges=edges)


def build_schema(node_records: Iterable[NodeRecord], edge_records: Iterable[EdgeRecord],
                 role_label: str, strict: bool = False) -> Schema:
    """
    Build the schema from schema-partition records.

    Args:
        node_records: Schema nodes (node types) in declaration order
        edge_records: Schema edges (edge types) in declaration order
        role_label: The schema role label to strip
        strict: Raise on the first malformed spec instead of recording it

    Returns:
        Schema snapshot. Malformed specs are listed in Schema.issues.

    Raises:
        MalformedTypeSpec: If strict and a spec or bound cannot be parsed
    """
    issues: List[MalformedTypeSpec] = []

    node_types: Dict[Any, SchemaNodeType] = {}
    for record in node_records:
        labels = frozenset(record.labels) - {role_label}
        owner = "(:" + ":".join(sorted(labels)) + ")"
        node_types[record.id] = SchemaNodeType(
            id=record.id,
            labels=labels,
            properties=parse_property_specs(owner, record.properties, issues)
        )
        _raise_if_strict(issues, strict)

    edge_types: List[SchemaEdgeType] = []
    for record in edge_records:
        source = node_types.get(record.source_id)
        target = node_types.get(record.target_id)
        if source is None or target is None:
            logger.warning(f"Schema edge {record.id} [:{record.type}] references a node outside the schema")
        owner = f"[:{record.type}]"
        cardinality = parse_cardinality(owner, record.properties, issues)
        edge_types.append(SchemaEdgeType(
            id=record.id,
            type=record.type,
            source=source,
            target=target,
            properties=parse_property_specs(owner, record.properties, issues, reserved=RESERVED_KEYS),
            outgoing=cardinality["outgoing"],
            incoming=cardinality["incoming"]
        ))
        _raise_if_strict(issues, strict)

    for issue in issues:
        logger.warning(f"Malformed schema spec, it will never match: {issue}")

    return Schema(node_types=tuple(node_types.values()), edge_types=tuple(edge_types), issues=tuple(issues))


def _raise_if_strict(issues: List[MalformedTypeSpec], strict: bool) -> None:
    if strict and issues:
        raise issues[0]


def load_graph(source: GraphSource) -> Graph:
    """Enumerate and build the data graph of a source."""
    return build_graph(source.data_nodes(), source.data_edges(), source.data_label)


def load_schema(source: GraphSource, strict: bool = False) -> Schema:
    """Enumerate and build the schema of a source."""
    return build_schema(source.schema_nodes(), source.schema_edges(), source.schema_label, strict=strict)


def load_snapshot(source: GraphSource, strict: bool = False) -> Tuple[Graph, Schema]:
    """
    Read both partitions in one pass.

    Returns:
        (graph, schema)

    Raises:
        StorageUnavailable: If the source cannot be read
        MalformedTypeSpec: If strict and the schema has malformed specs
    """
    snapshot = source.read_all()
    graph = build_graph(snapshot.data_nodes, snapshot.data_edges, source.data_label)
    schema = build_schema(snapshot.schema_nodes, snapshot.schema_edges, source.schema_label, strict=strict)
    logger.info(
        f"Loaded {len(graph.nodes)} data nodes, {len(graph.edges)} data edges, "
        f"{len(schema.node_types)} node types, {len(schema.edge_types)} edge types"
    )
    return graph, schema
