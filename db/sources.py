"""
Graph sources: the read-only enumerations a validation run consumes.

A source exposes the data partition (nodes/edges tagged with the data role
label) and the schema partition (nodes/edges tagged with the schema role
label) of one graph. Any backend implementing GraphSource can be validated.
"""

import itertools
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Union

import yaml

from db.errors import StorageUnavailable

DATA_LABEL = "Data"
SCHEMA_LABEL = "Schema"


@dataclass(frozen=True)
class NodeRecord:
    """A node as enumerated by a source. `labels` includes the role tag."""
    id: Any
    labels: FrozenSet[str]
    properties: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class EdgeRecord:
    """An edge as enumerated by a source; endpoints are node ids."""
    id: Any
    type: str
    source_id: Any
    target_id: Any
    properties: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SourceSnapshot:
    """All four enumerations, read together."""
    data_nodes: List[NodeRecord]
    schema_nodes: List[NodeRecord]
    data_edges: List[EdgeRecord]
    schema_edges: List[EdgeRecord]


class GraphSource(ABC):
    """
    Read-only access to a graph holding both a data and a schema partition.

    Every enumeration yields records in creation order. Implementations
    raise StorageUnavailable when the underlying store cannot be read.
    """

    data_label: str = DATA_LABEL
    schema_label: str = SCHEMA_LABEL

    @abstractmethod
    def data_nodes(self) -> Iterable[NodeRecord]:
        """Nodes tagged with the data role label."""

    @abstractmethod
    def schema_nodes(self) -> Iterable[NodeRecord]:
        """Nodes tagged with the schema role label; properties are spec strings."""

    @abstractmethod
    def data_edges(self) -> Iterable[EdgeRecord]:
        """Edges between two data nodes."""

    @abstractmethod
    def schema_edges(self) -> Iterable[EdgeRecord]:
        """Edges between two schema nodes; may carry cardinality keys."""

    def read_all(self) -> SourceSnapshot:
        """Read every enumeration. Backends override this to read consistently."""
        return SourceSnapshot(
            data_nodes=list(self.data_nodes()),
            schema_nodes=list(self.schema_nodes()),
            data_edges=list(self.data_edges()),
            schema_edges=list(self.schema_edges())
        )


class InMemoryGraphSource(GraphSource):
    """
    A graph held in Python lists, built through the add_* methods or
    loaded from a YAML/dict fixture.

    Usage:
        source = InMemoryGraphSource()
        user = source.add_schema_node(["User"], name="STRING")
        rose = source.add_data_node(["User"], name="Rose")
    """

    def __init__(self, data_label: str = DATA_LABEL, schema_label: str = SCHEMA_LABEL):
        self.data_label = data_label
        self.schema_label = schema_label
        self._data_nodes: List[NodeRecord] = []
        self._schema_nodes: List[NodeRecord] = []
        self._data_edges: List[EdgeRecord] = []
        self._schema_edges: List[EdgeRecord] = []
        self._node_ids = itertools.count()
        self._edge_ids = itertools.count()

    def data_nodes(self) -> List[NodeRecord]:
        return list(self._data_nodes)

    def schema_nodes(self) -> List[NodeRecord]:
        return list(self._schema_nodes)

    def data_edges(self) -> List[EdgeRecord]:
        return list(self._data_edges)

    def schema_edges(self) -> List[EdgeRecord]:
        return list(self._schema_edges)

    def add_data_node(self, labels: Union[str, Iterable[str]] = (), node_id: Any = None,
                      properties: Optional[Mapping[str, Any]] = None, **kwargs) -> Any:
        """Add a data node and return its id. Properties come from `properties` and kwargs."""
        record = self._node_record(labels, self.data_label, node_id, {**(properties or {}), **kwargs})
        self._data_nodes.append(record)
        return record.id

    def add_schema_node(self, labels: Union[str, Iterable[str]] = (), node_id: Any = None,
                        properties: Optional[Mapping[str, Any]] = None, **kwargs) -> Any:
        """Add a schema node (a node type) and return its id."""
        record = self._node_record(labels, self.schema_label, node_id, {**(properties or {}), **kwargs})
        self._schema_nodes.append(record)
        return record.id

    def add_data_edge(self, source_id: Any, rel_type: str, target_id: Any,
                      edge_id: Any = None, properties: Optional[Mapping[str, Any]] = None,
                      **kwargs) -> Any:
        """Add a data edge source -[rel_type]-> target and return its id."""
        record = self._edge_record(source_id, rel_type, target_id, edge_id, {**(properties or {}), **kwargs})
        self._data_edges.append(record)
        return record.id

    def add_schema_edge(self, source_id: Any, rel_type: str, target_id: Any,
                        edge_id: Any = None, properties: Optional[Mapping[str, Any]] = None,
                        **kwargs) -> Any:
        """Add a schema edge (an edge type) and return its id."""
        record = self._edge_record(source_id, rel_type, target_id, edge_id, {**(properties or {}), **kwargs})
        self._schema_edges.append(record)
        return record.id

    def _node_record(self, labels, role, node_id, properties) -> NodeRecord:
        if isinstance(labels, str):
            labels = [labels]
        if node_id is None:
            node_id = next(self._node_ids)
        return NodeRecord(id=node_id, labels=frozenset(labels) | {role}, properties=dict(properties))

    def _edge_record(self, source_id, rel_type, target_id, edge_id, properties) -> EdgeRecord:
        if edge_id is None:
            edge_id = next(self._edge_ids)
        return EdgeRecord(
            id=edge_id,
            type=rel_type,
            source_id=source_id,
            target_id=target_id,
            properties=dict(properties)
        )

    @classmethod
    def from_dict(cls, document: Mapping[str, Any], data_label: str = DATA_LABEL,
                  schema_label: str = SCHEMA_LABEL) -> "InMemoryGraphSource":
        """
        Build a source from a fixture document.

        Expected shape (every section optional):
            schema:
              nodes: [{id, labels, properties}]
              edges: [{id, type, source, target, properties}]
            data:
              nodes: [...]
              edges: [...]

        Args:
            document: Parsed fixture
            data_label: Role label for data elements
            schema_label: Role label for schema elements

        Returns:
            InMemoryGraphSource holding the fixture

        Raises:
            ValueError: If the document does not have the expected shape
        """
        if not isinstance(document, Mapping):
            raise ValueError(f"Fixture root must be a mapping, got {type(document).__name__}")

        source = cls(data_label=data_label, schema_label=schema_label)
        schema = _section(document, "schema")
        data = _section(document, "data")

        for entry in _entries(schema, "nodes", "schema"):
            source.add_schema_node(entry.get("labels", ()), node_id=entry.get("id"),
                                   properties=_properties(entry))
        for entry in _entries(data, "nodes", "data"):
            source.add_data_node(entry.get("labels", ()), node_id=entry.get("id"),
                                 properties=_properties(entry))
        for entry in _entries(schema, "edges", "schema"):
            source.add_schema_edge(entry.get("source"), _edge_type(entry), entry.get("target"),
                                   edge_id=entry.get("id"), properties=_properties(entry))
        for entry in _entries(data, "edges", "data"):
            source.add_data_edge(entry.get("source"), _edge_type(entry), entry.get("target"),
                                 edge_id=entry.get("id"), properties=_properties(entry))
        return source

    @classmethod
    def from_yaml(cls, path: Union[str, Path], **kwargs) -> "InMemoryGraphSource":
        """
        Load a fixture file.

        Raises:
            StorageUnavailable: If the file cannot be read or parsed
            ValueError: If the document does not have the expected shape
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                document = yaml.safe_load(f)
        except OSError as e:
            raise StorageUnavailable(f"Cannot read graph fixture {path}: {e}") from e
        except yaml.YAMLError as e:
            raise StorageUnavailable(f"Invalid YAML in {path}: {e}") from e
        return cls.from_dict(document or {}, **kwargs)


def _section(document: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = document.get(name) or {}
    if not isinstance(section, Mapping):
        raise ValueError(f"'{name}' must be a mapping, got {type(section).__name__}")
    return section


def _entries(section: Mapping[str, Any], key: str, section_name: str) -> List[Dict[str, Any]]:
    entries = section.get(key) or []
    if not isinstance(entries, list):
        raise ValueError(f"'{section_name}.{key}' must be a list, got {type(entries).__name__}")
    for i, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            raise ValueError(f"{section_name}.{key}[{i}]: Must be a mapping, got {type(entry).__name__}")
    return entries


def _edge_type(entry: Mapping[str, Any]) -> str:
    rel_type = entry.get("type")
    if not isinstance(rel_type, str) or not rel_type:
        raise ValueError(f"Edge {entry.get('id', '?')}: 'type' must be a non-empty string")
    return rel_type


def _properties(entry: Mapping[str, Any]) -> Dict[str, Any]:
    properties: Optional[Mapping[str, Any]] = entry.get("properties")
    return dict(properties or {})
