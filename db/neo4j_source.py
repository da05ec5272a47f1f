"""
Neo4j graph source.

Reads the data and schema partitions of a Neo4j database. Both partitions
live in the same database and are told apart by a role label on every node
(`Data` / `Schema` by default).
"""

from contextlib import contextmanager
from typing import Iterator, List

from neo4j import GraphDatabase, ManagedTransaction, Session
from neo4j.exceptions import DriverError, Neo4jError

from common.config import ConformanceConfig
from common.logger import logger
from db.errors import StorageUnavailable
from db.sources import DATA_LABEL, SCHEMA_LABEL, EdgeRecord, GraphSource, NodeRecord, SourceSnapshot


def generate_node_query(label: str) -> str:
    """
    Generate a Cypher query enumerating nodes carrying a role label.

    Rows are ordered by id(n), which follows creation order; elementId strings
    do not sort that way.

    Args:
        label: The role label (e.g., "Data", "Schema")

    Returns:
        Cypher query string
    """
    query = f"""
    MATCH (n:`{label}`)
    RETURN elementId(n) as id, labels(n) as labels, properties(n) as properties
    ORDER BY id(n)
    """
    return query.strip()


def generate_edge_query(label: str) -> str:
    """
    Generate a Cypher query enumerating edges whose endpoints both carry a role label.

    Ordered by id(r) for creation order, like generate_node_query.

    Args:
        label: The role label (e.g., "Data", "Schema")

    Returns:
        Cypher query string
    """
    query = f"""
    MATCH (s:`{label}`)-[r]->(t:`{label}`)
    RETURN elementId(r) as id, type(r) as type,
           elementId(s) as source, elementId(t) as target,
           properties(r) as properties
    ORDER BY id(r)
    """
    return query.strip()


def _read_nodes(tx: ManagedTransaction, label: str) -> List[NodeRecord]:
    result = tx.run(generate_node_query(label))
    return [
        NodeRecord(id=record["id"], labels=frozenset(record["labels"]), properties=dict(record["properties"]))
        for record in result
    ]


def _read_edges(tx: ManagedTransaction, label: str) -> List[EdgeRecord]:
    result = tx.run(generate_edge_query(label))
    return [
        EdgeRecord(
            id=record["id"],
            type=record["type"],
            source_id=record["source"],
            target_id=record["target"],
            properties=dict(record["properties"])
        )
        for record in result
    ]


class Neo4jGraphSource(GraphSource):
    """Enumerates both partitions through an open Neo4j session."""

    def __init__(self, session: Session, data_label: str = DATA_LABEL, schema_label: str = SCHEMA_LABEL):
        """
        Initialize the source.

        Args:
            session: Neo4j session to use for queries. The caller owns it.
            data_label: Role label of data nodes
            schema_label: Role label of schema nodes
        """
        self.session = session
        self.data_label = data_label
        self.schema_label = schema_label

    def _read(self, work, *args):
        try:
            return self.session.execute_read(work, *args)
        except (Neo4jError, DriverError) as e:
            raise StorageUnavailable(f"Neo4j read failed: {e}") from e

    def data_nodes(self) -> List[NodeRecord]:
        return self._read(_read_nodes, self.data_label)

    def schema_nodes(self) -> List[NodeRecord]:
        return self._read(_read_nodes, self.schema_label)

    def data_edges(self) -> List[EdgeRecord]:
        return self._read(_read_edges, self.data_label)

    def schema_edges(self) -> List[EdgeRecord]:
        return self._read(_read_edges, self.schema_label)

    def read_all(self) -> SourceSnapshot:
        """Read all four enumerations inside a single read transaction."""
        def work(tx: ManagedTransaction) -> SourceSnapshot:
            return SourceSnapshot(
                data_nodes=_read_nodes(tx, self.data_label),
                schema_nodes=_read_nodes(tx, self.schema_label),
                data_edges=_read_edges(tx, self.data_label),
                schema_edges=_read_edges(tx, self.schema_label)
            )

        return self._read(work)


@contextmanager
def neo4j_session(config: ConformanceConfig) -> Iterator[Session]:
    """
    Open a driver and session for the configured database.

    Raises:
        StorageUnavailable: If the driver rejects the URI or the server cannot be reached
    """
    logger.info(f"Connecting to Neo4j at {config.neo4j_uri}...")
    try:
        driver = GraphDatabase.driver(config.neo4j_uri, auth=(config.neo4j_username, config.neo4j_password))
    except (Neo4jError, DriverError) as e:
        raise StorageUnavailable(f"Invalid Neo4j configuration for {config.neo4j_uri}: {e}") from e
    try:
        try:
            driver.verify_connectivity()
        except (Neo4jError, DriverError) as e:
            raise StorageUnavailable(f"Cannot connect to Neo4j at {config.neo4j_uri}: {e}") from e
        logger.info("✓ Neo4j connection established")

        with driver.session(database=config.neo4j_database) as session:
            yield session
    finally:
        driver.close()
