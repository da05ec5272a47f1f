"""
Pytest configuration and fixtures for conformance tests.
"""

import pytest

from db.loader import load_snapshot
from db.sources import InMemoryGraphSource
from conformance import (
    validate_edges,
    validate_incoming_edges,
    validate_nodes,
    validate_outgoing_edges,
)


@pytest.fixture(scope="function")
def source():
    """An empty in-memory graph for each test."""
    return InMemoryGraphSource()


@pytest.fixture(scope="function")
def run_validators():
    """
    Load a source and run all four validators.

    Returns a callable giving a dict of violating element ids per validator.
    """
    def runner(graph_source):
        graph, schema = load_snapshot(graph_source)
        return {
            "nodes": [node.id for node in validate_nodes(graph, schema)],
            "edges": [edge.id for edge in validate_edges(graph, schema)],
            "incoming": [node.id for node in validate_incoming_edges(graph, schema)],
            "outgoing": [node.id for node in validate_outgoing_edges(graph, schema)],
        }
    return runner
