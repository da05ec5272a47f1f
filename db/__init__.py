"""
Graph and schema snapshot models plus the sources that enumerate them.

A validation run loads a data graph and a schema graph from a source
(in-memory fixture or Neo4j) and hands both to the conformance package.
"""
