#!/usr/bin/env python3
"""
Graph conformance checker

Loads the data and schema partitions of a graph and reports every data
element that does not conform to the schema.

Usage:
    python -m conformance.main validate                      # Neo4j, settings from env
    python -m conformance.main validate --boolean            # yes/no only, stops early
    python -m conformance.main validate --source yaml --file graph.yaml --json report.json

Exit codes: 0 conformant, 1 not conformant, 2 configuration or storage error.
"""

import argparse
import dataclasses
import sys
import time
import uuid
from typing import List, Optional

from common.config import SOURCES, ConformanceConfig, check_config
from common.logger import LogContext, logger
from db.errors import MalformedTypeSpec, StorageUnavailable
from db.loader import load_snapshot
from db.neo4j_source import Neo4jGraphSource, neo4j_session
from db.sources import GraphSource, InMemoryGraphSource
from conformance.report_generator import generate_console_report, generate_json_report
from conformance.validator import is_conformant, validate

EXIT_CONFORMANT = 0
EXIT_NOT_CONFORMANT = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="graph-conformance",
                                     description="Check a property graph against a schema graph.")
    subcommands = parser.add_subparsers(dest="command", required=True)

    validate_cmd = subcommands.add_parser("validate", help="Validate the graph against its schema")
    validate_cmd.add_argument("--source", choices=SOURCES, default="neo4j",
                              help="Where to read the graph from (default: neo4j)")
    validate_cmd.add_argument("--file", help="YAML fixture, for --source yaml")
    validate_cmd.add_argument("-b", "--boolean", action="store_true",
                              help="Only check whether the graph conforms. This is faster than "
                                   "enumerating all the violating elements")
    validate_cmd.add_argument("--json", dest="json_path", help="Also write a JSON report to this path")
    validate_cmd.add_argument("--strict", action="store_true",
                              help="Fail on malformed schema specs instead of treating them as unmatchable")
    return parser


def run_validation(source: GraphSource, strict: bool = False, boolean: bool = False,
                   json_path: Optional[str] = None) -> int:
    """
    Load a snapshot from the source and validate it.

    Returns:
        Process exit code
    """
    logger.info("Loading graph...")
    graph, schema = load_snapshot(source, strict=strict)

    logger.info("Validating...")
    if boolean:
        start = time.perf_counter()
        conformant = is_conformant(graph, schema)
        elapsed_ms = (time.perf_counter() - start) * 1000
        if conformant:
            print("Graph conforms to schema ✅")
        else:
            print("Graph does not conform to schema ❌")
        print(f"Took {elapsed_ms:.0f} ms")
        return EXIT_CONFORMANT if conformant else EXIT_NOT_CONFORMANT

    report = validate(graph, schema)
    generate_console_report(report)
    if json_path:
        generate_json_report(report, json_path)
    return EXIT_CONFORMANT if report.is_conformant else EXIT_NOT_CONFORMANT


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution function"""
    args = build_parser().parse_args(argv)

    config = ConformanceConfig.from_env()
    if args.strict:
        config = dataclasses.replace(config, strict_types=True)

    if not check_config(config, args.source, args.file):
        return EXIT_ERROR

    with LogContext(run_id=uuid.uuid4().hex[:8], source=args.source):
        try:
            if args.source == "yaml":
                source = InMemoryGraphSource.from_yaml(
                    args.file, data_label=config.data_label, schema_label=config.schema_label
                )
                return run_validation(source, config.strict_types, args.boolean, args.json_path)

            with neo4j_session(config) as session:
                source = Neo4jGraphSource(session, data_label=config.data_label,
                                          schema_label=config.schema_label)
                return run_validation(source, config.strict_types, args.boolean, args.json_path)
        except StorageUnavailable as e:
            logger.error(f"✗ Graph source unavailable: {e}")
            return EXIT_ERROR
        except MalformedTypeSpec as e:
            logger.error(f"✗ Malformed schema: {e}")
            return EXIT_ERROR
        except ValueError as e:
            logger.error(f"✗ Invalid graph fixture: {e}")
            return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
