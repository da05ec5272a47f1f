"""
Generate reports for conformance results.
"""

import json
from pathlib import Path
from typing import List

from conformance.models import CardinalityViolation, ValidationReport


# ANSI color codes for console output
class Colors:
    """ANSI color codes for terminal output."""
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BLUE = '\033[94m'
    BOLD = '\033[1m'
    RESET = '\033[0m'


def generate_console_report(report: ValidationReport) -> None:
    """
    Print a console report with colored output.

    Args:
        report: ValidationReport to display
    """
    print(f"\n{Colors.BOLD}{'='*100}")
    print("GRAPH CONFORMANCE REPORT")
    print(f"Generated: {report.timestamp.strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"{'='*100}{Colors.RESET}\n")

    summary = report._generate_summary()
    print(f"{Colors.BOLD}SUMMARY{Colors.RESET}")
    print(f"  Nodes matching no type: {summary['violating_nodes']}")
    print(f"  Edges matching no type: {summary['violating_edges']}")
    print(f"  Incoming cardinality violations: {summary['incoming_violations']}")
    print(f"  Outgoing cardinality violations: {summary['outgoing_violations']}")
    if summary['schema_issues']:
        print(f"  {Colors.YELLOW}⚠ Malformed schema specs: {summary['schema_issues']}{Colors.RESET}")
    if report.is_conformant:
        print(f"  {Colors.GREEN}✓ All graph elements conform to schema ✅{Colors.RESET}")
    else:
        print(f"  {Colors.RED}{Colors.BOLD}{summary['total_violations']} violation(s), graph does not conform to schema ❌{Colors.RESET}")
    print()

    if report.schema_issues:
        _print_section("MALFORMED SCHEMA SPECS", [str(issue) for issue in report.schema_issues], Colors.YELLOW)
    if report.violating_nodes:
        _print_section("NODES MATCHING NO NODE TYPE", [_describe(node) for node in report.violating_nodes])
    if report.violating_edges:
        _print_section("EDGES MATCHING NO EDGE TYPE", [_describe(edge) for edge in report.violating_edges])
    if report.incoming_violations:
        _print_cardinality("INCOMING CARDINALITY VIOLATIONS", report.incoming_violations)
    if report.outgoing_violations:
        _print_cardinality("OUTGOING CARDINALITY VIOLATIONS", report.outgoing_violations)

    print(f"Took {report.elapsed_ms:.0f} ms")


def _describe(element) -> str:
    properties = ", ".join(f"{key}: {value!r}" for key, value in element.properties.items())
    return f"{element} {{{properties}}}" if properties else str(element)


def _print_section(title: str, lines: List[str], color: str = Colors.RED) -> None:
    print(f"{Colors.BOLD}{color}{title} ({len(lines)}){Colors.RESET}")
    print(f"{'-'*100}")
    for line in lines:
        print(f"  ✗ {line}")
    print()


def _print_cardinality(title: str, violations: List[CardinalityViolation]) -> None:
    print(f"{Colors.BOLD}{Colors.RED}{title} ({len(violations)}){Colors.RESET}")
    print(f"{'-'*100}")
    print(f"{'Node':<30} {'Edge type':<45} {'Count':<8} {'Bounds':<10}")
    print(f"{'-'*100}")
    for violation in violations:
        print(f"{str(violation.node):<30} {str(violation.edge_type):<45} {violation.count:<8} {str(violation.bounds):<10}")
    print()


def generate_json_report(report: ValidationReport, output_path: Path) -> None:
    """
    Write the report as JSON.

    Args:
        report: ValidationReport to serialize
        output_path: Path to write the JSON file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(report.to_dict(), f, indent=2)

    print(f"\n{Colors.GREEN}✓ JSON report saved to: {output_path}{Colors.RESET}")
