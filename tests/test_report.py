"""
Tests for validation reports: the composite run, is_conformant, and the
console and JSON renderings.
"""

import datetime
import json

from conformance import ValidationReport, is_conformant, validate
from conformance.report_generator import generate_console_report, generate_json_report
from db.loader import load_snapshot
from db.models import Node


def build_blog(source, creators_per_post=1):
    user = source.add_schema_node("User", name="STRING", joined="DATE?")
    post = source.add_schema_node("Post", content="STRING")
    source.add_schema_edge(user, "CREATED", post, targetIncomingMin=1, targetIncomingMax=1)

    post_id = source.add_data_node("Post", content="Hello")
    for i in range(creators_per_post):
        author = source.add_data_node("User", name=f"user-{i}", joined=datetime.date(2022, 1, 1))
        source.add_data_edge(author, "CREATED", post_id)
    return post_id


def test_conformant_graph(source):
    build_blog(source)
    graph, schema = load_snapshot(source)

    report = validate(graph, schema)
    assert report.is_conformant
    assert report.violation_count == 0
    assert is_conformant(graph, schema)


def test_not_conformant_graph(source):
    post = build_blog(source, creators_per_post=2)
    stray = source.add_data_node("Comment")
    graph, schema = load_snapshot(source)

    report = validate(graph, schema)
    assert not report.is_conformant
    assert [node.id for node in report.violating_nodes] == [stray]
    assert [v.node.id for v in report.incoming_violations] == [post]
    assert report.violation_count == 2
    assert not is_conformant(graph, schema)


def test_is_conformant_catches_cardinality_only(source):
    build_blog(source, creators_per_post=0)
    graph, schema = load_snapshot(source)

    assert validate(graph, schema).violating_nodes == []
    assert not is_conformant(graph, schema)


def test_is_conformant_agrees_with_validate(source):
    build_blog(source, creators_per_post=3)
    graph, schema = load_snapshot(source)
    assert is_conformant(graph, schema) == validate(graph, schema).is_conformant


def test_report_to_dict(source):
    post = build_blog(source, creators_per_post=2)
    source.add_schema_node("Tag", name="TEXT")
    graph, schema = load_snapshot(source)

    result = validate(graph, schema).to_dict()
    assert result["conformant"] is False
    assert result["incoming_violations"] == [{
        "node": post,
        "edge_type": "(:User)-[:CREATED]->(:Post)",
        "direction": "incoming",
        "count": 2,
        "min": 1,
        "max": 1,
    }]
    assert result["schema_issues"] == ["(:Tag).name: unrecognized spec 'TEXT'"]
    assert result["summary"]["total_violations"] == 1
    assert result["summary"]["nodes_with_cardinality_violations"] == 1
    assert result["summary"]["schema_issues"] == 1


def test_json_report(source, tmp_path):
    build_blog(source)
    stray = source.add_data_node("User", name="Rose", joined="yesterday")
    graph, schema = load_snapshot(source)

    output = tmp_path / "reports" / "conformance.json"
    generate_json_report(validate(graph, schema), output)

    written = json.loads(output.read_text(encoding="utf-8"))
    assert written["violating_nodes"] == [
        {"id": stray, "labels": ["User"], "properties": {"name": "Rose", "joined": "yesterday"}}
    ]


def test_json_report_serializes_temporal_values(tmp_path):
    node = Node(1, frozenset({"User"}), {"joined": datetime.date(2022, 1, 1)})
    report = ValidationReport(timestamp=datetime.datetime(2024, 1, 1), violating_nodes=[node])

    output = tmp_path / "report.json"
    generate_json_report(report, output)
    written = json.loads(output.read_text(encoding="utf-8"))
    assert written["violating_nodes"][0]["properties"] == {"joined": "2022-01-01"}


def test_console_report(source, capsys):
    build_blog(source, creators_per_post=0)
    graph, schema = load_snapshot(source)

    generate_console_report(validate(graph, schema))
    output = capsys.readouterr().out
    assert "GRAPH CONFORMANCE REPORT" in output
    assert "INCOMING CARDINALITY VIOLATIONS (1)" in output
    assert "does not conform to schema ❌" in output
    assert "Took" in output


def test_console_report_conformant(capsys):
    generate_console_report(ValidationReport(timestamp=datetime.datetime.now()))
    output = capsys.readouterr().out
    assert "All graph elements conform to schema ✅" in output
