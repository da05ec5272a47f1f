"""
Tests for type-tag inference, spec parsing and cardinality bounds.
"""

import datetime

import pytest
from neo4j.spatial import CartesianPoint
from neo4j.time import Date, DateTime, Duration, Time

from db.schema import (
    RESERVED_KEYS,
    Cardinality,
    PropertySpec,
    TypeTag,
    ValueType,
    infer_type_tag,
    infer_value_type,
    parse_cardinality,
    parse_property_specs,
    parse_value_type,
)


@pytest.mark.parametrize("value, expected", [
    ("Rose", TypeTag.STRING),
    (42, TypeTag.INTEGER),
    (4.2, TypeTag.FLOAT),
    (True, TypeTag.BOOLEAN),
    (False, TypeTag.BOOLEAN),
    (datetime.date(2022, 2, 27), TypeTag.DATE),
    (datetime.datetime(2022, 5, 30, 13, 37, 1), TypeTag.LOCAL_DATETIME),
    (datetime.datetime(2022, 5, 30, 13, 37, 1, tzinfo=datetime.timezone.utc), TypeTag.ZONED_DATETIME),
    (datetime.time(13, 37), TypeTag.LOCAL_TIME),
    (datetime.time(13, 37, tzinfo=datetime.timezone.utc), TypeTag.ZONED_TIME),
    (datetime.timedelta(days=1), TypeTag.DURATION),
    (Date(2022, 2, 27), TypeTag.DATE),
    (DateTime(2022, 5, 30, 13, 37, 1), TypeTag.LOCAL_DATETIME),
    (DateTime.from_native(datetime.datetime(2022, 5, 30, 13, 37, 1, tzinfo=datetime.timezone.utc)),
     TypeTag.ZONED_DATETIME),
    (Time(13, 37, 0), TypeTag.LOCAL_TIME),
    (Duration(days=3), TypeTag.DURATION),
    (CartesianPoint((1.0, 2.0)), TypeTag.POINT),
])
def test_infer_type_tag(value, expected):
    assert infer_type_tag(value) == expected


def test_unknown_values_have_no_tag():
    assert infer_type_tag(object()) is None
    assert infer_type_tag(None) is None
    assert infer_value_type({"nested": "map"}) is None


def test_infer_list_types():
    assert infer_value_type(["a", "b"]) == ValueType(TypeTag.LIST, TypeTag.STRING)
    assert infer_value_type([1, 2]) == ValueType(TypeTag.LIST, TypeTag.INTEGER)
    assert infer_value_type([]) == ValueType(TypeTag.LIST)
    # Mixed lists cannot be stored in Neo4j and never match
    assert infer_value_type([1, "a"]) is None
    assert infer_value_type([[1]]) is None


@pytest.mark.parametrize("raw, expected", [
    ("STRING", ValueType(TypeTag.STRING)),
    ("string", ValueType(TypeTag.STRING)),
    ("INTEGER", ValueType(TypeTag.INTEGER)),
    ("Long", ValueType(TypeTag.INTEGER)),
    ("DOUBLE", ValueType(TypeTag.FLOAT)),
    ("bool", ValueType(TypeTag.BOOLEAN)),
    ("ZonedDateTime", ValueType(TypeTag.ZONED_DATETIME)),
    ("ZONED DATETIME", ValueType(TypeTag.ZONED_DATETIME)),
    ("LOCAL_DATETIME", ValueType(TypeTag.LOCAL_DATETIME)),
    ("INTEGER NOT NULL", ValueType(TypeTag.INTEGER)),
    ("LIST", ValueType(TypeTag.LIST)),
    ("LIST<STRING>", ValueType(TypeTag.LIST, TypeTag.STRING)),
    ("LIST<INTEGER NOT NULL> NOT NULL", ValueType(TypeTag.LIST, TypeTag.INTEGER)),
])
def test_parse_value_type(raw, expected):
    assert parse_value_type(raw) == expected


@pytest.mark.parametrize("raw", ["", "STRNG", "LIST<MAP>", "MAP", "INTEGER??"])
def test_parse_value_type_rejects_unknown_tags(raw):
    assert parse_value_type(raw) is None


def test_property_spec_optional_marker():
    spec = PropertySpec.parse("gender", "STRING?")
    assert spec.optional
    assert spec.value_type == ValueType(TypeTag.STRING)
    assert spec.accepts("F")
    assert not spec.accepts(2)

    mandatory = PropertySpec.parse("name", "STRING")
    assert not mandatory.optional


def test_malformed_property_spec_never_accepts():
    spec = PropertySpec.parse("age", "NUMBER")
    assert spec.malformed
    assert not spec.accepts(1)
    assert not spec.accepts("1")

    not_a_string = PropertySpec.parse("age", 7)
    assert not_a_string.malformed


def test_integer_is_not_float():
    assert not PropertySpec.parse("score", "FLOAT").accepts(1)
    assert not PropertySpec.parse("score", "INTEGER").accepts(1.0)
    assert not PropertySpec.parse("flag", "INTEGER").accepts(True)


def test_list_spec_accepts_empty_list():
    spec = PropertySpec.parse("tags", "LIST<STRING>")
    assert spec.accepts([])
    assert spec.accepts(["a"])
    assert not spec.accepts([1])
    assert not spec.accepts("a")


def test_parse_property_specs_skips_reserved_keys_and_records_issues():
    issues = []
    specs = parse_property_specs(
        "[:CREATED]",
        {"at": "STRING", "targetIncomingMin": 1, "__outMax": 2, "junk": "BLOB"},
        issues,
        reserved=RESERVED_KEYS,
    )
    assert list(specs) == ["at", "junk"]
    assert len(issues) == 1
    assert issues[0].key == "junk"
    assert issues[0].owner == "[:CREATED]"


def test_parse_cardinality():
    issues = []
    bounds = parse_cardinality("[:CREATED]", {
        "targetIncomingMin": 1,
        "targetIncomingMax": 1,
        "sourceOutgoingMax": 3,
    }, issues)
    assert bounds["incoming"] == Cardinality(1, 1)
    assert bounds["outgoing"] == Cardinality(0, 3)
    assert issues == []


def test_parse_cardinality_short_keys():
    issues = []
    bounds = parse_cardinality("[:CREATED]", {"__inMin": 1, "__outMax": 1}, issues)
    assert bounds["incoming"] == Cardinality(1, None)
    assert bounds["outgoing"] == Cardinality(0, 1)


@pytest.mark.parametrize("raw", ["1", 1.5, -1, True])
def test_parse_cardinality_rejects_bad_bounds(raw):
    issues = []
    bounds = parse_cardinality("[:CREATED]", {"targetIncomingMin": raw}, issues)
    assert bounds["incoming"].is_default
    assert len(issues) == 1


def test_cardinality_contains():
    assert Cardinality().is_default
    assert Cardinality().contains(0)
    assert Cardinality().contains(10_000)
    assert not Cardinality(1, None).is_default
    assert not Cardinality(1, 1).contains(0)
    assert Cardinality(1, 1).contains(1)
    assert not Cardinality(1, 1).contains(2)
    assert str(Cardinality(1, None)) == "[1..*]"
