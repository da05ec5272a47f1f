"""
Schema graph snapshot: node types, edge types and their property specs.

Schema nodes declare properties as type-tag strings ("STRING", "INTEGER",
"ZonedDateTime", ...). A trailing "?" marks the property optional. Schema
edges may additionally carry cardinality bounds under reserved keys.
"""

import datetime
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

from neo4j.spatial import Point
from neo4j.time import Date, DateTime, Duration, Time

from db.errors import MalformedTypeSpec


OPTIONAL_MARKER = "?"


class TypeTag(Enum):
    """Primitive classification of a property value."""
    STRING = "STRING"
    INTEGER = "INTEGER"
    FLOAT = "FLOAT"
    BOOLEAN = "BOOLEAN"
    DATE = "DATE"
    LOCAL_TIME = "LOCAL TIME"
    ZONED_TIME = "ZONED TIME"
    LOCAL_DATETIME = "LOCAL DATETIME"
    ZONED_DATETIME = "ZONED DATETIME"
    DURATION = "DURATION"
    POINT = "POINT"
    LIST = "LIST"


# Spec strings are compared upper-cased with spaces and underscores removed
_TAG_ALIASES: Dict[str, TypeTag] = {
    "STRING": TypeTag.STRING,
    "INTEGER": TypeTag.INTEGER,
    "INT": TypeTag.INTEGER,
    "LONG": TypeTag.INTEGER,
    "FLOAT": TypeTag.FLOAT,
    "DOUBLE": TypeTag.FLOAT,
    "BOOLEAN": TypeTag.BOOLEAN,
    "BOOL": TypeTag.BOOLEAN,
    "DATE": TypeTag.DATE,
    "LOCALTIME": TypeTag.LOCAL_TIME,
    "TIME": TypeTag.ZONED_TIME,
    "ZONEDTIME": TypeTag.ZONED_TIME,
    "LOCALDATETIME": TypeTag.LOCAL_DATETIME,
    "DATETIME": TypeTag.ZONED_DATETIME,
    "ZONEDDATETIME": TypeTag.ZONED_DATETIME,
    "DURATION": TypeTag.DURATION,
    "POINT": TypeTag.POINT,
}

_LIST_PATTERN = re.compile(r"^LIST(?:<(?P<item>[A-Z]+)>)?$")

# Cardinality bounds live on schema edges under these keys. The double
# underscore forms are the short names used by older schema graphs.
CARDINALITY_KEYS: Dict[str, Tuple[str, str]] = {
    "sourceOutgoingMin": ("outgoing", "min"),
    "sourceOutgoingMax": ("outgoing", "max"),
    "targetIncomingMin": ("incoming", "min"),
    "targetIncomingMax": ("incoming", "max"),
    "__outMin": ("outgoing", "min"),
    "__outMax": ("outgoing", "max"),
    "__inMin": ("incoming", "min"),
    "__inMax": ("incoming", "max"),
}

RESERVED_KEYS: FrozenSet[str] = frozenset(CARDINALITY_KEYS)


@dataclass(frozen=True)
class ValueType:
    """A type tag, with an element tag when the tag is LIST."""
    tag: TypeTag
    item: Optional[TypeTag] = None

    def accepts(self, value: Any) -> bool:
        """
        Check whether a runtime value has this type.

        An empty list is accepted by every list type, and a bare LIST
        accepts any homogeneous list.
        """
        actual = infer_value_type(value)
        if actual is None or actual.tag != self.tag:
            return False
        if self.tag is TypeTag.LIST:
            return self.item is None or actual.item is None or actual.item == self.item
        return True

    def __str__(self) -> str:
        if self.tag is TypeTag.LIST and self.item is not None:
            return f"LIST<{self.item.value}>"
        return self.tag.value


def infer_type_tag(value: Any) -> Optional[TypeTag]:
    """
    Classify a single non-list value.

    Args:
        value: A property value as returned by the source

    Returns:
        The TypeTag, or None if the value is of no known kind
    """
    # bool must be tested before int
    if isinstance(value, bool):
        return TypeTag.BOOLEAN
    if isinstance(value, int):
        return TypeTag.INTEGER
    if isinstance(value, float):
        return TypeTag.FLOAT
    if isinstance(value, str):
        return TypeTag.STRING
    # datetime.datetime subclasses datetime.date
    if isinstance(value, (DateTime, datetime.datetime)):
        return TypeTag.LOCAL_DATETIME if value.tzinfo is None else TypeTag.ZONED_DATETIME
    if isinstance(value, (Date, datetime.date)):
        return TypeTag.DATE
    if isinstance(value, (Time, datetime.time)):
        return TypeTag.LOCAL_TIME if value.tzinfo is None else TypeTag.ZONED_TIME
    if isinstance(value, (Duration, datetime.timedelta)):
        return TypeTag.DURATION
    if isinstance(value, Point):
        return TypeTag.POINT
    return None


def infer_value_type(value: Any) -> Optional[ValueType]:
    """
    Classify a property value, lists included.

    Heterogeneous lists and nested lists are unclassifiable and yield None.
    """
    if isinstance(value, (list, tuple)):
        item_tags = {infer_type_tag(item) for item in value}
        if not item_tags:
            return ValueType(TypeTag.LIST)
        if len(item_tags) != 1 or None in item_tags:
            return None
        return ValueType(TypeTag.LIST, item_tags.pop())
    tag = infer_type_tag(value)
    if tag is None:
        return None
    return ValueType(tag)


def parse_value_type(raw: str) -> Optional[ValueType]:
    """
    Parse a type-tag string without its optional marker.

    Args:
        raw: e.g. "STRING", "ZonedDateTime", "LIST<INTEGER NOT NULL>"

    Returns:
        The ValueType, or None if the string is not a known tag
    """
    normalized = re.sub(r"[\s_]", "", raw).upper().replace("NOTNULL", "")
    if normalized in _TAG_ALIASES:
        return ValueType(_TAG_ALIASES[normalized])
    match = _LIST_PATTERN.match(normalized)
    if not match:
        return None
    item = match.group("item")
    if item is None:
        return ValueType(TypeTag.LIST)
    if item not in _TAG_ALIASES:
        return None
    return ValueType(TypeTag.LIST, _TAG_ALIASES[item])


@dataclass(frozen=True)
class PropertySpec:
    """A declared property: its type and whether it may be omitted."""
    name: str
    raw: Any
    value_type: Optional[ValueType]
    optional: bool = False

    @classmethod
    def parse(cls, name: str, raw: Any) -> "PropertySpec":
        """Parse a spec value; unrecognized values give an unsatisfiable spec."""
        if not isinstance(raw, str):
            return cls(name=name, raw=raw, value_type=None)
        text = raw.strip()
        optional = text.endswith(OPTIONAL_MARKER)
        if optional:
            text = text[:-len(OPTIONAL_MARKER)]
        return cls(name=name, raw=raw, value_type=parse_value_type(text), optional=optional)

    @property
    def malformed(self) -> bool:
        return self.value_type is None

    def accepts(self, value: Any) -> bool:
        return self.value_type is not None and self.value_type.accepts(value)


@dataclass(frozen=True)
class Cardinality:
    """Inclusive bounds on a count of matching edges. max=None is unbounded."""
    min: int = 0
    max: Optional[int] = None

    @property
    def is_default(self) -> bool:
        return self.min <= 0 and self.max is None

    def contains(self, count: int) -> bool:
        if count < self.min:
            return False
        return self.max is None or count <= self.max

    def __str__(self) -> str:
        upper = "*" if self.max is None else str(self.max)
        return f"[{self.min}..{upper}]"


UNBOUNDED = Cardinality()


@dataclass(frozen=True)
class SchemaNodeType:
    """A node type. `labels` never includes the role tag."""
    id: Any
    labels: FrozenSet[str] = field(default_factory=frozenset, compare=False)
    properties: Mapping[str, PropertySpec] = field(default_factory=dict, compare=False)

    def __str__(self) -> str:
        return "(:" + ":".join(sorted(self.labels)) + ")"


@dataclass(frozen=True)
class SchemaEdgeType:
    """
    An edge type between two node types.

    `source` or `target` is None when the schema edge points at a node
    outside the schema partition; such a type matches nothing.
    """
    id: Any
    type: str = field(compare=False)
    source: Optional[SchemaNodeType] = field(default=None, compare=False)
    target: Optional[SchemaNodeType] = field(default=None, compare=False)
    properties: Mapping[str, PropertySpec] = field(default_factory=dict, compare=False)
    outgoing: Cardinality = field(default=UNBOUNDED, compare=False)
    incoming: Cardinality = field(default=UNBOUNDED, compare=False)

    def __str__(self) -> str:
        source = self.source if self.source is not None else "(?)"
        target = self.target if self.target is not None else "(?)"
        return f"{source}-[:{self.type}]->{target}"


@dataclass(frozen=True)
class Schema:
    """All node and edge types, in declaration order."""
    node_types: Tuple[SchemaNodeType, ...] = ()
    edge_types: Tuple[SchemaEdgeType, ...] = ()
    issues: Tuple[MalformedTypeSpec, ...] = ()


def parse_property_specs(owner: str, raw_specs: Mapping[str, Any],
                         issues: List[MalformedTypeSpec],
                         reserved: FrozenSet[str] = frozenset()) -> Dict[str, PropertySpec]:
    """
    Parse a schema element's property map.

    Args:
        owner: Display name of the schema element, used in issues
        raw_specs: property name -> spec string
        issues: Malformed specs are appended here
        reserved: Keys to leave out entirely

    Returns:
        property name -> PropertySpec, in the source's key order
    """
    specs = {}
    for name, raw in raw_specs.items():
        if name in reserved:
            continue
        spec = PropertySpec.parse(name, raw)
        if spec.malformed:
            issues.append(MalformedTypeSpec(owner, name, raw))
        specs[name] = spec
    return specs


def parse_cardinality(owner: str, raw_specs: Mapping[str, Any],
                      issues: List[MalformedTypeSpec]) -> Dict[str, Cardinality]:
    """
    Read the reserved cardinality keys of a schema edge.

    Returns:
        {"outgoing": Cardinality, "incoming": Cardinality}
    """
    bounds: Dict[str, Dict[str, Optional[int]]] = {
        "outgoing": {"min": 0, "max": None},
        "incoming": {"min": 0, "max": None},
    }
    for key, (direction, end) in CARDINALITY_KEYS.items():
        if key not in raw_specs:
            continue
        raw = raw_specs[key]
        if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
            issues.append(MalformedTypeSpec(owner, key, raw))
            continue
        bounds[direction][end] = raw
    return {direction: Cardinality(**values) for direction, values in bounds.items()}
