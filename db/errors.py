"""
Errors raised while loading graph snapshots.

Data-shape mismatches are never errors; they are validation output.
"""


class ConformanceError(Exception):
    """Base class for conformance engine errors."""


class StorageUnavailable(ConformanceError):
    """The graph source could not be enumerated."""


class MalformedTypeSpec(ConformanceError):
    """A schema property spec or cardinality bound could not be parsed."""

    def __init__(self, owner: str, key: str, raw_value):
        self.owner = owner
        self.key = key
        self.raw_value = raw_value
        super().__init__(f"{owner}.{key}: unrecognized spec {raw_value!r}")
