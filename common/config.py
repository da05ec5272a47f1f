"""
Configuration for conformance runs.

Settings come from environment variables. validate_config() checks a
configuration for the chosen source and returns readable error messages.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from common.logger import logger

SOURCES = ("neo4j", "yaml")
_TRUE_VALUES = {"1", "true", "yes"}


@dataclass(frozen=True)
class ConformanceConfig:
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_username: str = "neo4j"
    neo4j_password: Optional[str] = None
    neo4j_database: Optional[str] = None
    data_label: str = "Data"
    schema_label: str = "Schema"
    strict_types: bool = False

    @classmethod
    def from_env(cls) -> "ConformanceConfig":
        return cls(
            neo4j_uri=os.getenv("NEO4J_URI", "bolt://localhost:7687"),
            neo4j_username=os.getenv("NEO4J_USERNAME", "neo4j"),
            neo4j_password=os.getenv("NEO4J_PASSWORD"),
            neo4j_database=os.getenv("NEO4J_DATABASE") or None,
            data_label=os.getenv("CONFORMANCE_DATA_LABEL", "Data"),
            schema_label=os.getenv("CONFORMANCE_SCHEMA_LABEL", "Schema"),
            strict_types=os.getenv("CONFORMANCE_STRICT_TYPES", "false").lower() in _TRUE_VALUES,
        )


def validate_labels(config: ConformanceConfig) -> List[str]:
    """
    Validate the role labels.

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []
    for field_name in ("data_label", "schema_label"):
        label = getattr(config, field_name)
        if not label or not label.strip():
            errors.append(f"{field_name}: Must be a non-empty string")
        elif "`" in label:
            errors.append(f"{field_name}: Backticks are not allowed in labels, got '{label}'")
    if config.data_label == config.schema_label:
        errors.append(f"data_label and schema_label must differ, both are '{config.data_label}'")
    return errors


def validate_config(config: ConformanceConfig, source: str = "neo4j", fixture_path: Optional[str] = None) -> List[str]:
    """
    Validate a configuration for the chosen source.

    Args:
        config: Configuration to check
        source: "neo4j" or "yaml"
        fixture_path: Fixture file, required for the yaml source

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = validate_labels(config)

    if source not in SOURCES:
        errors.append(f"source: Invalid source '{source}'. Must be one of: {', '.join(SOURCES)}")
        return errors

    if source == "neo4j":
        if not config.neo4j_password:
            errors.append("No password supplied, please set the environment variable NEO4J_PASSWORD")
        if not config.neo4j_uri.strip():
            errors.append("NEO4J_URI must be a non-empty string")
    else:
        if not fixture_path:
            errors.append("A fixture file is required for the yaml source")
        elif not Path(fixture_path).exists():
            errors.append(f"Fixture file not found: {fixture_path}")

    return errors


def check_config(config: ConformanceConfig, source: str = "neo4j", fixture_path: Optional[str] = None) -> bool:
    """
    Validate configuration and log results.

    Returns:
        True if valid, False if invalid
    """
    logger.info(f"Validating {source} configuration")
    errors = validate_config(config, source, fixture_path)

    if errors:
        logger.error(f"Configuration validation failed with {len(errors)} error(s):")
        for error in errors:
            logger.error(f"  ✗ {error}")
        return False

    logger.info("✓ Configuration validated successfully")
    return True
