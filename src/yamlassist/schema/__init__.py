"""Schema registry, navigation and validation."""

from yamlassist.schema.navigator import navigate_schema, schema_completions, schema_type
from yamlassist.schema.registry import (
    FRONT_MATTER,
    PROJECT_CONFIG,
    Schema,
    SchemaRegistry,
    default_registry,
)
from yamlassist.schema.validator import SchemaValidator, ValidatorQueue

__all__ = [
    "FRONT_MATTER",
    "PROJECT_CONFIG",
    "Schema",
    "SchemaRegistry",
    "SchemaValidator",
    "ValidatorQueue",
    "default_registry",
    "navigate_schema",
    "schema_completions",
    "schema_type",
]
