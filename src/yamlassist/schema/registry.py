"""Schema registry: named, immutable schema definitions loaded once per process."""

from __future__ import annotations

import copy
import logging
import threading
from dataclasses import dataclass
from importlib.resources import files
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML

from yamlassist.models.errors import UnknownSchemaError

logger = logging.getLogger("yamlassist.schema")

FRONT_MATTER = "front-matter"
PROJECT_CONFIG = "project-config"
CELL_OPTIONS_PREFIX = "cell-options/"


@dataclass(frozen=True, eq=False)
class Schema:
    """A named JSON Schema definition.

    Schemas are shared read-only between requests; ``definition`` must not be
    mutated once registered.  Identity is the name.
    """

    name: str
    definition: dict[str, Any]


class SchemaRegistry:
    """Registry of schemas and of the option schemas of code-cell languages.

    Thread-safe via ``threading.Lock``.  Registering a name twice is a no-op
    that returns the schema registered first.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._schemas: dict[str, Schema] = {}
        self._comment_chars: dict[str, str] = {}

    # -- registration --------------------------------------------------------

    def register(self, name: str, definition: dict[str, Any]) -> Schema:
        """Register *definition* under *name* (idempotent)."""
        with self._lock:
            existing = self._schemas.get(name)
            if existing is not None:
                return existing
            schema = Schema(name=name, definition=copy.deepcopy(definition))
            self._schemas[name] = schema
        logger.debug("registered schema '%s'", name)
        return schema

    def register_language(
        self, language: str, comment_chars: str, definition: dict[str, Any]
    ) -> Schema:
        """Register the cell-option schema of *language*."""
        schema = self.register(f"{CELL_OPTIONS_PREFIX}{language}", definition)
        with self._lock:
            self._comment_chars.setdefault(language, comment_chars)
        return schema

    def load_builtin(self) -> None:
        """Register the schemas shipped with the package."""
        builtin = files("yamlassist.schema").joinpath("builtin")
        for entry in sorted(builtin.iterdir(), key=lambda e: e.name):
            if entry.name.endswith((".yml", ".yaml")):
                self._load_text(entry.read_text(encoding="utf-8"), entry.name)

    def load_directory(self, root: Path) -> None:
        """Register every ``*.yml`` / ``*.yaml`` schema file under *root*."""
        for path in sorted([*root.glob("*.yml"), *root.glob("*.yaml")]):
            self._load_text(path.read_text(encoding="utf-8"), str(path))

    def _load_text(self, content: str, filename: str) -> None:
        """Register one schema file.

        A file is a mapping with a ``name`` and a ``schema``; an optional
        ``languages`` mapping (language -> comment characters) registers the
        schema as the cell-option schema of each language instead.
        """
        data = YAML(typ="safe").load(content)
        if not isinstance(data, dict) or "name" not in data or "schema" not in data:
            raise ValueError(f"{filename}: schema files need 'name' and 'schema' keys")
        definition = data["schema"]
        languages = data.get("languages")
        if languages:
            for language, comment_chars in languages.items():
                self.register_language(str(language), str(comment_chars), definition)
        else:
            self.register(str(data["name"]), definition)
        logger.info("loaded schema file %s", filename)

    # -- lookup --------------------------------------------------------------

    def get(self, name: str) -> Schema:
        with self._lock:
            schema = self._schemas.get(name)
        if schema is None:
            raise UnknownSchemaError(name, available=self.names())
        return schema

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._schemas

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._schemas)

    def languages(self) -> list[str]:
        """Languages that have a cell-option schema."""
        with self._lock:
            return sorted(self._comment_chars)

    def language_schema(self, language: str) -> Schema | None:
        with self._lock:
            return self._schemas.get(f"{CELL_OPTIONS_PREFIX}{language}")

    def comment_chars(self, language: str) -> str | None:
        with self._lock:
            return self._comment_chars.get(language)


def default_registry(schema_dir: Path | None = None) -> SchemaRegistry:
    """Build a registry holding the built-in schemas (plus *schema_dir*)."""
    registry = SchemaRegistry()
    registry.load_builtin()
    if schema_dir is not None:
        registry.load_directory(schema_dir)
    return registry
