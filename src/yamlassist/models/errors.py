"""Structured lint records and the engine's exception types."""

from __future__ import annotations

from pydantic import BaseModel


class LintError(BaseModel):
    """A schema violation located in root-document coordinates (0-based)."""

    start_row: int
    start_column: int
    end_row: int
    end_column: int
    message: str
    path: str | None = None
    code: str = "SCHEMA_VIOLATION"
    severity: str = "error"


class DocumentStructureError(ValueError):
    """Raised when a document's cell structure cannot be mapped safely.

    For example a front matter block that is opened with ``---`` but never
    closed: positions after it cannot be attributed to any cell.
    """

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        super().__init__(message)


class UnknownSchemaError(KeyError):
    """Raised when a schema (or its validator) is not registered."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.schema_name = name
        self.available = available
        super().__init__(f"Unknown schema '{name}'. Available: {', '.join(available)}")
