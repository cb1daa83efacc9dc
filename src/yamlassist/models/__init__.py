"""Value types shared across the yamlassist engine."""

from yamlassist.models.cells import Cell, CellKind
from yamlassist.models.completion import Completion, CompletionKind, CompletionResult
from yamlassist.models.errors import DocumentStructureError, LintError, UnknownSchemaError

__all__ = [
    "Cell",
    "CellKind",
    "Completion",
    "CompletionKind",
    "CompletionResult",
    "DocumentStructureError",
    "LintError",
    "UnknownSchemaError",
]
