"""Tests for shared value types and settings."""

from __future__ import annotations

from yamlassist.models.completion import Completion, CompletionKind, CompletionResult
from yamlassist.models.errors import DocumentStructureError, LintError, UnknownSchemaError
from yamlassist.settings import Settings


class TestCompletion:
    def test_source_schema_not_serialized(self) -> None:
        completion = Completion(
            value="toc: ",
            kind=CompletionKind.KEY,
            display="toc",
            source_schema={"type": "boolean"},
        )
        dumped = completion.model_dump()
        assert "source_schema" not in dumped
        assert dumped["kind"] == "key"

    def test_result_defaults(self) -> None:
        result = CompletionResult(token="ec")
        assert result.completions == []
        assert result.cacheable


class TestErrors:
    def test_lint_error_defaults(self) -> None:
        error = LintError(start_row=0, start_column=0, end_row=0, end_column=1, message="bad")
        assert error.code == "SCHEMA_VIOLATION"
        assert error.severity == "error"
        assert error.path is None

    def test_document_structure_error_is_value_error(self) -> None:
        error = DocumentStructureError("unclosed", line=4)
        assert isinstance(error, ValueError)
        assert error.line == 4

    def test_unknown_schema_lists_available(self) -> None:
        error = UnknownSchemaError("nope", available=["a", "b"])
        assert "Available: a, b" in str(error)


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings(port=None, api_server_port=8000)
        assert settings.max_recovery_deletions == 256
        assert settings.effective_port == 8000

    def test_port_takes_precedence(self) -> None:
        assert Settings(port=9090).effective_port == 9090
