"""API request/response Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from yamlassist.models.completion import Completion
from yamlassist.models.errors import LintError
from yamlassist.parser.recovery import Position
from yamlassist.service.engine import AutomationRequest, FileType


class CursorPosition(BaseModel):
    """0-based cursor position in the whole document."""

    row: int = Field(ge=0)
    column: int = Field(ge=0)


class AutomationRequestBody(BaseModel):
    """Request body for POST /lint and POST /completions."""

    filetype: FileType = FileType.MARKDOWN
    code: str = Field(description="Full contents of the editor buffer")
    position: CursorPosition | None = None
    line: str | None = Field(
        default=None, description="Cursor line up to the cursor; derived from code if omitted"
    )
    path: str = ""
    language: str | None = Field(
        default=None,
        description="Script language, or the one code-cell language of a markdown document",
    )

    def to_request(self) -> AutomationRequest:
        position = (
            Position(self.position.row, self.position.column) if self.position else None
        )
        return AutomationRequest(
            filetype=self.filetype,
            code=self.code,
            position=position,
            line=self.line,
            path=self.path,
            language=self.language,
        )


class LintResponse(BaseModel):
    """Response body for POST /lint and POST /validate."""

    errors: list[LintError] = []


class CompletionResponse(BaseModel):
    """Response body for POST /completions."""

    available: bool
    token: str = ""
    completions: list[Completion] = []
    cacheable: bool = False


class ValidateRequest(BaseModel):
    """Request body for POST /validate."""

    markdown: str = Field(description="Document to validate")
    path: str = ""


class SchemaListResponse(BaseModel):
    """Response for GET /schemas."""

    schemas: list[str] = []
    languages: list[str] = []


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = ""
