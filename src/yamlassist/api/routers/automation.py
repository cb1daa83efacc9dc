"""Editor automation endpoints: POST /lint, POST /completions, POST /validate."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from yamlassist.api.deps import get_engine
from yamlassist.api.schemas import (
    AutomationRequestBody,
    CompletionResponse,
    LintResponse,
    ValidateRequest,
)
from yamlassist.models.errors import DocumentStructureError
from yamlassist.service.engine import AutomationEngine

router = APIRouter()


@router.post("/lint", response_model=LintResponse)
async def lint(
    body: AutomationRequestBody,
    engine: AutomationEngine = Depends(get_engine),  # noqa: B008
) -> LintResponse:
    """Lint the YAML of a buffer against its schemas."""
    try:
        errors = await engine.lint(body.to_request())
    except DocumentStructureError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from None
    return LintResponse(errors=errors)


@router.post("/completions", response_model=CompletionResponse)
async def completions(
    body: AutomationRequestBody,
    engine: AutomationEngine = Depends(get_engine),  # noqa: B008
) -> CompletionResponse:
    """Completions for the token under the cursor."""
    if body.position is None:
        raise HTTPException(status_code=422, detail="Completions need a cursor position")
    try:
        result = await engine.completions(body.to_request())
    except DocumentStructureError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from None
    if result is None:
        return CompletionResponse(available=False)
    return CompletionResponse(
        available=True,
        token=result.token,
        completions=result.completions,
        cacheable=result.cacheable,
    )


@router.post("/validate", response_model=LintResponse)
async def validate(
    body: ValidateRequest,
    engine: AutomationEngine = Depends(get_engine),  # noqa: B008
) -> LintResponse:
    """Validate front matter and cell options of a whole document."""
    try:
        errors = await engine.validate_document(body.markdown, path=body.path)
    except DocumentStructureError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from None
    return LintResponse(errors=errors)
