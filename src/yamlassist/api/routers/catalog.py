"""Schema listing endpoint: GET /schemas."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from yamlassist.api.deps import get_engine
from yamlassist.api.schemas import SchemaListResponse
from yamlassist.service.engine import AutomationEngine

router = APIRouter()


@router.get("", response_model=SchemaListResponse)
async def list_schemas(
    engine: AutomationEngine = Depends(get_engine),  # noqa: B008
) -> SchemaListResponse:
    """List registered schemas and the languages with cell-option schemas."""
    return SchemaListResponse(
        schemas=engine.registry.names(),
        languages=engine.registry.languages(),
    )
