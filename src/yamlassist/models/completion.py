"""Completion candidates returned to editors."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class CompletionKind(StrEnum):
    KEY = "key"
    VALUE = "value"


class Completion(BaseModel):
    """A single completion candidate.

    ``value`` is the text inserted on accept, ``display`` the label shown in
    the completion popup.
    """

    value: str
    kind: CompletionKind
    display: str
    description: str = ""
    suggest_on_accept: bool = False
    source_schema: dict[str, Any] | None = Field(default=None, exclude=True)


class CompletionResult(BaseModel):
    """Completions for the token under the cursor."""

    token: str
    completions: list[Completion] = []
    cacheable: bool = True
