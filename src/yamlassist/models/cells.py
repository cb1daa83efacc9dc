"""Typed content cells produced by the document segmenter."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from yamlassist.text.mapped import MappedText


class CellKind(StrEnum):
    FRONT_MATTER = "front_matter"
    PROSE = "prose"
    CODE = "code"
    MATH = "math"


@dataclass(frozen=True)
class Cell:
    """A contiguous region of a document.

    ``start_line``/``end_line`` delimit the cell in the root document
    (end exclusive) and include the fences of code cells, while ``source``
    holds only the cell body.  ``language`` is set for code cells only.
    """

    kind: CellKind
    source: MappedText
    start_line: int
    end_line: int
    language: str | None = None

    def __post_init__(self) -> None:
        if (self.kind is CellKind.CODE) != (self.language is not None):
            raise ValueError("language must be set for code cells and only for code cells")

    @classmethod
    def code(cls, language: str, source: MappedText, start_line: int, end_line: int) -> Cell:
        return cls(CellKind.CODE, source, start_line, end_line, language)

    def contains_line(self, row: int) -> bool:
        return self.start_line <= row < self.end_line

    @property
    def content_start_line(self) -> int:
        """Root-document row of the first character of ``source``."""
        source, offset = self.source.locate(0)
        return source.position(offset)[0]
