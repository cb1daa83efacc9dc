"""Break a hybrid markdown document into front matter, prose, code and math cells.

The segmenter is a line-oriented state machine.  Cell sources are mapped
slices of the input, so every position inside a cell can be traced back to
the input document.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum, auto

from yamlassist.models.cells import Cell, CellKind
from yamlassist.text.mapped import MappedText, RangedLine, ranged_lines

_YAML_DELIMITER_RE = re.compile(r"^---\s*$")
_END_CODE_RE = re.compile(r"^\s*```+\s*$")
_START_CODE_RE = re.compile(r"^\s*```")
_MATH_START_RE = re.compile(r"^\s*\$\$")
_MATH_END_RE = re.compile(r"\$\$(\s*\{#[\w-]+\})?\s*$")
_LANGUAGE = r"[A-Za-z0-9_]+"


def _start_code_cell_re(language: str | None) -> re.Pattern[str]:
    """Opening fence for a code cell: ```{python} or ```{r, echo=FALSE}.

    The bare ```python form opens a cell only when *language* is requested.
    """
    if language is None:
        return re.compile(r"^\s*```+\s*\{(?P<braced>" + _LANGUAGE + r")(?: *[ ,].*)?\}\s*$")
    lang = re.escape(language)
    return re.compile(
        r"^\s*```+\s*(?:\{(?P<braced>" + lang + r")(?: *[ ,].*)?\}|" + lang + r")\s*$"
    )


class _State(Enum):
    OUTSIDE = auto()
    IN_YAML = auto()
    IN_CODE_CELL = auto()
    IN_MATH = auto()


@dataclass
class _LineBuffer:
    lines: list[tuple[int, RangedLine]] = field(default_factory=list)

    def push(self, row: int, line: RangedLine) -> None:
        self.lines.append((row, line))

    def clear(self) -> None:
        self.lines.clear()


class _Segmenter:
    def __init__(self, source: MappedText, language: str | None) -> None:
        self._source = source
        self._language = language
        self._start_cell_re = _start_code_cell_re(language)
        self._buffer = _LineBuffer()
        self._cells: list[Cell] = []

    def run(self) -> list[Cell]:
        state = _State.OUTSIDE
        in_opaque_code = False
        language: str | None = None
        fence_row = 0

        for row, line in enumerate(ranged_lines(self._source.value)):
            text = line.substring
            if state is _State.IN_CODE_CELL:
                if _END_CODE_RE.match(text):
                    assert language is not None
                    self._flush_code(language, fence_row, row + 1)
                    state = _State.OUTSIDE
                    language = None
                else:
                    self._buffer.push(row, line)
                continue

            if _YAML_DELIMITER_RE.match(text) and not in_opaque_code and state is not _State.IN_MATH:
                if state is _State.IN_YAML:
                    self._buffer.push(row, line)
                    self._flush(CellKind.FRONT_MATTER)
                    state = _State.OUTSIDE
                else:
                    self._flush(CellKind.PROSE)
                    self._buffer.push(row, line)
                    state = _State.IN_YAML
                continue

            if state is _State.IN_YAML:
                self._buffer.push(row, line)
                continue

            if state is _State.IN_MATH:
                self._buffer.push(row, line)
                if _MATH_END_RE.search(text):
                    self._flush(CellKind.MATH)
                    state = _State.OUTSIDE
                continue

            if not in_opaque_code and _MATH_START_RE.match(text):
                rest = text.strip()[2:]
                if "$$" not in rest:
                    self._flush(CellKind.PROSE)
                    self._buffer.push(row, line)
                    state = _State.IN_MATH
                elif _MATH_END_RE.search(rest):
                    self._flush(CellKind.PROSE)
                    self._buffer.push(row, line)
                    self._flush(CellKind.MATH)
                else:
                    # inline $$...$$ followed by text
                    self._buffer.push(row, line)
                continue

            match = None if in_opaque_code else self._start_cell_re.match(text)
            if match is not None:
                self._flush(CellKind.PROSE)
                language = match.group("braced") or self._language
                fence_row = row
                state = _State.IN_CODE_CELL
            elif _END_CODE_RE.match(text):
                in_opaque_code = not in_opaque_code
                self._buffer.push(row, line)
            elif _START_CODE_RE.match(text) and not in_opaque_code:
                in_opaque_code = True
                self._buffer.push(row, line)
            else:
                self._buffer.push(row, line)

        # unterminated blocks fall back to prose
        self._flush(CellKind.PROSE)
        return self._cells

    # -- flushing ------------------------------------------------------------

    def _trimmed(self) -> list[tuple[int, RangedLine]]:
        lines = list(self._buffer.lines)
        self._buffer.clear()
        if lines and lines[0][1].substring == "":
            lines.pop(0)
        if lines and lines[-1][1].substring == "":
            lines.pop()
        while lines and not lines[0][1].substring.strip():
            lines.pop(0)
        while lines and not lines[-1][1].substring.strip():
            lines.pop()
        return lines

    def _slice(self, lines: list[tuple[int, RangedLine]]) -> MappedText:
        return self._source.substring(lines[0][1].start, lines[-1][1].end)

    def _flush(self, kind: CellKind) -> None:
        lines = self._trimmed()
        if not lines:
            return
        self._cells.append(
            Cell(kind=kind, source=self._slice(lines), start_line=lines[0][0], end_line=lines[-1][0] + 1)
        )

    def _flush_code(self, language: str, fence_row: int, end_row: int) -> None:
        lines = self._trimmed()
        if not lines:
            return
        self._cells.append(Cell.code(language, self._slice(lines), fence_row, end_row))


def break_document(source: MappedText | str, language: str | None = None) -> list[Cell]:
    """Split *source* into an ordered list of cells.

    *language* restricts code cells to one fenced language, written either
    ```{python} or ```python; with ``None`` any brace-tagged language opens a
    code cell.  Fenced blocks that do not open a code cell are opaque: ``---``
    and ``$$`` lines inside them stay part of the surrounding prose.
    """
    if isinstance(source, str):
        source = MappedText.from_string(source, "<document>")
    return _Segmenter(source, language).run()
