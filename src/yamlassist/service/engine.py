"""Cell-aware dispatch of completion and lint requests.

The engine is the entry point editors talk to (through the REST API or
directly): it segments markdown documents, finds the cell under the cursor,
re-expresses the cursor relative to that cell and hands the cell's YAML to
:class:`~yamlassist.service.yaml_automation.YamlAutomation`.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import StrEnum
from typing import assert_never

from yamlassist.models.cells import Cell, CellKind
from yamlassist.models.completion import CompletionResult
from yamlassist.models.errors import DocumentStructureError, LintError
from yamlassist.parser.cell_options import option_prefix, partition_cell_options
from yamlassist.parser.recovery import Position
from yamlassist.parser.segmenter import break_document
from yamlassist.schema.registry import FRONT_MATTER, PROJECT_CONFIG, Schema, SchemaRegistry
from yamlassist.schema.validator import ValidatorQueue
from yamlassist.service.yaml_automation import (
    YamlAutomation,
    YamlContext,
    position_in_ticks,
    trim_ticks,
)
from yamlassist.settings import Settings
from yamlassist.text.mapped import MappedText, lines, ranged_lines

logger = logging.getLogger("yamlassist.automation")

_SCRIPT_LANGUAGE_RE = re.compile(r".*\{([a-z]+)\}")


class FileType(StrEnum):
    MARKDOWN = "markdown"
    YAML = "yaml"
    SCRIPT = "script"


@dataclass(frozen=True)
class AutomationRequest:
    """One completion or lint request from an editor.

    ``position`` is the 0-based cursor in whole-document coordinates and
    ``line`` the cursor line up to the cursor (derived from ``code`` when
    omitted).  ``language`` names the code language of ``script`` files; for
    markdown it restricts code cells to that language and also accepts
    bare fences naming it.
    """

    filetype: FileType
    code: str
    position: Position | None = None
    line: str | None = None
    path: str = ""
    language: str | None = None

    def cursor_line(self) -> str:
        if self.line is not None:
            return self.line
        if self.position is None:
            return ""
        code_lines = lines(self.code)
        if not 0 <= self.position.row < len(code_lines):
            return ""
        return code_lines[self.position.row][: self.position.column]


def find_cell(cells: list[Cell], row: int) -> Cell | None:
    """Return the cell whose line range contains *row*."""
    for cell in cells:
        if cell.contains_line(row):
            return cell
    return None


def _local(position: Position | None, cell: Cell, first_row: int) -> Position | None:
    if position is None or not cell.contains_line(position.row):
        return None
    return Position(position.row - first_row, position.column)


class AutomationEngine:
    """Completions and lint for markdown, YAML and script documents.

    Stateless apart from the shared schema registry and validator queue, so
    one engine can serve concurrent requests.
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        queue: ValidatorQueue | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self.registry = registry
        self.queue = queue or ValidatorQueue(registry)
        self._yaml = YamlAutomation(self.queue, self._settings.max_recovery_deletions)

    # -- helpers -------------------------------------------------------------

    def _document(self, request: AutomationRequest) -> MappedText:
        if len(request.code) > self._settings.max_document_size:
            raise DocumentStructureError(
                f"document exceeds maximum size "
                f"({len(request.code):,} chars > {self._settings.max_document_size:,} limit)"
            )
        return MappedText.from_string(request.code, request.path or "<document>")

    def _yaml_file_schema(self, path: str) -> Schema:
        return self.registry.get(FRONT_MATTER if path.endswith(".qmd") else PROJECT_CONFIG)

    def _option_context(
        self,
        language: str,
        code: MappedText,
        position: Position | None,
        line: str,
    ) -> YamlContext | None:
        """YAML context for the ``#|`` options of a code cell in *language*.

        ``None`` when the language has no option schema or the cell has no
        options.  A *position* outside the option lines is dropped.
        """
        schema = self.registry.language_schema(language)
        comment_chars = self.registry.comment_chars(language)
        if schema is None or comment_chars is None:
            return None
        options = partition_cell_options(code, comment_chars)
        if options.yaml is None:
            return None
        local: Position | None = None
        local_line = ""
        if position is not None and 0 <= position.row < options.line_count:
            prefix = options.prefix_lengths[position.row]
            local = Position(position.row, max(position.column - prefix, 0))
            local_line = line[prefix:]
        return YamlContext(
            code=options.yaml,
            schema=schema,
            position=local,
            line=local_line,
            comment_prefix=option_prefix(comment_chars),
        )

    def _script_context(
        self, request: AutomationRequest, code: MappedText, line: str
    ) -> YamlContext | None:
        """Option context for a standalone script; the language may be on line one."""
        code_lines = ranged_lines(code.value)
        language = request.language
        start = 0
        if language is None:
            if len(code_lines) < 2:
                return None
            match = _SCRIPT_LANGUAGE_RE.match(code_lines[0].substring)
            if match is None:
                return None
            language = match.group(1)
            start = 1
        position = request.position
        if position is not None:
            position = Position(position.row - start, position.column)
        body = code.substring(code_lines[start].start)
        return self._option_context(language, body, position, line)

    # -- completions ---------------------------------------------------------

    async def completions(self, request: AutomationRequest) -> CompletionResult | None:
        """Completions at the request's cursor, ``None`` if none apply."""
        logger.info(
            "completions requested (filetype=%s, chars=%d)", request.filetype, len(request.code)
        )
        logger.debug("completion document:\n%s", request.code)
        if request.position is None:
            return None
        code = self._document(request)
        line = request.cursor_line()

        match request.filetype:
            case FileType.MARKDOWN:
                return self._markdown_completions(code, request.position, line, request.language)
            case FileType.YAML:
                context = YamlContext(
                    code=code,
                    schema=self._yaml_file_schema(request.path),
                    position=request.position,
                    line=line,
                )
                if position_in_ticks(context):
                    return None
                return self._yaml.completions(trim_ticks(context))
            case FileType.SCRIPT:
                context = self._script_context(request, code, line)
                if context is None or context.position is None:
                    return None
                return self._yaml.completions(trim_ticks(context))
            case _:
                assert_never(request.filetype)

    def _markdown_completions(
        self, code: MappedText, position: Position, line: str, language: str | None
    ) -> CompletionResult | None:
        cell = find_cell(break_document(code, language), position.row)
        if cell is None:
            return None
        match cell.kind:
            case CellKind.FRONT_MATTER:
                context = YamlContext(
                    code=cell.source,
                    schema=self.registry.get(FRONT_MATTER),
                    position=Position(position.row - cell.start_line, position.column),
                    line=line,
                )
                if position_in_ticks(context):
                    return None
                return self._yaml.completions(trim_ticks(context))
            case CellKind.CODE:
                assert cell.language is not None
                local = _local(position, cell, cell.content_start_line)
                context = self._option_context(cell.language, cell.source, local, line)
                if context is None or context.position is None:
                    return None
                return self._yaml.completions(context)
            case CellKind.PROSE | CellKind.MATH:
                return None
            case _:
                assert_never(cell.kind)

    # -- lint ----------------------------------------------------------------

    async def lint(self, request: AutomationRequest) -> list[LintError]:
        """Schema violations of the request's document (root coordinates)."""
        logger.info("lint requested (filetype=%s, chars=%d)", request.filetype, len(request.code))
        code = self._document(request)
        line = request.cursor_line()

        match request.filetype:
            case FileType.MARKDOWN:
                return await self._lint_cells(
                    break_document(code, request.language), request.position
                )
            case FileType.YAML:
                context = YamlContext(
                    code=code,
                    schema=self._yaml_file_schema(request.path),
                    position=request.position,
                    line=line,
                )
                return await self._yaml.lint(trim_ticks(context))
            case FileType.SCRIPT:
                context = self._script_context(request, code, line)
                if context is None:
                    return []
                return await self._yaml.lint(trim_ticks(context))
            case _:
                assert_never(request.filetype)

    async def _lint_cells(self, cells: list[Cell], position: Position | None) -> list[LintError]:
        errors: list[LintError] = []
        for cell in cells:
            match cell.kind:
                case CellKind.FRONT_MATTER:
                    context = YamlContext(
                        code=cell.source,
                        schema=self.registry.get(FRONT_MATTER),
                        position=_local(position, cell, cell.start_line),
                    )
                    errors.extend(await self._yaml.lint(trim_ticks(context)))
                case CellKind.CODE:
                    assert cell.language is not None
                    local = _local(position, cell, cell.content_start_line)
                    options = self._option_context(cell.language, cell.source, local, "")
                    if options is not None:
                        errors.extend(await self._yaml.lint(options))
                case CellKind.PROSE | CellKind.MATH:
                    continue
                case _:
                    assert_never(cell.kind)
        return errors

    async def validate_document(self, text: str, path: str = "") -> list[LintError]:
        """Validate the front matter and code-cell options of a whole document.

        Raises :class:`DocumentStructureError` when the document opens front
        matter that is never closed.
        """
        code = self._document(AutomationRequest(FileType.MARKDOWN, text, path=path))
        cells = break_document(code)
        if not cells:
            return []
        first = cells[0]
        if first.source.value.startswith("---") and (
            first.kind is not CellKind.FRONT_MATTER or not first.source.value.rstrip().endswith("---")
        ):
            raise DocumentStructureError(
                "Expected front matter to end with '---'", line=first.start_line
            )
        errors = await self._lint_cells(cells, None)
        logger.info("validated document (%d cells, %d errors)", len(cells), len(errors))
        return errors
