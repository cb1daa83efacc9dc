"""Completions and lint for a single YAML fragment (front matter, option block, config file)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from yamlassist.models.completion import Completion, CompletionKind, CompletionResult
from yamlassist.models.errors import LintError
from yamlassist.parser.annotated import AnnotatedNode, build_annotated, locate_cursor
from yamlassist.parser.recovery import (
    Position,
    YamlParser,
    attempt_parses_at_line,
    locate_from_indentation,
)
from yamlassist.schema.navigator import navigate_schema, schema_completions, schema_type
from yamlassist.schema.registry import Schema
from yamlassist.schema.validator import ValidatorQueue
from yamlassist.text.mapped import MappedText, lines, row_col_to_index

logger = logging.getLogger("yamlassist.automation")


@dataclass(frozen=True)
class YamlContext:
    """A YAML fragment with the cursor expressed relative to it.

    ``line`` is the cursor line up to the cursor.  ``comment_prefix`` is
    re-inserted when a completion spans several lines (option blocks).
    """

    code: MappedText
    schema: Schema
    position: Position | None = None
    line: str = ""
    comment_prefix: str = ""


def position_in_ticks(context: YamlContext) -> bool:
    """True when the cursor sits on a ``---`` delimiter line."""
    if context.position is None:
        return False
    value = context.code.value
    code_lines = lines(value)
    return (value.startswith("---") and context.position.row == 0) or (
        value.rstrip().endswith("---") and context.position.row == len(code_lines) - 1
    )


def trim_ticks(context: YamlContext) -> YamlContext:
    """Drop leading/trailing ``---`` delimiters, keeping line breaks in place."""
    code = context.code
    if code.value.startswith("---"):
        code = code.substring(3)
    if code.value.rstrip().endswith("---"):
        code = code.substring(0, code.value.rfind("---"))
    return replace(context, code=code)


def _indented(completion: Completion, indent: int, comment_prefix: str) -> Completion:
    """Append a line break and indentation to keys holding objects or arrays."""
    if completion.kind is not CompletionKind.KEY or not completion.suggest_on_accept:
        return completion
    sub_type = schema_type(completion.source_schema) if completion.source_schema else "any"
    continuation = "\n" + comment_prefix + " " * (indent + 2)
    if sub_type == "object":
        return completion.model_copy(update={"value": completion.value + continuation})
    if sub_type == "array":
        return completion.model_copy(
            update={"value": completion.value + continuation + "- "}
        )
    return completion


class YamlAutomation:
    """Recovery-parse a YAML fragment, then complete or validate it."""

    def __init__(self, queue: ValidatorQueue, max_deletions: int | None = None) -> None:
        self._queue = queue
        self._max_deletions = max_deletions

    # -- completion ----------------------------------------------------------

    def complete_path(
        self,
        schema: Schema,
        path: list[str | int],
        word: str,
        indent: int,
        comment_prefix: str = "",
    ) -> CompletionResult:
        """Completions offered at *path* whose text starts with *word*."""
        found: list[Completion] = []
        seen: set[tuple[str, str]] = set()
        for node in navigate_schema(schema, path):
            for completion in schema_completions(node, schema.definition):
                completion = _indented(completion, indent, comment_prefix)
                marker = (completion.value, completion.kind)
                if marker in seen or not completion.value.startswith(word):
                    continue
                seen.add(marker)
                found.append(completion)
        found.sort(key=lambda c: c.value)
        return CompletionResult(token=word, completions=found, cacheable=True)

    def _keys_on_indentation(
        self, context: YamlContext, line: str, code: str, position: Position, word: str, indent: int
    ) -> CompletionResult:
        path = locate_from_indentation(line, code, position)
        result = self.complete_path(context.schema, path, word, indent, context.comment_prefix)
        result.completions = [c for c in result.completions if c.kind is CompletionKind.KEY]
        return result

    def completions(self, context: YamlContext) -> CompletionResult | None:
        """Completions at the cursor, or ``None`` when nothing can be offered.

        The cursor context decides which candidates apply (``_`` marks it):
        ``foo: _`` and ``- foo: _`` take values, ``foo_`` and blank lines take
        keys, ``- _`` takes both.
        """
        if context.position is None or not 0 <= context.position.row < len(
            lines(context.code.value)
        ):
            return None
        line = context.line
        position = context.position
        word = "" if line[-1:] in ("-", ":") else line.split(" ")[-1]

        if not line.strip():
            return self._keys_on_indentation(
                context, line, context.code.value, position, word, len(line)
            )
        indent = len(line.rstrip()) - len(line.strip())

        parser = YamlParser()
        for attempt in attempt_parses_at_line(
            context.code, position, parser, self._max_deletions
        ):
            line_after = line[: len(line) - attempt.deletions]
            shifted = Position(position.row, max(position.column - attempt.deletions, 0))
            if not line_after.strip():
                return self._keys_on_indentation(
                    context, line_after, attempt.code.value, shifted, word, indent
                )
            doc = build_annotated(attempt.tree, attempt.code)
            if doc is None:
                continue
            index = row_col_to_index(attempt.code.value, shifted.row, shifted.column)
            location = locate_cursor(doc, index)
            path = location.path
            if location.with_error:
                path = locate_from_indentation(line_after, attempt.code.value, shifted)
            if path and path[-1] == word:
                # inside the word being completed, e.g. "echo: fal_"
                path = path[:-1]

            result = self.complete_path(
                context.schema, path, word, indent, context.comment_prefix
            )
            if ":" in line:
                result.completions = [
                    c for c in result.completions if c.kind is CompletionKind.VALUE
                ]
            elif "-" not in line:
                result.completions = [
                    c for c in result.completions if c.kind is CompletionKind.KEY
                ]
            return result

        logger.debug("no parse found for completion at row %d", position.row)
        return None

    # -- validation ----------------------------------------------------------

    def annotate(self, context: YamlContext) -> AnnotatedNode | None:
        """Best-effort annotated tree for the fragment (``None`` if unparseable)."""
        parser = YamlParser()
        for attempt in attempt_parses_at_line(
            context.code, context.position, parser, self._max_deletions
        ):
            doc = build_annotated(attempt.tree, attempt.code)
            if doc is not None:
                return doc
        return None

    async def lint(self, context: YamlContext) -> list[LintError]:
        """Schema violations of the fragment, in root-document coordinates."""
        doc = self.annotate(context)
        if doc is None:
            return []
        return await self._queue.with_validator(
            context.schema, lambda validator: validator.validate_parse(doc)
        )
