"""Best-effort parsing of YAML that is in the middle of being typed.

Editors ask for completions and lint on every keystroke, so the text under
the cursor is frequently invalid (``title: "unterminated``).  Instead of
failing, :func:`attempt_parses_at_line` lazily yields parses of the document
with the cursor line progressively shortened until the grammar accepts it.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from ruamel.yaml.nodes import Node

from yamlassist.text.mapped import MappedText, lines, ranged_lines

logger = logging.getLogger("yamlassist.parser")

# "key:" / "key: value" / "'quoted key': value"
_KEY_RE = re.compile(r"""^(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<plain>[^\s#'"][^:#]*?))\s*:(?:\s|$)""")


class ParseFailure(Exception):
    """The grammar rejected the text."""

    def __init__(self, message: str, index: int | None = None) -> None:
        self.index = index
        super().__init__(message)


@dataclass(frozen=True)
class Position:
    """A 0-based cursor position."""

    row: int
    column: int


@dataclass(frozen=True)
class ParseAttempt:
    """A successful parse of a (possibly truncated) version of the code.

    ``deletions`` is the number of characters removed before the cursor on
    the cursor line; cursor columns in ``code`` are ``column - deletions``.
    """

    tree: Node | None
    code: MappedText
    deletions: int


class YamlParser:
    """The grammar-based parser: text in, ``ruamel.yaml`` node tree out.

    Not thread-safe; build one per request.
    """

    def __init__(self) -> None:
        self._yaml = YAML(typ="rt")

    def parse(self, text: str) -> Node | None:
        """Compose *text* into a node tree (``None`` for an empty document).

        Raises :class:`ParseFailure` if the text is not valid YAML.
        """
        try:
            return self._yaml.compose(text)
        except YAMLError as exc:
            mark = getattr(exc, "problem_mark", None)
            raise ParseFailure(str(exc), index=getattr(mark, "index", None)) from exc


def attempt_parses_at_line(
    code: MappedText,
    position: Position | None,
    parser: YamlParser,
    max_deletions: int | None = None,
) -> Iterator[ParseAttempt]:
    """Yield parses of *code*, most complete first.

    The first attempt is the code as given.  Each further attempt keeps the
    cursor line only up to ``column - deletions`` (dropping whatever follows
    the cursor on that line) while leaving all other lines intact.  At most
    ``column + 1`` parses are tried; *max_deletions* lowers that bound.
    Without a *position* only the full text is tried.
    """
    try:
        tree = parser.parse(code.value)
    except ParseFailure as exc:
        logger.debug("full parse failed: %s", exc)
    else:
        yield ParseAttempt(tree=tree, code=code, deletions=0)

    code_lines = ranged_lines(code.value)
    if position is None or not 0 <= position.row < len(code_lines):
        return
    line = code_lines[position.row]
    column = max(0, min(position.column, len(line.substring)))
    limit = column if max_deletions is None else min(column, max_deletions)

    tail = (line.end, len(code.value)) if position.row + 1 < len(code_lines) else None
    for deletions in range(1, limit + 1):
        ranges = [(0, line.start + column - deletions)]
        if tail is not None:
            ranges.append(tail)
        candidate = code.slice(ranges)
        try:
            tree = parser.parse(candidate.value)
        except ParseFailure:
            continue
        yield ParseAttempt(tree=tree, code=candidate, deletions=deletions)

    if limit < column:
        logger.debug("recovery stopped after %d deletions (line has %d)", limit, column)


def _indentation(text: str) -> int:
    return len(text) - len(text.lstrip(" "))


def key_of_line(text: str) -> str | None:
    """Return the mapping key a stripped YAML line starts with, if any."""
    match = _KEY_RE.match(text)
    if match is None:
        return None
    key = match.group("dq")
    if key is None:
        key = match.group("sq")
    if key is None:
        key = match.group("plain").strip()
    return key


def locate_from_indentation(line: str, code: str, position: Position) -> list[str | int]:
    """Infer the cursor's path from the indentation of the lines above it.

    Used when the parse tree cannot place the cursor, e.g. on a blank line
    or right after a ``:``.  Sequence items contribute index ``0`` (every
    item shares the same schema).
    """
    current = len(line) if not line.strip() else _indentation(line)
    code_lines = lines(code)
    path: list[str | int] = []
    for row in range(min(position.row, len(code_lines)) - 1, -1, -1):
        if current == 0:
            break
        text = code_lines[row]
        stripped = text.strip()
        if not stripped or stripped.startswith("#"):
            continue
        indent = _indentation(text)
        if indent >= current:
            continue
        if stripped == "-" or stripped.startswith("- "):
            content = stripped[1:].lstrip()
            content_indent = indent + len(stripped) - len(content)
            key = key_of_line(content) if content else None
            if key is not None and content_indent < current:
                path.append(key)
            path.append(0)
        else:
            key = key_of_line(stripped)
            if key is None:
                continue
            path.append(key)
        current = indent
    path.reverse()
    return path
