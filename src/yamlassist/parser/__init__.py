"""Document segmentation and error-tolerant YAML parsing with source fidelity."""

from yamlassist.parser.annotated import AnnotatedNode, build_annotated, locate_cursor
from yamlassist.parser.cell_options import CellOptions, partition_cell_options
from yamlassist.parser.recovery import (
    ParseAttempt,
    ParseFailure,
    Position,
    YamlParser,
    attempt_parses_at_line,
    locate_from_indentation,
)
from yamlassist.parser.segmenter import break_document

__all__ = [
    "AnnotatedNode",
    "CellOptions",
    "ParseAttempt",
    "ParseFailure",
    "Position",
    "YamlParser",
    "attempt_parses_at_line",
    "break_document",
    "build_annotated",
    "locate_cursor",
    "locate_from_indentation",
    "partition_cell_options",
]
