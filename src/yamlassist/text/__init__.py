"""Provenance-preserving text for position-exact error reporting."""

from yamlassist.text.mapped import (
    MappedText,
    RangedLine,
    Segment,
    Source,
    index_to_row_col,
    lines,
    ranged_lines,
    row_col_to_index,
)

__all__ = [
    "MappedText",
    "RangedLine",
    "Segment",
    "Source",
    "index_to_row_col",
    "lines",
    "ranged_lines",
    "row_col_to_index",
]
