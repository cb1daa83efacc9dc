"""Strings that remember where every character came from.

A :class:`MappedText` is an immutable string plus a list of segments that map
contiguous output ranges back onto a root :class:`Source`.  Slicing and
concatenating mapped text never copies provenance through intermediate
layers: every derived value points straight at the root, so a lookup is a
single ``bisect`` no matter how many times the text was re-sliced (cell out of
document, front matter out of cell, option block out of code cell...).
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import NamedTuple

_LITERAL_SOURCE = "<literal>"


def _line_starts(text: str) -> tuple[int, ...]:
    starts = [0]
    index = text.find("\n")
    while index != -1:
        starts.append(index + 1)
        index = text.find("\n", index + 1)
    return tuple(starts)


@dataclass(frozen=True, eq=False)
class Source:
    """A root text that mapped strings ultimately point into."""

    name: str
    text: str
    _starts: tuple[int, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_starts", _line_starts(self.text))

    @property
    def line_count(self) -> int:
        return len(self._starts)

    def position(self, offset: int) -> tuple[int, int]:
        """Return the 0-based ``(row, column)`` of *offset* (end offset allowed)."""
        if not 0 <= offset <= len(self.text):
            raise IndexError(f"offset {offset} outside source '{self.name}'")
        row = bisect_right(self._starts, offset) - 1
        return row, offset - self._starts[row]

    def index(self, row: int, column: int) -> int:
        if not 0 <= row < len(self._starts):
            raise IndexError(f"row {row} outside source '{self.name}'")
        return self._starts[row] + column


class Segment(NamedTuple):
    """Output range ``[start, end)`` copied from ``source`` at ``source_start``."""

    start: int
    end: int
    source: Source
    source_start: int


Range = tuple[int, int]


@dataclass(frozen=True, eq=False)
class MappedText:
    """An immutable string with per-character provenance.

    Invariant: ``segments`` are sorted, contiguous and non-overlapping and
    together cover ``[0, len(value))``.
    """

    value: str
    segments: tuple[Segment, ...]
    _starts: tuple[int, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        expected = 0
        for seg in self.segments:
            if seg.start != expected or seg.end <= seg.start:
                raise ValueError("mapped segments must be contiguous and non-empty")
            expected = seg.end
        if expected != len(self.value):
            raise ValueError("mapped segments must cover the whole value")
        object.__setattr__(self, "_starts", tuple(seg.start for seg in self.segments))

    # -- construction --------------------------------------------------------

    @classmethod
    def from_string(cls, text: str, name: str = "<string>") -> MappedText:
        """Wrap *text* as its own root."""
        source = Source(name, text)
        segments = (Segment(0, len(text), source, 0),) if text else ()
        return cls(text, segments)

    @classmethod
    def concat(cls, *parts: MappedText | str) -> MappedText:
        """Concatenate mapped pieces; plain strings become literal roots."""
        values: list[str] = []
        segments: list[Segment] = []
        offset = 0
        for part in parts:
            if isinstance(part, str):
                part = cls.from_string(part, _LITERAL_SOURCE)
            for seg in part.segments:
                segments.append(
                    Segment(seg.start + offset, seg.end + offset, seg.source, seg.source_start)
                )
            values.append(part.value)
            offset += len(part.value)
        return cls("".join(values), _merge(segments))

    def slice(self, ranges: Iterable[Range | str]) -> MappedText:
        """Concatenate the given ``(start, end)`` slices of this text.

        String entries are inserted verbatim as literal text.
        """
        values: list[str] = []
        segments: list[Segment] = []
        offset = 0
        for item in ranges:
            if isinstance(item, str):
                if item:
                    literal = Source(_LITERAL_SOURCE, item)
                    segments.append(Segment(offset, offset + len(item), literal, 0))
                    values.append(item)
                    offset += len(item)
                continue
            start, end = item
            if not 0 <= start <= end <= len(self.value):
                raise IndexError(f"range ({start}, {end}) outside mapped text of length {len(self.value)}")
            segments.extend(self._compose(start, end, offset))
            values.append(self.value[start:end])
            offset += end - start
        return MappedText("".join(values), _merge(segments))

    def substring(self, start: int, end: int | None = None) -> MappedText:
        return self.slice([(start, len(self.value) if end is None else end)])

    def _compose(self, start: int, end: int, shift: int) -> list[Segment]:
        """Re-express ``[start, end)`` of this text as root segments at *shift*."""
        result: list[Segment] = []
        if start == end:
            return result
        i = bisect_right(self._starts, start) - 1
        for seg in self.segments[i:]:
            if seg.start >= end:
                break
            lo = max(seg.start, start)
            hi = min(seg.end, end)
            if lo < hi:
                result.append(
                    Segment(
                        lo - start + shift,
                        hi - start + shift,
                        seg.source,
                        seg.source_start + lo - seg.start,
                    )
                )
        return result

    # -- lookup --------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.value)

    def locate(self, offset: int) -> tuple[Source, int]:
        """Map an output offset to ``(root source, root offset)``."""
        if not 0 <= offset < len(self.value):
            raise IndexError(f"offset {offset} outside mapped text of length {len(self.value)}")
        seg = self.segments[bisect_right(self._starts, offset) - 1]
        return seg.source, seg.source_start + offset - seg.start

    def locate_range(self, start: int, end: int) -> tuple[Source, int, int]:
        """Map the half-open output range ``[start, end)`` to the root.

        Empty ranges and ranges ending at ``len(value)`` are allowed; the end
        is resolved through its last character.
        """
        if start == end:
            if start < len(self.value):
                source, offset = self.locate(start)
            else:
                source, offset = self.locate(start - 1)
                offset += 1
            return source, offset, offset
        source, root_start = self.locate(start)
        end_source, root_last = self.locate(end - 1)
        if end_source is not source:
            # the range straddles roots: clip it to the first one
            seg = self.segments[bisect_right(self._starts, start) - 1]
            return source, root_start, seg.source_start + seg.end - seg.start
        return source, root_start, root_last + 1

    def root_position(self, offset: int) -> tuple[int, int]:
        """Return ``(row, column)`` of *offset* in its root source."""
        if offset == len(self.value) and offset > 0:
            source, root = self.locate(offset - 1)
            return source.position(root + 1)
        source, root = self.locate(offset)
        return source.position(root)

    def unlocate(self, source: Source, root_offset: int) -> int | None:
        """Inverse of :meth:`locate`: the output offset showing *root_offset*."""
        for seg in self.segments:
            if seg.source is source and seg.source_start <= root_offset < seg.source_start + seg.end - seg.start:
                return seg.start + root_offset - seg.source_start
        return None

    def roots(self) -> list[Source]:
        seen: list[Source] = []
        for seg in self.segments:
            if not any(seg.source is s for s in seen):
                seen.append(seg.source)
        return seen

    def lines(self) -> list[MappedText]:
        return [self.substring(line.start, line.end) for line in ranged_lines(self.value)]


def _merge(segments: Sequence[Segment]) -> tuple[Segment, ...]:
    """Coalesce neighbours that continue the same root range."""
    merged: list[Segment] = []
    for seg in segments:
        if merged:
            last = merged[-1]
            if (
                last.source is seg.source
                and last.end == seg.start
                and last.source_start + last.end - last.start == seg.source_start
            ):
                merged[-1] = Segment(last.start, seg.end, last.source, last.source_start)
                continue
        merged.append(seg)
    return tuple(merged)


# ---------------------------------------------------------------------------
# Line helpers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RangedLine:
    """A line of text (without its terminator) and its ``[start, end)`` range."""

    substring: str
    start: int
    end: int


def ranged_lines(text: str) -> list[RangedLine]:
    """Split *text* on ``\\n`` / ``\\r\\n``, keeping each line's range.

    Always returns at least one (possibly empty) line, and a trailing newline
    yields a final empty line.
    """
    result: list[RangedLine] = []
    start = 0
    while True:
        index = text.find("\n", start)
        if index == -1:
            result.append(RangedLine(text[start:], start, len(text)))
            return result
        end = index - 1 if index > start and text[index - 1] == "\r" else index
        result.append(RangedLine(text[start:end], start, end))
        start = index + 1


def lines(text: str) -> list[str]:
    return [line.substring for line in ranged_lines(text)]


def row_col_to_index(text: str, row: int, column: int) -> int:
    starts = _line_starts(text)
    if not 0 <= row < len(starts):
        raise IndexError(f"row {row} outside text with {len(starts)} lines")
    return min(starts[row] + column, len(text))


def index_to_row_col(text: str, offset: int) -> tuple[int, int]:
    if not 0 <= offset <= len(text):
        raise IndexError(f"offset {offset} outside text of length {len(text)}")
    starts = _line_starts(text)
    row = bisect_right(starts, offset) - 1
    return row, offset - starts[row]
