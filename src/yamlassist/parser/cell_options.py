"""Split the ``#| key: value`` option block off the top of a code cell."""

from __future__ import annotations

from dataclasses import dataclass

from yamlassist.text.mapped import MappedText, ranged_lines


@dataclass(frozen=True)
class CellOptions:
    """Option YAML (comment markers stripped) and the remaining cell source.

    ``prefix_lengths[i]`` is the number of characters removed from option
    line *i*, so editor columns can be shifted onto the YAML text.
    """

    yaml: MappedText | None
    source: MappedText
    prefix_lengths: tuple[int, ...] = ()

    @property
    def line_count(self) -> int:
        return len(self.prefix_lengths)


def option_prefix(comment_chars: str) -> str:
    return f"{comment_chars}| "


def partition_cell_options(code: MappedText, comment_chars: str) -> CellOptions:
    """Partition *code* into its leading option lines and the rest.

    An option line starts with the language's comment characters followed by
    ``|``; one optional space after the bar is part of the marker.
    """
    marker = f"{comment_chars}|"
    lines = ranged_lines(code.value)
    ranges: list[tuple[int, int]] = []
    prefix_lengths: list[int] = []
    for index, line in enumerate(lines):
        if not line.substring.startswith(marker):
            break
        prefix = len(marker)
        if line.substring[prefix : prefix + 1] == " ":
            prefix += 1
        is_last = index == len(lines) - 1
        # keep the line terminator so the YAML stays line-for-line aligned
        end = line.end if is_last else lines[index + 1].start
        ranges.append((line.start + prefix, end))
        prefix_lengths.append(prefix)

    if not ranges:
        return CellOptions(yaml=None, source=code)

    rest_start = lines[len(ranges)].start if len(ranges) < len(lines) else len(code.value)
    return CellOptions(
        yaml=code.slice(ranges),
        source=code.substring(rest_start),
        prefix_lengths=tuple(prefix_lengths),
    )
