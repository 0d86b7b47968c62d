from __future__ import annotations

import bisect
from typing import List, Optional, Tuple

from bundlewire.replace.sourcemap import Segment, SourceMap, utf16_width


class SpliceBuffer:
    """Non-overlapping overwrites on an immutable original string.

    Offsets given to :meth:`overwrite` always refer to the original text, so
    edits can be recorded in any order. :meth:`generate_map` maps every
    position of the rewritten text back to the original.
    """

    def __init__(self, original: str) -> None:
        self.original = original
        self._edits: List[Tuple[int, int, str]] = []

    def overwrite(self, start: int, end: int, content: str) -> "SpliceBuffer":
        if not 0 <= start < end <= len(self.original):
            raise ValueError(f"Invalid overwrite range {start}:{end} for {len(self.original)} chars")
        index = bisect.bisect_left(self._edits, (start, end, content))
        if index > 0 and self._edits[index - 1][1] > start:
            raise ValueError(f"Overwrite {start}:{end} overlaps an earlier edit")
        if index < len(self._edits) and self._edits[index][0] < end:
            raise ValueError(f"Overwrite {start}:{end} overlaps a later edit")
        self._edits.insert(index, (start, end, content))
        return self

    @property
    def has_changed(self) -> bool:
        return bool(self._edits)

    def __str__(self) -> str:
        return self.to_string()

    def to_string(self) -> str:
        parts: List[str] = []
        pos = 0
        for start, end, content in self._edits:
            parts.append(self.original[pos:start])
            parts.append(content)
            pos = end
        parts.append(self.original[pos:])
        return "".join(parts)

    def generate_map(
        self,
        source: str,
        file: Optional[str] = None,
        hires: bool = True,
        include_content: bool = True,
    ) -> SourceMap:
        builder = _SegmentBuilder(hires)
        pos = 0
        for start, end, content in self._edits:
            builder.unchanged(self.original[pos:start])
            builder.replaced(content, self.original[start:end])
            pos = end
        builder.unchanged(self.original[pos:])
        return SourceMap(
            builder.segments,
            source=source,
            source_content=self.original if include_content else None,
            file=file,
        )


class _SegmentBuilder:
    def __init__(self, hires: bool) -> None:
        self.hires = hires
        self.segments: List[Segment] = []
        self.generated_line = 0
        self.generated_column = 0
        self.source_line = 0
        self.source_column = 0

    def _add(self, source_line: int, source_column: int) -> None:
        segment = Segment(self.generated_line, self.generated_column, source_line, source_column)
        if self.segments:
            last = self.segments[-1]
            if (last.generated_line, last.generated_column) == (
                segment.generated_line,
                segment.generated_column,
            ):
                # Later chunks own the position.
                self.segments[-1] = segment
                return
        self.segments.append(segment)

    def unchanged(self, text: str) -> None:
        first = True
        for char in text:
            if first or self.hires or self.generated_column == 0:
                self._add(self.source_line, self.source_column)
            first = False
            if char == "\n":
                self.generated_line += 1
                self.generated_column = 0
                self.source_line += 1
                self.source_column = 0
            else:
                width = utf16_width(char)
                self.generated_column += width
                self.source_column += width

    def replaced(self, content: str, original: str) -> None:
        anchor = (self.source_line, self.source_column)
        self._add(*anchor)
        for char in content:
            if char == "\n":
                self.generated_line += 1
                self.generated_column = 0
                self._add(*anchor)
            else:
                self.generated_column += utf16_width(char)
        for char in original:
            if char == "\n":
                self.source_line += 1
                self.source_column = 0
            else:
                self.source_column += utf16_width(char)
