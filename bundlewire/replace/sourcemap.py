"""Revision 3 source maps: segment bookkeeping, VLQ encoding and lookups.

Columns count UTF-16 code units, as the format requires.
"""

from __future__ import annotations

import bisect
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

BASE64_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
BASE64_INDEX = {c: i for i, c in enumerate(BASE64_CHARS)}

VLQ_SHIFT = 5
VLQ_MASK = (1 << VLQ_SHIFT) - 1
VLQ_CONTINUATION = 1 << VLQ_SHIFT


@dataclass(frozen=True)
class Segment:
    """One mapping from a generated position to an original position (0-based)."""

    generated_line: int
    generated_column: int
    source_line: int
    source_column: int


def encode_vlq(value: int) -> str:
    vlq = ((-value) << 1) | 1 if value < 0 else value << 1
    out = []
    while True:
        digit = vlq & VLQ_MASK
        vlq >>= VLQ_SHIFT
        if vlq:
            digit |= VLQ_CONTINUATION
        out.append(BASE64_CHARS[digit])
        if not vlq:
            return "".join(out)


def decode_vlq(text: str) -> List[int]:
    values: List[int] = []
    shift = 0
    acc = 0
    for char in text:
        digit = BASE64_INDEX[char]
        acc += (digit & VLQ_MASK) << shift
        if digit & VLQ_CONTINUATION:
            shift += VLQ_SHIFT
            continue
        negative = acc & 1
        acc >>= 1
        values.append(-acc if negative else acc)
        acc = 0
        shift = 0
    return values


def encode_mappings(segments: Sequence[Segment]) -> str:
    """Encode segments (sorted by generated position) for a single source."""
    lines: List[List[str]] = []
    prev_column = 0
    prev_source_line = 0
    prev_source_column = 0
    for segment in segments:
        if len(lines) <= segment.generated_line:
            while len(lines) <= segment.generated_line:
                lines.append([])
            prev_column = 0
        fields = (
            segment.generated_column - prev_column,
            0,
            segment.source_line - prev_source_line,
            segment.source_column - prev_source_column,
        )
        lines[segment.generated_line].append("".join(encode_vlq(f) for f in fields))
        prev_column = segment.generated_column
        prev_source_line = segment.source_line
        prev_source_column = segment.source_column
    return ";".join(",".join(line) for line in lines)


def decode_mappings(mappings: str) -> List[Segment]:
    segments: List[Segment] = []
    source_line = 0
    source_column = 0
    for generated_line, line in enumerate(mappings.split(";")):
        column = 0
        for chunk in line.split(","):
            if not chunk:
                continue
            fields = decode_vlq(chunk)
            column += fields[0]
            if len(fields) < 4:
                continue
            source_line += fields[2]
            source_column += fields[3]
            segments.append(Segment(generated_line, column, source_line, source_column))
    return segments


def line_starts(text: str) -> List[int]:
    starts = [0]
    for index, char in enumerate(text):
        if char == "\n":
            starts.append(index + 1)
    return starts


def utf16_width(char: str) -> int:
    return 2 if ord(char) > 0xFFFF else 1


def utf16_length(text: str) -> int:
    return sum(utf16_width(c) for c in text)


def offset_to_position(text: str, starts: Sequence[int], offset: int) -> Tuple[int, int]:
    """Turn a code point offset into a 0-based (line, UTF-16 column)."""
    line = bisect.bisect_right(starts, offset) - 1
    return line, utf16_length(text[starts[line] : offset])


def position_to_offset(text: str, starts: Sequence[int], line: int, column: int) -> int:
    offset = starts[line]
    units = 0
    while units < column and offset < len(text) and text[offset] != "\n":
        units += utf16_width(text[offset])
        offset += 1
    return offset


class SourceMap:
    def __init__(
        self,
        segments: Sequence[Segment],
        source: str,
        source_content: Optional[str] = None,
        file: Optional[str] = None,
    ) -> None:
        self.segments: Tuple[Segment, ...] = tuple(segments)
        self.source = source
        self.source_content = source_content
        self.file = file
        self._by_line: Dict[int, List[Segment]] = {}
        for segment in self.segments:
            self._by_line.setdefault(segment.generated_line, []).append(segment)

    @property
    def mappings(self) -> str:
        return encode_mappings(self.segments)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "version": 3,
            "sources": [self.source],
            "names": [],
            "mappings": self.mappings,
        }
        if self.file is not None:
            payload["file"] = self.file
        if self.source_content is not None:
            payload["sourcesContent"] = [self.source_content]
        return payload

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SourceMap":
        contents = data.get("sourcesContent") or [None]
        return cls(
            decode_mappings(data["mappings"]),
            source=data["sources"][0],
            source_content=contents[0],
            file=data.get("file"),
        )

    def original_position_for(self, line: int, column: int) -> Optional[Tuple[int, int]]:
        """Map a 0-based generated (line, column) to its original (line, column)."""
        segments = self._by_line.get(line)
        if not segments:
            return None
        columns = [s.generated_column for s in segments]
        index = bisect.bisect_right(columns, column) - 1
        if index < 0:
            return None
        # Unmapped columns inherit the nearest segment on their left.
        segment = segments[index]
        return segment.source_line, segment.source_column
