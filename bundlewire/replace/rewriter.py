from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Pattern

from bundlewire.errors import MissingReplacement
from bundlewire.replace.sourcemap import (
    SourceMap,
    line_starts,
    offset_to_position,
    position_to_offset,
)
from bundlewire.replace.splice import SpliceBuffer

logger = logging.getLogger(__name__)

STRINGIFY_SPACES = 2


@dataclass(frozen=True)
class RewriteResult:
    code: str
    map: Optional[SourceMap] = None

    def original_offset(self, offset: int) -> Optional[int]:
        """Translate an offset in ``code`` back to an offset in the original text."""
        if self.map is None or self.map.source_content is None:
            return None
        line, column = offset_to_position(self.code, line_starts(self.code), offset)
        position = self.map.original_position_for(line, column)
        if position is None:
            return None
        source = self.map.source_content
        return position_to_offset(source, line_starts(source), *position)


def build_pattern(tokens: Iterable[str]) -> Optional[Pattern[str]]:
    """Compile one alternation over ``tokens``, guarded by word boundaries.

    Longer tokens are tried first so overlapping keys resolve to the longest
    literal at a given position.
    """
    keys = sorted(tokens, key=len, reverse=True)
    if not keys:
        return None
    alternation = "|".join(re.escape(k) for k in keys)
    return re.compile(r"\b(" + alternation + r")\b", re.ASCII)


class TokenRewriter:
    """Replace literal tokens in source text with build-time constants.

    Replacement is textual: tokens inside strings and comments are replaced
    too. The point is to turn guards such as ``import.meta.env.DEV`` into
    literals ahead of minification, so dead branches can be dropped there.
    """

    def __init__(
        self,
        replacements: Mapping[str, str],
        sourcemap: bool = True,
        hires: bool = True,
    ) -> None:
        self.replacements: Dict[str, str] = dict(replacements)
        self.sourcemap = sourcemap
        self.hires = hires
        self.pattern = build_pattern(self.replacements)

    def rewrite(self, code: str, source: Optional[str] = None) -> Optional[RewriteResult]:
        if self.pattern is None:
            return None

        buffer = SpliceBuffer(code)
        for match in self.pattern.finditer(code):
            token = match.group(1)
            replacement = self.replacements.get(token)
            if replacement is None:
                raise MissingReplacement(
                    f'Unexpected missing replacement for "{token}".\n\n'
                    f"Replacements were {json.dumps(self.replacements, indent=STRINGIFY_SPACES)}",
                    token=token,
                    replacements=self.replacements,
                )
            buffer.overwrite(match.start(), match.end(), replacement)

        if not buffer.has_changed:
            return None

        logger.debug("Rewrote %s", source or "<input>")
        if not self.sourcemap:
            return RewriteResult(code=buffer.to_string())
        return RewriteResult(
            code=buffer.to_string(),
            map=buffer.generate_map(source or "<input>", hires=self.hires),
        )


def rewrite(
    code: str,
    replacements: Mapping[str, str],
    sourcemap: bool = True,
    source: Optional[str] = None,
) -> Optional[RewriteResult]:
    return TokenRewriter(replacements, sourcemap=sourcemap).rewrite(code, source=source)
