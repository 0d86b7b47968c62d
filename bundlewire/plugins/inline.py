from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Optional

from bundlewire.models import PASSTHROUGH, Handled, HookResult, LoadResult, ResolvedId
from bundlewire.plugins.base import Plugin

logger = logging.getLogger(__name__)

INLINE_PREFIX = "\0inline:"
INLINE_SUFFIX = "?inline"

Resolver = Callable[[str, Optional[str]], Optional[ResolvedId]]


def resolve_path(source: str, importer: Optional[str]) -> Optional[ResolvedId]:
    """Resolve relative and absolute paths; bare specifiers are left to the bundler."""
    if source.startswith("/"):
        return ResolvedId(id=str(Path(source).resolve()))
    if source.startswith("."):
        base = Path(importer).parent if importer else Path.cwd()
        return ResolvedId(id=str((base / source).resolve()))
    return None


def remove_trailing(source: str, trailing: str) -> Optional[str]:
    if source.endswith(trailing):
        return source[: -len(trailing)]
    return None


class InlinePlugin(Plugin):
    """Import a file's text as a string: ``import css from "./x.css?inline"``."""

    def __init__(self, resolver: Optional[Resolver] = None) -> None:
        self.resolver = resolver or resolve_path

    @property
    def name(self) -> str:
        return "inline"

    def resolve(self, source: str, importer: Optional[str] = None) -> HookResult[ResolvedId]:
        path = remove_trailing(source, INLINE_SUFFIX)
        if not path:
            return PASSTHROUGH
        resolved = self.resolver(path, importer)
        if resolved is None or resolved.external:
            return PASSTHROUGH
        return Handled(ResolvedId(id=INLINE_PREFIX + resolved.id))

    def load(self, id: str) -> HookResult[LoadResult]:
        if not id.startswith(INLINE_PREFIX):
            return PASSTHROUGH
        path = Path(id[len(INLINE_PREFIX):])
        code = path.read_text(encoding="utf-8")
        logger.debug("Inlined %s (%d chars)", path, len(code))
        return Handled(LoadResult(code=f"export default {json.dumps(code)};"))
