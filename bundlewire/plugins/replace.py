from __future__ import annotations

import re
from typing import Any, Callable, Dict, Mapping

from bundlewire.models import PASSTHROUGH, Handled, HookResult, LoadResult
from bundlewire.plugins.base import Plugin
from bundlewire.replace.rewriter import TokenRewriter
from bundlewire.replace.table import ReplacementTable

SCRIPT_ID = re.compile(r"\.(j|t)sx?$")


class ReplacePlugin(Plugin):
    """Replace literal tokens in matching modules, with source maps.

    Example::

        ReplacePlugin(lambda id: True, {"import.meta.hello": '"world"'})

    replaces every ``import.meta.hello`` with ``"world"``.
    """

    def __init__(
        self,
        test: Callable[[str], bool],
        replacements: Mapping[str, str],
        sourcemap: bool = True,
    ) -> None:
        self.test = test
        self.rewriter = TokenRewriter(replacements, sourcemap=sourcemap)

    @property
    def name(self) -> str:
        return "bundlewire:replace"

    def transform(self, code: str, id: str) -> HookResult[LoadResult]:
        if not self.test(id):
            return PASSTHROUGH
        result = self.rewriter.rewrite(code, source=id)
        if result is None:
            return PASSTHROUGH
        return Handled(LoadResult(code=result.code, map=result.map))

    def describe(self) -> Dict[str, Any]:
        return {"name": self.name, "replacements": dict(self.rewriter.replacements)}


def import_meta_plugin(mode: str, trace: bool = False) -> ReplacePlugin:
    """Replace ``import.meta.env`` guards with constants for ``mode``.

    ``mode`` and ``trace`` must already be resolved; see
    :func:`bundlewire.config.resolve_mode`.
    """
    table = ReplacementTable.for_mode(mode, trace=trace)
    return ReplacePlugin(lambda id: SCRIPT_ID.search(id) is not None, table, sourcemap=True)
