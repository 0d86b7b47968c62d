from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from bundlewire.models import PASSTHROUGH, HookResult, LoadResult, ResolvedId


class Plugin(ABC):
    """A bundler plugin with explicit hook results.

    Each hook returns ``Handled(value)`` when the plugin takes responsibility
    and ``PASSTHROUGH`` to let the next plugin (or the bundler) decide.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        raise NotImplementedError

    def resolve(self, source: str, importer: Optional[str] = None) -> HookResult[ResolvedId]:
        return PASSTHROUGH

    def load(self, id: str) -> HookResult[LoadResult]:
        return PASSTHROUGH

    def transform(self, code: str, id: str) -> HookResult[LoadResult]:
        return PASSTHROUGH

    def describe(self) -> Dict[str, Any]:
        return {"name": self.name}
