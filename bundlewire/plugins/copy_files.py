from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from bundlewire.plugins.base import Plugin


@dataclass(frozen=True)
class CopyTarget:
    src: Path
    dest: str = "."


class CopyPlugin(Plugin):
    """Copy files into the output once the bundle is written."""

    def __init__(self, targets: List[CopyTarget]) -> None:
        self.targets = list(targets)

    @property
    def name(self) -> str:
        return "copy"

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "targets": [{"src": str(t.src), "dest": t.dest} for t in self.targets],
        }
