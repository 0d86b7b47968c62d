from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Dict, Iterator


class ReplacementTable(Mapping):
    """Immutable token -> replacement text mapping."""

    def __init__(self, entries: Dict[str, str]) -> None:
        self._entries = dict(entries)

    @classmethod
    def for_mode(cls, mode: str, trace: bool = False) -> "ReplacementTable":
        """Constants for ``import.meta`` guards under ``mode``.

        ``DEV`` and ``PROD`` are both false for modes other than
        ``development`` and ``production``.
        """
        return cls(
            {
                # inline tests are stripped from builds
                "import.meta.vitest": "false",
                "import.meta.env.MODE": json.dumps(mode),
                "import.meta.env.DEV": _bool(mode == "development"),
                "import.meta.env.PROD": _bool(mode == "production"),
                "import.meta.env.BUNDLEWIRE_TRACE": _bool(trace),
            }
        )

    def __getitem__(self, key: str) -> str:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ReplacementTable({self._entries!r})"


def _bool(value: bool) -> str:
    return "true" if value else "false"
