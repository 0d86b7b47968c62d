from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from bundlewire.models import BuildConfig
from bundlewire.replace.rewriter import RewriteResult


class ArtifactStore:
    """Writes rewritten sources, their maps and build plans under ``out_dir``."""

    def __init__(self, out_dir: Path) -> None:
        self.out_dir = out_dir
        self.out_dir.mkdir(parents=True, exist_ok=True)

    def _write_text(self, name: str, content: str) -> Path:
        path = self.out_dir / name
        path.write_text(content, encoding="utf-8")
        return path

    def _write_json(self, name: str, data: Dict[str, Any]) -> Path:
        return self._write_text(name, json.dumps(data, indent=2, ensure_ascii=True))

    def save_rewrite(self, name: str, result: RewriteResult) -> Path:
        code = result.code
        if result.map is not None:
            map_name = f"{name}.map"
            self._write_json(map_name, {**result.map.to_dict(), "file": name})
            code = f"{code}\n//# sourceMappingURL={map_name}\n"
        return self._write_text(name, code)

    def save_plan(self, configs: List[BuildConfig], name: str = "build-plan.json") -> Path:
        payload: Dict[str, Any] = {"builds": [c.to_dict() for c in configs]}
        return self._write_json(name, payload)
