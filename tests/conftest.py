from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict

import pytest

from bundlewire.externals.rules import HelperSet
from bundlewire.manifest.loader import normalize_rules
from bundlewire.models import PackageManifest, StrictMode


@pytest.fixture
def helpers() -> HelperSet:
    return HelperSet(patterns=("@babel/runtime/*", "tslib", "@swc/core"))


@pytest.fixture
def make_manifest(tmp_path: Path) -> Callable[..., PackageManifest]:
    def _make(
        rules: Any = None,
        strict: StrictMode = StrictMode.ALLOW,
        dependencies: Dict[str, str] | None = None,
    ) -> PackageManifest:
        return PackageManifest(
            root=tmp_path,
            name="demo",
            dependencies=dependencies or {},
            strict_externals=strict,
            inline_rules=normalize_rules(rules),
        )

    return _make


@pytest.fixture
def write_package(tmp_path: Path) -> Callable[[Dict[str, Any]], Path]:
    def _write(data: Dict[str, Any]) -> Path:
        (tmp_path / "package.json").write_text(json.dumps(data), encoding="utf-8")
        return tmp_path

    return _write
