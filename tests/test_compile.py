from __future__ import annotations

import logging
from pathlib import Path

import pytest

from bundlewire import compile as compile_module
from bundlewire.compile import compile, compile_package, filename
from bundlewire.manifest.loader import load_package
from bundlewire.models import CompileOptions
from bundlewire.plugins import CopyPlugin, ExternalsPlugin, ReplacePlugin, TypeScriptPlugin

PACKAGE = {
    "name": "@demo/pkg",
    "dependencies": {"react": "^18"},
    "bundlewire:entry": {"index": "src/index.ts", "extra": "src/extra.ts"},
}


def test_filename(tmp_path: Path) -> None:
    assert filename(tmp_path, "index", "production") == (tmp_path / "dist" / "index.production.js").resolve()
    assert filename(tmp_path, "index", None) == (tmp_path / "dist" / "index.js").resolve()


def test_one_build_per_mode_and_entry(write_package) -> None:
    root = write_package(PACKAGE)
    configs = compile(root, CompileOptions(copy_root_changelog=False), trace=False)
    assert [(c.mode, c.output_file.name) for c in configs] == [
        ("development", "index.development.js"),
        ("development", "extra.development.js"),
        ("production", "index.production.js"),
        ("production", "extra.production.js"),
        (None, "index.js"),
        (None, "extra.js"),
    ]
    assert all(c.external == ["react"] for c in configs)
    assert configs[0].input == (root / "src" / "index.ts").resolve()


def test_plugin_order(write_package) -> None:
    pkg = load_package(write_package(PACKAGE))
    configs = compile_package(pkg, CompileOptions(copy_root_changelog=False))
    dev, unset = configs[0], configs[-1]
    assert [type(p) for p in dev.plugins] == [ReplacePlugin, ExternalsPlugin, TypeScriptPlugin]
    assert [type(p) for p in unset.plugins] == [ExternalsPlugin, TypeScriptPlugin]
    assert dev.plugins[0].rewriter.replacements["import.meta.env.DEV"] == "true"
    assert configs[2].plugins[0].rewriter.replacements["import.meta.env.PROD"] == "true"


def test_trace_flag_reaches_replacements(write_package) -> None:
    pkg = load_package(write_package(PACKAGE))
    configs = compile_package(pkg, CompileOptions(copy_root_changelog=False), trace=True)
    table = configs[0].plugins[0].rewriter.replacements
    assert table["import.meta.env.BUNDLEWIRE_TRACE"] == "true"


def test_changelog_copied_once_per_mode(write_package, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(compile_module, "monorepo_root", lambda root: tmp_path)
    pkg = load_package(write_package(PACKAGE))
    configs = compile_package(pkg, CompileOptions())
    copies = [c for c in configs if any(isinstance(p, CopyPlugin) for p in c.plugins)]
    assert [c.output_file.name for c in copies] == ["index.development.js", "index.production.js", "index.js"]
    plugin = copies[0].plugins[-1]
    assert plugin.describe()["targets"] == [{"src": str(tmp_path / "CHANGELOG.md"), "dest": "."}]


def test_missing_entry_warns(write_package, caplog: pytest.LogCaptureFixture) -> None:
    pkg = load_package(write_package({"name": "no-entry"}))
    with caplog.at_level(logging.WARNING, logger="bundlewire"):
        assert compile_package(pkg, CompileOptions()) == []
    assert "No entry point found for package no-entry" in caplog.text


def test_build_config_to_dict(write_package) -> None:
    pkg = load_package(write_package(PACKAGE))
    config = compile_package(pkg, CompileOptions(copy_root_changelog=False))[0]
    payload = config.to_dict()
    assert payload["output"]["format"] == "esm"
    assert payload["output"]["sourcemap"] is True
    assert payload["output"]["hoistTransitiveImports"] is False
    assert payload["treeshake"] is True
    assert [p["name"] for p in payload["plugins"]] == [
        "bundlewire:replace",
        "bundlewire:externals",
        "bundlewire:typescript",
    ]
    assert not config.should_warn("CIRCULAR_DEPENDENCY")
    assert config.should_warn("UNRESOLVED_IMPORT")
