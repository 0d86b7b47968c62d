from __future__ import annotations

import logging
from pathlib import Path

import pytest

from bundlewire.errors import ManifestError, PackageNotFoundError
from bundlewire.manifest.loader import (
    find_package_root,
    load_package,
    normalize_rules,
    parse_strict,
)
from bundlewire.models import Operator, Outcome, StrictMode


def _triples(rules):
    return [(r.operator, r.pattern, r.outcome) for r in rules]


def test_array_and_object_forms_normalize_identically() -> None:
    as_array = normalize_rules([{"lodash.merge": "external"}, "lodash.*"])
    as_object = normalize_rules({"lodash.merge": "external", "lodash.*": "inline"})
    assert _triples(as_array) == _triples(as_object) == [
        (Operator.EXACT, "lodash.merge", Outcome.EXTERNAL),
        (Operator.STARTS_WITH, "lodash.*", Outcome.INLINE),
    ]


def test_multi_key_object_in_array_keeps_order() -> None:
    rules = normalize_rules(["a", {"b": "external", "c": None}, "d*"])
    assert [r.pattern for r in rules] == ["a", "b", "c", "d*"]
    assert rules[2].outcome is Outcome.UNSET


@pytest.mark.parametrize("raw", ["lodash", 3, [1], [["a"]], {"a": "maybe"}, {"a": ["inline"]}])
def test_invalid_rules_raise(raw) -> None:
    with pytest.raises(ManifestError):
        normalize_rules(raw)


def test_parse_strict_forms() -> None:
    assert parse_strict(None) is StrictMode.ALLOW
    assert parse_strict("warn") is StrictMode.WARN
    assert parse_strict({"externals": "error"}) is StrictMode.ERROR
    assert parse_strict({}) is StrictMode.ALLOW
    with pytest.raises(ManifestError, match="bundlewire:strict"):
        parse_strict("loud")


def test_load_package_reads_fields(write_package) -> None:
    root = write_package(
        {
            "name": "@demo/pkg",
            "dependencies": {"react": "^18", "lodash": "^4"},
            "optionalDependencies": {"fsevents": "^2"},
            "peerDependencies": {"vue": "^3"},
            "bundlewire:inline": ["lodash"],
            "bundlewire:strict": {"externals": "warn"},
            "bundlewire:entry": {"index": "src/index.ts"},
        }
    )
    pkg = load_package(root)
    assert pkg.name == "@demo/pkg"
    assert list(pkg.dependencies) == ["react", "lodash"]
    assert pkg.runtime_dependencies == ["react", "lodash", "fsevents"]
    assert pkg.peer_dependencies == {"vue": "^3"}
    assert pkg.strict_externals is StrictMode.WARN
    assert [r.pattern for r in pkg.inline_rules] == ["lodash"]
    assert pkg.entry == {"index": "src/index.ts"}
    assert pkg.manifest_path == root.resolve() / "package.json"


def test_load_package_from_nested_file(write_package) -> None:
    root = write_package({"name": "demo"})
    nested = root / "src" / "deep"
    nested.mkdir(parents=True)
    source = nested / "mod.ts"
    source.write_text("export {}", encoding="utf-8")
    assert find_package_root(source) == root.resolve()
    assert load_package(source).name == "demo"


def test_load_package_missing(tmp_path: Path) -> None:
    empty = tmp_path / "empty"
    empty.mkdir()
    if find_package_root(empty) is not None:
        pytest.skip("a package.json exists above the temporary directory")
    with pytest.raises(PackageNotFoundError, match="Package not found at"):
        load_package(empty)


def test_invalid_json_raises(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(ManifestError):
        load_package(tmp_path)


def test_unknown_pattern_is_logged(write_package, caplog: pytest.LogCaptureFixture) -> None:
    root = write_package(
        {"dependencies": {"react": "^18"}, "bundlewire:inline": ["lodash", "(helpers)", "re*"]}
    )
    with caplog.at_level(logging.WARNING, logger="bundlewire"):
        load_package(root)
    messages = [r.getMessage() for r in caplog.records]
    assert any("'lodash'" in m for m in messages)
    assert not any("(helpers)" in m for m in messages)
    assert not any("'re*'" in m for m in messages)
