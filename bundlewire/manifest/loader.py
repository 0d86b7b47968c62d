from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from bundlewire.errors import ManifestError, PackageNotFoundError
from bundlewire.externals.rules import matches
from bundlewire.models import (
    InlineRule,
    Outcome,
    PackageManifest,
    StrictMode,
)

logger = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"
INLINE_KEY = "bundlewire:inline"
STRICT_KEY = "bundlewire:strict"
ENTRY_KEY = "bundlewire:entry"

OUTCOMES = {
    "inline": Outcome.INLINE,
    "external": Outcome.EXTERNAL,
    None: Outcome.UNSET,
}


def find_package_root(start: Union[str, Path]) -> Optional[Path]:
    path = Path(start).resolve()
    if path.is_file():
        path = path.parent
    for candidate in (path, *path.parents):
        if (candidate / MANIFEST_NAME).is_file():
            return candidate
    return None


def load_package(start: Union[str, Path]) -> PackageManifest:
    root = find_package_root(start)
    if root is None:
        raise PackageNotFoundError(f"Package not found at {Path(start).resolve()}")
    return load_manifest(root / MANIFEST_NAME)


def load_manifest(path: Path) -> PackageManifest:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ManifestError(f"Could not parse '{path}': {e}") from e
    except OSError as e:
        raise PackageNotFoundError(f"Manifest not found: {path}") from e

    if not isinstance(raw, dict):
        raise ManifestError(f"Invalid manifest '{path}': expected a JSON object.")

    dependencies = _dependency_map(raw, "dependencies", path)
    optional = _dependency_map(raw, "optionalDependencies", path)
    peers = _dependency_map(raw, "peerDependencies", path)

    rules = normalize_rules(raw.get(INLINE_KEY, []), source=path)
    _warn_unknown_patterns(rules, [*dependencies, *optional], path)

    manifest = PackageManifest(
        root=path.parent,
        name=str(raw.get("name", "")),
        dependencies=dependencies,
        optional_dependencies=optional,
        peer_dependencies=peers,
        strict_externals=parse_strict(raw.get(STRICT_KEY), source=path),
        inline_rules=rules,
        entry=_entry_map(raw.get(ENTRY_KEY), path),
    )
    logger.info(
        "Loaded manifest %s: %d dependencies, %d inline rules",
        manifest.name or path,
        len(dependencies),
        len(rules),
    )
    return manifest


def normalize_rules(raw: Any, source: Optional[Path] = None) -> Tuple[InlineRule, ...]:
    """Normalize the array or object form of the inline rules.

    ``["a", {"b": "external"}, "c*"]`` and
    ``{"a": "inline", "b": "external", "c*": "inline"}`` both produce the same
    ordered rule sequence. A ``null`` outcome means "unset".
    """
    where = f" in '{source}'" if source else ""
    if raw is None:
        return ()
    if isinstance(raw, dict):
        return tuple(_rules_from_object(raw, where))
    if not isinstance(raw, list):
        raise ManifestError(
            f'Invalid "{INLINE_KEY}"{where}: expected an array or an object, '
            f"got {type(raw).__name__}."
        )

    rules: List[InlineRule] = []
    for idx, item in enumerate(raw):
        if isinstance(item, str):
            rules.append(InlineRule.parse(item, Outcome.INLINE))
        elif isinstance(item, dict):
            rules.extend(_rules_from_object(item, where))
        else:
            raise ManifestError(
                f'Invalid "{INLINE_KEY}" entry #{idx}{where}: '
                f"expected a pattern string or a rule object, got {item!r}."
            )
    return tuple(rules)


def parse_strict(raw: Any, source: Optional[Path] = None) -> StrictMode:
    where = f" in '{source}'" if source else ""
    if raw is None:
        return StrictMode.ALLOW
    if isinstance(raw, dict):
        raw = raw.get("externals", StrictMode.ALLOW.value)
    try:
        return StrictMode(raw)
    except ValueError:
        raise ManifestError(
            f'Invalid "{STRICT_KEY}"{where}: {raw!r}, '
            f"expected one of {', '.join(m.value for m in StrictMode)}."
        ) from None


def _rules_from_object(raw: Dict[str, Any], where: str) -> Iterable[InlineRule]:
    for pattern, value in raw.items():
        if not (value is None or isinstance(value, str)) or value not in OUTCOMES:
            raise ManifestError(
                f'Invalid outcome for "{pattern}"{where}: {value!r}, '
                'expected "inline", "external" or null.'
            )
        yield InlineRule.parse(pattern, OUTCOMES[value])


def _dependency_map(raw: Dict[str, Any], key: str, path: Path) -> Dict[str, str]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ManifestError(f"Invalid '{key}' in '{path}': expected an object.")
    return {str(k): str(v) for k, v in value.items()}


def _entry_map(raw: Any, path: Path) -> Optional[Dict[str, str]]:
    if raw is None:
        return None
    if isinstance(raw, str):
        return {"index": raw}
    if not isinstance(raw, dict):
        raise ManifestError(f"Invalid '{ENTRY_KEY}' in '{path}': expected a string or an object.")
    return {str(k): str(v) for k, v in raw.items()}


def _warn_unknown_patterns(rules: Iterable[InlineRule], deps: List[str], path: Path) -> None:
    for rule in rules:
        if rule.is_helpers:
            continue
        if not any(matches(rule, dep) for dep in deps):
            logger.warning(
                "Inline rule '%s' in %s does not match any declared dependency",
                rule.pattern,
                path,
            )
