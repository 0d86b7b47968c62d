"""Describe the swc-based TypeScript transpile step.

The step does not type-check. It assumes code that can be compiled one
module at a time (``verbatimModuleSyntax``, ``import type`` for type-only
imports, no reliance on ``const enum`` inlining). Verification runs
separately, before the build.
"""

from __future__ import annotations

import copy
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from bundlewire.errors import ManifestError
from bundlewire.plugins.base import Plugin

logger = logging.getLogger(__name__)

TSCONFIG_NAME = "tsconfig.json"

_JSONC_STRING = r'("(?:\\.|[^"\\])*")'
_JSONC_COMMENTS = re.compile(_JSONC_STRING + r"|//[^\n]*|/\*.*?\*/", re.S)
_JSONC_TRAILING_COMMAS = re.compile(_JSONC_STRING + r"|,(?=\s*[}\]])")

DEFAULT_COMPILER_OPTIONS: Dict[str, Any] = {
    "target": "esnext",
    "module": "esnext",
    "moduleDetection": "force",
    "moduleResolution": "bundler",
    "verbatimModuleSyntax": True,
}

PRODUCTION_MINIFY: Dict[str, Any] = {
    "mangle": {"toplevel": True, "properties": {"builtins": False}},
    "module": True,
    "compress": {
        "module": True,
        "passes": 4,
        "unsafe_math": True,
        "unsafe_symbols": True,
        "hoist_funs": True,
        "conditionals": True,
        "drop_debugger": True,
        "evaluate": True,
        "reduce_vars": True,
        "side_effects": True,
        "dead_code": True,
        "defaults": True,
        "unused": True,
    },
}


def find_tsconfig(root: Path) -> Optional[Path]:
    for candidate in (root, *root.parents):
        path = candidate / TSCONFIG_NAME
        if path.is_file():
            return path
    return None


def _read_jsonc(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    text = _JSONC_COMMENTS.sub(lambda m: m.group(1) or "", text)
    text = _JSONC_TRAILING_COMMAS.sub(lambda m: m.group(1) or "", text)
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Could not parse '{path}': {e}") from e
    if not isinstance(raw, dict):
        raise ManifestError(f"Invalid '{path}': expected a JSON object.")
    return raw


def resolve_extends(path: Path, spec: str) -> Path:
    """Locate the config named by an ``extends`` entry of ``path``."""
    if spec.startswith(".") or Path(spec).is_absolute():
        candidates = [path.parent / spec]
    else:
        candidates = [d / "node_modules" / spec for d in (path.parent, *path.parent.parents)]

    for candidate in candidates:
        for option in (candidate, candidate.with_name(candidate.name + ".json"), candidate / TSCONFIG_NAME):
            if option.is_file():
                return option.resolve()
    raise ManifestError(f"Cannot find base config '{spec}' extended by '{path}'.")


def load_tsconfig(path: Path, _seen: Optional[Tuple[Path, ...]] = None) -> Dict[str, Any]:
    """Load a tsconfig, following ``extends`` and merging ``compilerOptions`` base first."""
    path = path.resolve()
    seen = _seen or ()
    if path in seen:
        raise ManifestError(f"Circular 'extends' in '{path}'.")
    seen = (*seen, path)

    raw = _read_jsonc(path)
    extends = raw.get("extends")
    if not extends:
        return raw
    bases = [extends] if isinstance(extends, str) else extends
    if not isinstance(bases, list) or not all(isinstance(b, str) for b in bases):
        raise ManifestError(f"Invalid 'extends' in '{path}': expected a string or a list of strings.")

    compiler_options: Dict[str, Any] = {}
    for base in bases:
        base_path = resolve_extends(path, base)
        logger.debug("%s extends %s", path, base_path)
        compiler_options.update(load_tsconfig(base_path, seen).get("compilerOptions") or {})
    compiler_options.update(raw.get("compilerOptions") or {})
    return {**raw, "compilerOptions": compiler_options}


class TypeScriptPlugin(Plugin):
    def __init__(
        self,
        mode: Optional[str],
        root: Path,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.mode = mode
        self.root = root
        self.overrides = dict(DEFAULT_COMPILER_OPTIONS if overrides is None else overrides)

    @property
    def name(self) -> str:
        return "bundlewire:typescript"

    def compiler_options(self) -> Dict[str, Any]:
        path = find_tsconfig(self.root)
        options: Dict[str, Any] = {}
        if path is not None:
            options = dict(load_tsconfig(path).get("compilerOptions") or {})
            logger.debug("Using compiler options from %s", path)
        return {**options, **self.overrides}

    def jsc_config(self, compiler_options: Dict[str, Any]) -> Dict[str, Any]:
        jsc: Dict[str, Any] = {"transform": {"treatConstEnumAsEnum": True}}
        if self.mode == "production":
            jsc["minify"] = copy.deepcopy(PRODUCTION_MINIFY)

        react: Dict[str, Any] = {}
        factory = compiler_options.get("jsxFactory")
        fragment = compiler_options.get("jsxFragmentFactory")
        if factory and fragment:
            react.update(pragma=factory, pragmaFrag=fragment)
        import_source = compiler_options.get("jsxImportSource")
        if import_source:
            react.update(runtime="automatic", importSource=import_source)
        if react:
            jsc["transform"]["react"] = react
        return jsc

    def options(self) -> Dict[str, Any]:
        compiler_options = self.compiler_options()
        return {
            "transpiler": "swc",
            "transpileOnly": True,
            "swcConfig": {"jsc": self.jsc_config(compiler_options)},
            "tsconfig": compiler_options,
        }

    def describe(self) -> Dict[str, Any]:
        return {"name": self.name, "mode": self.mode, "options": self.options()}
