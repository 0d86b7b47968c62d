from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar, Union

T = TypeVar("T")

HELPERS_PATTERN = "(helpers)"


class Classification(str, Enum):
    INLINE = "inline"
    EXTERNAL = "external"


class Outcome(str, Enum):
    INLINE = "inline"
    EXTERNAL = "external"
    UNSET = "unset"


class Operator(str, Enum):
    STARTS_WITH = "startsWith"
    EXACT = "exact"


class StrictMode(str, Enum):
    ALLOW = "allow"
    WARN = "warn"
    ERROR = "error"


@dataclass(frozen=True)
class InlineRule:
    operator: Operator
    pattern: str
    outcome: Outcome

    @classmethod
    def parse(cls, pattern: str, outcome: Outcome = Outcome.INLINE) -> "InlineRule":
        if pattern.endswith("*"):
            return cls(Operator.STARTS_WITH, pattern, outcome)
        return cls(Operator.EXACT, pattern, outcome)

    @property
    def prefix(self) -> str:
        if self.operator is Operator.STARTS_WITH:
            return self.pattern[:-1]
        return self.pattern

    @property
    def is_helpers(self) -> bool:
        return self.pattern == HELPERS_PATTERN


@dataclass(frozen=True)
class PackageManifest:
    root: Path
    name: str = ""
    dependencies: Dict[str, str] = field(default_factory=dict)
    optional_dependencies: Dict[str, str] = field(default_factory=dict)
    peer_dependencies: Dict[str, str] = field(default_factory=dict)
    strict_externals: StrictMode = StrictMode.ALLOW
    inline_rules: Tuple[InlineRule, ...] = ()
    entry: Optional[Dict[str, str]] = None

    @property
    def manifest_path(self) -> Path:
        return self.root / "package.json"

    @property
    def runtime_dependencies(self) -> List[str]:
        return [*self.dependencies, *self.optional_dependencies]


@dataclass(frozen=True)
class Handled(Generic[T]):
    value: T


class _Passthrough:
    _instance: Optional["_Passthrough"] = None

    def __new__(cls) -> "_Passthrough":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "PASSTHROUGH"

    def __bool__(self) -> bool:
        return False


PASSTHROUGH = _Passthrough()

HookResult = Union[Handled[T], _Passthrough]


@dataclass(frozen=True)
class ResolvedId:
    id: str
    external: bool = False


@dataclass(frozen=True)
class LoadResult:
    code: str
    map: Optional[Any] = None


@dataclass
class CompileOptions:
    copy_root_changelog: bool = True
    target: str = "esnext"


@dataclass
class BuildConfig:
    input: Path
    output_file: Path
    mode: Optional[str]
    plugins: List[Any] = field(default_factory=list)
    external: List[str] = field(default_factory=list)
    format: str = "esm"
    sourcemap: bool = True
    exports: str = "auto"
    treeshake: bool = True
    hoist_transitive_imports: bool = False
    silenced_warnings: Tuple[str, ...] = ("CIRCULAR_DEPENDENCY", "EMPTY_BUNDLE")

    def should_warn(self, code: str) -> bool:
        return code not in self.silenced_warnings

    def to_dict(self) -> Dict[str, Any]:
        return {
            "input": str(self.input),
            "mode": self.mode,
            "treeshake": self.treeshake,
            "external": list(self.external),
            "output": {
                "file": str(self.output_file),
                "format": self.format,
                "sourcemap": self.sourcemap,
                "hoistTransitiveImports": self.hoist_transitive_imports,
                "exports": self.exports,
            },
            "plugins": [plugin.describe() for plugin in self.plugins],
            "silencedWarnings": list(self.silenced_warnings),
        }
