from __future__ import annotations

from typing import Any, Dict, Optional

from bundlewire.externals.classifier import ExternalsClassifier
from bundlewire.externals.rules import HelperSet
from bundlewire.models import PASSTHROUGH, Handled, HookResult, PackageManifest, ResolvedId
from bundlewire.plugins.base import Plugin


class ExternalsPlugin(Plugin):
    """Leave external imports unresolved; let everything else be bundled.

    It is usually better to inline an import when only this package uses it,
    when its exports minify well (including ``import.meta.env.DEV`` guarded
    code), or generally when inlining saves more bytes in production than
    duplication costs.
    """

    def __init__(self, manifest: PackageManifest, helpers: Optional[HelperSet] = None) -> None:
        self.classifier = ExternalsClassifier(manifest, helpers)

    @property
    def name(self) -> str:
        return "bundlewire:externals"

    def resolve(self, source: str, importer: Optional[str] = None) -> HookResult[ResolvedId]:
        if self.classifier.is_external(source):
            return Handled(ResolvedId(id=source, external=True))
        return PASSTHROUGH

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "strict": self.classifier.manifest.strict_externals.value,
            "rules": [
                [r.operator.value, r.pattern, r.outcome.value] for r in self.classifier.rules
            ],
        }
