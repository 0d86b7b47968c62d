from __future__ import annotations

import logging
from typing import Optional, Tuple

from bundlewire.errors import StrictExternalViolation
from bundlewire.externals.rules import HelperSet, expand_helpers, first_match
from bundlewire.models import (
    Classification,
    InlineRule,
    Outcome,
    PackageManifest,
    StrictMode,
)

logger = logging.getLogger(__name__)


class ExternalsClassifier:
    """Decide whether an import is merged into the output or left external.

    Precedence, first match wins:

    1. Relative imports (``./x``, ``../x``) are always inline.
    2. Manifest rules in declaration order, with the well-known helper rules
       spliced where ``(helpers)`` appears (or appended last). A rule whose
       outcome is ``unset`` never decides.
    3. Import-map (``#x``) and absolute (``/x``) imports are inline.
    4. Everything else is external, subject to the manifest's strict mode.
    """

    def __init__(self, manifest: PackageManifest, helpers: Optional[HelperSet] = None) -> None:
        self.manifest = manifest
        self.helpers = helpers or HelperSet.load_default()
        self.rules: Tuple[InlineRule, ...] = expand_helpers(manifest.inline_rules, self.helpers)

    def classify(self, id: str) -> Classification:
        if id.startswith("."):
            return Classification.INLINE

        rule = first_match(self.rules, id)
        if rule is not None:
            logger.debug("%s matched rule %s -> %s", id, rule.pattern, rule.outcome.value)
            if rule.outcome is Outcome.EXTERNAL:
                return Classification.EXTERNAL
            return Classification.INLINE

        if id.startswith("#") or id.startswith("/"):
            return Classification.INLINE

        self._check_strict(id)
        return Classification.EXTERNAL

    def is_external(self, id: str) -> bool:
        return self.classify(id) is Classification.EXTERNAL

    def _check_strict(self, id: str) -> None:
        mode = self.manifest.strict_externals
        if mode is StrictMode.ALLOW:
            return

        location = self.manifest.manifest_path
        message = [
            f"The external dependency {id} is included in your compiled output. "
            "This means that your compiled output will contain a runtime import of that package.",
            f"This is the default behavior, but you did not specify an inline rule for {id}, "
            f"and there is no built-in rule that applies to {id}.",
        ]
        if mode is StrictMode.ERROR:
            text = "\n\n".join(
                [
                    f"Unexpected external dependency: {id}.",
                    *message,
                    f"This is an error because you are in strict externals mode ({mode.value}), "
                    f'as specified in "bundlewire:strict" in your package.json at:\n  {location}',
                ]
            )
            raise StrictExternalViolation(text, id=id, manifest_path=location)

        text = "\n".join(
            [
                *message,
                f"This message appears because you are in strict externals mode ({mode.value}), "
                f'as specified in "bundlewire:strict" in your package.json at:\n  {location}',
            ]
        )
        logger.warning(text)
