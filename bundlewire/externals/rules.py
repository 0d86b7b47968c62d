from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import yaml

from bundlewire.errors import ManifestError
from bundlewire.models import InlineRule, Operator, Outcome

logger = logging.getLogger(__name__)

# Characters a wildcard may stand for: npm name characters plus "/" for subpaths.
WILDCARD_TAIL = re.compile(r"[A-Za-z0-9._~/-]+")


def matches(rule: InlineRule, id: str) -> bool:
    if rule.operator is Operator.EXACT:
        return id == rule.pattern
    prefix = rule.prefix
    if not id.startswith(prefix):
        return False
    return WILDCARD_TAIL.fullmatch(id, len(prefix)) is not None


def first_match(rules: Iterable[InlineRule], id: str) -> Optional[InlineRule]:
    """Return the first rule that matches ``id`` with a decisive outcome.

    Rules whose outcome is ``unset`` are skipped even when they match.
    """
    for rule in rules:
        if rule.outcome is Outcome.UNSET:
            continue
        if matches(rule, id):
            return rule
    return None


@dataclass(frozen=True)
class HelperSet:
    patterns: Tuple[str, ...]

    @classmethod
    def load_default(cls) -> "HelperSet":
        data_path = Path(__file__).resolve().parent.parent / "data" / "helpers.yaml"
        return cls.load_from_path(data_path)

    @classmethod
    def load_from_path(cls, path: Path) -> "HelperSet":
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ManifestError(f"Could not parse helper list '{path}': {e}") from e
        except OSError as e:
            raise FileNotFoundError(f"Helper list not found: {path}") from e

        if not isinstance(raw, dict) or not isinstance(raw.get("helpers"), list):
            raise ManifestError(
                f"Invalid helper list '{path}': expected a top-level 'helpers' list."
            )
        patterns = tuple(str(p) for p in raw["helpers"])
        logger.debug("Loaded %d helper patterns from %s", len(patterns), path.name)
        return cls(patterns=patterns)

    def rules(self, outcome: Outcome = Outcome.INLINE) -> List[InlineRule]:
        return [InlineRule.parse(p, outcome) for p in self.patterns]


def expand_helpers(rules: Iterable[InlineRule], helpers: HelperSet) -> Tuple[InlineRule, ...]:
    """Splice helper rules into ``rules``.

    Every ``(helpers)`` marker is replaced by the helper rules carrying the
    marker's outcome. Without a marker the helpers go last, as inline.
    """
    expanded: List[InlineRule] = []
    spliced = False
    for rule in rules:
        if rule.is_helpers:
            expanded.extend(helpers.rules(rule.outcome))
            spliced = True
        else:
            expanded.append(rule)
    if not spliced:
        expanded.extend(helpers.rules(Outcome.INLINE))
    return tuple(expanded)
