from .classifier import ExternalsClassifier
from .rules import HelperSet, expand_helpers, first_match, matches

__all__ = [
    "ExternalsClassifier",
    "HelperSet",
    "expand_helpers",
    "first_match",
    "matches",
]
