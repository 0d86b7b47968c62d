from .loader import (
    find_package_root,
    load_manifest,
    load_package,
    normalize_rules,
    parse_strict,
)

__all__ = [
    "find_package_root",
    "load_manifest",
    "load_package",
    "normalize_rules",
    "parse_strict",
]
