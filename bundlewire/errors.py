"""Exception hierarchy for bundlewire."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping


class BundlewireError(Exception):
    """Base exception for all bundlewire errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ManifestError(BundlewireError, ValueError):
    """A package.json field has an unexpected shape or value."""


class PackageNotFoundError(BundlewireError, FileNotFoundError):
    """No package.json was found at or above the requested location."""


class StrictExternalViolation(BundlewireError):
    """An import fell through to the external default in strict `error` mode."""

    def __init__(self, message: str, *, id: str, manifest_path: Path) -> None:
        super().__init__(
            message,
            hint=f'Add an inline rule for {id} to "bundlewire:inline" in {manifest_path}',
        )
        self.id = id
        self.manifest_path = manifest_path


class MissingReplacement(BundlewireError):
    """A matched token has no entry in the replacement table."""

    def __init__(self, message: str, *, token: str, replacements: Mapping[str, str]) -> None:
        super().__init__(message)
        self.token = token
        self.replacements = dict(replacements)
