from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer

from bundlewire.compile import compile
from bundlewire.config import resolve_mode, resolve_trace
from bundlewire.errors import BundlewireError, StrictExternalViolation
from bundlewire.externals.classifier import ExternalsClassifier
from bundlewire.manifest.loader import load_package
from bundlewire.models import CompileOptions
from bundlewire.replace.rewriter import TokenRewriter
from bundlewire.replace.table import ReplacementTable
from bundlewire.storage.artifacts import ArtifactStore

logger = logging.getLogger("bundlewire")

app = typer.Typer(no_args_is_help=True)


@app.callback()
def _main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _fail(exc: BundlewireError) -> None:
    typer.echo(str(exc), err=True)
    if exc.hint:
        typer.echo(f"hint: {exc.hint}", err=True)
    raise typer.Exit(code=1)


@app.command()
def classify(root: Path, ids: List[str]) -> None:
    """Classify import identifiers as inline or external."""
    try:
        classifier = ExternalsClassifier(load_package(root))
    except BundlewireError as exc:
        _fail(exc)

    for id in ids:
        try:
            verdict = classifier.classify(id)
        except StrictExternalViolation as exc:
            _fail(exc)
        typer.echo(f"{id}\t{verdict.value}")


@app.command()
def rewrite(
    file: Path,
    mode: Optional[str] = typer.Option(None, help="development|production (default: $MODE)"),
    trace: Optional[bool] = typer.Option(None, "--trace/--no-trace", help="Enable trace guards"),
    out_dir: Optional[Path] = typer.Option(None, help="Write code and source map here"),
    sourcemap: bool = typer.Option(True, "--sourcemap/--no-sourcemap"),
) -> None:
    """Replace import.meta.env guards in a source file."""
    resolved_mode = resolve_mode(mode)
    table = ReplacementTable.for_mode(resolved_mode, trace=resolve_trace(trace))
    logger.info("Rewriting %s for mode %s", file, resolved_mode)

    code = file.read_text(encoding="utf-8")
    result = TokenRewriter(table, sourcemap=sourcemap).rewrite(code, source=file.name)
    if result is None:
        typer.echo(f"{file}: unchanged")
        return

    if out_dir is None:
        typer.echo(result.code, nl=False)
        return
    path = ArtifactStore(out_dir).save_rewrite(file.name, result)
    typer.echo(f"wrote: {path}")


@app.command()
def plan(
    root: Path,
    changelog: bool = typer.Option(
        True, "--changelog/--no-changelog", help="Copy the monorepo CHANGELOG.md"
    ),
    out_dir: Optional[Path] = typer.Option(None, help="Write build-plan.json here"),
) -> None:
    """Print the build configurations for a package."""
    try:
        configs = compile(root, CompileOptions(copy_root_changelog=changelog))
    except BundlewireError as exc:
        _fail(exc)

    logger.info("Planned %d builds", len(configs))
    if out_dir is not None:
        path = ArtifactStore(out_dir).save_plan(configs)
        typer.echo(f"wrote: {path}")
        return
    typer.echo(json.dumps({"builds": [c.to_dict() for c in configs]}, indent=2))
