from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Union

from bundlewire.config import MODES, resolve_trace
from bundlewire.errors import BundlewireError
from bundlewire.manifest.loader import load_package
from bundlewire.models import BuildConfig, CompileOptions, PackageManifest
from bundlewire.plugins.base import Plugin
from bundlewire.plugins.copy_files import CopyPlugin, CopyTarget
from bundlewire.plugins.externals import ExternalsPlugin
from bundlewire.plugins.replace import import_meta_plugin
from bundlewire.plugins.typescript import DEFAULT_COMPILER_OPTIONS, TypeScriptPlugin

logger = logging.getLogger("bundlewire")


def compile(
    start: Union[str, Path],
    options: Optional[CompileOptions] = None,
    trace: Optional[bool] = None,
) -> List[BuildConfig]:
    pkg = load_package(start)
    return compile_package(pkg, options or CompileOptions(), trace=resolve_trace(trace))


def compile_package(
    pkg: PackageManifest,
    options: CompileOptions,
    trace: bool = False,
) -> List[BuildConfig]:
    """One build per mode per entry point.

    ``development`` and ``production`` builds get their ``import.meta.env``
    guards replaced; the mode-less build keeps them.
    """
    configs: List[BuildConfig] = []
    for mode in MODES:
        plugins: List[Plugin] = []
        if mode:
            plugins.append(import_meta_plugin(mode, trace=trace))
        plugins.append(ExternalsPlugin(pkg))
        plugins.append(
            TypeScriptPlugin(mode, pkg.root, {**DEFAULT_COMPILER_OPTIONS, "target": options.target})
        )

        entries = entry_points(pkg, mode, plugins)
        # The changelog only needs copying once per mode.
        if options.copy_root_changelog and entries:
            entries[0].plugins.append(copy_root_changelog(pkg))
        configs.extend(entries)
    return configs


def entry_points(
    pkg: PackageManifest, mode: Optional[str], plugins: List[Plugin]
) -> List[BuildConfig]:
    if pkg.entry is None:
        logger.warning("No entry point found for package %s", pkg.name)
        return []
    return [
        BuildConfig(
            input=(pkg.root / source).resolve(),
            output_file=filename(pkg.root, name, mode),
            mode=mode,
            plugins=list(plugins),
            external=list(pkg.dependencies),
        )
        for name, source in pkg.entry.items()
    ]


def filename(root: Path, name: str, mode: Optional[str], ext: str = "js") -> Path:
    if mode:
        return (root / "dist" / f"{name}.{mode}.{ext}").resolve()
    return (root / "dist" / f"{name}.{ext}").resolve()


def monorepo_root(root: Path) -> Path:
    try:
        output = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=root,
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        detail = (e.stderr or "").strip() or f"git exited with {e.returncode}"
        raise BundlewireError(
            f"Cannot find the monorepo root for {root}: {detail}",
            hint="Run inside a git checkout, or pass --no-changelog.",
        ) from e
    except OSError as e:
        raise BundlewireError(
            f"Cannot run git to find the monorepo root for {root}: {e}",
            hint="Install git, or pass --no-changelog.",
        ) from e
    return Path(output.stdout.strip())


def copy_root_changelog(pkg: PackageManifest) -> CopyPlugin:
    changelog = monorepo_root(pkg.root) / "CHANGELOG.md"
    return CopyPlugin([CopyTarget(src=changelog, dest=".")])
