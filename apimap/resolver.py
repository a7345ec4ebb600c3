"""Locates the declaration directory of an installed npm package."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Iterator, List

from .logging import get_logger

logger = get_logger("resolver")


class PackageResolutionError(FileNotFoundError):
    """Raised when a package or its declaration directory cannot be found."""


def resolve_package_dir(
    package: str, *, start: str | Path | None = None, subdir: str = "ns"
) -> Path:
    """Return ``dirname(<package main entry>) / subdir``.

    ``node_modules`` directories are searched from ``start`` upwards, then
    every ``NODE_PATH`` entry, mirroring Node's lookup order.
    """
    start_path = Path(start or Path.cwd()).expanduser().resolve()
    for candidate in _candidate_roots(start_path, package):
        manifest = candidate / "package.json"
        if not manifest.is_file():
            continue
        entry = candidate / _main_entry(manifest)
        target = entry.parent / subdir if subdir else entry.parent
        logger.debug("Resolved %s to %s", package, candidate)
        if not target.is_dir():
            raise PackageResolutionError(
                f"Could not resolve {package} package: {target} is not a directory"
            )
        return target
    raise PackageResolutionError(f"Could not resolve {package} package from {start_path}")


def _candidate_roots(start: Path, package: str) -> Iterator[Path]:
    for directory in (start, *start.parents):
        if directory.name == "node_modules":
            continue
        yield directory / "node_modules" / package
    for entry in _node_path_entries():
        yield entry / package


def _node_path_entries() -> List[Path]:
    raw = os.environ.get("NODE_PATH", "")
    return [Path(part).expanduser() for part in raw.split(os.pathsep) if part.strip()]


def _main_entry(manifest: Path) -> str:
    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise PackageResolutionError(f"Unreadable package manifest {manifest}: {exc}") from exc
    main = data.get("main") if isinstance(data, dict) else None
    if isinstance(main, str) and main.strip():
        return main.strip()
    return "index.js"


__all__ = ["PackageResolutionError", "resolve_package_dir"]
