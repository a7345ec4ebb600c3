"""End-to-end generation: resolve, scan, extract, assemble, write."""

from __future__ import annotations

import difflib
from dataclasses import dataclass
from pathlib import Path
from typing import List

from .config import ApiMapConfig, load_config
from .declarations import DeclarationScanner, MemberExtractor, TypeClassifier
from .logging import get_logger
from .models import ClassRecord
from .registry import Registry, RegistryAssembler, render_registry
from .resolver import resolve_package_dir


@dataclass
class GenerationOutcome:
    """Result of a generation run."""

    path: Path
    registry: Registry
    content: str
    changed: bool
    diff: str
    dry_run: bool


class Generator:
    """Coordinates a single registry generation run."""

    def __init__(self, assembler: RegistryAssembler | None = None) -> None:
        self.assembler = assembler or RegistryAssembler()
        self.logger = get_logger("pipeline")

    def build_registry(
        self,
        project_root: str | Path,
        *,
        source: str | Path | None = None,
        config: ApiMapConfig | None = None,
    ) -> Registry:
        """Scan the declaration tree and return the assembled registry."""
        root = Path(project_root).expanduser().resolve()
        config = config or load_config(root)
        source_dir = self.resolve_source(root, config, source)
        self.logger.info("Scanning declarations under %s", source_dir)

        scanner = DeclarationScanner(pattern=config.source.pattern, marker=config.extract.marker)
        declarations = scanner.load(source_dir)
        for decl_file in declarations:
            self.logger.debug("- %s", decl_file.relative_path)

        extractor = MemberExtractor(
            TypeClassifier(declarations),
            gettable_interface=config.extract.gettable_interface,
            settable_interface=config.extract.settable_interface,
            excluded_methods=config.extract.exclude_methods,
        )
        records: List[ClassRecord] = [
            extractor.extract(decl_file, class_node)
            for decl_file, class_node in scanner.eligible_classes(declarations)
        ]
        self.logger.info("Found %d namespace classes", len(records))
        return self.assembler.assemble(records)

    def run(
        self,
        project_root: str | Path,
        *,
        source: str | Path | None = None,
        output: str | Path | None = None,
        fmt: str | None = None,
        export_name: str | None = None,
        package: str | None = None,
        subdir: str | None = None,
        dry_run: bool = False,
    ) -> GenerationOutcome:
        root = Path(project_root).expanduser().resolve()
        config = load_config(root)
        if package:
            config.source.package = package
            config.source.path = None
        if subdir is not None:
            config.source.subdir = subdir
        registry = self.build_registry(root, source=source, config=config)

        output_path = Path(output) if output is not None else config.output.path
        if not output_path.is_absolute():
            output_path = root / output_path
        content = render_registry(
            registry,
            fmt or config.output.format,
            export_name=export_name or config.output.export_name,
        )

        previous = ""
        if output_path.exists():
            previous = output_path.read_text(encoding="utf-8")
        changed = previous != content
        diff = _unified_diff(previous, content, output_path, root) if changed else ""

        if changed and not dry_run:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(content, encoding="utf-8")
            self.logger.info("Wrote %s", output_path)
        elif not changed:
            self.logger.info("%s already up to date", output_path)

        return GenerationOutcome(
            path=output_path,
            registry=registry,
            content=content,
            changed=changed,
            diff=diff,
            dry_run=dry_run,
        )

    @staticmethod
    def resolve_source(
        root: Path, config: ApiMapConfig, source: str | Path | None = None
    ) -> Path:
        if source is not None:
            source_path = Path(source).expanduser()
            return source_path if source_path.is_absolute() else root / source_path
        if config.source.path is not None:
            return config.source.path
        return resolve_package_dir(config.source.package, start=root, subdir=config.source.subdir)


def _unified_diff(before: str, after: str, path: Path, root: Path) -> str:
    try:
        label = path.relative_to(root).as_posix()
    except ValueError:
        label = str(path)
    return "".join(
        difflib.unified_diff(
            before.splitlines(keepends=True),
            after.splitlines(keepends=True),
            fromfile=f"a/{label}",
            tofile=f"b/{label}",
        )
    )


__all__ = ["GenerationOutcome", "Generator"]
