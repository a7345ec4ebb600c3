"""Loads declaration files and locates namespace classes."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Tuple

from tree_sitter import Node

from ..logging import get_logger
from .model import DeclarationFile, DeclarationSet
from .syntax import CLASS_TYPES, create_parser, find_child

DEFAULT_PATTERN = "**/*.d.ts"
DEFAULT_MARKER = "Namespace"

logger = get_logger("scanner")


def is_namespace_class(heritage_text: str, marker: str = DEFAULT_MARKER) -> bool:
    """Return True when an ``extends`` clause names the namespace base.

    This is a plain substring test on the clause text, so any occurrence of
    ``Marker<`` qualifies, including inside a type argument.
    """
    return f"{marker}<" in heritage_text


def extends_text(decl_file: DeclarationFile, class_node: Node) -> str | None:
    """Return the source text after ``extends`` for a class, if any."""
    heritage = find_child(class_node, "class_heritage")
    if heritage is None:
        return None
    clause = find_child(heritage, "extends_clause")
    if clause is None:
        return None
    parts = [child for child in clause.children if child.type != "extends"]
    if not parts:
        return None
    source = decl_file.source
    return source[parts[0].start_byte : parts[-1].end_byte].decode("utf-8", errors="replace")


class DeclarationScanner:
    """Builds a DeclarationSet from a directory and finds eligible classes."""

    def __init__(self, pattern: str = DEFAULT_PATTERN, marker: str = DEFAULT_MARKER) -> None:
        self.pattern = pattern
        self.marker = marker

    def load(self, root: str | Path) -> DeclarationSet:
        """Parse every file under ``root`` matching the glob pattern.

        Only the matched files are read; no project configuration is consulted
        and imports pointing outside the matched set are left unresolved.
        """
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Declaration root not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Declaration root is not a directory: {root}")

        parser = create_parser()
        files: List[DeclarationFile] = []
        for path in self._iter_paths(root_path):
            rel_path = path.relative_to(root_path).as_posix()
            try:
                source = path.read_bytes()
                source.decode("utf-8")
            except OSError as exc:
                logger.warning("Skipping unreadable declaration file %s: %s", rel_path, exc)
                continue
            except UnicodeDecodeError as exc:
                logger.warning("Skipping undecodable declaration file %s: %s", rel_path, exc)
                continue
            files.append(DeclarationFile.parse(path, rel_path, source, parser))
            logger.debug("Loaded %s", rel_path)

        logger.info("Loaded %d declaration files from %s", len(files), root_path)
        return DeclarationSet(root_path, files)

    def eligible_classes(self, declarations: DeclarationSet) -> Iterator[Tuple[DeclarationFile, Node]]:
        for decl_file in declarations:
            for node in decl_file.top_level_declarations():
                if node.type not in CLASS_TYPES:
                    continue
                heritage = extends_text(decl_file, node)
                if heritage is None:
                    continue
                if not is_namespace_class(heritage, self.marker):
                    logger.debug(
                        "Skipping class in %s: heritage %r lacks %s<",
                        decl_file.relative_path,
                        heritage,
                        self.marker,
                    )
                    continue
                yield decl_file, node

    def _iter_paths(self, root: Path) -> List[Path]:
        paths = [path for path in root.glob(self.pattern) if path.is_file()]
        return sorted(paths, key=lambda path: path.relative_to(root).as_posix())


__all__ = [
    "DEFAULT_MARKER",
    "DEFAULT_PATTERN",
    "DeclarationScanner",
    "extends_text",
    "is_namespace_class",
]
