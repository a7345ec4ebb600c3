"""Registry assembly and generated-module rendering."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .logging import get_logger
from .models import ClassRecord

FORMATS = ("python", "typescript", "json")

DEFAULT_EXPORT_NAMES = {
    "python": "ABLETON_API_MAP",
    "typescript": "abletonApiMap",
}

_TEMPLATES = {
    "python": ("registry.py.j2", 4),
    "typescript": ("registry.ts.j2", 2),
}

logger = get_logger("registry")


class Registry:
    """Ordered mapping of class name to ClassRecord.

    A name keeps the position of its first insertion; re-adding the name
    replaces the stored record in place.
    """

    def __init__(self) -> None:
        self._records: Dict[str, ClassRecord] = {}

    def add(self, record: ClassRecord) -> Optional[ClassRecord]:
        """Insert ``record``, returning the record it replaced, if any."""
        previous = self._records.get(record.name)
        if previous is not None:
            logger.debug(
                "Class %s from %s overrides the one from %s",
                record.name,
                record.source or "<unknown>",
                previous.source or "<unknown>",
            )
        self._records[record.name] = record
        return previous

    def get(self, name: str) -> Optional[ClassRecord]:
        return self._records.get(name)

    def names(self) -> List[str]:
        return list(self._records)

    def __contains__(self, name: object) -> bool:
        return name in self._records

    def __iter__(self) -> Iterator[ClassRecord]:
        return iter(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {name: record.to_dict() for name, record in self._records.items()}


class RegistryAssembler:
    """Folds extracted class records into a Registry."""

    def assemble(self, records: Iterable[ClassRecord]) -> Registry:
        registry = Registry()
        for record in records:
            registry.add(record)
        return registry


def render_registry(
    registry: Registry,
    fmt: str = "python",
    *,
    export_name: str | None = None,
    templates_dir: Path | None = None,
) -> str:
    """Serialize ``registry`` as a generated module in the requested format.

    Output is a pure function of the registry contents: key, property and
    parameter order are carried through unchanged and no timestamps are
    embedded.
    """
    fmt = fmt.lower()
    if fmt not in FORMATS:
        raise ValueError(f"Unsupported output format '{fmt}'. Choose from: {', '.join(FORMATS)}")

    payload = registry.to_dict()
    if fmt == "json":
        return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"

    name = export_name or DEFAULT_EXPORT_NAMES[fmt]
    if not name.isidentifier():
        raise ValueError(f"Export name '{name}' is not a valid identifier")

    template_name, indent = _TEMPLATES[fmt]
    template = _environment(templates_dir).get_template(template_name)
    return template.render(
        export_name=name,
        payload=json.dumps(payload, indent=indent, ensure_ascii=False),
    )


def _environment(templates_dir: Path | None) -> Environment:
    directory = templates_dir or Path(__file__).with_name("templates")
    return Environment(
        loader=FileSystemLoader(str(directory)),
        autoescape=False,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )


__all__ = ["DEFAULT_EXPORT_NAMES", "FORMATS", "Registry", "RegistryAssembler", "render_registry"]
