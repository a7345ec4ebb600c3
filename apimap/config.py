"""Configuration loading for apimap (.apimap.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".apimap.yml"

DEFAULT_EXCLUDED_METHODS = ("constructor", "get", "set", "addListener", "sendCommand")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class SourceConfig:
    """Where declaration files come from."""

    package: str = "ableton-js"
    subdir: str = "ns"
    path: Optional[Path] = None
    pattern: str = "**/*.d.ts"


@dataclass
class ExtractConfig:
    """Knobs for class eligibility and member extraction."""

    marker: str = "Namespace"
    gettable_interface: str = "GettableProperties"
    settable_interface: str = "SettableProperties"
    exclude_methods: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDED_METHODS))


@dataclass
class OutputConfig:
    """Generated module destination and layout."""

    path: Path = Path("generated/ableton_api_map.py")
    format: str = "python"
    export_name: Optional[str] = None


@dataclass
class ApiMapConfig:
    """Represents the settings defined in .apimap.yml."""

    root: Path
    source: SourceConfig = field(default_factory=SourceConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def load_config(config_path: Path) -> ApiMapConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ApiMapConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    source = SourceConfig()
    source_data = _as_dict(data.get("source"))
    if source_data:
        source.package = _as_str(source_data.get("package")) or source.package
        source.subdir = _as_str(source_data.get("subdir")) or source.subdir
        source.pattern = _as_str(source_data.get("pattern")) or source.pattern
        path_str = _as_str(source_data.get("path"))
        source.path = root / path_str if path_str else None

    extract = ExtractConfig()
    extract_data = _as_dict(data.get("extract"))
    if extract_data:
        extract.marker = _as_str(extract_data.get("marker")) or extract.marker
        extract.gettable_interface = (
            _as_str(extract_data.get("gettable_interface")) or extract.gettable_interface
        )
        extract.settable_interface = (
            _as_str(extract_data.get("settable_interface")) or extract.settable_interface
        )
        if "exclude_methods" in extract_data:
            extract.exclude_methods = _as_str_list(extract_data.get("exclude_methods"))

    output = OutputConfig()
    output_data = _as_dict(data.get("output"))
    if output_data:
        path_str = _as_str(output_data.get("path"))
        if path_str:
            output.path = Path(path_str)
        output.format = (_as_str(output_data.get("format")) or output.format).lower()
        output.export_name = _as_str(output_data.get("export_name"))

    return ApiMapConfig(root=root, source=source, extract=extract, output=output)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []
