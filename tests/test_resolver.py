"""Tests for apimap.resolver."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from apimap.resolver import PackageResolutionError, resolve_package_dir


def _install(node_modules: Path, package: str, manifest: dict, subdir: str = "ns") -> Path:
    package_dir = node_modules / package
    package_dir.mkdir(parents=True)
    (package_dir / "package.json").write_text(json.dumps(manifest), encoding="utf-8")
    main = manifest.get("main") or "index.js"
    target = (package_dir / main).parent / subdir
    target.mkdir(parents=True, exist_ok=True)
    return target


def test_resolves_ns_dir_next_to_main_entry(tmp_path: Path) -> None:
    expected = _install(tmp_path / "node_modules", "ableton-js", {"name": "ableton-js", "main": "index.js"})

    assert resolve_package_dir("ableton-js", start=tmp_path) == expected.resolve()


def test_walks_up_from_nested_start_directory(tmp_path: Path) -> None:
    expected = _install(tmp_path / "node_modules", "ableton-js", {"main": "dist/index.js"})
    nested = tmp_path / "src" / "server"
    nested.mkdir(parents=True)

    resolved = resolve_package_dir("ableton-js", start=nested)

    assert resolved == expected.resolve()
    assert resolved.parts[-2:] == ("dist", "ns")


def test_missing_main_defaults_to_index(tmp_path: Path) -> None:
    expected = _install(tmp_path / "node_modules", "ableton-js", {"name": "ableton-js"})

    assert resolve_package_dir("ableton-js", start=tmp_path) == expected.resolve()


def test_node_path_is_searched(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    global_modules = tmp_path / "global"
    expected = _install(global_modules, "ableton-js", {"main": "index.js"})
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.setenv("NODE_PATH", str(global_modules))

    assert resolve_package_dir("ableton-js", start=project).resolve() == expected.resolve()


def test_missing_package_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NODE_PATH", raising=False)

    with pytest.raises(PackageResolutionError) as excinfo:
        resolve_package_dir("not-installed-anywhere-xyz", start=tmp_path)

    assert isinstance(excinfo.value, FileNotFoundError)
    assert "Could not resolve not-installed-anywhere-xyz package" in str(excinfo.value)


def test_missing_declaration_subdir_raises(tmp_path: Path) -> None:
    _install(tmp_path / "node_modules", "ableton-js", {"main": "index.js"})

    with pytest.raises(PackageResolutionError, match="is not a directory"):
        resolve_package_dir("ableton-js", start=tmp_path, subdir="types")
