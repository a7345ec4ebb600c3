"""Tests for apimap.registry."""

from __future__ import annotations

import json

import pytest

from apimap.models import ClassRecord, MethodDescriptor, PropertyDescriptor
from apimap.registry import Registry, RegistryAssembler, render_registry


def _song() -> ClassRecord:
    return ClassRecord(
        name="Song",
        gettable=[PropertyDescriptor("tempo", "number"), PropertyDescriptor("is_playing", "boolean")],
        settable=[PropertyDescriptor("name", "string")],
        methods=[
            MethodDescriptor(
                "createMidiTrack",
                [PropertyDescriptor("index", "number")],
            ),
            MethodDescriptor(
                "setView",
                [PropertyDescriptor("view", "('Session' | 'Arranger')"), PropertyDescriptor("focus", "boolean")],
            ),
        ],
        source="song.d.ts",
    )


def _registry() -> Registry:
    return RegistryAssembler().assemble(
        [
            ClassRecord(name="Track", source="track.d.ts"),
            _song(),
            ClassRecord(name="Clip", source="clip.d.ts"),
        ]
    )


def test_assemble_preserves_first_seen_order() -> None:
    registry = _registry()
    assert registry.names() == ["Track", "Song", "Clip"]
    assert len(registry) == 3
    assert "Song" in registry


def test_last_write_wins_but_keeps_position() -> None:
    registry = _registry()
    replacement = ClassRecord(
        name="Track",
        methods=[MethodDescriptor("stop")],
        source="other/track.d.ts",
    )

    previous = registry.add(replacement)

    assert previous is not None and previous.source == "track.d.ts"
    assert registry.names() == ["Track", "Song", "Clip"]
    assert registry.get("Track") is replacement


def test_to_dict_shape_and_order() -> None:
    payload = _registry().to_dict()

    assert list(payload) == ["Track", "Song", "Clip"]
    song = payload["Song"]
    assert list(song) == ["gettableProperties", "settableProperties", "methods"]
    assert [prop["name"] for prop in song["gettableProperties"]] == ["tempo", "is_playing"]
    assert song["methods"][1] == {
        "name": "setView",
        "parameters": [
            {"name": "view", "type": "('Session' | 'Arranger')"},
            {"name": "focus", "type": "boolean"},
        ],
    }
    assert payload["Track"] == {"gettableProperties": [], "settableProperties": [], "methods": []}


def test_render_typescript_matches_original_layout() -> None:
    content = render_registry(_registry(), "typescript")

    header, body = content.split("\n", 1)
    assert header == "// AUTO-GENERATED FILE. DO NOT EDIT DIRECTLY."
    assert body.startswith("export const abletonApiMap = {\n  \"Track\": {")
    assert body.endswith("} as const;\n")
    literal = body[len("export const abletonApiMap = ") : -len(" as const;\n")]
    assert json.loads(literal) == _registry().to_dict()


def test_render_python_module_is_importable() -> None:
    content = render_registry(_registry(), "python")

    assert content.startswith("# AUTO-GENERATED FILE. DO NOT EDIT DIRECTLY.\n")
    namespace: dict[str, object] = {}
    exec(compile(content, "ableton_api_map.py", "exec"), namespace)
    assert namespace["ABLETON_API_MAP"] == _registry().to_dict()
    assert list(namespace["ABLETON_API_MAP"]) == ["Track", "Song", "Clip"]  # type: ignore[call-overload]


def test_render_python_with_custom_export_name() -> None:
    content = render_registry(_registry(), "python", export_name="API_MAP")
    assert "\nAPI_MAP: Final[Dict[str, ClassEntry]] = {" in content


def test_render_json() -> None:
    content = render_registry(_registry(), "json")
    assert json.loads(content) == _registry().to_dict()
    assert content.endswith("}\n")


def test_render_is_deterministic() -> None:
    assert render_registry(_registry(), "python") == render_registry(_registry(), "python")


def test_render_empty_registry() -> None:
    content = render_registry(Registry(), "typescript")
    assert content == "// AUTO-GENERATED FILE. DO NOT EDIT DIRECTLY.\nexport const abletonApiMap = {} as const;\n"


def test_render_rejects_unknown_format() -> None:
    with pytest.raises(ValueError, match="Unsupported output format"):
        render_registry(_registry(), "yaml")


def test_render_rejects_invalid_export_name() -> None:
    with pytest.raises(ValueError, match="not a valid identifier"):
        render_registry(_registry(), "typescript", export_name="ableton-api")
