"""Tests for apimap.declarations.syntax helpers."""

from __future__ import annotations

import pytest

from apimap.declarations.syntax import (
    create_parser,
    format_literal,
    iter_top_level_declarations,
    parse_number,
    unquote,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Session", "'Session'"),
        ("", "''"),
        ("it's", "'it's'"),
        (True, "true"),
        (False, "false"),
        (0, "0"),
        (-3, "-3"),
        (1.5, "1.5"),
        (2.0, "2"),
        (1e21, "1e+21"),
        (1e-7, "1e-7"),
    ],
)
def test_format_literal(value, expected: str) -> None:
    assert format_literal(value) == expected


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("42", 42),
        ("-1", -1),
        ("0x1F", 31),
        ("0b101", 5),
        ("0o17", 15),
        ("1_000", 1000),
        ("1.25", 1.25),
        ("3e2", 300.0),
    ],
)
def test_parse_number(text: str, expected) -> None:
    assert parse_number(text) == expected


def test_parse_number_rejects_garbage() -> None:
    assert parse_number("abc") is None


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("'Session'", "Session"),
        ('"Arranger"', "Arranger"),
        ("'it\\'s'", "it's"),
        ('"tab\\there"', "tab\there"),
        ("'\\u00e9'", "é"),
        ("`plain`", "plain"),
    ],
)
def test_unquote(text: str, expected: str) -> None:
    assert unquote(text) == expected


def test_top_level_declarations_look_through_export_and_declare() -> None:
    source = b"""
export declare class A {}
declare enum B { X }
export interface C {}
type D = string;
declare namespace E {
    class Inner {}
}
export declare function f(): void;
"""
    tree = create_parser().parse(source)

    kinds = [node.type for node in iter_top_level_declarations(tree.root_node)]

    assert kinds == [
        "class_declaration",
        "enum_declaration",
        "interface_declaration",
        "type_alias_declaration",
    ]
