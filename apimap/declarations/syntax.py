"""Tree-sitter plumbing for TypeScript declaration sources."""

from __future__ import annotations

import re
from typing import Iterator, Optional, Union

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

TS_LANGUAGE = Language(tree_sitter_typescript.language_typescript())

# Wrappers that may sit between the program node and a declaration.
_WRAPPER_TYPES = {"export_statement", "ambient_declaration"}

DECLARATION_TYPES = {
    "class_declaration",
    "abstract_class_declaration",
    "class",
    "interface_declaration",
    "enum_declaration",
    "type_alias_declaration",
}

CLASS_TYPES = {"class_declaration", "abstract_class_declaration", "class"}

LiteralValue = Union[str, int, float, bool]

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}
_ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|.)", re.S)


def create_parser() -> Parser:
    """Return a parser bound to the TypeScript grammar."""
    return Parser(TS_LANGUAGE)


def node_text(node: Optional[Node], source: bytes) -> str:
    if node is None:
        return ""
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def iter_top_level_declarations(root: Node) -> Iterator[Node]:
    """Yield declarations that are direct statements of the program.

    ``export`` and ``declare`` wrappers are looked through; module and
    namespace bodies are not, since their members are not top level.
    """
    for child in root.named_children:
        yield from _unwrap(child)


def _unwrap(node: Node) -> Iterator[Node]:
    if node.type in DECLARATION_TYPES:
        yield node
        return
    if node.type in _WRAPPER_TYPES:
        for child in node.named_children:
            yield from _unwrap(child)


def declaration_name(node: Node, source: bytes) -> Optional[str]:
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return None
    return node_text(name_node, source)


def find_child(node: Node, *types: str) -> Optional[Node]:
    for child in node.children:
        if child.type in types:
            return child
    return None


def unquote(text: str) -> str:
    """Decode a quoted string literal to its runtime value."""
    if len(text) >= 2 and text[0] == text[-1] and text[0] in {"'", '"', "`"}:
        text = text[1:-1]
    return _ESCAPE_RE.sub(_decode_escape, text)


def _decode_escape(match: "re.Match[str]") -> str:
    body = match.group(1)
    if body.startswith("u{"):
        return chr(int(body[2:-1], 16))
    if body.startswith("u") and len(body) == 5:
        return chr(int(body[1:], 16))
    if body.startswith("x") and len(body) == 3:
        return chr(int(body[1:], 16))
    if body in {"\n", "\r\n", "\u2028", "\u2029"}:
        return ""
    return _ESCAPES.get(body, body)


def parse_number(text: str) -> Optional[Union[int, float]]:
    """Parse a TypeScript numeric literal, returning None when malformed."""
    cleaned = text.strip().replace("_", "")
    negative = cleaned.startswith("-")
    if cleaned[:1] in {"-", "+"}:
        cleaned = cleaned[1:].strip()
    if cleaned.endswith("n"):
        cleaned = cleaned[:-1]
    lowered = cleaned.lower()
    try:
        if lowered.startswith("0x"):
            value: Union[int, float] = int(lowered[2:], 16)
        elif lowered.startswith("0o"):
            value = int(lowered[2:], 8)
        elif lowered.startswith("0b"):
            value = int(lowered[2:], 2)
        elif re.fullmatch(r"0[0-7]+", lowered):
            value = int(lowered, 8)
        elif re.fullmatch(r"\d+", lowered):
            value = int(lowered)
        else:
            value = float(lowered)
    except ValueError:
        return None
    return -value if negative else value


def format_literal(value: LiteralValue) -> str:
    """Render a literal the way a type tag spells it.

    Strings are wrapped in single quotes without escaping; numbers follow
    JavaScript's ``String(n)`` spelling; booleans are lower case.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return f"'{value}'"
    return _format_number(value)


def _format_number(value: Union[int, float]) -> str:
    if isinstance(value, int):
        return str(value)
    if value != value:
        return "NaN"
    if value in (float("inf"), float("-inf")):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    text = repr(value)
    # JavaScript writes exponents without zero padding and with an explicit sign.
    if "e" in text:
        mantissa, exponent = text.split("e")
        sign = "-" if exponent.startswith("-") else "+"
        text = f"{mantissa}e{sign}{exponent.lstrip('+-').lstrip('0') or '0'}"
    return text


__all__ = [
    "CLASS_TYPES",
    "DECLARATION_TYPES",
    "LiteralValue",
    "TS_LANGUAGE",
    "create_parser",
    "declaration_name",
    "find_child",
    "format_literal",
    "iter_top_level_declarations",
    "node_text",
    "parse_number",
    "unquote",
]
