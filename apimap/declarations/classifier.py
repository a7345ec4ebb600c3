"""Reduces declared TypeScript types to registry type tags."""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, List, Optional

from tree_sitter import Node

from .model import AliasSymbol, DeclarationFile, DeclarationSet, EnumSymbol
from .syntax import LiteralValue, format_literal, parse_number, unquote

ANY = "any"
ENUM = "enum"
PRIMITIVES = frozenset({"string", "number", "boolean"})

_NULLISH = frozenset({"null", "undefined"})
_WRAPPERS = frozenset({"type_annotation", "optional_type_annotation", "parenthesized_type"})


@dataclass(frozen=True)
class _Term:
    """One flattened member of a (possibly single-member) type."""

    kind: str
    value: Optional[LiteralValue] = None
    name: str = ""
    enum: Optional[EnumSymbol] = None

    def key(self) -> tuple:
        return (self.kind, type(self.value).__name__, self.value, self.name)


_OTHER = _Term(kind="other")
_NULL = _Term(kind="nullish")


class TypeClassifier:
    """Classifies type nodes against the symbols of a DeclarationSet.

    The decision order is enum, union, single literal, primitive, then
    ``any``. Unions are flattened in source order with aliases expanded and
    ``null``/``undefined`` dropped; a union is only described when every
    remaining member is a literal.
    """

    def __init__(self, declarations: DeclarationSet) -> None:
        self._declarations = declarations

    def classify(self, node: Optional[Node], decl_file: DeclarationFile) -> str:
        terms = self._flatten(node, decl_file, frozenset())
        if len(terms) > 1:
            terms = _dedupe([term for term in terms if term.kind != "nullish"])
            if not terms:
                return ANY
            if len(terms) > 1:
                return self._describe_union(terms)
        return self._describe(terms[0])

    def _describe(self, term: _Term) -> str:
        if term.kind == "enum":
            return term.name or ENUM
        if term.kind == "enum_member":
            return term.name or ENUM
        if term.kind == "literal" and term.value is not None:
            return format_literal(term.value)
        if term.kind == "primitive":
            return term.name
        return ANY

    def _describe_union(self, terms: List[_Term]) -> str:
        rendered: List[str] = []
        for term in terms:
            if term.kind == "literal" and term.value is not None:
                rendered.append(format_literal(term.value))
            elif term.kind == "enum_member" and term.value is not None:
                rendered.append(format_literal(term.value))
            elif term.kind == "enum" and term.enum is not None and _all_known(term.enum):
                rendered.extend(format_literal(value) for value in term.enum.members.values())  # type: ignore[arg-type]
            else:
                return ANY
        unique = list(dict.fromkeys(rendered))
        if len(unique) == 1:
            return unique[0]
        return f"({' | '.join(unique)})"

    def _flatten(
        self, node: Optional[Node], decl_file: DeclarationFile, seen: FrozenSet[int]
    ) -> List[_Term]:
        if node is None:
            return [_OTHER]

        kind = node.type
        if kind in _WRAPPERS:
            inner = _first_type_child(node)
            return self._flatten(inner, decl_file, seen)

        if kind == "union_type":
            terms: List[_Term] = []
            for child in node.named_children:
                if child.type == "comment":
                    continue
                terms.extend(self._flatten(child, decl_file, seen))
            return terms or [_OTHER]

        if kind == "literal_type":
            return [self._literal(node, decl_file)]

        if kind == "template_literal_type":
            if any(child.type == "template_type" for child in node.named_children):
                return [_OTHER]
            return [_Term(kind="literal", value=unquote(decl_file.text(node)))]

        if kind == "predefined_type":
            text = decl_file.text(node).strip()
            if text in PRIMITIVES:
                return [_Term(kind="primitive", name=text)]
            if text in _NULLISH:
                return [_NULL]
            return [_OTHER]

        if kind == "type_identifier":
            return self._reference(decl_file.text(node).strip(), decl_file, seen)

        if kind == "nested_type_identifier":
            return [self._qualified(node, decl_file)]

        return [_OTHER]

    def _literal(self, node: Node, decl_file: DeclarationFile) -> _Term:
        inner = _first_type_child(node)
        if inner is None:
            text = decl_file.text(node).strip()
            return _NULL if text in _NULLISH else _OTHER
        text = decl_file.text(inner)
        if inner.type == "string":
            return _Term(kind="literal", value=unquote(text))
        if inner.type in {"number", "unary_expression"}:
            number = parse_number(text)
            return _OTHER if number is None else _Term(kind="literal", value=number)
        if inner.type == "true":
            return _Term(kind="literal", value=True)
        if inner.type == "false":
            return _Term(kind="literal", value=False)
        if inner.type in _NULLISH:
            return _NULL
        return _OTHER

    def _reference(
        self, name: str, decl_file: DeclarationFile, seen: FrozenSet[int]
    ) -> List[_Term]:
        if name in _NULLISH:
            return [_NULL]
        symbol = self._declarations.resolve(name, decl_file)
        if isinstance(symbol, EnumSymbol):
            return [_Term(kind="enum", name=symbol.name, enum=symbol)]
        if isinstance(symbol, AliasSymbol):
            marker = id(symbol)
            if marker in seen:
                return [_OTHER]
            return self._flatten(symbol.value, symbol.file, seen | {marker})
        return [_OTHER]

    def _qualified(self, node: Node, decl_file: DeclarationFile) -> _Term:
        module = node.child_by_field_name("module")
        member = node.child_by_field_name("name")
        if module is None or member is None:
            return _OTHER
        symbol = self._declarations.resolve(decl_file.text(module).strip(), decl_file)
        if not isinstance(symbol, EnumSymbol):
            return _OTHER
        member_name = decl_file.text(member).strip()
        if member_name not in symbol.members:
            return _OTHER
        return _Term(
            kind="enum_member",
            name=member_name,
            value=symbol.members[member_name],
            enum=symbol,
        )


def _first_type_child(node: Node) -> Optional[Node]:
    for child in node.named_children:
        if child.type != "comment":
            return child
    return None


def _all_known(symbol: EnumSymbol) -> bool:
    return bool(symbol.members) and all(value is not None for value in symbol.members.values())


def _dedupe(terms: List[_Term]) -> List[_Term]:
    unique: List[_Term] = []
    keys = set()
    for term in terms:
        key = term.key()
        if key in keys:
            continue
        keys.add(key)
        unique.append(term)
    return unique


__all__ = ["ANY", "ENUM", "PRIMITIVES", "TypeClassifier"]
