"""In-memory model of a loaded set of declaration files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from tree_sitter import Node, Parser, Tree

from .syntax import (
    LiteralValue,
    declaration_name,
    iter_top_level_declarations,
    node_text,
    parse_number,
    unquote,
)


@dataclass
class EnumSymbol:
    """An enum declaration and its members' constant values, in order."""

    name: str
    members: Dict[str, Optional[LiteralValue]] = field(default_factory=dict)


@dataclass
class AliasSymbol:
    """A ``type X = ...`` declaration, kept as its unparsed value node."""

    name: str
    value: Node
    file: "DeclarationFile" = field(repr=False, compare=False)


Symbol = Union[EnumSymbol, AliasSymbol]


@dataclass(eq=False)
class DeclarationFile:
    """One parsed declaration file plus its file-local symbol tables."""

    path: Path
    relative_path: str
    source: bytes = field(repr=False)
    tree: Tree = field(repr=False)
    enums: Dict[str, EnumSymbol] = field(default_factory=dict)
    aliases: Dict[str, AliasSymbol] = field(default_factory=dict)
    imports: Dict[str, str] = field(default_factory=dict)
    is_module: bool = False

    @classmethod
    def parse(
        cls, path: Path, relative_path: str, source: bytes, parser: Parser
    ) -> "DeclarationFile":
        tree = parser.parse(source)
        decl_file = cls(path=path, relative_path=relative_path, source=source, tree=tree)
        decl_file._index()
        return decl_file

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text(self, node: Optional[Node]) -> str:
        return node_text(node, self.source)

    def top_level_declarations(self) -> Iterator[Node]:
        return iter_top_level_declarations(self.root)

    def find_interface(self, name: str) -> Optional[Node]:
        """Return the first top-level interface called ``name``."""
        for node in self.top_level_declarations():
            if node.type == "interface_declaration" and declaration_name(node, self.source) == name:
                return node
        return None

    def _index(self) -> None:
        for statement in self.root.named_children:
            if statement.type in {"import_statement", "export_statement"}:
                self.is_module = True
            if statement.type == "import_statement":
                self._index_import(statement)

        for node in self.top_level_declarations():
            name = declaration_name(node, self.source)
            if not name:
                continue
            if node.type == "enum_declaration" and name not in self.enums:
                self.enums[name] = self._build_enum(name, node)
            elif node.type == "type_alias_declaration" and name not in self.aliases:
                value = node.child_by_field_name("value")
                if value is not None:
                    self.aliases[name] = AliasSymbol(name=name, value=value, file=self)

    def _index_import(self, statement: Node) -> None:
        stack = list(statement.named_children)
        while stack:
            node = stack.pop()
            if node.type == "import_specifier":
                imported = node.child_by_field_name("name")
                local = node.child_by_field_name("alias") or imported
                if imported is not None and local is not None:
                    self.imports[self.text(local)] = unquote(self.text(imported))
            else:
                stack.extend(node.named_children)

    def _build_enum(self, name: str, node: Node) -> EnumSymbol:
        symbol = EnumSymbol(name=name)
        body = node.child_by_field_name("body")
        if body is None:
            return symbol

        next_value: Optional[LiteralValue] = 0
        for member in body.named_children:
            if member.type == "enum_assignment":
                name_node = member.child_by_field_name("name")
                value = self._enum_initializer(member.child_by_field_name("value"))
            elif member.type in {"property_identifier", "string", "computed_property_name"}:
                name_node = member
                value = next_value
            else:
                continue
            member_name = unquote(self.text(name_node))
            symbol.members[member_name] = value
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                next_value = value + 1
            else:
                next_value = None
        return symbol

    def _enum_initializer(self, node: Optional[Node]) -> Optional[LiteralValue]:
        if node is None:
            return None
        if node.type == "string":
            return unquote(self.text(node))
        if node.type == "template_string" and not any(
            child.type == "template_substitution" for child in node.named_children
        ):
            return unquote(self.text(node))
        if node.type == "number":
            return parse_number(self.text(node))
        if node.type == "unary_expression":
            argument = node.child_by_field_name("argument")
            if argument is not None and argument.type == "number":
                return parse_number(self.text(node))
        if node.type == "parenthesized_expression" and node.named_child_count == 1:
            return self._enum_initializer(node.named_children[0])
        return None


class DeclarationSet:
    """All declaration files loaded for one run, with a shared symbol index.

    Lookups prefer the requesting file's own declarations, then the target of
    a named import, then declarations from global script files (files with no
    top-level import or export). Exported names from other modules are only
    reachable through an import, as with the compiler.
    """

    def __init__(self, root: Path, files: List[DeclarationFile]) -> None:
        self.root = root
        self.files = files
        self._exported: Dict[str, Symbol] = {}
        self._globals: Dict[str, Symbol] = {}
        for decl_file in files:
            target = self._exported if decl_file.is_module else self._globals
            for enum_symbol in decl_file.enums.values():
                target.setdefault(enum_symbol.name, enum_symbol)
            for alias_symbol in decl_file.aliases.values():
                target.setdefault(alias_symbol.name, alias_symbol)

    def __iter__(self) -> Iterator[DeclarationFile]:
        return iter(self.files)

    def __len__(self) -> int:
        return len(self.files)

    def resolve(self, name: str, decl_file: DeclarationFile) -> Optional[Symbol]:
        local = decl_file.enums.get(name) or decl_file.aliases.get(name)
        if local is not None:
            return local
        imported = decl_file.imports.get(name)
        if imported is not None:
            symbol = self._exported.get(imported) or self._globals.get(imported)
            if symbol is not None:
                return symbol
        return self._globals.get(name)


__all__ = ["AliasSymbol", "DeclarationFile", "DeclarationSet", "EnumSymbol", "Symbol"]
