"""Declaration-file scanning, type classification and member extraction."""

from __future__ import annotations

from .classifier import ANY, ENUM, PRIMITIVES, TypeClassifier
from .extractor import UNKNOWN_CLASS, MemberExtractor
from .model import AliasSymbol, DeclarationFile, DeclarationSet, EnumSymbol
from .scanner import DEFAULT_MARKER, DEFAULT_PATTERN, DeclarationScanner, is_namespace_class

__all__ = [
    "ANY",
    "AliasSymbol",
    "DEFAULT_MARKER",
    "DEFAULT_PATTERN",
    "DeclarationFile",
    "DeclarationScanner",
    "DeclarationSet",
    "ENUM",
    "EnumSymbol",
    "MemberExtractor",
    "PRIMITIVES",
    "TypeClassifier",
    "UNKNOWN_CLASS",
    "is_namespace_class",
]
