"""Pulls gettable/settable properties and instance methods off a class."""

from __future__ import annotations

from typing import Iterable, List, Optional

from tree_sitter import Node

from ..config import DEFAULT_EXCLUDED_METHODS
from ..logging import get_logger
from ..models import ClassRecord, MethodDescriptor, PropertyDescriptor
from .classifier import TypeClassifier
from .model import DeclarationFile
from .syntax import declaration_name, find_child

UNKNOWN_CLASS = "UnknownClass"

_METHOD_TYPES = {"method_signature", "method_definition", "abstract_method_signature"}
_MODIFIER_STOP = {"get", "set", "static"}
_PARAMETER_TYPES = {"required_parameter", "optional_parameter"}

logger = get_logger("extractor")


class MemberExtractor:
    """Builds a ClassRecord from a namespace class and its enclosing file."""

    def __init__(
        self,
        classifier: TypeClassifier,
        *,
        gettable_interface: str = "GettableProperties",
        settable_interface: str = "SettableProperties",
        excluded_methods: Iterable[str] = DEFAULT_EXCLUDED_METHODS,
    ) -> None:
        self.classifier = classifier
        self.gettable_interface = gettable_interface
        self.settable_interface = settable_interface
        self.excluded_methods = frozenset(excluded_methods)

    def extract(self, decl_file: DeclarationFile, class_node: Node) -> ClassRecord:
        name = declaration_name(class_node, decl_file.source) or UNKNOWN_CLASS
        record = ClassRecord(
            name=name,
            gettable=self._interface_properties(decl_file, self.gettable_interface),
            settable=self._interface_properties(decl_file, self.settable_interface),
            methods=self._methods(decl_file, class_node),
            source=decl_file.relative_path,
        )
        logger.debug(
            "Extracted %s from %s: %d gettable, %d settable, %d methods",
            record.name,
            decl_file.relative_path,
            len(record.gettable),
            len(record.settable),
            len(record.methods),
        )
        return record

    def _interface_properties(
        self, decl_file: DeclarationFile, interface_name: str
    ) -> List[PropertyDescriptor]:
        interface = decl_file.find_interface(interface_name)
        if interface is None:
            return []
        body = interface.child_by_field_name("body")
        if body is None:
            body = find_child(interface, "interface_body", "object_type")
        if body is None:
            return []

        properties: List[PropertyDescriptor] = []
        for member in body.named_children:
            if member.type != "property_signature":
                continue
            name_node = member.child_by_field_name("name")
            if name_node is None:
                continue
            properties.append(
                PropertyDescriptor(
                    name=decl_file.text(name_node),
                    type=self.classifier.classify(member.child_by_field_name("type"), decl_file),
                )
            )
        return properties

    def _methods(self, decl_file: DeclarationFile, class_node: Node) -> List[MethodDescriptor]:
        body = class_node.child_by_field_name("body")
        if body is None:
            return []

        methods: List[MethodDescriptor] = []
        for member in body.named_children:
            if member.type not in _METHOD_TYPES:
                continue
            name_node = member.child_by_field_name("name")
            if name_node is None or _leading_keywords(member, name_node) & _MODIFIER_STOP:
                continue
            name = decl_file.text(name_node)
            if name in self.excluded_methods:
                continue
            methods.append(
                MethodDescriptor(
                    name=name,
                    parameters=self._parameters(decl_file, member.child_by_field_name("parameters")),
                )
            )
        return methods

    def _parameters(
        self, decl_file: DeclarationFile, parameters: Optional[Node]
    ) -> List[PropertyDescriptor]:
        if parameters is None:
            return []
        result: List[PropertyDescriptor] = []
        for parameter in parameters.named_children:
            if parameter.type not in _PARAMETER_TYPES:
                continue
            pattern = parameter.child_by_field_name("pattern")
            if pattern is None or pattern.type == "this":
                continue
            result.append(
                PropertyDescriptor(
                    name=_parameter_name(decl_file, pattern),
                    type=self.classifier.classify(parameter.child_by_field_name("type"), decl_file),
                )
            )
        return result


def _leading_keywords(member: Node, name_node: Node) -> set[str]:
    """Collect the keyword tokens written before a member's name."""
    keywords = set()
    for child in member.children:
        if child.start_byte >= name_node.start_byte:
            break
        if not child.is_named:
            keywords.add(child.type)
    return keywords


def _parameter_name(decl_file: DeclarationFile, pattern: Node) -> str:
    if pattern.type == "rest_pattern":
        for child in pattern.named_children:
            return decl_file.text(child)
        return decl_file.text(pattern).lstrip(".")
    return decl_file.text(pattern)


__all__ = ["MemberExtractor", "UNKNOWN_CLASS"]
