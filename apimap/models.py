"""Core data models shared across apimap components."""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class PropertyDescriptor:
    """A named slot with its classified type tag."""

    name: str
    type: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "type": self.type}


@dataclass
class MethodDescriptor:
    """An instance method and its parameters in declaration order."""

    name: str
    parameters: List[PropertyDescriptor] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "parameters": [parameter.to_dict() for parameter in self.parameters],
        }


@dataclass
class ClassRecord:
    """API surface extracted from one namespace class."""

    name: str
    gettable: List[PropertyDescriptor] = field(default_factory=list)
    settable: List[PropertyDescriptor] = field(default_factory=list)
    methods: List[MethodDescriptor] = field(default_factory=list)
    source: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gettableProperties": [prop.to_dict() for prop in self.gettable],
            "settableProperties": [prop.to_dict() for prop in self.settable],
            "methods": [method.to_dict() for method in self.methods],
        }
