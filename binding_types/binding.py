#!/usr/bin/env python3
"""
Binding-specific types and enums for cvbindgen.
"""

from typing import NewType, Union
from enum import Enum

# ---------- Type aliases for bindings ----------
FunctionName = NewType('FunctionName', str)
ShortName = NewType('ShortName', str)
DimToken = Union[str, int]


# ---------- Enums for arguments ----------
class Role(Enum):
    """Data direction of an argument relative to the native call."""
    INPUT = "input"
    OUTPUT = "output"
    INOUT = "inout"

    @property
    def marker(self) -> str:
        return _ROLE_MARKERS[self]

    @classmethod
    def from_marker(cls, marker: str) -> 'Role':
        for role, text in _ROLE_MARKERS.items():
            if text == marker:
                return role
        raise ValueError(f"Unknown role marker: {marker!r}")


_ROLE_MARKERS = {
    Role.INPUT: "",
    Role.OUTPUT: "[o]",
    Role.INOUT: "[io]",
}


class ElementType(Enum):
    """Element storage of an argument buffer.

    NATIVE means the element type follows the generic instantiation of the call.
    """
    INT = "int"
    FLOAT = "float"
    DOUBLE = "double"
    NATIVE = "native"

    @property
    def is_explicit(self) -> bool:
        return self is not ElementType.NATIVE
