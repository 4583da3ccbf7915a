#!/usr/bin/env python3
"""
Types module for cvbindgen.
Centralized type definitions organized by domain.
"""

# Public types export
from .base import ConstantValue

from .binding import (
    Role, ElementType, DimToken,
    FunctionName, ShortName
)

from .pp import (
    GenericType, GENERIC_TYPES, GENERIC_TYPE_LETTERS
)

from .xml import (
    ElementAttributes, XmlValue
)

from .protocols import (
    MacroExpander
)

__all__ = [
    # Base types
    'ConstantValue',

    # Binding types
    'Role', 'ElementType', 'DimToken',
    'FunctionName', 'ShortName',

    # PDL::PP types
    'GenericType', 'GENERIC_TYPES', 'GENERIC_TYPE_LETTERS',

    # XML types
    'ElementAttributes', 'XmlValue',

    # Protocols
    'MacroExpander'
]
