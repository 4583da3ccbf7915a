#!/usr/bin/env python3
"""
Exception hierarchy for the binding generator.

Fatal-to-run errors (header I/O, preprocessor) propagate out of the emitter.
ClassificationError and its subclasses only end the current function.
"""

from __future__ import annotations
from typing import Optional


class BindgenError(Exception):
    """Base class for all generator errors"""


class ConfigError(BindgenError):
    """Invalid generator configuration"""


class HeaderReadError(BindgenError):
    """Header file missing or unreadable"""


class PreprocessorError(BindgenError):
    """External preprocessor failed for a header"""

    def __init__(self, message: str, header: str = "", stderr: str = ""):
        super().__init__(message)
        self.header = header
        self.stderr = stderr


class ConstantCountMismatch(BindgenError):
    """Preprocessor output does not line up with the candidate constants"""

    def __init__(self, header: str, expected: int, found: int):
        super().__init__(
            f"{header}: expected {expected} constant segments from preprocessor, got {found}"
        )
        self.header = header
        self.expected = expected
        self.found = found


# ===============================================
# PER-FUNCTION REJECTIONS
# ===============================================

class ClassificationError(BindgenError):
    """A declaration cannot be bound; the whole function is skipped"""

    def __init__(self, reason: str, text: Optional[str] = None):
        message = reason if text is None else f"{reason}: '{text}'"
        super().__init__(message)
        self.reason = reason
        self.text = text


class MissingTokenError(ClassificationError):
    """No type or name token could be found"""


class DoubleIndirectionError(ClassificationError):
    """More than one level of pointer indirection"""


class UnreturnableArrayError(ClassificationError):
    """Arrays cannot be returned by value through a binding"""


class UnsupportedTypeError(ClassificationError):
    """Base type has no rule in the type table"""


__all__ = [
    "BindgenError",
    "ConfigError",
    "HeaderReadError",
    "PreprocessorError",
    "ConstantCountMismatch",
    "ClassificationError",
    "MissingTokenError",
    "DoubleIndirectionError",
    "UnreturnableArrayError",
    "UnsupportedTypeError",
]
