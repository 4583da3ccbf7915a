#!/usr/bin/env python3
"""
PDL::PP generic type definitions for cvbindgen.
"""

from typing import NamedTuple, Tuple


class GenericType(NamedTuple):
    letter: str
    c_type: str
    cv_type: str


# ---------- Closed set of generic instantiations ----------
GENERIC_TYPES: Tuple[GenericType, ...] = (
    GenericType("B", "PDL_Byte", "CV_8UC1"),
    GenericType("S", "PDL_Short", "CV_16SC1"),
    GenericType("U", "PDL_Ushort", "CV_16UC1"),
    GenericType("L", "PDL_Long", "CV_32SC1"),
    GenericType("F", "PDL_Float", "CV_32FC1"),
    GenericType("D", "PDL_Double", "CV_64FC1"),
)

GENERIC_TYPE_LETTERS: Tuple[str, ...] = tuple(g.letter for g in GENERIC_TYPES)
