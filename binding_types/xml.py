#!/usr/bin/env python3
"""
XML types for the binding manifest.
"""

from typing import Dict, Union

# ---------- Type aliases for XML ----------
ElementAttributes = Dict[str, str]
XmlValue = Union[str, int, float, bool, None]
