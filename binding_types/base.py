#!/usr/bin/env python3
"""
Base types for cvbindgen.
"""

from typing import Union

# ---------- Common type aliases ----------
ConstantValue = Union[int, float]
