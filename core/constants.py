#!/usr/bin/env python3
"""
Constant extraction from object-like #define macros.

Candidate names are collected with a regex, their values are resolved by a
MacroExpander (normally a real C preprocessor), and only expansions that are
plain numeric expressions survive.
"""

from __future__ import annotations
import ast
import logging
import math
import operator
import re
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from binding_types import ConstantValue, MacroExpander
from core.errors import ConstantCountMismatch

logger = logging.getLogger(__name__)

# `#define NAME value`; a function-like NAME(...) never has whitespace right after NAME
_DEFINE_RE = re.compile(r'^[ ]*#[ ]*define[ ]+([A-Za-z_]\w*)[ ]+\S', re.MULTILINE)
# Identifier characters other than the exponent e/E disqualify an expansion
_NON_NUMERIC_RE = re.compile(r'[A-DF-Za-df-z_]')
_OCTAL_RE = re.compile(r'(?<![\w.])0([0-7]+)(?![\w.])')


# ===============================================
# ARITHMETIC EVALUATION
# ===============================================

def _c_div(a: ConstantValue, b: ConstantValue) -> ConstantValue:
    if isinstance(a, int) and isinstance(b, int):
        q = abs(a) // abs(b)
        return q if (a >= 0) == (b >= 0) else -q
    return a / b


def _c_mod(a: ConstantValue, b: ConstantValue) -> ConstantValue:
    if isinstance(a, int) and isinstance(b, int):
        return a - b * _c_div(a, b)
    raise ValueError("% requires integer operands")


_BINARY_OPS: Dict[type, Callable] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: _c_div,
    ast.Mod: _c_mod,
    ast.LShift: operator.lshift,
    ast.RShift: operator.rshift,
    ast.BitAnd: operator.and_,
    ast.BitOr: operator.or_,
    ast.BitXor: operator.xor,
}

_UNARY_OPS: Dict[type, Callable] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
    ast.Invert: operator.invert,
}


def _eval_node(node: ast.AST) -> ConstantValue:
    if isinstance(node, ast.Constant) and type(node.value) in (int, float):
        return node.value
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
        return _BINARY_OPS[type(node.op)](_eval_node(node.left), _eval_node(node.right))
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_eval_node(node.operand))
    raise ValueError(f"Unsupported expression node: {type(node).__name__}")


def evaluate_expression(text: str) -> ConstantValue:
    """Evaluate a numeric C expression (literals, parentheses, arithmetic and bit operators).

    Raises ValueError, SyntaxError, ZeroDivisionError, TypeError or OverflowError
    when the text is not a plain arithmetic expression.
    """
    source = _OCTAL_RE.sub(r'0o\1', text.strip())
    tree = ast.parse(source, mode='eval')
    return _eval_node(tree.body)


def literal_value(segment: str) -> Optional[ConstantValue]:
    """Value of one preprocessor segment, or None if it is not a numeric literal expression"""
    segment = segment.strip()
    if not segment or _NON_NUMERIC_RE.search(segment):
        return None
    try:
        value = evaluate_expression(segment)
    except (ValueError, SyntaxError, ZeroDivisionError, TypeError, OverflowError) as e:
        logger.debug(f"Dropping non-evaluable expansion '{segment}': {e}")
        return None
    if isinstance(value, float) and not math.isfinite(value):
        logger.debug(f"Dropping non-finite expansion '{segment}'")
        return None
    return value


# ===============================================
# CONSTANT TABLE
# ===============================================

class ConstantTable:
    """Run-wide name -> value table; the first definition of a name wins"""

    def __init__(self) -> None:
        self._values: Dict[str, ConstantValue] = {}
        self._sources: Dict[str, str] = {}
        self.collisions: List[Tuple[str, str, str]] = []

    def add(self, name: str, value: ConstantValue, source: str = "") -> bool:
        if name in self._values:
            self.collisions.append((name, self._sources[name], source))
            logger.warning(
                f"Constant {name} from {source or '<unknown>'} already defined "
                f"in {self._sources[name] or '<unknown>'}; keeping {self._values[name]!r}"
            )
            return False
        self._values[name] = value
        self._sources[name] = source
        return True

    def merge(self, values: Dict[str, ConstantValue], source: str = "") -> int:
        added = 0
        for name, value in values.items():
            if self.add(name, value, source):
                added += 1
        return added

    def get(self, name: str) -> Optional[ConstantValue]:
        return self._values.get(name)

    def source_of(self, name: str) -> Optional[str]:
        return self._sources.get(name)

    def items(self) -> Iterator[Tuple[str, ConstantValue]]:
        return iter(self._values.items())

    def as_dict(self) -> Dict[str, ConstantValue]:
        return dict(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __bool__(self) -> bool:
        return bool(self._values)


# ===============================================
# EXTRACTOR
# ===============================================

def find_constant_candidates(text: str) -> List[str]:
    """Names of object-like macros with a value, in textual order, first occurrence only"""
    names: List[str] = []
    seen = set()
    for match in _DEFINE_RE.finditer(text):
        name = match.group(1)
        if name not in seen:
            seen.add(name)
            names.append(name)
    return names


class ConstantExtractor:
    """Resolves the numeric #define constants of one header"""

    def __init__(self, expander: MacroExpander) -> None:
        self.expander = expander

    def extract(self, text: str, header_path: Union[str, Path]) -> Dict[str, ConstantValue]:
        candidates = find_constant_candidates(text)
        if not candidates:
            return {}

        segments = self.expander.expand(header_path, candidates)
        if len(segments) != len(candidates):
            raise ConstantCountMismatch(str(header_path), len(candidates), len(segments))

        constants: Dict[str, ConstantValue] = {}
        for name, segment in zip(candidates, segments):
            value = literal_value(segment)
            if value is None:
                continue
            constants[name] = value

        logger.info(f"{header_path}: {len(constants)} of {len(candidates)} macros are numeric constants")
        return constants


__all__ = [
    "evaluate_expression",
    "literal_value",
    "ConstantTable",
    "find_constant_candidates",
    "ConstantExtractor",
]
