#!/usr/bin/env python3
"""
Argument splitting and classification for C function declarations.

An argument goes through four named stages:

    tokenize_argument -> classify_type -> classify_role -> assign_dims

Any stage may raise ClassificationError, which ends classification of the
whole enclosing function, not just the argument.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Tuple
import logging
import re

from binding_types import Role, ElementType, DimToken
from core.errors import (
    ClassificationError, MissingTokenError, DoubleIndirectionError,
    UnreturnableArrayError, UnsupportedTypeError
)
from types_profiles.registry import TypeRuleRegistry, TypeKind, TypeMatch, UnsupportedWidth

logger = logging.getLogger(__name__)

RETURN_NAME = "retval"
DEFAULT_REGISTRY = TypeRuleRegistry()

_CONST_RE = re.compile(r'^const\b\s*')
_TYPE_RE = re.compile(r'([A-Za-z_]\w*)\s*((?:\*\s*)*)')
_NAME_RE = re.compile(r'([A-Za-z_]\w*)(.*)$', re.DOTALL)
_COUNT_NAME_RE = re.compile(r'counts?$', re.IGNORECASE)

# ===============================================
# ARGUMENT SPLITTER
# ===============================================

_OPENERS = '(['
_CLOSERS = ')]'


def _is_parenthesized(fragment: str) -> bool:
    """True if the whole fragment is one balanced (...) group"""
    if not (fragment.startswith('(') and fragment.endswith(')')):
        return False
    depth = 0
    for i, ch in enumerate(fragment):
        if ch == '(':
            depth += 1
        elif ch == ')':
            depth -= 1
            if depth == 0:
                return i == len(fragment) - 1
    return False


def split_arguments(text: str) -> List[str]:
    """Split an argument list on top-level commas.

    Commas inside balanced () or [] groups never split. Empty fragments and
    fragments that are just a parenthesized group are dropped, and a lone
    `void` means no arguments.
    """
    fragments: List[str] = []
    buf: List[str] = []
    depth = 0

    for ch in text:
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
            if depth < 0:
                raise ClassificationError("unbalanced parentheses in argument list", text)
        elif ch == ',' and depth == 0:
            fragments.append(''.join(buf))
            buf = []
            continue
        buf.append(ch)

    if depth != 0:
        raise ClassificationError("unbalanced parentheses in argument list", text)
    fragments.append(''.join(buf))

    result = []
    for fragment in fragments:
        fragment = fragment.strip()
        if not fragment or _is_parenthesized(fragment):
            continue
        result.append(fragment)

    if result == ['void']:
        return []
    return result


# ===============================================
# ARGUMENT DESCRIPTOR
# ===============================================

@dataclass(frozen=True)
class ArgumentTokens:
    """Raw tokens of one argument before any type knowledge is applied"""
    text: str
    base_type: str
    pointer_depth: int
    is_const: bool
    name: Optional[str]
    qualifiers: str = ""


@dataclass(frozen=True)
class ArgumentDescriptor:
    """Classified argument (or return slot) of a bound function"""
    type: str
    pointer_depth: int
    is_const: bool
    name: str
    role: Role
    element_type: ElementType
    dims: Tuple[DimToken, ...]
    kind: TypeKind
    qualifiers: str = ""
    is_return: bool = False

    @property
    def is_matrix(self) -> bool:
        return self.kind is TypeKind.MATRIX

    @property
    def param_string(self) -> str:
        """Declaration fragment, e.g. `int [io] counts(counts0,counts1)`"""
        parts = []
        if self.element_type.is_explicit:
            parts.append(self.element_type.value)
        if self.role.marker:
            parts.append(self.role.marker)
        dims = ','.join(str(d) for d in self.dims)
        parts.append(f"{self.name}({dims})")
        return ' '.join(parts)


# ===============================================
# CLASSIFICATION STAGES
# ===============================================

def tokenize_argument(text: str, is_return: bool = False) -> ArgumentTokens:
    """Stage 1: const qualifier, base type, pointer markers, name and trailing text"""
    s = text.strip()

    is_const = False
    m = _CONST_RE.match(s)
    if m:
        is_const = True
        s = s[m.end():]

    m = _TYPE_RE.match(s)
    if not m:
        raise MissingTokenError("cannot find a type", text)
    base_type = m.group(1)
    pointer_depth = m.group(2).count('*')
    rest = s[m.end():].strip()
    # `CvMat* const src`: a const pointer, the pointee constness is the leading one
    m = _CONST_RE.match(rest)
    if m:
        rest = rest[m.end():]

    name: Optional[str] = None
    qualifiers = rest
    if not is_return:
        m = _NAME_RE.match(rest)
        if not m:
            raise MissingTokenError("cannot find an argument name", text)
        name = m.group(1)
        qualifiers = m.group(2).strip()

    # array bounds such as `x[]` or `x[3]` add one indirection each
    pointer_depth += qualifiers.count('[')
    if pointer_depth > 1:
        raise DoubleIndirectionError("cannot express double indirection", text)

    return ArgumentTokens(
        text=text,
        base_type=base_type,
        pointer_depth=pointer_depth,
        is_const=is_const,
        name=name,
        qualifiers=qualifiers,
    )


def classify_type(tokens: ArgumentTokens, is_return: bool = False,
                  registry: TypeRuleRegistry = DEFAULT_REGISTRY) -> TypeMatch:
    """Stage 2: match the base type against the rule table"""
    try:
        found = registry.match(tokens.base_type)
    except UnsupportedWidth as e:
        raise UnsupportedTypeError(str(e), tokens.text) from e

    if found is None:
        raise UnsupportedTypeError("unsupported type", tokens.text)

    if found.kind is TypeKind.MATRIX:
        if tokens.pointer_depth < 1:
            raise UnsupportedTypeError("array type must be passed by pointer", tokens.text)
        if is_return:
            raise UnreturnableArrayError("arrays cannot be returned", tokens.text)
        return found

    if tokens.pointer_depth > 0:
        raise UnsupportedTypeError("unsupported type: pointer to non-array type", tokens.text)

    if found.kind is TypeKind.VOID and not is_return:
        raise UnsupportedTypeError("unsupported type", tokens.text)

    return found


def classify_role(tokens: ArgumentTokens, found: TypeMatch, is_return: bool = False) -> Role:
    """Stage 3: data direction"""
    if is_return:
        return Role.OUTPUT
    if found.kind is TypeKind.MATRIX and not tokens.is_const:
        return Role.INOUT
    return Role.INPUT


def element_type_for(tokens: ArgumentTokens, found: TypeMatch) -> ElementType:
    # count-like arrays hold integers whatever the generic type of the call
    if found.kind is TypeKind.MATRIX and tokens.name and _COUNT_NAME_RE.search(tokens.name):
        return ElementType.INT
    return found.element_type


def assign_dims(tokens: ArgumentTokens, found: TypeMatch) -> Tuple[DimToken, ...]:
    """Stage 4: two named axes for arrays, one literal axis otherwise"""
    if found.kind is TypeKind.MATRIX:
        axis = (tokens.name or '').replace('_', '')
        if not axis:
            raise MissingTokenError("array argument name has no usable axis name", tokens.text)
        return (f"{axis}0", f"{axis}1")
    return (found.length,)


def classify_argument(text: str, is_return: bool = False,
                      registry: TypeRuleRegistry = DEFAULT_REGISTRY,
                      return_name: str = RETURN_NAME) -> Optional[ArgumentDescriptor]:
    """Classify one argument, or the return type when is_return is set.

    Returns None for a void return. Raises ClassificationError on rejection.
    """
    tokens = tokenize_argument(text, is_return=is_return)
    found = classify_type(tokens, is_return=is_return, registry=registry)

    if found.kind is TypeKind.VOID:
        return None

    descriptor = ArgumentDescriptor(
        type=tokens.base_type,
        pointer_depth=tokens.pointer_depth,
        is_const=tokens.is_const,
        name=return_name if is_return else tokens.name,
        role=classify_role(tokens, found, is_return=is_return),
        element_type=element_type_for(tokens, found),
        dims=assign_dims(tokens, found),
        kind=found.kind,
        qualifiers=tokens.qualifiers,
        is_return=is_return,
    )
    logger.debug(f"Classified '{text.strip()}' as {descriptor.param_string}")
    return descriptor


def classify_arguments(return_type: str, arguments: str,
                       registry: TypeRuleRegistry = DEFAULT_REGISTRY,
                       return_name: str = RETURN_NAME) -> List[ArgumentDescriptor]:
    """Classify a whole declaration: return slot first (if not void), then arguments in order"""
    descriptors: List[ArgumentDescriptor] = []

    ret = classify_argument(return_type, is_return=True, registry=registry, return_name=return_name)
    if ret is not None:
        descriptors.append(ret)

    for fragment in split_arguments(arguments):
        descriptor = classify_argument(fragment, registry=registry, return_name=return_name)
        if descriptor is not None:
            descriptors.append(descriptor)

    return descriptors


__all__ = [
    "RETURN_NAME",
    "DEFAULT_REGISTRY",
    "split_arguments",
    "ArgumentTokens",
    "ArgumentDescriptor",
    "tokenize_argument",
    "classify_type",
    "classify_role",
    "element_type_for",
    "assign_dims",
    "classify_argument",
    "classify_arguments",
]
