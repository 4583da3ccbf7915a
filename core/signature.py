#!/usr/bin/env python3
"""
Signature assembly: declaration strings and call-emission code.

The call code is first built as a small IR (CallPlan: matrix marshaling steps
plus one call expression) and only then rendered to PDL::PP C text, so the
marshaling logic can be checked without compiling anything.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple
import re

from binding_types import Role, ElementType, DimToken, GenericType, GENERIC_TYPES
from core.arguments import ArgumentDescriptor


PARAM_SEPARATOR = "; "

# Matrix element types used when an argument forces its element type
EXPLICIT_CV_TYPES = {
    ElementType.INT: "CV_32SC1",
    ElementType.FLOAT: "CV_32FC1",
    ElementType.DOUBLE: "CV_64FC1",
}

# ===============================================
# CALL-EMISSION IR
# ===============================================


@dataclass(frozen=True)
class MatrixStep:
    """Bind a CvMat header to one array argument buffer"""
    name: str
    axes: Tuple[str, str]
    element_type: ElementType

    @property
    def var(self) -> str:
        return f"mat_{self.name}"

    @property
    def pointer_var(self) -> str:
        return f"pmat_{self.name}"

    def cv_type(self, generic: GenericType) -> str:
        if self.element_type.is_explicit:
            return EXPLICIT_CV_TYPES[self.element_type]
        return generic.cv_type


@dataclass(frozen=True)
class CallOperand:
    """One native call argument: a matrix header pointer or a dereferenced scalar buffer"""
    name: str
    c_type: str
    is_matrix: bool

    def render(self) -> str:
        if self.is_matrix:
            return f"pmat_{self.name}"
        return f"*({self.c_type}*)$P({self.name})"


@dataclass(frozen=True)
class ReturnTarget:
    name: str
    c_type: str

    def render(self) -> str:
        return f"*({self.c_type}*)$P({self.name})"


@dataclass(frozen=True)
class CallExpression:
    native_name: str
    operands: Tuple[CallOperand, ...]
    return_target: Optional[ReturnTarget] = None

    def render(self) -> str:
        call = f"{self.native_name}({', '.join(op.render() for op in self.operands)})"
        if self.return_target is not None:
            return f"{self.return_target.render()} = {call};"
        return f"{call};"


@dataclass(frozen=True)
class CallPlan:
    native_name: str
    steps: Tuple[MatrixStep, ...]
    call: CallExpression

    @property
    def is_generic(self) -> bool:
        """True if the emitted code differs between generic instantiations"""
        return bool(self.steps)


# ===============================================
# ASSEMBLY
# ===============================================

def build_pars(descriptors: Iterable[ArgumentDescriptor]) -> str:
    return PARAM_SEPARATOR.join(d.param_string for d in descriptors)


def build_call_plan(descriptors: Sequence[ArgumentDescriptor], native_name: str) -> CallPlan:
    steps: List[MatrixStep] = []
    operands: List[CallOperand] = []
    return_target: Optional[ReturnTarget] = None

    for d in descriptors:
        if d.is_return:
            return_target = ReturnTarget(d.name, d.type)
            continue
        if d.is_matrix:
            steps.append(MatrixStep(d.name, (str(d.dims[0]), str(d.dims[1])), d.element_type))
        operands.append(CallOperand(d.name, d.type, d.is_matrix))

    call = CallExpression(native_name, tuple(operands), return_target)
    return CallPlan(native_name, tuple(steps), call)


def _render_body(plan: CallPlan, generic: GenericType, indent: str) -> List[str]:
    lines: List[str] = []
    for step in plan.steps:
        lines.append(f"{indent}CvMat {step.var}, *{step.pointer_var} = NULL;")
    for step in plan.steps:
        axis0, axis1 = step.axes
        lines.append(f"{indent}if($SIZE({axis0}) && $SIZE({axis1})) {{")
        lines.append(
            f"{indent}    {step.var} = cvMat($SIZE({axis1}), $SIZE({axis0}), "
            f"{step.cv_type(generic)}, $P({step.name}));"
        )
        lines.append(f"{indent}    {step.pointer_var} = &{step.var};")
        lines.append(f"{indent}}}")
    lines.append(f"{indent}{plan.call.render()}")
    return lines


def render_call_code(plan: CallPlan, generic_types: Sequence[GenericType] = GENERIC_TYPES) -> str:
    """Render the plan as PDL::PP code, one types() block per instantiation when needed"""
    if not plan.is_generic:
        return plan.call.render()

    lines: List[str] = []
    for generic in generic_types:
        lines.append(f"types({generic.letter}) %{{")
        lines.extend(_render_body(plan, generic, "    "))
        lines.append("%}")
    return "\n".join(lines)


@dataclass(frozen=True)
class Signature:
    pars: str
    plan: CallPlan
    code: str


def assemble_signature(descriptors: Sequence[ArgumentDescriptor], native_name: str,
                       generic_types: Sequence[GenericType] = GENERIC_TYPES) -> Signature:
    """Declaration string and call code for a classified argument list (return slot first)"""
    plan = build_call_plan(descriptors, native_name)
    return Signature(
        pars=build_pars(descriptors),
        plan=plan,
        code=render_call_code(plan, generic_types),
    )


# ===============================================
# DECLARATION STRING PARSING
# ===============================================

_FRAGMENT_RE = re.compile(
    r'^(?:(?P<etype>int|float|double)\s+)?'
    r'(?:(?P<marker>\[o\]|\[io\])\s*)?'
    r'(?P<name>[A-Za-z_]\w*)\((?P<dims>[^()]*)\)$'
)


@dataclass(frozen=True)
class ParsedParameter:
    name: str
    role: Role
    element_type: ElementType
    dims: Tuple[DimToken, ...]


def _dim_token(text: str) -> DimToken:
    text = text.strip()
    return int(text) if text.isdigit() else text


def parse_signature(pars: str) -> List[ParsedParameter]:
    """Parse a declaration string produced by build_pars back into its parts"""
    params: List[ParsedParameter] = []
    for fragment in pars.split(';'):
        fragment = fragment.strip()
        if not fragment:
            continue
        m = _FRAGMENT_RE.match(fragment)
        if not m:
            raise ValueError(f"Malformed parameter declaration: {fragment!r}")
        dims_text = m.group('dims').strip()
        dims = tuple(_dim_token(d) for d in dims_text.split(',')) if dims_text else ()
        params.append(ParsedParameter(
            name=m.group('name'),
            role=Role.from_marker(m.group('marker') or ""),
            element_type=ElementType(m.group('etype')) if m.group('etype') else ElementType.NATIVE,
            dims=dims,
        ))
    return params


__all__ = [
    "PARAM_SEPARATOR",
    "EXPLICIT_CV_TYPES",
    "MatrixStep",
    "CallOperand",
    "ReturnTarget",
    "CallExpression",
    "CallPlan",
    "Signature",
    "build_pars",
    "build_call_plan",
    "render_call_code",
    "assemble_signature",
    "ParsedParameter",
    "parse_signature",
]
