from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Any, Tuple
import json
import os
import re

from binding_types import ElementType


class TypeKind(Enum):
    MATRIX = "matrix"
    SCALAR = "scalar"
    VECTOR = "vector"
    VOID = "void"


@dataclass(frozen=True)
class TypeMatch:
    kind: TypeKind
    element_type: ElementType
    length: int = 0


@dataclass(frozen=True)
class TypeRule:
    def match(self, base: str) -> Optional[TypeMatch]:
        raise NotImplementedError


@dataclass(frozen=True)
class MatrixRule(TypeRule):
    type_names: FrozenSet[str]

    def match(self, base: str) -> Optional[TypeMatch]:
        if base in self.type_names:
            return TypeMatch(TypeKind.MATRIX, ElementType.NATIVE)
        return None


@dataclass(frozen=True)
class ScalarRule(TypeRule):
    type_names: FrozenSet[str] = frozenset({"double", "float", "int"})

    def match(self, base: str) -> Optional[TypeMatch]:
        if base in self.type_names:
            return TypeMatch(TypeKind.SCALAR, ElementType(base), 1)
        return None


@dataclass(frozen=True)
class FixedVectorRule(TypeRule):
    type_names: FrozenSet[str]
    element_type: ElementType
    length: int

    def match(self, base: str) -> Optional[TypeMatch]:
        if base in self.type_names:
            return TypeMatch(TypeKind.VECTOR, self.element_type, self.length)
        return None


class UnsupportedWidth(ValueError):
    """Sized aggregate with a float width other than 32 or 64 bits"""


@dataclass(frozen=True)
class SizedVectorRule(TypeRule):
    # CvPoint3D32f, CvSize2D64f, ...
    pattern: str = r'^Cv(?:Point|Size)(\d)D(\d+)f$'

    def match(self, base: str) -> Optional[TypeMatch]:
        m = re.match(self.pattern, base)
        if not m:
            return None
        length, bits = int(m.group(1)), m.group(2)
        if bits == "32":
            return TypeMatch(TypeKind.VECTOR, ElementType.FLOAT, length)
        if bits == "64":
            return TypeMatch(TypeKind.VECTOR, ElementType.DOUBLE, length)
        raise UnsupportedWidth(f"{base}: unsupported float width {bits}")


@dataclass(frozen=True)
class VoidRule(TypeRule):
    def match(self, base: str) -> Optional[TypeMatch]:
        if base == "void":
            return TypeMatch(TypeKind.VOID, ElementType.NATIVE, 0)
        return None


DEFAULT_MATRIX_TYPES: Tuple[str, ...] = ("CvMat", "CvArr")


def default_rules(matrix_types: Iterable[str] = DEFAULT_MATRIX_TYPES) -> List[TypeRule]:
    return [
        MatrixRule(frozenset(matrix_types)),
        ScalarRule(),
        FixedVectorRule(frozenset({"CvPoint", "CvSize"}), ElementType.INT, 2),
        SizedVectorRule(),
        FixedVectorRule(frozenset({"CvScalar"}), ElementType.DOUBLE, 4),
        VoidRule(),
    ]


class TypeRuleRegistry:
    def __init__(self, profiles: Optional[List[Dict[str, Any]]] = None,
                 matrix_types: Iterable[str] = DEFAULT_MATRIX_TYPES) -> None:
        self.aliases: Dict[str, str] = {}
        self.matrix_types: List[str] = list(matrix_types)
        self.vectors: List[TypeRule] = []
        if profiles:
            for prof in profiles:
                self._merge_profile(prof)
        self.rules: List[TypeRule] = default_rules(self.matrix_types) + self.vectors

    def _merge_profile(self, profile: Dict[str, Any]) -> None:
        self.aliases.update(profile.get("aliases", {}))
        for name in profile.get("matrix_types", []):
            if name not in self.matrix_types:
                self.matrix_types.append(name)
        for name, vector in profile.get("vectors", {}).items():
            self.vectors.append(FixedVectorRule(
                frozenset({name}),
                ElementType(vector.get("element", "double")),
                int(vector.get("length", 1)),
            ))

    def resolve_base(self, base: str) -> str:
        return self.aliases.get(base, base)

    def match(self, base: str) -> Optional[TypeMatch]:
        """First matching rule for a base type; None means unsupported.

        Raises UnsupportedWidth for sized aggregates with a bad float width.
        """
        base = self.resolve_base(base)
        for rule in self.rules:
            found = rule.match(base)
            if found is not None:
                return found
        return None


def _load_single_profile(path: str) -> Dict[str, Any]:
    with open(path, 'r', encoding='utf-8') as f:
        if path.lower().endswith(('.yml', '.yaml')):
            try:
                import yaml  # type: ignore
            except Exception as e:
                raise RuntimeError(f"YAML profile provided but PyYAML not installed: {path}") from e
            return yaml.safe_load(f) or {}
        return json.load(f)


def load_profiles(paths: List[str], matrix_types: Iterable[str] = DEFAULT_MATRIX_TYPES) -> TypeRuleRegistry:
    profiles: List[Dict[str, Any]] = []
    for p in paths:
        if not p:
            continue
        if not os.path.isfile(p):
            raise FileNotFoundError(f"Type profile file not found: {p}")
        profiles.append(_load_single_profile(p))
    return TypeRuleRegistry(profiles, matrix_types=matrix_types)
