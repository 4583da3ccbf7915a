from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Tuple
import json
import os
import shlex

from binding_types import GenericType, GENERIC_TYPES, GENERIC_TYPE_LETTERS
from core.errors import ConfigError
from core.preprocessor import DEFAULT_COMMAND, DEFAULT_MARKER
from types_profiles.registry import DEFAULT_MATRIX_TYPES

# Fields that hold lists of strings in config files
LIST_FIELDS = ("preprocessor", "include_dirs", "matrix_types", "generic_types", "types_profiles")
OPTIONAL_FIELDS = ("types_profiles",)


@dataclass
class GeneratorConfig:
    # ===== LIBRARY CONVENTIONS =====
    export_macro: str = "CVAPI"                # CVAPI(ret) name(args);
    function_prefix: str = "cv"                # stripped to form binding names
    matrix_types: List[str] = field(default_factory=lambda: list(DEFAULT_MATRIX_TYPES))
    generic_types: List[str] = field(default_factory=lambda: list(GENERIC_TYPE_LETTERS))
    return_name: str = "retval"
    types_profiles: Optional[List[str]] = None

    # ===== CONSTANT RESOLUTION =====
    preprocessor: List[str] = field(default_factory=lambda: list(DEFAULT_COMMAND))
    include_dirs: List[str] = field(default_factory=list)
    constant_marker: str = DEFAULT_MARKER
    strict_constants: bool = True              # preprocessor failure aborts the run
    constants_name: str = "OpenCV_constants"   # exported as %OpenCV_constants

    # ===== OUTPUT =====
    module_name: str = "PDL::OpenCV"
    output_pd: str = "OpenCV.pd"
    output_manifest: Optional[str] = None

    def generic_type_defs(self) -> Tuple[GenericType, ...]:
        by_letter = {g.letter: g for g in GENERIC_TYPES}
        unknown = [t for t in self.generic_types if t not in by_letter]
        if unknown:
            raise ConfigError(
                f"Unknown generic types {unknown}; expected a subset of {list(GENERIC_TYPE_LETTERS)}"
            )
        if not self.generic_types:
            raise ConfigError("At least one generic type is required")
        return tuple(by_letter[t] for t in self.generic_types)

    def validate(self) -> None:
        for name in LIST_FIELDS:
            value = getattr(self, name)
            if value is not None and not isinstance(value, list):
                raise ConfigError(f"{name} must be a list, got {type(value).__name__}")
        if not self.export_macro:
            raise ConfigError("export_macro must not be empty")
        if not self.function_prefix:
            raise ConfigError("function_prefix must not be empty")
        if not self.preprocessor:
            raise ConfigError("preprocessor command must not be empty")
        if not self.matrix_types:
            raise ConfigError("matrix_types must name at least one type")
        self.generic_type_defs()


def _read_config_data(path: str) -> Dict[str, Any]:
    with open(path, 'r', encoding='utf-8') as f:
        if path.lower().endswith(('.yml', '.yaml')):
            import yaml
            data = yaml.safe_load(f) or {}
        else:
            data = json.load(f)
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at top level, got {type(data).__name__}")
    return data


def _coerce_value(key: str, value: Any) -> Any:
    if key == "preprocessor" and isinstance(value, str):
        # same command-line splitting as --cpp
        value = shlex.split(value)
    if key in LIST_FIELDS:
        if value is None and key in OPTIONAL_FIELDS:
            return None
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigError(f"{key} must be a list of strings, got {value!r}")
    return value


def apply_config_data(config: GeneratorConfig, data: Dict[str, Any]) -> GeneratorConfig:
    known = {f.name for f in fields(GeneratorConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
    for key, value in data.items():
        setattr(config, key, _coerce_value(key, value))
    return config


def load_config_file(path: str, config: Optional[GeneratorConfig] = None) -> GeneratorConfig:
    """Merge a JSON or YAML file into a config (a fresh default one if none is given)"""
    if not os.path.isfile(path):
        raise ConfigError(f"Configuration file not found: {path}")
    config = config if config is not None else GeneratorConfig()
    return apply_config_data(config, _read_config_data(path))


DEFAULT_CONFIG = GeneratorConfig()

__all__ = [
    "GeneratorConfig",
    "DEFAULT_CONFIG",
    "apply_config_data",
    "load_config_file",
]
