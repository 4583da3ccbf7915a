#!/usr/bin/env python3
"""Unit tests for GeneratorConfig and config file loading."""

from __future__ import annotations

import json

import pytest

from app.config import GeneratorConfig, apply_config_data, load_config_file
from core.errors import ConfigError
from core.preprocessor import CPreprocessor


def test_defaults():
    config = GeneratorConfig()
    config.validate()
    assert config.export_macro == "CVAPI"
    assert config.function_prefix == "cv"
    assert config.preprocessor == ["cpp", "-P"]
    assert config.strict_constants is True
    assert [g.letter for g in config.generic_type_defs()] == ["B", "S", "U", "L", "F", "D"]


def test_generic_type_subset_keeps_order():
    config = GeneratorConfig(generic_types=["D", "F"])
    assert [g.cv_type for g in config.generic_type_defs()] == ["CV_64FC1", "CV_32FC1"]


def test_unknown_generic_type_rejected():
    with pytest.raises(ConfigError):
        GeneratorConfig(generic_types=["B", "Q"]).validate()


def test_empty_generic_types_rejected():
    with pytest.raises(ConfigError):
        GeneratorConfig(generic_types=[]).generic_type_defs()


@pytest.mark.parametrize("field_name", ["export_macro", "function_prefix", "preprocessor", "matrix_types"])
def test_empty_required_fields_rejected(field_name):
    config = GeneratorConfig()
    setattr(config, field_name, [] if field_name in ("preprocessor", "matrix_types") else "")
    with pytest.raises(ConfigError):
        config.validate()


def test_json_config_file(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"function_prefix": "img", "strict_constants": False}))
    config = load_config_file(str(path))
    assert config.function_prefix == "img"
    assert config.strict_constants is False
    assert config.export_macro == "CVAPI"


def test_yaml_config_file(tmp_path):
    pytest.importorskip("yaml")
    path = tmp_path / "cfg.yaml"
    path.write_text("module_name: PDL::OpenCV::Imgproc\ninclude_dirs:\n  - /usr/include\n")
    config = load_config_file(str(path))
    assert config.module_name == "PDL::OpenCV::Imgproc"
    assert config.include_dirs == ["/usr/include"]


def test_unknown_key_rejected():
    with pytest.raises(ConfigError):
        apply_config_data(GeneratorConfig(), {"function_prefx": "cv"})


def test_non_mapping_file_rejected(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text("[1, 2]")
    with pytest.raises(ConfigError):
        load_config_file(str(path))


def test_missing_file_rejected(tmp_path):
    with pytest.raises(ConfigError):
        load_config_file(str(tmp_path / "none.json"))


def test_preprocessor_string_split_like_cli():
    config = apply_config_data(GeneratorConfig(), {"preprocessor": "gcc -E -P"})
    assert config.preprocessor == ["gcc", "-E", "-P"]
    assert CPreprocessor(config.preprocessor).command == ["gcc", "-E", "-P"]


def test_yaml_preprocessor_string(tmp_path):
    pytest.importorskip("yaml")
    path = tmp_path / "cfg.yaml"
    path.write_text('preprocessor: "clang -E -P -std=c99"\n')
    assert load_config_file(str(path)).preprocessor == ["clang", "-E", "-P", "-std=c99"]


@pytest.mark.parametrize("key, value", [
    ("include_dirs", "/usr/include"),
    ("matrix_types", "CvMat"),
    ("generic_types", "BSULFD"),
    ("types_profiles", "profile.json"),
    ("preprocessor", 5),
    ("include_dirs", ["/usr/include", 3]),
])
def test_list_fields_must_be_string_lists(key, value):
    with pytest.raises(ConfigError):
        apply_config_data(GeneratorConfig(), {key: value})


def test_types_profiles_may_be_null():
    assert apply_config_data(GeneratorConfig(), {"types_profiles": None}).types_profiles is None


def test_validate_rejects_non_list_fields():
    with pytest.raises(ConfigError):
        GeneratorConfig(include_dirs="/usr/include").validate()
