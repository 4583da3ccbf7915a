#!/usr/bin/env python3
"""
Unit tests for numeric constant extraction:
- C-like arithmetic evaluation of macro expansions
- Filtering of non-numeric expansions
- Run-wide constant table (first definition wins)
- Extractor driven by a fake macro expander
"""

from __future__ import annotations

import logging

import pytest

from core.constants import (
    ConstantExtractor,
    ConstantTable,
    evaluate_expression,
    find_constant_candidates,
    literal_value,
)
from core.errors import ConstantCountMismatch, PreprocessorError
from core.header_text import read_header


class TestEvaluateExpression:
    @pytest.mark.parametrize("text, expected", [
        ("42", 42),
        ("(1+2)*3", 9),
        ("1 << 3", 8),
        ("0x10 | 1", 17),
        ("~0", -1),
        ("7/2", 3),
        ("-7/2", -3),
        ("-7 % 3", -1),
        ("010", 8),
        ("7.0/2", 3.5),
        ("1.5E3", 1500.0),
    ])
    def test_values(self, text, expected):
        assert evaluate_expression(text) == expected

    def test_integer_division_stays_integer(self):
        assert isinstance(evaluate_expression("((2) + ((1)-1) * 8) / 2"), int)

    def test_names_not_evaluated(self):
        with pytest.raises(ValueError):
            evaluate_expression("foo + 1")


class TestLiteralValue:
    @pytest.mark.parametrize("segment, expected", [
        ("0", 0),
        ("  2  ", 2),
        ("3.1415926535897932384626433832795", 3.1415926535897932),
        ("((5) + ((3)-1) * 8)", 21),
        ("1e-5", 1e-5),
        ("(1 << 16)", 65536),
    ])
    def test_numeric_segments(self, segment, expected):
        assert literal_value(segment) == expected

    @pytest.mark.parametrize("segment", [
        "",
        "CV_GAUSSIAN",
        "static inline",
        "_x",
        '"string"',
        "(CvSize){1,2}",
        "1/0",
        "1e400",
        "cvRound(1.5)",
    ])
    def test_non_numeric_segments_dropped(self, segment):
        assert literal_value(segment) is None


class TestConstantTable:
    def test_first_definition_wins(self, caplog):
        table = ConstantTable()
        assert table.add("FOO", 1, "a.h")
        with caplog.at_level(logging.WARNING):
            assert not table.add("FOO", 2, "b.h")
        assert table.get("FOO") == 1
        assert table.source_of("FOO") == "a.h"
        assert table.collisions == [("FOO", "a.h", "b.h")]
        assert "FOO" in caplog.text

    def test_merge_counts_new_names_only(self):
        table = ConstantTable()
        table.merge({"A": 1, "B": 2}, "a.h")
        assert table.merge({"B": 3, "C": 4}, "b.h") == 1
        assert table.as_dict() == {"A": 1, "B": 2, "C": 4}
        assert len(table) == 3
        assert "C" in table

    def test_items_keep_insertion_order(self):
        table = ConstantTable()
        for name in ("Z", "A", "M"):
            table.add(name, 0)
        assert [name for name, _ in table.items()] == ["Z", "A", "M"]

    def test_empty_table_is_falsy(self):
        assert not ConstantTable()


class TestFindCandidates:
    def test_object_like_macros_with_values_only(self):
        text = "\n".join([
            "#ifndef GUARD_H",
            "#define GUARD_H",
            "#define CV_A 1",
            "  #  define CV_B (CV_A + 1)",
            "#define CV_MAX(a,b) ((a) > (b) ? (a) : (b))",
            "#define CV_A 2",
            "int x; // #define NOT_AT_LINE_START 3",
            "#endif",
        ])
        assert find_constant_candidates(text) == ["CV_A", "CV_B"]


class TestConstantExtractor:
    def test_numeric_expansions_kept(self, sample_header, sample_expander):
        text = read_header(sample_header)
        constants = ConstantExtractor(sample_expander).extract(text, sample_header)
        assert constants == {
            "CV_BLUR_NO_SCALE": 0,
            "CV_GAUSSIAN": 2,
            "CV_PI": 3.1415926535897932,
        }
        header, names = sample_expander.calls[0]
        assert header == str(sample_header)
        assert names == ["CV_BLUR_NO_SCALE", "CV_GAUSSIAN", "CV_PI", "CV_INLINE"]

    def test_header_without_defines_skips_expander(self, make_expander):
        expander = make_expander()
        assert ConstantExtractor(expander).extract("int x;\n", "empty.h") == {}
        assert expander.calls == []

    def test_segment_count_mismatch_is_fatal(self, make_expander):
        expander = make_expander({"A": "1", "B": "2"}, drop_last=True)
        with pytest.raises(ConstantCountMismatch) as info:
            ConstantExtractor(expander).extract("#define A 1\n#define B 2\n", "x.h")
        assert info.value.expected == 2
        assert info.value.found == 1

    def test_preprocessor_error_propagates(self, make_expander):
        expander = make_expander(error=PreprocessorError("boom", header="x.h"))
        with pytest.raises(PreprocessorError):
            ConstantExtractor(expander).extract("#define A 1\n", "x.h")
