"""Tests for algotrace.normalizer."""

from __future__ import annotations

from algotrace.api import build_trace, parse_input
from algotrace.constants import MAX_ABS_VALUE
from algotrace.input_types import ParseErrorKind
from algotrace.normalizer import (
    parse_edge_list,
    parse_int,
    parse_level_order_tree,
    parse_matrix,
    parse_number,
    parse_number_list,
    parse_text,
)


class TestParseNumberList:
    def test_commas_and_spaces(self):
        result = parse_number_list("1, 2  -3,4", 10)
        assert result.ok
        assert result.value == [1, 2, -3, 4]

    def test_brackets_and_fullwidth_commas(self):
        result = parse_number_list("[1，2、3]", 10)
        assert result.value == [1, 2, 3]

    def test_floats_kept_and_integers_stay_int(self):
        result = parse_number_list("1.5, 2", 10)
        assert result.value == [1.5, 2]
        assert isinstance(result.value[1], int)

    def test_empty_rejected_by_default(self):
        result = parse_number_list("   ", 10)
        assert not result.ok
        assert result.error.kind == ParseErrorKind.EMPTY

    def test_empty_allowed(self):
        result = parse_number_list("", 10, allow_empty=True)
        assert result.ok
        assert result.value == []

    def test_non_numeric(self):
        result = parse_number_list("1, two, 3", 10)
        assert result.error.kind == ParseErrorKind.NON_NUMERIC

    def test_infinity_is_not_a_number(self):
        result = parse_number_list("1, inf", 10)
        assert result.error.kind == ParseErrorKind.NON_NUMERIC

    def test_too_long(self):
        result = parse_number_list("1,2,3,4", 3)
        assert result.error.kind == ParseErrorKind.TOO_LONG

    def test_non_negative(self):
        result = parse_number_list("1, -1", 5, non_negative=True)
        assert result.error.kind == ParseErrorKind.OUT_OF_RANGE

    def test_magnitude_is_capped(self):
        assert parse_number_list(f"1, {MAX_ABS_VALUE}", 5).ok
        result = parse_number_list(f"1, -{MAX_ABS_VALUE + 1}", 5)
        assert result.error.kind == ParseErrorKind.OUT_OF_RANGE

    def test_huge_digit_strings_rejected(self):
        result = parse_number_list(", ".join(["9" * 600] * 10), 10)
        assert not result.ok
        assert result.error.kind == ParseErrorKind.OUT_OF_RANGE


class TestParseMatrix:
    def test_rows_by_newline_and_semicolon(self):
        assert parse_matrix("1,2\n3,4", 3, 3).value == [[1, 2], [3, 4]]
        assert parse_matrix("1 2; 3 4", 3, 3).value == [[1, 2], [3, 4]]

    def test_ragged(self):
        result = parse_matrix("1,2,3\n4,5", 3, 3)
        assert result.error.kind == ParseErrorKind.RAGGED

    def test_not_square(self):
        result = parse_matrix("1,2,3\n4,5,6", 3, 3, square=True)
        assert result.error.kind == ParseErrorKind.NOT_SQUARE

    def test_too_many_rows(self):
        result = parse_matrix("1\n2\n3\n4", 3, 3)
        assert result.error.kind == ParseErrorKind.TOO_LARGE

    def test_too_many_columns(self):
        result = parse_matrix("1,2,3,4", 3, 3)
        assert result.error.kind == ParseErrorKind.TOO_LARGE

    def test_matrix_values_capped(self):
        result = parse_matrix(f"1 2\n3 {MAX_ABS_VALUE * 10}", 3, 3)
        assert result.error.kind == ParseErrorKind.OUT_OF_RANGE

    def test_empty(self):
        assert parse_matrix(" \n ", 3, 3).error.kind == ParseErrorKind.EMPTY


class TestParseLevelOrderTree:
    def test_builds_path_ids(self):
        root = parse_level_order_tree("3,5,1,null,null,0,8").value
        assert root.id == "0"
        assert root.value == 3
        assert root.left.id == "0-L"
        assert root.right.left.id == "0-R-L"
        assert root.right.right.value == 8
        assert root.left.left is None

    def test_level_order_values_round_trip(self):
        root = parse_level_order_tree("[1,2,3,4,null,5]").value
        assert root.values() == [1, 2, 3, 4, 5]

    def test_null_root_is_empty_tree(self):
        assert parse_level_order_tree("null").value is None
        assert parse_level_order_tree("").value is None

    def test_invalid_token(self):
        result = parse_level_order_tree("1,x,3")
        assert result.error.kind == ParseErrorKind.INVALID_TOKEN

    def test_values_after_orphaned_level(self):
        result = parse_level_order_tree("1,null,null,4")
        assert result.error.kind == ParseErrorKind.INVALID_TOKEN

    def test_tree_values_capped(self):
        result = parse_level_order_tree(f"1,{MAX_ABS_VALUE + 1},3")
        assert result.error.kind == ParseErrorKind.OUT_OF_RANGE

    def test_too_many_nodes(self):
        result = parse_level_order_tree(",".join(str(i) for i in range(5)), max_nodes=4)
        assert result.error.kind == ParseErrorKind.TOO_LONG


class TestParseEdgeList:
    def test_pairs(self):
        assert parse_edge_list("[[1,0],[2,1]]", 3).value == [(1, 0), (2, 1)]

    def test_blank_is_no_edges(self):
        assert parse_edge_list("  ", 3).value == []

    def test_malformed_json(self):
        assert parse_edge_list("[[1,0]", 3).error.kind == ParseErrorKind.MALFORMED

    def test_wrong_shape(self):
        assert parse_edge_list("[[1,0,2]]", 3).error.kind == ParseErrorKind.MALFORMED
        assert parse_edge_list('{"a": 1}', 3).error.kind == ParseErrorKind.MALFORMED

    def test_out_of_range(self):
        assert parse_edge_list("[[3,0]]", 3).error.kind == ParseErrorKind.OUT_OF_RANGE

    def test_oversized_integer_literal(self):
        result = parse_edge_list("[[" + "1" * 5000 + ",0]]", 4)
        assert not result.ok
        assert result.error.kind == ParseErrorKind.MALFORMED

    def test_deep_nesting(self):
        result = parse_edge_list("[" * 100000, 4)
        assert not result.ok
        assert result.error.kind == ParseErrorKind.MALFORMED

    def test_too_many(self):
        result = parse_edge_list("[[1,0],[0,1],[1,0]]", 2, max_edges=2)
        assert result.error.kind == ParseErrorKind.TOO_LONG


class TestScalars:
    def test_parse_int_range(self):
        assert parse_int(" 7 ", 1, 10).value == 7
        assert parse_int("11", 1, 10).error.kind == ParseErrorKind.OUT_OF_RANGE
        assert parse_int("1.5", 1, 10).error.kind == ParseErrorKind.NON_NUMERIC
        assert parse_int("", 1, 10).error.kind == ParseErrorKind.EMPTY

    def test_parse_number(self):
        assert parse_number("-2.5").value == -2.5
        assert parse_number("abc").error.kind == ParseErrorKind.NON_NUMERIC

    def test_parse_number_magnitude(self):
        assert parse_number(str(MAX_ABS_VALUE + 1)).error.kind == ParseErrorKind.OUT_OF_RANGE

    def test_parse_text_strips_line_breaks(self):
        assert parse_text("ab\ncd", 10).value == "abcd"
        assert parse_text("a" * 11, 10).error.kind == ParseErrorKind.TOO_LONG


class TestOversizedInputThroughTheApi:
    def test_course_schedule_huge_prerequisite_is_a_value(self):
        result = parse_input(
            "course-schedule", num_courses="2", prerequisites="[[" + "9" * 5000 + ",0]]"
        )
        assert not result.ok
        assert result.error.kind == ParseErrorKind.MALFORMED

    def test_product_rejects_huge_numbers(self):
        result = parse_input("product-except-self", numbers=", ".join(["9" * 600] * 10))
        assert not result.ok
        assert result.error.kind == ParseErrorKind.OUT_OF_RANGE

    def test_largest_accepted_numbers_still_build(self):
        numbers = ", ".join([str(MAX_ABS_VALUE)] * 10)
        result = parse_input("product-except-self", numbers=numbers)
        assert result.ok
        trace = build_trace("product-except-self", result.value)
        assert trace.answer == [MAX_ABS_VALUE**9] * 10
