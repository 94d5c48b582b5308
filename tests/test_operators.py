"""
Unit tests for operator tables and precedence helpers.
"""

import pytest

from bugduck.mutation import operators as ops
from bugduck.mutation.operators import OperatorClass


class TestFlipTables:
    """Involutions where defined, asymmetry where intended."""

    @pytest.mark.parametrize("op", ["<", "<=", ">", ">="])
    def test_boundary_flip_is_involution(self, op):
        assert ops.flip_boundary(ops.flip_boundary(op)) == op
        assert ops.flip_boundary(op) != op

    @pytest.mark.parametrize("op", ["<", "<=", ">", ">="])
    def test_direction_flip_is_involution(self, op):
        assert ops.flip_direction(ops.flip_direction(op)) == op

    def test_boundary_vs_direction(self):
        assert ops.flip_boundary("<") == "<="
        assert ops.flip_direction("<") == ">"
        assert ops.flip_direction("<=") == ">="

    def test_equality_flip_loose_becomes_strict(self):
        assert ops.flip_equality("==") == "!=="
        assert ops.flip_equality("!=") == "==="
        assert ops.flip_equality("===") == "!=="
        assert ops.flip_equality("!==") == "==="

    def test_equality_flip_is_not_involution_for_loose(self):
        assert ops.flip_equality(ops.flip_equality("==")) == "==="
        assert ops.flip_equality(ops.flip_equality("!=")) == "!=="

    def test_arithmetic_modulo_is_one_way(self):
        assert ops.swap_arithmetic("%") == "/"
        assert ops.swap_arithmetic("/") == "*"
        assert ops.swap_arithmetic("+") == "-"
        assert ops.swap_arithmetic("**") is None

    def test_logical_bitwise_pairs(self):
        assert ops.swap_logical_bitwise("&&") == "&"
        assert ops.swap_logical_bitwise("&") == "&&"
        assert ops.swap_logical_bitwise("||") == "|"
        assert ops.swap_logical_bitwise("|") == "||"
        assert ops.swap_logical_bitwise("^") is None

    def test_and_or(self):
        assert ops.swap_and_or("&&") == "||"
        assert ops.swap_and_or("??") is None

    def test_non_targets_return_none(self):
        assert ops.flip_boundary("==") is None
        assert ops.flip_equality("<") is None


class TestClassify:
    def test_classes(self):
        assert ops.classify("===") is OperatorClass.EQUALITY
        assert ops.classify(">=") is OperatorClass.ORDERING
        assert ops.classify("instanceof") is OperatorClass.RELATIONAL_KEYWORD
        assert ops.classify("??") is OperatorClass.LOGICAL
        assert ops.classify(">>>") is OperatorClass.BITWISE
        assert ops.classify("%") is OperatorClass.ARITHMETIC
        assert ops.classify(",") is OperatorClass.OTHER


class TestOperandParens:
    """operand_needs_parens keeps the original grouping."""

    def test_non_binary_operand(self):
        assert not ops.operand_needs_parens(None, "*", is_right=False)

    def test_lower_precedence_operand(self):
        assert ops.operand_needs_parens("+", "*", is_right=False)
        assert ops.operand_needs_parens("&&", "|", is_right=True)

    def test_higher_precedence_operand(self):
        assert not ops.operand_needs_parens("*", "+", is_right=True)

    def test_left_associative_equal_precedence(self):
        assert not ops.operand_needs_parens("-", "+", is_right=False)
        assert ops.operand_needs_parens("-", "+", is_right=True)

    def test_exponent_is_right_associative(self):
        assert ops.operand_needs_parens("**", "**", is_right=False)
        assert not ops.operand_needs_parens("**", "**", is_right=True)

    def test_nullish_cannot_mix(self):
        assert ops.operand_needs_parens("||", "??", is_right=False)
        assert ops.operand_needs_parens("??", "&&", is_right=False)


class TestHomoglyphs:
    def test_ascii_to_cyrillic(self):
        swapped = ops.homoglyph_for("a")
        assert swapped is not None
        assert swapped != "a"
        assert ord(swapped) > 127

    def test_reverse_direction(self):
        for ascii_char in "acepoxy":
            assert ops.homoglyph_for(ops.homoglyph_for(ascii_char)) == ascii_char

    def test_no_lookalike(self):
        assert ops.homoglyph_for("z") is None
