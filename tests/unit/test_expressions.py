"""
Tests for expression nodes, rendering and validation.
"""

import dataclasses

import pytest

from formula_jax.core.exceptions import MalformedExpressionError, ModelSpecificationError
from formula_jax.formulas.expressions import (
    Call,
    Formula,
    Literal,
    Symbol,
    all_vars,
    as_node,
    call,
    formula,
    validate_expression,
)


class TestNodes:
    """Test node construction and value semantics."""

    def test_call_coerces_argument_list_to_tuple(self):
        node = Call("+", [Symbol("a"), Symbol("b")])
        assert node.args == (Symbol("a"), Symbol("b"))

    def test_nodes_compare_and_hash_by_value(self):
        left = call("&", "a", "b")
        right = Call("&", (Symbol("a"), Symbol("b")))
        assert left == right
        assert hash(left) == hash(right)
        assert len({left, right}) == 1

    def test_different_kinds_are_not_equal(self):
        assert Symbol("1") != Literal(1)

    def test_nodes_are_immutable(self):
        node = Symbol("a")
        with pytest.raises(dataclasses.FrozenInstanceError):
            node.name = "b"

    def test_as_node_coercion(self):
        assert as_node("a") == Symbol("a")
        assert as_node(2) == Literal(2)
        assert as_node(-1) == Literal(-1)
        assert as_node(Literal(0.5)) == Literal(0.5)

    @pytest.mark.parametrize("value", [True, None, ["a"], 1j])
    def test_as_node_rejects_other_values(self, value):
        with pytest.raises(MalformedExpressionError):
            as_node(value)


class TestRendering:
    """Test string forms used for column names and labels."""

    @pytest.mark.parametrize(
        "node, expected",
        [
            (call("+", "a", "b"), "a + b"),
            (call("&", "a", "b"), "a&b"),
            (call("+", "a", call("&", "b", "c")), "a + b&c"),
            (call("|", 1, "g"), "1 | g"),
            (call("+", "a", call("|", 1, "g")), "a + (1 | g)"),
            (call("log", "c"), "log(c)"),
            (call("^", "x", 2), "x^2"),
            (call("I", call("^", "x", 2)), "I(x^2)"),
            (call("&", "a", call("+", "b", "c")), "a&(b + c)"),
            (call("-", "a", call("-", "b", "c")), "a - (b - c)"),
            (call("-", 1), "-1"),
            (call("poly", "x", 3), "poly(x, 3)"),
        ],
    )
    def test_render(self, node, expected):
        assert str(node) == expected

    def test_formula_string(self):
        assert str(formula("y", call("+", "a", "b"))) == "Formula: y ~ a + b"

    def test_one_sided_formula_string(self):
        f = formula(None, "a")
        assert f.one_sided
        assert str(f) == "Formula:  ~ a"


class TestValidation:
    """Test detection of malformed expression trees."""

    def test_valid_tree_passes(self):
        validate_expression(call("+", "a", call("log", "c"), call("|", 1, "g")))

    @pytest.mark.parametrize(
        "node",
        [
            "a + b",
            Call("+", ("a", "b")),
            Call("", (Symbol("a"),)),
            Call("*", (Symbol("a"),)),
            Literal("1"),
            Literal(True),
            Symbol(""),
        ],
    )
    def test_malformed_nodes(self, node):
        with pytest.raises(MalformedExpressionError) as excinfo:
            validate_expression(node)
        assert isinstance(excinfo.value, ModelSpecificationError)
        assert "[MALFORMED_EXPRESSION]" in str(excinfo.value)

    def test_error_keeps_offending_expression(self):
        bad = Call("*", (Symbol("a"),))
        with pytest.raises(MalformedExpressionError) as excinfo:
            validate_expression(call("+", "b", bad))
        assert excinfo.value.expression == bad


class TestAllVars:
    """Test symbol collection."""

    def test_expression_symbols_in_first_seen_order(self):
        rhs = call("+", "a", call("log", "c"), call("&", "a", "b"))
        assert all_vars(rhs) == [Symbol("a"), Symbol("c"), Symbol("b")]

    def test_formula_puts_rhs_before_lhs(self):
        f = formula("y", call("+", "a", "y", 1))
        assert all_vars(f) == [Symbol("a"), Symbol("y")]

    def test_literals_have_no_symbols(self):
        assert all_vars(Literal(1)) == []

    def test_non_node_rejected(self):
        with pytest.raises(MalformedExpressionError):
            all_vars(Formula(None, "a"))
