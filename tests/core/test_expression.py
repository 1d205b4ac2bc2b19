"""Tests for the expression representation"""

import dataclasses

import pytest

from sym2c.core.expression import (
    Addition, BinaryFunction, Constant, ExpressionKind, IfThenElse, Multiplication,
    UnaryFunction, UninterpretedFunction, Variable, is_one,
)


class TestExpressionNodes:
    """Test suite for expression node types"""

    def test_variables_with_same_name_are_distinct(self):
        """Test that identity, not name, distinguishes variables"""
        a = Variable("x")
        b = Variable("x")
        assert a.id != b.id
        assert a != b

    def test_kind_tags(self, x):
        """Test each node reports its kind"""
        assert x.kind is ExpressionKind.VARIABLE
        assert Constant(1.0).kind is ExpressionKind.CONSTANT
        assert Addition(0.0, [(x, 1.0)]).kind is ExpressionKind.ADDITION
        assert Multiplication(1.0, [(x, Constant(2.0))]).kind is ExpressionKind.MULTIPLICATION
        assert UnaryFunction(ExpressionKind.SIN, x).kind is ExpressionKind.SIN
        assert BinaryFunction(ExpressionKind.DIVISION, x, x).kind is ExpressionKind.DIVISION
        assert IfThenElse(object(), x, x).kind is ExpressionKind.IF_THEN_ELSE
        assert UninterpretedFunction("f", [x]).kind is ExpressionKind.UNINTERPRETED_FUNCTION

    def test_terms_keep_given_order(self, x, y):
        """Test that addition terms are stored in caller order"""
        expr = Addition(0.0, [(y, 2.0), (x, 3.0)])
        assert expr.terms == ((y, 2.0), (x, 3.0))

    def test_mapping_terms(self, x, y):
        """Test terms and factors given as a mapping keep insertion order"""
        two = Constant(2.0)
        expr = Addition(1.0, {y: 2.0, x: 1.0})
        assert expr.terms == ((y, 2.0), (x, 1.0))
        product = Multiplication(3.0, {x: two})
        assert product.factors == ((x, two),)

    def test_nodes_are_immutable(self, x):
        """Test that nodes cannot be modified"""
        c = Constant(1.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            c.value = 2.0
        with pytest.raises(dataclasses.FrozenInstanceError):
            x.name = "w"

    def test_nodes_hash_by_identity(self):
        """Test that structurally equal nodes stay distinct keys"""
        a = Constant(1.0)
        b = Constant(1.0)
        assert len({a, b}) == 2

    def test_unary_rejects_binary_kind(self, x):
        """Test that a unary node needs a unary kind"""
        with pytest.raises(ValueError):
            UnaryFunction(ExpressionKind.POW, x)

    def test_binary_rejects_unary_kind(self, x):
        """Test that a binary node needs a binary kind"""
        with pytest.raises(ValueError):
            BinaryFunction(ExpressionKind.SIN, x, x)

    def test_is_one(self, x):
        """Test the exponent-is-one check"""
        assert is_one(Constant(1.0))
        assert is_one(Constant(1))
        assert not is_one(Constant(2.0))
        assert not is_one(x)
