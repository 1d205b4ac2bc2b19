"""Shared fixtures for sym2c tests"""

import pytest

from sym2c.core.expression import (
    Addition, BinaryFunction, Constant, ExpressionKind, Multiplication,
    UnaryFunction, Variable,
)


@pytest.fixture
def x():
    return Variable("x")


@pytest.fixture
def y():
    return Variable("y")


@pytest.fixture
def z():
    return Variable("z")


def add(constant, *terms):
    """Addition node from (expression, coefficient) pairs"""
    return Addition(constant, terms)


def mul(constant, *factors):
    """Multiplication node from (base, exponent) pairs; bare bases get exponent 1"""
    pairs = [f if isinstance(f, tuple) else (f, Constant(1.0)) for f in factors]
    return Multiplication(constant, pairs)


def unary(kind, arg):
    return UnaryFunction(kind, arg)


def binary(kind, first, second):
    return BinaryFunction(kind, first, second)


def div(first, second):
    return BinaryFunction(ExpressionKind.DIVISION, first, second)
