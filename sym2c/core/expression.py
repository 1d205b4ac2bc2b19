"""Symbolic expression representation consumed by the code generator

Immutable node types forming a tagged union over ExpressionKind. The tree
may be a DAG: the same node instance can appear under several parents.
Nodes compare and hash by identity so identity-keyed caches are valid.

No simplification or canonical ordering happens here; term and factor
order is exactly what the caller supplied.
"""

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Tuple


class ExpressionKind(Enum):
    """Closed set of expression node kinds"""
    VARIABLE = "Variable"
    CONSTANT = "Constant"
    ADDITION = "Addition"
    MULTIPLICATION = "Multiplication"
    DIVISION = "Division"
    POW = "Pow"
    ABS = "Abs"
    LOG = "Log"
    EXP = "Exp"
    SQRT = "Sqrt"
    SIN = "Sin"
    COS = "Cos"
    TAN = "Tan"
    ASIN = "Asin"
    ACOS = "Acos"
    ATAN = "Atan"
    ATAN2 = "Atan2"
    SINH = "Sinh"
    COSH = "Cosh"
    TANH = "Tanh"
    MIN = "Min"
    MAX = "Max"
    CEIL = "Ceil"
    FLOOR = "Floor"
    IF_THEN_ELSE = "IfThenElse"
    UNINTERPRETED_FUNCTION = "UninterpretedFunction"


UNARY_KINDS = frozenset({
    ExpressionKind.ABS, ExpressionKind.LOG, ExpressionKind.EXP,
    ExpressionKind.SQRT, ExpressionKind.SIN, ExpressionKind.COS,
    ExpressionKind.TAN, ExpressionKind.ASIN, ExpressionKind.ACOS,
    ExpressionKind.ATAN, ExpressionKind.SINH, ExpressionKind.COSH,
    ExpressionKind.TANH, ExpressionKind.CEIL, ExpressionKind.FLOOR,
})

BINARY_KINDS = frozenset({
    ExpressionKind.DIVISION, ExpressionKind.POW, ExpressionKind.ATAN2,
    ExpressionKind.MIN, ExpressionKind.MAX,
})

_variable_ids = itertools.count()


class Expression:
    """Base class of all expression nodes"""

    kind: ExpressionKind


@dataclass(frozen=True, eq=False)
class Variable(Expression):
    """Symbolic variable with a process-unique identity

    Two variables created with the same name are still distinct.
    """
    name: str
    id: int = field(default_factory=lambda: next(_variable_ids))

    @property
    def kind(self) -> ExpressionKind:
        return ExpressionKind.VARIABLE


@dataclass(frozen=True, eq=False)
class Constant(Expression):
    """Double-precision constant"""
    value: float

    @property
    def kind(self) -> ExpressionKind:
        return ExpressionKind.CONSTANT


@dataclass(frozen=True, eq=False)
class Addition(Expression):
    """constant + sum(coefficient * expression)

    terms may also be given as a mapping of expression to coefficient.
    """
    constant: float
    terms: Tuple[Tuple[Expression, float], ...]

    def __post_init__(self) -> None:
        terms = self.terms.items() if isinstance(self.terms, Mapping) else self.terms
        object.__setattr__(self, "terms", tuple((e, c) for e, c in terms))

    @property
    def kind(self) -> ExpressionKind:
        return ExpressionKind.ADDITION


@dataclass(frozen=True, eq=False)
class Multiplication(Expression):
    """constant * product(base ** exponent)"""
    constant: float
    factors: Tuple[Tuple[Expression, Expression], ...]

    def __post_init__(self) -> None:
        factors = self.factors.items() if isinstance(self.factors, Mapping) else self.factors
        object.__setattr__(self, "factors", tuple((b, e) for b, e in factors))

    @property
    def kind(self) -> ExpressionKind:
        return ExpressionKind.MULTIPLICATION


@dataclass(frozen=True, eq=False)
class UnaryFunction(Expression):
    """Elementary function of one argument (sin, log, ceil, ...)"""
    function: ExpressionKind
    argument: Expression

    def __post_init__(self) -> None:
        if self.function not in UNARY_KINDS:
            raise ValueError(f"{self.function.value} is not a unary function kind")

    @property
    def kind(self) -> ExpressionKind:
        return self.function


@dataclass(frozen=True, eq=False)
class BinaryFunction(Expression):
    """Division, pow, atan2, min or max of two arguments"""
    function: ExpressionKind
    first: Expression
    second: Expression

    def __post_init__(self) -> None:
        if self.function not in BINARY_KINDS:
            raise ValueError(f"{self.function.value} is not a binary function kind")

    @property
    def kind(self) -> ExpressionKind:
        return self.function


@dataclass(frozen=True, eq=False)
class IfThenElse(Expression):
    """Conditional expression; condition is an opaque formula object"""
    condition: Any
    then_expression: Expression
    else_expression: Expression

    @property
    def kind(self) -> ExpressionKind:
        return ExpressionKind.IF_THEN_ELSE


@dataclass(frozen=True, eq=False)
class UninterpretedFunction(Expression):
    """Opaque function call f(args...)"""
    name: str
    arguments: Tuple[Expression, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "arguments", tuple(self.arguments))

    @property
    def kind(self) -> ExpressionKind:
        return ExpressionKind.UNINTERPRETED_FUNCTION


def is_one(expression: Expression) -> bool:
    """Check whether an expression is the constant 1"""
    return isinstance(expression, Constant) and expression.value == 1.0
