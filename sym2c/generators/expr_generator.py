"""Expression generator for sym2c

Translates symbolic expressions to C expression text reading parameters
from the array ``p``. Every composite fragment is fully parenthesized, so a
fragment can be spliced anywhere without precedence concerns.

Integral constants print in integer spelling ("1", "2") only where C's
usual arithmetic conversions already make the operation double: a sum or
product whose first two operands include a double, or a division with a
double side. Otherwise the leading constant is spelled as a floating
literal ("4.0") so C never performs integer division or integer overflow.
Composite fragments are therefore always double-typed; only a bare integral
Constant can be integer-typed.
"""

import math
from typing import Dict, Optional

from sym2c.core.ast_visitor import ExpressionVisitor, visit_method_name
from sym2c.core.errors import UnknownVariableError, UnsupportedConstructError
from sym2c.core.expression import (
    Addition, BinaryFunction, Constant, Expression, ExpressionKind, IfThenElse,
    Multiplication, UnaryFunction, UninterpretedFunction, Variable, is_one,
)
from sym2c.core.index_map import IdToIndexMap

# Integral doubles below this magnitude print without a fractional part
_EXACT_INTEGER_LIMIT = 2.0 ** 53


def has_integer_spelling(value: float) -> bool:
    """Check whether format_double spells a value as a C integer literal"""
    value = float(value)
    if math.isnan(value) or math.isinf(value):
        return False
    if value == 0.0 and math.copysign(1.0, value) < 0:
        return False
    return value.is_integer() and abs(value) < _EXACT_INTEGER_LIMIT


def format_double(value: float, force_float: bool = False) -> str:
    """Format a double as a C literal that parses back to the same value

    Args:
        value: Number to format
        force_float: Spell integral values as floating literals ("2.0")

    Returns:
        C literal text (e.g., "1", "0.1", "1e-07", "INFINITY")
    """
    value = float(value)
    if math.isnan(value):
        return "NAN"
    if math.isinf(value):
        return "INFINITY" if value > 0 else "-INFINITY"
    if has_integer_spelling(value):
        text = str(int(value))
        return text + ".0" if force_float else text
    return repr(value)


def _is_integer_typed(expr: Expression) -> bool:
    """Check whether the rendered fragment of expr is a C integer expression"""
    return isinstance(expr, Constant) and has_integer_spelling(expr.value)


class CodeGenVisitor(ExpressionVisitor):
    """Generates C code for symbolic expressions"""

    UNARY_FUNCTIONS = {
        ExpressionKind.ABS: "fabs",
        ExpressionKind.LOG: "log",
        ExpressionKind.EXP: "exp",
        ExpressionKind.SQRT: "sqrt",
        ExpressionKind.SIN: "sin",
        ExpressionKind.COS: "cos",
        ExpressionKind.TAN: "tan",
        ExpressionKind.ASIN: "asin",
        ExpressionKind.ACOS: "acos",
        ExpressionKind.ATAN: "atan",
        ExpressionKind.SINH: "sinh",
        ExpressionKind.COSH: "cosh",
        ExpressionKind.TANH: "tanh",
        ExpressionKind.CEIL: "ceil",
        ExpressionKind.FLOOR: "floor",
    }

    BINARY_FUNCTIONS = {
        ExpressionKind.POW: "pow",
        ExpressionKind.ATAN2: "atan2",
        ExpressionKind.MIN: "fmin",
        ExpressionKind.MAX: "fmax",
    }

    def __init__(self, id_to_idx_map: IdToIndexMap, memoize: bool = False) -> None:
        """Initialize expression generator

        Args:
            id_to_idx_map: Variable id to parameter index
            memoize: Reuse text already rendered for the same node instance
        """
        self._id_to_idx_map = id_to_idx_map
        self._cache: Optional[Dict[int, str]] = {} if memoize else None
        # Bound visit methods, so each tree level costs two frames
        self._dispatch = {
            kind: getattr(self, visit_method_name(kind)) for kind in ExpressionKind
        }

    def generate(self, expr: Expression) -> str:
        """Generate C code for an expression

        Args:
            expr: Expression node

        Returns:
            C expression text

        Raises:
            UnknownVariableError: If a variable is not in the index map
            UnsupportedConstructError: On if-then-else or uninterpreted functions
        """
        if self._cache is None:
            return self._dispatch[expr.kind](expr)
        # Keyed by identity; the tree holds every node alive for the request
        key = id(expr)
        code = self._cache.get(key)
        if code is None:
            code = self._dispatch[expr.kind](expr)
            self._cache[key] = code
        return code

    def _generate_operand(self, expr: Expression, force_float: bool) -> str:
        if force_float and _is_integer_typed(expr):
            return format_double(expr.value, force_float=True)
        return self.generate(expr)

    def visit_Variable(self, expr: Variable) -> str:
        index = self._id_to_idx_map.get(expr.id)
        if index is None:
            raise UnknownVariableError(expr)
        return f"p[{index}]"

    def visit_Constant(self, expr: Constant) -> str:
        return format_double(expr.value)

    def visit_Addition(self, expr: Addition) -> str:
        """Generate (c + e_1 + (c_2 * e_2) + ...)

        Terms are emitted in the order the expression stores them.
        """
        terms = expr.terms
        first_is_integer = not terms or (terms[0][1] == 1.0 and _is_integer_typed(terms[0][0]))
        parts = [format_double(expr.constant, force_float=first_is_integer)]
        for term, coeff in terms:
            if coeff == 1.0:
                parts.append(self.generate(term))
            else:
                coeff_text = format_double(coeff, force_float=_is_integer_typed(term))
                parts.append(f"({coeff_text} * {self.generate(term)})")
        return "(" + " + ".join(parts) + ")"

    def visit_Multiplication(self, expr: Multiplication) -> str:
        """Generate (c * b_1 * pow(b_2, e_2) * ...)"""
        factors = expr.factors
        first_is_integer = not factors or (is_one(factors[0][1]) and _is_integer_typed(factors[0][0]))
        parts = [format_double(expr.constant, force_float=first_is_integer)]
        for base, exponent in factors:
            if is_one(exponent):
                parts.append(self.generate(base))
            else:
                parts.append(f"pow({self.generate(base)}, {self.generate(exponent)})")
        return "(" + " * ".join(parts) + ")"

    def visit_Division(self, expr: BinaryFunction) -> str:
        both_integer = _is_integer_typed(expr.first) and _is_integer_typed(expr.second)
        numerator = self._generate_operand(expr.first, force_float=both_integer)
        return f"({numerator} / {self.generate(expr.second)})"

    def _visit_unary(self, expr: UnaryFunction) -> str:
        return f"{self.UNARY_FUNCTIONS[expr.kind]}({self.generate(expr.argument)})"

    def _visit_binary(self, expr: BinaryFunction) -> str:
        return (
            f"{self.BINARY_FUNCTIONS[expr.kind]}"
            f"({self.generate(expr.first)}, {self.generate(expr.second)})"
        )

    visit_Pow = _visit_binary
    visit_Atan2 = _visit_binary
    visit_Min = _visit_binary
    visit_Max = _visit_binary

    visit_Abs = _visit_unary
    visit_Log = _visit_unary
    visit_Exp = _visit_unary
    visit_Sqrt = _visit_unary
    visit_Sin = _visit_unary
    visit_Cos = _visit_unary
    visit_Tan = _visit_unary
    visit_Asin = _visit_unary
    visit_Acos = _visit_unary
    visit_Atan = _visit_unary
    visit_Sinh = _visit_unary
    visit_Cosh = _visit_unary
    visit_Tanh = _visit_unary
    visit_Ceil = _visit_unary
    visit_Floor = _visit_unary

    def visit_IfThenElse(self, expr: IfThenElse) -> str:
        raise UnsupportedConstructError(expr.kind)

    def visit_UninterpretedFunction(self, expr: UninterpretedFunction) -> str:
        raise UnsupportedConstructError(expr.kind, f"function '{expr.name}'")
