"""Tests for expression generator"""

import math

import pytest

from conftest import add, binary, div, mul, unary
from sym2c.core.errors import UnknownVariableError, UnsupportedConstructError
from sym2c.core.expression import (
    Constant, ExpressionKind, IfThenElse, UninterpretedFunction,
)
from sym2c.core.index_map import build_index_map
from sym2c.generators.expr_generator import CodeGenVisitor, format_double


class TestFormatDouble:
    """Test suite for constant formatting"""

    @pytest.mark.parametrize("value, expected", [
        (1.0, "1"),
        (2.0, "2"),
        (-3.0, "-3"),
        (0.0, "0"),
        (0.5, "0.5"),
        (0.1, "0.1"),
        (1e-07, "1e-07"),
        (1e300, "1e+300"),
    ])
    def test_format(self, value, expected):
        """Test literal text for common values"""
        assert format_double(value) == expected

    @pytest.mark.parametrize("value", [
        0.1, 1.0 / 3.0, math.pi, -2.5e-310, 123456789.123456789, 2.0 ** 60, 1e16,
    ])
    def test_round_trip(self, value):
        """Test that the literal parses back to the same double"""
        assert float(format_double(value)) == value

    def test_negative_zero(self):
        """Test that negative zero keeps its sign"""
        text = format_double(-0.0)
        assert text == "-0.0"
        assert math.copysign(1.0, float(text)) < 0

    def test_force_float(self):
        """Test integral values can be spelled as floating literals"""
        assert format_double(2.0, force_float=True) == "2.0"
        assert format_double(-4e9, force_float=True) == "-4000000000.0"
        assert format_double(0.5, force_float=True) == "0.5"

    def test_non_finite(self):
        """Test non-finite values use math.h macros"""
        assert format_double(float("inf")) == "INFINITY"
        assert format_double(float("-inf")) == "-INFINITY"
        assert format_double(float("nan")) == "NAN"


class TestCodeGenVisitor:
    """Test suite for CodeGenVisitor"""

    @pytest.fixture
    def generator(self, x, y):
        """Create a generator with p = [x, y]"""
        return CodeGenVisitor(build_index_map([x, y]))

    def test_variable(self, generator, x, y):
        """Test variables become parameter array accesses"""
        assert generator.generate(x) == "p[0]"
        assert generator.generate(y) == "p[1]"

    def test_constant(self, generator):
        """Test constants render as literals"""
        assert generator.generate(Constant(2.5)) == "2.5"

    def test_addition_offset_first(self, generator, x):
        """Test x + 1 renders offset first"""
        assert generator.generate(add(1.0, (x, 1.0))) == "(1 + p[0])"

    def test_addition_coefficients(self, generator, x, y):
        """Test non-unit coefficients are wrapped in a product"""
        expr = add(0.0, (x, 1.0), (y, -1.0))
        assert generator.generate(expr) == "(0 + p[0] + (-1 * p[1]))"

    def test_addition_fractional_coefficient(self, generator, x):
        """Test fractional coefficients keep full precision"""
        expr = add(0.5, (x, 0.1))
        assert generator.generate(expr) == "(0.5 + (0.1 * p[0]))"

    def test_addition_preserves_term_order(self, generator, x, y):
        """Test terms are emitted in stored order, not re-sorted"""
        expr = add(0.0, (y, 1.0), (x, 1.0))
        assert generator.generate(expr) == "(0 + p[1] + p[0])"

    def test_multiplication(self, generator, x, y):
        """Test 2 * x * y"""
        assert generator.generate(mul(2.0, x, y)) == "(2 * p[0] * p[1])"

    def test_multiplication_with_exponent(self, generator, x, y):
        """Test non-unit exponents use pow"""
        expr = mul(3.0, (x, Constant(2.0)), y)
        assert generator.generate(expr) == "(3 * pow(p[0], 2) * p[1])"

    def test_multiplication_symbolic_exponent(self, generator, x, y):
        """Test a symbolic exponent is rendered recursively"""
        expr = mul(1.0, (x, y))
        assert generator.generate(expr) == "(1 * pow(p[0], p[1]))"

    def test_division(self, generator, x):
        """Test sin(x) / cos(x)"""
        expr = div(unary(ExpressionKind.SIN, x), unary(ExpressionKind.COS, x))
        assert generator.generate(expr) == "(sin(p[0]) / cos(p[0]))"

    def test_pow(self, generator, x):
        """Test pow(x, 2) uses the binary function path"""
        expr = binary(ExpressionKind.POW, x, Constant(2.0))
        assert generator.generate(expr) == "pow(p[0], 2)"

    @pytest.mark.parametrize("kind, name", [
        (ExpressionKind.ABS, "fabs"),
        (ExpressionKind.LOG, "log"),
        (ExpressionKind.EXP, "exp"),
        (ExpressionKind.SQRT, "sqrt"),
        (ExpressionKind.SIN, "sin"),
        (ExpressionKind.COS, "cos"),
        (ExpressionKind.TAN, "tan"),
        (ExpressionKind.ASIN, "asin"),
        (ExpressionKind.ACOS, "acos"),
        (ExpressionKind.ATAN, "atan"),
        (ExpressionKind.SINH, "sinh"),
        (ExpressionKind.COSH, "cosh"),
        (ExpressionKind.TANH, "tanh"),
        (ExpressionKind.CEIL, "ceil"),
        (ExpressionKind.FLOOR, "floor"),
    ])
    def test_unary_functions(self, generator, x, kind, name):
        """Test unary function name mapping"""
        assert generator.generate(unary(kind, x)) == f"{name}(p[0])"

    @pytest.mark.parametrize("kind, name", [
        (ExpressionKind.ATAN2, "atan2"),
        (ExpressionKind.MIN, "fmin"),
        (ExpressionKind.MAX, "fmax"),
    ])
    def test_binary_functions(self, generator, x, y, kind, name):
        """Test binary function name mapping"""
        assert generator.generate(binary(kind, x, y)) == f"{name}(p[0], p[1])"

    def test_unknown_variable(self, generator, z):
        """Test a variable outside the parameter list fails"""
        with pytest.raises(UnknownVariableError) as exc_info:
            generator.generate(z)
        assert exc_info.value.variable is z

    def test_unknown_variable_nested(self, generator, x, z):
        """Test an unknown variable deep in the tree fails"""
        expr = add(1.0, (x, 1.0), (unary(ExpressionKind.EXP, mul(2.0, z)), 3.0))
        with pytest.raises(UnknownVariableError):
            generator.generate(expr)

    def test_if_then_else_unsupported(self, generator, x):
        """Test conditionals are refused at the root"""
        with pytest.raises(UnsupportedConstructError) as exc_info:
            generator.generate(IfThenElse(object(), x, Constant(0.0)))
        assert exc_info.value.kind is ExpressionKind.IF_THEN_ELSE
        assert "IfThenElse" in str(exc_info.value)

    def test_uninterpreted_function_unsupported_nested(self, generator, x):
        """Test uninterpreted functions are refused when nested"""
        expr = add(0.0, (x, 1.0), (UninterpretedFunction("g", [x]), 2.0))
        with pytest.raises(UnsupportedConstructError) as exc_info:
            generator.generate(expr)
        assert exc_info.value.kind is ExpressionKind.UNINTERPRETED_FUNCTION
        assert "'g'" in str(exc_info.value)

    def test_deterministic(self, generator, x, y):
        """Test repeated generation yields identical text"""
        expr = div(add(1.0, (x, 2.0)), binary(ExpressionKind.MAX, y, Constant(0.5)))
        assert generator.generate(expr) == generator.generate(expr)

    def test_shared_subexpression_rendered_each_time(self, x, y):
        """Test a shared node is re-rendered at each occurrence"""
        shared = mul(2.0, x, y)
        expr = add(0.0, (shared, 1.0), (unary(ExpressionKind.SIN, shared), 1.0))
        expected = "(0 + (2 * p[0] * p[1]) + sin((2 * p[0] * p[1])))"
        plain = CodeGenVisitor(build_index_map([x, y]))
        memoized = CodeGenVisitor(build_index_map([x, y]), memoize=True)
        assert plain.generate(expr) == expected
        assert memoized.generate(expr) == expected

    def test_memoized_failure_is_not_cached(self, x, z):
        """Test a failed render is raised again on the next call"""
        generator = CodeGenVisitor(build_index_map([x]), memoize=True)
        expr = add(0.0, (z, 1.0))
        for _ in range(2):
            with pytest.raises(UnknownVariableError):
                generator.generate(expr)

    def test_fully_parenthesized(self, generator, x, y):
        """Test nested composites keep their parentheses"""
        expr = mul(1.0, add(1.0, (x, 1.0)), div(x, y))
        assert generator.generate(expr) == "(1 * (1 + p[0]) * (p[0] / p[1]))"

    def test_constant_division_is_floating(self, generator):
        """Test 1 / 2 never becomes C integer division"""
        assert generator.generate(div(Constant(1.0), Constant(2.0))) == "(1.0 / 2)"

    def test_division_by_constant_sum(self, generator):
        """Test 1 / (4) keeps the denominator double-typed"""
        expr = div(Constant(1.0), add(4.0))
        assert generator.generate(expr) == "(1 / (4.0))"

    def test_division_with_variable_keeps_integer_literal(self, generator, x):
        """Test a double operand leaves integral literals alone"""
        assert generator.generate(div(Constant(1.0), x)) == "(1 / p[0])"
        assert generator.generate(div(x, Constant(2.0))) == "(p[0] / 2)"

    def test_constant_product_does_not_overflow(self, generator):
        """Test a product of large integral constants is computed in double"""
        expr = mul(4e9, Constant(4e9))
        assert generator.generate(expr) == "(4000000000.0 * 4000000000)"

    def test_constant_sum_of_constants(self, generator):
        """Test an offset followed by an integral term is floating"""
        expr = add(1.0, (Constant(2.0), 1.0), (Constant(3.0), 5.0))
        assert generator.generate(expr) == "(1.0 + 2 + (5.0 * 3))"

    def test_nested_constant_division(self, generator, x):
        """Test x + 1 / 2 keeps the half"""
        expr = add(0.0, (x, 1.0), (div(Constant(1.0), Constant(2.0)), 1.0))
        assert generator.generate(expr) == "(0 + p[0] + (1.0 / 2))"

    @pytest.mark.parametrize("memoize", [False, True])
    def test_deep_chain(self, x, memoize):
        """Test a chain a few hundred levels deep renders"""
        expr = x
        for _ in range(300):
            expr = unary(ExpressionKind.SIN, expr)
        code = CodeGenVisitor(build_index_map([x]), memoize=memoize).generate(expr)
        assert code == "sin(" * 300 + "p[0]" + ")" * 300
