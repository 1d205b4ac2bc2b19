"""Naming scheme for sym2c

Generated functions are named by the caller. The metadata companions follow
a fixed convention consumed by downstream loaders:
- Metadata type: <name>_meta_t
- Metadata constructor: <name>_meta()
"""

import re

from sym2c.core.errors import InvalidIdentifierError


class NamingScheme:
    """Validates and derives C identifiers for generated functions"""

    META_TYPE_SUFFIX = "_meta_t"
    META_FUNCTION_SUFFIX = "_meta"

    IDENTIFIER_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

    # C and C++ reserved keywords
    CPP_KEYWORDS = {
        'alignas', 'alignof', 'and', 'and_eq', 'asm', 'auto', 'bitand', 'bitor',
        'bitxor',
        'bool', 'break', 'case', 'catch', 'char', 'char8_t',
        'char16_t', 'char32_t', 'class', 'compl', 'concept', 'const', 'const_cast',
        'consteval', 'constexpr', 'constinit', 'continue', 'co_await', 'co_return',
        'co_yield', 'decltype', 'default', 'delete', 'do', 'double',
        'dynamic_cast', 'else', 'enum', 'explicit', 'export', 'extern',
        'false', 'float', 'for', 'friend', 'goto', 'if', 'inline', 'int',
        'long', 'mutable', 'namespace', 'new', 'noexcept',
        'not', 'not_eq', 'nullptr', 'operator', 'or', 'or_eq', 'private', 'protected',
        'public', 'register', 'reinterpret_cast', 'requires', 'restrict', 'return',
        'short', 'signed', 'sizeof', 'static', 'static_assert', 'static_cast',
        'struct', 'switch', 'template', 'this', 'thread_local', 'throw', 'true',
        'try', 'typedef', 'typeid', 'typename', 'union', 'unsigned', 'using',
        'virtual', 'void', 'volatile', 'wchar_t', 'while', 'xor', 'xor_eq',
        '_Bool', '_Complex', '_Imaginary',
    }

    # <math.h> functions and macros visible to the generated code
    MATH_NAMES = {
        'acos', 'acosh', 'asin', 'asinh', 'atan', 'atan2', 'atanh', 'cbrt', 'ceil',
        'copysign', 'cos', 'cosh', 'erf', 'erfc', 'exp', 'exp2', 'expm1', 'fabs',
        'fdim', 'floor', 'fma', 'fmax', 'fmin', 'fmod', 'frexp', 'hypot', 'ilogb',
        'ldexp', 'lgamma', 'llrint', 'llround', 'log', 'log10', 'log1p', 'log2',
        'logb', 'lrint', 'lround', 'modf', 'nan', 'nearbyint', 'nextafter',
        'nexttoward', 'pow', 'remainder', 'remquo', 'rint', 'round', 'scalbln',
        'scalbn', 'sin', 'sinh', 'sqrt', 'tan', 'tanh', 'tgamma', 'trunc',
        'isnan', 'isinf', 'isfinite', 'signbit', 'fpclassify',
        'INFINITY', 'NAN', 'HUGE_VAL', 'HUGE_VALF', 'HUGE_VALL',
    }

    @staticmethod
    def validate_function_name(name: str) -> str:
        """Check that a function name is usable as a C identifier

        Args:
            name: Requested function name

        Returns:
            The name unchanged

        Raises:
            InvalidIdentifierError: If the name is not a valid identifier, is a keyword
                or shadows a <math.h> name
        """
        if not isinstance(name, str) or not NamingScheme.IDENTIFIER_PATTERN.fullmatch(name):
            raise InvalidIdentifierError(name, "not a C identifier")
        if name in NamingScheme.CPP_KEYWORDS:
            raise InvalidIdentifierError(name, "reserved C/C++ keyword")
        if name in NamingScheme.MATH_NAMES:
            raise InvalidIdentifierError(name, "collides with a <math.h> name")
        return name

    @staticmethod
    def meta_type_name(function_name: str) -> str:
        """Get the metadata struct type name (e.g., "f_meta_t")"""
        return f"{function_name}{NamingScheme.META_TYPE_SUFFIX}"

    @staticmethod
    def meta_function_name(function_name: str) -> str:
        """Get the metadata constructor name (e.g., "f_meta")"""
        return f"{function_name}{NamingScheme.META_FUNCTION_SUFFIX}"
