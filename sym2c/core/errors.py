"""Error taxonomy for sym2c code generation

Every condition aborts the whole generation request. Nothing is retried
and no partial output is produced.
"""

from typing import Optional


class CodeGenError(Exception):
    """Base class for all code generation failures"""


class UnknownVariableError(CodeGenError):
    """A variable reachable in the expression has no parameter index"""

    def __init__(self, variable) -> None:
        """Initialize error

        Args:
            variable: Variable missing from the identifier-to-index map
        """
        self.variable = variable
        super().__init__(
            f"Variable index is not found: '{variable.name}' (id={variable.id}) "
            f"is not in the parameter list"
        )


class UnsupportedConstructError(CodeGenError):
    """Expression contains a node kind that cannot be rendered"""

    def __init__(self, kind, detail: Optional[str] = None) -> None:
        """Initialize error

        Args:
            kind: ExpressionKind of the offending node
            detail: Optional extra description (e.g. function name)
        """
        self.kind = kind
        message = f"Codegen does not support {kind.value} expressions"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class DuplicateParameterError(CodeGenError):
    """Same variable identity appears twice in the parameter list"""

    def __init__(self, variable, first_index: int, second_index: int) -> None:
        self.variable = variable
        self.first_index = first_index
        self.second_index = second_index
        super().__init__(
            f"Parameter '{variable.name}' (id={variable.id}) appears at "
            f"positions {first_index} and {second_index}"
        )


class InvalidIdentifierError(CodeGenError):
    """Function name cannot be used as a C identifier"""

    def __init__(self, identifier: str, reason: str) -> None:
        self.identifier = identifier
        super().__init__(f"Invalid function name {identifier!r}: {reason}")


class ShapeError(CodeGenError):
    """Matrix data does not match the declared rows/cols"""


class ExpressionDepthError(CodeGenError):
    """Expression nesting exceeds the interpreter recursion limit"""


class ConfigError(CodeGenError):
    """Invalid code generation configuration"""
