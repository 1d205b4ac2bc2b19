"""sym2c: generate standalone C functions from symbolic expressions"""

from sym2c.core.config import CodeGenConfig
from sym2c.core.errors import (
    CodeGenError,
    ConfigError,
    DuplicateParameterError,
    ExpressionDepthError,
    InvalidIdentifierError,
    ShapeError,
    UnknownVariableError,
    UnsupportedConstructError,
)
from sym2c.core.expression import (
    Addition,
    BinaryFunction,
    Constant,
    Expression,
    ExpressionKind,
    IfThenElse,
    Multiplication,
    UnaryFunction,
    UninterpretedFunction,
    Variable,
    is_one,
)
from sym2c.core.index_map import build_index_map
from sym2c.generators import (
    CodeGenVisitor,
    CppEmitter,
    codegen,
    codegen_data,
    codegen_matrix,
    codegen_meta,
    codegen_sparse,
)

__version__ = "0.1.0"
