"""C code generators for symbolic expressions"""

from .expr_generator import CodeGenVisitor, format_double
from .cpp_emitter import (
    CppEmitter,
    codegen,
    codegen_data,
    codegen_matrix,
    codegen_meta,
    codegen_sparse,
    flatten_rows,
)
from .naming import NamingScheme
