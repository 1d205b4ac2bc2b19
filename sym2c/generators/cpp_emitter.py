"""C code emitter for sym2c

Wraps rendered expressions in complete function definitions plus the
metadata struct and constructor downstream loaders use to discover the
input/output shape:
- Scalar: double f(const double* p), returned as a string
- Dense matrix: void f(const double* p, double* m), row-major, streamed
- Sparse matrix: compressed sparse column arrays, streamed

Every driver renders all expressions before anything reaches the caller's
output, so a failing expression never leaves a partial function behind.
"""

import logging
import shutil
import tempfile
from typing import IO, Iterable, List, Optional, Sequence, Tuple

from sym2c.core.config import CodeGenConfig
from sym2c.core.errors import ExpressionDepthError, ShapeError
from sym2c.core.expression import Expression, Variable
from sym2c.core.index_map import build_index_map
from sym2c.generators.expr_generator import CodeGenVisitor
from sym2c.generators.naming import NamingScheme

logger = logging.getLogger(__name__)

INDENT = "    "

SparseEntry = Tuple[int, int, Expression]


def flatten_rows(data: Sequence, cols: Optional[int] = None) -> List[Expression]:
    """Flatten matrix data to row-major order

    Args:
        data: Flat sequence of expressions or a sequence of rows
        cols: Expected row length, checked for nested input

    Returns:
        Flat list of expressions

    Raises:
        ShapeError: If nested rows have unequal or unexpected lengths
    """
    items = list(data)
    if not items or not all(isinstance(row, (list, tuple)) for row in items):
        return items
    width = len(items[0]) if cols is None else cols
    flat: List[Expression] = []
    for i, row in enumerate(items):
        if len(row) != width:
            raise ShapeError(f"Row {i} has {len(row)} entries, expected {width}")
        flat.extend(row)
    return flat


def _check_extent(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ShapeError(f"{name} must be a non-negative integer, got {value!r}")


class CppEmitter:
    """Emits C function definitions and metadata from symbolic expressions"""

    def __init__(self, config: Optional[CodeGenConfig] = None) -> None:
        """Initialize C emitter

        Args:
            config: Generation options (default: CodeGenConfig())
        """
        self.config = config if config is not None else CodeGenConfig()

    def _make_visitor(self, parameters: Sequence[Variable]) -> CodeGenVisitor:
        id_to_idx_map = build_index_map(parameters, self.config.duplicate_parameters)
        return CodeGenVisitor(id_to_idx_map, memoize=self.config.memoize)

    def _render(self, visitor: CodeGenVisitor, expr: Expression, function_name: str) -> str:
        try:
            return visitor.generate(expr)
        except RecursionError as e:
            raise ExpressionDepthError(
                f"Expression for '{function_name}' is nested too deeply to generate"
            ) from e

    def _meta_lines(self, function_name: str, parameter_size: int,
                    matrix_fields: Optional[List[str]] = None,
                    matrix_values: Optional[List[int]] = None) -> List[str]:
        """Generate the <name>_meta_t struct and <name>_meta() constructor

        Args:
            function_name: Generated function name
            parameter_size: Length of the parameter array p
            matrix_fields: Lines declaring the output struct m, if any
            matrix_values: Initializer values for m, if any

        Returns:
            Lines of C code
        """
        meta_type = NamingScheme.meta_type_name(function_name)
        meta_func = NamingScheme.meta_function_name(function_name)
        annotate = self.config.annotate_meta

        lines = ["typedef struct {"]
        if annotate:
            lines.append(f"{INDENT}/* p: input, vector */")
        lines.append(f"{INDENT}struct {{ int size; }} p;")
        initializer = f"{{{parameter_size}}}"
        if matrix_fields is not None:
            if annotate:
                lines.append(f"{INDENT}/* m: output, matrix */")
            lines.extend(matrix_fields)
            initializer += ", {" + ", ".join(str(v) for v in matrix_values) + "}"
        lines.append(f"}} {meta_type};")
        lines.append(f"{meta_type} {meta_func}() {{ return {{{initializer}}}; }}")
        return lines

    def generate_scalar(self, function_name: str, parameters: Sequence[Variable],
                        expr: Expression) -> str:
        """Generate a scalar function and its metadata

        Args:
            function_name: Name of the generated C function
            parameters: Ordered parameter variables (defines p layout)
            expr: Expression to evaluate

        Returns:
            Complete C code as string
        """
        NamingScheme.validate_function_name(function_name)
        logger.debug("Generating scalar function %s over %d parameters",
                     function_name, len(parameters))
        visitor = self._make_visitor(parameters)
        body = self._render(visitor, expr, function_name)

        lines = [
            f"double {function_name}(const double* p) {{",
            f"{INDENT}return {body};",
            "}",
        ]
        lines.extend(self._meta_lines(function_name, len(parameters)))
        return "\n".join(lines) + "\n"

    def generate_data(self, function_name: str, parameters: Sequence[Variable],
                      data: Sequence[Expression], out: IO[str]) -> None:
        """Stream a function filling m[i] for each expression, in index order

        Args:
            function_name: Name of the generated C function
            parameters: Ordered parameter variables
            data: Flat expressions, row-major
            out: Text sink receiving the function
        """
        NamingScheme.validate_function_name(function_name)
        logger.debug("Generating data function %s with %d entries over %d parameters",
                     function_name, len(data), len(parameters))
        visitor = self._make_visitor(parameters)
        with self._staging() as staging:
            staging.write(f"void {function_name}(const double* p, double* m) {{\n")
            for i, expr in enumerate(data):
                staging.write(f"{INDENT}m[{i}] = {self._render(visitor, expr, function_name)};\n")
            staging.write("}\n")
            self._commit(staging, out)

    def generate_meta(self, function_name: str, parameter_size: int,
                      rows: int, cols: int, out: IO[str]) -> None:
        """Stream the metadata for a dense matrix function

        Args:
            function_name: Name of the generated C function
            parameter_size: Length of the parameter array p
            rows: Output rows
            cols: Output columns
            out: Text sink receiving the metadata
        """
        NamingScheme.validate_function_name(function_name)
        _check_extent("parameter_size", parameter_size)
        _check_extent("rows", rows)
        _check_extent("cols", cols)
        fields = [f"{INDENT}struct {{ int rows; int cols; }} m;"]
        for line in self._meta_lines(function_name, parameter_size, fields, [rows, cols]):
            out.write(line + "\n")

    def generate_matrix(self, function_name: str, parameters: Sequence[Variable],
                        data: Sequence, rows: int, cols: int, out: IO[str],
                        meta_out: Optional[IO[str]] = None) -> None:
        """Stream a dense matrix function and its metadata

        Args:
            function_name: Name of the generated C function
            parameters: Ordered parameter variables
            data: Flat row-major expressions or a sequence of rows
            rows: Output rows
            cols: Output columns
            out: Text sink receiving the data function
            meta_out: Text sink receiving the metadata (default: out)
        """
        _check_extent("rows", rows)
        _check_extent("cols", cols)
        flat = flatten_rows(data, cols)
        if len(flat) != rows * cols:
            raise ShapeError(
                f"Matrix '{function_name}' has {len(flat)} entries, expected {rows} x {cols}"
            )
        self.generate_data(function_name, parameters, flat, out)
        self.generate_meta(function_name, len(parameters), rows, cols,
                           meta_out if meta_out is not None else out)

    def generate_sparse(self, function_name: str, parameters: Sequence[Variable],
                        entries: Iterable[SparseEntry], rows: int, cols: int,
                        out: IO[str]) -> None:
        """Stream a compressed sparse column function and its metadata

        The function fills outer_indices (cols + 1 column start offsets),
        inner_indices (row of each non-zero) and values, ordered by column
        and then by row.

        Args:
            function_name: Name of the generated C function
            parameters: Ordered parameter variables
            entries: (row, col, expression) triplets of the non-zeros
            rows: Output rows
            cols: Output columns
            out: Text sink receiving the function and metadata
        """
        NamingScheme.validate_function_name(function_name)
        _check_extent("rows", rows)
        _check_extent("cols", cols)
        ordered = self._order_sparse(entries, rows, cols)
        non_zeros = len(ordered)
        logger.debug("Generating sparse function %s, %dx%d with %d non-zeros",
                     function_name, rows, cols, non_zeros)

        outer = [0] * (cols + 1)
        for _, col, _ in ordered:
            outer[col + 1] += 1
        for j in range(cols):
            outer[j + 1] += outer[j]

        visitor = self._make_visitor(parameters)
        with self._staging() as staging:
            staging.write(
                f"void {function_name}(const double* p, int* outer_indices, "
                f"int* inner_indices, double* values) {{\n"
            )
            for j, offset in enumerate(outer):
                staging.write(f"{INDENT}outer_indices[{j}] = {offset};\n")
            for k, (row, _, _) in enumerate(ordered):
                staging.write(f"{INDENT}inner_indices[{k}] = {row};\n")
            for k, (_, _, expr) in enumerate(ordered):
                staging.write(f"{INDENT}values[{k}] = {self._render(visitor, expr, function_name)};\n")
            staging.write("}\n")
            fields = [
                f"{INDENT}struct {{",
                f"{INDENT}{INDENT}int rows;",
                f"{INDENT}{INDENT}int cols;",
                f"{INDENT}{INDENT}int non_zeros;",
                f"{INDENT}{INDENT}int outer_indices;",
                f"{INDENT}{INDENT}int inner_indices;",
                f"{INDENT}}} m;",
            ]
            values = [rows, cols, non_zeros, cols + 1, non_zeros]
            for line in self._meta_lines(function_name, len(parameters), fields, values):
                staging.write(line + "\n")
            self._commit(staging, out)

    @staticmethod
    def _order_sparse(entries: Iterable[SparseEntry], rows: int, cols: int) -> List[SparseEntry]:
        seen = set()
        ordered = []
        for row, col, expr in entries:
            if not (0 <= row < rows and 0 <= col < cols):
                raise ShapeError(f"Entry ({row}, {col}) is outside a {rows} x {cols} matrix")
            if (row, col) in seen:
                raise ShapeError(f"Entry ({row}, {col}) is given more than once")
            seen.add((row, col))
            ordered.append((row, col, expr))
        ordered.sort(key=lambda entry: (entry[1], entry[0]))
        return ordered

    def _staging(self):
        return tempfile.SpooledTemporaryFile(
            max_size=self.config.spool_max_size, mode="w+", encoding="utf-8", newline=""
        )

    @staticmethod
    def _commit(staging, out: IO[str]) -> None:
        staging.seek(0)
        shutil.copyfileobj(staging, out)


def codegen(function_name: str, parameters: Sequence[Variable], expr: Expression,
            config: Optional[CodeGenConfig] = None) -> str:
    """Generate a scalar C function ``double <name>(const double* p)``"""
    return CppEmitter(config).generate_scalar(function_name, parameters, expr)


def codegen_data(function_name: str, parameters: Sequence[Variable],
                 data: Sequence[Expression], out: IO[str],
                 config: Optional[CodeGenConfig] = None) -> None:
    """Stream ``void <name>(const double* p, double* m)`` to out"""
    CppEmitter(config).generate_data(function_name, parameters, data, out)


def codegen_meta(function_name: str, parameter_size: int, rows: int, cols: int,
                 out: IO[str], config: Optional[CodeGenConfig] = None) -> None:
    """Stream the dense matrix metadata for <name> to out"""
    CppEmitter(config).generate_meta(function_name, parameter_size, rows, cols, out)


def codegen_matrix(function_name: str, parameters: Sequence[Variable], data: Sequence,
                   rows: int, cols: int, out: IO[str], meta_out: Optional[IO[str]] = None,
                   config: Optional[CodeGenConfig] = None) -> None:
    """Stream a dense matrix function to out and its metadata to meta_out"""
    CppEmitter(config).generate_matrix(function_name, parameters, data, rows, cols,
                                       out, meta_out)


def codegen_sparse(function_name: str, parameters: Sequence[Variable],
                   entries: Iterable[SparseEntry], rows: int, cols: int, out: IO[str],
                   config: Optional[CodeGenConfig] = None) -> None:
    """Stream a compressed sparse column function and its metadata to out"""
    CppEmitter(config).generate_sparse(function_name, parameters, entries, rows, cols, out)
