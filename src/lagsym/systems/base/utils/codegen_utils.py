# Copyright (C) 2025 Gil Benezer
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.


"""
Code generation utilities.

Turns SymPy expressions into numerical callables. Two backends:
- numpy: compiled through sympy.lambdify, optionally with common
  subexpression elimination (the ``compile=True`` path of the integrator)
- sympy: no compilation, every call substitutes the arguments into the
  expression and evaluates it with SymPy (slow reference path)

Both backends follow the same shape convention: results are always 1D
float arrays, even for scalar expressions.
"""

from typing import Callable, Literal, Union

import numpy as np
import sympy as sp

Backend = Literal["numpy", "sympy"]


def _as_matrix(expr) -> sp.Matrix:
    if isinstance(expr, (list, tuple)):
        return sp.Matrix(expr)
    if isinstance(expr, sp.MatrixBase):
        return sp.Matrix(expr)
    return sp.Matrix([expr])


def generate_numpy_function(
    expr: Union[sp.Expr, list[sp.Expr], sp.Matrix],
    symbols: list[sp.Symbol],
    cse: bool = True,
) -> Callable:
    """
    Generate a NumPy function from SymPy expression(s).

    Args:
        expr: SymPy expression, list, or Matrix
        symbols: Input symbols in order
        cse: Extract common subexpressions before printing

    Returns:
        Compiled NumPy function returning a 1D array (matrices are
        flattened row-major)
    """
    matrix = _as_matrix(expr)
    func = sp.lambdify(symbols, matrix, modules="numpy", cse=cse)
    size = matrix.rows * matrix.cols

    def wrapped_func(*args):
        result = np.asarray(func(*args), dtype=float)
        return result.reshape(size)

    return wrapped_func


def generate_sympy_function(
    expr: Union[sp.Expr, list[sp.Expr], sp.Matrix],
    symbols: list[sp.Symbol],
) -> Callable:
    """
    Generate an uncompiled evaluator from SymPy expression(s).

    Every call substitutes the arguments and evaluates with SymPy's
    arbitrary precision arithmetic before converting to float.
    """
    matrix = _as_matrix(expr)
    symbols = list(symbols)

    def wrapped_func(*args):
        if len(args) != len(symbols):
            raise ValueError(f"Expected {len(symbols)} arguments, got {len(args)}")
        replacements = {s: sp.Float(float(a), 17) for s, a in zip(symbols, args)}
        values = matrix.xreplace(replacements).evalf()
        return np.array([float(v) for v in values], dtype=float)

    return wrapped_func


def generate_function(
    expr: Union[sp.Expr, list[sp.Expr], sp.Matrix],
    symbols: list[sp.Symbol],
    backend: Backend = "numpy",
    **kwargs,
) -> Callable:
    """
    Generate a function from SymPy expression for specified backend.

    Examples:
        >>> x, y = sp.symbols('x y')
        >>> f = generate_function(x**2 + y**2, [x, y])
        >>> f(3.0, 4.0)
        array([25.])
        >>> f(3.0, 4.0).item()
        25.0
    """
    if backend == "numpy":
        return generate_numpy_function(expr, symbols, **kwargs)
    elif backend == "sympy":
        return generate_sympy_function(expr, symbols)
    else:
        raise ValueError(f"Unknown backend: {backend}")
