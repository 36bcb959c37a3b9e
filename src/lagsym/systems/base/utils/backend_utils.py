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
Backend detection and dispatching math functions.

Coordinate transforms and energy functions are written once and evaluated
on two kinds of values: SymPy expressions (during derivation) and plain
numbers or NumPy arrays (during post-processing). The helpers here pick
the matching implementation from the argument type.
"""

from typing import Any

import numpy as np
import sympy as sp


def detect_backend(value: Any) -> str:
    """
    Auto-detect backend from a value's type.

    Returns:
        Backend name: 'sympy' for SymPy objects, 'numpy' otherwise
    """
    if isinstance(value, sp.Basic):
        return "sympy"
    return "numpy"


def sin(x):
    if detect_backend(x) == "sympy":
        return sp.sin(x)
    return np.sin(x)


def cos(x):
    if detect_backend(x) == "sympy":
        return sp.cos(x)
    return np.cos(x)


def square(x):
    return x * x
