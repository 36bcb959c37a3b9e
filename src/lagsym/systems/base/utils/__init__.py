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
System Utilities
================

Code generation, backend dispatch and parameter validation shared by the
derivation and integration layers.

>>> from lagsym.systems.base.utils import generate_function, validate_state
"""

from .backend_utils import cos, detect_backend, sin, square
from .codegen_utils import generate_function, generate_numpy_function, generate_sympy_function
from .parameter_validator import InvalidParameters, validate_run_parameters, validate_state

__all__ = [
    "cos",
    "detect_backend",
    "sin",
    "square",
    "generate_function",
    "generate_numpy_function",
    "generate_sympy_function",
    "InvalidParameters",
    "validate_run_parameters",
    "validate_state",
]
