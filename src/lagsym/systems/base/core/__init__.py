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
Core derivation layer: Lagrangian combinators and Euler-Lagrange equations.
"""

from .equations_of_motion import (
    DegenerateSystem,
    EnergyFunction,
    EquationsOfMotion,
    StateDerivative,
    lagrange_equations,
    lagrangian_to_energy,
    lagrangian_to_state_derivative,
)
from .lagrangian import (
    F_to_C,
    Gamma,
    compose,
    state_symbols,
    symbolic_coordinates,
    symbolic_lagrangian,
    symbolic_state,
)

__all__ = [
    "DegenerateSystem",
    "EnergyFunction",
    "EquationsOfMotion",
    "StateDerivative",
    "lagrange_equations",
    "lagrangian_to_energy",
    "lagrangian_to_state_derivative",
    "F_to_C",
    "Gamma",
    "compose",
    "state_symbols",
    "symbolic_coordinates",
    "symbolic_lagrangian",
    "symbolic_state",
]
