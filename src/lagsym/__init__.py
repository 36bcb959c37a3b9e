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
LagrangeDESymulation (lagsym)

Equations of motion from symbolic Lagrangians, sampled numerical
integration and trajectory diagnostics for constrained multi-body
systems.

>>> from lagsym import run, transform_data, CHAOTIC_INITIAL_Q
>>> records = transform_data(run(0.01, 50, CHAOTIC_INITIAL_Q))
"""

from lagsym.diagnostics import (
    DIVERGENCE_THRESHOLD,
    LOG_FLOOR,
    divergence_monitor,
    divergence_rate,
    divergence_series,
    energy_monitor,
    principal_value,
    safe_log,
)
from lagsym.post_processing import points_data, segments_data, transform_data
from lagsym.simulation import (
    CHAOTIC_INITIAL_Q,
    REGULAR_INITIAL_Q,
    dd_state_derivative,
    run,
    run_double_double,
    state_derivative,
)
from lagsym.systems.base.core import (
    DegenerateSystem,
    F_to_C,
    Gamma,
    StateDerivative,
    compose,
    lagrange_equations,
    lagrangian_to_energy,
    lagrangian_to_state_derivative,
    symbolic_lagrangian,
    symbolic_state,
)
from lagsym.systems.base.numerical_integration import (
    NumericalInstability,
    ScipyIntegrator,
    evolve,
)
from lagsym.systems.base.utils import InvalidParameters
from lagsym.systems.builtin import (
    L_double_double_pendulum,
    L_double_pendulum,
    angles_to_rect,
    build_double_double_lagrangian,
    build_lagrangian,
    kinetic_energy,
    potential_energy,
    rectangular_lagrangian,
)
from lagsym.types import DEFAULT_PARAMETERS, PhysicalParameters, Record, State

__version__ = "0.1.0"

__all__ = [
    "DIVERGENCE_THRESHOLD",
    "LOG_FLOOR",
    "divergence_monitor",
    "divergence_rate",
    "divergence_series",
    "energy_monitor",
    "principal_value",
    "safe_log",
    "points_data",
    "segments_data",
    "transform_data",
    "CHAOTIC_INITIAL_Q",
    "REGULAR_INITIAL_Q",
    "dd_state_derivative",
    "run",
    "run_double_double",
    "state_derivative",
    "DegenerateSystem",
    "F_to_C",
    "Gamma",
    "StateDerivative",
    "compose",
    "lagrange_equations",
    "lagrangian_to_energy",
    "lagrangian_to_state_derivative",
    "symbolic_lagrangian",
    "symbolic_state",
    "NumericalInstability",
    "ScipyIntegrator",
    "evolve",
    "InvalidParameters",
    "L_double_double_pendulum",
    "L_double_pendulum",
    "angles_to_rect",
    "build_double_double_lagrangian",
    "build_lagrangian",
    "kinetic_energy",
    "potential_energy",
    "rectangular_lagrangian",
    "DEFAULT_PARAMETERS",
    "PhysicalParameters",
    "Record",
    "State",
]
