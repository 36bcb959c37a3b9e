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
Simulation entry points for the double pendulum systems.

>>> states = run(0.01, 50, CHAOTIC_INITIAL_Q)
>>> len(states)
5001
>>> records = transform_data(states)
"""

from typing import List, Sequence

import numpy as np

from lagsym.systems.base.core.equations_of_motion import lagrangian_to_state_derivative
from lagsym.systems.base.core.lagrangian import compose
from lagsym.systems.base.numerical_integration.evolve import DEFAULT_EPSILON, evolve
from lagsym.systems.base.utils.parameter_validator import InvalidParameters
from lagsym.systems.builtin.double_pendulum import (
    build_double_double_lagrangian,
    build_lagrangian,
)
from lagsym.types.core import DEFAULT_PARAMETERS, State

CHAOTIC_INITIAL_Q = (np.pi / 2, np.pi)
REGULAR_INITIAL_Q = (np.pi / 2, 0.0)

DEFAULT_PERTURBATION = 1e-10

state_derivative = compose(lagrangian_to_state_derivative, build_lagrangian)
"""Builder (m1, m2, l1, l2, g) -> StateDerivative of the double pendulum."""

dd_state_derivative = compose(lagrangian_to_state_derivative, build_double_double_lagrangian)
"""Builder (m1, m2, l1, l2, g) -> StateDerivative of the double-double pendulum."""


def _coords(initial_coords: Sequence[float]) -> tuple:
    coords = tuple(float(c) for c in initial_coords)
    if len(coords) != 2:
        raise InvalidParameters(f"Expected two joint angles, got {initial_coords!r}")
    return coords


def run(step, horizon, *args, epsilon: float = DEFAULT_EPSILON, compile: bool = True) -> List[State]:
    """
    Simulate the double pendulum from rest at the given angles.

    Call as ``run(step, horizon, initial_coords)`` with the default
    parameters (masses 1.0/3.0 kg, lengths 1.0/0.9 m, g = 9.8 m/s²), or
    ``run(step, horizon, l1, l2, m1, m2, g, initial_coords)``.

    Returns
    -------
    List[State]
        States at t = k·step for k = 0..floor(horizon/step)

    Raises
    ------
    InvalidParameters
        On a wrong number of arguments, non-positive step or horizon,
        or initial coordinates that are not a pair
    """
    if len(args) == 1:
        l1, l2, m1, m2, g = (
            DEFAULT_PARAMETERS.l1,
            DEFAULT_PARAMETERS.l2,
            DEFAULT_PARAMETERS.m1,
            DEFAULT_PARAMETERS.m2,
            DEFAULT_PARAMETERS.g,
        )
        (initial_coords,) = args
    elif len(args) == 6:
        l1, l2, m1, m2, g, initial_coords = args
    else:
        raise InvalidParameters(
            "run expects (step, horizon, initial_coords) or "
            "(step, horizon, l1, l2, m1, m2, g, initial_coords)"
        )

    initial_state = State(0.0, _coords(initial_coords), (0.0, 0.0))
    advance = evolve(state_derivative, m1, m2, l1, l2, g)
    return list(advance(initial_state, step, horizon, compile=compile, epsilon=epsilon))


def run_double_double(
    step,
    horizon,
    initial_q1: Sequence[float],
    perturbation: float = DEFAULT_PERTURBATION,
    params=DEFAULT_PARAMETERS,
    epsilon: float = DEFAULT_EPSILON,
    compile: bool = True,
) -> List[State]:
    """
    Two double pendulums, the second kicked in its second angle.

    The second pendulum starts at ``initial_q1 + (0, perturbation)``;
    both start at rest. States have coordinates (q_a, q_b).
    """
    q_a = _coords(initial_q1)
    q_b = (q_a[0], q_a[1] + perturbation)
    rest = (0.0, 0.0)
    initial_state = State(0.0, (q_a, q_b), (rest, rest))
    advance = evolve(dd_state_derivative, *params.as_args())
    return list(advance(initial_state, step, horizon, compile=compile, epsilon=epsilon))
