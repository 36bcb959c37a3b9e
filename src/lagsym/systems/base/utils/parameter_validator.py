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
Parameter validation for simulation runs.

Checks run arguments (step size, horizon, tolerance, initial state)
before any derivation or integration starts, so configuration mistakes
surface immediately instead of deep inside the solver.
"""

import math

from lagsym.types.core import Shape, flatten_structure, structure_shape

# ============================================================================
# Exceptions
# ============================================================================


class InvalidParameters(ValueError):
    """Raised when run arguments are rejected before computation"""
    pass


# ============================================================================
# Validators
# ============================================================================


def _require_positive(name: str, value) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidParameters(f"{name} must be a real number, got {value!r}")
    if not math.isfinite(value) or value <= 0.0:
        raise InvalidParameters(f"{name} must be positive and finite, got {value}")
    return value


def validate_run_parameters(step_size, horizon, epsilon=None):
    """
    Validate step size, horizon and (optionally) integration tolerance.

    Returns
    -------
    tuple
        (step_size, horizon, epsilon) as floats; epsilon is None if not given

    Raises
    ------
    InvalidParameters
        If any value is non-positive, non-finite or non-numeric
    """
    step_size = _require_positive("step_size", step_size)
    horizon = _require_positive("horizon", horizon)
    if epsilon is not None:
        epsilon = _require_positive("epsilon", epsilon)
    return step_size, horizon, epsilon


def validate_state(state) -> Shape:
    """
    Validate an initial state and return its coordinate shape.

    Raises
    ------
    InvalidParameters
        If the state is not a (t, q, qdot) triple, if q and qdot differ
        in shape, or if any entry is not a finite number
    """
    try:
        t, q, qdot = state
    except (TypeError, ValueError):
        raise InvalidParameters(f"State must be a (t, q, qdot) triple, got {state!r}")

    try:
        q_shape = structure_shape(q)
        qdot_shape = structure_shape(qdot)
    except TypeError as e:
        raise InvalidParameters(str(e))

    if q_shape != qdot_shape:
        raise InvalidParameters(
            f"Coordinates and velocities must share a shape: {q_shape} != {qdot_shape}"
        )

    for value in (t,) + flatten_structure(q) + flatten_structure(qdot):
        try:
            finite = math.isfinite(float(value))
        except (TypeError, ValueError):
            finite = False
        if not finite:
            raise InvalidParameters(f"State entries must be finite numbers, got {value!r}")

    return q_shape
