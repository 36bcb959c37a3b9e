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
Evolve - Integration Driver for State-Derivative Functions

``evolve`` binds a state derivative (or a builder of one, together with
its physical parameters) and returns a function that integrates from an
initial local state over a horizon, producing the sampled States as an
iterator:

>>> advance = evolve(state_derivative, m1, m2, l1, l2, g)
>>> trajectory = list(advance(State(0.0, (np.pi / 2, np.pi), (0.0, 0.0)), 0.01, 50.0))
>>> len(trajectory)
5001

Arguments are validated and the equations of motion derived when
``advance`` is called, before the first sample is requested, so
InvalidParameters and DegenerateSystem surface immediately. Samples are
then computed lazily as the iterator is consumed.
"""

from typing import Callable, Iterator, Optional

import numpy as np

from lagsym.systems.base.core.equations_of_motion import StateDerivative
from lagsym.systems.base.numerical_integration.scipy_integrator import SOLVERS, ScipyIntegrator
from lagsym.systems.base.utils.parameter_validator import (
    InvalidParameters,
    validate_run_parameters,
    validate_state,
)
from lagsym.types.core import (
    Shape,
    State,
    flatten_structure,
    shape_size,
    unflatten_structure,
)

Observer = Callable[[float, State], None]
"""Callback invoked once per sample with (t, state)."""

DEFAULT_EPSILON = 1e-13


def _flat_rhs(state_derivative: Callable[[State], State], shape: Shape) -> Callable:
    """Flat-vector right-hand side of an arbitrary State -> State derivative."""
    n = shape_size(shape)

    def rhs(t, y):
        q = unflatten_structure(shape, [float(v) for v in y[:n]])
        qdot = unflatten_structure(shape, [float(v) for v in y[n:]])
        _, dq, dqdot = state_derivative(State(t, q, qdot))
        return np.array(flatten_structure(dq) + flatten_structure(dqdot), dtype=float)

    return rhs


def _to_state(t: float, y: np.ndarray, shape: Shape) -> State:
    n = shape_size(shape)
    return State(
        float(t),
        unflatten_structure(shape, [float(v) for v in y[:n]]),
        unflatten_structure(shape, [float(v) for v in y[n:]]),
    )


def evolve(state_derivative, *params) -> Callable[..., Iterator[State]]:
    """
    Bind a state derivative for integration.

    Parameters
    ----------
    state_derivative : StateDerivative or Callable
        Either a state derivative (State -> State(1, qdot, qddot)) or,
        when params are given, a builder called as
        ``state_derivative(*params)`` to produce one
    *params
        Physical parameters passed to the builder

    Returns
    -------
    Callable
        ``advance(initial_state, step_size, horizon, compile=True,
        epsilon=1e-13, observe=None, method="DOP853")`` returning an
        iterator of States on the grid t0 + k·step_size

    Notes
    -----
    - The first sample is the initial state itself.
    - ``epsilon`` is used as both relative and absolute tolerance.
    - ``observe(t, state)``, if given, is called for each sample just
      before it is yielded.
    - ``compile`` selects NumPy code generation over SymPy evaluation; it
      applies to StateDerivative objects only.
    """
    if params:
        state_derivative = state_derivative(*params)

    def advance(
        initial_state: State,
        step_size: float,
        horizon: float,
        compile: bool = True,
        epsilon: float = DEFAULT_EPSILON,
        observe: Optional[Observer] = None,
        method: str = "DOP853",
    ) -> Iterator[State]:
        shape = validate_state(initial_state)
        step_size, horizon, epsilon = validate_run_parameters(step_size, horizon, epsilon)
        if method not in SOLVERS:
            raise InvalidParameters(f"Invalid method '{method}'. Choose from: {list(SOLVERS)}")

        initial_state = State(*initial_state)
        if isinstance(state_derivative, StateDerivative):
            rhs = state_derivative.compile(shape, compile)
        else:
            rhs = _flat_rhs(state_derivative, shape)

        integrator = ScipyIntegrator(rhs, dt=step_size, method=method, rtol=epsilon, atol=epsilon)
        y0 = np.array(
            flatten_structure(initial_state.q) + flatten_structure(initial_state.qdot),
            dtype=float,
        )
        return _stream(integrator, y0, initial_state, horizon, shape, observe)

    return advance


def _stream(integrator, y0, initial_state, horizon, shape, observe) -> Iterator[State]:
    samples = integrator.samples(y0, float(initial_state.t), horizon)
    for k, (t, y) in enumerate(samples):
        state = initial_state if k == 0 else _to_state(t, y, shape)
        if observe is not None:
            observe(state.t, state)
        yield state
