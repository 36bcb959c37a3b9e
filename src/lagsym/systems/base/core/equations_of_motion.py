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
Equations of Motion - Euler-Lagrange Derivation

Derives equations of motion from a Lagrangian given as a function of the
local state (t, q, qdot):

- lagrange_equations: symbolic Euler-Lagrange residual along a path
- lagrangian_to_state_derivative: explicit first-order state derivative
  (t, q, qdot) -> (1, qdot, qddot), ready for numerical integration
- lagrangian_to_energy: energy function E = qdot·∂L/∂qdot - L

Derivation
----------
All partial derivatives are exact (SymPy differentiation on placeholders).
Writing p = ∂L/∂qdot, the Euler-Lagrange equations

    d/dt ∂L/∂qdot - ∂L/∂q = 0

expand by the chain rule into the linear system

    M(t, q, qdot) qddot = ∂L/∂q - (∂p/∂q) qdot - ∂p/∂t

with mass matrix M = ∂p/∂qdot. The system is solved numerically for
qddot at every evaluation; a mass matrix that is identically singular is
rejected at derivation time with DegenerateSystem.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Tuple

import numpy as np
import sympy as sp

from lagsym.systems.base.core.lagrangian import (
    Gamma,
    substitution,
    symbolic_state,
    state_symbols,
)
from lagsym.systems.base.utils.codegen_utils import generate_function
from lagsym.types.core import (
    Lagrangian,
    Shape,
    State,
    flatten_structure,
    shape_size,
    structure_shape,
    unflatten_structure,
)

# Number of random configurations probed when testing the mass matrix
_DEGENERACY_PROBES = 3


# ============================================================================
# Exceptions
# ============================================================================


class DegenerateSystem(ValueError):
    """Raised when the mass matrix ∂²L/∂qdot∂qdot is singular"""
    pass


# ============================================================================
# Euler-Lagrange Residual
# ============================================================================


def lagrange_equations(lagrangian: Lagrangian) -> Callable:
    """
    Euler-Lagrange residual operator.

    ``lagrange_equations(L)(path)(t)`` returns the column matrix

        d/dt (∂L/∂qdot)(Γ[path](t)) - (∂L/∂q)(Γ[path](t))

    which vanishes identically exactly when the path is a realizable
    motion of the system.

    Parameters
    ----------
    lagrangian : Lagrangian
        Function of the local state

    Examples
    --------
    >>> t = sp.Symbol("t", real=True)
    >>> m, k = sp.symbols("m k", positive=True)
    >>> L = lambda s: m * s.qdot[0] ** 2 / 2 - k * s.q[0] ** 2 / 2
    >>> lagrange_equations(L)((sp.Function("x"),))(t)
    Matrix([[k*x(t) + m*Derivative(x(t), (t, 2))]])
    """

    def on_path(path):
        def at(t):
            local = Gamma(path, t)
            shape = structure_shape(local.q)
            template = symbolic_state(shape, dummy=True)
            L = sp.sympify(lagrangian(template))

            momenta = [L.diff(v) for v in flatten_structure(template.qdot)]
            forces = [L.diff(q) for q in flatten_structure(template.q)]

            rule = substitution(template, local)
            residual = [
                sp.diff(p.xreplace(rule), local.t) - f.xreplace(rule)
                for p, f in zip(momenta, forces)
            ]
            return sp.Matrix(residual)

        return at

    return on_path


# ============================================================================
# State Derivative
# ============================================================================


@dataclass
class EquationsOfMotion:
    """
    Symbolic equations of motion for one coordinate shape.

    Attributes
    ----------
    state : State
        Placeholder state the expressions are written in
    mass_matrix : sp.Matrix
        M = ∂²L/∂qdot∂qdot, shape (n, n)
    force : sp.Matrix
        Right-hand side of M qddot = force, shape (n, 1)
    """

    state: State
    mass_matrix: sp.Matrix
    force: sp.Matrix

    @property
    def symbols(self) -> list:
        return state_symbols(self.state)

    def accelerations(self) -> sp.Matrix:
        """Explicit symbolic qddot (solves the linear system with SymPy; slow)."""
        return self.mass_matrix.LUsolve(self.force)


class StateDerivative:
    """
    Explicit state derivative of a Lagrangian.

    Calling the object on a state returns ``State(1, qdot, qddot)``.
    Symbolic equations and compiled callables are derived once per
    coordinate shape and cached, so a single instance serves repeated
    evaluations by an integrator.

    Examples
    --------
    >>> sd = lagrangian_to_state_derivative(build_lagrangian(1.0, 3.0, 1.0, 0.9, 9.8))
    >>> sd(State(0.0, (np.pi / 2, np.pi), (0.0, 0.0)))
    State(t=1.0, q=(0.0, 0.0), qdot=(...))
    >>>
    >>> f = sd.compile(2)      # f(t, y) over y = [q..., qdot...]
    """

    def __init__(self, lagrangian: Lagrangian):
        self.lagrangian = lagrangian
        self._equations: Dict[Shape, EquationsOfMotion] = {}
        self._compiled: Dict[Tuple[Shape, bool], Callable] = {}

    def equations(self, shape: Shape) -> EquationsOfMotion:
        """
        Symbolic equations of motion for a coordinate shape.

        Raises
        ------
        DegenerateSystem
            If the mass matrix is singular at every probed configuration
        """
        if shape in self._equations:
            return self._equations[shape]

        template = symbolic_state(shape, dummy=True)
        L = sp.sympify(self.lagrangian(template))
        coordinates = list(flatten_structure(template.q))
        velocities = list(flatten_structure(template.qdot))

        momenta = sp.Matrix([L.diff(v) for v in velocities])
        mass_matrix = momenta.jacobian(velocities)
        force = (
            sp.Matrix([L.diff(q) for q in coordinates])
            - momenta.jacobian(coordinates) * sp.Matrix(velocities)
            - momenta.diff(template.t)
        )

        _check_mass_matrix(mass_matrix)

        eom = EquationsOfMotion(template, mass_matrix, force)
        self._equations[shape] = eom
        return eom

    def compile(self, shape: Shape, compile: bool = True) -> Callable:
        """
        First-order right-hand side over flat state vectors.

        Parameters
        ----------
        shape : Shape
            Coordinate shape
        compile : bool
            If True, generate NumPy code; otherwise evaluate with SymPy

        Returns
        -------
        Callable[[float, np.ndarray], np.ndarray]
            ``f(t, y)`` with ``y = [q..., qdot...]`` returning dy/dt
        """
        key = (shape, bool(compile))
        if key in self._compiled:
            return self._compiled[key]

        eom = self.equations(shape)
        backend = "numpy" if compile else "sympy"
        # No CSE: each entry is printed on its own, so blocks of a composite
        # system with identical structure round identically
        mass = generate_function(eom.mass_matrix, eom.symbols, backend, cse=False)
        force = generate_function(eom.force, eom.symbols, backend, cse=False)
        n = shape_size(shape)

        def rhs(t, y):
            y = np.asarray(y, dtype=float)
            args = (t, *y)
            M = mass(*args).reshape(n, n)
            try:
                qddot = np.linalg.solve(M, force(*args))
            except np.linalg.LinAlgError as e:
                raise DegenerateSystem(f"Singular mass matrix at t={t}, y={y}") from e
            return np.concatenate([y[n:], qddot])

        self._compiled[key] = rhs
        return rhs

    def __call__(self, state: State) -> State:
        t, q, qdot = state
        shape = structure_shape(q)
        y = np.array(flatten_structure(q) + flatten_structure(qdot), dtype=float)
        dy = self.compile(shape)(float(t), y)
        n = shape_size(shape)
        return State(
            1.0,
            unflatten_structure(shape, [float(v) for v in dy[:n]]),
            unflatten_structure(shape, [float(a) for a in dy[n:]]),
        )


def _check_mass_matrix(mass_matrix: sp.Matrix):
    """
    Reject mass matrices that are singular everywhere.

    The matrix is evaluated at a few pseudo-random configurations (fixed
    seed); it is declared degenerate when it is rank deficient at all of
    them. Singularities confined to isolated configurations surface at
    evaluation time instead.
    """
    if mass_matrix.is_zero_matrix:
        raise DegenerateSystem("Mass matrix is identically zero")

    n = mass_matrix.rows
    free = sorted(mass_matrix.free_symbols, key=lambda s: s.sort_key())
    if not free:
        probes = [mass_matrix]
    else:
        rng = np.random.default_rng(0)
        probes = [
            mass_matrix.xreplace({s: sp.Float(rng.uniform(0.5, 2.0)) for s in free})
            for _ in range(_DEGENERACY_PROBES)
        ]

    for probe in probes:
        probe = probe.evalf()
        values = np.array([[float(probe[i, j]) for j in range(n)] for i in range(n)])
        if np.linalg.matrix_rank(values) == n:
            return

    raise DegenerateSystem(
        "Mass matrix ∂²L/∂qdot∂qdot is singular; the Lagrangian does not "
        "determine the accelerations"
    )


def lagrangian_to_state_derivative(lagrangian: Lagrangian) -> StateDerivative:
    """Explicit state derivative (t, q, qdot) -> (1, qdot, qddot) of a Lagrangian."""
    return StateDerivative(lagrangian)


# ============================================================================
# Energy
# ============================================================================


class EnergyFunction:
    """
    Energy E = qdot·∂L/∂qdot - L as a numerical function of the state.

    Compiled to NumPy once per coordinate shape.
    """

    def __init__(self, lagrangian: Lagrangian):
        self.lagrangian = lagrangian
        self._compiled: Dict[Shape, Callable] = {}

    def expression(self, state: State) -> sp.Expr:
        """Energy as a SymPy expression of a (placeholder) state."""
        L = sp.sympify(self.lagrangian(state))
        velocities = flatten_structure(state.qdot)
        return sum((v * L.diff(v) for v in velocities), sp.Integer(0)) - L

    def __call__(self, state: State) -> float:
        t, q, qdot = state
        shape = structure_shape(q)
        if shape not in self._compiled:
            template = symbolic_state(shape, dummy=True)
            self._compiled[shape] = generate_function(
                self.expression(template), state_symbols(template), "numpy"
            )
        args = (t, *flatten_structure(q), *flatten_structure(qdot))
        return float(self._compiled[shape](*args)[0])


def lagrangian_to_energy(lagrangian: Lagrangian) -> EnergyFunction:
    """Energy function of a Lagrangian."""
    return EnergyFunction(lagrangian)
