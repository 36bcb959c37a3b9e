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
Double Pendulum - Lagrangian Construction

Planar pendulum of two point masses on massless rigid links, written as
a rectangular-coordinate Lagrangian composed with the joint-angle
coordinate transform.

Physical System:
---------------
- Bob 1 (mass m₁) hangs from the origin on a link of length l₁
- Bob 2 (mass m₂) hangs from bob 1 on a link of length l₂
- Uniform gravity g acts in the -y direction

Configuration:
-------------
Generalized coordinates q = (θ₁, θ₂):
- θ₁: angle of link 1 from the downward vertical [rad]
- θ₂: angle of link 2 relative to link 1 [rad]

Coordinate transform (angles → rectangular):
    x₁ = l₁·sin(θ₁)
    y₁ = -l₁·cos(θ₁)
    x₂ = x₁ + l₂·sin(θ₁ + θ₂)
    y₂ = y₁ - l₂·cos(θ₁ + θ₂)

Energy (rectangular):
    T = ½m₁(ẋ₁² + ẏ₁²) + ½m₂(ẋ₂² + ẏ₂²)
    V = m₁·g·y₁ + m₂·g·y₂
    L = T - V

The generalized Lagrangian is ``L ∘ F→C(angles→rect)``: rectangular
velocities come from the exact Jacobian of the transform.

Double-Double Pendulum:
----------------------
Two independent double pendulums sharing only time. Coordinates are a
pair of pairs ((θ₁, θ₂), (φ₁, φ₂)); the Lagrangian is the sum of the two
single Lagrangians. Evolving both from nearly identical initial angles
exposes sensitivity to initial conditions.
"""

from lagsym.systems.base.core.lagrangian import F_to_C, compose
from lagsym.systems.base.utils.backend_utils import cos, sin, square
from lagsym.types.core import Lagrangian, State, StateFunction

# ============================================================================
# Coordinate Transform
# ============================================================================


def angles_to_rect(l1, l2) -> StateFunction:
    """
    Joint angles to rectangular bob positions.

    Parameters
    ----------
    l1, l2 : ScalarLike
        Link lengths (numbers or SymPy symbols)

    Returns
    -------
    StateFunction
        (t, (θ₁, θ₂), _) -> (x₁, y₁, x₂, y₂)

    Examples
    --------
    >>> angles_to_rect(1.0, 0.9)(State(0.0, (0.0, 0.0), (0.0, 0.0)))
    (0.0, -1.0, 0.0, -1.9)
    """

    def transform(state: State):
        _, (theta1, theta2), _ = state
        x1 = l1 * sin(theta1)
        y1 = -(l1 * cos(theta1))
        x2 = x1 + l2 * sin(theta1 + theta2)
        y2 = y1 - l2 * cos(theta1 + theta2)
        return (x1, y1, x2, y2)

    return transform


# ============================================================================
# Energy Model (Rectangular Coordinates)
# ============================================================================


def kinetic_energy(m1, m2) -> StateFunction:
    """Kinetic energy of the two bobs from rectangular velocities."""

    def T(state: State):
        _, _, (xdot1, ydot1, xdot2, ydot2) = state
        return (m1 * (square(xdot1) + square(ydot1)) + m2 * (square(xdot2) + square(ydot2))) / 2

    return T


def potential_energy(m1, m2, g) -> StateFunction:
    """Uniform gravitational potential of the two bobs."""

    def V(state: State):
        _, (_, y1, _, y2), _ = state
        return m1 * g * y1 + m2 * g * y2

    return V


def rectangular_lagrangian(m1, m2, g) -> Lagrangian:
    """T - V in rectangular coordinates."""
    T = kinetic_energy(m1, m2)
    V = potential_energy(m1, m2, g)

    def L_rect(state: State):
        return T(state) - V(state)

    return L_rect


# ============================================================================
# Generalized Lagrangians
# ============================================================================


def build_lagrangian(m1, m2, l1, l2, g) -> Lagrangian:
    """
    Double pendulum Lagrangian in joint-angle coordinates.

    Parameters
    ----------
    m1, m2 : ScalarLike
        Bob masses [kg]
    l1, l2 : ScalarLike
        Link lengths [m]
    g : ScalarLike
        Gravitational acceleration [m/s²]

    Returns
    -------
    Lagrangian
        Function of the local state (t, (θ₁, θ₂), (θ̇₁, θ̇₂))

    Examples
    --------
    >>> L = build_lagrangian(1.0, 3.0, 1.0, 0.9, 9.8)
    >>> float(L(State(0.0, (0.0, 0.0), (0.0, 0.0))))  # -V at rest, hanging
    65.66
    >>>
    >>> # Symbolic
    >>> m1, m2, l1, l2, g = sp.symbols("m_1 m_2 l_1 l_2 g", positive=True)
    >>> expr = symbolic_lagrangian(build_lagrangian(m1, m2, l1, l2, g))
    """
    return compose(rectangular_lagrangian(m1, m2, g), F_to_C(angles_to_rect(l1, l2)))


L_double_pendulum = build_lagrangian


def build_double_double_lagrangian(m1, m2, l1, l2, g) -> Lagrangian:
    """
    Two uncoupled double pendulums sharing only time.

    The local state is (t, (q_a, q_b), (qdot_a, qdot_b)); each sub-state
    (t, q_i, qdot_i) is fed to its own double pendulum Lagrangian.
    """
    single = build_lagrangian(m1, m2, l1, l2, g)

    def L(state: State):
        t, (q_a, q_b), (qdot_a, qdot_b) = state
        return single(State(t, q_a, qdot_a)) + single(State(t, q_b, qdot_b))

    return L


L_double_double_pendulum = build_double_double_lagrangian
