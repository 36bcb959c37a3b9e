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
Lagrangian Combinators

Building blocks for constructing Lagrangians as functions of the local
state tuple (t, q, qdot):

- symbolic_state: SymPy placeholders for a state of a given shape
- compose: function composition over state functions
- F_to_C: lift a coordinate transform to a transform of local states
- Gamma: lift a coordinate path q(t) to its local state tuple
- symbolic_lagrangian: simplified Lagrangian on named placeholders

A Lagrangian written in rectangular coordinates becomes a Lagrangian in
generalized coordinates by composing it with the lifted transform:

>>> L = compose(rectangular_lagrangian(m1, m2, g), F_to_C(angles_to_rect(l1, l2)))

The lift computes rectangular velocities from the exact Jacobian of the
transform, obtained by symbolic differentiation (SymPy) rather than by
rewriting the chain rule by hand.
"""

from typing import Callable, Dict, Optional, Tuple

import sympy as sp

from lagsym.types.core import (
    Coordinates,
    Lagrangian,
    Shape,
    State,
    StateFunction,
    flatten_structure,
    structure_shape,
    unflatten_structure,
)

# ============================================================================
# Placeholders
# ============================================================================


def _leaf_names(shape: Shape, prefix: str) -> list:
    if isinstance(shape, int):
        return [f"{prefix}_{i + 1}" for i in range(shape)]
    names = []
    for i, sub in enumerate(shape):
        names.extend(_leaf_names(sub, f"{prefix}_{i + 1}"))
    return names


def symbolic_coordinates(shape: Shape, prefix: str, dummy: bool = False) -> Coordinates:
    """
    Nested tuple of real SymPy symbols with the given shape.

    Leaves are named ``{prefix}_1, {prefix}_2, ...``; nested structures
    append one index per level (``theta_2_1``).
    """
    make = sp.Dummy if dummy else sp.Symbol
    leaves = [make(name, real=True) for name in _leaf_names(shape, prefix)]
    return unflatten_structure(shape, leaves)


def symbolic_state(
    shape: Shape,
    time: str = "t",
    coordinate: str = "theta",
    velocity: str = "thetadot",
    dummy: bool = False,
) -> State:
    """
    Local state of SymPy placeholders.

    Parameters
    ----------
    shape : Shape
        Coordinate shape, e.g. 2 or (2, 2)
    time, coordinate, velocity : str
        Names (prefixes) of the placeholders
    dummy : bool
        Use sp.Dummy symbols, which never compare equal to user symbols

    Examples
    --------
    >>> symbolic_state(2)
    State(t=t, q=(theta_1, theta_2), qdot=(thetadot_1, thetadot_2))
    """
    make = sp.Dummy if dummy else sp.Symbol
    return State(
        make(time, real=True),
        symbolic_coordinates(shape, coordinate, dummy),
        symbolic_coordinates(shape, velocity, dummy),
    )


def state_symbols(state: State) -> list:
    """Flat argument list [t, q..., qdot...] of a placeholder state."""
    return [state.t, *flatten_structure(state.q), *flatten_structure(state.qdot)]


def substitution(template: State, state: State) -> Dict[sp.Basic, sp.Basic]:
    """Replacement rule mapping the placeholders of template onto state."""
    return {
        symbol: sp.sympify(value)
        for symbol, value in zip(state_symbols(template), state_symbols(state))
    }


# ============================================================================
# Combinators
# ============================================================================


def compose(*functions: Callable) -> Callable:
    """
    Right-to-left function composition.

    ``compose(f, g)(*args) == f(g(*args))``: the innermost function receives
    all arguments, every outer one the previous result. With no functions,
    the identity of a single argument.

    >>> state_derivative = compose(lagrangian_to_state_derivative, build_lagrangian)
    >>> state_derivative(1.0, 3.0, 1.0, 0.9, 9.8)
    """
    if not functions:
        return lambda value: value

    def composed(*args, **kwargs):
        value = functions[-1](*args, **kwargs)
        for function in reversed(functions[:-1]):
            value = function(value)
        return value

    return composed


def F_to_C(transform: StateFunction) -> Callable[[State], State]:
    """
    Lift a coordinate transform to a transform of local states.

    Given ``transform: (t, q, qdot) -> x(t, q)``, returns the function

        (t, q, qdot) -> (t, x(t, q), ∂x/∂t + (∂x/∂q)·qdot)

    The Jacobian ∂x/∂q is derived once per coordinate shape on
    placeholders and cached; each call only substitutes the state.

    Parameters
    ----------
    transform : StateFunction
        Function of the local state returning a tuple of rectangular
        coordinates. It must depend on t and q only.

    Returns
    -------
    Callable[[State], State]
        Lifted transform returning a State in rectangular coordinates.
        Entries are SymPy expressions (Floats for numerical input).
    """
    cache: Dict[Shape, Tuple[State, Tuple, Tuple]] = {}

    def derive(shape: Shape):
        template = symbolic_state(shape, dummy=True)
        position = sp.Matrix(list(transform(template)))
        coordinates = list(flatten_structure(template.q))
        velocities = sp.Matrix(list(flatten_structure(template.qdot)))
        velocity = position.jacobian(coordinates) * velocities + position.diff(template.t)
        return template, tuple(position), tuple(velocity)

    def lifted(state: State) -> State:
        state = State(*state)
        shape = structure_shape(state.q)
        if shape not in cache:
            cache[shape] = derive(shape)
        template, position, velocity = cache[shape]
        rule = substitution(template, state)
        return State(
            state.t,
            tuple(sp.sympify(x).xreplace(rule) for x in position),
            tuple(sp.sympify(v).xreplace(rule) for v in velocity),
        )

    return lifted


def Gamma(path, t: Optional[sp.Symbol] = None) -> State:
    """
    Local state tuple of a coordinate path.

    Parameters
    ----------
    path : Coordinates
        Nested tuple whose leaves are SymPy expressions in t, or
        undefined functions (``sp.Function("theta_1")``) applied to t
    t : sp.Symbol, optional
        Time symbol (default: real symbol ``t``)

    Returns
    -------
    State
        (t, q(t), dq/dt)

    Examples
    --------
    >>> t = sp.Symbol("t", real=True)
    >>> Gamma((sp.cos(t), sp.Function("x")), t).qdot
    (-sin(t), Derivative(x(t), t))
    """
    if t is None:
        t = sp.Symbol("t", real=True)
    shape = structure_shape(path)
    leaves = [_apply(leaf, t) for leaf in flatten_structure(path)]
    q = unflatten_structure(shape, leaves)
    qdot = unflatten_structure(shape, [sp.diff(leaf, t) for leaf in leaves])
    return State(t, q, qdot)


def _apply(leaf, t):
    if isinstance(leaf, sp.Basic):
        return leaf
    if callable(leaf):
        return leaf(t)
    return sp.sympify(leaf)


# ============================================================================
# Inspection
# ============================================================================


def symbolic_lagrangian(lagrangian: Lagrangian, shape: Shape = 2, simplify: bool = True):
    """
    Lagrangian evaluated on named placeholders.

    Examples
    --------
    >>> m1, m2, l1, l2, g = sp.symbols("m_1 m_2 l_1 l_2 g", positive=True)
    >>> expr = symbolic_lagrangian(build_lagrangian(m1, m2, l1, l2, g))
    """
    expr = sp.sympify(lagrangian(symbolic_state(shape)))
    return sp.simplify(expr) if simplify else expr
