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
Core Types - Fundamental Building Blocks

Defines the most basic types used throughout the package:
- Scalar and coordinate types (numeric or symbolic)
- The local state tuple (t, q, qdot)
- Physical parameters of the pendulum systems
- Helpers for nested coordinate structures

Coordinate Structures
--------------------
Generalized coordinates are plain tuples. A single double pendulum uses a
flat pair ``(theta1, theta2)``; the composite double-double pendulum uses a
pair of pairs ``((theta1, theta2), (phi1, phi2))``. Velocities always share
the shape of their coordinates.

Usage
-----
>>> from lagsym.types.core import State, flatten_structure
>>>
>>> state = State(0.0, (np.pi / 2, np.pi), (0.0, 0.0))
>>> t, q, qdot = state
>>> flatten_structure(((1.0, 2.0), (3.0, 4.0)))
(1.0, 2.0, 3.0, 4.0)
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, NamedTuple, Sequence, Tuple, Union

import numpy as np

if TYPE_CHECKING:
    import sympy as sp


# ============================================================================
# Scalar and Coordinate Types
# ============================================================================

ScalarLike = Union[float, int, np.number, "sp.Expr"]
"""
Scalar value, numeric or symbolic.

Lagrangians and coordinate transforms accept either Python/NumPy numbers
or SymPy expressions, so the same function serves numerical evaluation
and symbolic derivation.
"""

Coordinates = Tuple[Any, ...]
"""
Generalized coordinates (or velocities) as a possibly nested tuple.

Examples
--------
>>> q: Coordinates = (np.pi / 2, np.pi)                  # double pendulum
>>> q: Coordinates = ((np.pi / 2, np.pi), (0.1, 0.0))    # double-double
"""

Shape = Union[int, Tuple["Shape", ...]]
"""
Hashable description of a coordinate structure.

A flat tuple of n leaves has shape ``n``; a tuple of sub-tuples has the
tuple of their shapes, e.g. ``(2, 2)`` for the double-double pendulum.
"""


class State(NamedTuple):
    """
    Local state tuple (t, q, qdot).

    Attributes
    ----------
    t : ScalarLike
        Time
    q : Coordinates
        Generalized coordinates
    qdot : Coordinates
        Generalized velocities, same shape as q
    """

    t: ScalarLike
    q: Coordinates
    qdot: Coordinates


Lagrangian = Callable[[State], ScalarLike]
"""Function of the local state returning kinetic minus potential energy."""

StateFunction = Callable[[State], Any]
"""Any function of the local state (energy, transforms, monitors)."""


# ============================================================================
# Physical Parameters
# ============================================================================


@dataclass(frozen=True)
class PhysicalParameters:
    """
    Physical constants of a double pendulum.

    Attributes
    ----------
    m1, m2 : float
        Bob masses [kg]
    l1, l2 : float
        Link lengths [m]
    g : float
        Gravitational acceleration [m/s²]
    """

    m1: float = 1.0
    m2: float = 3.0
    l1: float = 1.0
    l2: float = 0.9
    g: float = 9.8

    def as_args(self) -> Tuple[float, float, float, float, float]:
        """Parameters in builder order (m1, m2, l1, l2, g)."""
        return (self.m1, self.m2, self.l1, self.l2, self.g)


DEFAULT_PARAMETERS = PhysicalParameters()


# ============================================================================
# Structure Helpers
# ============================================================================


def _is_leaf(value) -> bool:
    return not isinstance(value, (tuple, list, np.ndarray))


def structure_shape(value) -> Shape:
    """
    Shape of a coordinate structure.

    Examples
    --------
    >>> structure_shape((1.0, 2.0))
    2
    >>> structure_shape(((1.0, 2.0), (3.0, 4.0)))
    (2, 2)
    """
    if _is_leaf(value):
        raise TypeError(f"Coordinates must be a tuple, got {type(value).__name__}")
    if all(_is_leaf(v) for v in value):
        return len(value)
    return tuple(structure_shape(v) for v in value)


def flatten_structure(value) -> Tuple[Any, ...]:
    """Leaves of a nested coordinate structure in depth-first order."""
    if _is_leaf(value):
        return (value,)
    leaves = []
    for v in value:
        leaves.extend(flatten_structure(v))
    return tuple(leaves)


def shape_size(shape: Shape) -> int:
    """Number of leaves in a structure of the given shape."""
    if isinstance(shape, int):
        return shape
    return sum(shape_size(s) for s in shape)


def unflatten_structure(shape: Shape, leaves: Sequence[Any]) -> Coordinates:
    """
    Rebuild a nested tuple of the given shape from flat leaves.

    Inverse of flatten_structure for structures of matching shape.
    """
    leaves = list(leaves)
    if len(leaves) != shape_size(shape):
        raise ValueError(
            f"Expected {shape_size(shape)} leaves for shape {shape}, got {len(leaves)}"
        )
    return _unflatten(shape, iter(leaves))


def _unflatten(shape: Shape, it) -> Coordinates:
    if isinstance(shape, int):
        return tuple(next(it) for _ in range(shape))
    return tuple(_unflatten(s, it) for s in shape)
