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
Types Module - Type Definitions for LagrangeDESymulation

Usage
-----
>>> from lagsym.types import State, PhysicalParameters, Record
"""

from .core import (
    DEFAULT_PARAMETERS,
    Coordinates,
    Lagrangian,
    PhysicalParameters,
    ScalarLike,
    Shape,
    State,
    StateFunction,
    flatten_structure,
    shape_size,
    structure_shape,
    unflatten_structure,
)
from .trajectories import BobId, PointRecord, Record, SegmentRecord, Trajectory

__all__ = [
    "DEFAULT_PARAMETERS",
    "Coordinates",
    "Lagrangian",
    "PhysicalParameters",
    "ScalarLike",
    "Shape",
    "State",
    "StateFunction",
    "flatten_structure",
    "shape_size",
    "structure_shape",
    "unflatten_structure",
    "BobId",
    "PointRecord",
    "Record",
    "SegmentRecord",
    "Trajectory",
]
