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
Trajectory and Record Types

Defines the data produced by a simulation run and its post-processing:
- Trajectory: ordered sequence of sampled States
- Record: per-sample mapping of derived measurements
- PointRecord / SegmentRecord: per-bob points and per-link segments

Records are plain dictionaries (TypedDict) so they can be handed to any
charting or tabular consumer without conversion.

Usage
-----
>>> from lagsym.types.trajectories import Record
>>>
>>> records: list[Record] = transform_data(states)
>>> records[-1]["d_energy"]
"""

from typing import List, Literal

from typing_extensions import TypedDict

from .core import State

# ============================================================================
# Trajectory
# ============================================================================

Trajectory = List[State]
"""
Sampled states of one integration run.

Ordered by strictly increasing time; the first entry is the initial state.
"""

BobId = Literal["p1", "p2"]
"""Identifier of a pendulum bob (or of the link ending at that bob)."""


# ============================================================================
# Records
# ============================================================================


class Record(TypedDict):
    """
    Derived measurements for one sampled state.

    Attributes
    ----------
    t : float
        Sample time
    theta1, theta2 : float
        Joint angles wrapped to (-π, π]
    thetadot1, thetadot2 : float
        Joint angular velocities
    x1, y1, x2, y2 : float
        Rectangular bob positions
    d_energy : float
        Energy relative to the first sample of the run
    """

    t: float
    theta1: float
    theta2: float
    thetadot1: float
    thetadot2: float
    x1: float
    y1: float
    x2: float
    y2: float
    d_energy: float


class PointRecord(TypedDict):
    """Position of one bob at one sample time."""

    t: float
    x: float
    y: float
    id: BobId


class SegmentRecord(TypedDict):
    """One pendulum link at one sample time, from (x, y) to (x2, y2)."""

    t: float
    x: float
    y: float
    x2: float
    y2: float
    id: BobId

