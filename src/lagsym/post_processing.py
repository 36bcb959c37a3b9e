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
Post-processing - States to Records

Maps raw double pendulum trajectories into flat per-sample records for
charting and tabular consumers:

- transform_data: one Record per State (angles, velocities, bob
  positions, energy drift)
- points_data: two PointRecords per Record, one per bob
- segments_data: two SegmentRecords per Record, one per link
"""

from typing import Iterable, List, Sequence

from lagsym.diagnostics import energy_monitor, principal_value
from lagsym.systems.base.core.equations_of_motion import lagrangian_to_energy
from lagsym.systems.builtin.double_pendulum import angles_to_rect, build_lagrangian
from lagsym.types.core import DEFAULT_PARAMETERS, PhysicalParameters, State
from lagsym.types.trajectories import PointRecord, Record, SegmentRecord


def transform_data(
    states: Iterable[State],
    params: PhysicalParameters = DEFAULT_PARAMETERS,
) -> List[Record]:
    """
    Records for a double pendulum trajectory.

    Parameters
    ----------
    states : Iterable[State]
        Trajectory with flat coordinates (θ₁, θ₂), as a list or as the
        stream returned by evolve; the first state is the energy reference
    params : PhysicalParameters
        Parameters the trajectory was evolved with

    Returns
    -------
    List[Record]
        Angles wrapped to (-π, π]; ``d_energy`` relative to states[0]

    Examples
    --------
    >>> records = transform_data(run(0.01, 1.0, (np.pi / 2, np.pi)))
    >>> records[0]["d_energy"]
    0.0
    """
    states = list(states)
    if not states:
        return []

    energy = lagrangian_to_energy(build_lagrangian(*params.as_args()))
    monitor = energy_monitor(energy, states[0])
    xform = angles_to_rect(params.l1, params.l2)
    pv = principal_value()

    records = []
    for state in states:
        t, (theta1, theta2), (thetadot1, thetadot2) = state
        x1, y1, x2, y2 = xform(state)
        record: Record = {
            "t": float(t),
            "theta1": pv(theta1),
            "theta2": pv(theta2),
            "thetadot1": float(thetadot1),
            "thetadot2": float(thetadot2),
            "x1": float(x1),
            "y1": float(y1),
            "x2": float(x2),
            "y2": float(y2),
            "d_energy": monitor(state),
        }
        records.append(record)
    return records


def points_data(records: Sequence[Record]) -> List[PointRecord]:
    """Bob positions, two points per record tagged 'p1' and 'p2'."""
    points = []
    for r in records:
        points.append({"t": r["t"], "x": r["x1"], "y": r["y1"], "id": "p1"})
        points.append({"t": r["t"], "x": r["x2"], "y": r["y2"], "id": "p2"})
    return points


def segments_data(records: Sequence[Record]) -> List[SegmentRecord]:
    """Link end points: origin to bob 1 ('p1'), bob 1 to bob 2 ('p2')."""
    segments = []
    for r in records:
        segments.append(
            {"t": r["t"], "x": 0.0, "y": 0.0, "x2": r["x1"], "y2": r["y1"], "id": "p1"}
        )
        segments.append(
            {"t": r["t"], "x": r["x1"], "y": r["y1"], "x2": r["x2"], "y2": r["y2"], "id": "p2"}
        )
    return segments
