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
Diagnostics - Energy Drift and Phase Divergence

Observables derived from a Lagrangian and from trajectories:

- principal_value: wrap angles to a canonical interval
- energy_monitor: energy relative to an initial state
- safe_log / divergence_monitor / divergence_series: logarithmic
  separation of two nearby trajectories, whose slope over time
  approximates the largest Lyapunov exponent
- divergence_rate: least-squares slope of a divergence series

Numerical Safety Constants
-------------------------
Separations below DIVERGENCE_THRESHOLD are reported as LOG_FLOOR instead
of log(0) = -inf. The defaults keep the floor close to log of the
threshold (log(1e-60) ≈ -138.2); both can be overridden per call.
"""

from typing import Callable, Optional, Sequence

import numpy as np

from lagsym.systems.base.utils.parameter_validator import InvalidParameters
from lagsym.types.core import State, StateFunction

DIVERGENCE_THRESHOLD = 1e-60
LOG_FLOOR = -138.0


# ============================================================================
# Angles
# ============================================================================


def principal_value(cut: float = np.pi) -> Callable:
    """
    Angle wrapping to the interval (cut - 2π, cut].

    Parameters
    ----------
    cut : float
        Upper end of the interval (default π, giving (-π, π])

    Returns
    -------
    Callable
        Wrapping function for scalars (returns float) or arrays. Angles
        already inside the interval are returned unchanged.

    Examples
    --------
    >>> pv = principal_value()
    >>> pv(3 * np.pi / 2)
    -1.5707963267948966
    >>> pv(-np.pi)
    3.141592653589793
    """
    period = 2 * np.pi
    lower = cut - period

    def pv(angle):
        a = np.asarray(angle, dtype=float)
        wrapped = cut - np.mod(cut - a, period)
        wrapped = np.where(wrapped <= lower, wrapped + period, wrapped)
        result = np.where((a > lower) & (a <= cut), a, wrapped)
        return float(result) if result.ndim == 0 else result

    return pv


# ============================================================================
# Energy
# ============================================================================


def energy_monitor(energy_fn: StateFunction, initial_state: State) -> Callable[[State], float]:
    """
    Energy relative to an initial state.

    The initial energy is evaluated once and kept in the closure.

    Examples
    --------
    >>> energy = lagrangian_to_energy(build_lagrangian(1.0, 3.0, 1.0, 0.9, 9.8))
    >>> monitor = energy_monitor(energy, states[0])
    >>> monitor(states[0])
    0.0
    """
    initial_energy = energy_fn(initial_state)

    def monitor(state: State) -> float:
        return energy_fn(state) - initial_energy

    return monitor


# ============================================================================
# Divergence
# ============================================================================


def safe_log(x: float, threshold: float = DIVERGENCE_THRESHOLD, floor: float = LOG_FLOOR) -> float:
    """Natural log of x, or floor when x is below threshold."""
    if x < threshold:
        return floor
    return float(np.log(x))


def _separation(a: float, b: float, pv: Callable) -> float:
    return abs(pv(a - b))


def divergence_monitor(
    coordinate: int = 1,
    threshold: float = DIVERGENCE_THRESHOLD,
    floor: float = LOG_FLOOR,
) -> Callable[[State], float]:
    """
    Log angular separation inside a double-double pendulum state.

    Parameters
    ----------
    coordinate : int
        Index of the compared angle within each sub-pendulum (default 1,
        the second joint)
    threshold, floor : float
        See safe_log

    Returns
    -------
    Callable[[State], float]
        (t, (q_a, q_b), _) -> safe_log(|pv(q_a[c] - q_b[c])|)
    """
    pv = principal_value(np.pi)

    def monitor(state: State) -> float:
        _, (q_a, q_b), _ = state
        return safe_log(_separation(q_a[coordinate], q_b[coordinate], pv), threshold, floor)

    return monitor


def divergence_series(
    trajectory_a: Sequence[State],
    trajectory_b: Sequence[State],
    coordinate: int = 1,
    threshold: float = DIVERGENCE_THRESHOLD,
    floor: float = LOG_FLOOR,
) -> np.ndarray:
    """
    Log angular separation between two separately evolved trajectories.

    Raises
    ------
    InvalidParameters
        If the trajectories differ in length
    """
    if len(trajectory_a) != len(trajectory_b):
        raise InvalidParameters(
            f"Trajectories differ in length: {len(trajectory_a)} != {len(trajectory_b)}"
        )
    pv = principal_value(np.pi)
    return np.array(
        [
            safe_log(_separation(a.q[coordinate], b.q[coordinate], pv), threshold, floor)
            for a, b in zip(trajectory_a, trajectory_b)
        ]
    )


def divergence_rate(
    times: Sequence[float],
    series: Sequence[float],
    floor: float = LOG_FLOOR,
    saturation: Optional[float] = None,
) -> float:
    """
    Least-squares slope of a divergence series.

    Samples at the floor are excluded, as are samples after the series
    first reaches ``saturation`` (separation of order one no longer grows
    exponentially). Returns nan when fewer than two samples remain.
    """
    times = np.asarray(times, dtype=float)
    series = np.asarray(series, dtype=float)
    mask = series > floor
    if saturation is not None:
        saturated = np.nonzero(series >= saturation)[0]
        if len(saturated):
            mask[saturated[0]:] = False
    if np.count_nonzero(mask) < 2:
        return float("nan")
    slope, _ = np.polyfit(times[mask], series[mask], 1)
    return float(slope)
