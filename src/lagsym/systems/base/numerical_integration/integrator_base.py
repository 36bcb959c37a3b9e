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
Integrator Base - Abstract Interface for Sampled Integration

Integrators in this package produce trajectories on a fixed output grid
t_k = t0 + k·dt while adapting their internal substeps to an error
tolerance. Output is a forward-only stream of samples; draining the
stream into a container is left to the caller.

Design Note
-----------
The stream replaces an observer callback: a sample is computed when it
is pulled, delivered exactly once, and in strictly increasing time order.
"""

from abc import ABC, abstractmethod
from typing import Callable, Iterator, Tuple

import numpy as np

RightHandSide = Callable[[float, np.ndarray], np.ndarray]
"""First-order right-hand side f(t, y) -> dy/dt over flat state vectors."""

Sample = Tuple[float, np.ndarray]
"""One output sample (t, y)."""

# Relative slack when counting output samples, absorbs horizon/dt rounding
_GRID_SLACK = 1e-9


class NumericalInstability(RuntimeError):
    """Raised when the adaptive step size collapses while meeting the tolerance"""
    pass


def sample_times(t0: float, dt: float, horizon: float) -> np.ndarray:
    """
    Output grid t0 + k·dt for k = 0..floor(horizon/dt).

    The last time is the grid point at or immediately preceding
    t0 + horizon; a horizon that is a multiple of dt up to rounding
    includes its endpoint.

    Examples
    --------
    >>> len(sample_times(0.0, 0.01, 50.0))
    5001
    >>> sample_times(0.0, 0.3, 1.0)
    array([0. , 0.3, 0.6, 0.9])
    """
    n = int(np.floor(horizon / dt + _GRID_SLACK))
    return t0 + dt * np.arange(n + 1)


class IntegratorBase(ABC):
    """
    Abstract base class for sampled integrators.

    Subclasses implement samples() and name.

    Parameters
    ----------
    system : RightHandSide
        Right-hand side f(t, y)
    dt : float
        Output interval
    **options : dict
        - rtol : float
            Relative tolerance (default: 1e-6)
        - atol : float
            Absolute tolerance (default: 1e-8)
    """

    def __init__(self, system: RightHandSide, dt: float, **options):
        if dt is None or dt <= 0:
            raise ValueError(f"Output interval dt must be positive, got {dt}")

        self.system = system
        self.dt = float(dt)
        self.options = options

        self.rtol = options.get("rtol", 1e-6)
        self.atol = options.get("atol", 1e-8)

    @abstractmethod
    def samples(self, y0: np.ndarray, t0: float, horizon: float) -> Iterator[Sample]:
        """
        Stream of samples on the output grid of [t0, t0 + horizon].

        The first sample is (t0, y0) itself.

        Raises
        ------
        NumericalInstability
            If the solver cannot meet the tolerance; samples already
            produced remain valid
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Integrator name for display."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(dt={self.dt}, rtol={self.rtol:.1e}, atol={self.atol:.1e})"
