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
Scipy Integrator - Adaptive Substeps, Fixed Output Grid

Drives one of scipy's OdeSolver classes step by step and reads samples on
the output grid from each step's dense output. Substeps adapt to the
error tolerance; the output grid does not depend on them.

Supported Methods:
- DOP853: Explicit Runge-Kutta 8(5,3) - high accuracy [DEFAULT]
- RK45: Explicit Runge-Kutta 5(4) - general purpose
- RK23: Explicit Runge-Kutta 3(2) - low accuracy/fast
- Radau: Implicit Runge-Kutta (Radau IIA) - stiff systems
- BDF: Backward Differentiation Formula - very stiff systems
- LSODA: Automatic stiffness detection and switching
"""

import warnings
from typing import Iterator

import numpy as np
import scipy.integrate

from lagsym.systems.base.numerical_integration.integrator_base import (
    IntegratorBase,
    NumericalInstability,
    RightHandSide,
    Sample,
    sample_times,
)

# Smallest relative tolerance scipy's solvers honour
_RTOL_FLOOR = 100 * np.finfo(float).eps

SOLVERS = {
    "DOP853": scipy.integrate.DOP853,
    "RK45": scipy.integrate.RK45,
    "RK23": scipy.integrate.RK23,
    "Radau": scipy.integrate.Radau,
    "BDF": scipy.integrate.BDF,
    "LSODA": scipy.integrate.LSODA,
}


class ScipyIntegrator(IntegratorBase):
    """
    Sampled integrator backed by scipy.integrate.OdeSolver.

    Examples
    --------
    >>> integrator = ScipyIntegrator(rhs, dt=0.01, method="DOP853", rtol=1e-13, atol=1e-13)
    >>> for t, y in integrator.samples(y0, 0.0, 50.0):
    ...     collect(t, y)
    """

    def __init__(self, system: RightHandSide, dt: float = 0.01, method: str = "DOP853", **options):
        """
        Initialize scipy sampled integrator.

        Parameters
        ----------
        system : RightHandSide
            Right-hand side f(t, y)
        dt : float
            Output interval
        method : str
            Solver method: 'DOP853', 'RK45', 'RK23', 'Radau', 'BDF', 'LSODA'
        **options : dict
            - rtol, atol: tolerances (rtol below 100·machine-eps is raised
              to that floor with a warning)
            - first_step: initial substep (default: auto)
            - max_step: largest substep (default: inf)

        Raises
        ------
        ValueError
            If method is unknown
        """
        super().__init__(system, dt, **options)

        if method not in SOLVERS:
            raise ValueError(f"Invalid method '{method}'. Choose from: {list(SOLVERS)}")
        self.method = method

        if self.rtol < _RTOL_FLOOR:
            warnings.warn(
                f"rtol={self.rtol:.1e} is below the solver floor {_RTOL_FLOOR:.1e}; "
                f"using {_RTOL_FLOOR:.1e}",
                UserWarning,
            )
            self.rtol = _RTOL_FLOOR

    def samples(self, y0: np.ndarray, t0: float, horizon: float) -> Iterator[Sample]:
        y0 = np.asarray(y0, dtype=float)
        times = sample_times(float(t0), self.dt, float(horizon))

        yield times[0], y0.copy()
        if len(times) == 1:
            return

        solver = SOLVERS[self.method](
            self.system,
            times[0],
            y0,
            max(float(t0) + float(horizon), times[-1]),
            rtol=self.rtol,
            atol=self.atol,
            first_step=self.options.get("first_step", None),
            max_step=self.options.get("max_step", np.inf),
        )

        k = 1
        while k < len(times):
            message = solver.step()
            if solver.status == "failed":
                raise NumericalInstability(
                    f"{self.name} failed at t={solver.t:.6g}: {message}"
                )

            interpolant = solver.dense_output()
            while k < len(times) and times[k] <= solver.t:
                if times[k] == solver.t:
                    y = solver.y.copy()
                else:
                    y = interpolant(times[k])
                yield times[k], y
                k += 1

    @property
    def name(self) -> str:
        stiff_indicator = " (Stiff)" if self.method in ["Radau", "BDF"] else ""
        auto_indicator = " (Auto-Stiffness)" if self.method == "LSODA" else ""
        return f"scipy.{self.method}{stiff_indicator}{auto_indicator}"

    def __repr__(self) -> str:
        return (
            f"ScipyIntegrator(method='{self.method}', dt={self.dt}, "
            f"rtol={self.rtol:.1e}, atol={self.atol:.1e})"
        )
