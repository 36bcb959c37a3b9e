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
Unit tests for ScipyIntegrator (adaptive substeps, fixed output grid).

Tests cover:
1. Output grid construction
2. Initialization and configuration
3. Sample stream: first sample, ordering, accuracy
4. Solver methods
5. Failure handling (NumericalInstability)
"""

import numpy as np
import pytest

from lagsym.systems.base.numerical_integration.integrator_base import (
    IntegratorBase,
    NumericalInstability,
    sample_times,
)
from lagsym.systems.base.numerical_integration.scipy_integrator import SOLVERS, ScipyIntegrator

# ============================================================================
# Right-Hand Sides
# ============================================================================


def decay(t, y):
    """dy/dt = -y"""
    return -y


def oscillator(t, y):
    """Unit harmonic oscillator, y = [x, v]"""
    return np.array([y[1], -y[0]])


def blow_up(t, y):
    """dy/dt = y², finite-time singularity at t = 1/y0"""
    return y**2


# ============================================================================
# Output Grid
# ============================================================================


class TestSampleTimes:
    """Test the fixed output grid"""

    def test_divisible_horizon_includes_endpoint(self):
        times = sample_times(0.0, 0.01, 50.0)
        assert len(times) == 5001
        assert times[-1] == pytest.approx(50.0)

    def test_indivisible_horizon_stops_before(self):
        times = sample_times(0.0, 0.3, 1.0)
        np.testing.assert_allclose(times, [0.0, 0.3, 0.6, 0.9])

    def test_rounding_slack(self):
        # 0.3 / 0.1 = 2.9999999999999996
        assert len(sample_times(0.0, 0.1, 0.3)) == 4

    def test_step_longer_than_horizon(self):
        np.testing.assert_array_equal(sample_times(0.0, 2.0, 1.0), [0.0])

    def test_offset_start(self):
        np.testing.assert_allclose(sample_times(5.0, 0.5, 1.0), [5.0, 5.5, 6.0])

    def test_multiples_not_accumulated(self):
        times = sample_times(0.0, 0.01, 50.0)
        assert times[1234] == 0.01 * 1234


# ============================================================================
# Initialization
# ============================================================================


class TestScipyInitialization:
    """Test ScipyIntegrator initialization"""

    def test_defaults(self):
        integrator = ScipyIntegrator(decay)
        assert integrator.method == "DOP853"
        assert integrator.dt == 0.01
        assert integrator.rtol == 1e-6
        assert integrator.atol == 1e-8
        assert isinstance(integrator, IntegratorBase)

    def test_custom_tolerances(self):
        integrator = ScipyIntegrator(decay, dt=0.1, rtol=1e-10, atol=1e-12)
        assert integrator.rtol == 1e-10
        assert integrator.atol == 1e-12

    def test_invalid_method(self):
        with pytest.raises(ValueError, match="Invalid method"):
            ScipyIntegrator(decay, method="Euler")

    def test_invalid_dt(self):
        with pytest.raises(ValueError, match="positive"):
            ScipyIntegrator(decay, dt=0.0)

    def test_rtol_below_floor_warns_and_clamps(self):
        with pytest.warns(UserWarning, match="below the solver floor"):
            integrator = ScipyIntegrator(decay, rtol=1e-20)
        assert integrator.rtol == pytest.approx(100 * np.finfo(float).eps)

    def test_name_and_repr(self):
        assert ScipyIntegrator(decay, method="Radau").name == "scipy.Radau (Stiff)"
        assert ScipyIntegrator(decay, method="LSODA").name == "scipy.LSODA (Auto-Stiffness)"
        assert "DOP853" in repr(ScipyIntegrator(decay))


# ============================================================================
# Sample Stream
# ============================================================================


class TestSamples:
    """Test the sample stream"""

    def test_first_sample_is_initial_state(self):
        y0 = np.array([0.123456789, -1.0])
        t, y = next(ScipyIntegrator(oscillator, dt=0.1).samples(y0, 0.0, 1.0))
        assert t == 0.0
        np.testing.assert_array_equal(y, y0)

    def test_first_sample_is_a_copy(self):
        y0 = np.array([1.0])
        _, y = next(ScipyIntegrator(decay).samples(y0, 0.0, 1.0))
        y[0] = 99.0
        assert y0[0] == 1.0

    def test_sample_count_and_order(self):
        samples = list(ScipyIntegrator(decay, dt=0.1).samples(np.array([1.0]), 0.0, 2.0))
        times = [t for t, _ in samples]
        assert len(samples) == 21
        assert np.all(np.diff(times) > 0)
        assert times[-1] == pytest.approx(2.0)

    def test_accuracy_decay(self):
        integrator = ScipyIntegrator(decay, dt=0.25, rtol=1e-12, atol=1e-12)
        for t, y in integrator.samples(np.array([2.0]), 0.0, 5.0):
            assert y[0] == pytest.approx(2.0 * np.exp(-t), rel=1e-9)

    def test_accuracy_oscillator(self):
        integrator = ScipyIntegrator(oscillator, dt=0.5, rtol=1e-12, atol=1e-12)
        result = list(integrator.samples(np.array([1.0, 0.0]), 0.0, 20.0))
        for t, y in result:
            np.testing.assert_allclose(y, [np.cos(t), -np.sin(t)], atol=1e-9)

    def test_grid_independent_of_substeps(self):
        coarse = ScipyIntegrator(oscillator, dt=0.1, rtol=1e-4, atol=1e-4)
        fine = ScipyIntegrator(oscillator, dt=0.1, rtol=1e-12, atol=1e-12)
        y0 = np.array([1.0, 0.0])
        t_coarse = [t for t, _ in coarse.samples(y0, 0.0, 3.0)]
        t_fine = [t for t, _ in fine.samples(y0, 0.0, 3.0)]
        np.testing.assert_array_equal(t_coarse, t_fine)

    def test_lazy(self):
        calls = []

        def counting(t, y):
            calls.append(t)
            return -y

        stream = ScipyIntegrator(counting, dt=0.1).samples(np.array([1.0]), 0.0, 1.0)
        next(stream)
        assert calls == []

    def test_horizon_shorter_than_step(self):
        samples = list(ScipyIntegrator(decay, dt=1.0).samples(np.array([1.0]), 0.0, 0.5))
        assert len(samples) == 1

    @pytest.mark.parametrize("method", sorted(SOLVERS))
    def test_all_methods(self, method):
        integrator = ScipyIntegrator(decay, dt=0.5, method=method, rtol=1e-8, atol=1e-10)
        t, y = list(integrator.samples(np.array([1.0]), 0.0, 2.0))[-1]
        assert t == pytest.approx(2.0)
        assert y[0] == pytest.approx(np.exp(-2.0), rel=1e-5)


# ============================================================================
# Failure Handling
# ============================================================================


class TestNumericalInstability:
    """Test step size collapse"""

    def test_blow_up_raises(self):
        integrator = ScipyIntegrator(blow_up, dt=0.1, rtol=1e-10, atol=1e-10)
        collected = []
        with pytest.raises(NumericalInstability, match="failed"):
            with np.errstate(over="ignore", invalid="ignore"):
                for t, y in integrator.samples(np.array([1.0]), 0.0, 2.0):
                    collected.append((t, y))

        # Samples before the singularity were delivered and are accurate
        assert len(collected) >= 9
        for t, y in collected:
            assert t < 1.0
            assert y[0] == pytest.approx(1.0 / (1.0 - t), rel=1e-6)

    def test_is_a_runtime_error(self):
        assert issubclass(NumericalInstability, RuntimeError)

