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
Unit tests for diagnostics.

Tests cover:
1. principal_value: interval, idempotence, periodicity, arrays
2. energy_monitor
3. safe_log and its configurable floor
4. divergence_monitor on composite states
5. divergence_series over separate trajectories
6. divergence_rate
"""

import numpy as np
import pytest

from lagsym.diagnostics import (
    DIVERGENCE_THRESHOLD,
    LOG_FLOOR,
    divergence_monitor,
    divergence_rate,
    divergence_series,
    energy_monitor,
    principal_value,
    safe_log,
)
from lagsym.systems.base.utils.parameter_validator import InvalidParameters
from lagsym.types.core import State

# ============================================================================
# Principal Value
# ============================================================================


class TestPrincipalValue:
    """Test angle wrapping"""

    @pytest.fixture
    def pv(self):
        return principal_value()

    @pytest.mark.parametrize("angle", [0.0, 1.0, -1.0, 3.0, -3.0, np.pi])
    def test_inside_interval_unchanged(self, pv, angle):
        assert pv(angle) == angle

    def test_lower_end_maps_to_upper(self, pv):
        assert pv(-np.pi) == pytest.approx(np.pi)

    def test_wraps_into_interval(self, pv):
        assert pv(3 * np.pi / 2) == pytest.approx(-np.pi / 2)
        assert pv(-3 * np.pi / 2) == pytest.approx(np.pi / 2)
        assert pv(7.0) == pytest.approx(7.0 - 2 * np.pi)

    @pytest.mark.parametrize("angle", np.linspace(-20.0, 20.0, 41))
    def test_result_in_interval(self, pv, angle):
        value = pv(angle)
        assert -np.pi < value <= np.pi

    @pytest.mark.parametrize("angle", np.linspace(-20.0, 20.0, 17))
    def test_idempotent(self, pv, angle):
        once = pv(angle)
        assert pv(once) == once

    @pytest.mark.parametrize("k", [-3, -1, 1, 2, 5])
    def test_periodic(self, pv, k):
        angle = 0.7
        assert pv(angle + 2 * np.pi * k) == pytest.approx(pv(angle), abs=1e-12)

    def test_returns_float_for_scalars(self, pv):
        assert isinstance(pv(4.0), float)

    def test_arrays(self, pv):
        values = pv(np.array([0.0, 3 * np.pi / 2, -np.pi]))
        np.testing.assert_allclose(values, [0.0, -np.pi / 2, np.pi])

    def test_custom_cut(self):
        pv = principal_value(2 * np.pi)
        assert pv(-np.pi / 2) == pytest.approx(3 * np.pi / 2)
        assert pv(1.0) == 1.0


# ============================================================================
# Energy Monitor
# ============================================================================


class TestEnergyMonitor:
    """Test energy relative to an initial state"""

    def test_relative_to_initial(self):
        energy = lambda s: s.qdot[0] ** 2 / 2 + s.q[0] ** 2 / 2
        initial = State(0.0, (1.0,), (0.0,))
        monitor = energy_monitor(energy, initial)
        assert monitor(initial) == 0.0
        assert monitor(State(1.0, (0.0,), (1.0,))) == 0.0
        assert monitor(State(1.0, (0.0,), (2.0,))) == pytest.approx(1.5)

    def test_initial_energy_evaluated_once(self):
        calls = []

        def energy(state):
            calls.append(state)
            return 1.0

        monitor = energy_monitor(energy, State(0.0, (0.0,), (0.0,)))
        monitor(State(1.0, (0.0,), (0.0,)))
        monitor(State(2.0, (0.0,), (0.0,)))
        assert len(calls) == 3


# ============================================================================
# Safe Log
# ============================================================================


class TestSafeLog:
    """Test log with floor"""

    def test_regular_values(self):
        assert safe_log(1.0) == 0.0
        assert safe_log(np.e) == pytest.approx(1.0)
        assert safe_log(1e-10) == pytest.approx(np.log(1e-10))

    def test_zero_gives_floor(self):
        assert safe_log(0.0) == LOG_FLOOR == -138.0

    def test_below_threshold_gives_floor(self):
        assert safe_log(DIVERGENCE_THRESHOLD / 10) == LOG_FLOOR

    def test_at_threshold_is_logged(self):
        assert safe_log(DIVERGENCE_THRESHOLD) == pytest.approx(np.log(1e-60))

    def test_configurable(self):
        assert safe_log(1e-5, threshold=1e-3, floor=-10.0) == -10.0
        assert safe_log(1e-2, threshold=1e-3, floor=-10.0) == pytest.approx(np.log(1e-2))


# ============================================================================
# Divergence
# ============================================================================


def composite(t, q_a, q_b):
    rest = (0.0, 0.0)
    return State(t, (q_a, q_b), (rest, rest))


class TestDivergenceMonitor:
    """Test divergence inside composite states"""

    def test_identical_sub_states(self):
        monitor = divergence_monitor()
        assert monitor(composite(0.0, (1.0, 2.0), (1.0, 2.0))) == -138.0

    def test_perturbed_second_coordinate(self):
        monitor = divergence_monitor()
        state = composite(0.0, (np.pi / 2, np.pi), (np.pi / 2, np.pi + 1e-10))
        assert monitor(state) == pytest.approx(np.log(1e-10), abs=1e-3)

    def test_coordinate_selection(self):
        state = composite(0.0, (0.5, 1.0), (0.6, 1.0))
        assert divergence_monitor(coordinate=1)(state) == -138.0
        assert divergence_monitor(coordinate=0)(state) == pytest.approx(np.log(0.1))

    def test_separation_measured_modulo_2pi(self):
        state = composite(0.0, (0.0, np.pi - 0.05), (0.0, -np.pi + 0.05))
        assert divergence_monitor()(state) == pytest.approx(np.log(0.1))

    def test_custom_floor(self):
        monitor = divergence_monitor(floor=-50.0)
        assert monitor(composite(0.0, (1.0, 2.0), (1.0, 2.0))) == -50.0


class TestDivergenceSeries:
    """Test divergence across two trajectories"""

    def test_identical_trajectories(self):
        traj = [State(0.1 * k, (0.1 * k, 0.2 * k), (1.0, 2.0)) for k in range(5)]
        series = divergence_series(traj, list(traj))
        np.testing.assert_array_equal(series, np.full(5, -138.0))

    def test_growing_separation(self):
        traj_a = [State(float(k), (0.0, 0.0), (0.0, 0.0)) for k in range(4)]
        traj_b = [State(float(k), (0.0, 1e-8 * 10.0**k), (0.0, 0.0)) for k in range(4)]
        series = divergence_series(traj_a, traj_b)
        np.testing.assert_allclose(series, np.log(1e-8) + np.log(10.0) * np.arange(4))

    def test_length_mismatch(self):
        traj = [State(0.0, (0.0, 0.0), (0.0, 0.0))]
        with pytest.raises(InvalidParameters, match="differ in length"):
            divergence_series(traj, traj * 2)


class TestDivergenceRate:
    """Test slope estimation"""

    def test_exact_exponential(self):
        times = np.linspace(0.0, 10.0, 11)
        series = -20.0 + 0.5 * times
        assert divergence_rate(times, series) == pytest.approx(0.5)

    def test_floor_samples_excluded(self):
        times = np.arange(6.0)
        series = np.array([-138.0, -138.0, -10.0, -9.0, -8.0, -7.0])
        assert divergence_rate(times, series) == pytest.approx(1.0)

    def test_saturation(self):
        times = np.arange(6.0)
        series = np.array([-4.0, -3.0, -2.0, -1.0, -1.5, -0.5])
        assert divergence_rate(times, series, saturation=-1.0) == pytest.approx(1.0)

    def test_too_few_samples(self):
        assert np.isnan(divergence_rate([0.0, 1.0], [-138.0, -5.0]))
