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
Integration tests for the simulation entry points.

Runs the full pipeline: Lagrangian construction, symbolic derivation,
compiled right-hand side, sampled integration and post-processing.

Tests cover:
1. run(): sample grid, first sample, energy conservation, determinism
2. run(): full vs. reduced arity and argument errors
3. run_double_double(): perturbation growth and block independence
4. Zero-perturbation divergence
"""

import numpy as np
import pytest

from lagsym import (
    CHAOTIC_INITIAL_Q,
    REGULAR_INITIAL_Q,
    InvalidParameters,
    State,
    divergence_monitor,
    divergence_series,
    run,
    run_double_double,
    transform_data,
)

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(scope="module")
def chaotic_run():
    """50 s of the chaotic initial condition at 0.01 s sampling"""
    return run(0.01, 50, CHAOTIC_INITIAL_Q)


@pytest.fixture(scope="module")
def double_double_run():
    return run_double_double(0.01, 10, CHAOTIC_INITIAL_Q, perturbation=1e-10)


# ============================================================================
# run()
# ============================================================================


@pytest.mark.slow
class TestChaoticRun:
    """Long chaotic run at the default tolerance"""

    def test_sample_count(self, chaotic_run):
        assert len(chaotic_run) == 5001

    def test_last_time(self, chaotic_run):
        assert abs(chaotic_run[-1].t - 50.0) <= 0.01

    def test_first_sample_is_initial_state(self, chaotic_run):
        assert chaotic_run[0] == State(0.0, CHAOTIC_INITIAL_Q, (0.0, 0.0))

    def test_times_on_grid(self, chaotic_run):
        times = np.array([s.t for s in chaotic_run])
        np.testing.assert_allclose(times, 0.01 * np.arange(5001), atol=1e-12)

    def test_energy_conserved(self, chaotic_run):
        records = transform_data(chaotic_run)
        drift = np.array([r["d_energy"] for r in records])
        assert np.max(np.abs(drift)) < 1e-6

    def test_motion_is_nontrivial(self, chaotic_run):
        theta2 = np.array([s.q[1] for s in chaotic_run])
        assert np.ptp(theta2) > 1.0


class TestRun:
    """Shorter runs"""

    def test_deterministic(self):
        a = run(0.01, 2, CHAOTIC_INITIAL_Q)
        b = run(0.01, 2, CHAOTIC_INITIAL_Q)
        assert a == b

    def test_full_arity_matches_defaults(self):
        reduced = run(0.05, 1, REGULAR_INITIAL_Q)
        full = run(0.05, 1, 1.0, 0.9, 1.0, 3.0, 9.8, REGULAR_INITIAL_Q)
        assert reduced == full

    def test_parameters_change_motion(self):
        default = run(0.05, 1, REGULAR_INITIAL_Q)
        heavier = run(0.05, 1, 1.0, 0.9, 1.0, 1.0, 9.8, REGULAR_INITIAL_Q)
        assert default[-1].q != heavier[-1].q

    def test_released_from_horizontal_falls(self):
        states = run(0.05, 0.2, REGULAR_INITIAL_Q)
        assert states[-1].q[0] < np.pi / 2
        assert states[-1].qdot[0] < 0.0

    def test_hanging_at_rest_stays(self):
        states = run(0.1, 1, (0.0, 0.0))
        for state in states:
            assert state.q == pytest.approx((0.0, 0.0), abs=1e-14)

    def test_uncompiled(self):
        compiled = run(0.05, 0.1, REGULAR_INITIAL_Q)
        symbolic = run(0.05, 0.1, REGULAR_INITIAL_Q, compile=False)
        for a, b in zip(compiled, symbolic):
            assert a.q == pytest.approx(b.q, abs=1e-10)

    def test_wrong_arity(self):
        with pytest.raises(InvalidParameters, match="run expects"):
            run(0.01, 1, 1.0, 0.9, REGULAR_INITIAL_Q)

    def test_coordinates_not_a_pair(self):
        with pytest.raises(InvalidParameters, match="two joint angles"):
            run(0.01, 1, (0.1, 0.2, 0.3))

    def test_bad_step(self):
        with pytest.raises(InvalidParameters):
            run(0.0, 1, REGULAR_INITIAL_Q)


# ============================================================================
# run_double_double()
# ============================================================================


@pytest.mark.slow
class TestDoubleDouble:
    """Composite system of two double pendulums"""

    def test_structure(self, double_double_run):
        assert len(double_double_run) == 1001
        t, (q_a, q_b), (v_a, v_b) = double_double_run[0]
        assert q_a == CHAOTIC_INITIAL_Q
        assert q_b == (CHAOTIC_INITIAL_Q[0], CHAOTIC_INITIAL_Q[1] + 1e-10)
        assert v_a == v_b == (0.0, 0.0)

    def test_initial_divergence(self, double_double_run):
        series = [divergence_monitor()(s) for s in double_double_run]
        assert series[0] == pytest.approx(np.log(1e-10), abs=1e-3)

    def test_divergence_grows(self, double_double_run):
        series = np.array([divergence_monitor()(s) for s in double_double_run])
        assert np.max(series[-200:]) > series[0] + 3.0

    def test_sub_pendulum_matches_single_run(self):
        composite = run_double_double(0.05, 2, REGULAR_INITIAL_Q, perturbation=0.0)
        single = run(0.05, 2, REGULAR_INITIAL_Q)
        assert len(composite) == len(single)
        for c, s in zip(composite, single):
            assert c.q[0] == pytest.approx(s.q, abs=1e-9)
            assert c.q[1] == pytest.approx(s.q, abs=1e-9)
            assert c.qdot[0] == pytest.approx(s.qdot, abs=1e-8)


class TestZeroPerturbation:
    """Identical initial conditions never separate"""

    @pytest.mark.slow
    @pytest.mark.parametrize("initial_q", [CHAOTIC_INITIAL_Q, REGULAR_INITIAL_Q])
    def test_double_double_stays_at_floor(self, initial_q):
        states = run_double_double(0.01, 8, initial_q, perturbation=0.0)
        assert len(states) == 801
        monitor = divergence_monitor()
        series = np.array([monitor(s) for s in states])
        np.testing.assert_array_equal(series, np.full(len(states), -138.0))
        for state in states:
            assert state.q[0] == state.q[1]
            assert state.qdot[0] == state.qdot[1]

    def test_separate_runs(self):
        a = run(0.01, 5, CHAOTIC_INITIAL_Q)
        b = run(0.01, 5, CHAOTIC_INITIAL_Q)
        series = divergence_series(a, b)
        np.testing.assert_array_equal(series, np.full(len(a), -138.0))
