import logging

import numpy as np
import pytest

from intercept_sim import BallisticThreat, InvalidConfiguration, ScenarioConfig, solve
from intercept_sim import solver
from intercept_sim.solver import find_intercept_time, residuals, search_times


def test_reference_scenario_residual_within_half_unit(scenario):
    result = solve(scenario)
    assert abs(result.residual) <= 0.5
    assert not result.is_degenerate
    assert result.intercept_time == pytest.approx(3.45, abs=0.02)
    # Residual reported matches a fresh evaluation at the chosen time
    fresh = residuals(scenario, np.array([result.intercept_time]))[0]
    assert result.residual == pytest.approx(fresh)


def test_final_samples_meet_at_intercept_point(scenario):
    result = solve(scenario)
    n = scenario.num_samples
    eps = scenario.residual_tolerance
    np.testing.assert_allclose(result.threat_samples[n], result.intercept_point, atol=1e-9)
    assert np.linalg.norm(result.interceptor_samples[n] - result.intercept_point) <= eps
    assert result.miss_distance == pytest.approx(abs(result.residual), abs=1e-9)


def test_sample_times_are_shared_and_increasing(scenario):
    result = solve(scenario)
    times = result.sample_times
    assert len(times) == scenario.num_samples + 1
    assert result.threat_samples.shape == (scenario.num_samples + 1, 3)
    assert result.interceptor_samples.shape == (scenario.num_samples + 1, 3)
    assert times[0] == 0.0
    assert times[-1] == pytest.approx(result.intercept_time)
    assert np.all(np.diff(times) > 0)
    np.testing.assert_allclose(result.threat_samples,
                               scenario.threat.positions_at_times(times))


def test_interceptor_flies_straight_at_constant_speed(scenario):
    result = solve(scenario)
    assert np.linalg.norm(result.direction) == pytest.approx(1.0)
    np.testing.assert_allclose(result.interceptor_samples[0], scenario.launch_site)
    travelled = np.linalg.norm(result.interceptor_samples - scenario.launch_site, axis=1)
    np.testing.assert_allclose(travelled, scenario.interceptor_speed * result.sample_times)


def test_solve_is_deterministic(scenario):
    first, second = solve(scenario), solve(scenario)
    assert first.intercept_time == second.intercept_time
    assert first.residual == second.residual
    np.testing.assert_array_equal(first.threat_samples, second.threat_samples)
    np.testing.assert_array_equal(first.interceptor_samples, second.interceptor_samples)


def test_result_arrays_are_read_only(scenario):
    result = solve(scenario)
    with pytest.raises(ValueError):
        result.threat_samples[0, 0] = 0.0


def test_head_on_level_threat_exact_solution(level_threat_scenario):
    # Closing at 200 units/s from 1000 units: they meet at t=5, x=500
    result = solve(level_threat_scenario)
    assert result.intercept_time == pytest.approx(5.0)
    np.testing.assert_allclose(result.intercept_point, [500.0, 0.0, 0.0], atol=1e-6)
    assert abs(result.residual) < 1e-6


def test_search_grid_includes_bound_when_multiple_of_step(scenario):
    config = scenario.with_overrides(search_bound=1.0, search_step=0.25)
    np.testing.assert_allclose(search_times(config), [0.0, 0.25, 0.5, 0.75, 1.0])


def test_ties_resolve_to_earliest_time(scenario, monkeypatch):
    def two_equal_minima(config, times):
        res = np.ones(len(times))
        res[[10, 30]] = 0.0
        return res

    monkeypatch.setattr(solver, "residuals", two_equal_minima)
    t, res = find_intercept_time(scenario)
    assert t == pytest.approx(10 * scenario.search_step)
    assert res == 0.0


def test_global_minimum_wins_over_earlier_near_root():
    # |100 - 50t| - 10t has roots near t=1.667 and t=2.5; the grid hits 2.5 exactly
    threat = BallisticThreat([-100.0, 0.0, 0.0], [50.0, 0.0], gravity=0.0)
    config = ScenarioConfig(threat=threat, launch_site=[0, 0, 0], interceptor_speed=10.0,
                            search_bound=5.0, search_step=0.01)
    t, res = find_intercept_time(config)
    assert t == pytest.approx(2.5)
    assert abs(res) < 1e-9


def test_unreachable_threat_returns_flagged_best_effort(scenario, caplog):
    slow = scenario.with_overrides(interceptor_speed=1.0)
    with caplog.at_level(logging.WARNING, logger="intercept_sim.solver"):
        result = solve(slow)
    assert result.is_degenerate
    assert result.degenerate.residual == result.residual
    assert abs(result.residual) > slow.residual_tolerance
    assert 0.0 <= result.intercept_time <= slow.effective_search_bound
    assert len(result.threat_samples) == slow.num_samples + 1
    assert "DEGENERATE" in caplog.text


def test_zero_samples_gives_single_frame_at_intercept(scenario):
    result = solve(scenario.with_overrides(num_samples=0))
    assert result.num_samples == 0
    assert result.threat_samples.shape == (1, 3)
    np.testing.assert_allclose(result.threat_samples[0], result.intercept_point)
    np.testing.assert_allclose(result.interceptor_samples[0], result.intercept_point)
    assert result.sample_times[0] == pytest.approx(result.intercept_time)


def test_threat_sitting_on_launch_site():
    threat = BallisticThreat([5.0, 5.0, 0.0], [0.0, 0.0], gravity=0.0)
    config = ScenarioConfig(threat=threat, launch_site=[5.0, 5.0, 0.0],
                            interceptor_speed=10.0, num_samples=4, search_bound=1.0)
    result = solve(config)
    assert result.intercept_time == 0.0
    np.testing.assert_array_equal(result.direction, np.zeros(3))
    np.testing.assert_allclose(result.interceptor_samples, np.tile([5.0, 5.0, 0.0], (5, 1)))


def test_solve_rejects_invalid_config_before_computing(scenario, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("search should not run")

    monkeypatch.setattr(solver, "find_intercept_time", fail)
    with pytest.raises(InvalidConfiguration):
        solve(scenario.with_overrides(interceptor_speed=0.0))


def test_solve_logs_summary(scenario, caplog):
    with caplog.at_level(logging.INFO, logger="intercept_sim.solver"):
        solve(scenario)
    assert "Calculated impact time" in caplog.text
    assert "Calculated impact point" in caplog.text
