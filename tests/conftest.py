import numpy as np
import pytest

from intercept_sim import BallisticThreat, ScenarioConfig, default_scenario, solve


class FakeClock:
    """Deterministic seconds source; advances a fixed step per call."""

    def __init__(self, start=0.0, step=0.1):
        self.now = start
        self.step = step
        self.calls = 0

    def __call__(self):
        value = self.now
        self.now += self.step
        self.calls += 1
        return value


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scenario():
    return default_scenario()


@pytest.fixture
def small_scenario():
    """Same geometry, fewer frames and a short hold, for playback tests."""
    return default_scenario().with_overrides(num_samples=5, hold_frames=3)


@pytest.fixture
def small_result(small_scenario):
    return solve(small_scenario)


@pytest.fixture
def level_threat_scenario():
    """Threat flying level (no gravity) straight at the launch site."""
    threat = BallisticThreat(initial_position=[1000.0, 0.0, 0.0],
                             horizontal_velocity=[-100.0, 0.0], gravity=0.0)
    return ScenarioConfig(threat=threat, launch_site=np.zeros(3),
                          interceptor_speed=100.0, num_samples=10,
                          search_bound=20.0, search_step=0.01)
