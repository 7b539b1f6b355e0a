"""
Intercept-time solver.

THE MATH:
---------
The interceptor flies a straight line at constant speed v from the launch
site S. It can meet the threat at time t only if the threat's position at t
is exactly v*t away from S:

    residual(t) = |P_threat(t) - S| - v * t = 0

The threat is ballistic, so there is no tidy closed form like the
constant-velocity quadratic. Instead we scan t over [0, bound] on a fixed
grid and keep the earliest t with the smallest |residual|. If no candidate
gets under tolerance the result is still returned, flagged degenerate.

Once T and the intercept point are fixed, both trajectories are sampled at
N+1 shared instants t_i = T * i / N so the two missiles can be replayed
frame by frame and arrive together at the last frame.
"""

import logging
from typing import Tuple

import numpy as np

from .core import DegenerateSolution, InterceptResult, ScenarioConfig

logger = logging.getLogger(__name__)


def search_times(config: ScenarioConfig) -> np.ndarray:
    """Grid of candidate intercept times: k * step for k = 0 .. floor(bound / step)."""
    bound = config.effective_search_bound
    step = config.search_step
    # Small slack so a bound that is an exact multiple of step is included
    count = int(np.floor(bound / step + 1e-9)) + 1
    return np.arange(count) * step


def residuals(config: ScenarioConfig, times: np.ndarray) -> np.ndarray:
    """Signed residual |P_threat(t) - S| - v*t for each t in ``times``."""
    threat_positions = config.threat.positions_at_times(times)
    distance_required = np.linalg.norm(threat_positions - config.launch_site, axis=1)
    distance_covered = config.interceptor_speed * np.asarray(times, dtype=float)
    return distance_required - distance_covered


def find_intercept_time(config: ScenarioConfig) -> Tuple[float, float]:
    """
    Grid-search the intercept time.

    Returns:
        (t_impact, residual at t_impact). Ties resolve to the earliest time.
    """
    times = search_times(config)
    res = residuals(config, times)
    # argmin returns the first occurrence, which is the earliest time
    best = int(np.argmin(np.abs(res)))
    return float(times[best]), float(res[best])


def launch_direction(launch_site: np.ndarray, intercept_point: np.ndarray) -> np.ndarray:
    """Unit vector from launch site to intercept point (zero if they coincide)."""
    to_intercept = intercept_point - launch_site
    distance = np.linalg.norm(to_intercept)
    if distance < 1e-12:
        return np.zeros(3)
    return to_intercept / distance


def sample_trajectories(config: ScenarioConfig, t_impact: float,
                        intercept_point: np.ndarray
                        ) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Sample threat and interceptor at N+1 shared instants over [0, t_impact].

    Returns:
        (times, threat_samples, interceptor_samples, direction)
    """
    n = int(config.num_samples)
    u = launch_direction(config.launch_site, intercept_point)

    if n == 0:
        # Single frame: both missiles already at the intercept point
        times = np.array([t_impact])
        point = np.asarray(intercept_point, dtype=float)
        return times, point[np.newaxis, :].copy(), point[np.newaxis, :].copy(), u

    times = t_impact * np.arange(n + 1) / n
    threat_samples = config.threat.positions_at_times(times)
    interceptor_samples = (config.launch_site
                           + np.outer(config.interceptor_speed * times, u))
    return times, threat_samples, interceptor_samples, u


def solve(config: ScenarioConfig) -> InterceptResult:
    """
    Solve one scenario: intercept time, intercept point, synchronised samples.

    Raises:
        InvalidConfiguration: if the scenario is rejected by validate().
    """
    config.validate()

    t_impact, residual = find_intercept_time(config)
    intercept_point = config.threat.position_at_time(t_impact)
    times, threat_samples, interceptor_samples, u = sample_trajectories(
        config, t_impact, intercept_point)

    degenerate = None
    if abs(residual) > config.residual_tolerance:
        degenerate = DegenerateSolution(residual=residual, tolerance=config.residual_tolerance)
        logger.warning(">>> DEGENERATE intercept for %s: %s", config.name, degenerate.message)

    for arr in (intercept_point, times, threat_samples, interceptor_samples, u):
        arr.setflags(write=False)

    result = InterceptResult(
        intercept_time=t_impact,
        intercept_point=intercept_point,
        sample_times=times,
        threat_samples=threat_samples,
        interceptor_samples=interceptor_samples,
        direction=u,
        residual=residual,
        degenerate=degenerate,
    )

    s = config.launch_site
    logger.info("Calculated impact time: %.2f s", t_impact)
    logger.info("Calculated impact point: (%.1f, %.1f, %.1f)", *intercept_point)
    logger.info("Launch site (%s): (%g, %g, %g)", config.name, s[0], s[1], s[2])
    logger.debug("Residual at impact: %+.4f, miss distance %.4f", residual, result.miss_distance)
    return result
