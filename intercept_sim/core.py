"""
Core data structures for the intercept simulation.

Contains:
- Enums for playback phases and per-tick frame events
- The ballistic threat model (closed-form, no integration)
- ScenarioConfig: immutable solver/playback input
- InterceptResult and DegenerateSolution: immutable solver output
- PlaybackState, FrameEvent, PlaybackSnapshot: what the playback
  controller owns and what it hands to whoever draws the scene
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Dict, Optional

import numpy as np

from .errors import InvalidConfiguration


# Defended city at the origin; only viewers use it
CITY_POSITION = np.zeros(3)

DEFAULT_GRAVITY = 9.8          # m/s², z(t) = z0 - ½gt²
DEFAULT_NUM_SAMPLES = 200      # animation frames from launch to intercept
DEFAULT_SEARCH_STEP = 0.01     # seconds between grid-search candidates
DEFAULT_SEARCH_MARGIN = 5.0    # seconds searched past threat ground impact
DEFAULT_TOLERANCE = 0.5        # meters of residual before flagging degenerate
DEFAULT_HOLD_FRAMES = 60       # frames of impact effect after settling


def as_vector(value, name: str, size: int = 3) -> np.ndarray:
    """Convert ``value`` to a read-only float vector, or reject it."""
    try:
        vec = np.array(value, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidConfiguration(f"{name} must be numeric, got {value!r}") from exc
    if vec.shape != (size,):
        raise InvalidConfiguration(f"{name} must have {size} components, got shape {vec.shape}")
    if not np.all(np.isfinite(vec)):
        raise InvalidConfiguration(f"{name} must be finite, got {vec}")
    vec.setflags(write=False)
    return vec


# =============================================================================
# ENUMS
# =============================================================================

class PlaybackPhase(Enum):
    """Playback controller states."""
    IDLE = auto()       # Scenario loaded, nothing moving
    RUNNING = auto()    # Stepping through precomputed samples
    SETTLED = auto()    # Intercept instant reached, impact effect showing


class FrameKind(Enum):
    """What a single tick produced."""
    POSITIONS = auto()  # Both missiles moved to the next sample
    IMPACT = auto()     # Just reached the intercept point
    PULSE = auto()      # Post-impact effect update
    NONE = auto()       # Nothing changed (hold expired, or reset)


# =============================================================================
# THREAT MODEL
# =============================================================================

@dataclass(frozen=True, eq=False)
class BallisticThreat:
    """
    Ballistic threat: constant horizontal velocity, gravity on z only.

        P(t) = p0 + (vx*t, vy*t, -½*g*t²)
    """
    initial_position: np.ndarray      # [x, y, z] at t=0
    horizontal_velocity: np.ndarray   # [vx, vy] in units/second
    gravity: float = DEFAULT_GRAVITY  # downward acceleration (>= 0)

    def __post_init__(self):
        object.__setattr__(self, "initial_position",
                           as_vector(self.initial_position, "initial_position"))
        object.__setattr__(self, "horizontal_velocity",
                           as_vector(self.horizontal_velocity, "horizontal_velocity", size=2))
        object.__setattr__(self, "gravity", float(self.gravity))

    def position_at_time(self, t: float) -> np.ndarray:
        """Where is the threat at time t?"""
        return self.positions_at_times(np.array([t], dtype=float))[0]

    def positions_at_times(self, times: np.ndarray) -> np.ndarray:
        """Vectorised position_at_time: returns an array of shape (len(times), 3)."""
        times = np.asarray(times, dtype=float)
        positions = np.empty((times.size, 3))
        positions[:, 0] = self.initial_position[0] + self.horizontal_velocity[0] * times
        positions[:, 1] = self.initial_position[1] + self.horizontal_velocity[1] * times
        positions[:, 2] = self.initial_position[2] - 0.5 * self.gravity * times**2
        return positions

    def ground_impact_time(self) -> float:
        """Time at which the threat comes back down to z = 0."""
        z0 = self.initial_position[2]
        if z0 <= 0:
            return 0.0
        if self.gravity <= 0:
            return math.inf
        return math.sqrt(2.0 * z0 / self.gravity)

    def __repr__(self):
        p, v = self.initial_position, self.horizontal_velocity
        return (f"BallisticThreat(p0=({p[0]:.1f}, {p[1]:.1f}, {p[2]:.1f}), "
                f"v=({v[0]:.1f}, {v[1]:.1f}), g={self.gravity:.2f})")


# =============================================================================
# SCENARIO
# =============================================================================

@dataclass(frozen=True, eq=False)
class ScenarioConfig:
    """Everything needed to solve and replay one intercept."""
    threat: BallisticThreat
    launch_site: np.ndarray                        # interceptor base [x, y, z]
    interceptor_speed: float                       # constant, straight-line
    num_samples: int = DEFAULT_NUM_SAMPLES         # N; N+1 samples per trajectory
    search_bound: Optional[float] = None           # None -> ground impact + margin
    search_step: float = DEFAULT_SEARCH_STEP
    residual_tolerance: float = DEFAULT_TOLERANCE
    hold_frames: int = DEFAULT_HOLD_FRAMES
    name: str = "scenario"

    def __post_init__(self):
        object.__setattr__(self, "launch_site", as_vector(self.launch_site, "launch_site"))

    @property
    def effective_search_bound(self) -> float:
        """Upper end of the time search, resolving the default."""
        if self.search_bound is not None:
            return float(self.search_bound)
        return self.threat.ground_impact_time() + DEFAULT_SEARCH_MARGIN

    def validate(self):
        """Raise InvalidConfiguration if this scenario cannot be solved."""
        if not isinstance(self.threat, BallisticThreat):
            raise InvalidConfiguration(f"threat must be a BallisticThreat, got {type(self.threat).__name__}")
        if not self.interceptor_speed > 0:
            raise InvalidConfiguration(f"interceptor_speed must be positive, got {self.interceptor_speed}")
        if int(self.num_samples) != self.num_samples or self.num_samples < 0:
            raise InvalidConfiguration(f"num_samples must be a non-negative integer, got {self.num_samples}")
        bound = self.effective_search_bound
        if not bound > 0:
            raise InvalidConfiguration(f"search_bound must be positive, got {bound}")
        if not math.isfinite(bound):
            raise InvalidConfiguration("search_bound must be set explicitly when the threat never lands")
        if not self.search_step > 0:
            raise InvalidConfiguration(f"search_step must be positive, got {self.search_step}")
        if self.residual_tolerance < 0:
            raise InvalidConfiguration(f"residual_tolerance must be >= 0, got {self.residual_tolerance}")
        if self.hold_frames < 0:
            raise InvalidConfiguration(f"hold_frames must be >= 0, got {self.hold_frames}")
        if self.threat.gravity < 0:
            raise InvalidConfiguration(f"gravity must be >= 0, got {self.threat.gravity}")

    def with_overrides(self, **changes) -> "ScenarioConfig":
        """Copy of this scenario with some fields replaced."""
        return replace(self, **changes)


def default_scenario() -> ScenarioConfig:
    """
    Reference scenario: a threat falling from 400 m toward the city while
    drifting in from (250, 300), intercepted from base A at (50, 20, 0).
    """
    threat = BallisticThreat(
        initial_position=[250.0, 300.0, 400.0],
        horizontal_velocity=[-20.0, -25.0],
        gravity=DEFAULT_GRAVITY,
    )
    return ScenarioConfig(
        threat=threat,
        launch_site=[50.0, 20.0, 0.0],
        interceptor_speed=120.0,
        num_samples=DEFAULT_NUM_SAMPLES,
        search_bound=math.sqrt(400 / 4.9) + DEFAULT_SEARCH_MARGIN,
        search_step=DEFAULT_SEARCH_STEP,
        name="base A",
    )


# =============================================================================
# SOLVER OUTPUT
# =============================================================================

@dataclass(frozen=True)
class DegenerateSolution:
    """
    The grid search never got the residual under tolerance.

    Attached to an InterceptResult rather than raised; the result is still
    the best approximate intercept the search found.
    """
    residual: float
    tolerance: float

    @property
    def message(self) -> str:
        return (f"best residual {abs(self.residual):.3f} exceeds tolerance "
                f"{self.tolerance:.3f}; interceptor cannot close on the threat in the search window")


@dataclass(frozen=True, eq=False)
class InterceptResult:
    """Solved intercept plus the synchronised samples used for playback."""
    intercept_time: float
    intercept_point: np.ndarray          # threat position at intercept_time
    sample_times: np.ndarray             # shape (N+1,), t_i = T*i/N
    threat_samples: np.ndarray           # shape (N+1, 3)
    interceptor_samples: np.ndarray      # shape (N+1, 3)
    direction: np.ndarray                # unit launch direction (zero if degenerate geometry)
    residual: float                      # signed residual at intercept_time
    degenerate: Optional[DegenerateSolution] = None

    @property
    def num_samples(self) -> int:
        """N (the last valid frame index)."""
        return len(self.sample_times) - 1

    @property
    def is_degenerate(self) -> bool:
        return self.degenerate is not None

    @property
    def miss_distance(self) -> float:
        """Gap between the two missiles at the final sample."""
        return float(np.linalg.norm(self.threat_samples[-1] - self.interceptor_samples[-1]))

    def __str__(self):
        p = self.intercept_point
        flag = " (DEGENERATE)" if self.is_degenerate else ""
        return (f"intercept at t={self.intercept_time:.2f}s, "
                f"point=({p[0]:.1f}, {p[1]:.1f}, {p[2]:.1f}), "
                f"residual={self.residual:+.3f}{flag}")


# =============================================================================
# PLAYBACK STRUCTURES
# =============================================================================

@dataclass
class PlaybackState:
    """Mutable playback state; only the PlaybackController touches it."""
    phase: PlaybackPhase = PlaybackPhase.IDLE
    current_frame: int = 0        # next sample index to emit, 0..N+1
    settled_frames: int = 0       # ticks spent in SETTLED


@dataclass(frozen=True, eq=False)
class FrameEvent:
    """What one call to tick() (or reset()) produced."""
    kind: FrameKind
    frame: int
    threat: Optional[np.ndarray] = None
    interceptor: Optional[np.ndarray] = None
    impact_point: Optional[np.ndarray] = None
    impact_intensity: float = 0.0


@dataclass(frozen=True, eq=False)
class PlaybackSnapshot:
    """Read-only view of playback for rendering a frame."""
    phase: PlaybackPhase
    frame: int
    settled_frames: int
    threat_position: np.ndarray
    interceptor_position: np.ndarray
    impact_visible: bool = False
    impact_intensity: float = 0.0
    trajectories_visible: bool = False
    impact_point: Optional[np.ndarray] = field(default=None, repr=False)

    @property
    def current_positions(self) -> Dict[str, np.ndarray]:
        return {"threat": self.threat_position, "interceptor": self.interceptor_position}
