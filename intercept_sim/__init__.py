"""
Intercept Simulation Package

Solve and replay a two-body intercept:
- A ballistic threat (constant horizontal velocity, gravity on z)
- A constant-speed interceptor launched from a fixed site
- Grid-search solver for the shared arrival time and point
- Frame-by-frame playback controller (idle -> running -> settled -> reset)

Usage:
    from intercept_sim import SimulationSession, animate_session

    session = SimulationSession()
    print(session.result)
    animate_session(session)
"""

# Import core components
from .core import (
    # Enums
    PlaybackPhase,
    FrameKind,

    # Data structures
    BallisticThreat,
    ScenarioConfig,
    InterceptResult,
    DegenerateSolution,
    PlaybackState,
    FrameEvent,
    PlaybackSnapshot,
    CITY_POSITION,
    default_scenario,
)
from .errors import InterceptSimError, InvalidConfiguration, InvalidTransition
from .solver import solve, find_intercept_time, residuals, sample_trajectories
from .playback import PlaybackController, pulse_intensity
from .session import SimulationSession

# Version
__version__ = "1.0.0"

# Define what gets exported with "from intercept_sim import *"
__all__ = [
    # Enums
    'PlaybackPhase',
    'FrameKind',

    # Data structures
    'BallisticThreat',
    'ScenarioConfig',
    'InterceptResult',
    'DegenerateSolution',
    'PlaybackState',
    'FrameEvent',
    'PlaybackSnapshot',
    'CITY_POSITION',
    'default_scenario',

    # Errors
    'InterceptSimError',
    'InvalidConfiguration',
    'InvalidTransition',

    # Solver
    'solve',
    'find_intercept_time',
    'residuals',
    'sample_trajectories',

    # Playback
    'PlaybackController',
    'pulse_intensity',
    'SimulationSession',

    # Visualization (imported lazily, pulls in matplotlib)
    'animate_session',
    'plot_result',
]


def __getattr__(name):
    if name in ('animate_session', 'plot_result'):
        from . import viewer
        return getattr(viewer, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
