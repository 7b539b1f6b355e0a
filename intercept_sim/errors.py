"""
Exceptions raised by the intercept simulation.

Only two things can go wrong loudly: a scenario that cannot be solved as
given, and a playback method called from a phase that does not accept it.
A poor (but usable) intercept is *not* an exception, see
``core.DegenerateSolution``.
"""


class InterceptSimError(Exception):
    """Base class for all intercept simulation errors."""


class InvalidConfiguration(InterceptSimError, ValueError):
    """Scenario parameters rejected before any computation."""


class InvalidTransition(InterceptSimError, RuntimeError):
    """Playback method called from a phase that does not allow it."""

    def __init__(self, action: str, phase):
        self.action = action
        self.phase = phase
        super().__init__(f"cannot {action}() while playback is {phase.name}")
