"""
SimulationSession: one scenario, its solution, and its playback.

The session is what a front end holds on to. It owns exactly one
ScenarioConfig, one InterceptResult and one PlaybackController; loading a
new scenario replaces all three.
"""

import logging
import time
from typing import Callable, Iterator, Optional

from .core import (
    FrameEvent,
    InterceptResult,
    PlaybackPhase,
    PlaybackSnapshot,
    ScenarioConfig,
    default_scenario,
)
from .playback import PlaybackController, frames_until_inert
from .solver import solve

logger = logging.getLogger(__name__)


class SimulationSession:
    """
    Usage:
        session = SimulationSession()          # reference scenario
        session.start()
        while not session.finished:
            session.tick()
            draw(session.snapshot())
    """

    def __init__(self, config: Optional[ScenarioConfig] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self.config: ScenarioConfig = None
        self.result: InterceptResult = None
        self.controller: PlaybackController = None
        self.load(config if config is not None else default_scenario())

    def load(self, config: ScenarioConfig) -> InterceptResult:
        """Solve ``config`` and start over at IDLE / frame 0."""
        result = solve(config)
        self.config = config
        self.result = result
        self.controller = PlaybackController(result, hold_frames=config.hold_frames,
                                             clock=self.clock)
        logger.info("Loaded scenario '%s': %s", config.name, result)
        return result

    # Playback passthroughs

    @property
    def phase(self) -> PlaybackPhase:
        return self.controller.phase

    @property
    def finished(self) -> bool:
        """Settled and the impact hold has run out."""
        return self.controller.is_inert

    @property
    def total_frames(self) -> int:
        """Ticks after start() until playback goes inert."""
        return frames_until_inert(self.result.num_samples, self.config.hold_frames)

    def start(self) -> Optional[FrameEvent]:
        return self.controller.start()

    def tick(self) -> FrameEvent:
        return self.controller.tick()

    def reset(self) -> FrameEvent:
        return self.controller.reset()

    def snapshot(self) -> PlaybackSnapshot:
        return self.controller.snapshot()

    def replay(self, max_ticks: Optional[int] = None) -> Iterator[PlaybackSnapshot]:
        """
        Headless driver loop: launch if idle, then tick until the impact
        effect has finished, yielding a snapshot after every tick.

        Args:
            max_ticks: Stop early after this many ticks (None = run to the end)
        """
        if self.controller.phase == PlaybackPhase.IDLE:
            self.start()

        ticks = 0
        while not self.finished:
            if max_ticks is not None and ticks >= max_ticks:
                return
            self.tick()
            ticks += 1
            yield self.snapshot()
