"""
Frame-by-frame playback of a solved intercept.

The controller is a small state machine driven by an external per-frame
clock (whatever draws the scene calls tick() once per refresh):

    IDLE --start()--> RUNNING --tick() past frame N--> SETTLED
      ^                  |                               |
      +-----reset()------+-----------reset()-------------+

SETTLED also accepts start() to replay from frame 0.
"""

import logging
import math
import time
from dataclasses import replace
from typing import Callable, Optional

from .core import (
    DEFAULT_HOLD_FRAMES,
    FrameEvent,
    FrameKind,
    InterceptResult,
    PlaybackPhase,
    PlaybackSnapshot,
    PlaybackState,
)
from .errors import InvalidTransition

logger = logging.getLogger(__name__)

# Impact sphere opacity swings between 0.3 - 0.4 and 0.3 + 0.4
PULSE_BASE = 0.3
PULSE_AMPLITUDE = 0.4
PULSE_RATE = 5.0    # rad/s


def pulse_intensity(now: float) -> float:
    """Cosmetic impact-effect intensity at clock time ``now`` (seconds)."""
    return PULSE_BASE + PULSE_AMPLITUDE * math.sin(PULSE_RATE * now)


class PlaybackController:
    """
    Steps through an InterceptResult's samples one tick at a time.

    Args:
        result: Solved intercept to replay
        hold_frames: Ticks of impact effect after settling before tick() goes inert
        clock: Seconds source for the impact pulse (injectable for tests)
    """

    def __init__(self, result: InterceptResult,
                 hold_frames: int = DEFAULT_HOLD_FRAMES,
                 clock: Callable[[], float] = time.monotonic):
        self.result = result
        self.hold_frames = hold_frames
        self.clock = clock

        self._state = PlaybackState()
        self._threat_position = result.threat_samples[0]
        self._interceptor_position = result.interceptor_samples[0]
        self._impact_visible = False
        self._impact_intensity = 0.0
        self._trajectories_visible = False

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @property
    def state(self) -> PlaybackState:
        """Copy of the current playback state."""
        return replace(self._state)

    @property
    def phase(self) -> PlaybackPhase:
        return self._state.phase

    @property
    def last_frame(self) -> int:
        """N, the index of the intercept sample."""
        return self.result.num_samples

    @property
    def is_inert(self) -> bool:
        """True once the post-impact hold has run out; tick() does nothing."""
        return (self._state.phase == PlaybackPhase.SETTLED
                and self._state.settled_frames > self.hold_frames)

    def snapshot(self) -> PlaybackSnapshot:
        """Everything a renderer needs for the current frame."""
        return PlaybackSnapshot(
            phase=self._state.phase,
            frame=self._state.current_frame,
            settled_frames=self._state.settled_frames,
            threat_position=self._threat_position,
            interceptor_position=self._interceptor_position,
            impact_visible=self._impact_visible,
            impact_intensity=self._impact_intensity,
            trajectories_visible=self._trajectories_visible,
            impact_point=self.result.intercept_point if self._impact_visible else None,
        )

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def start(self) -> Optional[FrameEvent]:
        """
        Launch: rewind to frame 0 and start running.

        Ignored while already RUNNING (duplicate launch triggers are harmless).
        Returns the frame-0 positions event, or None if ignored.
        """
        if self._state.phase == PlaybackPhase.RUNNING:
            logger.debug("start() ignored, already running at frame %d", self._state.current_frame)
            return None

        logger.info(">>> LAUNCH: playback started (%d frames to intercept)", self.last_frame)
        self._rewind(PlaybackPhase.RUNNING)
        self._trajectories_visible = True
        return FrameEvent(FrameKind.POSITIONS, 0,
                          threat=self._threat_position,
                          interceptor=self._interceptor_position)

    def tick(self) -> FrameEvent:
        """
        Advance one display frame.

        Raises:
            InvalidTransition: if called while IDLE.
        """
        state = self._state

        if state.phase == PlaybackPhase.IDLE:
            raise InvalidTransition("tick", state.phase)

        if state.phase == PlaybackPhase.RUNNING:
            if state.current_frame <= self.last_frame:
                frame = state.current_frame
                self._threat_position = self.result.threat_samples[frame]
                self._interceptor_position = self.result.interceptor_samples[frame]
                state.current_frame += 1
                logger.debug("frame %d: threat=%s interceptor=%s",
                             frame, self._threat_position, self._interceptor_position)
                return FrameEvent(FrameKind.POSITIONS, frame,
                                  threat=self._threat_position,
                                  interceptor=self._interceptor_position)

            # Past the last sample: the missiles have met
            state.phase = PlaybackPhase.SETTLED
            state.settled_frames = 0
            self._impact_visible = True
            self._impact_intensity = pulse_intensity(self.clock())
            point = self.result.intercept_point
            logger.info(">>> IMPACT at t=%.2fs, point=(%.1f, %.1f, %.1f)",
                        self.result.intercept_time, point[0], point[1], point[2])
            return FrameEvent(FrameKind.IMPACT, state.current_frame,
                              threat=self._threat_position,
                              interceptor=self._interceptor_position,
                              impact_point=point,
                              impact_intensity=self._impact_intensity)

        # SETTLED
        if self.is_inert:
            return FrameEvent(FrameKind.NONE, state.current_frame)

        state.settled_frames += 1
        self._impact_intensity = pulse_intensity(self.clock())
        if self.is_inert:
            logger.info("Impact effect finished after %d frames", self.hold_frames)
        return FrameEvent(FrameKind.PULSE, state.current_frame,
                          impact_point=self.result.intercept_point,
                          impact_intensity=self._impact_intensity)

    def reset(self) -> FrameEvent:
        """Stop wherever we are and return to IDLE at frame 0. Always accepted."""
        if self._state.phase != PlaybackPhase.IDLE:
            logger.info(">>> RESET from %s", self._state.phase.name)
        self._rewind(PlaybackPhase.IDLE)
        self._trajectories_visible = False
        return FrameEvent(FrameKind.NONE, 0,
                          threat=self._threat_position,
                          interceptor=self._interceptor_position)

    def _rewind(self, phase: PlaybackPhase):
        self._state = PlaybackState(phase=phase)
        self._threat_position = self.result.threat_samples[0]
        self._interceptor_position = self.result.interceptor_samples[0]
        self._impact_visible = False
        self._impact_intensity = 0.0


def frames_until_inert(num_samples: int, hold_frames: int) -> int:
    """
    Number of tick() calls after start() before playback goes inert:
    N+1 position frames, one impact frame, hold_frames+1 pulse frames.
    """
    return (num_samples + 1) + 1 + (hold_frames + 1)
