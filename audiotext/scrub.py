"""
Gesture to playback mapping for interactive scrubbing.

Two interaction modes are supported:

- rotary: a circular drag whose angle accumulates over two full turns
  (720 degrees) and maps linearly onto the recording.
- timeline: a drag along the waveform whose position seeks directly and whose
  velocity drives a short "flick to preview" playback burst.

The engine never touches the player. Every update returns a ScrubResult and
the caller applies it (see audiotext.audio.playback).
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from audiotext.config import (
    MAX_SCRUB_VELOCITY,
    PREVIEW_BASE_SEC,
    PREVIEW_MIN_SEC,
    PREVIEW_VELOCITY_STEP_SEC,
    ROTARY_DETENT_SPACING,
    SCRUB_RATE_MAX,
    SCRUB_RATE_MIN,
    SCRUB_RATE_SLOPE,
    TIMELINE_DETENT_SPACING,
    TOTAL_ROTATION_DEGREES,
)
from audiotext.models import GestureSample, ScrubMode, ScrubResult, ScrubSession
from audiotext.utils import clamp

logger = logging.getLogger(__name__)


class ScrubError(RuntimeError):
    pass


class InvalidGestureState(ScrubError):
    """Raised when a session is updated or ended while it is not active."""


def wrap_angle_delta(delta: float) -> float:
    if delta > 180.0:
        delta -= 360.0
    elif delta < -180.0:
        delta += 360.0
    return delta


def pointer_angle(x: float, y: float, center_x: float, center_y: float) -> float:
    return math.degrees(math.atan2(y - center_y, x - center_x))


def detent_index(position: float, spacing: float) -> int:
    return int(math.floor(position / spacing))


def scrub_rate(velocity: float) -> float:
    magnitude = clamp(abs(velocity), 0.0, MAX_SCRUB_VELOCITY)
    return clamp(1.0 + magnitude * SCRUB_RATE_SLOPE, SCRUB_RATE_MIN, SCRUB_RATE_MAX)


def preview_duration(velocity: float) -> float:
    magnitude = clamp(abs(velocity), 0.0, MAX_SCRUB_VELOCITY)
    return max(PREVIEW_MIN_SEC, PREVIEW_BASE_SEC - magnitude * PREVIEW_VELOCITY_STEP_SEC)


def velocity_from_samples(previous: Optional[GestureSample], current: GestureSample) -> float:
    if previous is None:
        return 0.0
    interval = current.timestamp - previous.timestamp
    if interval <= 0:
        return 0.0
    return (current.value - previous.value) / interval


class ScrubEngine:
    """
    Owns at most one scrub session at a time.

    begin_session() while a session is active returns that session untouched,
    so a gesture recognizer that reports "began" twice cannot reset the
    accumulated rotation.
    """

    def __init__(
        self,
        total_rotation_degrees: float = TOTAL_ROTATION_DEGREES,
        rotary_detent_spacing: float = ROTARY_DETENT_SPACING,
        timeline_detent_spacing: float = TIMELINE_DETENT_SPACING,
    ):
        self.total_rotation_degrees = float(total_rotation_degrees)
        self.rotary_detent_spacing = float(rotary_detent_spacing)
        self.timeline_detent_spacing = float(timeline_detent_spacing)
        self._session: Optional[ScrubSession] = None

    @property
    def session(self) -> Optional[ScrubSession]:
        return self._session

    @property
    def is_scrubbing(self) -> bool:
        return self._session is not None and self._session.active

    def _spacing(self, mode: ScrubMode) -> float:
        if mode is ScrubMode.ROTARY:
            return self.rotary_detent_spacing
        return self.timeline_detent_spacing

    def begin_session(
        self,
        mode: ScrubMode,
        current_position: float,
        is_currently_playing: bool,
    ) -> ScrubSession:
        if self.is_scrubbing:
            logger.debug("Scrub session already active; ignoring begin (%s)", mode.value)
            return self._session

        position = clamp(float(current_position), 0.0, 1.0)
        session = ScrubSession(
            mode=mode,
            started_while_playing=bool(is_currently_playing),
            position=position,
            last_detent_index=detent_index(position, self._spacing(mode)),
        )
        if mode is ScrubMode.ROTARY:
            session.cumulative_rotation_degrees = position * self.total_rotation_degrees
        self._session = session
        return session

    def _require_active(self, session: ScrubSession) -> None:
        if session is not self._session or not session.active:
            raise InvalidGestureState("no active scrub session")

    def _update_detent(self, session: ScrubSession) -> bool:
        index = detent_index(session.position, self._spacing(session.mode))
        if index != session.last_detent_index:
            session.last_detent_index = index
            return True
        return False

    def update_rotary(self, session: ScrubSession, pointer_angle_degrees: float) -> ScrubResult:
        self._require_active(session)
        angle = float(pointer_angle_degrees)
        if session.last_angle is not None:
            delta = wrap_angle_delta(angle - session.last_angle)
            session.cumulative_rotation_degrees += delta
        session.last_angle = angle

        session.cumulative_rotation_degrees = clamp(
            session.cumulative_rotation_degrees, 0.0, self.total_rotation_degrees
        )
        session.position = session.cumulative_rotation_degrees / self.total_rotation_degrees
        return ScrubResult(position=session.position, detent_crossed=self._update_detent(session))

    def update_timeline_flick(
        self,
        session: ScrubSession,
        position: float,
        velocity: float,
        duration: float,
        timestamp: Optional[float] = None,
    ) -> ScrubResult:
        self._require_active(session)
        if duration <= 0:
            logger.debug("Ignoring timeline scrub on empty recording")
            return ScrubResult(position=session.position, seek=False)

        session.position = clamp(float(position), 0.0, 1.0)
        session.last_sample_value = session.position
        session.last_sample_time = timestamp
        crossed = self._update_detent(session)
        rate = scrub_rate(velocity)

        if session.started_while_playing:
            return ScrubResult(
                position=session.position,
                rate_hint=rate,
                detent_crossed=crossed,
                play=True,
            )
        return ScrubResult(
            position=session.position,
            rate_hint=rate,
            detent_crossed=crossed,
            play=True,
            preview_duration=preview_duration(velocity),
        )

    def end_session(self, session: ScrubSession) -> ScrubResult:
        """
        Close the session. The caller restores its normal playback rate;
        playback continues only when the gesture started during playback.
        """
        self._require_active(session)
        session.active = False
        self._session = None
        return ScrubResult(position=session.position, play=session.started_while_playing)
