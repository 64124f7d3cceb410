from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Optional, Protocol

from audiotext.audio.scheduler import Cancelable, Scheduler
from audiotext.config import PLAYBACK_RATE_MAX, PLAYBACK_RATE_MIN
from audiotext.feedback import FeedbackSink, NullFeedbackSink, play_pause_toggle
from audiotext.models import GestureSample, ScrubMode, ScrubResult, ScrubSession
from audiotext.scrub import (
    InvalidGestureState,
    ScrubEngine,
    preview_duration,
    scrub_rate,
    velocity_from_samples,
)
from audiotext.utils import clamp

logger = logging.getLogger(__name__)


class PlayerBackend(Protocol):
    def duration(self) -> float: ...

    def progress(self) -> float: ...

    def is_playing(self) -> bool: ...

    def seek(self, fraction: float) -> None: ...

    def set_rate(self, rate: float) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...


class PlaybackController:
    """
    Applies scrub results to a player backend.

    Holds the only preview-stop task: each moving update replaces it and
    end_scrub() cancels it, so a preview can never pause playback after the
    gesture is over.

    Rotary updates get the same rate and preview treatment as timeline
    flicks, with the velocity taken from the knob position between samples.
    """

    def __init__(
        self,
        player: PlayerBackend,
        scheduler: Scheduler,
        feedback: Optional[FeedbackSink] = None,
        engine: Optional[ScrubEngine] = None,
        base_rate: float = 1.0,
    ):
        self.player = player
        self.scheduler = scheduler
        self.feedback = feedback or NullFeedbackSink()
        self.engine = engine or ScrubEngine()
        self._base_rate = clamp(float(base_rate), PLAYBACK_RATE_MIN, PLAYBACK_RATE_MAX)
        self._preview_task: Optional[Cancelable] = None
        self._last_rotary_sample: Optional[GestureSample] = None

    @property
    def base_rate(self) -> float:
        return self._base_rate

    @property
    def preview_pending(self) -> bool:
        return self._preview_task is not None and self._preview_task.active

    @property
    def is_scrubbing(self) -> bool:
        return self.engine.is_scrubbing

    def set_playback_rate(self, rate: float) -> None:
        self._base_rate = clamp(float(rate), PLAYBACK_RATE_MIN, PLAYBACK_RATE_MAX)
        if not self.engine.is_scrubbing:
            self.player.set_rate(self._base_rate)

    def toggle_play_pause(self) -> bool:
        if self.engine.is_scrubbing:
            return self.player.is_playing()
        play_pause_toggle(self.feedback)
        if self.player.is_playing():
            self.player.pause()
            return False
        self.player.set_rate(self._base_rate)
        self.player.play()
        return True

    def _active_session(self) -> ScrubSession:
        session = self.engine.session
        if session is None or not session.active:
            raise InvalidGestureState("no active scrub session")
        return session

    def _cancel_preview(self) -> None:
        if self._preview_task is not None:
            self._preview_task.cancel()
            self._preview_task = None

    def _on_preview_stop(self) -> None:
        self._preview_task = None
        self.player.pause()

    def _apply(self, result: ScrubResult) -> ScrubResult:
        if result.seek:
            self.player.seek(result.position)
        if result.rate_hint is not None:
            self.player.set_rate(result.rate_hint)
        if result.detent_crossed:
            self.feedback.tick()
        if result.play and not self.player.is_playing():
            self.player.play()
        if result.preview_duration is not None:
            self._preview_task = self.scheduler.call_later(result.preview_duration, self._on_preview_stop)
        return result

    def begin_scrub(self, mode: ScrubMode) -> ScrubSession:
        if self.engine.is_scrubbing:
            return self.engine.session
        self._cancel_preview()
        self._last_rotary_sample = None
        playing = self.player.is_playing()
        session = self.engine.begin_session(mode, self.player.progress(), playing)
        self.player.set_rate(self._base_rate)
        if not playing:
            self.player.pause()
        return session

    def update_rotary(self, angle_degrees: float, timestamp: Optional[float] = None) -> ScrubResult:
        session = self._active_session()
        result = self.engine.update_rotary(session, angle_degrees)
        sample = GestureSample(result.position, time.monotonic() if timestamp is None else float(timestamp))
        previous, self._last_rotary_sample = self._last_rotary_sample, sample
        if previous is None or sample.value == previous.value:
            return self._apply(result)

        velocity = velocity_from_samples(previous, sample)
        self._cancel_preview()
        return self._apply(replace(
            result,
            rate_hint=scrub_rate(velocity),
            play=True,
            preview_duration=None if session.started_while_playing else preview_duration(velocity),
        ))

    def update_flick(self, position: float, velocity: float, timestamp: Optional[float] = None) -> ScrubResult:
        session = self._active_session()
        result = self.engine.update_timeline_flick(
            session, position, velocity, self.player.duration(), timestamp=timestamp
        )
        if result.seek:
            self._cancel_preview()
        return self._apply(result)

    def end_scrub(self) -> ScrubResult:
        session = self._active_session()
        self._cancel_preview()
        self._last_rotary_sample = None
        result = self.engine.end_session(session)
        self.player.set_rate(self._base_rate)
        if self.player.duration() > 0:
            self.player.seek(result.position)
        if result.play:
            if not self.player.is_playing():
                self.player.play()
        else:
            self.player.pause()
        logger.debug("Scrub ended at %.3f (playing=%s)", result.position, bool(result.play))
        return result
