from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class ScrubMode(Enum):
    ROTARY = "rotary"
    TIMELINE = "timeline"


class PlayerState(Enum):
    STOPPED = auto()
    PLAYING = auto()
    PAUSED = auto()
    ERROR = auto()


@dataclass(frozen=True)
class GestureSample:
    value: float
    timestamp: float


@dataclass
class ScrubSession:
    mode: ScrubMode
    started_while_playing: bool
    cumulative_rotation_degrees: float = 0.0
    last_detent_index: int = 0
    position: float = 0.0
    last_angle: Optional[float] = None
    last_sample_value: Optional[float] = None
    last_sample_time: Optional[float] = None
    active: bool = True


@dataclass(frozen=True)
class ScrubResult:
    """
    Instruction for the playback side after one gesture update.

    play: True requests playback, False requests a pause, None leaves it alone.
    rate_hint: playback rate to apply, None keeps the current one.
    preview_duration: when set, playback should pause again after this many seconds.
    """

    position: float
    rate_hint: Optional[float] = None
    detent_crossed: bool = False
    play: Optional[bool] = None
    preview_duration: Optional[float] = None
    seek: bool = True


@dataclass
class RecordingFile:
    path: str
    duration_sec: float = 0.0
    title: str = ""

    @property
    def recording_id(self) -> str:
        return os.path.basename(self.path)


def format_recording_title(recording: RecordingFile) -> str:
    return recording.title or os.path.splitext(os.path.basename(recording.path))[0]
