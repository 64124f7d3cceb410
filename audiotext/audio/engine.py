from __future__ import annotations

import logging
from typing import Optional

from PySide6 import QtCore
from PySide6.QtMultimedia import QAudioOutput, QMediaPlayer

from audiotext.models import PlayerState, RecordingFile
from audiotext.utils import clamp

logger = logging.getLogger(__name__)


class QtMediaPlayerBackend(QtCore.QObject):
    """
    PlayerBackend on top of QMediaPlayer.

    Positions cross this boundary as fractions of the recording so the scrub
    side never deals with milliseconds.
    """

    stateChanged = QtCore.Signal(object)    # PlayerState
    positionChanged = QtCore.Signal(float, float)  # pos_sec, dur_sec
    recordingChanged = QtCore.Signal(object)  # RecordingFile
    errorOccurred = QtCore.Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.state = PlayerState.STOPPED
        self.recording: Optional[RecordingFile] = None
        self._audio_output = QAudioOutput(self)
        self._player = QMediaPlayer(self)
        self._player.setAudioOutput(self._audio_output)
        self._player.positionChanged.connect(self._on_position_changed)
        self._player.playbackStateChanged.connect(self._on_playback_state_changed)
        self._player.errorOccurred.connect(self._on_error)

    def load(self, recording: RecordingFile) -> None:
        self._player.stop()
        self.recording = recording
        self._player.setSource(QtCore.QUrl.fromLocalFile(recording.path))
        self.recordingChanged.emit(recording)

    def set_volume(self, v: float) -> None:
        self._audio_output.setVolume(clamp(float(v), 0.0, 1.0))

    def duration(self) -> float:
        ms = self._player.duration()
        if ms > 0:
            return ms / 1000.0
        return self.recording.duration_sec if self.recording else 0.0

    def position(self) -> float:
        return self._player.position() / 1000.0

    def progress(self) -> float:
        dur = self.duration()
        if dur <= 0:
            return 0.0
        return clamp(self.position() / dur, 0.0, 1.0)

    def is_playing(self) -> bool:
        return self._player.playbackState() == QMediaPlayer.PlaybackState.PlayingState

    def seek(self, fraction: float) -> None:
        dur = self.duration()
        if dur <= 0:
            return
        self._player.setPosition(int(round(clamp(fraction, 0.0, 1.0) * dur * 1000.0)))

    def set_rate(self, rate: float) -> None:
        self._player.setPlaybackRate(float(rate))

    def play(self) -> None:
        if self.recording is None:
            return
        self._player.play()

    def pause(self) -> None:
        self._player.pause()

    def stop(self) -> None:
        self._player.stop()

    def _on_position_changed(self, pos_ms: int) -> None:
        self.positionChanged.emit(pos_ms / 1000.0, self.duration())

    def _on_playback_state_changed(self, state) -> None:
        if state == QMediaPlayer.PlaybackState.PlayingState:
            self._set_state(PlayerState.PLAYING)
        elif state == QMediaPlayer.PlaybackState.PausedState:
            self._set_state(PlayerState.PAUSED)
        else:
            self._set_state(PlayerState.STOPPED)

    def _on_error(self, error, message: str = "") -> None:
        msg = message or self._player.errorString()
        logger.warning("Playback error: %s", msg)
        self._set_state(PlayerState.ERROR)
        self.errorOccurred.emit(msg)

    def _set_state(self, st: PlayerState) -> None:
        if self.state != st:
            self.state = st
            self.stateChanged.emit(st)
