from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from PySide6 import QtCore, QtGui, QtWidgets

from audiotext.audio.playback import PlaybackController
from audiotext.audio.scheduler import QtScheduler
from audiotext.config import APP_NAME, DEBUG, SETTINGS_ORG, WAVEFORM_SAMPLE_COUNT
from audiotext.equalizer import EqualizerSettings, formatted_summary
from audiotext.feedback import LoggingFeedbackSink
from audiotext.metadata_store import RecordingMetadataStore
from audiotext.models import PlayerState, RecordingFile, format_recording_title
from audiotext.ui.widgets import EqualizerWidget, RotaryKnobWidget, WaveformWidget
from audiotext.utils import format_time
from audiotext.waveform import load_waveform

logger = logging.getLogger(__name__)

AUDIO_EXTS = "Audio (*.m4a *.wav *.mp3 *.aac *.flac *.ogg *.caf)"
PLAYBACK_RATES = (0.5, 0.75, 1.0, 1.25, 1.5, 2.0)


class WaveformWorker(QtCore.QObject):
    waveformReady = QtCore.Signal(str, object)
    finished = QtCore.Signal()

    def __init__(self, path: str, parent=None):
        super().__init__(parent)
        self._path = path

    @QtCore.Slot()
    def run(self) -> None:
        self.waveformReady.emit(self._path, load_waveform(self._path, WAVEFORM_SAMPLE_COUNT))
        self.finished.emit()


# Main Window
# -----------------------------

class MainWindow(QtWidgets.QMainWindow):
    def __init__(
        self,
        store: Optional[RecordingMetadataStore] = None,
        player=None,
        settings: Optional[QtCore.QSettings] = None,
    ):
        super().__init__()
        self.setWindowTitle(APP_NAME)
        self.resize(720, 640)

        self.settings = settings or QtCore.QSettings(SETTINGS_ORG, APP_NAME)
        self.store = store or RecordingMetadataStore()
        self.recording: Optional[RecordingFile] = None

        if player is None:
            from audiotext.audio.engine import QtMediaPlayerBackend
            player = QtMediaPlayerBackend(parent=self)
        self.player = player
        self.controller = PlaybackController(
            self.player,
            QtScheduler(self),
            feedback=LoggingFeedbackSink(),
            base_rate=float(self.settings.value("playback/rate", 1.0, type=float)),
        )
        self.player.set_volume(float(self.settings.value("audio/volume", 0.8, type=float)))

        self.title_label = QtWidgets.QLabel("No recording")
        self.title_label.setAlignment(QtCore.Qt.AlignmentFlag.AlignCenter)
        self.time_label = QtWidgets.QLabel("0:00 / 0:00")
        self.time_label.setAlignment(QtCore.Qt.AlignmentFlag.AlignCenter)
        self.knob = RotaryKnobWidget(self.controller)
        self.waveform = WaveformWidget(self.controller)
        self.equalizer = EqualizerWidget(self.controller)
        # Profiles are saved per recording; nothing to edit until one is open.
        self.equalizer.setEnabled(False)
        self.rate_combo = QtWidgets.QComboBox()
        for rate in PLAYBACK_RATES:
            self.rate_combo.addItem(f"{rate:g}×", rate)
        self.rate_combo.setCurrentIndex(max(0, self.rate_combo.findData(self.controller.base_rate)))

        rate_row = QtWidgets.QHBoxLayout()
        rate_row.addStretch(1)
        rate_row.addWidget(QtWidgets.QLabel("Speed"))
        rate_row.addWidget(self.rate_combo)

        central = QtWidgets.QWidget()
        layout = QtWidgets.QVBoxLayout(central)
        layout.addWidget(self.title_label)
        layout.addWidget(self.knob, 0, QtCore.Qt.AlignmentFlag.AlignHCenter)
        layout.addWidget(self.time_label)
        layout.addWidget(self.waveform)
        layout.addLayout(rate_row)
        layout.addWidget(self.equalizer)
        self.setCentralWidget(central)

        file_menu = self.menuBar().addMenu("&File")
        open_act = QtGui.QAction("Open Recording…", self)
        open_act.setShortcut(QtGui.QKeySequence.StandardKey.Open)
        quit_act = QtGui.QAction("Quit", self)
        file_menu.addAction(open_act)
        file_menu.addSeparator()
        file_menu.addAction(quit_act)
        open_act.triggered.connect(self._open_dialog)
        quit_act.triggered.connect(self.close)

        self.knob.playPauseRequested.connect(self._toggle_play_pause)
        self.player.positionChanged.connect(self._on_position_changed)
        self.player.stateChanged.connect(self._on_state_changed)
        self.player.errorOccurred.connect(self._on_error)
        self.rate_combo.currentIndexChanged.connect(self._on_rate_changed)
        self.equalizer.saveRequested.connect(self._on_save_equalizer)

        self._waveform_worker: Optional[WaveformWorker] = None
        self._waveform_thread: Optional[QtCore.QThread] = None

        last_path = str(self.settings.value("last_recording", ""))
        if last_path and os.path.exists(last_path):
            self.open_recording(last_path)

    def _open_dialog(self):
        last_dir = self.settings.value("last_dir", os.path.expanduser("~"))
        path, _ = QtWidgets.QFileDialog.getOpenFileName(self, "Open Recording", str(last_dir), AUDIO_EXTS)
        if path:
            self.settings.setValue("last_dir", os.path.dirname(path))
            self.open_recording(path)

    def open_recording(self, path: str) -> None:
        if self.recording is not None and self.equalizer.is_dirty():
            logger.info("Discarding unsaved equalizer changes for %s", self.recording.recording_id)
        self.recording = RecordingFile(path=path)
        self.player.load(self.recording)
        self.title_label.setText(format_recording_title(self.recording))
        self.equalizer.load(self.store.equalizer_for(self.recording.recording_id))
        self.equalizer.setEnabled(True)
        self.settings.setValue("last_recording", path)
        self._start_waveform_worker(path)

    def _start_waveform_worker(self, path: str) -> None:
        self._stop_waveform_worker()
        worker = WaveformWorker(path)
        thread = QtCore.QThread(self)
        worker.moveToThread(thread)
        thread.started.connect(worker.run)
        worker.waveformReady.connect(self._on_waveform_ready, QtCore.Qt.ConnectionType.QueuedConnection)
        worker.finished.connect(thread.quit)
        thread.start()
        self._waveform_worker = worker
        self._waveform_thread = thread

    def _stop_waveform_worker(self) -> None:
        if self._waveform_thread:
            self._waveform_thread.quit()
            self._waveform_thread.wait()
            self._waveform_thread.deleteLater()
        if self._waveform_worker:
            self._waveform_worker.deleteLater()
        self._waveform_worker = None
        self._waveform_thread = None

    def _on_waveform_ready(self, path: str, levels: list[float]) -> None:
        if self.recording is None or self.recording.path != path:
            return
        self.waveform.set_levels(levels)

    def _toggle_play_pause(self):
        if self.recording is None:
            return
        self.controller.toggle_play_pause()

    def _on_position_changed(self, pos_sec: float, dur_sec: float):
        self.time_label.setText(f"{format_time(pos_sec)} / {format_time(dur_sec)}")
        if dur_sec > 0 and not self.controller.is_scrubbing:
            frac = pos_sec / dur_sec
            self.knob.set_progress(frac)
            self.waveform.set_progress(frac)

    def _on_state_changed(self, state: PlayerState):
        self.knob.set_playing(state == PlayerState.PLAYING)

    def _on_error(self, msg: str):
        self.statusBar().showMessage(f"Playback error: {msg}", 5000)

    def _on_rate_changed(self, _index: int):
        rate = float(self.rate_combo.currentData())
        self.controller.set_playback_rate(rate)
        self.settings.setValue("playback/rate", rate)

    def _on_save_equalizer(self, settings: EqualizerSettings):
        if self.recording is None:
            return
        self.store.save_equalizer(self.recording.recording_id, settings)
        self.equalizer.mark_saved()
        self.statusBar().showMessage(f"Saved profile: {formatted_summary(settings).value}", 3000)

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:
        self._stop_waveform_worker()
        self.player.stop()
        self.store.close()
        super().closeEvent(event)


def main():
    logging.basicConfig(
        level=logging.DEBUG if DEBUG else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = QtWidgets.QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    w = MainWindow()
    w.show()
    sys.exit(app.exec())
