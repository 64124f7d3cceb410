from __future__ import annotations

import math
import time
from typing import List, Optional

from PySide6 import QtCore, QtGui, QtWidgets

from audiotext.audio.playback import PlaybackController
from audiotext.config import TOTAL_ROTATION_DEGREES, WAVEFORM_SAMPLE_COUNT
from audiotext.equalizer import (
    BANDS,
    FLAT,
    PRESETS,
    PRESETS_BY_NAME,
    Band,
    EqualizerSettings,
    apply_preset,
    formatted_summary,
    is_dirty,
    is_flat,
    matching_preset,
    percent_label,
    reset,
    set_value,
)
from audiotext.feedback import equalizer_adjust
from audiotext.models import GestureSample, ScrubMode
from audiotext.scrub import pointer_angle, velocity_from_samples
from audiotext.utils import clamp
from audiotext.waveform import bar_is_past, placeholder

# Pixels a press must travel before it turns into a scrub.
DRAG_THRESHOLD_PX = 5


class RotaryKnobWidget(QtWidgets.QWidget):
    """
    Play button with a scrub ring: a tap in the centre toggles playback,
    dragging around the ring scrubs through two full turns.
    """

    playPauseRequested = QtCore.Signal()
    scrubFinished = QtCore.Signal(float)

    def __init__(self, controller: PlaybackController, parent=None):
        super().__init__(parent)
        self.controller = controller
        self._progress = 0.0
        self._playing = False
        self._press_pos: Optional[QtCore.QPointF] = None
        self._scrubbing = False
        self._dot_count = 32
        self.setMinimumSize(220, 220)
        self.setSizePolicy(QtWidgets.QSizePolicy.Policy.Fixed, QtWidgets.QSizePolicy.Policy.Fixed)
        self.setAccessibleName("Play and scrub")

    def sizeHint(self) -> QtCore.QSize:
        return QtCore.QSize(220, 220)

    def set_progress(self, progress: float) -> None:
        if self._scrubbing:
            return
        self._progress = clamp(float(progress), 0.0, 1.0)
        self.update()

    def set_playing(self, playing: bool) -> None:
        self._playing = bool(playing)
        self.update()

    def _angle_at(self, pos: QtCore.QPointF) -> float:
        center = QtCore.QRectF(self.rect()).center()
        return pointer_angle(pos.x(), pos.y(), center.x(), center.y())

    def mousePressEvent(self, event: QtGui.QMouseEvent) -> None:
        if event.button() != QtCore.Qt.MouseButton.LeftButton:
            return super().mousePressEvent(event)
        self._press_pos = event.position()

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:
        if self._press_pos is None:
            return super().mouseMoveEvent(event)
        pos = event.position()
        if not self._scrubbing:
            if (pos - self._press_pos).manhattanLength() < DRAG_THRESHOLD_PX:
                return
            self._scrubbing = True
            self.controller.begin_scrub(ScrubMode.ROTARY)
            self.controller.update_rotary(self._angle_at(self._press_pos))
        result = self.controller.update_rotary(self._angle_at(pos))
        self._progress = result.position
        self.update()

    def mouseReleaseEvent(self, event: QtGui.QMouseEvent) -> None:
        if self._press_pos is None:
            return super().mouseReleaseEvent(event)
        self._press_pos = None
        if self._scrubbing:
            self._scrubbing = False
            result = self.controller.end_scrub()
            self._progress = result.position
            self.update()
            self.scrubFinished.emit(result.position)
        else:
            self.playPauseRequested.emit()

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:
        painter = QtGui.QPainter(self)
        painter.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing, True)
        palette = self.palette()
        base = palette.color(QtGui.QPalette.ColorRole.Button)
        text_color = palette.color(QtGui.QPalette.ColorRole.Text)
        highlight = palette.color(QtGui.QPalette.ColorRole.Highlight)

        side = min(self.width(), self.height())
        rect = QtCore.QRectF((self.width() - side) / 2, (self.height() - side) / 2, side, side)
        ring = rect.adjusted(side * 0.04, side * 0.04, -side * 0.04, -side * 0.04)

        painter.setPen(QtCore.Qt.PenStyle.NoPen)
        painter.setBrush(base)
        painter.drawEllipse(rect)

        track_pen = QtGui.QPen(text_color, side * 0.04)
        track_pen.setColor(QtGui.QColor(text_color.red(), text_color.green(), text_color.blue(), 40))
        painter.setPen(track_pen)
        painter.setBrush(QtCore.Qt.BrushStyle.NoBrush)
        painter.drawEllipse(ring)

        if self._progress > 0:
            arc_pen = QtGui.QPen(highlight, side * 0.04)
            arc_pen.setCapStyle(QtCore.Qt.PenCapStyle.RoundCap)
            painter.setPen(arc_pen)
            # Qt angles are in 1/16th degree, counter-clockwise from 3 o'clock.
            painter.drawArc(ring, 90 * 16, -int(round(self._progress * 360 * 16)))

        # Dots fill once per turn; the knob covers two turns.
        filled = int(self._progress * self._dot_count * (TOTAL_ROTATION_DEGREES / 360.0))
        center = rect.center()
        radius = side * 0.46
        offset = math.radians(self._progress * TOTAL_ROTATION_DEGREES)
        for i in range(self._dot_count):
            angle = offset + 2 * math.pi * i / self._dot_count - math.pi / 2
            lit = filled > i
            dot = side * (0.025 if lit else 0.015)
            painter.setPen(QtCore.Qt.PenStyle.NoPen)
            painter.setBrush(highlight if lit else track_pen.color())
            painter.drawEllipse(
                QtCore.QPointF(center.x() + radius * math.cos(angle), center.y() + radius * math.sin(angle)),
                dot / 2,
                dot / 2,
            )

        painter.setPen(text_color)
        font = painter.font()
        font.setPointSizeF(side * 0.12)
        painter.setFont(font)
        painter.drawText(rect, QtCore.Qt.AlignmentFlag.AlignCenter, "⏸" if self._playing else "▶")


class WaveformWidget(QtWidgets.QWidget):
    """Recording overview; press and drag to scrub with flick preview."""

    scrubFinished = QtCore.Signal(float)

    def __init__(self, controller: PlaybackController, parent=None):
        super().__init__(parent)
        self.controller = controller
        self._levels: List[float] = placeholder(WAVEFORM_SAMPLE_COUNT)
        self._progress = 0.0
        self._last_sample: Optional[GestureSample] = None
        self.setMinimumHeight(70)
        self.setSizePolicy(QtWidgets.QSizePolicy.Policy.Expanding, QtWidgets.QSizePolicy.Policy.Fixed)
        self.setAccessibleName("Waveform timeline")

    def set_levels(self, levels: List[float]) -> None:
        self._levels = list(levels)
        self.update()

    def set_progress(self, progress: float) -> None:
        if self._last_sample is not None:
            return
        self._progress = clamp(float(progress), 0.0, 1.0)
        self.update()

    def _fraction_at(self, pos: QtCore.QPointF) -> float:
        width = max(1, self.width())
        return clamp(pos.x() / width, 0.0, 1.0)

    def _scrub_to(self, pos: QtCore.QPointF) -> None:
        sample = GestureSample(self._fraction_at(pos), time.monotonic())
        velocity = velocity_from_samples(self._last_sample, sample)
        self._last_sample = sample
        result = self.controller.update_flick(sample.value, velocity, timestamp=sample.timestamp)
        self._progress = result.position
        self.update()

    def mousePressEvent(self, event: QtGui.QMouseEvent) -> None:
        if event.button() != QtCore.Qt.MouseButton.LeftButton:
            return super().mousePressEvent(event)
        self.controller.begin_scrub(ScrubMode.TIMELINE)
        self._last_sample = None
        self._scrub_to(event.position())

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:
        if self._last_sample is None:
            return super().mouseMoveEvent(event)
        self._scrub_to(event.position())

    def mouseReleaseEvent(self, event: QtGui.QMouseEvent) -> None:
        if self._last_sample is None:
            return super().mouseReleaseEvent(event)
        self._last_sample = None
        result = self.controller.end_scrub()
        self._progress = result.position
        self.update()
        self.scrubFinished.emit(result.position)

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:
        painter = QtGui.QPainter(self)
        painter.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing, True)
        palette = self.palette()
        painter.fillRect(self.rect(), QtGui.QColor("black"))
        highlight = palette.color(QtGui.QPalette.ColorRole.Highlight)
        dim = QtGui.QColor(255, 255, 255, 70)

        rect = QtCore.QRectF(self.rect()).adjusted(8, 8, -8, -8)
        bar_count = len(self._levels)
        if bar_count == 0 or rect.width() <= 0:
            return
        bar_width = rect.width() / bar_count
        mid_y = rect.center().y()
        painter.setPen(QtCore.Qt.PenStyle.NoPen)
        for i, level in enumerate(self._levels):
            height = max(2.0, rect.height() * float(level))
            painter.setBrush(highlight if bar_is_past(i, bar_count, self._progress) else dim)
            x = rect.left() + i * bar_width
            painter.drawRoundedRect(QtCore.QRectF(x + 1, mid_y - height / 2, bar_width - 2, height), 1.5, 1.5)

        x = rect.left() + rect.width() * self._progress
        painter.setPen(QtGui.QPen(QtGui.QColor("white"), 2))
        painter.drawLine(QtCore.QPointF(x, rect.top()), QtCore.QPointF(x, rect.bottom()))


class EqualizerWidget(QtWidgets.QGroupBox):
    """
    Edits a working copy of a recording's equalizer profile. Save is enabled
    only while the working copy differs from the saved one.
    """

    settingsChanged = QtCore.Signal(object)   # EqualizerSettings
    saveRequested = QtCore.Signal(object)     # EqualizerSettings

    def __init__(self, controller: Optional[PlaybackController] = None, parent=None):
        super().__init__("Audio Settings", parent)
        self.controller = controller
        self._working = FLAT
        self._saved = FLAT

        self.presets = QtWidgets.QComboBox()
        self.presets.addItems([p.name for p in PRESETS] + ["Custom"])
        self.reset_btn = QtWidgets.QPushButton("Reset")
        self.save_btn = QtWidgets.QPushButton("Save")
        self.summary_label = QtWidgets.QLabel()

        header = QtWidgets.QHBoxLayout()
        header.addWidget(QtWidgets.QLabel("Presets"))
        header.addWidget(self.presets)
        header.addStretch(1)
        header.addWidget(self.reset_btn)
        header.addWidget(self.save_btn)

        self.band_sliders: dict[Band, QtWidgets.QSlider] = {}
        self.band_values: dict[Band, QtWidgets.QLabel] = {}
        sliders_layout = QtWidgets.QHBoxLayout()
        sliders_layout.setSpacing(6)
        for band in BANDS:
            lo, hi = band.gain_range
            slider = QtWidgets.QSlider(QtCore.Qt.Orientation.Vertical)
            # One slider unit per step.
            slider.setRange(int(round(lo / band.step)), int(round(hi / band.step)))
            slider.setValue(0)
            slider.setTickPosition(QtWidgets.QSlider.TickPosition.TicksBothSides)
            slider.setTickInterval(int(round(3 / band.step)))
            slider.setToolTip(f"{band.title} ({band.display_frequency})")
            slider.setAccessibleName(f"{band.title} band")

            value_label = QtWidgets.QLabel()
            value_label.setAlignment(QtCore.Qt.AlignmentFlag.AlignHCenter)
            band_label = QtWidgets.QLabel(f"{band.title}\n{band.display_frequency}")
            band_label.setAlignment(QtCore.Qt.AlignmentFlag.AlignHCenter)

            column = QtWidgets.QVBoxLayout()
            column.addWidget(value_label)
            column.addWidget(slider, 1, QtCore.Qt.AlignmentFlag.AlignHCenter)
            column.addWidget(band_label)
            sliders_layout.addLayout(column)
            self.band_sliders[band] = slider
            self.band_values[band] = value_label

        layout = QtWidgets.QVBoxLayout(self)
        layout.addLayout(header)
        layout.addLayout(sliders_layout)
        layout.addWidget(self.summary_label)

        self.reset_btn.clicked.connect(self._on_reset)
        self.save_btn.clicked.connect(self._on_save)
        self.presets.currentTextChanged.connect(self._on_preset_changed)
        for band, slider in self.band_sliders.items():
            slider.valueChanged.connect(lambda v, b=band: self._on_slider_changed(b, v))

        self._sync_controls()

    @property
    def working(self) -> EqualizerSettings:
        return self._working

    @property
    def saved(self) -> EqualizerSettings:
        return self._saved

    def is_dirty(self) -> bool:
        return is_dirty(self._working, self._saved)

    def load(self, saved: EqualizerSettings) -> None:
        self._saved = saved
        self._working = saved
        self._sync_controls()

    def set_working(self, settings: EqualizerSettings, emit: bool = True) -> None:
        self._working = settings
        self._sync_controls()
        if emit:
            self.settingsChanged.emit(self._working)

    def mark_saved(self) -> None:
        self._saved = self._working
        self._sync_controls()

    def _on_reset(self):
        self.set_working(reset(self._working))

    def _on_save(self):
        self.saveRequested.emit(self._working)

    def _on_preset_changed(self, name: str):
        preset = PRESETS_BY_NAME.get(name)
        if preset is not None:
            self.set_working(apply_preset(self._working, preset))

    def _on_slider_changed(self, band: Band, value: int):
        self._working = set_value(self._working, band, value * band.step)
        if self.controller is not None:
            equalizer_adjust(self.controller.feedback)
        self._sync_controls()
        self.settingsChanged.emit(self._working)

    def _sync_controls(self) -> None:
        for band, slider in self.band_sliders.items():
            gain = self._working.value(band)
            slider.blockSignals(True)
            slider.setValue(int(round(gain / band.step)))
            slider.blockSignals(False)
            self.band_values[band].setText(f"{gain:+.1f} dB\n{percent_label(band, gain)}")

        preset = matching_preset(self._working)
        self.presets.blockSignals(True)
        self.presets.setCurrentText(preset.name if preset else "Custom")
        self.presets.blockSignals(False)

        summary = formatted_summary(self._working)
        self.summary_label.setText(summary.value)
        self.summary_label.setEnabled(not is_flat(self._working))
        self.save_btn.setEnabled(self.is_dirty())
