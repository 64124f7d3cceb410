"""
Per-recording equalizer settings.

Gains are stored in dB, one value per Band, and are only metadata: nothing in
this package filters audio with them. Sliders that work in percent use
to_percent()/from_percent() as a view over the same dB values.

All writes clamp into the band's gain range; no operation raises for an
out-of-range value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional

from audiotext.config import SUMMARY_THRESHOLD_DB
from audiotext.utils import clamp

NEUTRAL_GAIN_DB = 0.0
NEUTRAL_PERCENT = 50.0


@dataclass(frozen=True)
class BandSpec:
    title: str
    display_frequency: str
    gain_min: float
    gain_max: float
    step: float = 0.5


class Band(Enum):
    LOW_SHELF = "lowShelf"
    BASS = "bass"
    MID = "mid"
    PRESENCE = "presence"
    AIR = "air"
    PRE_GAIN = "preGain"

    @property
    def spec(self) -> BandSpec:
        return BAND_SPECS[self]

    @property
    def title(self) -> str:
        return self.spec.title

    @property
    def display_frequency(self) -> str:
        return self.spec.display_frequency

    @property
    def gain_range(self) -> tuple[float, float]:
        return (self.spec.gain_min, self.spec.gain_max)

    @property
    def step(self) -> float:
        return self.spec.step

    def clamp(self, value: float) -> float:
        return clamp(float(value), self.spec.gain_min, self.spec.gain_max)


BAND_SPECS: dict[Band, BandSpec] = {
    Band.LOW_SHELF: BandSpec("Low Shelf", "60 Hz", -12.0, 12.0),
    Band.BASS: BandSpec("Bass", "120 Hz", -12.0, 12.0),
    Band.MID: BandSpec("Mid", "1 kHz", -12.0, 12.0),
    Band.PRESENCE: BandSpec("Presence", "4 kHz", -12.0, 12.0),
    Band.AIR: BandSpec("Air", "10 kHz", -12.0, 12.0),
    Band.PRE_GAIN: BandSpec("Output Gain", "Global", -6.0, 6.0),
}

BANDS: tuple[Band, ...] = tuple(Band)
# Output gain is a level trim, not a tonal change.
TONE_BANDS: tuple[Band, ...] = tuple(b for b in BANDS if b is not Band.PRE_GAIN)


@dataclass(frozen=True)
class EqualizerSettings:
    gains: tuple[float, ...] = field(default_factory=lambda: tuple(NEUTRAL_GAIN_DB for _ in BANDS))

    def __post_init__(self):
        if len(self.gains) != len(BANDS):
            raise ValueError(f"EqualizerSettings expects {len(BANDS)} gains")
        object.__setattr__(
            self, "gains", tuple(band.clamp(g) for band, g in zip(BANDS, self.gains))
        )

    def value(self, band: Band) -> float:
        return self.gains[BANDS.index(band)]

    def items(self):
        return zip(BANDS, self.gains)


FLAT = EqualizerSettings()


class Summary(Enum):
    FLAT = "Flat"
    SUBTLE_ADJUSTMENTS = "Subtle adjustments"
    TARGETED_BOOST = "Targeted boost"
    FULL_PROFILE = "Full profile"


@dataclass(frozen=True)
class Preset:
    name: str
    icon: str
    description: str
    values: tuple[float, ...]

    @property
    def settings(self) -> EqualizerSettings:
        return apply_preset(FLAT, self)


PRESETS: tuple[Preset, ...] = (
    Preset("Flat", "equal", "Neutral, no adjustments", (0.0, 0.0, 0.0, 0.0, 0.0, 0.0)),
    Preset(
        "Vocal Presence",
        "person.wave.2",
        "Enhanced speech clarity",
        (-1.5, -0.5, 2.5, 3.0, 2.0, -1.0),
    ),
    Preset("Warm Tape", "recordingtape", "Soft lows, rounded top", (2.5, 1.5, 0.5, -1.0, 1.0, 0.0)),
    Preset("Broadcast", "mic", "Optimized for voice", (1.5, 1.0, 2.0, 2.0, 2.5, -1.0)),
)
PRESETS_BY_NAME: dict[str, Preset] = {p.name: p for p in PRESETS}


def get_value(settings: EqualizerSettings, band: Band) -> float:
    return settings.value(band)


def set_value(settings: EqualizerSettings, band: Band, value: float) -> EqualizerSettings:
    gains = list(settings.gains)
    gains[BANDS.index(band)] = band.clamp(value)
    return EqualizerSettings(tuple(gains))


def apply_preset(settings: EqualizerSettings, preset: Preset) -> EqualizerSettings:
    """Write preset values in band order; bands past the preset's length keep their value."""
    gains = list(settings.gains)
    for index, band in enumerate(BANDS):
        if index < len(preset.values):
            gains[index] = band.clamp(preset.values[index])
    return EqualizerSettings(tuple(gains))


def reset(settings: EqualizerSettings) -> EqualizerSettings:
    return apply_preset(settings, PRESETS_BY_NAME["Flat"])


def is_dirty(working: EqualizerSettings, saved: EqualizerSettings) -> bool:
    return working.gains != saved.gains


def is_flat(settings: EqualizerSettings) -> bool:
    return all(g == NEUTRAL_GAIN_DB for g in settings.gains)


def formatted_summary(
    settings: EqualizerSettings,
    threshold_db: float = SUMMARY_THRESHOLD_DB,
) -> Summary:
    if is_flat(settings):
        return Summary.FLAT
    significant = [b for b in TONE_BANDS if abs(settings.value(b)) >= threshold_db]
    if not significant:
        return Summary.SUBTLE_ADJUSTMENTS
    if len(significant) <= 2:
        return Summary.TARGETED_BOOST
    return Summary.FULL_PROFILE


def matching_preset(settings: EqualizerSettings) -> Optional[Preset]:
    for preset in PRESETS:
        if not is_dirty(settings, preset.settings):
            return preset
    return None


def to_dict(settings: EqualizerSettings) -> dict[str, float]:
    return {band.value: gain for band, gain in settings.items()}


def from_dict(data: Mapping[str, object]) -> EqualizerSettings:
    gains = []
    for band in BANDS:
        raw = data.get(band.value, NEUTRAL_GAIN_DB)
        try:
            gains.append(band.clamp(float(raw)))
        except (TypeError, ValueError):
            gains.append(NEUTRAL_GAIN_DB)
    return EqualizerSettings(tuple(gains))


# Percentage presentation
# -----------------------------

def to_percent(band: Band, gain_db: float) -> float:
    lo, hi = band.gain_range
    gain_db = band.clamp(gain_db)
    if gain_db >= NEUTRAL_GAIN_DB:
        return NEUTRAL_PERCENT + NEUTRAL_PERCENT * gain_db / hi
    return NEUTRAL_PERCENT - NEUTRAL_PERCENT * gain_db / lo


def from_percent(band: Band, percent: float) -> float:
    lo, hi = band.gain_range
    percent = clamp(float(percent), 0.0, 100.0)
    if percent >= NEUTRAL_PERCENT:
        return (percent - NEUTRAL_PERCENT) / NEUTRAL_PERCENT * hi
    return (NEUTRAL_PERCENT - percent) / NEUTRAL_PERCENT * lo


def percent_label(band: Band, gain_db: float) -> str:
    return f"{to_percent(band, gain_db):.0f}%"


def tone_for(band: Band, gain_db: float) -> str:
    percent = to_percent(band, gain_db)
    if percent < 33:
        return "reduced"
    if percent < 67:
        return "neutral"
    return "boosted"
