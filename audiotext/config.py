from __future__ import annotations

import os

from audiotext.utils import env_flag, env_float

APP_NAME = "AudioText"
SETTINGS_ORG = "AudioText"

DEBUG = env_flag("AUDIOTEXT_DEBUG")

# Rotary knob: two full turns cover the whole recording.
TOTAL_ROTATION_DEGREES = 720.0
ROTARY_DETENT_SPACING = 0.01
TIMELINE_DETENT_SPACING = 0.05

# Flick preview
MAX_SCRUB_VELOCITY = 3.0
SCRUB_RATE_SLOPE = 2.5
SCRUB_RATE_MIN = 0.5
SCRUB_RATE_MAX = 3.0
PREVIEW_BASE_SEC = 0.25
PREVIEW_VELOCITY_STEP_SEC = 0.05
PREVIEW_MIN_SEC = 0.08

# Rate range the user can pick for normal playback.
PLAYBACK_RATE_MIN = 0.5
PLAYBACK_RATE_MAX = 2.0

WAVEFORM_SAMPLE_COUNT = 100
WAVEFORM_GAIN = env_float("AUDIOTEXT_WAVEFORM_GAIN", 3.0)
WAVEFORM_SAMPLE_RATE = 16000
WAVEFORM_PLACEHOLDER = 0.3
WAVEFORM_PAD = 0.1

SUMMARY_THRESHOLD_DB = 1.0

FFMPEG_EXE = os.environ.get("AUDIOTEXT_FFMPEG", "ffmpeg")
METADATA_DB_NAME = "recordings_metadata.db"


def data_dir() -> str:
    explicit = os.environ.get("AUDIOTEXT_DATA_DIR", "").strip()
    if explicit:
        return explicit
    app_data = os.environ.get("APPDATA", os.path.expanduser("~"))
    return os.path.join(app_data, APP_NAME)
