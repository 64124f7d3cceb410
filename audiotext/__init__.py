"""AudioText playback core: scrubbing, equalizer settings and waveform display."""

__version__ = "0.1.0"
