from __future__ import annotations

import logging
import subprocess
from typing import List, Sequence

import numpy as np

from audiotext.config import (
    FFMPEG_EXE,
    WAVEFORM_GAIN,
    WAVEFORM_PAD,
    WAVEFORM_PLACEHOLDER,
    WAVEFORM_SAMPLE_COUNT,
    WAVEFORM_SAMPLE_RATE,
)
from audiotext.utils import have_exe

logger = logging.getLogger(__name__)


def placeholder(sample_count: int = WAVEFORM_SAMPLE_COUNT) -> List[float]:
    return [WAVEFORM_PLACEHOLDER] * max(0, int(sample_count))


def downsample(
    samples: Sequence[float] | np.ndarray,
    sample_count: int = WAVEFORM_SAMPLE_COUNT,
    gain: float = WAVEFORM_GAIN,
) -> List[float]:
    """
    Reduce mono samples to sample_count display amplitudes in [0, 1].

    Each bucket is the mean absolute amplitude of len(samples) // sample_count
    consecutive samples, amplified by gain and capped at 1. Short inputs are
    padded so the result always has sample_count entries.
    """
    if sample_count <= 0:
        return []
    x = np.abs(np.asarray(samples, dtype=np.float32).reshape(-1))
    if x.size == 0:
        return placeholder(sample_count)

    window = max(1, x.size // sample_count)
    starts = np.arange(0, x.size, window)
    sums = np.add.reduceat(x, starts)
    counts = np.diff(np.append(starts, x.size))
    levels = np.minimum(1.0, (sums / counts) * float(gain))

    out = [float(v) for v in levels[:sample_count]]
    if len(out) < sample_count:
        out.extend([WAVEFORM_PAD] * (sample_count - len(out)))
    return out


def bar_is_past(index: int, total_bars: int, progress: float) -> bool:
    if total_bars <= 0:
        return False
    return (index + 0.5) / total_bars <= progress


def make_waveform_cmd(path: str, sample_rate: int = WAVEFORM_SAMPLE_RATE) -> List[str]:
    return [
        FFMPEG_EXE, "-hide_banner", "-loglevel", "error",
        "-i", path,
        "-vn",
        "-ac", "1",
        "-ar", str(sample_rate),
        "-f", "f32le",
        "pipe:1"
    ]


def load_waveform(path: str, sample_count: int = WAVEFORM_SAMPLE_COUNT) -> List[float]:
    if not have_exe(FFMPEG_EXE):
        logger.warning("ffmpeg not found; using placeholder waveform for %s", path)
        return placeholder(sample_count)
    try:
        proc = subprocess.run(
            make_waveform_cmd(path),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as e:
        logger.warning("Failed to extract waveform from %s: %s", path, e)
        return placeholder(sample_count)

    usable = len(proc.stdout) - len(proc.stdout) % 4
    x = np.frombuffer(proc.stdout[:usable], dtype=np.float32)
    return downsample(x, sample_count)
