import unittest
from unittest import mock

import numpy as np

from audiotext import waveform
from audiotext.waveform import bar_is_past, downsample, load_waveform, make_waveform_cmd


class DownsampleTests(unittest.TestCase):
    def test_mean_absolute_amplitude_is_amplified(self):
        samples = np.tile(np.array([0.1, -0.1], dtype=np.float32), 500)
        levels = downsample(samples, sample_count=100, gain=3.0)
        self.assertEqual(len(levels), 100)
        for level in levels:
            self.assertAlmostEqual(level, 0.3, places=5)

    def test_levels_are_capped_at_one(self):
        levels = downsample([0.5, -0.9] * 100, sample_count=10)
        self.assertEqual(levels, [1.0] * 10)

    def test_buckets_follow_the_signal(self):
        samples = np.concatenate([np.zeros(500), np.full(500, 0.2)])
        levels = downsample(samples, sample_count=2, gain=1.0)
        self.assertAlmostEqual(levels[0], 0.0)
        self.assertAlmostEqual(levels[1], 0.2, places=5)

    def test_short_input_is_padded(self):
        levels = downsample([0.1] * 50, sample_count=100, gain=1.0)
        self.assertEqual(len(levels), 100)
        self.assertAlmostEqual(levels[0], 0.1, places=5)
        self.assertEqual(levels[50:], [0.1] * 50)

    def test_uneven_input_is_truncated(self):
        levels = downsample(np.ones(250) * 0.01, sample_count=100)
        self.assertEqual(len(levels), 100)

    def test_empty_input_returns_placeholder(self):
        self.assertEqual(downsample([], sample_count=4), [0.3] * 4)
        self.assertEqual(downsample([0.5], sample_count=0), [])


class BarIsPastTests(unittest.TestCase):
    def test_bar_centre_decides(self):
        self.assertTrue(bar_is_past(0, 100, 0.005))
        self.assertFalse(bar_is_past(0, 100, 0.004))
        self.assertTrue(bar_is_past(99, 100, 1.0))
        self.assertFalse(bar_is_past(0, 0, 1.0))


class LoadWaveformTests(unittest.TestCase):
    def test_command_decodes_mono_float(self):
        cmd = make_waveform_cmd("/tmp/take.m4a", sample_rate=8000)
        self.assertIn("/tmp/take.m4a", cmd)
        self.assertEqual(cmd[cmd.index("-ac") + 1], "1")
        self.assertEqual(cmd[cmd.index("-ar") + 1], "8000")
        self.assertEqual(cmd[cmd.index("-f") + 1], "f32le")

    def test_missing_ffmpeg_gives_placeholder(self):
        with mock.patch.object(waveform, "have_exe", return_value=False):
            with self.assertLogs("audiotext.waveform", level="WARNING"):
                levels = load_waveform("/tmp/missing.m4a", sample_count=5)
        self.assertEqual(levels, [0.3] * 5)

    def test_decoded_pcm_is_downsampled(self):
        pcm = np.full(1000, -0.2, dtype=np.float32).tobytes()
        completed = mock.Mock(stdout=pcm + b"\x00")
        with mock.patch.object(waveform, "have_exe", return_value=True), \
                mock.patch.object(waveform.subprocess, "run", return_value=completed):
            levels = load_waveform("/tmp/take.m4a", sample_count=10)
        self.assertEqual(len(levels), 10)
        for level in levels:
            self.assertAlmostEqual(level, 0.6, places=5)

    def test_decode_failure_gives_placeholder(self):
        error = waveform.subprocess.CalledProcessError(1, ["ffmpeg"])
        with mock.patch.object(waveform, "have_exe", return_value=True), \
                mock.patch.object(waveform.subprocess, "run", side_effect=error):
            with self.assertLogs("audiotext.waveform", level="WARNING"):
                levels = load_waveform("/tmp/broken.m4a", sample_count=3)
        self.assertEqual(levels, [0.3] * 3)


if __name__ == "__main__":
    unittest.main()
