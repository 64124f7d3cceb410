import unittest

from audiotext.equalizer import (
    BANDS,
    FLAT,
    PRESETS_BY_NAME,
    Band,
    EqualizerSettings,
    Preset,
    Summary,
    apply_preset,
    formatted_summary,
    from_dict,
    from_percent,
    get_value,
    is_dirty,
    is_flat,
    matching_preset,
    percent_label,
    reset,
    set_value,
    to_dict,
    to_percent,
    tone_for,
)


class BandTableTests(unittest.TestCase):
    def test_band_order_and_ranges(self):
        self.assertEqual(
            [b.value for b in BANDS],
            ["lowShelf", "bass", "mid", "presence", "air", "preGain"],
        )
        self.assertEqual(Band.BASS.gain_range, (-12.0, 12.0))
        self.assertEqual(Band.PRE_GAIN.gain_range, (-6.0, 6.0))
        self.assertEqual(Band.MID.display_frequency, "1 kHz")
        self.assertEqual(Band.PRE_GAIN.title, "Output Gain")
        self.assertEqual(Band.AIR.step, 0.5)

    def test_settings_need_one_gain_per_band(self):
        with self.assertRaises(ValueError):
            EqualizerSettings((0.0, 0.0))


class SetValueTests(unittest.TestCase):
    def test_set_then_get_is_clamped(self):
        for value in (-100.0, -12.0, -3.5, 0.0, 3.3, 12.0, 40.0):
            settings = set_value(FLAT, Band.BASS, value)
            self.assertEqual(get_value(settings, Band.BASS), max(-12.0, min(12.0, value)))

        settings = set_value(FLAT, Band.PRE_GAIN, 9.0)
        self.assertEqual(get_value(settings, Band.PRE_GAIN), 6.0)

    def test_clamping_in_range_value_is_idempotent(self):
        once = set_value(FLAT, Band.MID, 4.5)
        twice = set_value(once, Band.MID, get_value(once, Band.MID))
        self.assertEqual(once, twice)

    def test_set_value_returns_new_settings(self):
        saved = set_value(FLAT, Band.AIR, 2.0)
        working = set_value(saved, Band.AIR, -2.0)
        self.assertEqual(get_value(saved, Band.AIR), 2.0)
        self.assertEqual(get_value(working, Band.AIR), -2.0)
        self.assertTrue(is_dirty(working, saved))
        self.assertFalse(is_dirty(saved, set_value(FLAT, Band.AIR, 2.0)))


class PresetTests(unittest.TestCase):
    def test_applied_preset_is_not_dirty_against_preset(self):
        working = set_value(FLAT, Band.BASS, 9.0)
        for preset in PRESETS_BY_NAME.values():
            applied = apply_preset(working, preset)
            self.assertFalse(is_dirty(applied, preset.settings))

    def test_short_preset_leaves_remaining_bands(self):
        settings = set_value(FLAT, Band.AIR, 5.0)
        applied = apply_preset(settings, Preset("Short", "", "", (3.0, 20.0)))
        self.assertEqual(get_value(applied, Band.LOW_SHELF), 3.0)
        self.assertEqual(get_value(applied, Band.BASS), 12.0)
        self.assertEqual(get_value(applied, Band.AIR), 5.0)

    def test_matching_preset(self):
        vocal = PRESETS_BY_NAME["Vocal Presence"]
        self.assertIs(matching_preset(vocal.settings), vocal)
        self.assertIs(matching_preset(FLAT), PRESETS_BY_NAME["Flat"])
        self.assertIsNone(matching_preset(set_value(vocal.settings, Band.MID, 0.0)))

    def test_reset_is_flat(self):
        self.assertTrue(is_flat(reset(PRESETS_BY_NAME["Broadcast"].settings)))


class FlatAndSummaryTests(unittest.TestCase):
    def test_flat_detection(self):
        self.assertTrue(is_flat(FLAT))
        for band in BANDS:
            self.assertFalse(is_flat(set_value(FLAT, band, 0.01)))

    def test_summary_classification(self):
        self.assertEqual(formatted_summary(FLAT), Summary.FLAT)

        bass = set_value(FLAT, Band.BASS, 8.0)
        self.assertEqual(formatted_summary(bass), Summary.TARGETED_BOOST)
        self.assertEqual(formatted_summary(bass).value, "Targeted boost")

        self.assertEqual(formatted_summary(set_value(FLAT, Band.MID, 0.5)), Summary.SUBTLE_ADJUSTMENTS)
        # Output gain alone is not a tonal change.
        self.assertEqual(
            formatted_summary(set_value(FLAT, Band.PRE_GAIN, 3.0)), Summary.SUBTLE_ADJUSTMENTS
        )

        two = set_value(set_value(FLAT, Band.BASS, 1.0), Band.AIR, -4.0)
        self.assertEqual(formatted_summary(two), Summary.TARGETED_BOOST)
        three = set_value(two, Band.MID, 2.0)
        self.assertEqual(formatted_summary(three), Summary.FULL_PROFILE)
        self.assertEqual(formatted_summary(PRESETS_BY_NAME["Broadcast"].settings), Summary.FULL_PROFILE)


class SerializationTests(unittest.TestCase):
    def test_round_trip_through_flat_record(self):
        settings = PRESETS_BY_NAME["Warm Tape"].settings
        record = to_dict(settings)
        self.assertEqual(record["lowShelf"], 2.5)
        self.assertEqual(set(record), {b.value for b in BANDS})
        self.assertEqual(from_dict(record), settings)

    def test_from_dict_is_lenient(self):
        settings = from_dict({"bass": 30, "mid": "loud", "unknown": 4.0, "preGain": "-2.5"})
        self.assertEqual(get_value(settings, Band.BASS), 12.0)
        self.assertEqual(get_value(settings, Band.MID), 0.0)
        self.assertEqual(get_value(settings, Band.PRE_GAIN), -2.5)
        self.assertEqual(get_value(settings, Band.AIR), 0.0)


class PercentTests(unittest.TestCase):
    def test_to_percent(self):
        self.assertEqual(to_percent(Band.BASS, 0.0), 50.0)
        self.assertEqual(to_percent(Band.BASS, 12.0), 100.0)
        self.assertEqual(to_percent(Band.BASS, -12.0), 0.0)
        self.assertEqual(to_percent(Band.BASS, 6.0), 75.0)
        self.assertEqual(to_percent(Band.PRE_GAIN, 3.0), 75.0)
        self.assertEqual(to_percent(Band.PRE_GAIN, 50.0), 100.0)

    def test_from_percent(self):
        self.assertEqual(from_percent(Band.BASS, 50.0), 0.0)
        self.assertEqual(from_percent(Band.BASS, 75.0), 6.0)
        self.assertEqual(from_percent(Band.BASS, 25.0), -6.0)
        self.assertEqual(from_percent(Band.BASS, 150.0), 12.0)
        self.assertEqual(from_percent(Band.PRE_GAIN, 0.0), -6.0)

    def test_labels_and_tones(self):
        self.assertEqual(percent_label(Band.MID, 0.0), "50%")
        self.assertEqual(percent_label(Band.MID, -6.0), "25%")
        self.assertEqual(tone_for(Band.MID, -6.0), "reduced")
        self.assertEqual(tone_for(Band.MID, 0.0), "neutral")
        self.assertEqual(tone_for(Band.MID, 6.0), "boosted")


if __name__ == "__main__":
    unittest.main()
