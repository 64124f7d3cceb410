import os
import tempfile
import unittest
from unittest import mock

from audiotext.equalizer import FLAT, PRESETS_BY_NAME, Band, set_value
from audiotext.metadata_store import RecordingMetadataStore


class RecordingMetadataStoreTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.store = RecordingMetadataStore(os.path.join(self._tmp.name, "meta.db"))

    def tearDown(self):
        self.store.close()
        self._tmp.cleanup()

    def test_unknown_recording_is_flat(self):
        self.assertIsNone(self.store.get("nothing.m4a"))
        self.assertEqual(self.store.equalizer_for("nothing.m4a"), FLAT)

    def test_save_and_reload_equalizer(self):
        settings = set_value(PRESETS_BY_NAME["Vocal Presence"].settings, Band.BASS, 4.5)
        self.store.save_equalizer("take1.m4a", settings)
        self.store.close()

        reopened = RecordingMetadataStore(self.store.db_path)
        try:
            self.assertEqual(reopened.equalizer_for("take1.m4a"), settings)
            self.assertIsNotNone(reopened.get("take1.m4a").updated_at)
        finally:
            reopened.close()

    def test_transcript_and_equalizer_are_independent(self):
        self.store.save_transcript("take2.m4a", "hello world")
        self.store.save_equalizer("take2.m4a", PRESETS_BY_NAME["Broadcast"].settings)
        meta = self.store.get("take2.m4a")
        self.assertEqual(meta.transcript, "hello world")
        self.assertEqual(meta.equalizer, PRESETS_BY_NAME["Broadcast"].settings)

        self.store.save_equalizer("take2.m4a", FLAT)
        self.assertEqual(self.store.get("take2.m4a").transcript, "hello world")

    def test_remove_and_load_all(self):
        self.store.save_transcript("a.m4a", "a")
        self.store.save_transcript("b.m4a", "b")
        self.store.remove("a.m4a")
        everything = self.store.load_all()
        self.assertEqual(set(everything), {"b.m4a"})
        self.assertIsNone(everything["b.m4a"].equalizer)

    def test_corrupt_profile_is_ignored(self):
        with self.store._cursor() as cur:
            cur.execute(
                "INSERT INTO recording_metadata (recording_id, equalizer) VALUES (?, ?)",
                ("bad.m4a", "{not json"),
            )
        with self.assertLogs("audiotext.metadata_store", level="WARNING"):
            meta = self.store.get("bad.m4a")
        self.assertIsNone(meta.equalizer)
        with self.assertLogs("audiotext.metadata_store", level="WARNING"):
            self.assertEqual(self.store.equalizer_for("bad.m4a"), FLAT)

    def test_default_location_uses_data_dir(self):
        with tempfile.TemporaryDirectory() as td:
            with mock.patch.dict(os.environ, {"AUDIOTEXT_DATA_DIR": os.path.join(td, "data")}):
                store = RecordingMetadataStore()
                try:
                    self.assertTrue(store.db_path.startswith(os.path.join(td, "data")))
                    self.assertTrue(os.path.exists(store.db_path))
                finally:
                    store.close()


if __name__ == "__main__":
    unittest.main()
