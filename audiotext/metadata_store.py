"""
SQLite-backed store for per-recording metadata.

Each recording is keyed by a stable identifier (its file name) and carries an
optional transcript and an optional saved equalizer profile. Equalizer
profiles are stored as a flat JSON object of band name -> dB gain.
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterator, Optional

from audiotext.config import METADATA_DB_NAME, data_dir
from audiotext.equalizer import FLAT, EqualizerSettings, from_dict, to_dict

logger = logging.getLogger(__name__)


@dataclass
class RecordingMetadata:
    transcript: Optional[str] = None
    equalizer: Optional[EqualizerSettings] = None
    updated_at: Optional[datetime] = None


def _parse_equalizer(recording_id: str, raw: Optional[str]) -> Optional[EqualizerSettings]:
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning("Ignoring corrupt equalizer profile for %s: %s", recording_id, e)
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring equalizer profile for %s: expected an object", recording_id)
        return None
    return from_dict(data)


def _row_to_metadata(row: sqlite3.Row) -> RecordingMetadata:
    updated_at = None
    if row["updated_at"]:
        try:
            updated_at = datetime.fromisoformat(row["updated_at"])
        except (ValueError, TypeError):
            updated_at = None
    return RecordingMetadata(
        transcript=row["transcript"],
        equalizer=_parse_equalizer(row["recording_id"], row["equalizer"]),
        updated_at=updated_at,
    )


class RecordingMetadataStore:
    """
    Thread-safe with one connection per thread.
    """

    SCHEMA_VERSION = 1

    def __init__(self, db_path: Optional[str] = None):
        if db_path is None:
            db_dir = data_dir()
            os.makedirs(db_dir, exist_ok=True)
            db_path = os.path.join(db_dir, METADATA_DB_NAME)

        self._db_path = db_path
        self._local = threading.local()
        self._init_schema()

    @property
    def db_path(self) -> str:
        return self._db_path

    def _get_connection(self) -> sqlite3.Connection:
        if not hasattr(self._local, "connection"):
            conn = sqlite3.connect(self._db_path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode = WAL")
            self._local.connection = conn
        return self._local.connection

    @contextmanager
    def _cursor(self) -> Iterator[sqlite3.Cursor]:
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            yield cursor
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()

    def _init_schema(self) -> None:
        with self._cursor() as cur:
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
                """
            )
            cur.execute("SELECT version FROM schema_version LIMIT 1")
            row = cur.fetchone()
            current_version = row["version"] if row else 0

            if current_version < 1:
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS recording_metadata (
                        recording_id TEXT PRIMARY KEY,
                        transcript TEXT,
                        equalizer TEXT,
                        updated_at TEXT
                    )
                    """
                )
                cur.execute("DELETE FROM schema_version")
                cur.execute(
                    "INSERT INTO schema_version (version) VALUES (?)",
                    (self.SCHEMA_VERSION,),
                )

    def get(self, recording_id: str) -> Optional[RecordingMetadata]:
        with self._cursor() as cur:
            cur.execute(
                "SELECT * FROM recording_metadata WHERE recording_id = ?",
                (recording_id,),
            )
            row = cur.fetchone()
        return _row_to_metadata(row) if row else None

    def load_all(self) -> Dict[str, RecordingMetadata]:
        with self._cursor() as cur:
            cur.execute("SELECT * FROM recording_metadata")
            rows = cur.fetchall()
        return {row["recording_id"]: _row_to_metadata(row) for row in rows}

    def equalizer_for(self, recording_id: str) -> EqualizerSettings:
        """Saved profile for the recording, or flat when none was saved."""
        metadata = self.get(recording_id)
        if metadata is None or metadata.equalizer is None:
            return FLAT
        return metadata.equalizer

    def save_equalizer(self, recording_id: str, settings: EqualizerSettings) -> None:
        payload = json.dumps(to_dict(settings), sort_keys=True)
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO recording_metadata (recording_id, equalizer, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(recording_id) DO UPDATE SET
                    equalizer = excluded.equalizer,
                    updated_at = excluded.updated_at
                """,
                (recording_id, payload, datetime.now().isoformat()),
            )
        logger.debug("Saved equalizer profile for %s", recording_id)

    def save_transcript(self, recording_id: str, transcript: Optional[str]) -> None:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO recording_metadata (recording_id, transcript, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(recording_id) DO UPDATE SET
                    transcript = excluded.transcript,
                    updated_at = excluded.updated_at
                """,
                (recording_id, transcript, datetime.now().isoformat()),
            )

    def remove(self, recording_id: str) -> None:
        with self._cursor() as cur:
            cur.execute(
                "DELETE FROM recording_metadata WHERE recording_id = ?",
                (recording_id,),
            )

    def close(self) -> None:
        if hasattr(self._local, "connection"):
            self._local.connection.close()
            del self._local.connection
