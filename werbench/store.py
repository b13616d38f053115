"""
ExperimentStore — SQLite-backed experiment history.

The WER engine holds no state; finished experiments are persisted here so
the dashboard and the CLI history survive restarts. An undefined WER is
written as NULL and read back as math.inf.
"""
from __future__ import annotations

import logging
import math
import sqlite3
import threading
from pathlib import Path

from werbench.errors import StoreError
from werbench.experiments import Experiment
from werbench.wer import WerResult

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS experiments (
    id               TEXT    PRIMARY KEY,
    timestamp        REAL    NOT NULL,
    reference_text   TEXT    NOT NULL,
    hypothesis_text  TEXT    NOT NULL,
    model_name       TEXT    NOT NULL,
    analysis         TEXT,
    audio_path       TEXT,
    wer              REAL,
    distance         INTEGER NOT NULL,
    substitutions    INTEGER NOT NULL,
    deletions        INTEGER NOT NULL,
    insertions       INTEGER NOT NULL,
    reference_words  INTEGER NOT NULL,
    hypothesis_words INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_experiments_time ON experiments(timestamp);
"""

_COLUMNS = (
    "id, timestamp, reference_text, hypothesis_text, model_name, analysis, audio_path, "
    "wer, distance, substitutions, deletions, insertions, reference_words, hypothesis_words"
)


class ExperimentStore:
    """
    Thread-safe: one lock guards the shared connection.
    """

    def __init__(self, db_path: str | Path):
        self._path = Path(db_path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(str(self._path), check_same_thread=False)
        except sqlite3.Error as e:
            logger.error("Cannot open experiment database %s: %s", self._path, e)
            raise StoreError(f"cannot open experiment database {self._path}: {e}") from e
        try:
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA synchronous=NORMAL")
            self._conn.executescript(_SCHEMA)
            self._conn.commit()
        except sqlite3.Error as e:
            self._conn.close()
            logger.error("Experiment database %s is unusable: %s", self._path, e)
            raise StoreError(f"experiment database {self._path} is unusable: {e}") from e
        logger.info("ExperimentStore opened: %d experiment(s) in %s", self.count(), self._path)

    # ── Public API ───────────────────────────────────────────────────────────

    def save(self, experiment: Experiment) -> None:
        """Insert or replace by id."""
        r = experiment.result
        row = (
            experiment.id, experiment.timestamp, experiment.reference_text,
            experiment.hypothesis_text, experiment.model_name, experiment.analysis,
            experiment.audio_path, r.wer if r.is_defined else None, r.distance,
            r.substitutions, r.deletions, r.insertions, r.reference_words, r.hypothesis_words,
        )
        with self._lock:
            with self._conn:
                self._conn.execute(
                    f"INSERT OR REPLACE INTO experiments ({_COLUMNS}) "
                    "VALUES (?,?,?,?,?,?,?,?,?,?,?,?,?,?)",
                    row,
                )
        logger.debug("Saved experiment %s", experiment.id)

    def get(self, experiment_id: str) -> Experiment | None:
        with self._lock:
            row = self._conn.execute(
                f"SELECT {_COLUMNS} FROM experiments WHERE id = ?", (experiment_id,)
            ).fetchone()
        return _row_to_experiment(row) if row else None

    def list(self, limit: int | None = None) -> list[Experiment]:
        """Newest first."""
        sql = f"SELECT {_COLUMNS} FROM experiments ORDER BY timestamp DESC, id DESC"
        params: tuple = ()
        if limit is not None:
            sql += " LIMIT ?"
            params = (limit,)
        with self._lock:
            rows = self._conn.execute(sql, params).fetchall()
        return [_row_to_experiment(row) for row in rows]

    def delete(self, experiment_id: str) -> bool:
        """Returns True if a row was removed."""
        with self._lock:
            with self._conn:
                cur = self._conn.execute("DELETE FROM experiments WHERE id = ?", (experiment_id,))
        if cur.rowcount:
            logger.info("Deleted experiment %s", experiment_id)
        return cur.rowcount > 0

    def count(self) -> int:
        with self._lock:
            return self._conn.execute("SELECT COUNT(*) FROM experiments").fetchone()[0]

    def close(self) -> None:
        with self._lock:
            self._conn.close()


def _row_to_experiment(row: tuple) -> Experiment:
    (exp_id, ts, ref, hyp, model, analysis, audio_path,
     wer, distance, subs, dels, ins, ref_words, hyp_words) = row
    return Experiment(
        id=exp_id,
        timestamp=ts,
        reference_text=ref,
        hypothesis_text=hyp,
        result=WerResult(
            wer=math.inf if wer is None else wer,
            distance=distance,
            substitutions=subs,
            deletions=dels,
            insertions=ins,
            reference_words=ref_words,
            hypothesis_words=hyp_words,
        ),
        model_name=model,
        analysis=analysis,
        audio_path=audio_path,
    )
