"""SQLiteStore — local file-based audit store.

Schema:
  audit_records — one row per pull-request evaluation, keyed by the opaque
                  audit key. The classification snapshot is stored as JSON.
"""

from __future__ import annotations

import json
import logging
import sqlite3

from prgate_store.base import BaseStore, StoreError
from prgate_store.models import AuditRecord

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS audit_records (
    key                 TEXT PRIMARY KEY,
    repo                TEXT NOT NULL,
    pr_number           INTEGER NOT NULL,
    head_sha            TEXT,
    state               TEXT,
    recorded_at         TEXT,
    classification_json TEXT DEFAULT '{}'
);
CREATE INDEX IF NOT EXISTS idx_audit_repo ON audit_records (repo);
CREATE INDEX IF NOT EXISTS idx_audit_pr   ON audit_records (repo, pr_number);
"""


class SQLiteStore(BaseStore):
    """Stores audit records in a local SQLite database file.

    The database file path defaults to `.prgate.db` in the current working
    directory. Configure via .prgate.yml: `store_path: /path/to/prgate.db`.
    """

    def __init__(self, db_path: str = ".prgate.db"):
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def save(self, record: AuditRecord) -> None:
        try:
            self._conn.execute(
                """
                INSERT INTO audit_records
                  (key, repo, pr_number, head_sha, state, recorded_at, classification_json)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.key,
                    record.repo,
                    record.pr_number,
                    record.head_sha,
                    record.state,
                    record.recorded_at,
                    json.dumps(record.classification),
                ),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            # Records are written once; a duplicate key is an error too.
            raise StoreError(f"SQLiteStore.save() failed: {e}") from e

    def get(self, key: str) -> AuditRecord | None:
        row = self._conn.execute("SELECT * FROM audit_records WHERE key=?", (key,)).fetchone()
        return self._row_to_record(row) if row is not None else None

    def list_records(self, repo: str, pr_number: int | None = None) -> list[AuditRecord]:
        if pr_number is not None:
            rows = self._conn.execute(
                "SELECT * FROM audit_records WHERE repo=? AND pr_number=? ORDER BY recorded_at",
                (repo, pr_number),
            ).fetchall()
        else:
            rows = self._conn.execute(
                "SELECT * FROM audit_records WHERE repo=? ORDER BY recorded_at",
                (repo,),
            ).fetchall()

        return [self._row_to_record(r) for r in rows]

    def close(self) -> None:
        self._conn.close()

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> AuditRecord:
        return AuditRecord(
            key=row["key"],
            repo=row["repo"],
            pr_number=row["pr_number"],
            head_sha=row["head_sha"] or "",
            state=row["state"] or "",
            recorded_at=row["recorded_at"] or "",
            classification=json.loads(row["classification_json"] or "{}"),
        )
