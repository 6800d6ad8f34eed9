"""JSONFileStore — audit records in one local JSON file.

Data format: one JSON object mapping audit key → record dict. The whole file
is rewritten on every save, which is fine for the volume one webhook
endpoint produces; switch to SQLiteStore for heavier use.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

from prgate_store.base import BaseStore, StoreError
from prgate_store.models import AuditRecord


class JSONFileStore(BaseStore):
    def __init__(self, path: str = ".prgate.json"):
        self._path = Path(path)

    def save(self, record: AuditRecord) -> None:
        records = self._read()
        if record.key in records:
            raise StoreError(f"record {record.key} already exists")
        records[record.key] = record.to_dict()

        # Write to a sibling file and swap it in so readers never see half a file.
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            tmp.write_text(json.dumps(records, indent=2), encoding="utf-8")
            os.replace(tmp, self._path)
        except OSError as e:
            raise StoreError(f"JSONFileStore.save() failed: {e}") from e

    def get(self, key: str) -> AuditRecord | None:
        data = self._read().get(key)
        return AuditRecord.from_dict(data) if data is not None else None

    def list_records(self, repo: str, pr_number: int | None = None) -> list[AuditRecord]:
        results = [AuditRecord.from_dict(r) for r in self._read().values() if r.get("repo") == repo]
        if pr_number is not None:
            results = [r for r in results if r.pr_number == pr_number]
        return sorted(results, key=lambda r: r.recorded_at)

    def _read(self) -> dict:
        """Read the current JSON object from disk, or return {}."""
        if not self._path.exists():
            return {}
        try:
            return json.loads(self._path.read_text(encoding="utf-8")) or {}
        except (json.JSONDecodeError, OSError) as e:
            raise StoreError(f"JSONFileStore could not read {self._path}: {e}") from e
