"""GistStore — zero-infrastructure shared audit records via GitHub Gist.

Any organisation member can open the Gist to inspect why a pull request
failed validation, without access to the webhook host.

Data format: a single JSON file named `prgate_audit.json` inside the Gist.
The file contains a JSON object mapping audit key → record dict.
"""

from __future__ import annotations

import json
import logging

from prgate_store.base import BaseStore, StoreError
from prgate_store.models import AuditRecord

logger = logging.getLogger(__name__)

_GIST_FILENAME = "prgate_audit.json"


class GistStore(BaseStore):
    """Stores audit records in a GitHub Gist as one JSON object.

    save() reads the whole object, adds one key and writes it back, so it is
    suitable for hundreds or low thousands of records. For higher volume,
    switch to SQLiteStore.
    """

    def __init__(self, gist_id: str, token: str):
        from github import Github

        self._gist_id = gist_id
        self._gh = Github(token)

    def _get_gist(self):
        return self._gh.get_gist(self._gist_id)

    def save(self, record: AuditRecord) -> None:
        """Add one record to the Gist JSON file."""
        try:
            gist = self._get_gist()
            existing = self._read_records(gist)
            existing[record.key] = record.to_dict()
            gist.edit(files={_GIST_FILENAME: {"content": json.dumps(existing, indent=2)}})
        except Exception as e:
            # A status pointing at a record that was never written is worse
            # than no status, so the failure is surfaced to the recorder.
            raise StoreError(f"GistStore.save() failed ({type(e).__name__}): {e}") from e

    def get(self, key: str) -> AuditRecord | None:
        try:
            data = self._read_records(self._get_gist()).get(key)
        except Exception as e:
            logger.warning("GistStore.get() failed: %s", e)
            return None
        return AuditRecord.from_dict(data) if data is not None else None

    def list_records(self, repo: str, pr_number: int | None = None) -> list[AuditRecord]:
        """Return records for a repo, optionally filtered by PR."""
        try:
            records = self._read_records(self._get_gist())
        except Exception as e:
            logger.warning("GistStore.list_records() failed: %s", e)
            return []

        results = [AuditRecord.from_dict(r) for r in records.values() if r.get("repo") == repo]
        if pr_number is not None:
            results = [r for r in results if r.pr_number == pr_number]
        return sorted(results, key=lambda r: r.recorded_at)

    def _read_records(self, gist) -> dict:
        """Read the current JSON object from the Gist file, or return {}."""
        file_obj = gist.files.get(_GIST_FILENAME)
        if file_obj is None:
            return {}
        try:
            return json.loads(file_obj.content) or {}
        except (json.JSONDecodeError, AttributeError):
            return {}
