"""Abstract record store interface.

Any storage backend (JSON file, SQLite, Gist) implements this interface.
The pipeline depends on AuditRecorder and the CLI on BaseStore, never on a
concrete backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prgate_store.models import AuditRecord


class StoreError(Exception):
    """A backend could not read or write a record."""


class BaseStore(ABC):
    """Key-value persistence for audit records: put once, get by key later."""

    @abstractmethod
    def save(self, record: AuditRecord) -> None:
        """Persist a record under ``record.key``. Raises StoreError on failure."""

    @abstractmethod
    def get(self, key: str) -> AuditRecord | None:
        """Return the record stored under ``key``, or None if there is none."""

    @abstractmethod
    def list_records(self, repo: str, pr_number: int | None = None) -> list[AuditRecord]:
        """Return records for a repo, oldest first, optionally filtered by PR number.

        Returns an empty list if no records exist.
        """

    def close(self) -> None:
        """Release any resources held by the store (connections, file handles).

        Optional. Subclasses that need cleanup should override this.
        Default is a no-op so callers can always call close() safely.
        """
