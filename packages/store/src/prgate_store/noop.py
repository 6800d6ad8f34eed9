"""No-op store — the default when no store is configured.

Statuses are still reported to GitHub with a details link, but the link
leads nowhere. Using a NoOpStore rather than None lets the recorder always
call store.save() without conditional checks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from prgate_store.base import BaseStore

if TYPE_CHECKING:
    from prgate_store.models import AuditRecord


class NoOpStore(BaseStore):
    """Silently discards all records."""

    def save(self, record: AuditRecord) -> None:
        pass  # intentional no-op

    def get(self, key: str) -> AuditRecord | None:
        return None

    def list_records(self, repo: str, pr_number: int | None = None) -> list[AuditRecord]:
        return []
