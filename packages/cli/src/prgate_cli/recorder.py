"""Audit recording for the validation pipeline, backed by a prgate-store backend."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from prgate_core.errors import ExternalCallFailure
from prgate_store.base import BaseStore, StoreError
from prgate_store.models import AuditRecord

logger = logging.getLogger(__name__)


class AuditRecorder:
    """Persists each evaluation's classification under a fresh opaque key."""

    def __init__(self, store: BaseStore):
        self._store = store

    def record(self, classification: dict, *, repo: str, pr_number: int, head_sha: str, state: str) -> str:
        key = uuid.uuid4().hex
        record = AuditRecord(
            key=key,
            repo=repo,
            pr_number=pr_number,
            head_sha=head_sha,
            state=state,
            recorded_at=datetime.now(timezone.utc).isoformat(),
            classification=classification,
        )
        try:
            self._store.save(record)
        except StoreError as e:
            raise ExternalCallFailure("record audit", str(e)) from e
        logger.info("Recorded audit %s for %s#%d", key, repo, pr_number)
        return key
