"""Audit record data model.

Decoupled from prgate_core's Classification type: the store persists the
plain dict snapshot the pipeline hands over, so a details page can render a
record without importing the core package.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class AuditRecord:
    """One pull-request evaluation, written once and never updated."""

    key: str
    repo: str
    pr_number: int
    head_sha: str
    state: str  # "success" | "failure"
    recorded_at: str  # ISO-8601 UTC timestamp
    classification: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "repo": self.repo,
            "pr_number": self.pr_number,
            "head_sha": self.head_sha,
            "state": self.state,
            "recorded_at": self.recorded_at,
            "classification": self.classification,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "AuditRecord":
        return cls(
            key=d.get("key", ""),
            repo=d.get("repo", ""),
            pr_number=d.get("pr_number", 0),
            head_sha=d.get("head_sha", ""),
            state=d.get("state", ""),
            recorded_at=d.get("recorded_at", ""),
            classification=d.get("classification") or {},
        )
