"""Value types for one pull-request validation pass.

Built from webhook payloads and forge responses at the edges; nothing here
talks to the network.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class EventAction(str, Enum):
    OPENED = "opened"
    CLOSED = "closed"
    REOPENED = "reopened"
    SYNCHRONIZE = "synchronize"
    EDITED = "edited"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | None) -> "EventAction":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class Bucket(str, Enum):
    """The six classification buckets a committer identifier can land in."""

    VALID_CLA = "valid_cla"
    INVALID_CLA = "invalid_cla"
    UNKNOWN_CLA = "unknown_cla"
    VALID_SIGNED_OFF = "valid_signed_off"
    INVALID_SIGNED_OFF = "invalid_signed_off"
    UNKNOWN_SIGNED_OFF = "unknown_signed_off"


FAILURE_BUCKETS = (
    Bucket.INVALID_CLA,
    Bucket.UNKNOWN_CLA,
    Bucket.INVALID_SIGNED_OFF,
    Bucket.UNKNOWN_SIGNED_OFF,
)


@dataclass(frozen=True)
class CommitterIdentity:
    name: str
    email: str
    login: str | None = None  # None when the git identity maps to no forge account


@dataclass(frozen=True)
class Commit:
    sha: str
    committer: CommitterIdentity
    message: str


@dataclass(frozen=True)
class StatusHistoryEntry:
    """A status reported on a commit by some other service."""

    url: str
    created_at: str
    description: str
    state: str
    target_url: str

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "created_at": self.created_at,
            "description": self.description,
            "state": self.state,
            "target_url": self.target_url,
        }


@dataclass
class Classification:
    """Per-committer outcomes for one pull request, plus third-party status history.

    Insertion order is preserved in every bucket so composed messages are
    deterministic. The bucket does not deduplicate; DeduplicationFilter
    guarantees each committer is evaluated once.
    """

    buckets: dict[Bucket, list[str]] = field(default_factory=lambda: {b: [] for b in Bucket})
    status_history: list[StatusHistoryEntry] = field(default_factory=list)

    def add(self, bucket: Bucket, identifier: str) -> None:
        self.buckets[bucket].append(identifier)

    def __getitem__(self, bucket: Bucket) -> list[str]:
        return self.buckets[bucket]

    def to_dict(self) -> dict:
        """Return a detached snapshot suitable for persistence."""
        data: dict = {b.value: list(ids) for b, ids in self.buckets.items()}
        data["status_history"] = [h.to_dict() for h in self.status_history]
        return data


@dataclass(frozen=True)
class PullRequestEvent:
    action: EventAction
    number: int
    repository_full_name: str
    pull_request_url: str
    html_url: str
    commits_url: str
    statuses_url: str  # templated with {sha}
    comments_url: str
    title: str
    sender_login: str
    organization: str | None = None

    @property
    def log_prefix(self) -> str:
        return f"PULL REQUEST:{self.repository_full_name}:{self.number}"

    @classmethod
    def from_payload(cls, payload: dict) -> "PullRequestEvent":
        """Build an event from a GitHub ``pull_request`` webhook payload."""
        pr = payload.get("pull_request") or {}
        repo = payload.get("repository") or {}
        pr_url = pr.get("url", "")

        # Older payloads carry the org name on the repository; newer ones
        # send a separate organization object.
        organization = repo.get("organization")
        if not isinstance(organization, str):
            organization = (payload.get("organization") or {}).get("login")

        return cls(
            action=EventAction.parse(payload.get("action")),
            number=int(payload.get("number") or pr.get("number") or 0),
            repository_full_name=repo.get("full_name", ""),
            pull_request_url=pr_url,
            html_url=pr.get("html_url", ""),
            commits_url=pr.get("commits_url") or f"{pr_url}/commits",
            statuses_url=repo.get("statuses_url", ""),
            comments_url=pr.get("comments_url", ""),
            title=pr.get("title") or "",
            sender_login=(payload.get("sender") or {}).get("login", ""),
            organization=organization or None,
        )


@dataclass(frozen=True)
class Verdict:
    state: str  # "success" | "failure"
    message: str  # already truncated to the forge's description limit
    audit_key: str


@dataclass(frozen=True)
class StatusReport:
    """A commit status as submitted to the forge."""

    target_url: str  # statuses URL with {sha} substituted
    sha: str
    state: str
    detail_url: str
    context: str
    description: str


@dataclass(frozen=True)
class NotificationMessage:
    recipients: list[str]
    subject: str
    body: str
    cc: list[str] = field(default_factory=list)
