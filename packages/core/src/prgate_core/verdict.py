"""Fold a Classification into a pull-request state and status description."""

from __future__ import annotations

from prgate_core.models import FAILURE_BUCKETS, Bucket, Classification

# GitHub rejects status descriptions longer than this.
MAX_DESCRIPTION_LENGTH = 140
_TRUNCATION_MARKER = "..."

# Problem fragments are listed in this order; each maps to a message catalog key.
_PROBLEM_FRAGMENTS = (
    (Bucket.INVALID_CLA, "bad_clas"),
    (Bucket.UNKNOWN_CLA, "unknown_users"),
    (Bucket.INVALID_SIGNED_OFF, "bad_signatures"),
    (Bucket.UNKNOWN_SIGNED_OFF, "missing_signatures"),
)


def derive_state(classification: Classification) -> str:
    """Return "success" only when nothing failed and at least one check passed."""
    if any(classification[b] for b in FAILURE_BUCKETS):
        return "failure"
    if classification[Bucket.VALID_CLA] or classification[Bucket.VALID_SIGNED_OFF]:
        return "success"
    return "failure"


def compose_message(classification: Classification, messages: dict) -> str:
    parts = [
        messages[key] + ", ".join(classification[bucket])
        for bucket, key in _PROBLEM_FRAGMENTS
        if classification[bucket]
    ]

    if parts:
        parts.insert(0, messages["failure"])
    elif classification[Bucket.VALID_CLA] and classification[Bucket.VALID_SIGNED_OFF]:
        parts.insert(0, messages["success"])
    else:
        # No commits, or nothing resolvable either way.
        parts.insert(0, messages["unknown"])

    return "\n".join(parts)


def truncate_description(message: str, limit: int = MAX_DESCRIPTION_LENGTH) -> str:
    if len(message) <= limit:
        return message
    return message[: limit - len(_TRUNCATION_MARKER)] + _TRUNCATION_MARKER
