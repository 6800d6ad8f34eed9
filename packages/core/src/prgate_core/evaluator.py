"""Per-committer CLA and signoff evaluation."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Protocol

from prgate_core.cla import ClaStatus
from prgate_core.models import Bucket, Classification, Commit

logger = logging.getLogger(__name__)

# Case-sensitive keyword; the trailer must end its line.
_SIGNOFF_RE = re.compile(r"Signed-off-by:(.*)<(.*@.*)>$", re.MULTILINE)


class ClaLookup(Protocol):
    def lookup(self, identifier: str) -> ClaStatus: ...


@dataclass(frozen=True)
class Signoff:
    name: str
    email: str


def parse_signoff(message: str) -> Signoff | None:
    """Return the first ``Signed-off-by: Name <email>`` trailer in a commit message."""
    match = _SIGNOFF_RE.search(message or "")
    if match is None:
        return None
    return Signoff(name=match.group(1).strip(), email=match.group(2))


class DeduplicationFilter:
    """Lets each committer email through once per pipeline run."""

    def __init__(self):
        self._seen: set[str] = set()

    def should_evaluate(self, email: str) -> bool:
        if email in self._seen:
            return False
        self._seen.add(email)
        return True


class CommitterEvaluator:
    """Classifies one committer into the CLA and signoff buckets."""

    def __init__(self, authority: ClaLookup, classification: Classification):
        self._authority = authority
        self._classification = classification

    def evaluate(self, commit: Commit) -> None:
        self.evaluate_cla(commit)
        self.evaluate_signoff(commit)

    def evaluate_cla(self, commit: Commit) -> None:
        email = commit.committer.email
        login = commit.committer.login

        status = self._authority.lookup(email)
        if status is ClaStatus.VALID:
            self._classification.add(Bucket.VALID_CLA, email)
        elif status is ClaStatus.INVALID:
            # Some contributors signed the agreement under their forge handle
            # rather than the address they commit with.
            if login and self._authority.lookup(login) is ClaStatus.VALID:
                self._classification.add(Bucket.VALID_CLA, login)
            else:
                self._classification.add(Bucket.INVALID_CLA, email)
        else:
            self._classification.add(Bucket.UNKNOWN_CLA, email)

    def evaluate_signoff(self, commit: Commit) -> None:
        email = commit.committer.email
        login = commit.committer.login

        signoff = parse_signoff(commit.message)
        if signoff is None:
            self._classification.add(Bucket.UNKNOWN_SIGNED_OFF, email)
        elif signoff.email == email:
            self._classification.add(Bucket.VALID_SIGNED_OFF, email)
        elif login and signoff.name == login:
            self._classification.add(Bucket.VALID_SIGNED_OFF, login)
        else:
            logger.debug("Signoff %s <%s> does not match committer %s", signoff.name, signoff.email, email)
            self._classification.add(Bucket.INVALID_SIGNED_OFF, login or email)
