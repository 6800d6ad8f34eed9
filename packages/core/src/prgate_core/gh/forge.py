"""The forge calls the validation pipeline needs, on top of PyGithub."""

from __future__ import annotations

import logging
from contextlib import contextmanager

import requests
from github import Github, GithubException

from prgate_core.errors import ExternalCallFailure
from prgate_core.models import Commit, CommitterIdentity, PullRequestEvent, StatusHistoryEntry, StatusReport

logger = logging.getLogger(__name__)


@contextmanager
def _forge_call(step: str):
    try:
        yield
    except (GithubException, requests.RequestException) as e:
        raise ExternalCallFailure(step, f"{type(e).__name__}: {e}") from e


class GitHubForge:
    def __init__(self, token: str | None, base_url: str = "https://api.github.com", timeout: float = 10, gh=None):
        self._gh = gh if gh is not None else Github(token, base_url=base_url, timeout=timeout)
        self._repos: dict = {}

    def _repo(self, full_name: str):
        if full_name not in self._repos:
            self._repos[full_name] = self._gh.get_repo(full_name)
        return self._repos[full_name]

    def get_commits(self, event: PullRequestEvent) -> list[Commit]:
        """Return the pull request's commits, oldest first."""
        with _forge_call("fetch commits"):
            pr = self._repo(event.repository_full_name).get_pull(event.number)
            return [_to_commit(c) for c in pr.get_commits()]

    def get_status_history(self, event: PullRequestEvent, sha: str, exclude_prefix: str) -> list[StatusHistoryEntry]:
        """Return statuses on ``sha`` except those whose target URL starts with ``exclude_prefix``."""
        prefix = exclude_prefix.lower()
        with _forge_call("fetch status history"):
            statuses = list(self._repo(event.repository_full_name).get_commit(sha).get_statuses())

        history = []
        for s in statuses:
            target_url = s.target_url or ""
            if target_url.lower().startswith(prefix):
                continue
            history.append(
                StatusHistoryEntry(
                    url=s.url,
                    created_at=s.created_at.isoformat() if s.created_at else "",
                    description=s.description or "",
                    state=s.state,
                    target_url=target_url,
                )
            )
        return history

    def set_commit_status(self, event: PullRequestEvent, report: StatusReport) -> None:
        logger.info("%s status update url: %s", event.log_prefix, report.target_url)
        with _forge_call("report status"):
            self._repo(event.repository_full_name).get_commit(report.sha).create_status(
                state=report.state,
                target_url=report.detail_url,
                description=report.description,
                context=report.context,
            )

    def add_comment(self, event: PullRequestEvent, body: str) -> None:
        logger.info("%s comment url: %s", event.log_prefix, event.comments_url)
        with _forge_call("post comment"):
            self._repo(event.repository_full_name).get_pull(event.number).create_issue_comment(body)

    def get_user_email(self, login: str) -> str | None:
        """Return the public email of a forge account, or None if it has none."""
        with _forge_call("resolve sender"):
            return self._gh.get_user(login).email or None


def _to_commit(gh_commit) -> Commit:
    git_committer = gh_commit.commit.committer
    # None when the git identity is not linked to any GitHub account.
    gh_user = gh_commit.committer
    return Commit(
        sha=gh_commit.sha,
        committer=CommitterIdentity(
            name=git_committer.name or "",
            email=git_committer.email or "",
            login=gh_user.login if gh_user is not None else None,
        ),
        message=gh_commit.commit.message or "",
    )
