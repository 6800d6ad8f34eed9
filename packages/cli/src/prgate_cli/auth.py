"""GitHub token resolution.

Resolution order (stops at first success):
  1. PRGATE_GITHUB_TOKEN: a token dedicated to the validation bot, so it can
     post statuses under its own identity even where GITHUB_TOKEN is set
  2. GITHUB_TOKEN (CI / explicit override)
  3. `gh auth token` (GitHub CLI session, for running validations by hand)
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)

_TOKEN_ENV_VARS = ("PRGATE_GITHUB_TOKEN", "GITHUB_TOKEN")


def resolve_github_token() -> str | None:
    """Return a GitHub token or None if no valid source is available.

    Never raises. Callers should check for None and emit a UsageError.
    """
    for var in _TOKEN_ENV_VARS:
        token = os.environ.get(var)
        if token:
            return token

    try:
        result = subprocess.run(["gh", "auth", "token"], capture_output=True, text=True, timeout=5)
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None

    token = result.stdout.strip() if result.returncode == 0 else ""
    if token:
        logger.debug("Resolved GitHub token via gh CLI session.")
        return token
    return None
