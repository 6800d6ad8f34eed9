"""Contributor License Agreement lookups against the external CLA service.

The service answers ``GET <base><identifier>`` with a JSON string body:
``"TRUE"`` when an agreement is on file, ``"FALSE"`` when none is. Anything
else, including transport failures, means the status is unknown. Lookups
never raise: an unavailable authority must not abort validation.
"""

from __future__ import annotations

import logging
from enum import Enum
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)


class ClaStatus(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    UNKNOWN = "unknown"


_RESPONSES = {'"TRUE"': ClaStatus.VALID, '"FALSE"': ClaStatus.INVALID}


class ClaAuthority:
    def __init__(self, base_url: str, timeout: float = 10, session: requests.Session | None = None):
        self._base_url = base_url
        self._timeout = timeout
        self._session = session or requests.Session()

    def lookup(self, identifier: str) -> ClaStatus:
        """Return the CLA status recorded for an email address or forge login."""
        url = self._base_url + quote(identifier, safe="@")
        try:
            response = self._session.get(url, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning("CLA lookup for %s failed (%s): %s", identifier, type(e).__name__, e)
            return ClaStatus.UNKNOWN

        status = _RESPONSES.get(response.text.strip(), ClaStatus.UNKNOWN)
        logger.debug("CLA lookup for %s: %s", identifier, status.value)
        return status
