"""HTTP transport for the backend function API.

Reads (``/api/query``) are idempotent and retried on timeouts and dropped
connections; writes (``/api/mutation``) go out exactly once, since a lost
response cannot tell whether the backend already applied the change.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests import exceptions as req_exc

from kept.adapters.api_errors import ApiTimeoutError

log = logging.getLogger(__name__)

TRANSPORT_FAILURES = (req_exc.Timeout, req_exc.ConnectionError)


@dataclass
class HttpConfig:
    request_timeout_s: int = 10
    retries: int = 2  # extra attempts for reads

    def attempts(self, *, retry: bool) -> int:
        return max(1, self.retries + 1) if retry else 1


class FunctionTransport:
    """One ``requests.Session`` shared by all calls of an adapter.

    ``auth_token`` is sent as ``Authorization: Bearer``; without it calls are
    anonymous.
    """

    def __init__(self, auth_token: Optional[str], cfg: HttpConfig) -> None:
        self.session = requests.Session()
        self.auth_token = auth_token
        self.cfg = cfg

    def headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    def post(self, url: str, body: Dict[str, Any], *, retry: bool) -> requests.Response:
        """POST ``body`` as JSON, retrying transport failures when ``retry``.

        Raises ``ApiTimeoutError`` once every attempt failed without a response.
        HTTP error statuses are returned to the caller untouched.
        """
        data = json.dumps(body)
        attempts = self.cfg.attempts(retry=retry)
        for attempt in range(1, attempts + 1):
            try:
                return self.session.post(
                    url, data=data, headers=self.headers(), timeout=self.cfg.request_timeout_s
                )
            except TRANSPORT_FAILURES as exc:
                log.debug("No response from %s (attempt %d/%d): %s", url, attempt, attempts, exc)
        raise ApiTimeoutError(
            f"No response from {url} after {attempts} attempt(s)", context=body.get("path")
        )


__all__ = ["FunctionTransport", "HttpConfig", "TRANSPORT_FAILURES"]
