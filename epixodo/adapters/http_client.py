"""Shared HTTP transport for the backend REST adapter.

Wraps ``requests.Session`` so the adapter has one place that applies the
request timeout, the optional transport retry count, and the per-call
``Authorization`` header.

Dependencies:
    - ``requests`` for network I/O.
    - ``epixodo.adapters.api_errors.ApiTimeoutError`` for typed transport failures.

Call context:
    - Constructed by ``epixodo/adapters/pocketbase_rest.py``.
    - Used only inside adapter methods; use cases interact through ports.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import requests
from requests import exceptions as req_exc

from epixodo.adapters.api_errors import ApiTimeoutError

LOGGER = logging.getLogger(__name__)


@dataclass
class HttpConfig:
    """Timeout and retry configuration for backend calls.

    Attributes:
        request_timeout_s: Timeout in seconds for every JSON API call.
        retries: Extra attempts after a timeout/connection failure. Defaults to
            zero: a failed list fetch or submit surfaces to the user directly.
    """

    request_timeout_s: float = 10
    retries: int = 0


class RetryingSession:
    """Transport-only ``requests`` wrapper.

    Callers pass absolute URLs and the session token for each call; the
    wrapper keeps no credential of its own.
    """

    def __init__(self, cfg: Optional[HttpConfig] = None) -> None:
        self.session = requests.Session()
        self.cfg = cfg or HttpConfig()

    @staticmethod
    def _headers(token: Optional[str], json_body: bool = False) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if token:
            # The backend expects the bare token, without a "Bearer" prefix.
            headers["Authorization"] = token
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _send(
        self,
        method: str,
        url: str,
        *,
        token: Optional[str],
        params: Optional[Mapping[str, Any]] = None,
        json_body: Optional[Mapping[str, Any]] = None,
    ) -> requests.Response:
        """Send one request, retrying only timeout/connectivity failures.

        Raises:
            ApiTimeoutError: If every attempt fails at the transport level.
        """
        context = f"{method} {url}"
        data = None if json_body is None else json.dumps(dict(json_body))
        last_err: ApiTimeoutError | None = None
        attempts = max(int(self.cfg.retries), 0) + 1
        for attempt in range(attempts):
            try:
                return self.session.request(
                    method,
                    url,
                    params=dict(params) if params else None,
                    data=data,
                    headers=self._headers(token, json_body=json_body is not None),
                    timeout=self.cfg.request_timeout_s,
                )
            except (req_exc.Timeout, req_exc.ConnectionError) as exc:
                LOGGER.debug("%s failed on attempt %d/%d: %s", context, attempt + 1, attempts, exc)
                last_err = ApiTimeoutError(f"Timeout contacting {url}", context=context)
        raise last_err

    def get(
        self,
        url: str,
        *,
        token: Optional[str] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> requests.Response:
        return self._send("GET", url, token=token, params=params)

    def post(
        self,
        url: str,
        *,
        token: Optional[str] = None,
        json_body: Optional[Mapping[str, Any]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> requests.Response:
        return self._send("POST", url, token=token, params=params, json_body=json_body or {})

    def patch(
        self,
        url: str,
        *,
        token: Optional[str] = None,
        json_body: Optional[Mapping[str, Any]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> requests.Response:
        return self._send("PATCH", url, token=token, params=params, json_body=json_body or {})

    def delete(self, url: str, *, token: Optional[str] = None) -> requests.Response:
        return self._send("DELETE", url, token=token)


__all__ = ["HttpConfig", "RetryingSession"]
