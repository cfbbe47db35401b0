"""GitHub client facade for the OAuth handshake and credentialed reads.

This module encapsulates the HTTP calls to GitHub's authorization server
(authorize URL, code-for-token exchange) and to the REST API. Business code
should go through this facade instead of issuing raw HTTP requests.

Each call is attempted exactly once and bounded by the configured timeout.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import requests

from .config import get_settings
from .errors import UpstreamHTTPError
from src.adapters.upstream_provider import UpstreamProvider


class GitHubClient(UpstreamProvider):
    def __init__(
        self,
        *,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        callback_url: Optional[str] = None,
        api_url: Optional[str] = None,
        scopes: Optional[List[str]] = None,
        timeout_s: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        cfg = get_settings()
        self.client_id = client_id if client_id is not None else cfg.github_client_id
        self.client_secret = client_secret if client_secret is not None else cfg.github_client_secret
        self.callback_url = callback_url or cfg.callback_url
        self.api_url = (api_url or cfg.github_api_url).rstrip("/")
        self.authorize_url = cfg.github_authorize_url
        self.token_url = cfg.github_token_url
        self.scopes = scopes or list(cfg.github_scopes)
        self.timeout_s = timeout_s or cfg.http_timeout_seconds

        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": cfg.user_agent})

        self._logger = logging.getLogger(__name__)

    def authorization_url(self, *, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.callback_url,
            "scope": " ".join(self.scopes),
            "allow_signup": "true",
            "state": state,
        }
        return f"{self.authorize_url}?{urlencode(params)}"

    def exchange_code(self, code: str) -> Dict[str, Any]:
        """POST the one-time code to the token endpoint and return the parsed body.

        The body may carry `error`/`error_description` instead of a token;
        interpreting it is the caller's job. Network and JSON errors propagate.
        """
        self._logger.info("github.oauth exchange")
        resp = self._session.post(
            self.token_url,
            json={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "code": code,
            },
            headers={"Accept": "application/json", "Content-Type": "application/json"},
            timeout=self.timeout_s,
        )
        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected token response type: {type(data).__name__}")
        return data

    def fetch(self, path: str, *, token: str) -> Any:
        url = f"{self.api_url}/{path.lstrip('/')}"
        self._logger.info("github.api call", extra={"path": path})
        resp = self._session.get(
            url,
            headers={"Authorization": f"token {token}", "Accept": "application/json"},
            timeout=self.timeout_s,
        )
        if resp.status_code >= 400:
            message = resp.reason or ""
            try:
                body = resp.json()
                if isinstance(body, dict) and body.get("message"):
                    message = str(body["message"])
            except ValueError:
                pass
            raise UpstreamHTTPError(resp.status_code, message)
        return resp.json()
