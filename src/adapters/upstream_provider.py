from __future__ import annotations

from typing import Any, Dict, Protocol


class UpstreamProvider(Protocol):
    """Abstract interface for the OAuth-protected upstream API.

    Implementations build the authorization URL, exchange one-time codes for
    access tokens, and issue credentialed reads against the resource API.
    """

    def authorization_url(self, *, state: str) -> str:
        ...

    def exchange_code(self, code: str) -> Dict[str, Any]:
        ...

    def fetch(self, path: str, *, token: str) -> Any:
        ...
