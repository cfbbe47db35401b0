"""Error taxonomy for the bridge.

Every failure is raised as a `BridgeError` subclass and converted to an HTTP
response by a single exception handler in `mcp_server.py`. Nothing here is
retried.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class BridgeError(RuntimeError):
    status_code: int = 500
    # Auth flow endpoints answer with plain text, tool endpoints with JSON
    plain_text: bool = False

    def __init__(self, message: str, *, detail: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail or {}

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        body.update(self.detail)
        return body


class ConfigurationError(BridgeError):
    status_code = 500
    plain_text = True


class MissingCodeError(BridgeError):
    status_code = 400
    plain_text = True


class InvalidStateError(BridgeError):
    status_code = 400
    plain_text = True


class ExchangeFailedError(BridgeError):
    status_code = 500
    plain_text = True


class UpstreamAuthError(BridgeError):
    status_code = 400


class InvalidArguments(BridgeError):
    status_code = 400


class Unauthenticated(BridgeError):
    status_code = 401


class UnknownToolError(BridgeError):
    status_code = 404


class UnknownProviderError(BridgeError):
    status_code = 404


class UpstreamCallError(BridgeError):
    status_code = 500


class UpstreamHTTPError(RuntimeError):
    """Raised by the upstream client when the API answers with a non-2xx status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"Upstream responded {status_code}: {message}")
        self.status_code = status_code
        self.message = message
