from __future__ import annotations

from typing import Any, Dict, List
from urllib.parse import parse_qs, urlparse

import pytest

from src.core.errors import UpstreamHTTPError
from src.core.github_client import GitHubClient


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, reason: str = "OK"):
        self.status_code = status_code
        self.reason = reason
        self._body = body

    def json(self) -> Any:
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class FakeSession:
    def __init__(self, response: FakeResponse):
        self.headers: Dict[str, str] = {}
        self.response = response
        self.calls: List[Dict[str, Any]] = []

    def post(self, url, **kwargs):
        self.calls.append({"method": "POST", "url": url, **kwargs})
        return self.response

    def get(self, url, **kwargs):
        self.calls.append({"method": "GET", "url": url, **kwargs})
        return self.response


def _client(response: FakeResponse) -> GitHubClient:
    return GitHubClient(
        client_id="cid",
        client_secret="secret",
        callback_url="https://bridge.example/auth/github/callback",
        api_url="https://api.github.example/",
        timeout_s=7,
        session=FakeSession(response),
    )


def test_authorization_url_encodes_request():
    client = _client(FakeResponse())
    url = urlparse(client.authorization_url(state="abc"))
    assert f"{url.scheme}://{url.netloc}{url.path}" == "https://github.com/login/oauth/authorize"
    query = parse_qs(url.query)
    assert query == {
        "client_id": ["cid"],
        "redirect_uri": ["https://bridge.example/auth/github/callback"],
        "scope": ["repo read:user"],
        "allow_signup": ["true"],
        "state": ["abc"],
    }


def test_exchange_code_posts_client_credentials():
    client = _client(FakeResponse(body={"access_token": "tok", "token_type": "bearer"}))
    assert client.exchange_code("C1")["access_token"] == "tok"
    call = client._session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "https://github.com/login/oauth/access_token"
    assert call["json"] == {"client_id": "cid", "client_secret": "secret", "code": "C1"}
    assert call["headers"]["Accept"] == "application/json"
    assert call["timeout"] == 7


def test_exchange_code_rejects_non_object_body():
    with pytest.raises(ValueError):
        _client(FakeResponse(body=["nope"])).exchange_code("C1")


def test_fetch_sends_token_and_user_agent():
    client = _client(FakeResponse(body=[{"id": 1, "name": "repo-a"}]))
    assert client.fetch("/user/repos", token="tok") == [{"id": 1, "name": "repo-a"}]
    call = client._session.calls[0]
    assert call["url"] == "https://api.github.example/user/repos"
    assert call["headers"]["Authorization"] == "token tok"
    assert client._session.headers["User-Agent"] == "mcp-server"


def test_fetch_raises_on_error_status():
    client = _client(FakeResponse(status_code=401, body={"message": "Bad credentials"}, reason="Unauthorized"))
    with pytest.raises(UpstreamHTTPError) as exc:
        client.fetch("/user", token="tok")
    assert exc.value.status_code == 401
    assert exc.value.message == "Bad credentials"


def test_fetch_error_without_json_body_uses_reason():
    client = _client(FakeResponse(status_code=502, body=ValueError("no json"), reason="Bad Gateway"))
    with pytest.raises(UpstreamHTTPError) as exc:
        client.fetch("/user", token="tok")
    assert exc.value.message == "Bad Gateway"
