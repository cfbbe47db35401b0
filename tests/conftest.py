from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import pytest

from src.adapters.upstream_provider import UpstreamProvider
from src.auth.credentials import InMemoryCredentialStore
from src.core.config import Settings


class FakeProvider(UpstreamProvider):
    """Records every call; token responses and API payloads are scripted per test."""

    def __init__(
        self,
        *,
        token_responses: Optional[Dict[str, Any]] = None,
        payloads: Optional[Dict[str, Any]] = None,
    ):
        self.token_responses = token_responses or {}
        self.payloads = payloads or {}
        self.exchanges: List[str] = []
        self.fetches: List[Tuple[str, str]] = []
        self.states: List[str] = []

    def authorization_url(self, *, state: str) -> str:
        self.states.append(state)
        return f"https://github.example/login/oauth/authorize?client_id=cid&state={state}"

    def exchange_code(self, code: str) -> Dict[str, Any]:
        self.exchanges.append(code)
        result = self.token_responses.get(code, {"access_token": f"token-for-{code}"})
        if isinstance(result, Exception):
            raise result
        return result

    def fetch(self, path: str, *, token: str) -> Any:
        self.fetches.append((path, token))
        result = self.payloads.get(path, {})
        if isinstance(result, Exception):
            raise result
        return result


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def settings() -> Settings:
    return Settings(
        github_client_id="cid",
        github_client_secret="secret",
        base_url="https://bridge.example",
    )


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider(
        payloads={
            "/user/repos": [{"id": 1, "name": "repo-a"}],
            "/user": {"login": "octocat", "id": 583231},
        }
    )


@pytest.fixture
def store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
