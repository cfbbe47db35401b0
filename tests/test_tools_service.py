from __future__ import annotations

import json

import pytest
import requests

from src.core.errors import (
    InvalidArguments,
    Unauthenticated,
    UnknownToolError,
    UpstreamCallError,
    UpstreamHTTPError,
)
from src.tools import service
from src.tools.registry import TOOLS, ToolDefinition, build_manifest, manifest_json, tool_names, validate_arguments


def test_manifest_lists_every_registered_tool():
    manifest = build_manifest()
    assert manifest["message"] == "GitHub tools ready"
    assert set(manifest["tools"]) == {"listRepos", "getUser"} == set(tool_names())
    assert manifest["tools"]["listRepos"]["parameters"] == {"type": "object", "properties": {}, "required": []}


def test_manifest_is_stable():
    assert manifest_json() == manifest_json()
    assert json.loads(manifest_json()) == build_manifest()


@pytest.mark.parametrize("name", [t.name for t in TOOLS])
def test_invocation_without_credential_is_rejected_before_upstream(name, store, provider):
    with pytest.raises(Unauthenticated) as exc:
        service.execute(name, {}, store=store, provider=provider)
    assert exc.value.status_code == 401
    assert exc.value.to_body() == {"error": "GitHub OAuth required"}
    assert provider.fetches == []


def test_list_repos_relays_upstream_payload(store, provider):
    store.set("tok")
    result = service.execute("listRepos", None, store=store, provider=provider)
    assert result == [{"id": 1, "name": "repo-a"}]
    assert provider.fetches == [("/user/repos", "tok")]


def test_get_user_uses_named_session(store, provider):
    sid = store.begin_session()
    store.set("session-token", session_id=sid)
    store.set("other-token")
    service.execute("getUser", {}, store=store, provider=provider, session_id=sid)
    assert provider.fetches == [("/user", "session-token")]


def test_extra_arguments_are_ignored(store, provider):
    store.set("tok")
    service.execute("getUser", {"unexpected": True}, store=store, provider=provider)
    assert len(provider.fetches) == 1


def test_non_object_arguments_rejected_after_auth(store, provider):
    with pytest.raises(Unauthenticated):
        service.execute("getUser", "not json", store=store, provider=provider)
    store.set("tok")
    with pytest.raises(InvalidArguments):
        service.execute("getUser", "not json", store=store, provider=provider)
    assert provider.fetches == []


def test_unknown_tool(store, provider):
    store.set("tok")
    with pytest.raises(UnknownToolError):
        service.execute("deleteRepo", {}, store=store, provider=provider)


def test_network_failure_returns_generic_message(store, provider):
    store.set("tok")
    provider.payloads["/user/repos"] = requests.ConnectionError("connection reset by 10.0.0.5")
    with pytest.raises(UpstreamCallError) as exc:
        service.execute("listRepos", {}, store=store, provider=provider)
    assert exc.value.to_body() == {"error": "Failed to fetch repositories"}


def test_upstream_error_detail_relayed_only_when_enabled(store, provider):
    store.set("tok")
    provider.payloads["/user"] = UpstreamHTTPError(403, "API rate limit exceeded")
    with pytest.raises(UpstreamCallError) as exc:
        service.execute("getUser", {}, store=store, provider=provider)
    assert exc.value.to_body() == {"error": "Failed to fetch user"}

    with pytest.raises(UpstreamCallError) as exc:
        service.execute("getUser", {}, store=store, provider=provider, relay_upstream_errors=True)
    assert exc.value.to_body() == {
        "error": "Failed to fetch user",
        "upstream_status": 403,
        "upstream_message": "API rate limit exceeded",
    }


def test_upstream_401_clears_credential(store, provider):
    store.set("revoked")
    provider.payloads["/user"] = UpstreamHTTPError(401, "Bad credentials")
    with pytest.raises(Unauthenticated):
        service.execute("getUser", {}, store=store, provider=provider)
    assert store.get() is None


def test_validate_arguments_checks_required_and_types():
    tool = ToolDefinition(
        name="searchRepos",
        description="Search repositories",
        upstream_path="/search/repositories",
        failure_message="Failed to search",
        parameters={
            "type": "object",
            "properties": {"q": {"type": "string"}, "per_page": {"type": "integer"}},
            "required": ["q"],
        },
    )
    assert validate_arguments(tool, {"q": "mcp", "per_page": 5, "extra": 1}) == {"q": "mcp", "per_page": 5}
    with pytest.raises(InvalidArguments):
        validate_arguments(tool, {"per_page": 5})
    with pytest.raises(InvalidArguments):
        validate_arguments(tool, {"q": "mcp", "per_page": True})
    with pytest.raises(InvalidArguments):
        validate_arguments(tool, ["q"])


def test_upstream_401_keeps_credential_stored_during_call(store, provider):
    store.set("token-C1")

    class CallbackDuringFetch(type(provider)):
        def fetch(self, path, *, token):
            self.fetches.append((path, token))
            # a callback lands while this call is in flight
            store.set("token-C2")
            raise UpstreamHTTPError(401, "Bad credentials")

    racing = CallbackDuringFetch()
    with pytest.raises(Unauthenticated):
        service.execute("getUser", {}, store=store, provider=racing)
    assert racing.fetches == [("/user", "token-C1")]
    assert store.get().token == "token-C2"


def test_empty_tool_set_builds_empty_manifest():
    assert build_manifest(()) == {"message": "GitHub tools ready", "tools": {}}
