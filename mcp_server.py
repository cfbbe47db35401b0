from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse, StreamingResponse
from starlette.concurrency import run_in_threadpool
from typing import Any, Optional
import functools
import uvicorn
import json
import logging
from datetime import datetime

from src.adapters.credential_store import CredentialStore
from src.adapters.upstream_provider import UpstreamProvider
from src.api.models import ErrorResponse, HealthResponse, ToolManifest
from src.auth.credentials import InMemoryCredentialStore
from src.auth.flow import AuthorizationFlow
from src.core.config import Settings, get_settings
from src.core.constants import SERVICE_VERSION, SESSION_HEADER
from src.core.errors import BridgeError, UnknownProviderError
from src.core.github_client import GitHubClient
from src.tools import service as tool_service
from src.tools.registry import build_manifest, tool_names
from src.tools.sse import SSE_HEADERS, stream_manifest

logger = logging.getLogger(__name__)

PROVIDERS = ("github",)


def _check_provider(provider: str) -> None:
    if provider not in PROVIDERS:
        raise UnknownProviderError("Unknown provider")


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[CredentialStore] = None,
    provider: Optional[UpstreamProvider] = None,
) -> FastAPI:
    """Wire the auth flow, discovery channel and tool routes into one app."""
    s = settings or get_settings()
    store = store or InMemoryCredentialStore(
        ttl_seconds=s.credential_ttl_seconds,
        pending_ttl_seconds=s.pending_state_ttl_seconds,
    )
    provider = provider or GitHubClient(
        client_id=s.github_client_id,
        client_secret=s.github_client_secret,
        callback_url=s.callback_url,
        api_url=s.github_api_url,
        scopes=list(s.github_scopes),
        timeout_s=s.http_timeout_seconds,
    )
    flow = AuthorizationFlow(
        provider=provider,
        store=store,
        client_id=s.github_client_id,
        client_secret=s.github_client_secret,
    )
    # Fail at startup rather than on first discovery if a descriptor is malformed
    ToolManifest.model_validate(build_manifest())

    app = FastAPI(
        title="GitHub MCP Tool Bridge",
        description="Streams GitHub tool definitions over SSE and runs them with a delegated OAuth token",
        version=SERVICE_VERSION,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(s.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = s
    app.state.store = store
    app.state.flow = flow

    @app.exception_handler(BridgeError)
    async def bridge_error_handler(request: Request, exc: BridgeError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        if exc.plain_text:
            return PlainTextResponse(exc.message, status_code=exc.status_code)
        return JSONResponse(content=exc.to_body(), status_code=exc.status_code)

    async def discovery(request: Request):
        """Open the discovery channel and push the tool manifest."""
        return StreamingResponse(
            stream_manifest(
                keepalive_seconds=s.sse_keepalive_seconds,
                max_lifetime_seconds=s.sse_max_lifetime_seconds,
                is_disconnected=request.is_disconnected,
            ),
            headers=SSE_HEADERS,
        )

    # Fronting infrastructure may rewrite /sse to /, so both serve discovery
    app.add_api_route("/sse", discovery, methods=["GET"])
    app.add_api_route("/", discovery, methods=["GET"])

    @app.get("/tools", response_model=ToolManifest)
    async def list_tools():
        """Manifest as plain JSON, for clients that cannot read SSE"""
        return build_manifest()

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """Health check endpoint"""
        return HealthResponse(
            status="online",
            config_loaded=bool(s.github_client_id and s.github_client_secret),
            authenticated=store.get(request.headers.get(SESSION_HEADER)) is not None,
            tools=tool_names(),
            timestamp=datetime.now().isoformat(),
        )

    @app.get("/auth/{provider_name}")
    def begin_authorization(provider_name: str):
        """Redirect the user to the provider's authorization page"""
        _check_provider(provider_name)
        return RedirectResponse(flow.begin_authorization(), status_code=302)

    @app.get("/auth/{provider_name}/callback")
    def complete_authorization(provider_name: str, code: Optional[str] = None, state: Optional[str] = None):
        """Exchange the one-time code for a credential"""
        _check_provider(provider_name)
        credential = flow.complete_authorization(code, state)
        return PlainTextResponse(
            "GitHub OAuth success! You can close this tab.",
            headers={SESSION_HEADER: credential.session_id},
        )

    @app.delete("/auth/{provider_name}", status_code=204)
    def sign_out(provider_name: str, request: Request):
        """Forget the stored credential"""
        _check_provider(provider_name)
        flow.sign_out(request.headers.get(SESSION_HEADER))
        return Response(status_code=204)

    @app.post(
        "/{tool_name}",
        responses={
            400: {"model": ErrorResponse},
            401: {"model": ErrorResponse},
            404: {"model": ErrorResponse},
            500: {"model": ErrorResponse},
        },
    )
    async def invoke_tool(tool_name: str, request: Request):
        """Invoke one advertised tool"""
        arguments = _arguments_from(await request.body())
        result = await run_in_threadpool(
            functools.partial(
                tool_service.execute,
                tool_name,
                arguments,
                store=store,
                provider=provider,
                session_id=request.headers.get(SESSION_HEADER),
                relay_upstream_errors=s.relay_upstream_errors,
            )
        )
        return JSONResponse(content=result)

    return app


def _arguments_from(raw: bytes) -> Any:
    """Decode the invocation body; anything that is not a JSON object is left for argument validation to reject."""
    if not raw or not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return raw.decode("utf-8", errors="replace")


settings = get_settings()
logging.basicConfig(level=settings.log_level)

app = create_app(settings)

if __name__ == "__main__":
    logger.info(f"MCP server with GitHub OAuth running on port {settings.port}")
    uvicorn.run(
        "mcp_server:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
