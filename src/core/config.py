"""Centralized configuration for the GitHub tool bridge.

This module consolidates environment-driven settings such as OAuth client
credentials, the externally reachable base address, upstream endpoints,
timeouts and discovery stream policy.

Other modules should import Settings via `get_settings()` and avoid
reading environment variables directly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv


# Load env once at import (idempotent if already loaded elsewhere)
load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    # OAuth client registered with the provider
    github_client_id: str = ""
    github_client_secret: str = ""

    # Server
    host: str = "0.0.0.0"
    port: int = 10000
    base_url: str = "http://localhost:10000"

    # Upstream endpoints
    github_authorize_url: str = "https://github.com/login/oauth/authorize"
    github_token_url: str = "https://github.com/login/oauth/access_token"
    github_api_url: str = "https://api.github.com"
    github_scopes: Tuple[str, ...] = ("repo", "read:user")
    user_agent: str = "mcp-server"

    # Networking
    http_timeout_seconds: int = 30

    # Discovery stream policy: 0 closes the stream after the manifest frame
    sse_keepalive_seconds: int = 0
    sse_max_lifetime_seconds: int = 300

    # Credential store; 0 disables expiry
    credential_ttl_seconds: int = 0
    pending_state_ttl_seconds: int = 600

    # Error relay policy for failed upstream calls
    relay_upstream_errors: bool = False

    cors_origins: Tuple[str, ...] = ("*",)
    log_level: str = "INFO"

    @property
    def callback_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/auth/github/callback"


_cached_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return cached settings (loaded from environment) to be used across modules."""
    global _cached_settings
    if _cached_settings is not None:
        return _cached_settings

    port = int(os.getenv("PORT", "10000"))
    base_url = os.getenv("BASE_URL") or f"http://localhost:{port}"
    origins = tuple(o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip())

    _cached_settings = Settings(
        github_client_id=os.getenv("GITHUB_CLIENT_ID", ""),
        github_client_secret=os.getenv("GITHUB_CLIENT_SECRET", ""),
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        base_url=base_url,
        github_api_url=os.getenv("GITHUB_API_URL", "https://api.github.com"),
        http_timeout_seconds=int(os.getenv("HTTP_TIMEOUT_SECONDS", "30")),
        sse_keepalive_seconds=int(os.getenv("SSE_KEEPALIVE_SECONDS", "0")),
        sse_max_lifetime_seconds=int(os.getenv("SSE_MAX_LIFETIME_SECONDS", "300")),
        credential_ttl_seconds=int(os.getenv("CREDENTIAL_TTL_SECONDS", "0")),
        pending_state_ttl_seconds=int(os.getenv("PENDING_STATE_TTL_SECONDS", "600")),
        relay_upstream_errors=_env_bool("RELAY_UPSTREAM_ERRORS"),
        cors_origins=origins or ("*",),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
    return _cached_settings


def reset_settings() -> None:
    """Drop the cached settings so the next `get_settings()` re-reads the environment."""
    global _cached_settings
    _cached_settings = None
