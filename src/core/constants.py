"""Core constants for cross-module use."""

SERVICE_MESSAGE = "GitHub tools ready"
SERVICE_VERSION = "1.0.0"

# Session used when the caller does not name one (single-user flow)
DEFAULT_SESSION_ID = "default"
SESSION_HEADER = "X-Session-Id"

AUTH_REQUIRED_MESSAGE = "GitHub OAuth required"
