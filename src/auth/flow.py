"""OAuth authorization-code flow: redirect, callback, sign-out.

`AuthorizationFlow` turns the provider's one-time code into a stored
credential. It validates its inputs before any network call, performs exactly
one token exchange per callback, and only touches the credential store on a
successful exchange.
"""

from __future__ import annotations

import logging
from typing import Optional

from src.adapters.credential_store import Credential, CredentialStore
from src.adapters.upstream_provider import UpstreamProvider
from src.core.errors import (
    ConfigurationError,
    ExchangeFailedError,
    InvalidStateError,
    MissingCodeError,
    UpstreamAuthError,
)


logger = logging.getLogger(__name__)


class AuthorizationFlow:
    def __init__(
        self,
        *,
        provider: UpstreamProvider,
        store: CredentialStore,
        client_id: str,
        client_secret: str,
    ):
        self.provider = provider
        self.store = store
        self.client_id = client_id
        self.client_secret = client_secret

    def begin_authorization(self) -> str:
        """Return the provider URL the user should be redirected to."""
        if not self.client_id:
            raise ConfigurationError("GitHub client ID not configured")
        session_id = self.store.begin_session()
        return self.provider.authorization_url(state=session_id)

    def complete_authorization(self, code: Optional[str], state: Optional[str] = None) -> Credential:
        if not code:
            raise MissingCodeError("Missing OAuth code")
        if not self.client_id or not self.client_secret:
            raise ConfigurationError("GitHub client credentials not configured")
        if state and not self.store.is_pending(state):
            raise InvalidStateError("Unknown or expired OAuth state")

        try:
            data = self.provider.exchange_code(code)
        except Exception as e:
            logger.error(f"Error exchanging GitHub code for token: {e}")
            raise ExchangeFailedError("Failed to retrieve access token") from e

        if data.get("error"):
            logger.warning("github.oauth exchange rejected", extra={"oauth_error": data["error"]})
            raise UpstreamAuthError(str(data.get("error_description") or data["error"]))

        token = data.get("access_token")
        if not token:
            logger.error("Token response carried neither error nor access_token")
            raise ExchangeFailedError("Failed to retrieve access token")

        credential = self.store.set(str(token), session_id=state or None)
        logger.info("GitHub OAuth successful, token acquired")
        return credential

    def sign_out(self, session_id: Optional[str] = None) -> bool:
        return self.store.clear(session_id)
