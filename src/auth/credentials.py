"""In-memory delegated credential store.

Credentials are keyed by session id. The most recently stored credential is
the *active* one and answers lookups that do not name a session, which keeps
the single-user flow (authorize in a browser, invoke tools from a client that
never saw the browser session) working. Nothing is persisted.
"""

from __future__ import annotations

import logging
import secrets
import threading
import time
from typing import Callable, Dict, Optional

from src.adapters.credential_store import Credential, CredentialStore
from src.core.constants import DEFAULT_SESSION_ID


logger = logging.getLogger(__name__)


class InMemoryCredentialStore(CredentialStore):
    def __init__(
        self,
        *,
        ttl_seconds: int = 0,
        pending_ttl_seconds: int = 600,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self.pending_ttl_seconds = pending_ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._credentials: Dict[str, Credential] = {}
        self._pending: Dict[str, float] = {}
        self._active: Optional[str] = None

    def begin_session(self) -> str:
        """Issue a fresh session id and remember it as awaiting a callback."""
        session_id = secrets.token_urlsafe(24)
        with self._lock:
            self._prune_pending()
            self._pending[session_id] = self._clock()
        return session_id

    def is_pending(self, session_id: str) -> bool:
        with self._lock:
            self._prune_pending()
            return session_id in self._pending

    def set(self, token: str, *, session_id: Optional[str] = None) -> Credential:
        sid = session_id or DEFAULT_SESSION_ID
        cred = Credential(token=token, session_id=sid, issued_at=self._clock())
        with self._lock:
            self._pending.pop(sid, None)
            self._credentials[sid] = cred
            self._active = sid
        logger.info("credential stored", extra={"session_id": sid})
        return cred

    def get(self, session_id: Optional[str] = None) -> Optional[Credential]:
        with self._lock:
            sid = session_id or self._active
            if sid is None:
                return None
            cred = self._credentials.get(sid)
            if cred is None:
                return None
            if cred.expired(self.ttl_seconds, self._clock()):
                self._drop(sid)
                logger.info("credential expired", extra={"session_id": sid})
                return None
            return cred

    def clear(self, session_id: Optional[str] = None, *, token: Optional[str] = None) -> bool:
        """Forget one credential (the active one by default). Returns whether anything was removed.

        With `token`, the entry is only dropped if it still holds that token.
        """
        with self._lock:
            sid = session_id or self._active
            if sid is None or sid not in self._credentials:
                return False
            if token is not None and self._credentials[sid].token != token:
                return False
            self._drop(sid)
        logger.info("credential cleared", extra={"session_id": sid})
        return True

    def _drop(self, sid: str) -> None:
        self._credentials.pop(sid, None)
        if self._active == sid:
            self._active = None

    def _prune_pending(self) -> None:
        if self.pending_ttl_seconds <= 0:
            return
        cutoff = self._clock() - self.pending_ttl_seconds
        for sid in [s for s, started in self._pending.items() if started < cutoff]:
            del self._pending[sid]
