from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class Credential:
    """A delegated bearer token and the session it was issued to."""

    token: str
    session_id: str
    issued_at: float

    def expired(self, ttl_seconds: int, now: float) -> bool:
        return ttl_seconds > 0 and now - self.issued_at >= ttl_seconds

    def __repr__(self) -> str:
        # keep tokens out of logs and tracebacks
        return f"Credential(session_id={self.session_id!r}, issued_at={self.issued_at!r})"


class CredentialStore(Protocol):
    """Abstract interface for holding delegated credentials per session."""

    def begin_session(self) -> str:
        ...

    def is_pending(self, session_id: str) -> bool:
        ...

    def set(self, token: str, *, session_id: Optional[str] = None) -> Credential:
        ...

    def get(self, session_id: Optional[str] = None) -> Optional[Credential]:
        ...

    def clear(self, session_id: Optional[str] = None, *, token: Optional[str] = None) -> bool:
        ...
