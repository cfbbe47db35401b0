from __future__ import annotations

import asyncio
import logging
import time
from typing import AsyncIterator, Awaitable, Callable, Dict, Optional

from src.tools.registry import manifest_json


logger = logging.getLogger(__name__)

SSE_HEADERS: Dict[str, str] = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}

KEEPALIVE_FRAME = ": keep-alive\n\n"


def format_sse_frame(payload: str) -> str:
    """Wrap one JSON payload as a single SSE data frame."""
    return f"data: {payload}\n\n"


async def stream_manifest(
    *,
    keepalive_seconds: float = 0,
    max_lifetime_seconds: float = 300,
    is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None,
) -> AsyncIterator[str]:
    """Yield the manifest frame, then either stop or keep the channel alive.

    With `keepalive_seconds <= 0` the stream ends right after the manifest.
    Otherwise a comment frame is written every `keepalive_seconds` until the
    client disconnects or `max_lifetime_seconds` elapses.
    """
    yield format_sse_frame(manifest_json())
    if keepalive_seconds <= 0:
        return

    started = time.monotonic()
    while time.monotonic() - started < max_lifetime_seconds:
        await asyncio.sleep(keepalive_seconds)
        if is_disconnected is not None and await is_disconnected():
            logger.info("sse client disconnected")
            return
        yield KEEPALIVE_FRAME
    logger.info("sse stream reached max lifetime", extra={"max_lifetime_seconds": max_lifetime_seconds})
