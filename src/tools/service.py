"""Tool invocation service: credential check, one upstream call, verbatim relay.

This module implements the single generic invocation path every tool goes
through, decoupling the HTTP layer from credential and upstream details.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from src.adapters.credential_store import CredentialStore
from src.adapters.upstream_provider import UpstreamProvider
from src.core.constants import AUTH_REQUIRED_MESSAGE
from src.core.errors import Unauthenticated, UpstreamCallError, UpstreamHTTPError
from src.tools.registry import get_tool, validate_arguments


logger = logging.getLogger(__name__)


def execute(
    tool_name: str,
    arguments: Any = None,
    *,
    store: CredentialStore,
    provider: UpstreamProvider,
    session_id: Optional[str] = None,
    relay_upstream_errors: bool = False,
) -> Any:
    """Run one tool and return the upstream JSON payload unchanged.

    Raises Unauthenticated before anything else runs when no credential is
    on file, InvalidArguments for a bad argument mapping, and
    UpstreamCallError when the upstream call fails.
    """
    tool = get_tool(tool_name)

    credential = store.get(session_id)
    if credential is None:
        raise Unauthenticated(AUTH_REQUIRED_MESSAGE)

    validate_arguments(tool, arguments)

    try:
        return provider.fetch(tool.upstream_path, token=credential.token)
    except UpstreamHTTPError as e:
        if e.status_code == 401:
            # token revoked or expired upstream
            # a newer credential stored meanwhile is left alone
            cleared = store.clear(credential.session_id, token=credential.token)
            logger.warning("upstream rejected credential", extra={"tool": tool.name, "cleared": cleared})
            raise Unauthenticated(AUTH_REQUIRED_MESSAGE) from e
        logger.error(f"Error calling GitHub for {tool.name}: {e}")
        detail = {"upstream_status": e.status_code, "upstream_message": e.message} if relay_upstream_errors else None
        raise UpstreamCallError(tool.failure_message, detail=detail) from e
    except Exception as e:
        logger.exception(f"Error calling GitHub for {tool.name}")
        detail = {"upstream_message": str(e)} if relay_upstream_errors else None
        raise UpstreamCallError(tool.failure_message, detail=detail) from e
