"""Authentication dependency for the tool webhook.

Behavior matrix:
  TOOL_API_KEY set + valid token   → allow
  TOOL_API_KEY set + wrong/missing → 401 Unauthorized
  TOOL_API_KEY empty + DEBUG=true  → allow (local dev convenience)
  TOOL_API_KEY empty + DEBUG=false → 403 Forbidden (locked in production)
"""

from __future__ import annotations

import logging
import secrets

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

log = logging.getLogger("appointments.auth")

_bearer_scheme = HTTPBearer(auto_error=False)


async def require_tool_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> None:
    """FastAPI dependency — protect the tool endpoint with a bearer token."""
    settings = request.app.state.settings
    key = settings.tool_api_key

    if not key:
        if settings.debug:
            return
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Tool API key not configured. Set TOOL_API_KEY in .env.",
        )

    if credentials is None or not secrets.compare_digest(
        credentials.credentials.encode(), key.encode()
    ):
        log.warning("Rejected tool call with invalid or missing token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing tool token.",
            headers={"WWW-Authenticate": "Bearer"},
        )
