"""
Auth dependencies for protected FastAPI routes.

The session token travels in the http-only `token` cookie; an
`Authorization: Bearer <token>` header is accepted as well for non-browser
clients.
"""

from __future__ import annotations

from fastapi import Cookie, Depends, Header

from core import errors
from core.db import Database, get_db

from . import security, service


def _extract_bearer_token(authorization: str | None) -> str | None:
    raw = (authorization or "").strip()
    if not raw:
        return None

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise errors.unauthorized("Invalid Authorization header format.")

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise errors.unauthorized("Authorization must be: Bearer <token>.")
    return token


async def get_session_token(
    token: str | None = Cookie(default=None, alias=security.SESSION_COOKIE_NAME),
    authorization: str | None = Header(default=None),
) -> str | None:
    if token and token.strip():
        return token.strip()
    return _extract_bearer_token(authorization)


async def get_current_user(
    token: str | None = Depends(get_session_token),
    db: Database = Depends(get_db),
) -> dict:
    if not token:
        raise errors.unauthorized("Not Authorized. Login again!")
    return await service.get_user_from_session_token(db, token)


async def get_optional_user(
    token: str | None = Depends(get_session_token),
    db: Database = Depends(get_db),
) -> dict | None:
    if not token:
        return None
    try:
        return await service.get_user_from_session_token(db, token)
    except errors.AppError:
        return None
