"""
Auth security helpers.
"""

from __future__ import annotations

import re
import secrets
import time
from typing import Any

import bcrypt
import jwt

from core import config

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
_USERNAME_RE = re.compile(r"[A-Za-z0-9_]+")

VERIFY_OTP_TTL_MS = 24 * 60 * 60 * 1000
RESET_OTP_TTL_MS = 15 * 60 * 1000

SESSION_COOKIE_NAME = "token"


class AuthSecurityError(RuntimeError):
    pass


def jwt_secret() -> str:
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    return config.env_str("JWT_SECRET", "dev-change-this-secret")


def jwt_algorithm() -> str:
    return config.env_str("JWT_ALG", "HS256")


def session_expire_days() -> int:
    return config.env_int("SESSION_EXPIRE_DAYS", 7)


def session_max_age_s() -> int:
    return session_expire_days() * 24 * 60 * 60


def now_epoch_s() -> int:
    return int(time.time())


def now_epoch_ms() -> int:
    return int(time.time() * 1000)


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt(rounds=10)).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def build_session_token(*, user_id: int) -> str:
    issued_at = now_epoch_s()
    payload = {
        "id": user_id,
        "type": "session",
        "iat": issued_at,
        "exp": issued_at + session_max_age_s(),
    }
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def decode_session_token(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Not Authorized. Login again!")

    try:
        payload = jwt.decode(raw, jwt_secret(), algorithms=[jwt_algorithm()])
    except jwt.ExpiredSignatureError as exc:
        raise AuthSecurityError("Session expired. Login again!") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Not Authorized. Login again!") from exc

    if str(payload.get("type") or "") != "session":
        raise AuthSecurityError("Token is not a session token.")
    return payload


def username_error(username: str) -> str | None:
    """
    Return the client-facing reason a username is invalid, or None.
    """
    if len(username) < USERNAME_MIN_LENGTH:
        return "Username must be at least 3 characters long"
    if len(username) > USERNAME_MAX_LENGTH:
        return "Username must be less than 30 characters"
    if not _USERNAME_RE.fullmatch(username):
        return "Username can only contain letters, numbers, and underscores"
    return None


def generate_otp() -> str:
    # Six digits, uniform over 100000..999999.
    return str(100000 + secrets.randbelow(900000))
