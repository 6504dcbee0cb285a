"""
Account persistence helpers.
"""

from __future__ import annotations

from core.db import Executor

_USER_COLUMNS = """
    id, name, email, password, is_account_verified,
    verify_otp, verify_otp_expire_at, reset_otp, reset_otp_expire_at,
    created_at, updated_at
"""


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def create_user(db: Executor, *, name: str, email: str, password_hash: str) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO users (name, email, password)
        VALUES ($1, $2, $3)
        RETURNING {_USER_COLUMNS}
        """,
        name,
        normalize_email(email),
        password_hash,
    )
    if row is None:
        raise RuntimeError("Failed to create user.")
    return row


async def get_user_by_email(db: Executor, email: str) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {_USER_COLUMNS}
        FROM users
        WHERE lower(email) = lower($1)
        """,
        normalize_email(email),
    )


async def get_user_by_id(db: Executor, user_id: int) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {_USER_COLUMNS}
        FROM users
        WHERE id = $1
        """,
        user_id,
    )


async def user_exists(db: Executor, user_id: int) -> bool:
    row = await db.fetch_one("SELECT 1 AS ok FROM users WHERE id = $1", user_id)
    return row is not None


async def set_verify_otp(db: Executor, user_id: int, *, otp: str, expire_at_ms: int) -> None:
    await db.execute(
        """
        UPDATE users
        SET verify_otp = $2, verify_otp_expire_at = $3, updated_at = now()
        WHERE id = $1
        """,
        user_id,
        otp,
        expire_at_ms,
    )


async def set_reset_otp(db: Executor, user_id: int, *, otp: str, expire_at_ms: int) -> None:
    await db.execute(
        """
        UPDATE users
        SET reset_otp = $2, reset_otp_expire_at = $3, updated_at = now()
        WHERE id = $1
        """,
        user_id,
        otp,
        expire_at_ms,
    )


async def mark_verified(db: Executor, user_id: int) -> None:
    await db.execute(
        """
        UPDATE users
        SET is_account_verified = true,
            verify_otp = '',
            verify_otp_expire_at = 0,
            updated_at = now()
        WHERE id = $1
        """,
        user_id,
    )


async def update_password(db: Executor, user_id: int, *, password_hash: str) -> None:
    await db.execute(
        """
        UPDATE users
        SET password = $2,
            reset_otp = '',
            reset_otp_expire_at = 0,
            updated_at = now()
        WHERE id = $1
        """,
        user_id,
        password_hash,
    )
