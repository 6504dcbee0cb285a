"""
Connection-request persistence (raw SQL).

At most one row exists per unordered user pair (unique index on
LEAST/GREATEST of the two ids).
"""

from __future__ import annotations

from core.db import Executor

_REQUEST_SELECT = """
    SELECT cr.id, cr.requester_id, cr.recipient_id, cr.status, cr.created_at, cr.updated_at,
           u1.name AS requester_name, u1.email AS requester_email, p1.username AS requester_username,
           u2.name AS recipient_name, u2.email AS recipient_email, p2.username AS recipient_username
    FROM connection_requests cr
    JOIN users u1 ON u1.id = cr.requester_id
    JOIN users u2 ON u2.id = cr.recipient_id
    LEFT JOIN user_profiles p1 ON p1.user_id = cr.requester_id
    LEFT JOIN user_profiles p2 ON p2.user_id = cr.recipient_id
"""


async def get_request(db: Executor, request_id: int, *, for_update: bool = False) -> dict | None:
    lock = "FOR UPDATE OF cr" if for_update else ""
    return await db.fetch_one(
        f"""
        {_REQUEST_SELECT}
        WHERE cr.id = $1
        {lock}
        """,
        request_id,
    )


async def get_request_between(db: Executor, user_a: int, user_b: int, *, for_update: bool = False) -> dict | None:
    lock = "FOR UPDATE OF cr" if for_update else ""
    return await db.fetch_one(
        f"""
        {_REQUEST_SELECT}
        WHERE LEAST(cr.requester_id, cr.recipient_id) = LEAST($1::int, $2::int)
          AND GREATEST(cr.requester_id, cr.recipient_id) = GREATEST($1::int, $2::int)
        {lock}
        """,
        user_a,
        user_b,
    )


async def insert_request(db: Executor, *, requester_id: int, recipient_id: int) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO connection_requests (requester_id, recipient_id, status)
        VALUES ($1, $2, 'pending')
        RETURNING id
        """,
        requester_id,
        recipient_id,
    )
    if row is None:
        raise RuntimeError("Failed to create connection request.")
    return row


async def reopen_request(db: Executor, request_id: int, *, requester_id: int, recipient_id: int) -> None:
    await db.execute(
        """
        UPDATE connection_requests
        SET requester_id = $2,
            recipient_id = $3,
            status = 'pending',
            created_at = now(),
            updated_at = now()
        WHERE id = $1
        """,
        request_id,
        requester_id,
        recipient_id,
    )


async def set_status(db: Executor, request_id: int, status: str) -> None:
    await db.execute(
        """
        UPDATE connection_requests
        SET status = $2, updated_at = now()
        WHERE id = $1
        """,
        request_id,
        status,
    )


async def delete_request(db: Executor, request_id: int) -> bool:
    row = await db.fetch_one(
        "DELETE FROM connection_requests WHERE id = $1 RETURNING id",
        request_id,
    )
    return row is not None


async def list_incoming(db: Executor, user_id: int, *, status: str) -> list[dict]:
    return await db.fetch_all(
        f"""
        {_REQUEST_SELECT}
        WHERE cr.recipient_id = $1
          AND cr.status = $2
        ORDER BY cr.created_at DESC
        """,
        user_id,
        status,
    )


async def list_outgoing(db: Executor, user_id: int, *, status: str) -> list[dict]:
    return await db.fetch_all(
        f"""
        {_REQUEST_SELECT}
        WHERE cr.requester_id = $1
          AND cr.status = $2
        ORDER BY cr.created_at DESC
        """,
        user_id,
        status,
    )


async def list_for_user(db: Executor, user_id: int, *, status: str) -> list[dict]:
    return await db.fetch_all(
        f"""
        {_REQUEST_SELECT}
        WHERE (cr.requester_id = $1 OR cr.recipient_id = $1)
          AND cr.status = $2
        ORDER BY cr.updated_at DESC
        """,
        user_id,
        status,
    )
