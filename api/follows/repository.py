"""
Follow-edge persistence (raw SQL).

A follow is a permanent directed edge follower -> followee. Connection
requests live in their own table (see `connections/`).
"""

from __future__ import annotations

from core.db import Executor


async def insert_follow(db: Executor, *, follower_id: int, followee_id: int) -> dict | None:
    """
    Insert the edge; returns None when it already exists.
    """
    return await db.fetch_one(
        """
        INSERT INTO follows (follower_id, followee_id)
        VALUES ($1, $2)
        ON CONFLICT (follower_id, followee_id) DO NOTHING
        RETURNING follower_id, followee_id, created_at
        """,
        follower_id,
        followee_id,
    )


async def delete_follow(db: Executor, *, follower_id: int, followee_id: int) -> bool:
    row = await db.fetch_one(
        """
        DELETE FROM follows
        WHERE follower_id = $1
          AND followee_id = $2
        RETURNING follower_id
        """,
        follower_id,
        followee_id,
    )
    return row is not None


async def is_following(db: Executor, *, follower_id: int, followee_id: int) -> bool:
    row = await db.fetch_one(
        """
        SELECT 1 AS ok
        FROM follows
        WHERE follower_id = $1
          AND followee_id = $2
        """,
        follower_id,
        followee_id,
    )
    return row is not None


async def followee_ids(db: Executor, user_id: int) -> list[int]:
    rows = await db.fetch_all(
        """
        SELECT followee_id
        FROM follows
        WHERE follower_id = $1
        ORDER BY created_at DESC
        """,
        user_id,
    )
    return [int(row["followee_id"]) for row in rows]


async def list_following(db: Executor, user_id: int) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT u.id, u.name, u.email, u.is_account_verified, u.created_at, up.username
        FROM follows f
        JOIN users u ON u.id = f.followee_id
        LEFT JOIN user_profiles up ON up.user_id = u.id
        WHERE f.follower_id = $1
        ORDER BY f.created_at DESC
        """,
        user_id,
    )


async def list_followers(db: Executor, user_id: int) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT u.id, u.name, u.email, u.is_account_verified, u.created_at, up.username
        FROM follows f
        JOIN users u ON u.id = f.follower_id
        LEFT JOIN user_profiles up ON up.user_id = u.id
        WHERE f.followee_id = $1
        ORDER BY f.created_at DESC
        """,
        user_id,
    )


async def follow_counts(db: Executor, user_id: int) -> dict[str, int]:
    row = await db.fetch_one(
        """
        SELECT
          (SELECT count(*) FROM follows WHERE followee_id = $1)::int AS followers_count,
          (SELECT count(*) FROM follows WHERE follower_id = $1)::int AS following_count
        """,
        user_id,
    )
    row = row or {}
    return {
        "followers_count": int(row.get("followers_count") or 0),
        "following_count": int(row.get("following_count") or 0),
    }
