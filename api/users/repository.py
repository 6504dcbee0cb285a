"""
Profile persistence and user search (raw SQL).
"""

from __future__ import annotations

from core.db import Executor

_PROFILE_COLUMNS = """
    up.id, up.user_id, up.username, up.bio, up.profile_picture,
    up.cover_picture, up.location, up.created_at, up.updated_at
"""


def _like_pattern(query: str) -> str:
    # Backslash is the default LIKE escape character in Postgres.
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


async def create_profile(
    db: Executor,
    *,
    user_id: int,
    username: str,
    bio: str | None = None,
    profile_picture: str | None = None,
    cover_picture: str | None = None,
    location: str | None = None,
) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO user_profiles (user_id, username, bio, profile_picture, cover_picture, location)
        VALUES ($1, $2, COALESCE($3, 'Hey there!'), COALESCE($4, ''), COALESCE($5, ''), COALESCE($6, ''))
        RETURNING id, user_id, username, bio, profile_picture, cover_picture, location,
                  created_at, updated_at
        """,
        user_id,
        username,
        bio,
        profile_picture,
        cover_picture,
        location,
    )
    if row is None:
        raise RuntimeError("Failed to create profile.")
    return row


async def insert_profile_if_absent(db: Executor, *, user_id: int, username: str) -> dict | None:
    """
    Insert a default profile; None when the user or the username already has one.
    """
    return await db.fetch_one(
        """
        INSERT INTO user_profiles (user_id, username, bio, profile_picture, cover_picture, location)
        VALUES ($1, $2, 'Hey there!', '', '', '')
        ON CONFLICT DO NOTHING
        RETURNING id, user_id, username, bio, profile_picture, cover_picture, location,
                  created_at, updated_at
        """,
        user_id,
        username,
    )


async def get_profile_by_user_id(db: Executor, user_id: int) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {_PROFILE_COLUMNS}
        FROM user_profiles up
        WHERE up.user_id = $1
        """,
        user_id,
    )


async def get_profile_by_username(db: Executor, username: str) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {_PROFILE_COLUMNS}
        FROM user_profiles up
        WHERE up.username = $1
        """,
        username,
    )


async def update_profile(
    db: Executor,
    user_id: int,
    *,
    username: str | None = None,
    bio: str | None = None,
    profile_picture: str | None = None,
    cover_picture: str | None = None,
    location: str | None = None,
) -> dict | None:
    """
    Partial update: None leaves the column unchanged.
    """
    return await db.fetch_one(
        """
        UPDATE user_profiles
        SET username = COALESCE($2, username),
            bio = COALESCE($3, bio),
            profile_picture = COALESCE($4, profile_picture),
            cover_picture = COALESCE($5, cover_picture),
            location = COALESCE($6, location),
            updated_at = now()
        WHERE user_id = $1
        RETURNING id, user_id, username, bio, profile_picture, cover_picture, location,
                  created_at, updated_at
        """,
        user_id,
        username,
        bio,
        profile_picture,
        cover_picture,
        location,
    )


async def usernames_by_user_ids(db: Executor, user_ids: list[int]) -> dict[int, str]:
    if not user_ids:
        return {}
    rows = await db.fetch_all(
        """
        SELECT user_id, username
        FROM user_profiles
        WHERE user_id = ANY($1::int[])
        """,
        sorted(set(user_ids)),
    )
    return {int(row["user_id"]): str(row["username"]) for row in rows}


async def search_users(
    db: Executor,
    *,
    query: str,
    exclude_user_id: int,
    limit: int,
    offset: int,
) -> list[dict]:
    """
    Case-insensitive substring match over name or username, name hits first.
    Each row carries the caller's relation to the user.
    """
    pattern = _like_pattern(query)
    return await db.fetch_all(
        """
        SELECT
          u.id, u.name, u.email, u.is_account_verified, u.created_at,
          up.username, up.bio, up.profile_picture, up.cover_picture, up.location,
          (SELECT count(*) FROM follows f WHERE f.followee_id = u.id)::int AS followers_count,
          (SELECT count(*) FROM follows f WHERE f.follower_id = u.id)::int AS following_count,
          EXISTS (
            SELECT 1 FROM follows f
            WHERE f.follower_id = $2 AND f.followee_id = u.id
          ) AS is_following,
          EXISTS (
            SELECT 1 FROM connection_requests cr
            WHERE cr.status = 'accepted'
              AND ((cr.requester_id = $2 AND cr.recipient_id = u.id)
                OR (cr.requester_id = u.id AND cr.recipient_id = $2))
          ) AS is_connected
        FROM users u
        LEFT JOIN user_profiles up ON up.user_id = u.id
        WHERE (u.name ILIKE $1 OR up.username ILIKE $1)
          AND u.id <> $2
        ORDER BY
          CASE
            WHEN u.name ILIKE $1 THEN 1
            WHEN up.username ILIKE $1 THEN 2
            ELSE 3
          END,
          u.created_at DESC
        LIMIT $3
        OFFSET $4
        """,
        pattern,
        exclude_user_id,
        limit,
        offset,
    )


async def count_search_users(db: Executor, *, query: str, exclude_user_id: int) -> int:
    total = await db.fetch_value(
        """
        SELECT count(*)
        FROM users u
        LEFT JOIN user_profiles up ON up.user_id = u.id
        WHERE (u.name ILIKE $1 OR up.username ILIKE $1)
          AND u.id <> $2
        """,
        _like_pattern(query),
        exclude_user_id,
    )
    return int(total or 0)
