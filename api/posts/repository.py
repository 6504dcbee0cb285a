"""
Post persistence helpers (raw SQL).
"""

from __future__ import annotations

from core.db import Executor

_POST_SELECT = """
    SELECT p.id, p.user_id, p.content, p.image_urls, p.post_type, p.comments_enabled,
           p.likes_count, p.comments_count, p.created_at, p.updated_at,
           u.name AS user_name, u.email AS user_email
    FROM posts p
    JOIN users u ON u.id = p.user_id
"""


async def create_post(
    db: Executor,
    *,
    user_id: int,
    content: str,
    image_urls: list[str],
    post_type: str,
    comments_enabled: bool,
) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO posts (user_id, content, image_urls, post_type, comments_enabled)
        VALUES ($1, $2, $3::text[], $4, $5)
        RETURNING id
        """,
        user_id,
        content,
        image_urls,
        post_type,
        comments_enabled,
    )
    if row is None:
        raise RuntimeError("Failed to create post.")
    post = await get_post(db, int(row["id"]))
    if post is None:
        raise RuntimeError("Failed to load created post.")
    return post


async def get_post(db: Executor, post_id: int, *, for_update: bool = False) -> dict | None:
    lock = "FOR UPDATE OF p" if for_update else ""
    return await db.fetch_one(
        f"""
        {_POST_SELECT}
        WHERE p.id = $1
        {lock}
        """,
        post_id,
    )


async def list_posts(db: Executor, *, limit: int, offset: int) -> list[dict]:
    return await db.fetch_all(
        f"""
        {_POST_SELECT}
        ORDER BY p.created_at DESC, p.id DESC
        LIMIT $1
        OFFSET $2
        """,
        limit,
        offset,
    )


async def count_posts(db: Executor) -> int:
    return int(await db.fetch_value("SELECT count(*) FROM posts") or 0)


async def list_posts_by_users(db: Executor, user_ids: list[int], *, limit: int, offset: int) -> list[dict]:
    """
    Newest posts authored by any of `user_ids`, paginated in SQL.
    """
    if not user_ids:
        return []
    return await db.fetch_all(
        f"""
        {_POST_SELECT}
        WHERE p.user_id = ANY($1::int[])
        ORDER BY p.created_at DESC, p.id DESC
        LIMIT $2
        OFFSET $3
        """,
        user_ids,
        limit,
        offset,
    )


async def count_posts_by_users(db: Executor, user_ids: list[int]) -> int:
    if not user_ids:
        return 0
    total = await db.fetch_value(
        "SELECT count(*) FROM posts WHERE user_id = ANY($1::int[])",
        user_ids,
    )
    return int(total or 0)


async def list_recent_posts_by_users(
    db: Executor,
    user_ids: list[int],
    *,
    since_hours: int,
    limit: int,
) -> list[dict]:
    if not user_ids:
        return []
    return await db.fetch_all(
        f"""
        {_POST_SELECT}
        WHERE p.user_id = ANY($1::int[])
          AND p.created_at >= now() - make_interval(hours => $2)
        ORDER BY p.created_at DESC, p.id DESC
        LIMIT $3
        """,
        user_ids,
        since_hours,
        limit,
    )


async def update_post(
    db: Executor,
    post_id: int,
    *,
    content: str | None = None,
    image_urls: list[str] | None = None,
    post_type: str | None = None,
    comments_enabled: bool | None = None,
) -> None:
    await db.execute(
        """
        UPDATE posts
        SET content = COALESCE($2, content),
            image_urls = COALESCE($3::text[], image_urls),
            post_type = COALESCE($4, post_type),
            comments_enabled = COALESCE($5, comments_enabled),
            updated_at = now()
        WHERE id = $1
        """,
        post_id,
        content,
        image_urls,
        post_type,
        comments_enabled,
    )


async def delete_post(db: Executor, post_id: int) -> bool:
    row = await db.fetch_one("DELETE FROM posts WHERE id = $1 RETURNING id", post_id)
    return row is not None


async def add_like(db: Executor, *, post_id: int, user_id: int) -> bool:
    row = await db.fetch_one(
        """
        INSERT INTO post_likes (post_id, user_id)
        VALUES ($1, $2)
        ON CONFLICT (post_id, user_id) DO NOTHING
        RETURNING post_id
        """,
        post_id,
        user_id,
    )
    return row is not None


async def remove_like(db: Executor, *, post_id: int, user_id: int) -> bool:
    row = await db.fetch_one(
        """
        DELETE FROM post_likes
        WHERE post_id = $1
          AND user_id = $2
        RETURNING post_id
        """,
        post_id,
        user_id,
    )
    return row is not None


async def adjust_likes_count(db: Executor, post_id: int, delta: int) -> int:
    value = await db.fetch_value(
        """
        UPDATE posts
        SET likes_count = GREATEST(likes_count + $2, 0), updated_at = now()
        WHERE id = $1
        RETURNING likes_count
        """,
        post_id,
        delta,
    )
    return int(value or 0)


async def adjust_comments_count(db: Executor, post_id: int, delta: int) -> int:
    value = await db.fetch_value(
        """
        UPDATE posts
        SET comments_count = GREATEST(comments_count + $2, 0), updated_at = now()
        WHERE id = $1
        RETURNING comments_count
        """,
        post_id,
        delta,
    )
    return int(value or 0)


async def liked_post_ids(db: Executor, *, user_id: int, post_ids: list[int]) -> set[int]:
    if not post_ids:
        return set()
    rows = await db.fetch_all(
        """
        SELECT post_id
        FROM post_likes
        WHERE user_id = $1
          AND post_id = ANY($2::int[])
        """,
        user_id,
        post_ids,
    )
    return {int(row["post_id"]) for row in rows}
