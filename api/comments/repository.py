"""
Comment persistence helpers (raw SQL).

Threading is one level deep: a reply's parent is always a top-level comment
of the same post.
"""

from __future__ import annotations

from core.db import Executor

_COMMENT_SELECT = """
    SELECT c.id, c.user_id, c.post_id, c.parent_comment_id, c.content, c.likes_count,
           c.is_edited, c.edited_at, c.created_at, c.updated_at,
           u.name AS user_name, u.email AS user_email,
           (SELECT count(*) FROM comments r WHERE r.parent_comment_id = c.id)::int AS replies_count
    FROM comments c
    JOIN users u ON u.id = c.user_id
"""


async def create_comment(
    db: Executor,
    *,
    user_id: int,
    post_id: int,
    content: str,
    parent_comment_id: int | None = None,
) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO comments (user_id, post_id, content, parent_comment_id)
        VALUES ($1, $2, $3, $4)
        RETURNING id
        """,
        user_id,
        post_id,
        content,
        parent_comment_id,
    )
    if row is None:
        raise RuntimeError("Failed to create comment.")
    comment = await get_comment(db, int(row["id"]))
    if comment is None:
        raise RuntimeError("Failed to load created comment.")
    return comment


async def get_comment(db: Executor, comment_id: int, *, for_update: bool = False) -> dict | None:
    lock = "FOR UPDATE OF c" if for_update else ""
    return await db.fetch_one(
        f"""
        {_COMMENT_SELECT}
        WHERE c.id = $1
        {lock}
        """,
        comment_id,
    )


async def list_top_level(db: Executor, post_id: int, *, limit: int, offset: int) -> list[dict]:
    return await db.fetch_all(
        f"""
        {_COMMENT_SELECT}
        WHERE c.post_id = $1
          AND c.parent_comment_id IS NULL
        ORDER BY c.created_at DESC, c.id DESC
        LIMIT $2
        OFFSET $3
        """,
        post_id,
        limit,
        offset,
    )


async def count_top_level(db: Executor, post_id: int) -> int:
    total = await db.fetch_value(
        """
        SELECT count(*)
        FROM comments
        WHERE post_id = $1
          AND parent_comment_id IS NULL
        """,
        post_id,
    )
    return int(total or 0)


async def list_replies(db: Executor, comment_id: int, *, limit: int, offset: int) -> list[dict]:
    return await db.fetch_all(
        f"""
        {_COMMENT_SELECT}
        WHERE c.parent_comment_id = $1
        ORDER BY c.created_at ASC, c.id ASC
        LIMIT $2
        OFFSET $3
        """,
        comment_id,
        limit,
        offset,
    )


async def count_replies(db: Executor, comment_id: int) -> int:
    total = await db.fetch_value(
        "SELECT count(*) FROM comments WHERE parent_comment_id = $1",
        comment_id,
    )
    return int(total or 0)


async def update_content(db: Executor, comment_id: int, *, content: str) -> dict | None:
    await db.execute(
        """
        UPDATE comments
        SET content = $2,
            is_edited = true,
            edited_at = now(),
            updated_at = now()
        WHERE id = $1
        """,
        comment_id,
        content,
    )
    return await get_comment(db, comment_id)


async def delete_comment_thread(db: Executor, comment_id: int) -> int:
    """
    Delete a comment together with its replies; returns rows removed.
    """
    rows = await db.fetch_all(
        """
        DELETE FROM comments
        WHERE id = $1
           OR parent_comment_id = $1
        RETURNING id
        """,
        comment_id,
    )
    return len(rows)


async def delete_by_post(db: Executor, post_id: int) -> int:
    rows = await db.fetch_all(
        "DELETE FROM comments WHERE post_id = $1 RETURNING id",
        post_id,
    )
    return len(rows)


async def add_like(db: Executor, *, comment_id: int, user_id: int) -> bool:
    row = await db.fetch_one(
        """
        INSERT INTO comment_likes (comment_id, user_id)
        VALUES ($1, $2)
        ON CONFLICT (comment_id, user_id) DO NOTHING
        RETURNING comment_id
        """,
        comment_id,
        user_id,
    )
    return row is not None


async def remove_like(db: Executor, *, comment_id: int, user_id: int) -> bool:
    row = await db.fetch_one(
        """
        DELETE FROM comment_likes
        WHERE comment_id = $1
          AND user_id = $2
        RETURNING comment_id
        """,
        comment_id,
        user_id,
    )
    return row is not None


async def adjust_likes_count(db: Executor, comment_id: int, delta: int) -> int:
    value = await db.fetch_value(
        """
        UPDATE comments
        SET likes_count = GREATEST(likes_count + $2, 0), updated_at = now()
        WHERE id = $1
        RETURNING likes_count
        """,
        comment_id,
        delta,
    )
    return int(value or 0)


async def liked_comment_ids(db: Executor, *, user_id: int, comment_ids: list[int]) -> set[int]:
    if not comment_ids:
        return set()
    rows = await db.fetch_all(
        """
        SELECT comment_id
        FROM comment_likes
        WHERE user_id = $1
          AND comment_id = ANY($2::int[])
        """,
        user_id,
        comment_ids,
    )
    return {int(row["comment_id"]) for row in rows}
