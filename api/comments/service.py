"""
Comment business logic.
"""

from __future__ import annotations

import logging

from core import errors
from core.db import Database, Executor
from core.responses import page_offset, paginate
from posts import repository as post_repository
from users import service as user_service

from . import repository, schemas

logger = logging.getLogger(__name__)


async def build_comment_responses(
    db: Executor,
    rows: list[dict],
    *,
    viewer_id: int | None = None,
) -> list[schemas.CommentResponse]:
    usernames = await user_service.usernames_for(db, rows)
    liked: set[int] = set()
    if viewer_id is not None:
        liked = await repository.liked_comment_ids(
            db,
            user_id=viewer_id,
            comment_ids=[int(row["id"]) for row in rows],
        )
    return [
        schemas.CommentResponse(
            id=int(row["id"]),
            user_id=int(row["user_id"]),
            post_id=int(row["post_id"]),
            parent_comment_id=row.get("parent_comment_id"),
            content=str(row["content"]),
            likes_count=int(row["likes_count"]),
            replies_count=int(row.get("replies_count") or 0),
            is_liked=int(row["id"]) in liked,
            is_edited=bool(row.get("is_edited")),
            edited_at=row.get("edited_at"),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            user=user_service.author_of(row, usernames),
        )
        for row in rows
    ]


async def add_comment(
    db: Database,
    payload: schemas.AddCommentRequest,
    *,
    user_id: int,
    post_id: int,
) -> schemas.CommentResponse:
    content = (payload.content or "").strip()
    if not content:
        raise errors.validation("Comment content is required")

    async with db.transaction() as tx:
        post = await post_repository.get_post(tx, post_id, for_update=True)
        if post is None:
            raise errors.not_found("Post not found")
        if not bool(post["comments_enabled"]):
            raise errors.forbidden("Comments are disabled on this post")

        parent_id = payload.parent_comment_id
        if parent_id is not None:
            parent = await repository.get_comment(tx, parent_id)
            if parent is None:
                raise errors.not_found("Parent comment not found")
            if int(parent["post_id"]) != post_id:
                raise errors.validation("Parent comment belongs to a different post")
            if parent.get("parent_comment_id") is not None:
                raise errors.validation("Replies can only target top-level comments")

        row = await repository.create_comment(
            tx,
            user_id=user_id,
            post_id=post_id,
            content=content,
            parent_comment_id=parent_id,
        )
        await post_repository.adjust_comments_count(tx, post_id, 1)
        built = await build_comment_responses(tx, [row])

    logger.info("comment_created comment_id=%s post_id=%s", row["id"], post_id)
    return built[0]


async def list_comments(
    db: Database,
    *,
    post_id: int,
    page: int,
    limit: int,
    viewer_id: int | None = None,
) -> schemas.CommentPage:
    post = await post_repository.get_post(db, post_id)
    if post is None:
        raise errors.not_found("Post not found")
    if not bool(post["comments_enabled"]):
        raise errors.forbidden("Comments are disabled on this post")

    rows = await repository.list_top_level(db, post_id, limit=limit, offset=page_offset(page, limit))
    total = await repository.count_top_level(db, post_id)
    return schemas.CommentPage(
        comments=await build_comment_responses(db, rows, viewer_id=viewer_id),
        pagination=paginate(page=page, limit=limit, total=total),
    )


async def list_replies(
    db: Database,
    *,
    comment_id: int,
    page: int,
    limit: int,
    viewer_id: int | None = None,
) -> schemas.CommentPage:
    parent = await repository.get_comment(db, comment_id)
    if parent is None:
        raise errors.not_found("Comment not found")

    rows = await repository.list_replies(db, comment_id, limit=limit, offset=page_offset(page, limit))
    total = await repository.count_replies(db, comment_id)
    return schemas.CommentPage(
        comments=await build_comment_responses(db, rows, viewer_id=viewer_id),
        pagination=paginate(page=page, limit=limit, total=total),
    )


async def _owned_comment(db: Executor, comment_id: int, *, user_id: int, action: str) -> dict:
    comment = await repository.get_comment(db, comment_id)
    if comment is None:
        raise errors.not_found("Comment not found")
    if int(comment["user_id"]) != user_id:
        raise errors.forbidden(f"You can only {action} your own comments")
    return comment


async def update_comment(
    db: Database,
    payload: schemas.UpdateCommentRequest,
    *,
    user_id: int,
    comment_id: int,
) -> schemas.CommentResponse:
    content = (payload.content or "").strip()
    if not content:
        raise errors.validation("Comment content is required")

    await _owned_comment(db, comment_id, user_id=user_id, action="edit")
    row = await repository.update_content(db, comment_id, content=content)
    if row is None:
        raise errors.not_found("Comment not found")
    built = await build_comment_responses(db, [row], viewer_id=user_id)
    return built[0]


async def delete_comment(db: Database, *, user_id: int, comment_id: int) -> None:
    async with db.transaction() as tx:
        comment = await _owned_comment(tx, comment_id, user_id=user_id, action="delete")
        removed = await repository.delete_comment_thread(tx, comment_id)
        await post_repository.adjust_comments_count(tx, int(comment["post_id"]), -removed)
    logger.info("comment_deleted comment_id=%s removed=%s", comment_id, removed)


async def toggle_like(db: Database, *, user_id: int, comment_id: int) -> schemas.CommentLikeResult:
    async with db.transaction() as tx:
        comment = await repository.get_comment(tx, comment_id, for_update=True)
        if comment is None:
            raise errors.not_found("Comment not found")

        if await repository.remove_like(tx, comment_id=comment_id, user_id=user_id):
            likes_count = await repository.adjust_likes_count(tx, comment_id, -1)
            is_liked = False
        else:
            is_liked = True
            if await repository.add_like(tx, comment_id=comment_id, user_id=user_id):
                likes_count = await repository.adjust_likes_count(tx, comment_id, 1)
            else:
                current = await repository.get_comment(tx, comment_id)
                likes_count = int(current["likes_count"]) if current is not None else 0
    return schemas.CommentLikeResult(likes_count=likes_count, is_liked=is_liked)
