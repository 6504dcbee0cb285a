"""
Post business logic.
"""

from __future__ import annotations

import logging

from comments import repository as comment_repository
from comments import service as comment_service
from core import errors
from core.db import Database, Executor
from core.responses import page_offset, paginate
from users import service as user_service

from . import repository, schemas

logger = logging.getLogger(__name__)

POST_DETAIL_COMMENTS = 20


def _clean_image_urls(image_urls: list[str] | None) -> list[str]:
    return [url.strip() for url in (image_urls or []) if url and url.strip()]


def _check_post_type(post_type: str | None) -> str:
    if not post_type or post_type not in schemas.POST_TYPES:
        raise errors.validation("Invalid post type")
    return post_type


async def build_post_responses(
    db: Executor,
    rows: list[dict],
    *,
    viewer_id: int | None = None,
) -> list[schemas.PostResponse]:
    """
    Attach author info (username defaults to "unknown") and the viewer's like
    flag to a page of post rows.
    """
    usernames = await user_service.usernames_for(db, rows)
    liked: set[int] = set()
    if viewer_id is not None:
        liked = await repository.liked_post_ids(
            db,
            user_id=viewer_id,
            post_ids=[int(row["id"]) for row in rows],
        )
    return [
        schemas.PostResponse(
            id=int(row["id"]),
            user_id=int(row["user_id"]),
            content=str(row.get("content") or ""),
            image_urls=list(row.get("image_urls") or []),
            post_type=row["post_type"],
            comments_enabled=bool(row["comments_enabled"]),
            likes_count=int(row["likes_count"]),
            comments_count=int(row["comments_count"]),
            is_liked=int(row["id"]) in liked,
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            user=user_service.author_of(row, usernames),
        )
        for row in rows
    ]


async def create_post(
    db: Database,
    payload: schemas.CreatePostRequest,
    *,
    user_id: int,
) -> schemas.PostResponse:
    content = (payload.content or "").strip()
    image_urls = _clean_image_urls(payload.image_urls)
    if not content and not image_urls:
        raise errors.validation("Post content or image is required")
    post_type = _check_post_type(payload.post_type)

    row = await repository.create_post(
        db,
        user_id=user_id,
        content=content,
        image_urls=image_urls,
        post_type=post_type,
        comments_enabled=payload.comments_enabled,
    )
    logger.info("post_created post_id=%s user_id=%s", row["id"], user_id)
    built = await build_post_responses(db, [row], viewer_id=user_id)
    return built[0]


async def list_posts(
    db: Database,
    *,
    page: int,
    limit: int,
    viewer_id: int | None = None,
) -> schemas.PostPage:
    rows = await repository.list_posts(db, limit=limit, offset=page_offset(page, limit))
    total = await repository.count_posts(db)
    return schemas.PostPage(
        posts=await build_post_responses(db, rows, viewer_id=viewer_id),
        pagination=paginate(page=page, limit=limit, total=total),
    )


async def get_post(db: Database, *, post_id: int, viewer_id: int | None = None) -> schemas.PostDetail:
    row = await repository.get_post(db, post_id)
    if row is None:
        raise errors.not_found("Post not found")

    built = await build_post_responses(db, [row], viewer_id=viewer_id)
    comments: list = []
    if bool(row["comments_enabled"]):
        comment_rows = await comment_repository.list_top_level(db, post_id, limit=POST_DETAIL_COMMENTS, offset=0)
        comments = await comment_service.build_comment_responses(db, comment_rows, viewer_id=viewer_id)
    return schemas.PostDetail(**built[0].model_dump(), comments=comments)


async def _owned_post(db: Executor, post_id: int, *, user_id: int, message: str, for_update: bool = False) -> dict:
    post = await repository.get_post(db, post_id, for_update=for_update)
    if post is None:
        raise errors.not_found("Post not found")
    if int(post["user_id"]) != user_id:
        raise errors.forbidden(message)
    return post


async def update_post(
    db: Database,
    payload: schemas.UpdatePostRequest,
    *,
    user_id: int,
    post_id: int,
) -> schemas.PostResponse:
    async with db.transaction() as tx:
        post = await _owned_post(tx, post_id, user_id=user_id, message="You can only edit your own posts", for_update=True)

        content = payload.content.strip() if payload.content is not None else str(post.get("content") or "")
        image_urls = (
            _clean_image_urls(payload.image_urls)
            if payload.image_urls is not None
            else list(post.get("image_urls") or [])
        )
        if not content and not image_urls:
            raise errors.validation("Post content or image is required")
        post_type = _check_post_type(payload.post_type) if payload.post_type is not None else None

        await repository.update_post(
            tx,
            post_id,
            content=content,
            image_urls=image_urls,
            post_type=post_type,
        )
        row = await repository.get_post(tx, post_id)

    if row is None:
        raise errors.not_found("Post not found")
    built = await build_post_responses(db, [row], viewer_id=user_id)
    return built[0]


async def toggle_like(db: Database, *, user_id: int, post_id: int) -> schemas.LikeResult:
    async with db.transaction() as tx:
        # Row lock serialises toggles on the same post.
        post = await repository.get_post(tx, post_id, for_update=True)
        if post is None:
            raise errors.not_found("Post not found")

        if await repository.remove_like(tx, post_id=post_id, user_id=user_id):
            likes_count = await repository.adjust_likes_count(tx, post_id, -1)
            is_liked = False
        else:
            is_liked = True
            if await repository.add_like(tx, post_id=post_id, user_id=user_id):
                likes_count = await repository.adjust_likes_count(tx, post_id, 1)
            else:
                # The like row already exists; the counter was bumped by whoever inserted it.
                current = await repository.get_post(tx, post_id)
                likes_count = int(current["likes_count"]) if current is not None else 0
    return schemas.LikeResult(likes_count=likes_count, is_liked=is_liked)


async def toggle_comments(db: Database, *, user_id: int, post_id: int) -> schemas.CommentsToggleResult:
    async with db.transaction() as tx:
        post = await _owned_post(
            tx,
            post_id,
            user_id=user_id,
            message="You can only modify comments on your own posts",
            for_update=True,
        )
        enabled = not bool(post["comments_enabled"])
        await repository.update_post(tx, post_id, comments_enabled=enabled)
    return schemas.CommentsToggleResult(comments_enabled=enabled)


async def delete_post(db: Database, *, user_id: int, post_id: int) -> None:
    async with db.transaction() as tx:
        await _owned_post(tx, post_id, user_id=user_id, message="You can only delete your own posts", for_update=True)
        removed_comments = await comment_repository.delete_by_post(tx, post_id)
        await repository.delete_post(tx, post_id)
    logger.info("post_deleted post_id=%s comments_removed=%s", post_id, removed_comments)
