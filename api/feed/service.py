"""
Feed assembly.

The follow set (followees plus the caller) is resolved first and pushed into
the post query, so every page is filtered and counted in SQL.
"""

from __future__ import annotations

from datetime import datetime, timezone

from auth import repository as account_repository
from core import errors
from core.db import Database
from core.responses import page_offset, paginate
from follows import repository as follow_repository
from posts import repository as post_repository
from posts import service as post_service

from . import schemas

REFRESH_WINDOW_HOURS = 24
REFRESH_LIMIT = 20


async def _feed_user_ids(db: Database, user_id: int) -> tuple[list[int], int]:
    followees = await follow_repository.followee_ids(db, user_id)
    return [*followees, user_id], len(followees)


async def personalized_feed(db: Database, *, user_id: int, page: int, limit: int) -> schemas.PersonalizedFeed:
    user_ids, total_following = await _feed_user_ids(db, user_id)

    rows = await post_repository.list_posts_by_users(db, user_ids, limit=limit, offset=page_offset(page, limit))
    total = await post_repository.count_posts_by_users(db, user_ids)
    return schemas.PersonalizedFeed(
        posts=await post_service.build_post_responses(db, rows, viewer_id=user_id),
        pagination=paginate(page=page, limit=limit, total=total),
        feed_info=schemas.FeedInfo(total_following=total_following),
    )


async def user_feed(
    db: Database,
    *,
    target_id: int,
    page: int,
    limit: int,
    viewer_id: int | None = None,
) -> schemas.UserFeed:
    if not await account_repository.user_exists(db, target_id):
        raise errors.not_found("User not found")

    rows = await post_repository.list_posts_by_users(db, [target_id], limit=limit, offset=page_offset(page, limit))
    total = await post_repository.count_posts_by_users(db, [target_id])
    return schemas.UserFeed(
        posts=await post_service.build_post_responses(db, rows, viewer_id=viewer_id),
        pagination=paginate(page=page, limit=limit, total=total),
        user_info=schemas.UserInfo(user_id=target_id, total_posts=total),
    )


async def refresh_feed(db: Database, *, user_id: int) -> schemas.RefreshedFeed:
    user_ids, _ = await _feed_user_ids(db, user_id)
    rows = await post_repository.list_recent_posts_by_users(
        db,
        user_ids,
        since_hours=REFRESH_WINDOW_HOURS,
        limit=REFRESH_LIMIT,
    )
    posts = await post_service.build_post_responses(db, rows, viewer_id=user_id)
    return schemas.RefreshedFeed(
        recent_posts=posts,
        refresh_time=datetime.now(timezone.utc),
        new_posts_count=len(posts),
    )
