"""
Follow business logic.
"""

from __future__ import annotations

import logging

from auth import repository as account_repository
from core import errors
from core.db import Database
from users import service as user_service
from users.schemas import UserSummary

from . import repository, schemas

logger = logging.getLogger(__name__)


async def follow(db: Database, *, user_id: int, target_id: int) -> None:
    if user_id == target_id:
        raise errors.validation("You cannot follow yourself")

    if not await account_repository.user_exists(db, target_id):
        raise errors.not_found("User not found")

    # Profiles are created lazily so every followed user has a username.
    async with db.transaction() as tx:
        await user_service.ensure_profile(tx, user_id)
        await user_service.ensure_profile(tx, target_id)
        edge = await repository.insert_follow(tx, follower_id=user_id, followee_id=target_id)
        if edge is None:
            raise errors.conflict("You are already following this user")

    logger.info("follow_created follower_id=%s followee_id=%s", user_id, target_id)


async def unfollow(db: Database, *, user_id: int, target_id: int) -> None:
    if user_id == target_id:
        raise errors.validation("You cannot unfollow yourself")

    removed = await repository.delete_follow(db, follower_id=user_id, followee_id=target_id)
    if not removed:
        raise errors.not_found("You are not following this user")


async def following(db: Database, *, user_id: int) -> schemas.FollowList:
    rows = await repository.list_following(db, user_id)
    users = [UserSummary(**row) for row in rows]
    return schemas.FollowList(users=users, count=len(users))


async def followers(db: Database, *, user_id: int) -> schemas.FollowList:
    rows = await repository.list_followers(db, user_id)
    users = [UserSummary(**row) for row in rows]
    return schemas.FollowList(users=users, count=len(users))


async def follow_status(db: Database, *, user_id: int, target_id: int) -> schemas.FollowStatus:
    if user_id == target_id:
        raise errors.validation("Cannot check follow status with yourself")

    is_following = await repository.is_following(db, follower_id=user_id, followee_id=target_id)
    is_followed_by = await repository.is_following(db, follower_id=target_id, followee_id=user_id)
    return schemas.FollowStatus(
        is_following=is_following,
        is_followed_by=is_followed_by,
        is_mutual=is_following and is_followed_by,
    )
