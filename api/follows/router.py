"""
Follow API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from core.db import Database, get_db
from core.responses import Success

from . import schemas, service

router = APIRouter()


# Static paths are declared before "/{user_id}" routes.
@router.get("/following")
async def get_following(
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.FollowList]:
    data = await service.following(db, user_id=int(current_user["id"]))
    return Success(message="Following retrieved successfully", data=data)


@router.get("/followers")
async def get_followers(
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.FollowList]:
    data = await service.followers(db, user_id=int(current_user["id"]))
    return Success(message="Followers retrieved successfully", data=data)


@router.get("/status/{user_id}")
async def follow_status(
    user_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.FollowStatus]:
    data = await service.follow_status(db, user_id=int(current_user["id"]), target_id=user_id)
    return Success(message="Follow status retrieved successfully", data=data)


@router.post("/{user_id}")
async def follow_user(
    user_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[None]:
    await service.follow(db, user_id=int(current_user["id"]), target_id=user_id)
    return Success(message="User followed successfully", data=None)


@router.delete("/{user_id}")
async def unfollow_user(
    user_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[None]:
    await service.unfollow(db, user_id=int(current_user["id"]), target_id=user_id)
    return Success(message="User unfollowed successfully", data=None)
