"""
Feed API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies
from core.db import Database, get_db
from core.responses import Success

from . import schemas, service

router = APIRouter()


@router.get("/personalized")
async def personalized_feed(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.PersonalizedFeed]:
    data = await service.personalized_feed(db, user_id=int(current_user["id"]), page=page, limit=limit)
    return Success(message="Feed retrieved successfully", data=data)


@router.get("/user/{user_id}")
async def user_feed(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.UserFeed]:
    data = await service.user_feed(
        db,
        target_id=user_id,
        page=page,
        limit=limit,
        viewer_id=int(current_user["id"]),
    )
    return Success(message="User feed retrieved successfully", data=data)


@router.post("/refresh")
async def refresh_feed(
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.RefreshedFeed]:
    data = await service.refresh_feed(db, user_id=int(current_user["id"]))
    return Success(message="Feed refreshed successfully", data=data)
