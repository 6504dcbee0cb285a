"""
User/profile API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies
from core.db import Database, get_db
from core.responses import Success

from . import schemas, service

router = APIRouter()


@router.get("/data")
async def get_user_data(
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.UserData]:
    data = await service.get_user_data(db, user_id=int(current_user["id"]))
    return Success(message="User data retrieved successfully", data=data)


@router.get("/profile")
async def get_profile(
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.ProfileResponse]:
    data = await service.get_profile(db, user_id=int(current_user["id"]))
    return Success(message="User profile retrieved successfully", data=data)


@router.put("/profile")
async def update_profile(
    payload: schemas.UpdateProfileRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.ProfileResponse]:
    data = await service.update_profile(db, payload, user_id=int(current_user["id"]))
    return Success(message="Profile updated successfully", data=data)


@router.put("/profile/username")
async def update_username(
    payload: schemas.UpdateUsernameRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.UsernameResponse]:
    data = await service.update_username(db, user_id=int(current_user["id"]), username=payload.username)
    return Success(message="Username updated successfully", data=data)


@router.get("/search")
async def search_users(
    query: str = Query(default="", max_length=200),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.SearchPage]:
    data = await service.search_users(
        db,
        user_id=int(current_user["id"]),
        query=query,
        page=page,
        limit=limit,
    )
    return Success(message="Search completed successfully", data=data)
