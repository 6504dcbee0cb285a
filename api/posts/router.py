"""
Post API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies
from core.db import Database, get_db
from core.responses import Success

from . import schemas, service

router = APIRouter()


def _viewer_id(user: dict | None) -> int | None:
    return int(user["id"]) if user is not None else None


@router.post("/create")
async def create_post(
    payload: schemas.CreatePostRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.PostResponse]:
    data = await service.create_post(db, payload, user_id=int(current_user["id"]))
    return Success(message="Post created successfully", data=data)


@router.get("")
async def list_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    viewer: dict | None = Depends(auth_dependencies.get_optional_user),
    db: Database = Depends(get_db),
) -> Success[schemas.PostPage]:
    data = await service.list_posts(db, page=page, limit=limit, viewer_id=_viewer_id(viewer))
    return Success(message="Posts retrieved successfully", data=data)


@router.get("/{post_id}")
async def get_post(
    post_id: int,
    viewer: dict | None = Depends(auth_dependencies.get_optional_user),
    db: Database = Depends(get_db),
) -> Success[schemas.PostDetail]:
    data = await service.get_post(db, post_id=post_id, viewer_id=_viewer_id(viewer))
    return Success(message="Post retrieved successfully", data=data)


@router.put("/{post_id}/like")
async def toggle_post_like(
    post_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.LikeResult]:
    data = await service.toggle_like(db, user_id=int(current_user["id"]), post_id=post_id)
    return Success(message="Post liked" if data.is_liked else "Post unliked", data=data)


@router.put("/{post_id}/comments")
async def toggle_comments(
    post_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.CommentsToggleResult]:
    data = await service.toggle_comments(db, user_id=int(current_user["id"]), post_id=post_id)
    state = "enabled" if data.comments_enabled else "disabled"
    return Success(message=f"Comments {state} successfully", data=data)


@router.put("/{post_id}")
async def update_post(
    post_id: int,
    payload: schemas.UpdatePostRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.PostResponse]:
    data = await service.update_post(db, payload, user_id=int(current_user["id"]), post_id=post_id)
    return Success(message="Post updated successfully", data=data)


@router.delete("/{post_id}")
async def delete_post(
    post_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[None]:
    await service.delete_post(db, user_id=int(current_user["id"]), post_id=post_id)
    return Success(message="Post deleted successfully", data=None)
