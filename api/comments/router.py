"""
Comment API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies
from core.db import Database, get_db
from core.responses import Success

from . import schemas, service

router = APIRouter()


@router.get("/replies/{comment_id}")
async def list_replies(
    comment_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.CommentPage]:
    data = await service.list_replies(
        db,
        comment_id=comment_id,
        page=page,
        limit=limit,
        viewer_id=int(current_user["id"]),
    )
    return Success(message="Replies retrieved successfully", data=data)


@router.post("/{post_id}")
async def add_comment(
    post_id: int,
    payload: schemas.AddCommentRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.CommentResponse]:
    data = await service.add_comment(db, payload, user_id=int(current_user["id"]), post_id=post_id)
    return Success(message="Comment added successfully", data=data)


@router.get("/{post_id}")
async def list_comments(
    post_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.CommentPage]:
    data = await service.list_comments(
        db,
        post_id=post_id,
        page=page,
        limit=limit,
        viewer_id=int(current_user["id"]),
    )
    return Success(message="Comments retrieved successfully", data=data)


@router.put("/{comment_id}/like")
async def toggle_comment_like(
    comment_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.CommentLikeResult]:
    data = await service.toggle_like(db, user_id=int(current_user["id"]), comment_id=comment_id)
    return Success(message="Comment liked" if data.is_liked else "Comment unliked", data=data)


@router.put("/{comment_id}")
async def update_comment(
    comment_id: int,
    payload: schemas.UpdateCommentRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.CommentResponse]:
    data = await service.update_comment(db, payload, user_id=int(current_user["id"]), comment_id=comment_id)
    return Success(message="Comment updated successfully", data=data)


@router.delete("/{comment_id}")
async def delete_comment(
    comment_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[None]:
    await service.delete_comment(db, user_id=int(current_user["id"]), comment_id=comment_id)
    return Success(message="Comment deleted successfully", data=None)
