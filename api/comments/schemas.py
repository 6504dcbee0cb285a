"""
Pydantic schemas for comment endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from core.responses import Pagination
from users.schemas import AuthorResponse


class AddCommentRequest(BaseModel):
    content: str = Field(default="", max_length=2000)
    parent_comment_id: int | None = Field(default=None, ge=1, alias="parentCommentId")

    model_config = {"populate_by_name": True}


class UpdateCommentRequest(BaseModel):
    content: str = Field(default="", max_length=2000)


class CommentResponse(BaseModel):
    id: int
    user_id: int
    post_id: int
    parent_comment_id: int | None = None
    content: str
    likes_count: int
    replies_count: int = 0
    is_liked: bool = False
    is_edited: bool = False
    edited_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    user: AuthorResponse


class CommentPage(BaseModel):
    comments: list[CommentResponse]
    pagination: Pagination


class CommentLikeResult(BaseModel):
    likes_count: int
    is_liked: bool
