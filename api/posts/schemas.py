"""
Pydantic schemas for post endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from comments.schemas import CommentResponse
from core.responses import Pagination
from users.schemas import AuthorResponse

PostType = Literal["text", "image", "text_with_image"]
POST_TYPES = ("text", "image", "text_with_image")


class CreatePostRequest(BaseModel):
    content: str | None = Field(default=None, max_length=5000)
    image_urls: list[str] | None = Field(default=None, max_length=10)
    post_type: str | None = None
    comments_enabled: bool = True


class UpdatePostRequest(BaseModel):
    content: str | None = Field(default=None, max_length=5000)
    image_urls: list[str] | None = Field(default=None, max_length=10)
    post_type: str | None = None


class PostResponse(BaseModel):
    id: int
    user_id: int
    content: str
    image_urls: list[str]
    post_type: PostType
    comments_enabled: bool
    likes_count: int
    comments_count: int
    is_liked: bool = False
    created_at: datetime
    updated_at: datetime
    user: AuthorResponse


class PostDetail(PostResponse):
    comments: list[CommentResponse] = Field(default_factory=list)


class PostPage(BaseModel):
    posts: list[PostResponse]
    pagination: Pagination


class LikeResult(BaseModel):
    likes_count: int
    is_liked: bool


class CommentsToggleResult(BaseModel):
    comments_enabled: bool
