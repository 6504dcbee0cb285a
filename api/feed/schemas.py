"""
Pydantic schemas for feed endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from core.responses import Pagination
from posts.schemas import PostResponse


class FeedInfo(BaseModel):
    total_following: int
    feed_source: Literal["personalized"] = "personalized"


class PersonalizedFeed(BaseModel):
    posts: list[PostResponse]
    pagination: Pagination
    feed_info: FeedInfo


class UserInfo(BaseModel):
    user_id: int
    total_posts: int


class UserFeed(BaseModel):
    posts: list[PostResponse]
    pagination: Pagination
    user_info: UserInfo


class RefreshedFeed(BaseModel):
    recent_posts: list[PostResponse]
    refresh_time: datetime
    new_posts_count: int
