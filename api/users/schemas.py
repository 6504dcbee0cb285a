"""
Pydantic schemas for user/profile endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from core.responses import Pagination


class UserData(BaseModel):
    name: str
    is_account_verified: bool


class ProfileResponse(BaseModel):
    username: str | None = None
    bio: str | None = None
    profile_picture: str | None = None
    cover_picture: str | None = None
    location: str | None = None
    followers_count: int = 0
    following_count: int = 0


class UpdateProfileRequest(BaseModel):
    username: str | None = Field(default=None, max_length=64)
    bio: str | None = Field(default=None, max_length=500)
    location: str | None = Field(default=None, max_length=100)
    profile_picture: str | None = Field(default=None, max_length=2048)
    cover_photo: str | None = Field(default=None, max_length=2048)


class UpdateUsernameRequest(BaseModel):
    username: str = Field(default="", max_length=64)


class UsernameResponse(BaseModel):
    username: str


class UserSummary(BaseModel):
    id: int
    name: str
    email: str
    username: str | None = None
    is_account_verified: bool = False
    created_at: datetime | None = None


class SearchResult(UserSummary):
    bio: str | None = None
    profile_picture: str | None = None
    cover_picture: str | None = None
    location: str | None = None
    followers_count: int = 0
    following_count: int = 0
    connection_status: Literal["following", "connected", "none"] = "none"
    is_following: bool = False


class SearchPage(BaseModel):
    users: list[SearchResult]
    search_query: str
    pagination: Pagination


class AuthorResponse(BaseModel):
    id: int
    name: str | None = None
    email: str | None = None
    username: str = "unknown"
