"""
Pydantic schemas for follow endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel

from users.schemas import UserSummary


class FollowList(BaseModel):
    users: list[UserSummary]
    count: int


class FollowStatus(BaseModel):
    is_following: bool
    is_followed_by: bool
    is_mutual: bool
