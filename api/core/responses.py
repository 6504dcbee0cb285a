"""
Response envelopes shared by every endpoint.

A response is one of two tagged variants, discriminated by `success`:
- `Success[T]`: {"success": true, "message": ..., "data": T}
- `Failure`:    {"success": false, "error": <ErrorKind>, "message": ...}
"""

from __future__ import annotations

import math
from typing import Generic, Literal, TypeVar

from pydantic import BaseModel

from .errors import ErrorKind

T = TypeVar("T")


class Success(BaseModel, Generic[T]):
    success: Literal[True] = True
    message: str = ""
    data: T


class Failure(BaseModel):
    success: Literal[False] = False
    error: ErrorKind
    message: str


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total: int
    limit: int
    has_next: bool
    has_prev: bool


def paginate(*, page: int, limit: int, total: int) -> Pagination:
    total_pages = math.ceil(total / limit) if limit > 0 else 0
    return Pagination(
        current_page=page,
        total_pages=total_pages,
        total=total,
        limit=limit,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit
