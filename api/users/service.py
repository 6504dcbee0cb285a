"""
User/profile business logic.
"""

from __future__ import annotations

import asyncpg

from auth import repository as account_repository
from auth import security
from core import errors
from core.db import Database, Executor
from core.responses import page_offset, paginate
from follows import repository as follow_repository

from . import repository, schemas


async def ensure_profile(db: Executor, user_id: int) -> dict:
    """
    Return the user's profile, creating one with a generated `user_<id>`
    username (suffixed until unique) when it does not exist yet.
    """
    profile = await repository.get_profile_by_user_id(db, user_id)
    if profile is not None:
        return profile

    base = f"user_{user_id}"
    username = base
    counter = 1
    while True:
        if await repository.get_profile_by_username(db, username) is None:
            created = await repository.insert_profile_if_absent(db, user_id=user_id, username=username)
            if created is not None:
                return created
            # A concurrent request may have created this user's profile.
            profile = await repository.get_profile_by_user_id(db, user_id)
            if profile is not None:
                return profile
        username = f"{base}_{counter}"
        counter += 1


def _unique_conflict(exc: asyncpg.UniqueViolationError) -> errors.AppError:
    if "username" in (exc.constraint_name or ""):
        return errors.conflict("Username already exists")
    return errors.conflict("User profile already exists")


async def _check_username_available(db: Executor, username: str, *, user_id: int) -> None:
    reason = security.username_error(username)
    if reason is not None:
        raise errors.validation(reason)

    existing = await repository.get_profile_by_username(db, username)
    if existing is not None and int(existing["user_id"]) != user_id:
        raise errors.conflict("Username already exists")


async def get_user_data(db: Database, *, user_id: int) -> schemas.UserData:
    user_row = await account_repository.get_user_by_id(db, user_id)
    if user_row is None:
        raise errors.not_found("User not found")
    return schemas.UserData(
        name=str(user_row["name"]),
        is_account_verified=bool(user_row["is_account_verified"]),
    )


async def _profile_response(db: Executor, user_id: int, profile: dict | None) -> schemas.ProfileResponse:
    counts = await follow_repository.follow_counts(db, user_id)
    profile = profile or {}
    return schemas.ProfileResponse(
        username=profile.get("username") or None,
        bio=profile.get("bio") or None,
        profile_picture=profile.get("profile_picture") or None,
        cover_picture=profile.get("cover_picture") or None,
        location=profile.get("location") or None,
        followers_count=counts["followers_count"],
        following_count=counts["following_count"],
    )


async def get_profile(db: Database, *, user_id: int) -> schemas.ProfileResponse:
    if not await account_repository.user_exists(db, user_id):
        raise errors.not_found("User not found")
    profile = await repository.get_profile_by_user_id(db, user_id)
    return await _profile_response(db, user_id, profile)


async def update_profile(
    db: Database,
    payload: schemas.UpdateProfileRequest,
    *,
    user_id: int,
) -> schemas.ProfileResponse:
    fields = payload.model_dump()
    if not any(fields.values()):
        raise errors.validation("At least one field is required to update")

    username = (payload.username or "").strip() or None
    try:
        async with db.transaction() as tx:
            if username is not None:
                await _check_username_available(tx, username, user_id=user_id)

            profile = await repository.get_profile_by_user_id(tx, user_id)
            if profile is None:
                profile = await repository.create_profile(
                    tx,
                    user_id=user_id,
                    username=username or f"user_{user_id}",
                    bio=payload.bio or "",
                    profile_picture=payload.profile_picture,
                    cover_picture=payload.cover_photo,
                    location=payload.location,
                )
            else:
                profile = await repository.update_profile(
                    tx,
                    user_id,
                    username=username,
                    bio=payload.bio,
                    profile_picture=payload.profile_picture,
                    cover_picture=payload.cover_photo,
                    location=payload.location,
                )
            return await _profile_response(tx, user_id, profile)
    except asyncpg.UniqueViolationError as exc:
        raise _unique_conflict(exc) from exc


async def update_username(db: Database, *, user_id: int, username: str) -> schemas.UsernameResponse:
    username = (username or "").strip()
    if not username:
        raise errors.validation("Username is required")

    try:
        async with db.transaction() as tx:
            await _check_username_available(tx, username, user_id=user_id)
            profile = await repository.get_profile_by_user_id(tx, user_id)
            if profile is None:
                profile = await repository.create_profile(tx, user_id=user_id, username=username)
            else:
                profile = await repository.update_profile(tx, user_id, username=username)
    except asyncpg.UniqueViolationError as exc:
        raise _unique_conflict(exc) from exc

    if profile is None:
        raise errors.not_found("User profile not found")
    return schemas.UsernameResponse(username=str(profile["username"]))


def _connection_status(row: dict) -> str:
    if row.get("is_following"):
        return "following"
    if row.get("is_connected"):
        return "connected"
    return "none"


async def search_users(
    db: Database,
    *,
    user_id: int,
    query: str,
    page: int,
    limit: int,
) -> schemas.SearchPage:
    q = (query or "").strip()
    if not q:
        raise errors.validation("Search query is required")

    rows = await repository.search_users(
        db,
        query=q,
        exclude_user_id=user_id,
        limit=limit,
        offset=page_offset(page, limit),
    )
    total = await repository.count_search_users(db, query=q, exclude_user_id=user_id)

    users = [
        schemas.SearchResult(
            **{k: v for k, v in row.items() if k not in {"is_connected"}},
            connection_status=_connection_status(row),
        )
        for row in rows
    ]
    return schemas.SearchPage(
        users=users,
        search_query=q,
        pagination=paginate(page=page, limit=limit, total=total),
    )


async def usernames_for(db: Executor, rows: list[dict]) -> dict[int, str]:
    """
    Batch-resolve usernames for the distinct authors of `rows`.
    """
    return await repository.usernames_by_user_ids(db, [int(row["user_id"]) for row in rows])


def author_of(row: dict, usernames: dict[int, str]) -> schemas.AuthorResponse:
    user_id = int(row["user_id"])
    return schemas.AuthorResponse(
        id=user_id,
        name=row.get("user_name"),
        email=row.get("user_email"),
        username=usernames.get(user_id, "unknown"),
    )
