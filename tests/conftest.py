"""Shared fixtures: a fake Database and an app client with auth overridden."""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

os.environ.setdefault("JWT_SECRET", "test-secret-key-for-the-social-api-suite")


class FakeDatabase:
    """Stands in for core.db.Database when repositories are patched.

    `transaction()` yields the database itself and records commits and
    rollbacks so tests can assert on transaction boundaries.
    """

    def __init__(self) -> None:
        self.commits = 0
        self.rollbacks = 0

    @asynccontextmanager
    async def transaction(self):
        try:
            yield self
        except BaseException:
            self.rollbacks += 1
            raise
        else:
            self.commits += 1


class RecordingDb:
    """Captures SQL and arguments; returns canned rows."""

    def __init__(self, rows: list[dict] | None = None, value: int = 0) -> None:
        self.rows = rows or []
        self.value = value
        self.calls: list[tuple[str, tuple]] = []

    async def fetch_all(self, query, *args):
        self.calls.append((query, args))
        return self.rows

    async def fetch_value(self, query, *args):
        self.calls.append((query, args))
        return self.value


NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_user(user_id: int, **overrides) -> dict:
    row = {
        "id": user_id,
        "name": f"User {user_id}",
        "email": f"user{user_id}@example.com",
        "password": "",
        "is_account_verified": False,
        "verify_otp": "",
        "verify_otp_expire_at": 0,
        "reset_otp": "",
        "reset_otp_expire_at": 0,
        "created_at": NOW,
        "updated_at": NOW,
    }
    row.update(overrides)
    return row


def make_post(post_id: int, user_id: int, **overrides) -> dict:
    row = {
        "id": post_id,
        "user_id": user_id,
        "content": f"post {post_id}",
        "image_urls": [],
        "post_type": "text",
        "comments_enabled": True,
        "likes_count": 0,
        "comments_count": 0,
        "created_at": NOW,
        "updated_at": NOW,
        "user_name": f"User {user_id}",
        "user_email": f"user{user_id}@example.com",
    }
    row.update(overrides)
    return row


def make_comment(comment_id: int, post_id: int, user_id: int, **overrides) -> dict:
    row = {
        "id": comment_id,
        "user_id": user_id,
        "post_id": post_id,
        "parent_comment_id": None,
        "content": f"comment {comment_id}",
        "likes_count": 0,
        "is_edited": False,
        "edited_at": None,
        "created_at": NOW,
        "updated_at": NOW,
        "user_name": f"User {user_id}",
        "user_email": f"user{user_id}@example.com",
        "replies_count": 0,
    }
    row.update(overrides)
    return row


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def client(fake_db):
    """TestClient with get_db overridden; lifespan (real pool) is not started."""
    from fastapi.testclient import TestClient

    from core.db import get_db
    from main import app

    app.dependency_overrides[get_db] = lambda: fake_db
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()


class InMemoryContent:
    """Posts, comments and likes kept in dicts, exposing the repository call shapes."""

    def __init__(self) -> None:
        self.posts: dict[int, dict] = {}
        self.comments: dict[int, dict] = {}
        self.post_likes: set[tuple[int, int]] = set()
        self.comment_likes: set[tuple[int, int]] = set()
        self.usernames: dict[int, str] = {}
        self._next_post = 1
        self._next_comment = 1

    def add_post(self, user_id: int, **overrides) -> dict:
        row = make_post(self._next_post, user_id, **overrides)
        self.posts[row["id"]] = row
        self._next_post += 1
        return row

    def add_comment(self, post_id: int, user_id: int, **overrides) -> dict:
        row = make_comment(self._next_comment, post_id, user_id, **overrides)
        self.comments[row["id"]] = row
        self._next_comment += 1
        return row

    # posts.repository

    async def create_post(self, db, *, user_id, content, image_urls, post_type, comments_enabled):
        row = self.add_post(
            user_id,
            content=content,
            image_urls=image_urls,
            post_type=post_type,
            comments_enabled=comments_enabled,
        )
        return dict(row)

    async def get_post(self, db, post_id, *, for_update=False):
        row = self.posts.get(post_id)
        return dict(row) if row else None

    async def list_posts(self, db, *, limit, offset):
        rows = sorted(self.posts.values(), key=lambda r: r["id"], reverse=True)
        return [dict(r) for r in rows[offset : offset + limit]]

    async def count_posts(self, db):
        return len(self.posts)

    async def update_post(self, db, post_id, *, content=None, image_urls=None, post_type=None, comments_enabled=None):
        changes = {
            "content": content,
            "image_urls": image_urls,
            "post_type": post_type,
            "comments_enabled": comments_enabled,
        }
        self.posts[post_id].update({k: v for k, v in changes.items() if v is not None})

    async def delete_post(self, db, post_id):
        return self.posts.pop(post_id, None) is not None

    async def add_post_like(self, db, *, post_id, user_id):
        key = (post_id, user_id)
        if key in self.post_likes:
            return False
        self.post_likes.add(key)
        return True

    async def remove_post_like(self, db, *, post_id, user_id):
        key = (post_id, user_id)
        if key not in self.post_likes:
            return False
        self.post_likes.discard(key)
        return True

    async def adjust_post_likes(self, db, post_id, delta):
        post = self.posts[post_id]
        post["likes_count"] = max(0, post["likes_count"] + delta)
        return post["likes_count"]

    async def adjust_comments_count(self, db, post_id, delta):
        post = self.posts[post_id]
        post["comments_count"] = max(0, post["comments_count"] + delta)
        return post["comments_count"]

    async def liked_post_ids(self, db, *, user_id, post_ids):
        return {pid for pid, uid in self.post_likes if uid == user_id and pid in post_ids}

    # comments.repository

    async def create_comment(self, db, *, user_id, post_id, content, parent_comment_id=None):
        return dict(self.add_comment(post_id, user_id, content=content, parent_comment_id=parent_comment_id))

    async def get_comment(self, db, comment_id, *, for_update=False):
        row = self.comments.get(comment_id)
        return dict(row) if row else None

    async def list_top_level(self, db, post_id, *, limit, offset):
        rows = [r for r in self.comments.values() if r["post_id"] == post_id and r["parent_comment_id"] is None]
        return [dict(r) for r in rows[offset : offset + limit]]

    async def count_top_level(self, db, post_id):
        return len([r for r in self.comments.values() if r["post_id"] == post_id and r["parent_comment_id"] is None])

    async def list_replies(self, db, comment_id, *, limit, offset):
        rows = [r for r in self.comments.values() if r["parent_comment_id"] == comment_id]
        return [dict(r) for r in rows[offset : offset + limit]]

    async def count_replies(self, db, comment_id):
        return len([r for r in self.comments.values() if r["parent_comment_id"] == comment_id])

    async def update_content(self, db, comment_id, *, content):
        self.comments[comment_id].update(content=content, is_edited=True, edited_at=NOW)
        return dict(self.comments[comment_id])

    async def delete_comment_thread(self, db, comment_id):
        doomed = [cid for cid, r in self.comments.items() if cid == comment_id or r["parent_comment_id"] == comment_id]
        for cid in doomed:
            del self.comments[cid]
        return len(doomed)

    async def delete_by_post(self, db, post_id):
        doomed = [cid for cid, r in self.comments.items() if r["post_id"] == post_id]
        for cid in doomed:
            del self.comments[cid]
        return len(doomed)

    async def add_comment_like(self, db, *, comment_id, user_id):
        key = (comment_id, user_id)
        if key in self.comment_likes:
            return False
        self.comment_likes.add(key)
        return True

    async def remove_comment_like(self, db, *, comment_id, user_id):
        key = (comment_id, user_id)
        if key not in self.comment_likes:
            return False
        self.comment_likes.discard(key)
        return True

    async def adjust_comment_likes(self, db, comment_id, delta):
        comment = self.comments[comment_id]
        comment["likes_count"] = max(0, comment["likes_count"] + delta)
        return comment["likes_count"]

    async def liked_comment_ids(self, db, *, user_id, comment_ids):
        return {cid for cid, uid in self.comment_likes if uid == user_id and cid in comment_ids}

    # users.repository

    async def usernames_by_user_ids(self, db, user_ids):
        return {uid: self.usernames[uid] for uid in user_ids if uid in self.usernames}


@pytest.fixture
def content():
    from comments import repository as comment_repository
    from posts import repository as post_repository
    from users import repository as user_repository

    store = InMemoryContent()
    with patch.multiple(
        post_repository,
        create_post=store.create_post,
        get_post=store.get_post,
        list_posts=store.list_posts,
        count_posts=store.count_posts,
        update_post=store.update_post,
        delete_post=store.delete_post,
        add_like=store.add_post_like,
        remove_like=store.remove_post_like,
        adjust_likes_count=store.adjust_post_likes,
        adjust_comments_count=store.adjust_comments_count,
        liked_post_ids=store.liked_post_ids,
    ), patch.multiple(
        comment_repository,
        create_comment=store.create_comment,
        get_comment=store.get_comment,
        list_top_level=store.list_top_level,
        count_top_level=store.count_top_level,
        list_replies=store.list_replies,
        count_replies=store.count_replies,
        update_content=store.update_content,
        delete_comment_thread=store.delete_comment_thread,
        delete_by_post=store.delete_by_post,
        add_like=store.add_comment_like,
        remove_like=store.remove_comment_like,
        adjust_likes_count=store.adjust_comment_likes,
        liked_comment_ids=store.liked_comment_ids,
    ), patch.object(user_repository, "usernames_by_user_ids", store.usernames_by_user_ids):
        yield store
