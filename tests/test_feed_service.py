"""Unit tests for feed assembly and the feed post queries."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from core.errors import AppError, ErrorKind
from feed import service
from posts import repository as post_repository

from .conftest import RecordingDb, make_post


class TestFeedQueries:
    async def test_filter_and_paging_happen_in_sql(self):
        db = RecordingDb(rows=[make_post(1, 2)])

        rows = await post_repository.list_posts_by_users(db, [2, 3, 1], limit=10, offset=20)

        query, args = db.calls[0]
        assert "ANY($1::int[])" in query
        assert "LIMIT $2" in query and "OFFSET $3" in query
        assert args == ([2, 3, 1], 10, 20)
        assert rows == db.rows

    async def test_empty_user_set_skips_query(self):
        db = RecordingDb()

        assert await post_repository.list_posts_by_users(db, [], limit=10, offset=0) == []
        assert await post_repository.count_posts_by_users(db, []) == 0
        assert db.calls == []

    async def test_recent_window_is_parameterised(self):
        db = RecordingDb()

        await post_repository.list_recent_posts_by_users(db, [1], since_hours=24, limit=20)

        query, args = db.calls[0]
        assert "make_interval(hours => $2)" in query
        assert args == ([1], 24, 20)


@pytest.fixture
def feed_repos():
    mocks = {
        "followee_ids": AsyncMock(return_value=[4, 7]),
        "list_posts_by_users": AsyncMock(return_value=[]),
        "count_posts_by_users": AsyncMock(return_value=0),
        "list_recent_posts_by_users": AsyncMock(return_value=[]),
        "user_exists": AsyncMock(return_value=True),
        "build_post_responses": AsyncMock(return_value=[]),
    }
    with patch.object(service.follow_repository, "followee_ids", mocks["followee_ids"]), patch.multiple(
        service.post_repository,
        list_posts_by_users=mocks["list_posts_by_users"],
        count_posts_by_users=mocks["count_posts_by_users"],
        list_recent_posts_by_users=mocks["list_recent_posts_by_users"],
    ), patch.object(service.account_repository, "user_exists", mocks["user_exists"]), patch.object(
        service.post_service, "build_post_responses", mocks["build_post_responses"]
    ):
        yield mocks


class TestPersonalizedFeed:
    async def test_followees_plus_self(self, fake_db, feed_repos):
        feed_repos["count_posts_by_users"].return_value = 25

        feed = await service.personalized_feed(fake_db, user_id=1, page=2, limit=10)

        feed_repos["list_posts_by_users"].assert_awaited_once_with(fake_db, [4, 7, 1], limit=10, offset=10)
        feed_repos["count_posts_by_users"].assert_awaited_once_with(fake_db, [4, 7, 1])
        assert feed.feed_info.total_following == 2
        assert feed.feed_info.feed_source == "personalized"
        assert feed.pagination.total_pages == 3
        assert feed.pagination.has_next and feed.pagination.has_prev

    async def test_no_followees_still_shows_own_posts(self, fake_db, feed_repos):
        feed_repos["followee_ids"].return_value = []

        feed = await service.personalized_feed(fake_db, user_id=1, page=1, limit=10)

        feed_repos["list_posts_by_users"].assert_awaited_once_with(fake_db, [1], limit=10, offset=0)
        assert feed.feed_info.total_following == 0
        assert feed.pagination.total_pages == 0
        assert not feed.pagination.has_next


class TestUserFeed:
    async def test_unknown_user(self, fake_db, feed_repos):
        feed_repos["user_exists"].return_value = False

        with pytest.raises(AppError) as exc_info:
            await service.user_feed(fake_db, target_id=9, page=1, limit=10)

        assert exc_info.value.kind is ErrorKind.NOT_FOUND
        feed_repos["list_posts_by_users"].assert_not_awaited()

    async def test_only_target_posts(self, fake_db, feed_repos):
        feed_repos["count_posts_by_users"].return_value = 3

        feed = await service.user_feed(fake_db, target_id=9, page=1, limit=10, viewer_id=1)

        feed_repos["list_posts_by_users"].assert_awaited_once_with(fake_db, [9], limit=10, offset=0)
        assert feed.user_info.user_id == 9
        assert feed.user_info.total_posts == 3


class TestRefresh:
    async def test_recent_window(self, fake_db, feed_repos):
        feed = await service.refresh_feed(fake_db, user_id=1)

        feed_repos["list_recent_posts_by_users"].assert_awaited_once_with(
            fake_db,
            [4, 7, 1],
            since_hours=service.REFRESH_WINDOW_HOURS,
            limit=service.REFRESH_LIMIT,
        )
        assert feed.new_posts_count == 0
        assert feed.refresh_time.tzinfo is not None


class TestAuthorFallback:
    async def test_missing_profile_reads_unknown(self, fake_db, content):
        content.usernames[1] = "ada"
        content.add_post(1)
        content.add_post(2)
        rows = [dict(r) for r in content.posts.values()]

        with patch.object(service.follow_repository, "followee_ids", AsyncMock(return_value=[2])), patch.multiple(
            service.post_repository,
            list_posts_by_users=AsyncMock(return_value=rows),
            count_posts_by_users=AsyncMock(return_value=2),
        ):
            feed = await service.personalized_feed(fake_db, user_id=1, page=1, limit=10)

        assert {p.user_id: p.user.username for p in feed.posts} == {1: "ada", 2: "unknown"}
