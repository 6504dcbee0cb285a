"""Unit tests for post creation, ownership, likes and deletion."""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest

from core.errors import AppError, ErrorKind
from posts import schemas, service


class TestCreatePost:
    async def test_text_post(self, fake_db, content):
        content.usernames[1] = "ada"

        post = await service.create_post(
            fake_db,
            schemas.CreatePostRequest(content="  hello  ", post_type="text"),
            user_id=1,
        )

        assert post.content == "hello"
        assert post.user.username == "ada"
        assert post.likes_count == 0
        assert post.comments_enabled is True

    async def test_image_only_post(self, fake_db, content):
        post = await service.create_post(
            fake_db,
            schemas.CreatePostRequest(image_urls=["https://img/1.png", "  "], post_type="image"),
            user_id=1,
        )

        assert post.image_urls == ["https://img/1.png"]
        assert post.user.username == "unknown"

    @pytest.mark.parametrize(
        "payload,message",
        [
            ({"content": "   ", "post_type": "text"}, "Post content or image is required"),
            ({"image_urls": [" "], "post_type": "image"}, "Post content or image is required"),
            ({"content": "hi", "post_type": "video"}, "Invalid post type"),
            ({"content": "hi"}, "Invalid post type"),
        ],
    )
    async def test_rejected(self, fake_db, content, payload, message):
        with pytest.raises(AppError) as exc_info:
            await service.create_post(fake_db, schemas.CreatePostRequest(**payload), user_id=1)

        assert exc_info.value.kind is ErrorKind.VALIDATION
        assert exc_info.value.message == message
        assert content.posts == {}


class TestOwnership:
    async def test_edit_by_stranger_forbidden(self, fake_db, content):
        post = content.add_post(1)

        with pytest.raises(AppError) as exc_info:
            await service.update_post(fake_db, schemas.UpdatePostRequest(content="x"), user_id=2, post_id=post["id"])

        assert exc_info.value.kind is ErrorKind.FORBIDDEN
        assert exc_info.value.message == "You can only edit your own posts"
        assert content.posts[post["id"]]["content"] == post["content"]

    async def test_toggle_comments_by_stranger_forbidden(self, fake_db, content):
        post = content.add_post(1)

        with pytest.raises(AppError) as exc_info:
            await service.toggle_comments(fake_db, user_id=2, post_id=post["id"])

        assert exc_info.value.kind is ErrorKind.FORBIDDEN

    async def test_delete_by_stranger_keeps_everything(self, fake_db, content):
        post = content.add_post(1)
        content.add_comment(post["id"], 2)

        with pytest.raises(AppError) as exc_info:
            await service.delete_post(fake_db, user_id=2, post_id=post["id"])

        assert exc_info.value.message == "You can only delete your own posts"
        assert post["id"] in content.posts
        assert len(content.comments) == 1

    async def test_missing_post(self, fake_db, content):
        with pytest.raises(AppError) as exc_info:
            await service.delete_post(fake_db, user_id=1, post_id=404)

        assert exc_info.value.kind is ErrorKind.NOT_FOUND


class TestUpdatePost:
    async def test_partial_update_keeps_images(self, fake_db, content):
        post = content.add_post(1, image_urls=["https://img/a.png"], post_type="text_with_image")

        updated = await service.update_post(
            fake_db,
            schemas.UpdatePostRequest(content="edited"),
            user_id=1,
            post_id=post["id"],
        )

        assert updated.content == "edited"
        assert updated.image_urls == ["https://img/a.png"]
        assert updated.post_type == "text_with_image"

    async def test_cannot_empty_a_post(self, fake_db, content):
        post = content.add_post(1)

        with pytest.raises(AppError) as exc_info:
            await service.update_post(fake_db, schemas.UpdatePostRequest(content=""), user_id=1, post_id=post["id"])

        assert exc_info.value.message == "Post content or image is required"

    async def test_toggle_comments_flips_flag(self, fake_db, content):
        post = content.add_post(1)

        first = await service.toggle_comments(fake_db, user_id=1, post_id=post["id"])
        second = await service.toggle_comments(fake_db, user_id=1, post_id=post["id"])

        assert first.comments_enabled is False
        assert second.comments_enabled is True


class TestDeletePost:
    async def test_comments_removed_with_post(self, fake_db, content):
        post = content.add_post(1)
        other = content.add_post(2)
        top = content.add_comment(post["id"], 2)
        content.add_comment(post["id"], 3, parent_comment_id=top["id"])
        content.add_comment(other["id"], 1)

        await service.delete_post(fake_db, user_id=1, post_id=post["id"])

        assert post["id"] not in content.posts
        assert [c["post_id"] for c in content.comments.values()] == [other["id"]]
        assert fake_db.commits == 1


class TestLikes:
    async def test_toggle_is_per_user(self, fake_db, content):
        post = content.add_post(1)

        first = await service.toggle_like(fake_db, user_id=2, post_id=post["id"])
        second = await service.toggle_like(fake_db, user_id=3, post_id=post["id"])
        undo = await service.toggle_like(fake_db, user_id=2, post_id=post["id"])

        assert (first.likes_count, first.is_liked) == (1, True)
        assert (second.likes_count, second.is_liked) == (2, True)
        assert (undo.likes_count, undo.is_liked) == (1, False)

    async def test_same_user_racing_toggles_keep_counter_in_step(self, fake_db, content):
        post = content.add_post(1)

        async def remove_then_yield(db, *, post_id, user_id):
            removed = await content.remove_post_like(db, post_id=post_id, user_id=user_id)
            await asyncio.sleep(0)
            return removed

        with patch.object(service.repository, "remove_like", remove_then_yield):
            results = await asyncio.gather(
                service.toggle_like(fake_db, user_id=7, post_id=post["id"]),
                service.toggle_like(fake_db, user_id=7, post_id=post["id"]),
            )

        assert content.post_likes == {(post["id"], 7)}
        assert content.posts[post["id"]]["likes_count"] == 1
        assert [(r.likes_count, r.is_liked) for r in results] == [(1, True), (1, True)]

    async def test_toggle_locks_the_post_row(self, fake_db, content):
        post = content.add_post(1)
        locks = []

        async def recording_get_post(db, post_id, *, for_update=False):
            locks.append(for_update)
            return await content.get_post(db, post_id)

        with patch.object(service.repository, "get_post", recording_get_post):
            await service.toggle_like(fake_db, user_id=2, post_id=post["id"])

        assert locks[0] is True

    async def test_viewer_flag_in_listing(self, fake_db, content):
        liked = content.add_post(1)
        content.add_post(1)
        await service.toggle_like(fake_db, user_id=5, post_id=liked["id"])

        page = await service.list_posts(fake_db, page=1, limit=10, viewer_id=5)

        flags = {p.id: p.is_liked for p in page.posts}
        assert flags == {liked["id"]: True, liked["id"] + 1: False}
        assert page.pagination.total == 2


class TestGetPost:
    async def test_includes_top_level_comments(self, fake_db, content):
        post = content.add_post(1)
        top = content.add_comment(post["id"], 2)
        content.add_comment(post["id"], 3, parent_comment_id=top["id"])

        detail = await service.get_post(fake_db, post_id=post["id"])

        assert [c.id for c in detail.comments] == [top["id"]]

    async def test_disabled_comments_are_hidden(self, fake_db, content):
        post = content.add_post(1, comments_enabled=False)
        content.add_comment(post["id"], 2)

        detail = await service.get_post(fake_db, post_id=post["id"])

        assert detail.comments == []
