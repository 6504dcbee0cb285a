"""Unit tests for envelopes and pagination."""

import math

import pytest

from core.errors import AppError, ErrorKind, STATUS_BY_KIND
from core.responses import Failure, Success, page_offset, paginate


class TestPaginate:
    @pytest.mark.parametrize(
        "page,limit,total",
        [(1, 10, 0), (1, 10, 5), (1, 10, 10), (2, 10, 11), (3, 7, 20), (5, 3, 12), (9, 10, 25)],
    )
    def test_flags_follow_total_pages(self, page, limit, total):
        result = paginate(page=page, limit=limit, total=total)

        assert result.total_pages == math.ceil(total / limit)
        assert result.has_next == (page < result.total_pages)
        assert result.has_prev == (page > 1)
        assert result.current_page == page
        assert result.total == total

    def test_offset(self):
        assert page_offset(1, 10) == 0
        assert page_offset(3, 7) == 14


class TestEnvelopes:
    def test_success_is_tagged_true(self):
        body = Success(message="ok", data={"x": 1}).model_dump()
        assert body == {"success": True, "message": "ok", "data": {"x": 1}}

    def test_failure_is_tagged_false(self):
        body = Failure(error=ErrorKind.CONFLICT, message="dup").model_dump(mode="json")
        assert body == {"success": False, "error": "conflict", "message": "dup"}


class TestAppError:
    def test_every_kind_has_a_status(self):
        assert set(STATUS_BY_KIND) == set(ErrorKind)

    def test_status_code_follows_kind(self):
        assert AppError(ErrorKind.NOT_FOUND, "x").status_code == 404
        assert AppError(ErrorKind.VALIDATION, "x").status_code == 400
        assert AppError(ErrorKind.FORBIDDEN, "x").status_code == 403
