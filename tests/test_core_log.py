"""Unit tests for the root logging setup."""

from __future__ import annotations

import logging

import pytest

from core import log


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_handler_added_once(root_logger, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warning")

    log.configure_logging()
    log.configure_logging()

    ours = [h for h in root_logger.handlers if h.get_name() == log.HANDLER_NAME]
    assert len(ours) == 1
    assert root_logger.level == logging.WARNING


def test_unknown_level_falls_back_to_info(root_logger, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")

    log.configure_logging()

    assert root_logger.level == logging.INFO
