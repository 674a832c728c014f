"""
Tests for the logging bootstrap.
"""

import logging

import pytest

from agenda_bot import logging as agenda_logging


@pytest.fixture
def fresh_root(monkeypatch):
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    monkeypatch.setattr(agenda_logging, "_INITIALIZED", False)
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_writes_to_rotating_file(fresh_root, tmp_path):
    log_file = agenda_logging.configure_logging("debug", log_path=tmp_path / "logs" / "bot.log")
    logging.getLogger("agenda_bot.test").warning("webhook ready")
    for handler in fresh_root.handlers:
        handler.flush()

    assert log_file == tmp_path / "logs" / "bot.log"
    assert fresh_root.level == logging.DEBUG
    assert "[agenda_bot.test] webhook ready" in log_file.read_text(encoding="utf-8")
    assert logging.getLogger("googleapiclient.discovery_cache").level == logging.ERROR


def test_second_call_adds_no_handlers(fresh_root, tmp_path):
    agenda_logging.configure_logging(log_path=tmp_path / "bot.log")
    count = len(fresh_root.handlers)

    agenda_logging.configure_logging(log_path=tmp_path / "bot.log")

    assert len(fresh_root.handlers) == count
