"""Tests for the shared logging setup."""

import logging
from contextlib import contextmanager

from src.logging_config import DEFAULT_LOG_FILE, configure_logging, resolve_log_file


@contextmanager
def bare_root():
    """Run with an unconfigured root logger, restoring it afterwards."""
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    urllib3_level = logging.getLogger("urllib3").level
    root.handlers[:] = []
    try:
        yield root
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
        logging.getLogger("urllib3").setLevel(urllib3_level)


class TestResolveLogFile:
    def test_explicit_path_wins(self, monkeypatch):
        monkeypatch.setenv("CHECKLISTS_LOG_FILE", "/tmp/env.log")
        assert resolve_log_file("custom.log") == "custom.log"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("CHECKLISTS_LOG_FILE", "")
        assert resolve_log_file() == ""

    def test_default(self, monkeypatch):
        monkeypatch.delenv("CHECKLISTS_LOG_FILE", raising=False)
        assert resolve_log_file() == DEFAULT_LOG_FILE


class TestConfigureLogging:
    def test_writes_file_log(self, tmp_path):
        path = tmp_path / "logs" / "run.log"

        with bare_root() as root:
            configure_logging(log_file=str(path))
            logging.getLogger("src.test").info("hello grid")
            for handler in root.handlers:
                handler.flush()
            handler_count = len(root.handlers)

        assert handler_count == 2
        assert "hello grid" in path.read_text()

    def test_stderr_only_when_disabled(self, monkeypatch):
        monkeypatch.setenv("CHECKLISTS_LOG_FILE", "")
        with bare_root() as root:
            configure_logging()
            assert len(root.handlers) == 1

    def test_idempotent(self):
        with bare_root() as root:
            configure_logging(log_file="")
            configure_logging(log_file="")
            assert len(root.handlers) == 1

    def test_quiets_urllib3(self):
        with bare_root() as root:
            configure_logging(logging.DEBUG, log_file="")
            assert root.level == logging.DEBUG
            assert logging.getLogger("urllib3").level == logging.WARNING
