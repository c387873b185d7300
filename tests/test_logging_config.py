"""Tests for logging setup."""

import logging
from logging.handlers import RotatingFileHandler

import pytest


@pytest.fixture
def restore_loggers():
    saved = {}
    for name in ("", "storage"):
        logger = logging.getLogger(name)
        saved[name] = (list(logger.handlers), logger.level)
    yield
    for name, (handlers, level) in saved.items():
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        for handler in handlers:
            logger.addHandler(handler)
        logger.setLevel(level)


def _flush(*loggers):
    for logger in loggers:
        for handler in logger.handlers:
            handler.flush()


class TestSetupLogging:
    def test_file_handler_writes_log(self, tmp_path, restore_loggers):
        from config.logging_config import setup_logging
        setup_logging(level="DEBUG", log_dir=tmp_path, console_enabled=False)

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert [type(h) for h in root.handlers] == [RotatingFileHandler]

        logging.getLogger("models.serialization").info("parsed %s", "project.json")
        _flush(root)
        assert "parsed project.json" in (tmp_path / "novelstore.log").read_text(encoding="utf-8")

    def test_storage_debug_goes_to_storage_log_only(self, tmp_path, restore_loggers):
        from config.logging_config import setup_logging
        setup_logging(level="WARNING", log_dir=tmp_path, console_enabled=False)

        logging.getLogger("storage.project_store").debug("chapter %s now at version %d", 3, 2)
        storage = logging.getLogger("storage")
        _flush(logging.getLogger(), storage)

        assert "chapter 3 now at version 2" in (tmp_path / "storage.log").read_text(encoding="utf-8")
        assert "chapter 3" not in (tmp_path / "novelstore.log").read_text(encoding="utf-8")

    def test_defaults_from_settings(self, tmp_path, restore_loggers):
        from config.logging_config import setup_logging
        from config.settings import Settings
        settings = Settings(_env_file=None, log_dir=tmp_path / "logs", log_level="error")
        setup_logging(console_enabled=False, settings=settings)

        assert logging.getLogger().level == logging.ERROR
        assert (tmp_path / "logs" / "novelstore.log").exists()

    def test_reinit_does_not_duplicate_handlers(self, tmp_path, restore_loggers):
        from config.logging_config import setup_logging
        setup_logging(log_dir=tmp_path)
        setup_logging(log_dir=tmp_path)
        assert len(logging.getLogger().handlers) == 2
        assert len(logging.getLogger("storage").handlers) == 1
