"""Tests for the logging helpers."""

import logging
from unittest.mock import MagicMock

import pytest

from cashplan.infrastructure.logging import logger as logger_module


@pytest.fixture
def logs_root(tmp_path, monkeypatch):
    monkeypatch.setattr(logger_module, "get_project_root", lambda: tmp_path)
    monkeypatch.setattr(
        logger_module.LoggerBuilder,
        "_today_stamp",
        staticmethod(lambda: "20240315"),
    )
    return tmp_path


def _detach(built: logging.Logger) -> None:
    for handler in list(built.handlers):
        handler.close()
        built.removeHandler(handler)


def test_build_writes_dated_file_under_logs_dir(logs_root):
    """A file-only logger lands in logs/<subdir>/<stamp>_<prefix>.log."""
    builder = (
        logger_module.LoggerBuilder()
        .name(f"cashplan.test.file.{logs_root.name}")
        .subdir("usage")
        .prefix("usage_logs")
        .level(logging.DEBUG)
    )
    built = builder.build()
    try:
        assert built.level == logging.DEBUG
        assert built.propagate is False
        assert len(built.handlers) == 1
        handler = built.handlers[0]
        assert isinstance(handler, logging.FileHandler)
        assert handler.baseFilename == str(
            logs_root / "logs" / "usage" / "20240315_usage_logs.log"
        )
        assert (logs_root / "logs" / "usage").is_dir()

        # A configured logger is returned untouched on the next build.
        assert builder.build() is built
        assert len(built.handlers) == 1
    finally:
        _detach(built)


def test_build_uses_injected_factories(logs_root):
    fmt = logging.Formatter("%(message)s")
    file_handler = logging.NullHandler()
    console_handler = logging.NullHandler()
    file_factory = MagicMock(return_value=file_handler)
    console_factory = MagicMock(return_value=console_handler)

    built = (
        logger_module.LoggerBuilder()
        .name(f"cashplan.test.factories.{logs_root.name}")
        .subdir("projection")
        .prefix("projection_logs")
        .console(True)
        .formatter(lambda: fmt)
        .file_handler(file_factory)
        .console_handler(console_factory)
        .build()
    )
    try:
        file_factory.assert_called_once_with(
            logs_root / "logs" / "projection" / "20240315_projection_logs.log",
            fmt,
        )
        console_factory.assert_called_once_with(fmt)
        assert built.handlers == [file_handler, console_handler]
    finally:
        _detach(built)


def test_default_handlers_log_at_info_with_shared_format(tmp_path):
    fmt = logger_module.LoggerBuilder._default_formatter()
    assert fmt._fmt == logger_module.DEFAULT_FORMAT

    file_handler = logger_module.LoggerBuilder._default_file_handler(
        tmp_path / "engine.log",
        fmt,
    )
    console_handler = logger_module.LoggerBuilder._default_console_handler(fmt)
    try:
        for handler in (file_handler, console_handler):
            assert handler.level == logging.INFO
            assert handler.formatter is fmt
        assert isinstance(file_handler, logging.FileHandler)
        assert type(console_handler) is logging.StreamHandler
    finally:
        file_handler.close()


def test_wrapper_forwards_arguments_to_built_logger(monkeypatch):
    """Every level method passes its arguments through unchanged."""
    inner = MagicMock()
    monkeypatch.setattr(logger_module.LoggerBuilder, "build", lambda self: inner)
    monkeypatch.setattr(logger_module.AppLogger, "_instance", None)

    wrapper = logger_module.AppLogger("cashplan")
    wrapper.info("confirmed %s", "rule-1")
    wrapper.warning("partial", exc_info=True)
    wrapper.error("failed")
    wrapper.debug("snapshot")
    wrapper.critical("store down")

    inner.info.assert_called_once_with("confirmed %s", "rule-1")
    inner.warning.assert_called_once_with("partial", exc_info=True)
    inner.error.assert_called_once_with("failed")
    inner.debug.assert_called_once_with("snapshot")
    inner.critical.assert_called_once_with("store down")
    assert logger_module.AppLogger("ignored") is wrapper


def test_app_and_usage_loggers_are_separate_singletons(monkeypatch):
    built = []

    def _record(self):
        built.append((self._name, self._subdir, self._console))
        return MagicMock()

    monkeypatch.setattr(logger_module.LoggerBuilder, "build", _record)
    monkeypatch.setattr(logger_module.AppLogger, "_instance", None)
    monkeypatch.setattr(logger_module.UsageLogger, "_instance", None)

    app_logger = logger_module.get_app_logger()
    usage_logger = logger_module.get_usage_logger()

    assert logger_module.get_app_logger() is app_logger
    assert logger_module.get_usage_logger() is usage_logger
    assert app_logger is not usage_logger
    assert built == [
        ("cashplan", "app", True),
        ("cashplan.usage", "usage", False),
    ]
