"""Unit tests for CIBorium logging module."""

import json
import logging
import sys
from pathlib import Path

from ciborium.logging import (
    ConsoleFormatter,
    JsonFormatter,
    LoggerAdapter,
    clear_build_context,
    get_logger,
    get_step_logger,
    set_build_context,
    setup_logging,
)


def _record(msg: str = "Test message", level: int = logging.INFO, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test",
        level=level,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    """Tests for JSON log formatter."""

    def test_format_basic_message(self) -> None:
        data = json.loads(JsonFormatter().format(_record()))

        assert data["message"] == "Test message"
        assert data["level"] == "info"
        assert data["logger"] == "test"
        assert data["ts"].endswith("Z")

    def test_format_with_exception(self) -> None:
        try:
            raise ValueError("Test error")
        except ValueError:
            exc_info = sys.exc_info()
        record = _record("Error occurred", logging.ERROR)
        record.exc_info = exc_info

        data = json.loads(JsonFormatter().format(record))

        assert "ValueError: Test error" in data["exception"]

    def test_format_with_build_context(self) -> None:
        set_build_context(job="app", build=7)

        data = json.loads(JsonFormatter().format(_record()))

        assert data["job"] == "app"
        assert data["build"] == 7

    def test_format_with_extra_fields(self) -> None:
        record = _record(step=2, container="app-7", status=1)

        data = json.loads(JsonFormatter().format(record))

        assert data["step"] == 2
        assert data["container"] == "app-7"
        assert data["status"] == 1


class TestConsoleFormatter:
    """Tests for console formatter."""

    def test_format_plain(self) -> None:
        result = ConsoleFormatter().format(_record())
        assert "INFO" in result
        assert "Test message" in result

    def test_format_with_build_and_step(self) -> None:
        set_build_context(job="app", build=7)
        result = ConsoleFormatter().format(_record(step=3))
        assert "[app#7:S3]" in result


class TestBuildContext:
    """Tests for build context management."""

    def test_set_replaces_previous(self) -> None:
        set_build_context(job="a", build=1)
        set_build_context(job="b")

        data = json.loads(JsonFormatter().format(_record()))

        assert data["job"] == "b"
        assert "build" not in data

    def test_clear(self) -> None:
        set_build_context(job="a", build=1, node="n1")
        clear_build_context()

        data = json.loads(JsonFormatter().format(_record()))

        assert "job" not in data
        assert "node" not in data


class TestLoggers:
    """Tests for logger factories."""

    def test_get_logger_namespace(self) -> None:
        assert get_logger("pipeline").name == "ciborium.pipeline"

    def test_step_logger(self) -> None:
        adapter = get_step_logger(4)
        assert isinstance(adapter, LoggerAdapter)
        assert adapter.extra == {"step": 4}

    def test_adapter_adds_extra(self) -> None:
        adapter = get_step_logger(4)
        _, kwargs = adapter.process("msg", {"extra": {"status": 1}})
        assert kwargs["extra"] == {"status": 1, "step": 4}


class TestSetupLogging:
    """Tests for setup_logging()."""

    def teardown_method(self) -> None:
        setup_logging(console_output=True, json_output=False, level="warning")

    def test_level_and_console_handler(self) -> None:
        setup_logging(level="debug", json_output=False)
        root = logging.getLogger("ciborium")

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, ConsoleFormatter)
        assert root.propagate is False

    def test_warn_alias(self) -> None:
        setup_logging(level="warn", json_output=False)
        assert logging.getLogger("ciborium").level == logging.WARNING

    def test_json_file_output(self, tmp_path: Path) -> None:
        log_dir = tmp_path / "logs"
        setup_logging(level="info", log_dir=log_dir, console_output=False)

        get_logger("test").info("to file")
        for handler in logging.getLogger("ciborium").handlers:
            handler.flush()

        lines = (log_dir / "ciborium.log").read_text().splitlines()
        assert json.loads(lines[-1])["message"] == "to file"

    def test_no_file_without_directory(self) -> None:
        setup_logging(level="info", console_output=False)
        assert logging.getLogger("ciborium").handlers == []
