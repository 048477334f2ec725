"""Tests for logging setup."""

import io
import json
import logging
from collections.abc import Iterator

import pytest

from boostsec.waf_guard.logging_config import build_formatter, configure_logging
from boostsec.waf_guard.models.run_config import RunConfig


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    """Restore root handlers and level after a test reconfigures them."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    root.handlers.clear()
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def make_record(message: str, **extra: object) -> logging.LogRecord:
    """Build a log record carrying extra fields."""
    record = logging.LogRecord(
        name="boostsec.waf_guard.runner",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=None,
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_keeps_extra_fields() -> None:
    """JSON lines carry the message, level and extra fields."""
    formatter = build_formatter("json")

    record = make_record("Test executed", test_name="t1", status_code=403)

    data = json.loads(formatter.format(record))
    assert data["event"] == "Test executed"
    assert data["level"] == "info"
    assert data["logger"] == "boostsec.waf_guard.runner"
    assert data["test_name"] == "t1"
    assert data["status_code"] == 403
    assert "timestamp" in data


def test_text_formatter_renders_key_values() -> None:
    """Text lines render the message followed by key=value pairs."""
    formatter = build_formatter("text")

    line = formatter.format(make_record("Executing test", method="GET"))

    assert "Executing test" in line
    assert "method=GET" in line


@pytest.mark.usefixtures("restore_root_logger")
def test_configure_logging_level_and_stream() -> None:
    """configure_logging installs one handler at the configured level."""
    stream = io.StringIO()

    configure_logging(RunConfig(log_level="warn", log_format="json"), stream)
    logging.getLogger("boostsec.waf_guard").info("hidden")
    logging.getLogger("boostsec.waf_guard").warning("shown", extra={"path": "/x"})

    lines = stream.getvalue().splitlines()
    assert logging.getLogger().level == logging.WARNING
    assert len(lines) == 1
    assert json.loads(lines[0])["path"] == "/x"
