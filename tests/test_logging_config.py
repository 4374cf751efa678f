from __future__ import annotations

import logging
from pathlib import Path

import pytest

from lumina.common.logging_config import (
    NiceGuiLogHandler,
    attach_ui_log,
    configure_logging,
    detach_ui_log,
)


class RecorderLog:
    """Minimal stand-in for a ui.log widget."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def push(self, line: str) -> None:
        self.lines.append(line)


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for h in root.handlers:
        if h not in handlers:
            h.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.unit
def test_configure_logging_is_idempotent(root_logger: logging.Logger, tmp_path: Path):
    log_file = tmp_path / "logs" / "lumina.log"
    configure_logging(logging.INFO, log_file=log_file)
    count = len(root_logger.handlers)

    configure_logging(logging.INFO, log_file=log_file)

    assert len(root_logger.handlers) == count
    assert sum(isinstance(h, NiceGuiLogHandler) for h in root_logger.handlers) == 1


@pytest.mark.unit
def test_log_file_receives_records(root_logger: logging.Logger, tmp_path: Path):
    log_file = tmp_path / "logs" / "lumina.log"
    configure_logging(logging.INFO, add_ui_handler=False, log_file=log_file)

    logging.getLogger("lumina.test").info("base path resolved")
    for h in root_logger.handlers:
        h.flush()

    assert "base path resolved" in log_file.read_text(encoding="utf-8")


@pytest.mark.unit
def test_ui_handler_mirrors_into_attached_widgets():
    handler = NiceGuiLogHandler(level=logging.INFO)
    widget = RecorderLog()
    record = logging.LogRecord("lumina", logging.WARNING, __file__, 1, "script missing", None, None)

    attach_ui_log(widget)
    handler.emit(record)
    detach_ui_log(widget)
    handler.emit(record)

    assert len(widget.lines) == 1
    assert "[WARNING] lumina: script missing" in widget.lines[0]
