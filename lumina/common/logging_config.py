from __future__ import annotations

import logging
import logging.handlers
import sys
import threading
import weakref
from pathlib import Path

_LEVEL_COLORS = {
    "DEBUG": "\033[36m",  # cyan
    "INFO": "\033[37m",  # light gray
    "WARNING": "\033[33m",  # yellow
    "ERROR": "\033[31m",  # red
    "CRITICAL": "\033[41m",  # red background
}
_RESET = "\033[0m"
_DIM = "\033[2m"

_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class AnsiColorFormatter(logging.Formatter):
    """Formatter that adds ANSI colors and a compact timestamp."""

    def __init__(self, colored: bool = True) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s: %(message)s", datefmt="%H:%M:%S"
        )
        self.colored = colored and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        if not self.colored:
            return base
        level = record.levelname.upper()
        color = _LEVEL_COLORS.get(level, "")
        # "HH:MM:SS LEVEL logger: msg"
        ts, _, rest = base.partition(" ")
        if color:
            rest = rest.replace(level, f"{color}{level}{_RESET}", 1)
        return f"{_DIM}{ts}{_RESET} {rest}"


# ---- NiceGUI UI log handler ----

_ui_log_targets: set[weakref.ref] = set()
_ui_lock = threading.Lock()


class NiceGuiLogHandler(logging.Handler):
    """Mirror log records into every registered NiceGUI ui.log widget."""

    def __init__(self, level: int = logging.INFO) -> None:
        super().__init__(level=level)
        self.setFormatter(logging.Formatter(_FILE_FORMAT, "%H:%M:%S"))

    def emit(self, record: logging.LogRecord) -> None:
        if not _ui_log_targets:
            return
        msg = self.format(record)
        stale: list[weakref.ref] = []
        with _ui_lock:
            for ref in list(_ui_log_targets):
                widget = ref()
                if widget is None:
                    stale.append(ref)
                    continue
                try:
                    widget.push(msg)
                except Exception:
                    # Widget deleted together with its client
                    stale.append(ref)
            for ref in stale:
                _ui_log_targets.discard(ref)


def attach_ui_log(log_widget) -> None:
    """Register a ui.log widget as a sink for log records."""
    try:
        ref = weakref.ref(log_widget)
    except TypeError:
        return
    with _ui_lock:
        _ui_log_targets.add(ref)


def detach_ui_log(log_widget) -> None:
    """Unregister a ui.log widget."""
    try:
        ref = weakref.ref(log_widget)
    except TypeError:
        return
    with _ui_lock:
        _ui_log_targets.discard(ref)


def _have_console_handler(logger: logging.Logger) -> bool:
    return any(
        type(h) is logging.StreamHandler and getattr(h, "stream", None) is sys.stderr
        for h in logger.handlers
    )


def _have_ui_handler(logger: logging.Logger) -> bool:
    return any(isinstance(h, NiceGuiLogHandler) for h in logger.handlers)


def _have_file_handler(logger: logging.Logger, path: Path) -> bool:
    return any(
        isinstance(h, logging.FileHandler) and Path(h.baseFilename) == path
        for h in logger.handlers
    )


def configure_logging(
    level: int = logging.INFO,
    use_color: bool = True,
    add_ui_handler: bool = True,
    log_file: str | Path | None = None,
) -> logging.Logger:
    """
    Configure the root logger with:
      - ANSI-colored console handler (stderr) with timestamps and levels
      - Optional NiceGUI UI log handler (records mirrored to the Services page log)
      - Optional rotating log file, kept across runs for packaging-layout triage
    Idempotent across multiple calls.
    """
    logger = logging.getLogger()
    logger.setLevel(level)

    if not _have_console_handler(logger):
        console = logging.StreamHandler(stream=sys.stderr)
        console.setLevel(level)
        console.setFormatter(AnsiColorFormatter(colored=use_color))
        logger.addHandler(console)

    if add_ui_handler and not _have_ui_handler(logger):
        logger.addHandler(NiceGuiLogHandler(level=level))

    if log_file:
        path = Path(log_file).expanduser().resolve()
        if not _have_file_handler(logger, path):
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                path, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
            logger.addHandler(file_handler)

    return logger
