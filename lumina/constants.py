from __future__ import annotations

import logging
import os
from pathlib import Path

# Project root (the development checkout when running from source)
REPO_ROOT = Path(__file__).resolve().parent.parent

APP_TITLE = "Lumina"
APP_VERSION = "1.0.0"

# Service bundle layout, relative to the resolved base path
SERVER_DIR = "server"
SCRIPTS_DIR = "scripts"
NESTED_RESOURCES_DIR = "resources"
PRIMARY_SCRIPT = Path(SERVER_DIR) / "index.js"
AUXILIARY_SCRIPT = Path(SCRIPTS_DIR) / "enhanced_sanskrit_api.py"

# Expected listening ports of the spawned services (diagnostics only)
PRIMARY_PORT: int = int(os.getenv("LUMINA_PRIMARY_PORT", "3006"))
AUXILIARY_PORT: int = int(os.getenv("LUMINA_AUXILIARY_PORT", "3008"))

# Messages relayed to the UI shell
MSG_STARTED = "services started"
MSG_STOPPED = "services stopped"
STATUS_RUNNING = "running"
STATUS_STOPPED = "stopped"

# Webserver bind (NiceGUI host/port)
SERVER_HOST: str = os.getenv("LUMINA_SERVER_IP", "127.0.0.1")
SERVER_PORT: int = int(os.getenv("LUMINA_SERVER_PORT", "8080"))

LOG_FILE: str | None = os.getenv("LUMINA_LOG_FILE") or None

_TRUTHY = ("1", "true", "yes", "on")


def env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def _resolve_log_level() -> int:
    s = os.getenv("LUMINA_LOG_LEVEL")
    if s:
        name = s.strip().upper()
        mapping = {
            "DEBUG": logging.DEBUG,
            "INFO": logging.INFO,
            "WARNING": logging.WARNING,
            "ERROR": logging.ERROR,
            "CRITICAL": logging.CRITICAL,
        }
        return mapping.get(name, logging.INFO)
    return logging.INFO


LOG_LEVEL: int = _resolve_log_level()
