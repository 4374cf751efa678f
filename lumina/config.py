from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from lumina.constants import AUXILIARY_PORT, PRIMARY_PORT, env_flag


def _default_python_runtime() -> str:
    # A frozen app's sys.executable is the app itself, not an interpreter
    if getattr(sys, "frozen", False) or not sys.executable:
        return "python"
    return sys.executable


@dataclass
class SupervisorConfig:
    """Runtime configuration for locating and launching the backend services."""
    RESOURCE_DIR: Optional[Path] = None
    NODE_RUNTIME: str = "node"
    PYTHON_RUNTIME: str = "python"
    PRIMARY_PORT: int = 3006
    AUXILIARY_PORT: int = 3008
    AUTO_START: bool = True
    READY_TIMEOUT: float = 10.0  # seconds to wait for the UI readiness signal
    STOP_TIMEOUT: float = 5.0  # seconds before a terminated child is killed
    PROBE_RUNTIMES: bool = True

    @classmethod
    def from_env(cls) -> "SupervisorConfig":
        resource_dir = os.getenv("LUMINA_RESOURCE_DIR") or None
        return cls(
            RESOURCE_DIR=Path(resource_dir).expanduser() if resource_dir else None,
            NODE_RUNTIME=os.getenv("LUMINA_NODE_RUNTIME") or "node",
            PYTHON_RUNTIME=os.getenv("LUMINA_PYTHON_RUNTIME") or _default_python_runtime(),
            PRIMARY_PORT=PRIMARY_PORT,
            AUXILIARY_PORT=AUXILIARY_PORT,
            AUTO_START=env_flag("LUMINA_AUTO_START", "1"),
            READY_TIMEOUT=float(os.getenv("LUMINA_READY_TIMEOUT", "10")),
            STOP_TIMEOUT=float(os.getenv("LUMINA_STOP_TIMEOUT", "5")),
            PROBE_RUNTIMES=env_flag("LUMINA_PROBE_RUNTIMES", "1"),
        )
