from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from lumina.config import SupervisorConfig
from lumina.services import supervisor as supervisor_mod
from lumina.services.host_context import HostContext
from lumina.services.supervisor import ServiceSupervisor
from tests.utils.fakes import SpawnRecorder

pytest_plugins = ["nicegui.testing.user_plugin"]

if TYPE_CHECKING:
    from collections.abc import Callable


@pytest.fixture(scope="session", autouse=True)
def webapp_env_session() -> None:
    """
    Global test defaults (set at session start):
      - Disable the automatic backend start so the UI tests never spawn processes.
        The supervisor singleton already read the environment at import, so its
        config is switched off as well.
    Can still be overridden per-test with monkeypatch if needed.
    """
    os.environ["LUMINA_AUTO_START"] = "0"
    supervisor_mod.supervisor.config.AUTO_START = False


@pytest.fixture
def bundle(tmp_path: Path) -> Callable[..., Path]:
    """Build a service bundle under tmp_path; returns its base path."""

    def _make(
        base: Path | None = None, server: bool = True, scripts: bool = True
    ) -> Path:
        root = base or tmp_path / "app"
        root.mkdir(parents=True, exist_ok=True)
        if server:
            (root / "server").mkdir(exist_ok=True)
            (root / "server" / "index.js").write_text("// primary\n", encoding="utf-8")
        if scripts:
            (root / "scripts").mkdir(exist_ok=True)
            (root / "scripts" / "enhanced_sanskrit_api.py").write_text(
                "# auxiliary\n", encoding="utf-8"
            )
        return root

    return _make


@pytest.fixture
def spawn_recorder(monkeypatch: pytest.MonkeyPatch) -> SpawnRecorder:
    recorder = SpawnRecorder()
    monkeypatch.setattr(supervisor_mod, "_create_process", recorder, raising=True)
    return recorder


@pytest.fixture
def make_supervisor() -> Callable[..., ServiceSupervisor]:
    """Supervisor whose resource directory is `base`, with runtime probes off."""

    def _make(base: Path, **overrides) -> ServiceSupervisor:
        params = dict(
            NODE_RUNTIME="node",
            PYTHON_RUNTIME="python",
            PROBE_RUNTIMES=False,
            STOP_TIMEOUT=1.0,
        )
        params.update(overrides)
        # The executable sits in `base`, so its directory is the last-resort fallback
        ctx = HostContext(layout="bundle", exe_path=base / "lumina", resource_dir=base)
        return ServiceSupervisor(SupervisorConfig(**params), context_provider=lambda: ctx)

    return _make
