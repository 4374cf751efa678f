from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from lumina import commands, main
from lumina.config import SupervisorConfig

if TYPE_CHECKING:
    from nicegui.testing import User
    from pytest import MonkeyPatch


class RecorderSupervisor:
    """Records command calls while standing in for the real supervisor in UI-only tests."""

    def __init__(self) -> None:
        self.config = SupervisorConfig(AUTO_START=False, PROBE_RUNTIMES=False)
        self.calls: list[str] = []

    async def start(self) -> str:
        self.calls.append("start")
        return "services started"

    async def stop(self) -> str:
        self.calls.append("stop")
        return "services stopped"

    async def status(self) -> str:
        self.calls.append("status")
        return "recorded status"

    def describe(self) -> list[dict]:
        return [
            {"name": "primary", "label": "Node.js service", "port": 3006,
             "pid": 4242, "alive": True, "command": "node index.js"},
        ]


@pytest.mark.unit
@pytest.mark.module_under_test(main)
async def test_buttons_relay_command_results(user: User, monkeypatch: MonkeyPatch):
    """Drive the real page: Start and Status results are shown as returned by the commands."""
    recorder = RecorderSupervisor()
    monkeypatch.setattr(commands, "supervisor", recorder, raising=True)

    await user.open("/")
    await user.should_see("Backend services")
    await user.should_see("Node.js service: running (PID 4242, port 3006)")

    user.find("start-button").click()
    await user.should_see("services started")

    user.find("status-button").click()
    await user.should_see("recorded status")

    assert "start" in recorder.calls
    assert "status" in recorder.calls
