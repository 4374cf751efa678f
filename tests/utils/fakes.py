from __future__ import annotations

import asyncio
import itertools
from pathlib import Path

_pids = itertools.count(40000)


class FakeProcess:
    """Stands in for asyncio.subprocess.Process: alive until terminated or killed."""

    def __init__(self, command: list[str], cwd: Path) -> None:
        self.command = command
        self.cwd = cwd
        self.pid = next(_pids)
        self.returncode: int | None = None
        self.stdout = None
        self.stderr = None
        self.terminated = False
        self.killed = False

    def terminate(self) -> None:
        self.terminated = True
        self.returncode = -15

    def kill(self) -> None:
        self.killed = True
        self.returncode = -9

    async def wait(self) -> int:
        while self.returncode is None:
            await asyncio.sleep(0.01)
        return self.returncode


class SpawnRecorder:
    """Replaces the supervisor's process factory and records every spawn."""

    def __init__(self, missing_runtimes: tuple[str, ...] = ()) -> None:
        self.missing_runtimes = missing_runtimes
        self.processes: list[FakeProcess] = []

    async def __call__(self, command: list[str], cwd: Path, env: dict[str, str]) -> FakeProcess:
        if command[0] in self.missing_runtimes:
            raise FileNotFoundError(2, "No such file or directory", command[0])
        proc = FakeProcess(command, cwd)
        self.processes.append(proc)
        return proc


