from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from lumina.config import SupervisorConfig
from lumina.constants import (
    AUXILIARY_SCRIPT,
    MSG_STARTED,
    MSG_STOPPED,
    PRIMARY_SCRIPT,
    STATUS_RUNNING,
    STATUS_STOPPED,
)
from lumina.services.diagnostics import log_bundle_layout, probe_runtime
from lumina.services.host_context import HostContext, detect_host_context
from lumina.services.path_resolver import path_exists, resolve_base_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceSpec:
    """Static description of one backend service in the bundle."""

    name: str
    label: str
    runtime: str
    script: Path  # relative to the base path
    port: int  # expected listening port, diagnostics only
    required: bool = True

    @property
    def workdir(self) -> Path:
        return self.script.parent


@dataclass
class ServiceHandle:
    """A spawned backend service process owned by the supervisor."""

    spec: ServiceSpec
    proc: asyncio.subprocess.Process
    command: list[str]
    cwd: Path
    stdout_task: asyncio.Task
    stderr_task: asyncio.Task
    start_ts: float = field(default_factory=time.time)

    @property
    def pid(self) -> int:
        return self.proc.pid

    def is_running(self) -> bool:
        return self.proc.returncode is None


def default_services(config: SupervisorConfig) -> tuple[ServiceSpec, ...]:
    return (
        ServiceSpec(
            name="primary",
            label="Node.js service",
            runtime=config.NODE_RUNTIME,
            script=PRIMARY_SCRIPT,
            port=config.PRIMARY_PORT,
        ),
        ServiceSpec(
            name="auxiliary",
            label="Sanskrit API service",
            runtime=config.PYTHON_RUNTIME,
            script=AUXILIARY_SCRIPT,
            port=config.AUXILIARY_PORT,
            required=False,
        ),
    )


async def _drain(
    stream: asyncio.StreamReader | None, log: Callable[[str], None], prefix: str = ""
) -> None:
    """Read lines from a child's pipe until EOF so it never blocks on a full buffer."""
    if stream is None:
        return
    while True:
        try:
            line_bytes = await stream.readline()
        except ValueError:
            # Over the stream limit; readline already dropped the buffered chunk
            log(f"{prefix}[overlong line skipped]")
            continue
        except OSError as e:
            logger.warning("Stream reader error: %s", e)
            break
        if not line_bytes:
            break
        line = line_bytes.decode("utf-8", errors="ignore").rstrip()
        if line:
            log(f"{prefix}{line}")


async def _create_process(
    command: list[str], cwd: Path, env: dict[str, str]
) -> asyncio.subprocess.Process:
    return await asyncio.create_subprocess_exec(
        *command,
        cwd=str(cwd),
        env=env,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )


class ServiceSupervisor:
    """
    Locates the service bundle and manages the backend service processes.

    - start(): resolve the base path, log layout diagnostics, spawn every
      service that is not already running. Spawn failures are logged, not raised.
    - stop(): terminate tracked processes (kill after STOP_TIMEOUT).
    - status(): "running" while at least one tracked process is alive.

    start() and stop() are serialized by a lock, so overlapping calls never
    spawn a service twice.
    """

    def __init__(
        self,
        config: SupervisorConfig,
        context_provider: Callable[[], HostContext] | None = None,
    ) -> None:
        self.config = config
        self._context_provider = context_provider or (
            lambda: detect_host_context(self.config.RESOURCE_DIR)
        )
        self._handles: dict[str, ServiceHandle] = {}
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None

    @property
    def services(self) -> tuple[ServiceSpec, ...]:
        return default_services(self.config)

    def handles(self) -> list[ServiceHandle]:
        return list(self._handles.values())

    def is_running(self) -> bool:
        return any(h.is_running() for h in self._handles.values())

    def _get_lock(self) -> asyncio.Lock:
        # A lock binds to the loop that first waits on it; one lock per running loop
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    async def start(self) -> str:
        """
        Start the backend services.

        Raises:
            ResourceLocationError: the application's resource directory cannot
                be determined. Every other failure is logged and absorbed.
        """
        async with self._get_lock():
            ctx = self._context_provider()
            base_path = resolve_base_path(ctx.exe_path, ctx.resource_dir)
            services = self.services

            logger.info("========== Starting backend services ==========")
            logger.info("Base path: %s", base_path)
            for spec in services:
                logger.info("%s script: %s", spec.label, base_path / spec.script)
            log_bundle_layout(base_path)

            if self.config.PROBE_RUNTIMES:
                for runtime in dict.fromkeys(spec.runtime for spec in services):
                    await probe_runtime(runtime)

            for spec in services:
                await self._start_service(spec, base_path)

            logger.info("========== Backend services start complete ==========")
        return MSG_STARTED

    async def _start_service(self, spec: ServiceSpec, base_path: Path) -> None:
        existing = self._handles.get(spec.name)
        if existing is not None:
            if existing.is_running():
                logger.info("%s already running (PID: %s)", spec.label, existing.pid)
                return
            logger.info(
                "%s exited earlier (code: %s), starting again",
                spec.label,
                existing.proc.returncode,
            )
            await self._release(self._handles.pop(spec.name))

        script = base_path / spec.script
        if not path_exists(script):
            if spec.required:
                logger.error("✗ %s script not found: %s", spec.label, script)
            else:
                logger.warning(
                    "⚠ %s script not found, port %d will be unavailable: %s",
                    spec.label,
                    spec.port,
                    script,
                )
            return

        cwd = base_path / spec.workdir
        command = [spec.runtime, str(script)]
        env = os.environ.copy()
        # Unbuffered output so drained lines reach the log promptly
        env.setdefault("PYTHONUNBUFFERED", "1")

        logger.info("Starting %s (port %d): %s", spec.label, spec.port, " ".join(command))
        try:
            proc = await _create_process(command, cwd, env)
        except OSError as e:
            logger.error("✗ Failed to start %s: %s", spec.label, e)
            return

        child_log = logging.getLogger(f"{__name__}.{spec.name}")
        self._handles[spec.name] = ServiceHandle(
            spec=spec,
            proc=proc,
            command=command,
            cwd=cwd,
            stdout_task=asyncio.create_task(_drain(proc.stdout, child_log.debug)),
            stderr_task=asyncio.create_task(_drain(proc.stderr, child_log.info, "[stderr] ")),
        )
        logger.info("✓ %s started (PID: %s)", spec.label, proc.pid)

    async def stop(self) -> str:
        """Terminate every tracked service process. Never raises."""
        async with self._get_lock():
            handles = list(self._handles.values())
            self._handles.clear()
            for handle in handles:
                await self._terminate(handle, self.config.STOP_TIMEOUT)
        if handles:
            logger.info("Backend services stopped")
        return MSG_STOPPED

    async def _terminate(self, handle: ServiceHandle, timeout: float) -> None:
        proc = handle.proc
        label = handle.spec.label
        if proc.returncode is not None:
            logger.info("%s already exited (code: %s)", label, proc.returncode)
        else:
            try:
                proc.terminate()
                try:
                    await asyncio.wait_for(proc.wait(), timeout=timeout)
                    logger.info("%s terminated (PID: %s)", label, proc.pid)
                except asyncio.TimeoutError:
                    proc.kill()
                    await proc.wait()
                    logger.warning("%s force-killed after %.1fs", label, timeout)
            except ProcessLookupError:
                pass
        await self._release(handle)

    async def _release(self, handle: ServiceHandle) -> None:
        for task in (handle.stdout_task, handle.stderr_task):
            if not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

    async def status(self) -> str:
        """Report "running" while any tracked service process is alive. Never raises."""
        return STATUS_RUNNING if self.is_running() else STATUS_STOPPED

    def describe(self) -> list[dict]:
        """Per-service snapshot for the UI."""
        rows: list[dict] = []
        for spec in self.services:
            handle = self._handles.get(spec.name)
            alive = handle is not None and handle.is_running()
            rows.append(
                {
                    "name": spec.name,
                    "label": spec.label,
                    "port": spec.port,
                    "pid": handle.pid if alive else None,
                    "alive": alive,
                    "command": " ".join(handle.command) if handle else "",
                }
            )
        return rows


# Module-level singleton instance
supervisor = ServiceSupervisor(SupervisorConfig.from_env())
