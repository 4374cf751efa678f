from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from lumina.services.host_context import ResourceLocationError

logger = logging.getLogger(__name__)


class StartupGate:
    """One-shot readiness signal set by the UI once a client has connected."""

    def __init__(self) -> None:
        self._ready = asyncio.Event()

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set()

    def mark_ready(self) -> None:
        if not self._ready.is_set():
            logger.debug("UI ready")
            self._ready.set()

    async def wait(self, timeout: float) -> bool:
        """Wait for the signal; False if `timeout` seconds pass first."""
        try:
            await asyncio.wait_for(self._ready.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True


async def start_when_ready(
    start: Callable[[], Awaitable[str]], gate: StartupGate, timeout: float
) -> None:
    """Start backend services once the UI is ready (or the timeout elapses)."""
    if not await gate.wait(timeout):
        logger.warning("No UI readiness signal after %.1fs, starting backend services anyway", timeout)
    logger.info("Starting backend services...")
    try:
        await start()
    except ResourceLocationError as e:
        logger.error("Backend services not started: %s", e)
