"""
Command surface invoked by the UI shell.

Each command returns a human-readable string or raises CommandError whose
message is shown to the user as-is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from lumina.services.host_context import ResourceLocationError
from lumina.services.supervisor import supervisor

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """A command failed; str(exc) is the message for the UI."""


@dataclass(frozen=True)
class CommandResult:
    ok: bool
    message: str


async def start_backend_services() -> str:
    try:
        return await supervisor.start()
    except ResourceLocationError as e:
        logger.error("Cannot start backend services: %s", e)
        raise CommandError(str(e)) from e


async def stop_backend_services() -> str:
    return await supervisor.stop()


async def get_service_status() -> str:
    return await supervisor.status()


COMMANDS: dict[str, Callable[[], Awaitable[str]]] = {
    "start_backend_services": start_backend_services,
    "stop_backend_services": stop_backend_services,
    "get_service_status": get_service_status,
}


async def invoke(name: str) -> CommandResult:
    """
    Run a command by name.

    Raises:
        KeyError: unknown command name.
    """
    command = COMMANDS[name]
    try:
        return CommandResult(ok=True, message=await command())
    except CommandError as e:
        return CommandResult(ok=False, message=str(e))
