from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path

from lumina.constants import SERVER_DIR
from lumina.services.path_resolver import path_exists

logger = logging.getLogger(__name__)

SERVER_LISTING_LIMIT = 10


def list_directory(path: Path, limit: int | None = None) -> list[str]:
    """Return sorted entry names of `path` (at most `limit`), [] if unreadable."""
    try:
        names = sorted(entry.name for entry in path.iterdir())
    except OSError as e:
        logger.info("  cannot list %s: %s", path, e)
        return []
    return names[:limit] if limit is not None else names


def log_bundle_layout(base_path: Path) -> None:
    """Log what the base path actually contains, for packaging-layout triage."""
    if not path_exists(base_path, directory=True):
        logger.info("✗ Base path does not exist: %s", base_path)
        return

    logger.info("Base path contents:")
    for name in list_directory(base_path):
        logger.info("  %s", name)

    server_dir = base_path / SERVER_DIR
    if not path_exists(server_dir, directory=True):
        logger.info("✗ %s directory does not exist", SERVER_DIR)
        return

    logger.info("✓ %s directory exists, first %d entries:", SERVER_DIR, SERVER_LISTING_LIMIT)
    for name in list_directory(server_dir, limit=SERVER_LISTING_LIMIT):
        logger.info("  %s", name)

    if path_exists(server_dir / "node_modules", directory=True):
        logger.info("✓ node_modules present")
    else:
        logger.info("✗ node_modules missing")


async def probe_runtime(runtime: str, timeout: float = 5.0) -> str | None:
    """
    Run `<runtime> --version` and return its trimmed output.

    Returns None when the runtime is not on PATH, exits non-zero or does not
    answer within `timeout` seconds. Never raises.
    """
    resolved = shutil.which(runtime)
    if resolved is None:
        logger.info("✗ Runtime not found on PATH: %s", runtime)
        return None

    try:
        proc = await asyncio.create_subprocess_exec(
            resolved,
            "--version",
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except OSError as e:
        logger.info("✗ Cannot run %s: %s", resolved, e)
        return None

    try:
        out, _ = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        logger.info("✗ %s --version timed out after %.1fs", resolved, timeout)
        return None

    version = out.decode("utf-8", errors="ignore").strip()
    if proc.returncode != 0:
        logger.info("✗ %s --version failed (code %s): %s", resolved, proc.returncode, version)
        return None

    logger.info("✓ %s available: %s", runtime, version)
    return version
