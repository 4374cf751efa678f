from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from lumina.constants import NESTED_RESOURCES_DIR, PRIMARY_SCRIPT, SERVER_DIR

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Probe:
    """Outcome of checking one candidate base path for the service bundle."""

    label: str
    path: Path
    marker_found: bool
    server_dir_found: bool

    @property
    def accepted(self) -> bool:
        return self.marker_found or self.server_dir_found


def path_exists(path: Path, *, directory: bool = False) -> bool:
    """`exists()` / `is_dir()` that reports inaccessible paths as missing."""
    try:
        return path.is_dir() if directory else path.exists()
    except OSError as e:
        logger.info("  cannot access %s: %s", path, e)
        return False


def probe_candidate(label: str, path: Path) -> Probe:
    """Check `path` for server/index.js, or at minimum a server directory."""
    logger.info("Checking %s: %s", label, path)
    marker = path / PRIMARY_SCRIPT
    marker_found = path_exists(marker)
    server_dir_found = marker_found or path_exists(path / SERVER_DIR, directory=True)
    if marker_found:
        logger.info("  ✓ found %s", marker)
    elif server_dir_found:
        logger.info("  ✓ %s directory exists (no %s)", SERVER_DIR, PRIMARY_SCRIPT.name)
    else:
        logger.info("  ✗ no %s under %s", PRIMARY_SCRIPT.as_posix(), path)
    return Probe(label, path, marker_found, server_dir_found)


def _working_directory() -> Path:
    try:
        return Path.cwd()
    except OSError as e:
        logger.info("Current directory unavailable (%s), using '.'", e)
        return Path(".")


def candidate_paths(
    exe_path: Path | None, resource_dir: Path | None = None
) -> list[tuple[str, Path]]:
    """Candidate base paths in priority order."""
    candidates: list[tuple[str, Path]] = []
    if resource_dir is not None:
        candidates.append(("resource directory", resource_dir))
        candidates.append(("nested resource directory", resource_dir / NESTED_RESOURCES_DIR))
    if exe_path is not None:
        exe_dir = exe_path.parent
        candidates.append(("executable directory", exe_dir))
        candidates.append(("executable resources", exe_dir / NESTED_RESOURCES_DIR))
    return candidates


def resolve_base_path(
    exe_path: Path | None,
    resource_dir: Path | None = None,
    cwd: Path | None = None,
) -> Path:
    """
    Return the directory believed to hold the service bundle (server/ and scripts/).

    Candidates are probed in order: the packaging-provided resource directory,
    its nested resources/ layer, the executable's directory and its nested
    resources/ layer. The first candidate holding server/index.js (or at least
    a server directory) wins. Otherwise the executable's directory is used, or
    the working directory when the executable is unknown. Never raises.
    """
    for label, path in candidate_paths(exe_path, resource_dir):
        if probe_candidate(label, path).accepted:
            logger.info("Base path: %s (%s)", path, label)
            return path

    if exe_path is not None:
        fallback = exe_path.parent
        logger.info("No candidate holds the service bundle, falling back to executable directory: %s", fallback)
        return fallback

    fallback = cwd if cwd is not None else _working_directory()
    logger.info("Executable path unknown, falling back to working directory: %s", fallback)
    return fallback
