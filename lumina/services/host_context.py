from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from lumina.constants import REPO_ROOT
from lumina.services.path_resolver import path_exists

logger = logging.getLogger(__name__)

Layout = Literal["bundle", "checkout", "installed"]

# Data directory of an installed package: <prefix>/share/lumina
INSTALLED_DATA_DIR = Path("share") / "lumina"


class ResourceLocationError(RuntimeError):
    """The application's own resource directory cannot be determined."""


@dataclass(frozen=True)
class HostContext:
    """Where the application runs from: its executable and its resource directory."""

    layout: Layout
    exe_path: Path | None
    resource_dir: Path | None


def is_frozen() -> bool:
    return bool(getattr(sys, "frozen", False))


def current_executable() -> Path | None:
    """
    Path of the running executable, or None when it cannot be determined.

    Frozen bundles report themselves through sys.executable; from source or an
    installed console script the launching script (sys.argv[0]) stands in.
    """
    candidate = sys.executable if is_frozen() else (sys.argv[0] if sys.argv else "")
    if not candidate:
        return None
    path = Path(candidate)
    try:
        if not path.exists():
            return None
        return path.resolve()
    except OSError as e:
        logger.info("Cannot resolve executable path %s: %s", candidate, e)
        return None


def _bundle_resource_dir() -> Path | None:
    meipass = getattr(sys, "_MEIPASS", None)
    if not meipass:
        return None
    path = Path(meipass)
    if not path_exists(path, directory=True):
        raise ResourceLocationError(f"Bundle resource directory is not available: {path}")
    return path


def detect_layout() -> Layout:
    if is_frozen():
        return "bundle"
    if path_exists(REPO_ROOT / "pyproject.toml"):
        return "checkout"
    return "installed"


def detect_host_context(resource_override: Path | None = None) -> HostContext:
    """
    Determine the executable path and packaging-provided resource directory.

    Raises:
        ResourceLocationError: the configured override, or the directory the
            bundler reports, is not an existing directory.
    """
    layout = detect_layout()
    exe_path = current_executable()

    if resource_override is not None:
        if not path_exists(resource_override, directory=True):
            raise ResourceLocationError(
                f"Configured resource directory does not exist: {resource_override}"
            )
        resource_dir: Path | None = resource_override.resolve()
    elif layout == "bundle":
        resource_dir = _bundle_resource_dir()
    elif layout == "checkout":
        resource_dir = REPO_ROOT
    else:
        data_dir = Path(sys.prefix) / INSTALLED_DATA_DIR
        resource_dir = data_dir if path_exists(data_dir, directory=True) else None

    ctx = HostContext(layout=layout, exe_path=exe_path, resource_dir=resource_dir)
    logger.info(
        "Host context: layout=%s executable=%s resources=%s",
        ctx.layout,
        ctx.exe_path,
        ctx.resource_dir,
    )
    return ctx
