import argparse
import asyncio
import contextlib
import logging
import sys
from pathlib import Path

from fastapi import HTTPException
from nicegui import app as ng_app
from nicegui import ui

from lumina import commands
from lumina.common.logging_config import configure_logging
from lumina.common.theme import apply_theme, get_theme
from lumina.constants import (
    APP_TITLE,
    APP_VERSION,
    LOG_FILE,
    LOG_LEVEL,
    SERVER_HOST,
    SERVER_PORT,
)
from lumina.pages.services import ServicesPage
from lumina.pages.settings import SettingsPage
from lumina.services.startup import StartupGate, start_when_ready
from lumina.state import services_state

# Runtime configuration (resolved later from CLI/env)
RUNTIME_SERVER_HOST = SERVER_HOST
RUNTIME_SERVER_PORT = SERVER_PORT

STATUS_POLL_INTERVAL_S = 2.0

# Set by the first client connection; gates the automatic backend start
startup_gate = StartupGate()
startup_task: asyncio.Task | None = None


# --------------- Page ---------------


@ui.page("/")
def index() -> None:
    apply_theme(get_theme())
    ui.query(".nicegui-content").classes("p-0")

    services_page = ServicesPage()
    settings_page = SettingsPage()

    with ui.header().classes("items-center justify-between px-3"):
        with ui.tabs() as tabs:
            services_tab = ui.tab("Services")
            settings_tab = ui.tab("Settings")
        ui.label(f"{APP_TITLE} {APP_VERSION}").classes("text-sm")

    with ui.tab_panels(tabs, value=services_tab).classes("w-full"):
        with ui.tab_panel(services_tab):
            services_page.build()
        with ui.tab_panel(settings_tab):
            settings_page.build()

    with ui.footer().classes("justify-between items-center px-3 py-1"):
        status_label = ui.label().classes("text-sm")
        status_label.bind_text_from(
            services_state, "status", backward=lambda s: f"Services: {s}"
        )
        ui.label().classes("text-sm").bind_text_from(services_state, "last_message")

    async def _poll_status() -> None:
        await services_page.refresh_status()
        status_label.style(ServicesPage.status_color(services_state.status))

    ui.timer(STATUS_POLL_INTERVAL_S, _poll_status)


# --------------- Command endpoint ---------------


@ng_app.post("/api/commands/{name}")
async def invoke_command(name: str) -> dict:
    if name not in commands.COMMANDS:
        raise HTTPException(status_code=404, detail=f"Unknown command: {name}")
    result = await commands.invoke(name)
    return {"ok": result.ok, "message": result.message}


# --------------- Lifecycle ---------------


def _on_client_connect() -> None:
    startup_gate.mark_ready()


async def _app_startup() -> None:
    global startup_task
    if not commands.supervisor.config.AUTO_START:
        logging.info("Backend service auto-start disabled")
        return
    timeout = commands.supervisor.config.READY_TIMEOUT
    startup_task = asyncio.create_task(
        start_when_ready(lambda: commands.supervisor.start(), startup_gate, timeout)
    )


async def _app_shutdown() -> None:
    global startup_task
    if startup_task is not None and not startup_task.done():
        startup_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await startup_task
    startup_task = None
    await commands.supervisor.stop()


ng_app.on_connect(_on_client_connect)
ng_app.on_startup(_app_startup)
ng_app.on_shutdown(_app_shutdown)


def run() -> None:
    global RUNTIME_SERVER_HOST, RUNTIME_SERVER_PORT

    parser = argparse.ArgumentParser(description=f"{APP_TITLE} desktop shell")
    parser.add_argument("--host", default=SERVER_HOST, help="Webserver bind host")
    parser.add_argument(
        "--port", type=int, default=SERVER_PORT, help="Webserver bind port"
    )
    parser.add_argument(
        "--resource-dir",
        help="Directory holding the service bundle (overrides LUMINA_RESOURCE_DIR)",
    )
    parser.add_argument(
        "--native",
        action="store_true",
        help="Open in a native desktop window (requires pywebview)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set log level",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity; -v=INFO, -vv=DEBUG",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Only log warnings and errors"
    )
    parser.add_argument(
        "--log-file", default=LOG_FILE, help="Also write the log to this file"
    )
    parser.add_argument(
        "--disable-auto-start",
        action="store_true",
        help="Do not start backend services automatically (overrides LUMINA_AUTO_START)",
    )
    args, _ = parser.parse_known_args()

    RUNTIME_SERVER_HOST = args.host
    RUNTIME_SERVER_PORT = int(args.port)
    if args.disable_auto_start:
        commands.supervisor.config.AUTO_START = False
    if args.resource_dir:
        commands.supervisor.config.RESOURCE_DIR = Path(args.resource_dir).expanduser()

    # Resolve log level priority: explicit --log-level > -v/-q > env default from constants
    if args.log_level:
        level = getattr(logging, args.log_level)
    elif args.verbose >= 2:
        level = logging.DEBUG
    elif args.verbose == 1:
        level = logging.INFO
    elif args.quiet:
        level = logging.WARNING
    else:
        level = LOG_LEVEL

    configure_logging(level, log_file=args.log_file)
    logging.info("========== %s %s starting ==========", APP_TITLE, APP_VERSION)
    logging.info(f"Webserver bind: host={RUNTIME_SERVER_HOST} port={RUNTIME_SERVER_PORT}")

    ui.run(
        title=APP_TITLE,
        host=RUNTIME_SERVER_HOST,
        port=RUNTIME_SERVER_PORT,
        reload=False,
        show=False,
        native=args.native,
        loop="uvloop" if sys.platform != "win32" else "asyncio",
    )


if __name__ in {"__main__", "__mp_main__"}:
    run()
