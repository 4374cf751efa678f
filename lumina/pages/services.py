from __future__ import annotations

from nicegui import ui

from lumina import commands
from lumina.common.logging_config import attach_ui_log
from lumina.constants import STATUS_RUNNING
from lumina.state import ServiceRow, services_state


class ServicesPage:
    """Backend services tab: start/stop/status commands and the diagnostic log."""

    def __init__(self) -> None:
        self.result_label: ui.label | None = None
        self.rows_column: ui.column | None = None
        self.log: ui.log | None = None

    def build(self) -> None:
        with ui.card().classes("w-full"):
            ui.label("Backend services").classes("text-md font-medium")
            with ui.row().classes("items-center gap-2"):
                ui.button("Start", on_click=self.on_start).mark("start-button")
                ui.button("Stop", on_click=self.on_stop).props("color=negative").mark(
                    "stop-button"
                )
                ui.button("Status", on_click=self.on_status).props("outline").mark(
                    "status-button"
                )
            self.result_label = ui.label("").classes("text-sm").mark("command-result")
            self.rows_column = ui.column().classes("gap-1")
            self.refresh_rows()

        with ui.card().classes("w-full"):
            ui.label("Diagnostics").classes("text-md font-medium")
            self.log = ui.log(max_lines=500).classes("w-full h-96 service-log")
        attach_ui_log(self.log)

    async def run_command(self, name: str) -> None:
        result = await commands.invoke(name)
        services_state.last_message = result.message
        if self.result_label is not None:
            self.result_label.text = result.message
        if result.ok:
            ui.notify(result.message, color="primary")
        else:
            ui.notify(result.message, color="negative")
        await self.refresh_status()

    async def on_start(self) -> None:
        await self.run_command("start_backend_services")

    async def on_stop(self) -> None:
        await self.run_command("stop_backend_services")

    async def on_status(self) -> None:
        await self.run_command("get_service_status")

    async def refresh_status(self) -> None:
        """Poll service status for the footer indicator and the per-service rows."""
        result = await commands.invoke("get_service_status")
        services_state.status = result.message
        self.refresh_rows()

    def refresh_rows(self) -> None:
        if self.rows_column is None:
            return
        self.rows_column.clear()
        with self.rows_column:
            for info in commands.supervisor.describe():
                row = ServiceRow(
                    label=info["label"],
                    port=info["port"],
                    pid=info["pid"],
                    alive=info["alive"],
                )
                color = "#21BA45" if row.alive else "var(--lumina-muted)"
                ui.label(row.summary).classes("text-sm").style(f"color: {color}")

    @staticmethod
    def status_color(status: str) -> str:
        return "color: #21BA45" if status == STATUS_RUNNING else "color: #DB2828"
