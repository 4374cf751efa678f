from __future__ import annotations

import logging

from nicegui import ui

from lumina import commands
from lumina.common.theme import ThemeMode, get_theme, set_theme
from lumina.services.host_context import ResourceLocationError, detect_host_context
from lumina.services.path_resolver import resolve_base_path
from lumina.state import services_state


class SettingsPage:
    """Settings tab page: theme and the resolved service bundle location."""

    def build(self) -> None:
        with ui.card().classes("w-full"):
            ui.label("Settings").classes("text-md font-medium")
            with ui.row().classes("items-center gap-2"):
                saved_mode = get_theme()
                mode_toggle = ui.toggle(
                    options=["System", "Light", "Dark"],
                    value=saved_mode.capitalize(),
                ).props("dense")

                def _on_mode() -> None:
                    val = (mode_toggle.value or "System").lower()
                    mode: ThemeMode = (
                        "system"
                        if val.startswith("s")
                        else ("light" if val.startswith("l") else "dark")
                    )
                    set_theme(mode)
                    logging.debug(f"Set theme to mode: {mode}")

                mode_toggle.on_value_change(lambda e: _on_mode())

        with ui.card().classes("w-full"):
            ui.label("Service bundle").classes("text-md font-medium")
            config = commands.supervisor.config
            ui.label(f"Node runtime: {config.NODE_RUNTIME}").classes("text-sm")
            ui.label(f"Python runtime: {config.PYTHON_RUNTIME}").classes("text-sm")
            ui.label().classes("text-sm").bind_text_from(services_state, "base_path")
            ui.button("Locate bundle", on_click=self.locate).props("outline")

    def locate(self) -> None:
        """Re-run host detection and base-path resolution; details go to the log."""
        try:
            ctx = detect_host_context(commands.supervisor.config.RESOURCE_DIR)
        except ResourceLocationError as e:
            services_state.base_path = str(e)
            ui.notify(str(e), color="negative")
            return
        base_path = resolve_base_path(ctx.exe_path, ctx.resource_dir)
        services_state.base_path = f"{ctx.layout}: {base_path}"
