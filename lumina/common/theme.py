from __future__ import annotations

import logging
from typing import Literal, cast, get_args

from nicegui import app, ui

ThemeMode = Literal["light", "dark", "system"]


def get_palette(mode: ThemeMode) -> dict[str, str]:
    """Return palette tokens for the given mode."""
    if mode == "dark":
        return {
            "primary": "#6366F1",
            "secondary": "#4F46E5",
            "background": "#0F172A",
            "surface": "#1E293B",
            "text": "#E2E8F0",
            "muted": "#94A3B8",
            "accent": "#22D3EE",
            "positive": "#21BA45",
            "negative": "#DB2828",
            "info": "#31CCEC",
            "warning": "#F2C037",
        }
    # light
    return {
        "primary": "#4F46E5",
        "secondary": "#4338CA",
        "background": "#F8FAFC",
        "surface": "#F1F5F9",
        "text": "#0F172A",
        "muted": "#64748B",
        "accent": "#0891B2",
        "positive": "#21BA45",
        "negative": "#DB2828",
        "info": "#31CCEC",
        "warning": "#F2C037",
    }


def _inject_css_vars(p: dict[str, str]) -> None:
    ui.add_css(
        f"""
:root {{
  --lumina-bg: {p["background"]};
  --lumina-surface: {p["surface"]};
  --lumina-text: {p["text"]};
  --lumina-muted: {p["muted"]};
}}

body, .q-page {{ background: var(--lumina-bg); color: var(--lumina-text); }}
.q-card {{ background: var(--lumina-surface); }}
.service-log {{ font-family: ui-monospace, monospace; font-size: 12px; }}
"""
    )


def apply_theme(mode: ThemeMode) -> None:
    """Set Quasar colors and dark mode, then inject the CSS variables."""
    choice = mode
    if mode == "system":
        choice = "dark" if ui.dark_mode().client.page.dark else "light"
        logging.debug(f"System theme: {choice}")

    pal = get_palette(choice)
    ui.colors(
        primary=pal["primary"],
        secondary=pal["secondary"],
        accent=pal["accent"],
        positive=pal["positive"],
        negative=pal["negative"],
        info=pal["info"],
        warning=pal["warning"],
    )
    if choice == "dark":
        ui.dark_mode().enable()
    else:
        ui.dark_mode().disable()
    _inject_css_vars(pal)


def set_theme(mode: ThemeMode) -> ThemeMode:
    """Persist, set and apply theme mode."""
    app.storage.general["theme_mode"] = mode
    apply_theme(mode)
    return mode


def get_theme() -> ThemeMode:
    """Return current requested mode ('light'/'dark'/'system')."""
    mode = app.storage.general.get("theme_mode", "system")
    if isinstance(mode, str) and mode in get_args(ThemeMode):
        return cast("ThemeMode", mode)
    return cast("ThemeMode", "system")
