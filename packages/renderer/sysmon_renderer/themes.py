"""Built-in dashboard themes."""

from __future__ import annotations

from .models import ThemeConfig

DEFAULT_THEME_NAME = "Deep Blue"

THEMES: dict[str, ThemeConfig] = {
    "Deep Blue": ThemeConfig(
        name="Deep Blue",
        background_start="#1E3C72",
        background_end="#2A5298",
        card_bg="#24467F",
        accent="#4FA8D8",
        accent_alt="#64B5F6",
        text_primary="#E8F4FD",
        text_secondary="#B3E5FC",
    ),
    "Neon Slate": ThemeConfig(
        name="Neon Slate",
        background_start="#0A0F1D",
        background_end="#131B33",
        card_bg="#1A253F",
        accent="#35D9FF",
        accent_alt="#8CFFB5",
        text_primary="#F4F7FF",
        text_secondary="#A9B5D1",
    ),
    "Solar Drift": ThemeConfig(
        name="Solar Drift",
        background_start="#1A140E",
        background_end="#362315",
        card_bg="#473022",
        accent="#FFB347",
        accent_alt="#FFD166",
        text_primary="#FFF7E8",
        text_secondary="#E3CFA8",
    ),
}


def list_themes() -> list[str]:
    return sorted(THEMES.keys())


def get_theme(name: str | None) -> ThemeConfig:
    if not name:
        return THEMES[DEFAULT_THEME_NAME]
    return THEMES.get(name, THEMES[DEFAULT_THEME_NAME])


def hex_to_rgb(value: str) -> tuple[int, int, int]:
    return tuple(int(value[i : i + 2], 16) for i in (1, 3, 5))  # type: ignore[return-value]
