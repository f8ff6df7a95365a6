"""Renderer package for SysMon labels and dashboard images."""

from .models import DashboardData, ThemeConfig
from .text import fmt_percent, fraction, labels
from .themes import DEFAULT_THEME_NAME, get_theme, list_themes

try:  # pragma: no cover - optional at import time for test environments
    from .dashboard import DashboardRenderer
except Exception:  # pragma: no cover
    DashboardRenderer = None  # type: ignore[assignment]

__all__ = [
    "DEFAULT_THEME_NAME",
    "DashboardData",
    "ThemeConfig",
    "fmt_percent",
    "fraction",
    "get_theme",
    "labels",
    "list_themes",
]

if DashboardRenderer is not None:
    __all__.append("DashboardRenderer")
