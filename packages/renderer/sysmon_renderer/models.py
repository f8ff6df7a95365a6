"""Typed renderer models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ThemeConfig:
    name: str
    background_start: str
    background_end: str
    card_bg: str
    accent: str
    accent_alt: str
    text_primary: str
    text_secondary: str


@dataclass(frozen=True)
class DashboardData:
    cpu_percent: float | None
    ram_used_mb: int | None
    ram_total_mb: int | None
    ram_percent: float | None
    gpu_name: str
    gpu_percent: float | None
    temp_c: float | None
    timestamp: datetime
