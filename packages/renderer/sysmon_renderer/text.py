"""Plain-text labels shared by the terminal and window consumers."""

from __future__ import annotations

from .models import DashboardData

NOT_AVAILABLE = "N/A"


def fmt_percent(value: float | None) -> str:
    return NOT_AVAILABLE if value is None else f"{value:.1f}%"


def cpu_label(data: DashboardData) -> str:
    return f"CPU: {fmt_percent(data.cpu_percent)}"


def ram_label(data: DashboardData) -> str:
    if data.ram_total_mb is None or data.ram_used_mb is None:
        return f"RAM: {NOT_AVAILABLE}"
    return f"RAM: {data.ram_used_mb} MB / {data.ram_total_mb} MB ({fmt_percent(data.ram_percent)})"


def gpu_label(data: DashboardData) -> str:
    return f"GPU: {data.gpu_name} ({fmt_percent(data.gpu_percent)})"


def temp_label(data: DashboardData) -> str:
    if data.temp_c is None:
        return f"CPU temperature: {NOT_AVAILABLE}"
    return f"CPU temperature: {data.temp_c:.1f}°C"


def labels(data: DashboardData) -> list[str]:
    return [cpu_label(data), ram_label(data), gpu_label(data), temp_label(data)]


def fraction(percent: float | None) -> float:
    """Progress-bar fill in [0, 1]; unknown values draw empty."""
    if percent is None:
        return 0.0
    return max(0.0, min(1.0, percent / 100.0))
