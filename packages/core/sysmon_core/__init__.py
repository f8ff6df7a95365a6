"""Core monitor services for settings, polling, logging, diagnostics, and overhead budgets."""

from .config import AppConfig, load_config, save_config
from .diagnostics import DiagnosticsExporter, build_doctor_payload
from .performance import BudgetStatus, PerformanceController, PerformanceTargets
from .poller import Poller, PollerStatus

__all__ = [
    "AppConfig",
    "BudgetStatus",
    "DiagnosticsExporter",
    "PerformanceController",
    "PerformanceTargets",
    "Poller",
    "PollerStatus",
    "build_doctor_payload",
    "load_config",
    "save_config",
]
