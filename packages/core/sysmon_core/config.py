"""Persistent monitor settings schema and load/save helpers."""

from __future__ import annotations

import json
import os
import platform
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any


CONFIG_VERSION = 1
GPU_BACKENDS = ("nvidia-smi", "nvml", "none")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class PollConfig:
    interval_ms: int = 1000


@dataclass
class SourcesConfig:
    proc_stat: str = "/proc/stat"
    meminfo: str = "/proc/meminfo"
    thermal_zone: str = "/sys/class/thermal/thermal_zone0/temp"


@dataclass
class GpuConfig:
    backend: str = "nvidia-smi"
    command: str = "nvidia-smi"
    timeout_ms: int = 500


@dataclass
class UiConfig:
    theme: str = "Deep Blue"


@dataclass
class DiagnosticsConfig:
    keep_log_files: int = 7
    log_level: str = "INFO"


@dataclass
class PerformanceConfig:
    cpu_percent_max: float = 5.0
    rss_mb_max: float = 200.0
    tick_ms_max: float = 250.0


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    poll: PollConfig = field(default_factory=PollConfig)
    sources: SourcesConfig = field(default_factory=SourcesConfig)
    gpu: GpuConfig = field(default_factory=GpuConfig)
    ui: UiConfig = field(default_factory=UiConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)


def config_root() -> Path:
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "SysMon"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "SysMon"
    return Path.home() / ".config" / "sysmon"


def config_path() -> Path:
    return config_root() / "config.json"


def _merge(dataclass_type, raw: dict[str, Any]):
    defaults = dataclass_type()  # type: ignore[misc]
    if not isinstance(raw, dict):
        return defaults
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _coerce(value: Any, cast, default):
    try:
        return cast(value)
    except (TypeError, ValueError, OverflowError):
        return default


def _normalize_poll(cfg: AppConfig) -> None:
    cfg.poll.interval_ms = max(100, min(60000, _coerce(cfg.poll.interval_ms, int, PollConfig.interval_ms)))


def _normalize_sources(cfg: AppConfig) -> None:
    defaults = SourcesConfig()
    for name in ("proc_stat", "meminfo", "thermal_zone"):
        value = getattr(cfg.sources, name)
        if not isinstance(value, str) or not value.strip():
            setattr(cfg.sources, name, getattr(defaults, name))


def _normalize_gpu(cfg: AppConfig) -> None:
    if cfg.gpu.backend not in GPU_BACKENDS:
        cfg.gpu.backend = "nvidia-smi"
    if not isinstance(cfg.gpu.command, str) or not cfg.gpu.command.strip():
        cfg.gpu.command = "nvidia-smi"
    cfg.gpu.timeout_ms = max(50, min(5000, _coerce(cfg.gpu.timeout_ms, int, GpuConfig.timeout_ms)))


def _normalize_performance(cfg: AppConfig) -> None:
    perf = cfg.performance
    perf.cpu_percent_max = max(0.5, _coerce(perf.cpu_percent_max, float, PerformanceConfig.cpu_percent_max))
    perf.rss_mb_max = max(32.0, _coerce(perf.rss_mb_max, float, PerformanceConfig.rss_mb_max))
    perf.tick_ms_max = max(1.0, _coerce(perf.tick_ms_max, float, PerformanceConfig.tick_ms_max))


def _normalize_misc(cfg: AppConfig) -> None:
    if not isinstance(cfg.ui.theme, str):
        cfg.ui.theme = UiConfig.theme
    keep = _coerce(cfg.diagnostics.keep_log_files, int, DiagnosticsConfig.keep_log_files)
    cfg.diagnostics.keep_log_files = max(1, keep)
    level = cfg.diagnostics.log_level
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        level = DiagnosticsConfig.log_level
    cfg.diagnostics.log_level = level.upper()


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        return AppConfig()
    if not isinstance(data, dict):
        return AppConfig()

    cfg = AppConfig(
        config_version=_coerce(data.get("config_version", CONFIG_VERSION), int, CONFIG_VERSION),
        poll=_merge(PollConfig, data.get("poll", {})),
        sources=_merge(SourcesConfig, data.get("sources", {})),
        gpu=_merge(GpuConfig, data.get("gpu", {})),
        ui=_merge(UiConfig, data.get("ui", {})),
        diagnostics=_merge(DiagnosticsConfig, data.get("diagnostics", {})),
        performance=_merge(PerformanceConfig, data.get("performance", {})),
    )

    _normalize_poll(cfg)
    _normalize_sources(cfg)
    _normalize_gpu(cfg)
    _normalize_performance(cfg)
    _normalize_misc(cfg)
    return cfg


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
