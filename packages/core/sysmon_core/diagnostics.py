"""Diagnostics export helpers for local support bundles."""

from __future__ import annotations

import json
import os
import platform
import re
import shlex
import shutil
import tempfile
import zipfile
from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from sysmon_telemetry import TelemetryProvider

from .config import AppConfig, config_path
from .logging_setup import log_dir


_SECRET_RE = re.compile(r"(token|secret|password|apikey|api_key|auth)", re.IGNORECASE)


def _jsonable(value: Any) -> Any:
    if is_dataclass(value):
        return asdict(value)
    if isinstance(value, (Path, datetime)):
        return str(value)
    return value


def redact(value: Any) -> Any:
    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for k, v in value.items():
            if _SECRET_RE.search(k):
                out[k] = "***REDACTED***"
            else:
                out[k] = redact(v)
        return out
    if isinstance(value, list):
        return [redact(v) for v in value]
    return value


def _file_source(path: str) -> dict[str, Any]:
    p = Path(path)
    return {
        "path": path,
        "exists": p.exists(),
        "readable": p.is_file() and os.access(p, os.R_OK),
    }


def build_doctor_payload(cfg: AppConfig, provider: TelemetryProvider | None = None) -> dict[str, Any]:
    if provider is None:
        provider = TelemetryProvider.from_config(cfg)
    snap = provider.settled_poll()
    gpu_command = shlex.split(cfg.gpu.command)[0]
    return {
        "ts_utc": datetime.now(timezone.utc).isoformat(),
        "platform": platform.platform(),
        "python": platform.python_version(),
        "config": redact(asdict(cfg)),
        "sources": {
            "cpu": {
                **_file_source(cfg.sources.proc_stat),
                "available": snap.cpu_available,
                "measured": snap.cpu_measured,
            },
            "memory": {**_file_source(cfg.sources.meminfo), "available": snap.memory.available},
            "temperature": {**_file_source(cfg.sources.thermal_zone), "available": snap.temperature.available},
            "gpu": {
                "backend": provider.gpu.provider.name,
                "command_path": shutil.which(gpu_command) if cfg.gpu.backend == "nvidia-smi" else None,
                "adapter": snap.gpu.name,
                "available": snap.gpu.available,
            },
        },
        "snapshot": asdict(snap),
    }


class DiagnosticsExporter:
    def __init__(self, app_name: str = "SysMon") -> None:
        self.app_name = app_name

    def bundle(
        self,
        cfg: AppConfig,
        doctor_payload: dict[str, Any],
        output_dir: Path | None = None,
    ) -> Path:
        output_base = output_dir or Path(tempfile.gettempdir())
        output_base.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        zip_path = output_base / f"sysmon-diagnostics-{stamp}.zip"

        logs = sorted(log_dir().glob("*.log*"))

        with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            manifest = {
                "app": self.app_name,
                "created_utc": datetime.now(timezone.utc).isoformat(),
                "host": platform.platform(),
                "python": platform.python_version(),
                "config_path": str(config_path()),
                "log_dir": str(log_dir()),
            }
            zf.writestr("manifest.json", json.dumps(manifest, indent=2, sort_keys=True))
            zf.writestr("doctor.json", json.dumps(redact(doctor_payload), indent=2, sort_keys=True, default=_jsonable))
            zf.writestr("config.redacted.json", json.dumps(redact(asdict(cfg)), indent=2, sort_keys=True))

            for item in logs:
                zf.write(item, arcname=f"logs/{item.name}")

        return zip_path
