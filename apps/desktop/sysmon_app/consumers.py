"""Snapshot consumers that live outside the sampling core."""

from __future__ import annotations

import json
import threading
from dataclasses import asdict
from typing import Any, TextIO

from sysmon_renderer import DashboardData, labels
from sysmon_telemetry import Snapshot


def snapshot_to_dashboard(snap: Snapshot) -> DashboardData:
    memory = snap.memory
    return DashboardData(
        cpu_percent=snap.cpu if snap.cpu_measured else None,
        ram_used_mb=memory.used_mb if memory.available else None,
        ram_total_mb=memory.total_mb if memory.available else None,
        ram_percent=memory.used_percent if memory.available else None,
        gpu_name=snap.gpu.name,
        gpu_percent=snap.gpu.usage_percent,
        temp_c=snap.temperature.celsius if snap.temperature.available else None,
        timestamp=snap.timestamp,
    )


def snapshot_to_dict(snap: Snapshot) -> dict[str, Any]:
    data = asdict(snap)
    data["timestamp"] = snap.timestamp.isoformat()
    if not snap.cpu_measured:
        data["cpu"] = None
    return data


class TerminalConsumer:
    """Writes one label block (or one JSON line) per snapshot; sets ``done`` after ``limit``."""

    def __init__(self, stream: TextIO, json_lines: bool = False, limit: int | None = None) -> None:
        self.stream = stream
        self.json_lines = json_lines
        self.limit = limit
        self.count = 0
        self.done = threading.Event()

    def __call__(self, snap: Snapshot) -> None:
        if self.done.is_set():
            return
        if self.json_lines:
            self.stream.write(json.dumps(snapshot_to_dict(snap), sort_keys=True) + "\n")
        else:
            stamp = snap.timestamp.astimezone().strftime("%H:%M:%S")
            self.stream.write(f"[{stamp}]\n")
            for line in labels(snapshot_to_dashboard(snap)):
                self.stream.write(f"  {line}\n")
        self.stream.flush()
        self.count += 1
        if self.limit is not None and self.count >= self.limit:
            self.done.set()
