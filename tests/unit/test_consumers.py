from __future__ import annotations

import io
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "apps" / "desktop"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from sysmon_app.consumers import TerminalConsumer, snapshot_to_dashboard, snapshot_to_dict
from sysmon_telemetry import GpuReading, MemoryReading, Snapshot, TemperatureReading


def _snapshot(**overrides) -> Snapshot:
    fields = dict(
        cpu=0.0,
        cpu_available=False,
        memory=MemoryReading.unavailable(),
        gpu=GpuReading.placeholder(),
        temperature=TemperatureReading.unavailable(),
        timestamp=datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc),
    )
    fields.update(overrides)
    return Snapshot(**fields)


def test_unavailable_readings_map_to_none() -> None:
    data = snapshot_to_dashboard(_snapshot())
    assert data.cpu_percent is None
    assert data.ram_total_mb is None
    assert data.gpu_percent is None
    assert data.temp_c is None


def test_zero_degrees_is_kept() -> None:
    data = snapshot_to_dashboard(_snapshot(temperature=TemperatureReading(celsius=0.0)))
    assert data.temp_c == 0.0


def test_snapshot_to_dict_is_json_ready() -> None:
    snap = _snapshot(cpu=12.5, cpu_available=True, memory=MemoryReading(16000, 8000, 50.0))
    data = json.loads(json.dumps(snapshot_to_dict(snap)))
    assert data["timestamp"] == "2024-05-01T12:00:00+00:00"
    assert data["memory"] == {"total_mb": 16000, "used_mb": 8000, "used_percent": 50.0, "available": True}


def test_terminal_consumer_limit() -> None:
    buf = io.StringIO()
    consumer = TerminalConsumer(buf, json_lines=True, limit=2)
    for _ in range(3):
        consumer(_snapshot())
    assert consumer.done.is_set()
    assert consumer.count == 2
    assert len(buf.getvalue().splitlines()) == 2


def test_baseline_cpu_is_not_shown_as_zero() -> None:
    snap = _snapshot(cpu=0.0, cpu_available=True, cpu_baseline=True)
    assert snapshot_to_dashboard(snap).cpu_percent is None
    assert snapshot_to_dict(snap)["cpu"] is None
    assert snapshot_to_dict(snap)["cpu_baseline"] is True


def test_measured_cpu_is_kept() -> None:
    snap = _snapshot(cpu=0.0, cpu_available=True)
    assert snapshot_to_dashboard(snap).cpu_percent == 0.0
    assert snapshot_to_dict(snap)["cpu"] == 0.0
