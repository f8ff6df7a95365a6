"""Kernel pseudo-file probes for CPU, memory, and thermal readings."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from .errors import ParseFailure, SourceUnavailable, TelemetryError
from .models import CounterSample, CpuReading, CpuState, MemoryReading, TemperatureReading

PROC_STAT_PATH = Path("/proc/stat")
MEMINFO_PATH = Path("/proc/meminfo")
THERMAL_ZONE_PATH = Path("/sys/class/thermal/thermal_zone0/temp")

_MEMINFO_KEYS = ("MemTotal", "MemFree", "MemAvailable", "Buffers", "Cached")

logger = logging.getLogger("sysmon.telemetry")


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SourceUnavailable(f"{path}: {exc.strerror or exc}") from exc
    except UnicodeDecodeError as exc:
        raise ParseFailure(f"{path}: {exc}") from exc


class SourceHealth:
    """Logs a source only when it flips between available and unavailable."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._available: bool | None = None

    def ok(self) -> None:
        if self._available is False:
            logger.info("%s source recovered", self.name, extra={"event": "source_recovered", "source": self.name})
        self._available = True

    def failed(self, exc: Exception) -> None:
        if self._available is not False:
            logger.warning(
                "%s source unavailable: %s",
                self.name,
                exc,
                extra={"event": "source_unavailable", "source": self.name},
            )
        self._available = False


def parse_cpu_line(text: str) -> CounterSample:
    for line in text.splitlines():
        parts = line.split()
        if not parts or parts[0] != "cpu":
            continue
        if len(parts) < 8:
            raise ParseFailure(f"aggregate cpu line has {len(parts) - 1} fields, need 7")
        try:
            values = [int(p) for p in parts[1:8]]
        except ValueError as exc:
            raise ParseFailure(f"non-numeric cpu counter: {exc}") from exc
        if any(v < 0 for v in values):
            raise ParseFailure("negative cpu counter")
        return CounterSample(*values)
    raise ParseFailure("no aggregate cpu line")


def cpu_percent(state: CpuState, sample: CounterSample) -> tuple[float, CpuState]:
    """Difference ``sample`` against ``state``; returns the percent and the next state.

    A counter that went backwards (reboot, counter wrap) is taken as a fresh baseline.
    """
    total = sample.total
    idle = sample.idle_total
    next_state = CpuState(previous_idle=idle, previous_total=total, initialized=True)
    if total < state.previous_total:
        return 0.0, next_state

    diff_total = total - state.previous_total
    diff_idle = idle - state.previous_idle
    if diff_total <= 0:
        return 0.0, next_state
    percent = 100.0 * (1.0 - (diff_idle / diff_total))
    return max(0.0, min(100.0, percent)), next_state


class CpuSampler:
    def __init__(self, path: Path | str = PROC_STAT_PATH, state: CpuState | None = None) -> None:
        self.path = Path(path)
        self.state = state or CpuState()
        self._lock = threading.Lock()
        self._health = SourceHealth("cpu")

    def read(self) -> CpuReading:
        # Read and difference atomically; samples apply in the order taken.
        with self._lock:
            try:
                sample = parse_cpu_line(_read_text(self.path))
            except TelemetryError as exc:
                self._health.failed(exc)
                return CpuReading(percent=0.0, available=False)
            self._health.ok()

            # No elapsed jiffies means there is nothing to measure yet.
            baseline = not self.state.initialized or sample.total <= self.state.previous_total
            percent, self.state = cpu_percent(self.state, sample)
        return CpuReading(percent=percent, available=True, baseline=baseline)

    def sample(self) -> float:
        return self.read().percent


def parse_meminfo(text: str) -> MemoryReading:
    fields: dict[str, int] = {}
    for line in text.splitlines():
        key, sep, rest = line.partition(":")
        if not sep or key not in _MEMINFO_KEYS:
            continue
        parts = rest.split()
        if not parts:
            raise ParseFailure(f"{key} has no value")
        try:
            fields[key] = int(parts[0])
        except ValueError as exc:
            raise ParseFailure(f"{key}: {exc}") from exc

    total_mb = fields.get("MemTotal", 0) // 1024
    if total_mb <= 0:
        raise ParseFailure("MemTotal missing or zero")

    if "MemAvailable" in fields:
        available_kb = fields["MemAvailable"]
    else:
        # Kernels before 3.14 have no MemAvailable.
        available_kb = fields.get("MemFree", 0) + fields.get("Buffers", 0) + fields.get("Cached", 0)
    available_mb = available_kb // 1024

    used_mb = max(0, min(total_mb, total_mb - available_mb))
    return MemoryReading(total_mb=total_mb, used_mb=used_mb, used_percent=used_mb * 100.0 / total_mb)


class MemorySampler:
    def __init__(self, path: Path | str = MEMINFO_PATH) -> None:
        self.path = Path(path)
        self._health = SourceHealth("memory")

    def sample(self) -> MemoryReading:
        try:
            reading = parse_meminfo(_read_text(self.path))
        except TelemetryError as exc:
            self._health.failed(exc)
            return MemoryReading.unavailable()
        self._health.ok()
        return reading


def parse_millidegrees(text: str) -> TemperatureReading:
    value = text.strip()
    try:
        return TemperatureReading(celsius=int(value) / 1000.0)
    except ValueError as exc:
        raise ParseFailure(f"thermal value {value!r} is not an integer") from exc


class TemperatureSampler:
    def __init__(self, path: Path | str = THERMAL_ZONE_PATH) -> None:
        self.path = Path(path)
        self._health = SourceHealth("temperature")

    def sample(self) -> TemperatureReading:
        try:
            reading = parse_millidegrees(_read_text(self.path))
        except TelemetryError as exc:
            self._health.failed(exc)
            return TemperatureReading.unavailable()
        self._health.ok()
        return reading
