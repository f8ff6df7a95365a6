"""Typed telemetry models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

GPU_PLACEHOLDER_NAME = "Graphics adapter"


@dataclass(frozen=True)
class CounterSample:
    user: int
    nice: int
    system: int
    idle: int
    iowait: int
    irq: int
    softirq: int

    @property
    def total(self) -> int:
        return self.user + self.nice + self.system + self.idle + self.iowait + self.irq + self.softirq

    @property
    def idle_total(self) -> int:
        return self.idle


@dataclass
class CpuState:
    previous_idle: int = 0
    previous_total: int = 0
    initialized: bool = False


@dataclass(frozen=True)
class CpuReading:
    percent: float
    available: bool = True
    baseline: bool = False


@dataclass(frozen=True)
class MemoryReading:
    total_mb: int
    used_mb: int
    used_percent: float
    available: bool = True

    @classmethod
    def unavailable(cls) -> "MemoryReading":
        return cls(total_mb=0, used_mb=0, used_percent=0.0, available=False)


@dataclass(frozen=True)
class GpuReading:
    name: str
    usage_percent: float | None
    available: bool = True

    @classmethod
    def placeholder(cls, name: str = GPU_PLACEHOLDER_NAME) -> "GpuReading":
        return cls(name=name, usage_percent=None, available=False)


@dataclass(frozen=True)
class TemperatureReading:
    celsius: float | None
    available: bool = True

    @classmethod
    def unavailable(cls) -> "TemperatureReading":
        return cls(celsius=None, available=False)


@dataclass(frozen=True)
class Snapshot:
    cpu: float
    cpu_available: bool
    memory: MemoryReading
    gpu: GpuReading
    temperature: TemperatureReading
    timestamp: datetime
    cpu_baseline: bool = False

    @property
    def cpu_measured(self) -> bool:
        """True when ``cpu`` is a real delta rather than a placeholder zero."""
        return self.cpu_available and not self.cpu_baseline
