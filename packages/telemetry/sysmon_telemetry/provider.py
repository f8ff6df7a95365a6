"""Aggregates the four probes into one snapshot per poll."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from pathlib import Path

from .gpu import GpuSampler, GpuTelemetryProvider, build_gpu_provider
from .models import Snapshot
from .probes import MEMINFO_PATH, PROC_STAT_PATH, THERMAL_ZONE_PATH, CpuSampler, MemorySampler, TemperatureSampler

# Long enough for the aggregate jiffy counters to advance at USER_HZ=100.
CPU_SETTLE_S = 0.25


class TelemetryProvider:
    """Single polling provider; every source degrades to an unavailable reading."""

    def __init__(
        self,
        proc_stat: Path | str = PROC_STAT_PATH,
        meminfo: Path | str = MEMINFO_PATH,
        thermal_zone: Path | str = THERMAL_ZONE_PATH,
        gpu_provider: GpuTelemetryProvider | None = None,
        prime: bool = True,
    ) -> None:
        self.cpu = CpuSampler(proc_stat)
        self.memory = MemorySampler(meminfo)
        self.gpu = GpuSampler(gpu_provider or build_gpu_provider())
        self.temperature = TemperatureSampler(thermal_zone)
        if prime:
            # Baseline only; a poll before any jiffies elapse is still flagged cpu_baseline.
            self.cpu.read()

    @classmethod
    def from_config(cls, cfg, gpu_provider: GpuTelemetryProvider | None = None) -> "TelemetryProvider":
        if gpu_provider is None:
            gpu_provider = build_gpu_provider(
                backend=cfg.gpu.backend,
                command=cfg.gpu.command,
                timeout_s=cfg.gpu.timeout_ms / 1000,
            )
        return cls(
            proc_stat=cfg.sources.proc_stat,
            meminfo=cfg.sources.meminfo,
            thermal_zone=cfg.sources.thermal_zone,
            gpu_provider=gpu_provider,
        )

    def poll(self) -> Snapshot:
        cpu = self.cpu.read()
        memory = self.memory.sample()
        gpu = self.gpu.sample()
        temperature = self.temperature.sample()
        return Snapshot(
            cpu=cpu.percent,
            cpu_available=cpu.available,
            cpu_baseline=cpu.baseline,
            memory=memory,
            gpu=gpu,
            temperature=temperature,
            timestamp=datetime.now(timezone.utc),
        )

    def settled_poll(self, settle_s: float = CPU_SETTLE_S) -> Snapshot:
        """Poll once after the primed CPU baseline has aged ``settle_s`` seconds.

        One-shot callers use this; a poll straight after construction has no elapsed
        jiffies and would carry ``cpu_baseline=True``.
        """
        time.sleep(settle_s)
        return self.poll()
