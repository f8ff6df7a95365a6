"""Host telemetry probes for SysMon."""

from .errors import ParseFailure, SampleTimeout, SourceUnavailable, TelemetryError
from .gpu import (
    CannedGpuProvider,
    GpuSampler,
    GpuTelemetryProvider,
    NullGpuProvider,
    NvidiaSmiProvider,
    NvmlGpuProvider,
    build_gpu_provider,
    parse_gpu_csv,
)
from .models import (
    GPU_PLACEHOLDER_NAME,
    CounterSample,
    CpuReading,
    CpuState,
    GpuReading,
    MemoryReading,
    Snapshot,
    TemperatureReading,
)
from .probes import CpuSampler, MemorySampler, TemperatureSampler, cpu_percent, parse_cpu_line, parse_meminfo, parse_millidegrees
from .provider import TelemetryProvider

__all__ = [
    "GPU_PLACEHOLDER_NAME",
    "CannedGpuProvider",
    "CounterSample",
    "CpuReading",
    "CpuSampler",
    "CpuState",
    "GpuReading",
    "GpuSampler",
    "GpuTelemetryProvider",
    "MemoryReading",
    "MemorySampler",
    "NullGpuProvider",
    "NvidiaSmiProvider",
    "NvmlGpuProvider",
    "ParseFailure",
    "SampleTimeout",
    "Snapshot",
    "SourceUnavailable",
    "TelemetryError",
    "TelemetryProvider",
    "TemperatureReading",
    "TemperatureSampler",
    "build_gpu_provider",
    "cpu_percent",
    "parse_cpu_line",
    "parse_gpu_csv",
    "parse_meminfo",
    "parse_millidegrees",
]
