"""GPU telemetry providers with a placeholder fallback."""

from __future__ import annotations

import logging
import math
import shlex
import subprocess

from .errors import ParseFailure, SampleTimeout, SourceUnavailable, TelemetryError
from .models import GPU_PLACEHOLDER_NAME, GpuReading
from .probes import SourceHealth

NVIDIA_SMI_QUERY = ("--query-gpu=name,utilization.gpu", "--format=csv,noheader,nounits")
DEFAULT_TIMEOUT_S = 0.5

logger = logging.getLogger("sysmon.telemetry")


def parse_gpu_csv(text: str) -> GpuReading:
    """Parse ``<name>, <utilization>`` from the first non-empty line.

    The name may itself contain commas, so the split is taken from the right.
    """
    line = next((ln.strip() for ln in text.splitlines() if ln.strip()), "")
    if not line:
        raise ParseFailure("empty GPU query output")

    name, sep, usage = line.rpartition(",")
    name = name.strip()
    usage = usage.strip()
    if not sep or not name:
        raise ParseFailure(f"unexpected GPU query line {line!r}")

    if usage.strip("[]").upper() == "N/A":
        return GpuReading(name=name, usage_percent=None, available=False)
    try:
        value = float(usage)
    except ValueError as exc:
        raise ParseFailure(f"GPU utilization {usage!r} is not numeric") from exc
    if not math.isfinite(value):
        raise ParseFailure(f"GPU utilization {usage!r} is not finite")
    return GpuReading(name=name, usage_percent=max(0.0, min(100.0, value)))


class GpuTelemetryProvider:
    """Capability interface: ``read()`` returns a reading or raises ``TelemetryError``."""

    name = "none"

    def read(self) -> GpuReading:
        raise SourceUnavailable("no GPU telemetry backend")


class NullGpuProvider(GpuTelemetryProvider):
    pass


class CannedGpuProvider(GpuTelemetryProvider):
    """Replays fixed query output, or raises a fixed error."""

    name = "canned"

    def __init__(self, output: str | None = None, error: TelemetryError | None = None) -> None:
        self.output = output
        self.error = error
        self.calls = 0

    def read(self) -> GpuReading:
        self.calls += 1
        if self.error is not None:
            raise self.error
        if self.output is None:
            raise SourceUnavailable("no canned output")
        return parse_gpu_csv(self.output)


class NvidiaSmiProvider(GpuTelemetryProvider):
    name = "nvidia-smi"

    def __init__(self, command: str = "nvidia-smi", timeout_s: float = DEFAULT_TIMEOUT_S) -> None:
        self.argv = [*shlex.split(command), *NVIDIA_SMI_QUERY]
        self.timeout_s = timeout_s

    def read(self) -> GpuReading:
        try:
            proc = subprocess.run(
                self.argv,
                check=False,
                capture_output=True,
                text=True,
                timeout=self.timeout_s,
            )
        except FileNotFoundError as exc:
            raise SourceUnavailable(f"{self.argv[0]} not found") from exc
        except subprocess.TimeoutExpired as exc:
            raise SampleTimeout(f"{self.argv[0]} exceeded {self.timeout_s:.2f}s") from exc
        except OSError as exc:
            raise SourceUnavailable(f"{self.argv[0]}: {exc}") from exc

        if proc.returncode != 0:
            message = f"{self.argv[0]} exited {proc.returncode}"
            detail = (proc.stderr or proc.stdout or "").strip().splitlines()
            if detail:
                message = f"{message}: {detail[0]}"
            raise SourceUnavailable(message)
        return parse_gpu_csv(proc.stdout)


class NvmlGpuProvider(GpuTelemetryProvider):
    name = "nvml"

    def __init__(self) -> None:
        import pynvml  # type: ignore

        self._nvml = pynvml
        pynvml.nvmlInit()

    def read(self) -> GpuReading:
        nvml = self._nvml
        try:
            if nvml.nvmlDeviceGetCount() < 1:
                raise SourceUnavailable("NVML reports no devices")
            h = nvml.nvmlDeviceGetHandleByIndex(0)
            name = nvml.nvmlDeviceGetName(h)
            util = nvml.nvmlDeviceGetUtilizationRates(h)
        except nvml.NVMLError as exc:
            raise SourceUnavailable(f"NVML: {exc}") from exc
        if isinstance(name, bytes):
            name = name.decode("utf-8", errors="replace")
        return GpuReading(name=str(name), usage_percent=float(util.gpu))


def build_gpu_provider(backend: str = "nvidia-smi", command: str = "nvidia-smi", timeout_s: float = DEFAULT_TIMEOUT_S) -> GpuTelemetryProvider:
    if backend == "none":
        return NullGpuProvider()
    if backend == "nvml":
        try:
            return NvmlGpuProvider()
        except Exception as exc:
            logger.warning("NVML unavailable, GPU readings disabled: %s", exc, extra={"event": "nvml_init_failed"})
            return NullGpuProvider()
    return NvidiaSmiProvider(command=command, timeout_s=timeout_s)


class GpuSampler:
    def __init__(self, provider: GpuTelemetryProvider | None = None, placeholder_name: str = GPU_PLACEHOLDER_NAME) -> None:
        self.provider = provider or NvidiaSmiProvider()
        self.placeholder_name = placeholder_name
        self._health = SourceHealth(f"gpu ({self.provider.name})")

    def sample(self) -> GpuReading:
        try:
            reading = self.provider.read()
        except TelemetryError as exc:
            self._health.failed(exc)
            return GpuReading.placeholder(self.placeholder_name)
        self._health.ok()
        return reading
