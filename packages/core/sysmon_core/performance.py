"""Monitor self-overhead budgeting."""

from __future__ import annotations

from dataclasses import dataclass

try:
    import psutil
except Exception:  # pragma: no cover
    psutil = None


@dataclass(frozen=True)
class PerformanceTargets:
    cpu_percent_max: float = 5.0
    rss_mb_max: float = 200.0
    tick_ms_max: float = 250.0


@dataclass(frozen=True)
class BudgetStatus:
    cpu_percent: float
    rss_mb: float
    tick_ms: float
    overloaded: bool
    warning: str | None
    recommended_interval_ms: int


class PerformanceController:
    """Samples this process with psutil and compares it against ``PerformanceTargets``."""

    def __init__(self, targets: PerformanceTargets | None = None) -> None:
        self.targets = targets or PerformanceTargets()
        self._process = psutil.Process() if psutil is not None else None
        if self._process is not None:
            # Prime non-blocking CPU measurement.
            self._process.cpu_percent(interval=None)

    def sample(self, tick_ms: float, interval_ms: int) -> BudgetStatus:
        if self._process is None:
            cpu = 0.0
            rss_mb = 0.0
        else:
            cpu = float(self._process.cpu_percent(interval=None))
            rss_mb = float(self._process.memory_info().rss) / (1024 * 1024)
        overloaded = cpu > self.targets.cpu_percent_max or rss_mb > self.targets.rss_mb_max

        warning = None
        rec_interval = interval_ms

        if overloaded:
            warning = "resource_overload"
            rec_interval = min(60000, int(interval_ms * 1.25) + 25)
        elif tick_ms > self.targets.tick_ms_max:
            warning = "slow_tick"
            rec_interval = min(60000, max(interval_ms, int(tick_ms * 2)))
        elif tick_ms >= interval_ms:
            warning = "tick_exceeds_interval"
            rec_interval = min(60000, int(tick_ms) + 100)

        return BudgetStatus(
            cpu_percent=cpu,
            rss_mb=rss_mb,
            tick_ms=float(tick_ms),
            overloaded=overloaded,
            warning=warning,
            recommended_interval_ms=rec_interval,
        )
