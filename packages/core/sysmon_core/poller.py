"""Fixed-rate poller that drives the samplers and hands snapshots to a consumer."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from .logging_setup import get_logger

T = TypeVar("T")

logger = get_logger("poller")


@dataclass
class PollerStatus:
    running: bool = False
    ticks: int = 0
    overruns: int = 0
    last_tick_ms: float = 0.0
    last_error: str | None = None


class Poller(Generic[T]):
    """Calls ``sample`` once on start and then once per ``interval_s``, forwarding to ``consumer``.

    Ticks follow a monotonic schedule anchored at start; a tick that runs past one or more
    deadlines skips them instead of firing a burst. ``stop`` blocks until an in-flight tick
    completes, and nothing is delivered once it returns.
    """

    def __init__(
        self,
        sample: Callable[[], T],
        consumer: Callable[[T], None],
        interval_s: float = 1.0,
        name: str = "sysmon-poller",
    ) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be positive")
        self.sample = sample
        self.consumer = consumer
        self.interval_s = interval_s
        self.name = name

        self._status = PollerStatus()
        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def status(self) -> PollerStatus:
        return self._status

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive() and not self._stop_event.is_set()

    def start(self) -> None:
        with self._lock:
            if self._thread is not None:
                return
            # Per-run event; a previous worker keeps its own, already-set one.
            self._stop_event = threading.Event()
            thread = threading.Thread(target=self._run, args=(self._stop_event,), name=self.name, daemon=True)
            try:
                thread.start()
            except RuntimeError:
                logger.exception("cannot start poller thread", extra={"event": "poller_start_failed"})
                raise
            self._thread = thread
            self._status.running = True
            logger.info("poller started interval=%.3fs", self.interval_s, extra={"event": "poller_started"})

    def stop(self, timeout: float | None = None) -> None:
        with self._lock:
            thread = self._thread
            if thread is None:
                return
            self._stop_event.set()
            self._thread = None
            self._status.running = False

        # Joined outside the lock so a consumer may call stop() from the poller thread.
        if thread is not threading.current_thread():
            thread.join(timeout)
        logger.info("poller stopped ticks=%d", self._status.ticks, extra={"event": "poller_stopped"})

    def __enter__(self) -> "Poller[T]":
        self.start()
        return self

    def __exit__(self, *_exc) -> None:
        self.stop()

    def _run(self, stop_event: threading.Event) -> None:
        started = time.monotonic()
        next_tick = 0
        while not stop_event.is_set():
            self._tick(stop_event)
            next_tick += 1
            deadline = started + next_tick * self.interval_s
            now = time.monotonic()
            if now >= deadline:
                skipped = int((now - deadline) // self.interval_s) + 1
                self._status.overruns += skipped
                next_tick += skipped
                deadline = started + next_tick * self.interval_s
            if stop_event.wait(deadline - now):
                break

    def _tick(self, stop_event: threading.Event) -> None:
        begin = time.perf_counter()
        try:
            item = self.sample()
        except Exception as exc:
            self._record_error("sample", exc)
            return
        finally:
            self._status.last_tick_ms = (time.perf_counter() - begin) * 1000

        # stop() may have been requested while sampling; the consumer must not see late ticks.
        if stop_event.is_set():
            return
        try:
            self.consumer(item)
        except Exception as exc:
            self._record_error("consumer", exc)
            return
        self._status.ticks += 1
        self._status.last_error = None

    def _record_error(self, stage: str, exc: Exception) -> None:
        self._status.last_error = f"{stage}: {exc}"
        logger.exception("poller %s failed", stage, extra={"event": f"poller_{stage}_error"})
