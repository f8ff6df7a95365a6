"""JSON-lines logging for the monitor, driven by the diagnostics settings."""

from __future__ import annotations

import faulthandler
import json
import logging
import logging.handlers
import sys
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Any

from .config import DiagnosticsConfig, config_root


_LOGGER_NAME = "sysmon"
_LOG_FILE = "sysmon.log"
# Keys callers pass through ``extra=`` that are worth keeping in the JSON record.
_EXTRA_KEYS = ("event", "source", "crash_id", "exit_code")

_fault_file: IO[str] | None = None


def log_dir() -> Path:
    path = config_root() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


class JsonFormatter(logging.Formatter):
    """One JSON object per record; the poller thread name shows which worker logged."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts_utc": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "msg": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def configure_logging(settings: DiagnosticsConfig | None = None, console: bool = True) -> logging.Logger:
    """Attach the rotating JSON file handler (and optionally stderr) to ``sysmon``.

    A second call is a no-op, so the CLI and the window can both call it.
    """
    settings = settings or DiagnosticsConfig()
    logger = logging.getLogger(_LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(logging.getLevelName(settings.log_level))
    handler = logging.handlers.TimedRotatingFileHandler(
        filename=str(log_dir() / _LOG_FILE),
        when="midnight",
        backupCount=max(1, settings.keep_log_files),
        encoding="utf-8",
    )
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)

    if console:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s %(message)s"))
        logger.addHandler(stream_handler)

    logger.info("logging configured level=%s", settings.log_level, extra={"event": "logging_configured"})
    return logger


def get_logger(area: str | None = None) -> logging.Logger:
    return logging.getLogger(f"{_LOGGER_NAME}.{area}" if area else _LOGGER_NAME)


def _log_crash(kind: str, exc_info) -> str:
    crash_id = uuid.uuid4().hex[:12]
    get_logger().critical(
        "%s crash_id=%s",
        kind.replace("_", " "),
        crash_id,
        exc_info=exc_info,
        extra={"event": kind, "crash_id": crash_id},
    )
    return crash_id


def install_crash_hooks() -> None:
    """Route uncaught exceptions (main and worker threads) and hard faults into the log dir."""
    global _fault_file

    sys.excepthook = lambda exc_type, exc, tb: _log_crash("uncaught_exception", (exc_type, exc, tb))
    threading.excepthook = lambda args: _log_crash(
        "thread_exception", (args.exc_type, args.exc_value, args.exc_traceback)
    )

    if _fault_file is None:
        _fault_file = (log_dir() / "fault.log").open("a", encoding="utf-8")
        faulthandler.enable(file=_fault_file, all_threads=True)
    get_logger().info("crash hooks installed", extra={"event": "crash_hooks_installed"})
