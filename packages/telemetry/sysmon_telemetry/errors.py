"""Failure taxonomy raised by telemetry sources and parsers."""

from __future__ import annotations


class TelemetryError(Exception):
    """Base class for recoverable sampling failures."""


class SourceUnavailable(TelemetryError):
    """A pseudo-file or external tool could not be read or run."""


class ParseFailure(TelemetryError):
    """A source was read but its content was malformed."""


class SampleTimeout(TelemetryError):
    """An external tool did not answer within its time budget."""
