"""
Cross-cutting runtime support for aicoder.
"""

from .telemetry import (
    InMemoryTelemetrySink,
    NullTelemetrySink,
    OpenTelemetrySink,
    TelemetrySink,
    TelemetryRecord,
    TelemetrySpan,
)

__all__ = [
    "InMemoryTelemetrySink",
    "NullTelemetrySink",
    "OpenTelemetrySink",
    "TelemetrySink",
    "TelemetryRecord",
    "TelemetrySpan",
]
