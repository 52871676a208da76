"""OpenTelemetry integration for book-catalog-tool.

Traces catalog sessions and tasks, and mirrors session counters onto
OpenTelemetry metrics. Enable with --telemetry or OTEL_ENABLED=true.
"""

from book_catalog_tool.telemetry.config import ExporterType, TelemetryConfig
from book_catalog_tool.telemetry.decorators import trace_span, traced
from book_catalog_tool.telemetry.service import TelemetryService

__all__ = [
    "ExporterType",
    "TelemetryConfig",
    "TelemetryService",
    "traced",
    "trace_span",
]
