"""Telemetry configuration.

Loads configuration from environment variables following OpenTelemetry
conventions.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum

from book_catalog_tool import __version__

SERVICE_NAME = "book-catalog-tool"


class ExporterType(str, Enum):
    """Supported telemetry exporters."""

    CONSOLE = "console"
    OTLP = "otlp"


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("true", "1", "yes")


@dataclass
class TelemetryConfig:
    """Configuration for OpenTelemetry tracing and metrics.

    Attributes:
        enabled: Whether telemetry is enabled.
        service_name: Name of the service in traces/metrics.
        service_version: Version of the service.
        exporter_type: Exporter to use (console or otlp).
        otlp_endpoint: OTLP collector endpoint.
        otlp_insecure: Whether to use an insecure OTLP connection.
        metric_interval_millis: Metric export interval.
    """

    enabled: bool = False
    service_name: str = SERVICE_NAME
    service_version: str = field(default_factory=lambda: __version__)
    exporter_type: ExporterType = ExporterType.CONSOLE
    otlp_endpoint: str = "http://localhost:4317"
    otlp_insecure: bool = True
    metric_interval_millis: int = 5000

    @classmethod
    def from_env(cls) -> TelemetryConfig:
        """Create configuration from environment variables.

        Environment Variables:
            OTEL_ENABLED: Enable telemetry (default: false)
            OTEL_SERVICE_NAME: Service name (default: book-catalog-tool)
            OTEL_EXPORTER_TYPE: console or otlp (default: console)
            OTEL_EXPORTER_OTLP_ENDPOINT: OTLP endpoint (default: http://localhost:4317)
            OTEL_EXPORTER_OTLP_INSECURE: Use insecure connection (default: true)
        """
        try:
            exporter_type = ExporterType(os.environ.get("OTEL_EXPORTER_TYPE", "console").lower())
        except ValueError:
            exporter_type = ExporterType.CONSOLE

        return cls(
            enabled=_env_flag("OTEL_ENABLED", "false"),
            service_name=os.environ.get("OTEL_SERVICE_NAME", SERVICE_NAME),
            exporter_type=exporter_type,
            otlp_endpoint=os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317"),
            otlp_insecure=_env_flag("OTEL_EXPORTER_OTLP_INSECURE", "true"),
        )
