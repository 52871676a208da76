"""TelemetryService singleton for OpenTelemetry.

Provides the tracer used by @traced and the meter used to mirror session
counters. When telemetry is disabled, the OpenTelemetry API hands out no-op
tracers and meters, so callers never need to branch.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from book_catalog_tool.telemetry.config import ExporterType, TelemetryConfig

if TYPE_CHECKING:
    from opentelemetry.metrics import Meter
    from opentelemetry.sdk.metrics.export import MetricExporter
    from opentelemetry.sdk.trace.export import SpanExporter
    from opentelemetry.trace import Tracer

logger = logging.getLogger(__name__)


class TelemetryService:
    """Singleton service for OpenTelemetry instrumentation.

    Example:
        >>> TelemetryService.get_instance().initialize(TelemetryConfig.from_env())
        >>> with TelemetryService.get_instance().tracer.start_as_current_span("load"):
        ...     pass
        >>> TelemetryService.get_instance().shutdown()
    """

    _instance: TelemetryService | None = None
    _instance_lock = threading.Lock()

    def __init__(self) -> None:
        self._config = TelemetryConfig(enabled=False)
        self._initialized = False

    @classmethod
    def get_instance(cls) -> TelemetryService:
        """Get the singleton instance, creating it on first use."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    def initialize(self, config: TelemetryConfig) -> None:
        """Initialize telemetry with configuration.

        Safe to call multiple times; subsequent calls are no-ops.

        Args:
            config: Telemetry configuration.
        """
        if self._initialized:
            logger.debug("Telemetry already initialized, skipping")
            return

        self._config = config
        self._initialized = True

        if not config.enabled:
            logger.debug("Telemetry disabled, using no-op providers")
            return

        self._setup_providers(config)
        logger.info(
            "Telemetry initialized: service=%s, exporter=%s",
            config.service_name,
            config.exporter_type.value,
        )

    def _setup_providers(self, config: TelemetryConfig) -> None:
        """Set up the tracer and meter providers."""
        from opentelemetry import metrics, trace
        from opentelemetry.sdk.metrics import MeterProvider
        from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor

        resource = Resource.create(
            {
                "service.name": config.service_name,
                "service.version": config.service_version,
            }
        )

        tracer_provider = TracerProvider(resource=resource)
        tracer_provider.add_span_processor(BatchSpanProcessor(_create_span_exporter(config)))
        trace.set_tracer_provider(tracer_provider)
        self._tracer_provider = tracer_provider

        metric_reader = PeriodicExportingMetricReader(
            _create_metric_exporter(config),
            export_interval_millis=config.metric_interval_millis,
        )
        meter_provider = MeterProvider(resource=resource, metric_readers=[metric_reader])
        metrics.set_meter_provider(meter_provider)
        self._meter_provider = meter_provider

    @property
    def tracer(self) -> Tracer:
        """Get a tracer (no-op when telemetry is disabled)."""
        from opentelemetry import trace

        return trace.get_tracer(self._config.service_name, self._config.service_version)

    @property
    def meter(self) -> Meter:
        """Get a meter (no-op when telemetry is disabled)."""
        from opentelemetry import metrics

        return metrics.get_meter(self._config.service_name, self._config.service_version)

    @property
    def is_enabled(self) -> bool:
        """Check if telemetry is enabled and initialized."""
        return self._initialized and self._config.enabled

    def shutdown(self) -> None:
        """Flush and shut down telemetry providers.

        Critical for CLI runs: pending spans and metrics are exported here.
        """
        for name in ("_tracer_provider", "_meter_provider"):
            provider = getattr(self, name, None)
            if provider is None:
                continue
            try:
                provider.force_flush()
                provider.shutdown()
                logger.debug("%s shut down", name.strip("_"))
            except Exception as e:
                logger.warning("Error shutting down %s: %s", name.strip("_"), e)
            setattr(self, name, None)

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance. Primarily for tests."""
        with cls._instance_lock:
            instance = cls._instance
            cls._instance = None
        if instance is not None:
            instance.shutdown()


def _create_span_exporter(config: TelemetryConfig) -> SpanExporter:
    if config.exporter_type == ExporterType.OTLP:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

        return OTLPSpanExporter(endpoint=config.otlp_endpoint, insecure=config.otlp_insecure)

    from opentelemetry.sdk.trace.export import ConsoleSpanExporter

    return ConsoleSpanExporter()


def _create_metric_exporter(config: TelemetryConfig) -> MetricExporter:
    if config.exporter_type == ExporterType.OTLP:
        from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter

        return OTLPMetricExporter(endpoint=config.otlp_endpoint, insecure=config.otlp_insecure)

    from opentelemetry.sdk.metrics.export import ConsoleMetricExporter

    return ConsoleMetricExporter()
