"""OpenTelemetry instrumentation for the URL Shortener application."""

import logging
from functools import lru_cache
from typing import Optional, Tuple

from opentelemetry import metrics, trace
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBasedTraceIdRatio

from shortener.core.config import settings

logger = logging.getLogger(__name__)


@lru_cache
def setup_telemetry() -> Tuple[Optional[TracerProvider], Optional[MeterProvider]]:
    """Initialize OpenTelemetry tracing and metrics providers."""
    if not settings.OTEL_ENABLED:
        logger.info("OpenTelemetry instrumentation is disabled")
        return None, None

    try:
        resource = Resource.create({
            "service.name": settings.OTEL_SERVICE_NAME,
            "service.version": settings.APP_VERSION,
            "deployment.environment": settings.ENVIRONMENT.value,
        })

        tracer_provider = _setup_tracing(resource)
        meter_provider = _setup_metrics(resource)
        return tracer_provider, meter_provider
    except Exception as e:
        logger.error(f"Failed to initialize OpenTelemetry: {e}")
        return None, None


def _use_grpc() -> bool:
    return settings.OTEL_EXPORTER_OTLP_PROTOCOL.lower() == "grpc"


def _setup_tracing(resource: Resource) -> TracerProvider:
    """Set up tracing with the provided resource."""
    tracer_provider = TracerProvider(
        resource=resource,
        sampler=ParentBasedTraceIdRatio(float(settings.OTEL_TRACES_SAMPLER_ARG)),
    )
    trace.set_tracer_provider(tracer_provider)

    if _use_grpc():
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
        exporter = OTLPSpanExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT, insecure=True)
    else:
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
        exporter = OTLPSpanExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT)

    tracer_provider.add_span_processor(BatchSpanProcessor(exporter))
    logger.info(f"OpenTelemetry tracer configured with {settings.OTEL_EXPORTER_OTLP_PROTOCOL} exporter")
    return tracer_provider


def _setup_metrics(resource: Resource) -> MeterProvider:
    """Set up metrics with the provided resource."""
    if _use_grpc():
        from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
        exporter = OTLPMetricExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT, insecure=True)
    else:
        from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
        exporter = OTLPMetricExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT)

    reader = PeriodicExportingMetricReader(
        exporter,
        export_interval_millis=settings.OTEL_METRICS_EXPORT_INTERVAL_MILLIS
    )
    meter_provider = MeterProvider(resource=resource, metric_readers=[reader])
    metrics.set_meter_provider(meter_provider)
    logger.info(f"OpenTelemetry metrics configured with {settings.OTEL_EXPORTER_OTLP_PROTOCOL} exporter")
    return meter_provider


def shutdown_telemetry() -> None:
    """Flush and shut down providers created by setup_telemetry."""
    tracer_provider, meter_provider = setup_telemetry()
    if tracer_provider is not None:
        tracer_provider.shutdown()
    if meter_provider is not None:
        meter_provider.shutdown()


def get_tracer(name: str = None) -> trace.Tracer:
    """Get a tracer for creating spans."""
    return trace.get_tracer(name or settings.OTEL_SERVICE_NAME)


def get_meter(name: str = None) -> metrics.Meter:
    """Get a meter for creating metrics."""
    return metrics.get_meter(name or settings.OTEL_SERVICE_NAME)
