"""OpenTelemetry export (traces, metrics, logs) and framework instrumentation

Nothing is installed unless OTEL_EXPORTER_OTLP_ENDPOINT is set. Signals are
installed independently.
"""
import logging

from opentelemetry import metrics, trace
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from vidtube.core.config import settings

logger = logging.getLogger(__name__)

METRIC_EXPORT_INTERVAL_MS = 5000
EXPORT_TIMEOUT_MS = 30000


def _exporter_args() -> dict:
    return {"endpoint": settings.OTEL_EXPORTER_OTLP_ENDPOINT, "insecure": True}


def _install_traces(resource: Resource) -> None:
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(**_exporter_args())))
    trace.set_tracer_provider(provider)


def _install_metrics(resource: Resource) -> None:
    reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(**_exporter_args()),
        export_interval_millis=METRIC_EXPORT_INTERVAL_MS,
        export_timeout_millis=EXPORT_TIMEOUT_MS
    )
    metrics.set_meter_provider(MeterProvider(resource=resource, metric_readers=[reader]))


def _install_logs(resource: Resource) -> None:
    """Forward stdlib log records (all named loggers) to the collector"""
    provider = LoggerProvider(resource=resource)
    provider.add_log_record_processor(BatchLogRecordProcessor(
        OTLPLogExporter(**_exporter_args()),
        export_timeout_millis=EXPORT_TIMEOUT_MS
    ))
    set_logger_provider(provider)
    logging.getLogger().addHandler(LoggingHandler(level=logging.NOTSET, logger_provider=provider))


def initialize_otel() -> bool:
    """Install OTLP exporters for every signal

    Returns:
        True if at least one signal is being exported
    """
    if not settings.OTEL_EXPORTER_OTLP_ENDPOINT:
        return False

    resource = Resource.create({
        "service.name": settings.OTEL_SERVICE_NAME,
        "deployment.environment": settings.OTEL_ENVIRONMENT
    })

    installed = []
    for signal, install in (("traces", _install_traces), ("metrics", _install_metrics), ("logs", _install_logs)):
        try:
            install(resource)
            installed.append(signal)
        except Exception as e:
            logger.warning(f"OpenTelemetry {signal} export not enabled: {e}")

    if installed:
        logger.info(f"OpenTelemetry exporting {', '.join(installed)} to {settings.OTEL_EXPORTER_OTLP_ENDPOINT}")
    return bool(installed)


def instrument_fastapi(app):
    FastAPIInstrumentor.instrument_app(app, excluded_urls="health,metrics")


def instrument_sqlalchemy(engine):
    try:
        SQLAlchemyInstrumentor().instrument(engine=engine)
    except Exception as e:
        logger.warning(f"Failed to instrument SQLAlchemy: {e}")
