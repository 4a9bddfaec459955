"""Tracing of category requests with OpenTelemetry.

``observability_config.exporter_type`` decides where finished spans go:
Loguru at DEBUG level (``console``), an OTLP collector over gRPC (``otlp``)
or nowhere (``none``). Service operations open their own spans through
``trace_operation``; every span carries the request's correlation id.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Final

from loguru import logger
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import (
    DEPLOYMENT_ENVIRONMENT,
    SERVICE_NAME,
    SERVICE_VERSION,
    Resource,
)
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    SpanExporter,
    SpanExportResult,
)
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

from magazenn.core.context import RequestContext

if TYPE_CHECKING:
    from collections.abc import Generator, Sequence

    from fastapi import FastAPI

    from magazenn.core.config import Settings

CORRELATION_ID_ATTRIBUTE: Final[str] = "correlation_id"
DEFAULT_OTLP_ENDPOINT: Final[str] = "http://localhost:4317"
UNTRACED_URLS: Final[str] = "/health,/docs,/redoc,/openapi.json"
# Low-level spans of the ASGI and database instrumentations
NOISY_SPAN_NAMES: Final[frozenset[str]] = frozenset(
    {"connect", "http send", "http receive", "cursor.execute"}
)


class LoguruSpanExporter(SpanExporter):
    """Log each finished span as a DEBUG record with its timing and ids."""

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        for span in spans:
            context = span.get_span_context()
            if context is None or span.name in NOISY_SPAN_NAMES:
                continue

            attributes = dict(span.attributes or {})
            elapsed_ms = (
                (span.end_time - span.start_time) // 1_000_000
                if span.start_time and span.end_time
                else None
            )
            logger.bind(
                trace_id=f"0x{context.trace_id:032x}",
                span_id=f"0x{context.span_id:016x}",
                correlation_id=attributes.get(
                    CORRELATION_ID_ATTRIBUTE, RequestContext.get_correlation_id()
                ),
                duration_ms=elapsed_ms,
                status=span.status.status_code.name,
                attributes=attributes,
            ).debug("Trace span completed: {}", span.name)

        return SpanExportResult.SUCCESS


def get_span_exporter(settings: Settings) -> SpanExporter | None:
    config = settings.observability_config

    if config.exporter_type == "console":
        logger.info("Using Loguru span exporter for development")
        return LoguruSpanExporter()

    if config.exporter_type == "otlp":
        endpoint = config.exporter_endpoint or DEFAULT_OTLP_ENDPOINT
        logger.info("Using OTLP exporter at {}", endpoint)
        # Plain-text gRPC is only acceptable against a local collector
        return OTLPSpanExporter(
            endpoint=endpoint, insecure=settings.environment == "development"
        )

    logger.info("Trace export disabled")
    return None


def setup_tracing(settings: Settings) -> None:
    """Install a sampled tracer provider describing this service."""
    config = settings.observability_config
    if not config.enable_tracing:
        logger.info("Tracing disabled by configuration")
        return

    provider = TracerProvider(
        resource=Resource.create(
            {
                SERVICE_NAME: settings.app_name,
                SERVICE_VERSION: settings.app_version,
                DEPLOYMENT_ENVIRONMENT: settings.environment,
            }
        ),
        sampler=TraceIdRatioBased(config.trace_sample_rate),
    )
    exporter = get_span_exporter(settings)
    if exporter is not None:
        provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    logger.info(
        "Tracing configured",
        exporter_type=config.exporter_type,
        sample_rate=config.trace_sample_rate,
    )


def add_correlation_id_to_span(span: trace.Span, _scope: dict[str, Any]) -> None:
    correlation_id = RequestContext.get_correlation_id()
    if correlation_id and span and span.is_recording():
        span.set_attribute(CORRELATION_ID_ATTRIBUTE, correlation_id)


def instrument_app(app: FastAPI, settings: Settings) -> None:
    """Trace incoming requests and the SQL they run."""
    if not settings.observability_config.enable_tracing:
        return

    FastAPIInstrumentor.instrument_app(
        app,
        excluded_urls=UNTRACED_URLS,
        server_request_hook=add_correlation_id_to_span,
    )
    SQLAlchemyInstrumentor().instrument(enable_commenter=True)
    logger.info("Application instrumented for tracing")


@contextmanager
def trace_operation(
    name: str, **attributes: str | int | float | bool | None
) -> Generator[trace.Span]:
    """Run the block inside a new span called ``name``.

    Attribute values are stored as strings and ``None`` values are left
    out, so optional arguments can be passed as they are:

        with trace_operation("CategoryService.delete_category", **{"arg.id": id}):
            ...
    """
    with trace.get_tracer(__name__).start_as_current_span(name) as span:
        for key, value in attributes.items():
            if value is not None:
                span.set_attribute(key, str(value))
        if correlation_id := RequestContext.get_correlation_id():
            span.set_attribute(CORRELATION_ID_ATTRIBUTE, correlation_id)
        yield span
