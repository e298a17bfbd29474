# src/picaloco_docs/tracing.py

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    SimpleSpanProcessor,
    ConsoleSpanExporter,
)


def configure_tracing(service_name: str = "picaloco-docs") -> None:
    """
    Configure OpenTelemetry tracing with a console exporter.

    Spans are printed to stdout. Swap ConsoleSpanExporter for an OTLP exporter
    to ship them elsewhere; callers don't change.
    """
    # If there's already a provider, don't reconfigure
    if isinstance(trace.get_tracer_provider(), TracerProvider):
        return

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    # SimpleSpanProcessor exports synchronously. BatchSpanProcessor spawns a
    # background worker that can write to stdout after pytest closed capture.
    processor = SimpleSpanProcessor(ConsoleSpanExporter())
    provider.add_span_processor(processor)

    trace.set_tracer_provider(provider)
