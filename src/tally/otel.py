"""Optional OpenTelemetry tracing for processor runs.

Without the ``otel`` extra installed every call here is a no-op and
``get_tracer`` hands back a tracer whose spans discard attributes.

Install: pip install tally[otel]
"""

from __future__ import annotations

import contextlib
import os
from dataclasses import dataclass
from typing import Any

try:
    from opentelemetry import trace
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    _HAS_OTEL = True
except ImportError:
    _HAS_OTEL = False

GRPC_ENDPOINT = "http://localhost:4317"
HTTP_ENDPOINT = "http://localhost:4318/v1/traces"


def has_otel() -> bool:
    """Check if OpenTelemetry is available."""
    return _HAS_OTEL


@dataclass(frozen=True)
class ExportSettings:
    """Where and how spans are exported, after env overrides."""

    service_name: str
    endpoint: str
    use_grpc: bool
    attributes: dict[str, str]


def resolve_settings(
    service_name: str = "tally",
    endpoint: str = GRPC_ENDPOINT,
    protocol: str = "grpc",
    resource_attributes: dict[str, str] | None = None,
    environ: dict[str, str] | None = None,
) -> ExportSettings:
    """Apply the standard ``OTEL_*`` variables on top of the arguments.

    OTEL_SERVICE_NAME, OTEL_EXPORTER_OTLP_ENDPOINT and
    OTEL_EXPORTER_OTLP_PROTOCOL replace their argument;
    OTEL_RESOURCE_ATTRIBUTES (``k=v,k=v``) is merged over
    *resource_attributes*. Any protocol other than ``grpc`` selects HTTP,
    and HTTP with the gRPC default endpoint moves to the HTTP default.
    """
    env = os.environ if environ is None else environ

    service = env.get("OTEL_SERVICE_NAME", service_name)
    target = env.get("OTEL_EXPORTER_OTLP_ENDPOINT", endpoint)
    use_grpc = env.get("OTEL_EXPORTER_OTLP_PROTOCOL", protocol) == "grpc"
    if not use_grpc and target == GRPC_ENDPOINT:
        target = HTTP_ENDPOINT

    attributes = {"service.name": service, **(resource_attributes or {})}
    for pair in env.get("OTEL_RESOURCE_ATTRIBUTES", "").split(","):
        if "=" in pair:
            k, v = pair.split("=", 1)
            attributes[k.strip()] = v.strip()

    return ExportSettings(service_name=service, endpoint=target, use_grpc=use_grpc, attributes=attributes)


def configure_otel(*, tally_version: str | None = None, force: bool = False, **kwargs: Any) -> None:
    """Install an OTLP-exporting TracerProvider.

    Keyword arguments go to resolve_settings(). Leaves a provider the
    host application already installed in place unless *force=True*.
    """
    if not _HAS_OTEL:
        return
    if isinstance(trace.get_tracer_provider(), TracerProvider) and not force:
        return

    settings = resolve_settings(**kwargs)
    attributes = dict(settings.attributes)
    if tally_version:
        attributes.setdefault("tally.version", tally_version)

    if settings.use_grpc:
        exporter = OTLPSpanExporter(endpoint=settings.endpoint, insecure=True)
    else:
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter as HTTPExporter

        exporter = HTTPExporter(endpoint=settings.endpoint)

    provider = TracerProvider(resource=Resource.create(attributes))
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)


def get_tracer(name: str = "tally") -> Any:
    """Get an OTel tracer, or a no-op one without OTel."""
    if not _HAS_OTEL:
        return _NoOpTracer()
    return trace.get_tracer(name)


class _NoOpSpan:
    def __enter__(self):
        return self

    def __exit__(self, *args):
        pass

    def set_attribute(self, key: str, value: Any) -> None:
        pass


class _NoOpTracer:
    def start_as_current_span(self, name: str, **kwargs: Any) -> contextlib.AbstractContextManager:
        return contextlib.nullcontext(_NoOpSpan())
