"""Shared fixtures: an in-memory span pipeline wired through querytrace.init."""

from collections.abc import Iterator

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

import querytrace


@pytest.fixture
def exporter() -> Iterator[InMemorySpanExporter]:
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    querytrace.init(tracer_provider=provider)
    try:
        yield exporter
    finally:
        querytrace.reset()
        provider.shutdown()


@pytest.fixture
def provider(exporter: InMemorySpanExporter) -> TracerProvider:
    """The provider behind ``exporter``, for tests that open their own spans."""
    sdk = querytrace._sdk._get_sdk()
    assert sdk.config.tracer_provider is not None
    return sdk.config.tracer_provider  # type: ignore[return-value]
