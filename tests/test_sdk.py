"""Tests for _sdk module."""

from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

import querytrace
import querytrace._sdk as sdk_mod


def setup_function() -> None:
    """Reset SDK state before each test."""
    sdk_mod._sdk_instance = None


def teardown_function() -> None:
    querytrace.reset()


def test_init_installs_sdk() -> None:
    provider = TracerProvider()
    querytrace.init(tracer_provider=provider, max_value_length=16)
    assert sdk_mod._sdk_instance is not None
    assert sdk_mod._get_sdk() is sdk_mod._sdk_instance
    assert sdk_mod._sdk_instance.config.tracer_provider is provider
    assert sdk_mod._sdk_instance.config.max_value_length == 16


def test_reset_clears_sdk() -> None:
    querytrace.init()
    querytrace.reset()
    assert sdk_mod._sdk_instance is None


def test_default_sdk_is_reused() -> None:
    first = sdk_mod._get_sdk()
    assert first is sdk_mod._get_sdk()
    assert first.config == querytrace.QueryTraceConfig()


def test_reinit_replaces_previous() -> None:
    querytrace.init(max_value_length=10)
    first = sdk_mod._sdk_instance
    querytrace.init(max_value_length=20)
    assert sdk_mod._sdk_instance is not first
    assert sdk_mod._get_sdk().config.max_value_length == 20


def test_max_value_length_applied() -> None:
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    querytrace.init(tracer_provider=provider, max_value_length=4)

    @querytrace.instrument_query
    def insert(body: str) -> None:
        pass

    insert("abcdefgh")
    assert exporter.get_finished_spans()[0].attributes["body"] == "abcd..."


def test_exception_events_can_be_disabled() -> None:
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    querytrace.init(tracer_provider=provider, record_exception_events=False)

    @querytrace.instrument_query
    def fail() -> None:
        raise LookupError("gone")

    try:
        fail()
    except LookupError:
        pass

    span = exporter.get_finished_spans()[0]
    assert span.events == ()
    assert span.attributes["error.message"] == "gone"


def test_tracer_scope_name() -> None:
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    querytrace.init(tracer_provider=provider)

    @querytrace.instrument_query
    def noop() -> None:
        pass

    noop()
    scope = exporter.get_finished_spans()[0].instrumentation_scope
    assert scope.name == "querytrace"
    assert scope.version == querytrace.__version__
