"""Tests for the instrument_query decorator on synchronous functions."""

import inspect
import logging

import pytest
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import SpanKind, StatusCode

import querytrace
from querytrace import (
    TargetSyntaxError,
    UnknownOptionError,
    UnknownParameterError,
    instrument_query,
    record_statement,
)


class Row:
    def __init__(self, row_id: int) -> None:
        self.row_id = row_id

    def __repr__(self) -> str:
        return f"Row({self.row_id})"


class DbError(Exception):
    pass


def test_add_scenario(exporter: InMemorySpanExporter) -> None:
    @instrument_query
    def add(a: int, b: int) -> int:
        return a + b

    assert add(2, 3) == 5

    spans = exporter.get_finished_spans()
    assert len(spans) == 1
    span = spans[0]
    assert span.name == "test_add_scenario.<locals>.add"
    assert span.kind is SpanKind.CLIENT
    assert span.attributes["a"] == 2
    assert span.attributes["b"] == 3
    assert span.attributes["span.kind"] == "client"
    assert span.attributes["span.type"] == "sql"
    assert span.attributes["component"] == "querytrace"
    assert span.attributes["operation.name"] == "querytrace.query"
    assert span.attributes["resource.name"] == "test_add_scenario.<locals>.add"
    assert span.status.status_code is StatusCode.UNSET
    assert "error.message" not in span.attributes


def test_signature_preserved() -> None:
    def find_user(db: object, user_id: int, *, active: bool = True) -> Row:
        """Look up a user."""
        return Row(user_id)

    wrapped = instrument_query(skip="db")(find_user)
    assert wrapped.__name__ == "find_user"
    assert wrapped.__qualname__ == find_user.__qualname__
    assert wrapped.__doc__ == "Look up a user."
    assert wrapped.__wrapped__ is find_user  # type: ignore[attr-defined]
    assert inspect.signature(wrapped) == inspect.signature(find_user)
    assert not inspect.iscoroutinefunction(wrapped)


def test_keyword_and_default_arguments_captured(exporter: InMemorySpanExporter) -> None:
    @instrument_query
    def page(offset: int, limit: int = 50, *, order: str = "id") -> list[int]:
        return list(range(offset, offset + 2))

    assert page(10, order="name") == [10, 11]

    attrs = exporter.get_finished_spans()[0].attributes
    assert attrs["offset"] == 10
    assert attrs["limit"] == 50
    assert attrs["order"] == "name"


def test_non_scalar_arguments_rendered_with_repr(exporter: InMemorySpanExporter) -> None:
    @instrument_query
    def save(row: Row, tags: list[str]) -> None:
        pass

    save(Row(7), ["a", "b"])

    attrs = exporter.get_finished_spans()[0].attributes
    assert attrs["row"] == "Row(7)"
    assert attrs["tags"] == "['a', 'b']"


def test_skip_password_never_recorded(exporter: InMemorySpanExporter) -> None:
    @instrument_query(skip=("password",))
    def authenticate(email: str, password: str) -> bool:
        return password == "hunter2"

    assert authenticate("a@example.com", "hunter2") is True
    assert authenticate("a@example.com", password="wrong") is False

    spans = exporter.get_finished_spans()
    assert len(spans) == 2
    for span in spans:
        assert "password" not in span.attributes
        assert "hunter2" not in span.attributes.values()
        assert span.attributes["email"] == "a@example.com"


def test_skip_nonexistent_fails_at_decoration() -> None:
    with pytest.raises(UnknownParameterError, match="nonexistent"):

        @instrument_query(skip=("nonexistent",))
        def fetch(row_id: int) -> Row:
            return Row(row_id)


def test_unknown_option_fails_at_decoration() -> None:
    with pytest.raises(UnknownOptionError, match="fields_"):

        @instrument_query(fields_={"a": 1})
        def fetch(row_id: int) -> Row:
            return Row(row_id)


def test_class_target_rejected() -> None:
    with pytest.raises(TargetSyntaxError):

        @instrument_query
        class Repository:
            pass


def test_raised_error_recorded_and_propagated(exporter: InMemorySpanExporter) -> None:
    error = DbError("connection reset")

    @instrument_query
    def fetch(row_id: int) -> Row:
        raise error

    with pytest.raises(DbError) as excinfo:
        fetch(1)
    assert excinfo.value is error

    span = exporter.get_finished_spans()[0]
    assert span.status.status_code is StatusCode.ERROR
    assert span.status.description == "connection reset"
    assert span.attributes["error.message"] == "connection reset"
    assert span.attributes["error.type"] == f"{__name__}.DbError"
    assert [e.name for e in span.events] == ["exception"]


def test_returned_failure_recorded_and_returned(exporter: InMemorySpanExporter) -> None:
    error = DbError("no such row")

    @instrument_query
    def fetch(row_id: int) -> Row | DbError:
        if row_id < 0:
            return error
        return Row(row_id)

    assert fetch(-1) is error
    ok = fetch(4)
    assert isinstance(ok, Row)

    failed, succeeded = exporter.get_finished_spans()
    assert failed.status.status_code is StatusCode.ERROR
    assert failed.attributes["error.message"] == "no such row"
    assert succeeded.status.status_code is StatusCode.UNSET
    assert "error.message" not in succeeded.attributes


def test_returned_exception_ignored_for_bare_shape(exporter: InMemorySpanExporter) -> None:
    @instrument_query
    def last_error() -> object:
        return DbError("stored")

    last_error()
    assert "error.message" not in exporter.get_finished_spans()[0].attributes


def test_span_is_current_inside_body(exporter: InMemorySpanExporter) -> None:
    seen = []

    @instrument_query(name="users.count")
    def count() -> int:
        seen.append(trace.get_current_span())
        record_statement("  SELECT count(*) FROM users \n")
        return 3

    assert count() == 3

    span = exporter.get_finished_spans()[0]
    assert span.name == "users.count"
    assert seen[0].get_span_context().span_id == span.context.span_id
    assert span.attributes["db.statement"] == "SELECT count(*) FROM users"
    assert trace.get_current_span() is not seen[0]


def test_nested_spans_share_trace(exporter: InMemorySpanExporter) -> None:
    @instrument_query
    def inner() -> int:
        return 1

    @instrument_query
    def outer() -> int:
        return inner() + 1

    assert outer() == 2

    child, parent = exporter.get_finished_spans()
    assert child.parent is not None
    assert child.parent.span_id == parent.context.span_id
    assert child.context.trace_id == parent.context.trace_id


def test_one_span_per_call(exporter: InMemorySpanExporter) -> None:
    @instrument_query
    def noop() -> None:
        pass

    for _ in range(5):
        noop()
    assert len(exporter.get_finished_spans()) == 5


def test_bad_call_raises_original_type_error(exporter: InMemorySpanExporter) -> None:
    @instrument_query
    def fetch(row_id: int) -> Row:
        return Row(row_id)

    with pytest.raises(TypeError):
        fetch(1, 2)  # type: ignore[call-arg]

    span = exporter.get_finished_spans()[0]
    assert "row_id" not in span.attributes
    assert span.attributes["error.type"] == "TypeError"


def test_methods_and_descriptors(exporter: InMemorySpanExporter) -> None:
    class Repo:
        def __init__(self, dsn: str) -> None:
            self.dsn = dsn

        @instrument_query
        def get(self, row_id: int) -> Row:
            return Row(row_id)

        @instrument_query
        @staticmethod
        def normalise(row_id: int) -> int:
            return abs(row_id)

        @instrument_query
        @classmethod
        def connect(cls, dsn: str) -> "Repo":
            return cls(dsn)

    repo = Repo.connect("sqlite://")
    assert repo.get(Repo.normalise(-3)).row_id == 3

    spans = {s.name.rsplit(".", 1)[-1]: s for s in exporter.get_finished_spans()}
    assert set(spans) == {"connect", "normalise", "get"}
    assert "cls" not in spans["connect"].attributes
    assert spans["connect"].attributes["dsn"] == "sqlite://"
    assert "self" not in spans["get"].attributes
    assert spans["get"].attributes["row_id"] == 3


def test_without_init_graceful() -> None:
    """Decorated functions run without init (global no-op provider)."""
    querytrace.reset()

    @instrument_query
    def safe(x: int) -> int:
        return x * 2

    assert safe(4) == 8


def test_init_after_decoration(
    exporter: InMemorySpanExporter, provider: TracerProvider
) -> None:
    querytrace.reset()

    @instrument_query
    def early(x: int) -> int:
        return x

    early(1)
    assert exporter.get_finished_spans() == ()

    querytrace.init(tracer_provider=provider)
    early(2)
    spans = exporter.get_finished_spans()
    assert len(spans) == 1
    assert spans[0].attributes["x"] == 2


def test_span_failure_runs_untraced(
    monkeypatch: pytest.MonkeyPatch,
    exporter: InMemorySpanExporter,
    caplog: pytest.LogCaptureFixture,
) -> None:
    sdk = querytrace._sdk._get_sdk()

    def broken_start_span(*args: object, **kwargs: object) -> None:
        raise RuntimeError("tracer down")

    monkeypatch.setattr(sdk.tracer, "start_span", broken_start_span)

    @instrument_query
    def fetch(row_id: int) -> int:
        return row_id

    with caplog.at_level(logging.WARNING, logger="querytrace.generate"):
        assert fetch(9) == 9

    assert exporter.get_finished_spans() == ()
    assert "Failed to open span" in caplog.text
