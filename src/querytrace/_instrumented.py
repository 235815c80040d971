"""Awaitable wrapper that carries a span across suspension points.

Setting the span as current once, around ``await``, ties it to whatever
context happens to drive the coroutine. ``Instrumented`` instead owns a
private copy of the context, with the span attached, and runs every
resumption step inside it. Whatever the body changes in that context (a
nested span made current, a context variable set) is still there on the next
step, whichever thread or event loop resumes it, and none of it leaks to the
code driving the coroutine.
"""

from __future__ import annotations

import contextvars
from collections.abc import Awaitable, Callable, Generator
from typing import Any, Generic, TypeVar

from opentelemetry import context, trace
from opentelemetry.trace import Span

from querytrace._recording import record_failure

T = TypeVar("T")

ResultHook = Callable[[Span, Any], None]


class Instrumented(Generic[T]):
    """Wrap *awaitable* so *span* is current while it runs and ends when it finishes.

    The span ends exactly once: on return, on a raised exception, on
    cancellation, or when the computation is closed or collected before
    completing. Raised ``Exception`` subclasses are recorded on the span and
    re-raised unchanged; cancellation and abandonment are not recorded as
    failures.
    """

    __slots__ = ("_awaitable", "_span", "_ctx", "_on_result", "_record_event", "_ended")

    def __init__(
        self,
        awaitable: Awaitable[T],
        span: Span,
        *,
        on_result: ResultHook | None = None,
        record_exception_events: bool = True,
    ) -> None:
        self._awaitable = awaitable
        self._span = span
        # Never detached: the copy belongs to this computation alone.
        self._ctx = contextvars.copy_context()
        self._ctx.run(context.attach, trace.set_span_in_context(span))
        self._on_result = on_result
        self._record_event = record_exception_events
        self._ended = False

    @property
    def span(self) -> Span:
        return self._span

    def __await__(self) -> Generator[Any, Any, T]:
        return self._drive()

    def _drive(self) -> Generator[Any, Any, T]:
        try:
            iterator = self._ctx.run(self._awaitable.__await__)
        except BaseException:
            self._end()
            raise

        value: Any = None
        thrown: BaseException | None = None
        try:
            while True:
                try:
                    if thrown is None:
                        yielded = self._ctx.run(iterator.send, value)
                    else:
                        yielded = self._ctx.run(iterator.throw, thrown)
                except StopIteration as stop:
                    result = stop.value
                    if self._on_result is not None:
                        self._on_result(self._span, result)
                    return result
                except Exception as e:
                    record_failure(self._span, e, record_event=self._record_event)
                    raise

                try:
                    value = yield yielded
                    thrown = None
                except GeneratorExit:
                    self._close(iterator)
                    raise
                except BaseException as e:  # noqa: BLE001
                    value = None
                    thrown = e
        finally:
            self._end()

    def _close(self, iterator: Any) -> None:
        close = getattr(iterator, "close", None)
        if close is not None:
            self._ctx.run(close)

    def _end(self) -> None:
        if not self._ended:
            self._ended = True
            self._span.end()

    def __del__(self) -> None:
        # Built but never awaited: the span must not stay open.
        if not getattr(self, "_ended", True):
            self._end()
            close = getattr(self._awaitable, "close", None)
            if close is not None:
                close()
