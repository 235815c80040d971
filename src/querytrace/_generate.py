"""Wrapper generation: turns a signature and field plan into a traced function."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Span, SpanKind

from querytrace._connection import connection_attributes
from querytrace._fields import render_value
from querytrace._instrumented import Instrumented
from querytrace._recording import record_failure
from querytrace._sdk import _get_sdk
from querytrace._types import AttributeValue, FunctionSignature, SpanFieldPlan

logger = logging.getLogger("querytrace.generate")


class _SpanFactory:
    """Opens one span per call from a fixed plan."""

    def __init__(self, signature: FunctionSignature, plan: SpanFieldPlan) -> None:
        self.signature = signature
        self.plan = plan
        self._constants = plan.constant_attributes()
        self._parameters = tuple(f.parameter for f in plan.parameter_fields)

    def attributes(
        self, args: tuple[Any, ...], kwargs: dict[str, Any], max_length: int
    ) -> dict[str, AttributeValue]:
        attrs = dict(self._constants)
        if not self._parameters and self.plan.connection_parameter is None:
            return attrs
        try:
            bound = self.signature.signature.bind(*args, **kwargs)
        except TypeError:
            # The wrapped call raises its own TypeError.
            return attrs
        bound.apply_defaults()
        arguments = bound.arguments
        for name in self._parameters:
            if name in arguments:
                attrs[name] = render_value(arguments[name], max_length)
        if self.plan.connection_parameter is not None:
            connection = arguments.get(self.plan.connection_parameter)
            attrs.update(connection_attributes(connection))
        return attrs

    def open(
        self, args: tuple[Any, ...], kwargs: dict[str, Any]
    ) -> tuple[Span | None, bool]:
        """Start the call's span; ``(None, ...)`` if the tracing runtime failed."""
        sdk = _get_sdk()
        config = sdk.config
        try:
            span = sdk.tracer.start_span(
                self.plan.span_name,
                kind=SpanKind.CLIENT,
                attributes=self.attributes(args, kwargs, config.max_value_length),
                record_exception=False,
                set_status_on_exception=False,
            )
        except Exception:
            logger.warning(
                "Failed to open span %r, running %s untraced",
                self.plan.span_name,
                self.signature.qualname,
                exc_info=True,
            )
            return None, config.record_exception_events
        return span, config.record_exception_events

    def record_result(self, span: Span, result: Any) -> None:
        if self.signature.returns.is_failure(result):
            record_failure(span, result, record_event=False)


def generate(
    func: Callable[..., Any], signature: FunctionSignature, plan: SpanFieldPlan
) -> Callable[..., Any]:
    """Build the traced replacement for *func*.

    The replacement keeps *func*'s name, docstring, signature, type parameters
    and async-ness; only the body changes.
    """
    factory = _SpanFactory(signature, plan)

    if signature.is_async:

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            span, record_event = factory.open(args, kwargs)
            if span is None:
                return await func(*args, **kwargs)
            try:
                coro = func(*args, **kwargs)
            except Exception as e:
                record_failure(span, e, record_event=record_event)
                span.end()
                raise
            except BaseException:
                span.end()
                raise
            return await Instrumented(
                coro,
                span,
                on_result=factory.record_result,
                record_exception_events=record_event,
            )

        return async_wrapper

    @functools.wraps(func)
    def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
        span, record_event = factory.open(args, kwargs)
        if span is None:
            return func(*args, **kwargs)
        with trace.use_span(
            span,
            end_on_exit=True,
            record_exception=False,
            set_status_on_exception=False,
        ):
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                record_failure(span, e, record_event=record_event)
                raise
            factory.record_result(span, result)
            return result

    return sync_wrapper
