"""SDK singleton: holds the runtime config and the tracer wrappers use."""

from __future__ import annotations

from typing import TYPE_CHECKING

from opentelemetry import trace

from querytrace._config import QueryTraceConfig

if TYPE_CHECKING:
    from opentelemetry.trace import TracerProvider

_INSTRUMENTATION_NAME = "querytrace"

_sdk_instance: _QueryTraceSDK | None = None


class _QueryTraceSDK:
    """Internal SDK object. Not part of the public API."""

    def __init__(self, config: QueryTraceConfig) -> None:
        from querytrace import __version__

        self.config = config
        self.tracer = trace.get_tracer(
            _INSTRUMENTATION_NAME,
            __version__,
            tracer_provider=config.tracer_provider,
        )


_default: _QueryTraceSDK | None = None


def _get_sdk() -> _QueryTraceSDK:
    """Return the active SDK, or one bound to the global tracer provider."""
    global _default  # noqa: PLW0603
    if _sdk_instance is not None:
        return _sdk_instance
    if _default is None:
        _default = _QueryTraceSDK(QueryTraceConfig())
    return _default


def init(
    *,
    tracer_provider: TracerProvider | None = None,
    max_value_length: int = 1024,
    record_exception_events: bool = True,
) -> None:
    """Configure querytrace.

    Optional: without it, spans go to OpenTelemetry's global tracer provider.
    May be called before or after functions are decorated.
    """
    global _sdk_instance  # noqa: PLW0603
    config = QueryTraceConfig(
        tracer_provider=tracer_provider,
        max_value_length=max_value_length,
        record_exception_events=record_exception_events,
    )
    _sdk_instance = _QueryTraceSDK(config)


def reset() -> None:
    """Drop any configuration installed by :func:`init`."""
    global _sdk_instance  # noqa: PLW0603
    _sdk_instance = None
