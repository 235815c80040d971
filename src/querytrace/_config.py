"""Runtime configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from opentelemetry.trace import TracerProvider


@dataclass(frozen=True)
class QueryTraceConfig:
    """Immutable runtime configuration."""

    tracer_provider: TracerProvider | None = None
    max_value_length: int = 1024
    record_exception_events: bool = True
