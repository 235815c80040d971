"""querytrace: Datadog-ready OpenTelemetry spans for database-query functions."""

from __future__ import annotations

from querytrace._config import QueryTraceConfig
from querytrace._errors import (
    FieldConflictError,
    OptionValueError,
    TargetSyntaxError,
    TransformError,
    UnknownOptionError,
    UnknownParameterError,
)
from querytrace._instrumented import Instrumented
from querytrace._recording import record_statement
from querytrace._sdk import init, reset
from querytrace._trace import instrument_query
from querytrace._types import (
    AttributeConfig,
    FieldSource,
    FunctionSignature,
    ReturnKind,
    ReturnShape,
    SpanField,
    SpanFieldPlan,
)

__version__ = "0.1.0"

__all__ = [
    "AttributeConfig",
    "FieldConflictError",
    "FieldSource",
    "FunctionSignature",
    "Instrumented",
    "OptionValueError",
    "QueryTraceConfig",
    "ReturnKind",
    "ReturnShape",
    "SpanField",
    "SpanFieldPlan",
    "TargetSyntaxError",
    "TransformError",
    "UnknownOptionError",
    "UnknownParameterError",
    "__version__",
    "init",
    "instrument_query",
    "record_statement",
    "reset",
]
