"""Datadog-compatible attribute vocabulary for database-query spans.

Datadog's OpenTelemetry mapping classifies a span by these keys. The fixed
fields are a table so new keys can be added without touching the builder.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import cast

from querytrace._types import AttributeValue

COMPONENT = "querytrace"

SPAN_KIND = "span.kind"
SPAN_TYPE = "span.type"
COMPONENT_KEY = "component"
OPERATION_NAME = "operation.name"
RESOURCE_NAME = "resource.name"

DB_SYSTEM = "db.system"
DB_NAME = "db.name"
DB_INSTANCE = "db.instance"
DB_STATEMENT = "db.statement"
OUT_HOST = "out.host"
OUT_PORT = "out.port"
PEER_HOSTNAME = "peer.hostname"
PEER_SERVICE = "peer.service"

ERROR_MESSAGE = "error.message"
ERROR_TYPE = "error.type"


@dataclass(frozen=True)
class ConventionField:
    """A fixed field: either a literal value or derived from the span name."""

    key: str
    value: AttributeValue | None = None
    derive: Callable[[str], AttributeValue] | None = None

    def __post_init__(self) -> None:
        if (self.value is None) == (self.derive is None):
            raise ValueError(f"{self.key}: give exactly one of value or derive")

    def resolve(self, span_name: str) -> AttributeValue:
        if self.derive is not None:
            return self.derive(span_name)
        return cast(AttributeValue, self.value)


FIXED_FIELDS: tuple[ConventionField, ...] = (
    ConventionField(SPAN_KIND, "client"),
    ConventionField(SPAN_TYPE, "sql"),
    ConventionField(COMPONENT_KEY, COMPONENT),
    ConventionField(OPERATION_NAME, f"{COMPONENT}.query"),
    ConventionField(RESOURCE_NAME, derive=lambda span_name: span_name),
)

FIXED_KEYS: frozenset[str] = frozenset(f.key for f in FIXED_FIELDS)

# Filled from the connection parameter at call time.
CONNECTION_KEYS: tuple[str, ...] = (
    DB_SYSTEM,
    DB_NAME,
    DB_INSTANCE,
    PEER_SERVICE,
    OUT_HOST,
    PEER_HOSTNAME,
    OUT_PORT,
)

# Backend names that differ from what Datadog expects in db.system.
DB_SYSTEM_ALIASES: dict[str, str] = {
    "postgres": "postgresql",
}
