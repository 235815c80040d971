"""Core types: parsed signatures, resolved options and span field plans."""

from __future__ import annotations

import enum
import inspect
from dataclasses import dataclass, field
from typing import Any, Union

AttributeValue = Union[str, bool, int, float]


class ReturnKind(enum.Enum):
    """Shape of a function's declared return type."""

    BARE = "bare"
    FALLIBLE = "fallible"


@dataclass(frozen=True)
class ReturnShape:
    """Classified return annotation.

    A ``FALLIBLE`` shape comes from a union such as ``Row | DbError`` where
    some members are exception classes; those members form the failure
    variant and a returned instance of one of them is recorded as an error.
    """

    kind: ReturnKind
    annotation: Any = inspect.Signature.empty
    success: tuple[Any, ...] = ()
    failure: tuple[type[BaseException], ...] = ()

    @property
    def is_fallible(self) -> bool:
        return self.kind is ReturnKind.FALLIBLE

    def is_failure(self, value: object) -> bool:
        """True if *value* is an instance of the failure variant."""
        return self.is_fallible and isinstance(value, self.failure)


@dataclass(frozen=True)
class FunctionSignature:
    """Immutable description of a decorated function."""

    name: str
    qualname: str
    module: str
    parameters: tuple[inspect.Parameter, ...]
    returns: ReturnShape
    is_async: bool
    signature: inspect.Signature
    type_params: tuple[Any, ...] = ()
    receiver: str | None = None
    parameter_names: frozenset[str] = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "parameter_names", frozenset(p.name for p in self.parameters)
        )


@dataclass(frozen=True)
class AttributeConfig:
    """Decorator options resolved against a signature."""

    skip: frozenset[str] = frozenset()
    name: str | None = None
    db: str | None = None
    fields: tuple[tuple[str, AttributeValue], ...] = ()


class FieldSource(enum.Enum):
    """Where a span field's value comes from."""

    CONSTANT = "constant"
    PARAMETER = "parameter"


@dataclass(frozen=True)
class SpanField:
    """A single span attribute: a constant or a call-time parameter read."""

    key: str
    source: FieldSource
    value: AttributeValue | None = None
    parameter: str | None = None


@dataclass(frozen=True)
class SpanFieldPlan:
    """Ordered span fields plus the resolved span name."""

    span_name: str
    fields: tuple[SpanField, ...]
    connection_parameter: str | None = None

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(f.key for f in self.fields)

    @property
    def parameter_fields(self) -> tuple[SpanField, ...]:
        return tuple(f for f in self.fields if f.source is FieldSource.PARAMETER)

    def constant_attributes(self) -> dict[str, AttributeValue]:
        """Constant fields as an attribute dict, in plan order."""
        return {
            f.key: f.value
            for f in self.fields
            if f.source is FieldSource.CONSTANT and f.value is not None
        }
