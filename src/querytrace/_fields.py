"""Span field planning and call-time value rendering."""

from __future__ import annotations

from querytrace._conventions import CONNECTION_KEYS, FIXED_FIELDS, FIXED_KEYS
from querytrace._errors import FieldConflictError, OptionValueError
from querytrace._types import (
    AttributeConfig,
    AttributeValue,
    FieldSource,
    FunctionSignature,
    SpanField,
    SpanFieldPlan,
)

UNREPRESENTABLE = "<unrepresentable>"


def build_field_plan(
    signature: FunctionSignature, config: AttributeConfig
) -> SpanFieldPlan:
    """Compute the ordered span fields for *signature* under *config*.

    Fixed convention fields come first, then the ``fields`` extras, then one
    field per captured parameter in declaration order. Extras may not replace
    a fixed field, nor a connection field when a connection parameter is set.
    """
    span_name = config.name or signature.qualname

    protected = FIXED_KEYS | (frozenset(CONNECTION_KEYS) if config.db else frozenset())
    for key, _ in config.fields:
        if key in protected:
            raise OptionValueError(
                "fields", f"{key!r} is a reserved span field", function=signature.qualname
            )

    fields = [
        SpanField(f.key, FieldSource.CONSTANT, value=f.resolve(span_name))
        for f in FIXED_FIELDS
    ]
    fields.extend(
        SpanField(key, FieldSource.CONSTANT, value=value) for key, value in config.fields
    )
    reserved = FIXED_KEYS | {key for key, _ in config.fields}

    for param in signature.parameters:
        name = param.name
        if name in config.skip or name == signature.receiver:
            continue
        if name in reserved:
            raise FieldConflictError(name, function=signature.qualname)
        fields.append(SpanField(name, FieldSource.PARAMETER, parameter=name))

    return SpanFieldPlan(
        span_name=span_name,
        fields=tuple(fields),
        connection_parameter=config.db,
    )


def render_value(value: object, max_length: int) -> AttributeValue:
    """Render a parameter value as a span attribute.

    Scalars pass through, everything else uses its ``repr``.
    """
    if isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        text = value
    else:
        try:
            text = repr(value)
        except Exception:  # noqa: BLE001
            return UNREPRESENTABLE
    if max_length > 0 and len(text) > max_length:
        return text[:max_length] + "..."
    return text
