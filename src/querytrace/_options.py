"""Resolution and validation of ``instrument_query`` options."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from querytrace._errors import OptionValueError, UnknownOptionError, UnknownParameterError
from querytrace._types import AttributeConfig, AttributeValue, FunctionSignature

OPTIONS = frozenset({"skip", "name", "db", "fields"})

_DEFAULT_DB_PARAMETER = "db"


def resolve_options(
    options: Mapping[str, Any], signature: FunctionSignature
) -> AttributeConfig:
    """Turn decorator keyword arguments into an :class:`AttributeConfig`.

    Every name in ``skip`` and an explicit ``db`` must be a parameter of
    *signature*; typos are errors rather than silently captured arguments.
    """
    function = signature.qualname
    for key in options:
        if key not in OPTIONS:
            raise UnknownOptionError(key, function=function)

    skip = _resolve_skip(options.get("skip", ()), function)
    for name in sorted(skip):
        if name not in signature.parameter_names:
            raise UnknownParameterError(name, function=function)

    name = options.get("name")
    if name is not None and (not isinstance(name, str) or not name):
        raise OptionValueError("name", "expected a non-empty string", function=function)

    db = options.get("db")
    if db is None:
        if _DEFAULT_DB_PARAMETER in signature.parameter_names:
            db = _DEFAULT_DB_PARAMETER
    elif not isinstance(db, str):
        raise OptionValueError("db", "expected a parameter name", function=function)
    elif db not in signature.parameter_names:
        raise UnknownParameterError(db, function=function, option="db")

    return AttributeConfig(
        skip=skip,
        name=name,
        db=db,
        fields=_resolve_fields(options.get("fields", {}), function),
    )


def _resolve_skip(value: Any, function: str) -> frozenset[str]:
    if isinstance(value, str):
        return frozenset((value,))
    if not isinstance(value, Iterable):
        raise OptionValueError(
            "skip", "expected a parameter name or a collection of names", function=function
        )
    names = tuple(value)
    for name in names:
        if not isinstance(name, str):
            raise OptionValueError(
                "skip", f"expected parameter names, got {name!r}", function=function
            )
    return frozenset(names)


def _resolve_fields(
    value: Any, function: str
) -> tuple[tuple[str, AttributeValue], ...]:
    if not isinstance(value, Mapping):
        raise OptionValueError("fields", "expected a mapping", function=function)
    resolved: list[tuple[str, AttributeValue]] = []
    for key, field_value in value.items():
        if not isinstance(key, str) or not key:
            raise OptionValueError(
                "fields", f"invalid attribute key {key!r}", function=function
            )
        if not isinstance(field_value, (str, bool, int, float)):
            raise OptionValueError(
                "fields",
                f"value for {key!r} must be str, bool, int or float",
                function=function,
            )
        resolved.append((key, field_value))
    return tuple(resolved)
