"""Signature parsing for decorated functions."""

from __future__ import annotations

import inspect
import types
import typing
from typing import Any

from querytrace._errors import TargetSyntaxError
from querytrace._types import FunctionSignature, ReturnKind, ReturnShape

_RECEIVER_NAMES = ("self", "cls")


def parse_signature(obj: Any) -> FunctionSignature:
    """Parse *obj* into a :class:`FunctionSignature`.

    Only plain functions and ``async def`` functions are accepted. Anything
    else, including generator functions, raises :class:`TargetSyntaxError`.
    """
    if not inspect.isfunction(obj):
        raise TargetSyntaxError(
            f"instrument_query can only decorate a function, not "
            f"{_describe(obj)}{_location(obj)}",
            function=getattr(obj, "__qualname__", None),
        )
    if inspect.isgeneratorfunction(obj) or inspect.isasyncgenfunction(obj):
        raise TargetSyntaxError(
            f"instrument_query cannot decorate generator function "
            f"{obj.__qualname__}(){_location(obj)}",
            function=obj.__qualname__,
        )

    signature = inspect.signature(obj)
    parameters = tuple(signature.parameters.values())

    receiver = None
    if parameters and parameters[0].name in _RECEIVER_NAMES and parameters[0].kind in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        receiver = parameters[0].name

    return FunctionSignature(
        name=obj.__name__,
        qualname=obj.__qualname__,
        module=obj.__module__,
        parameters=parameters,
        returns=classify_return(obj, signature),
        is_async=inspect.iscoroutinefunction(obj),
        signature=signature,
        type_params=tuple(getattr(obj, "__type_params__", ())),
        receiver=receiver,
    )


def classify_return(func: Any, signature: inspect.Signature) -> ReturnShape:
    """Classify the return annotation as bare or fallible."""
    try:
        annotation = typing.get_type_hints(func).get(
            "return", signature.return_annotation
        )
    except (NameError, TypeError):
        # Unresolvable forward references: fall back to the raw annotation.
        annotation = signature.return_annotation

    if typing.get_origin(annotation) not in (typing.Union, types.UnionType):
        return ReturnShape(ReturnKind.BARE, annotation)

    success: list[Any] = []
    failure: list[type[BaseException]] = []
    for member in typing.get_args(annotation):
        if isinstance(member, type) and issubclass(member, BaseException):
            failure.append(member)
        else:
            success.append(member)

    if not failure:
        return ReturnShape(ReturnKind.BARE, annotation)
    return ReturnShape(
        ReturnKind.FALLIBLE, annotation, tuple(success), tuple(failure)
    )


def _describe(obj: Any) -> str:
    if inspect.isclass(obj):
        return f"class {obj.__qualname__}"
    if inspect.ismodule(obj):
        return f"module {obj.__name__}"
    if inspect.isbuiltin(obj):
        return f"builtin {obj.__qualname__}"
    if inspect.ismethod(obj):
        return f"bound method {obj.__qualname__}"
    if callable(obj):
        return f"callable {type(obj).__qualname__} instance"
    return f"{type(obj).__qualname__} object"


def _location(obj: Any) -> str:
    try:
        filename = inspect.getsourcefile(obj)
        _, lineno = inspect.getsourcelines(obj)
    except (OSError, TypeError):
        return ""
    if filename is None:
        return ""
    return f" ({filename}:{lineno})"
