"""@instrument_query decorator for wrapping database-query functions in spans."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar, overload

from querytrace._fields import build_field_plan
from querytrace._generate import generate
from querytrace._options import resolve_options
from querytrace._signature import parse_signature

logger = logging.getLogger("querytrace.trace")

F = TypeVar("F", bound=Callable[..., Any])


@overload
def instrument_query(func: F, /) -> F: ...


@overload
def instrument_query(**options: Any) -> Callable[[F], F]: ...


def instrument_query(func: F | None = None, /, **options: Any) -> F | Callable[[F], F]:
    """Decorator that wraps a database-query function in a client span.

    Can be used with or without options::

        @instrument_query
        def count_users(db): ...

        @instrument_query(skip=("db", "password"), name="users.authenticate")
        async def authenticate(db, email, password): ...

    Options are validated when the decorator is applied; see
    :func:`querytrace._options.resolve_options`.
    """

    def decorator(fn: F) -> F:
        target, rewrap = _unwrap(fn)
        signature = parse_signature(target)
        config = resolve_options(options, signature)
        plan = build_field_plan(signature, config)
        logger.debug(
            "Instrumented %s.%s as %r capturing %s",
            signature.module,
            signature.qualname,
            plan.span_name,
            [f.key for f in plan.parameter_fields],
        )
        return rewrap(generate(target, signature, plan))  # type: ignore[return-value]

    if func is not None:
        return decorator(func)
    return decorator


def _unwrap(obj: Any) -> tuple[Any, Callable[[Any], Any]]:
    """Peel a staticmethod/classmethod so the underlying function is wrapped."""
    if isinstance(obj, staticmethod):
        return obj.__func__, staticmethod
    if isinstance(obj, classmethod):
        return obj.__func__, classmethod
    return obj, lambda wrapped: wrapped
