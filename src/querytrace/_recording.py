"""Recording of failures and statements onto spans."""

from __future__ import annotations

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

from querytrace._conventions import DB_STATEMENT, ERROR_MESSAGE, ERROR_TYPE


def _type_name(error: BaseException) -> str:
    cls = type(error)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def record_failure(span: Span, error: BaseException, *, record_event: bool = True) -> None:
    """Mark *span* as failed with *error*'s message and type.

    *error* is never modified, whether it was raised or returned.
    """
    message = str(error) or type(error).__name__
    if record_event:
        span.record_exception(error)
    span.set_status(Status(StatusCode.ERROR, message))
    span.set_attribute(ERROR_MESSAGE, message)
    span.set_attribute(ERROR_TYPE, _type_name(error))


def record_statement(statement: str) -> None:
    """Set ``db.statement`` on the current span.

    Call from inside an instrumented function once the SQL text is known::

        @instrument_query(skip=("db",))
        async def fetch_user(db, user_id):
            query = select(User).where(User.id == user_id)
            record_statement(str(query))
            ...
    """
    trace.get_current_span().set_attribute(DB_STATEMENT, statement.strip())
