"""Connection metadata: reads host, port and database from a connection argument.

Usage::

    @instrument_query(skip=("db",))
    async def fetch_user(db: AsyncSession, user_id: int) -> User: ...

The ``db`` argument's URL fills ``db.system``, ``db.name``, ``out.host`` and
friends on every call.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import SQLAlchemyError

from querytrace._conventions import (
    DB_INSTANCE,
    DB_NAME,
    DB_SYSTEM,
    DB_SYSTEM_ALIASES,
    OUT_HOST,
    OUT_PORT,
    PEER_HOSTNAME,
    PEER_SERVICE,
)
from querytrace._types import AttributeValue

logger = logging.getLogger("querytrace.connection")


def resolve_url(connection: Any) -> URL | None:
    """Find the SQLAlchemy URL behind *connection*, or None.

    Accepts a URL string, a ``URL``, an engine (``.url``), a connection
    (``.engine.url``) or a session (``.get_bind().url``).
    """
    if connection is None:
        return None
    if isinstance(connection, URL):
        return connection
    if isinstance(connection, str):
        try:
            return make_url(connection)
        except (SQLAlchemyError, ValueError):
            logger.debug("Unparseable connection URL for %s", type(connection).__name__)
            return None

    url = getattr(connection, "url", None)
    if isinstance(url, URL):
        return url
    engine = getattr(connection, "engine", None)
    url = getattr(engine, "url", None)
    if isinstance(url, URL):
        return url
    get_bind = getattr(connection, "get_bind", None)
    if callable(get_bind):
        try:
            url = getattr(get_bind(), "url", None)
        except SQLAlchemyError as e:
            logger.debug("Could not resolve session bind: %s", e)
            return None
        if isinstance(url, URL):
            return url
    return None


def connection_attributes(connection: Any) -> dict[str, AttributeValue]:
    """Span attributes describing the database behind *connection*."""
    url = resolve_url(connection)
    if url is None:
        return {}

    backend = url.get_backend_name()
    attrs: dict[str, AttributeValue] = {
        DB_SYSTEM: DB_SYSTEM_ALIASES.get(backend, backend),
    }
    if url.database:
        attrs[DB_NAME] = url.database
        attrs[DB_INSTANCE] = url.database
        attrs[PEER_SERVICE] = url.database
    if url.host:
        attrs[OUT_HOST] = url.host
        attrs[PEER_HOSTNAME] = url.host
    if url.port is not None:
        attrs[OUT_PORT] = url.port
    return attrs
