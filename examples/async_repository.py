"""Async repository example: fallible results and sensitive arguments.

Requires ``aiosqlite``::

    pip install aiosqlite
    python examples/async_repository.py
"""

import asyncio
from dataclasses import dataclass

from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

import querytrace
from querytrace import instrument_query, record_statement


@dataclass
class User:
    id: int
    email: str


class UserNotFound(Exception):
    pass


class UserRepository:
    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine

    @instrument_query(db="engine", skip=("engine", "password"), name="users.create")
    async def create(self, engine: AsyncEngine, email: str, password: str) -> None:
        query = "INSERT INTO users (email) VALUES (:email)"
        record_statement(query)
        async with engine.begin() as conn:
            await conn.execute(text(query), {"email": email})

    @instrument_query(skip=("db",), name="users.fetch")
    async def fetch(self, db: AsyncEngine, user_id: int) -> User | UserNotFound:
        query = "SELECT id, email FROM users WHERE id = :id"
        record_statement(query)
        async with db.connect() as conn:
            row = (await conn.execute(text(query), {"id": user_id})).first()
        if row is None:
            # Returned, not raised: the span is still marked as an error.
            return UserNotFound(f"user {user_id} not found")
        return User(id=row.id, email=row.email)


async def main() -> None:
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    querytrace.init(tracer_provider=provider)

    engine = create_async_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.execute(text("CREATE TABLE users (id INTEGER PRIMARY KEY, email TEXT)"))
        await conn.execute(text("INSERT INTO users VALUES (1, 'ada@example.com')"))

    repo = UserRepository(engine)
    await repo.create(engine, "grace@example.com", password="not-recorded")
    print(await repo.fetch(engine, 1))
    print(await repo.fetch(engine, 2))
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
