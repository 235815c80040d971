"""querytrace Quick Start: trace a repository function and print its span."""

from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

import querytrace
from querytrace import instrument_query, record_statement

# 1. Point querytrace at a tracer provider (any OTel exporter works)
provider = TracerProvider()
provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
querytrace.init(tracer_provider=provider)


# 2. Decorate the query function; the engine is skipped but still used for db.* tags
@instrument_query(skip=("db",))
def count_rows(db: Engine, table: str) -> int:
    query = f"SELECT count(*) FROM {table}"
    record_statement(query)
    with db.connect() as conn:
        return conn.execute(text(query)).scalar_one()


engine = create_engine("sqlite://")
with engine.begin() as conn:
    conn.execute(text("CREATE TABLE users (id INTEGER PRIMARY KEY)"))
    conn.execute(text("INSERT INTO users (id) VALUES (1), (2)"))

# 3. Each call emits one client span with span.type=sql, db.system=sqlite, table=users
print(count_rows(engine, "users"))
