#!/usr/bin/env python3
"""Per-call wrapper overhead benchmark.

Measures the hot-path cost added by ``@instrument_query`` on top of a bare call:
  1. argument binding + attribute rendering
  2. span start/end through a no-op tracer provider
  3. the async ``Instrumented`` step loop

Usage:
    python benchmarks/bench_overhead.py
"""

from __future__ import annotations

import asyncio
import time

from opentelemetry.sdk.trace import TracerProvider

import querytrace
from querytrace import instrument_query


def fetch(db: str, user_id: int, limit: int = 10) -> int:
    return user_id


traced_fetch = instrument_query(skip="db")(fetch)


async def afetch(db: str, user_id: int, limit: int = 10) -> int:
    return user_id


traced_afetch = instrument_query(skip="db")(afetch)


def bench_sync(func, iterations: int = 200_000) -> float:  # type: ignore[no-untyped-def]
    """Benchmark: average ns per synchronous call."""
    for _ in range(1000):
        func("sqlite://", 1)

    start = time.perf_counter_ns()
    for _ in range(iterations):
        func("sqlite://", 1)
    elapsed = time.perf_counter_ns() - start

    return elapsed / iterations


def bench_async(func, iterations: int = 50_000) -> float:  # type: ignore[no-untyped-def]
    """Benchmark: average ns per awaited call inside one event loop."""

    async def run() -> float:
        for _ in range(1000):
            await func("sqlite://", 1)
        start = time.perf_counter_ns()
        for _ in range(iterations):
            await func("sqlite://", 1)
        return (time.perf_counter_ns() - start) / iterations

    return asyncio.run(run())


def main() -> None:
    # A recording provider with no processors: spans are built but go nowhere.
    querytrace.init(tracer_provider=TracerProvider())

    bare = bench_sync(fetch)
    traced = bench_sync(traced_fetch)
    print(f"sync   bare:   {bare:8.0f} ns/call")
    print(f"sync   traced: {traced:8.0f} ns/call  (+{traced - bare:.0f} ns)")

    abare = bench_async(afetch)
    atraced = bench_async(traced_afetch)
    print(f"async  bare:   {abare:8.0f} ns/call")
    print(f"async  traced: {atraced:8.0f} ns/call  (+{atraced - abare:.0f} ns)")

    querytrace.reset()


if __name__ == "__main__":
    main()
