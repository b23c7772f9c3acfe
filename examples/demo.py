import asyncio
import random
from time import perf_counter

from lazy_paginate import paginate, setup_logging

DATA = [{"id": i, "name": f"user-{i}", "active": i % 3 != 0} for i in range(1, 1001)]


async def fetch_users(request):
    # Simulate a slow API so laziness is visible
    print(f"  fetching offset={request.offset} limit={request.limit} ...")
    await asyncio.sleep(0.2)
    page = DATA[request.offset:request.offset + request.limit]
    return {"items": page, "pageInfo": {"hasNextPage": request.offset + request.limit < len(DATA)}}


async def flaky_fetch(request):
    if random.random() < 0.3:
        raise ConnectionError(f"page {request.page} timed out")
    start = (request.page - 1) * request.limit
    page = DATA[start:start + request.limit]
    return {"items": page, "pageInfo": {"hasNextPage": start + request.limit < len(DATA)}}


async def main():
    print("\n--- Demo: laziness (no fetch until iterated) ---")
    pipeline = (
        paginate(fetch_users, strategy="offset", limit=50, error_policy={"type": "throw"})
        .filter(lambda user: user["active"])
        .map(lambda user: user["name"].upper())
        .skip(3)
        .take(5)
    )
    print("Constructed pipeline. No output yet (nothing fetched).")

    print("\nCollecting (should fetch only the first page):")
    t0 = perf_counter()
    out = await pipeline.to_list()
    t1 = perf_counter()
    print(f"Result: {out}")
    print(f"Time: {t1 - t0:.2f}s\n")

    print("--- Demo: batching ---")
    async for batch in paginate(fetch_users, strategy="offset", limit=40, error_policy={"type": "throw"}).batch(25).take(2):
        print("  batch ids:", [user["id"] for user in batch][:5], "...")
    print()

    print("--- Demo: continue policy over a flaky source ---")
    errors = []
    total = await paginate(
        flaky_fetch,
        strategy="page",
        limit=100,
        error_policy={"type": "continue", "max_error_count": 3},
        hooks={
            "on_error": lambda error: errors.append(error),
            "on_max_consecutive_errors": lambda error, context: print(f"  gave up after {context['errors']} errors"),
        },
    ).count()
    print(f"Collected {total} users, skipped {len(errors)} failed pages")


if __name__ == "__main__":
    setup_logging("INFO")
    asyncio.run(main())
