#!/usr/bin/env python3
"""
Benchmark the store-side ranker against the in-process ranker.

For each test query the embedding is resolved through the cache, then the
same vector is ranked by the Redis hybrid search and by the local ranker
(which pulls every prompt over the wire). The keyword search runs alongside
as a lexical baseline. Results are written as JSON.

Usage:
    python scripts/benchmark.py --alpha 0.7 --k 5 --output computational_latency_results.json
    python scripts/benchmark.py --keywords --output keyword_benchmark_results.json
"""

import argparse
import asyncio
import json

from prompt_search.api.dependencies import build_embedding_provider
from prompt_search.benchmark import DEFAULT_QUERIES, KEYWORD_QUERIES, RankerBenchmark
from prompt_search.config import configure_logging
from prompt_search.entities import ScoreWeights
from prompt_search.repositories import RedisRecordStore
from prompt_search.services import EmbeddingCache, LocalRanker, RemoteRanker


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--alpha", type=float, default=0.7, help="Semantic weight (default: 0.7)")
    parser.add_argument("--k", type=int, default=5, help="Results per query (default: 5)")
    parser.add_argument(
        "--output",
        default="computational_latency_results.json",
        help="Where to write the per-query results",
    )
    parser.add_argument(
        "--keywords",
        action="store_true",
        help="Use the single-word keyword query set instead of the default queries",
    )
    parser.add_argument("queries", nargs="*", help="Queries to run (default: built-in set)")
    return parser.parse_args()


async def main() -> None:
    args = parse_args()
    configure_logging()

    provider = build_embedding_provider()
    store = RedisRecordStore.create()
    try:
        benchmark = RankerBenchmark(
            embedding_cache=EmbeddingCache(store=store, provider=provider, dimension=provider.dimension),
            remote=RemoteRanker(store),
            local=LocalRanker(store),
            store=store,
        )
        report = await benchmark.run(
            queries=args.queries or (KEYWORD_QUERIES if args.keywords else DEFAULT_QUERIES),
            weights=ScoreWeights(args.alpha),
            k=args.k,
        )
    finally:
        await store.close()
        close = getattr(provider, "close", None)
        if close is not None:
            await close()

    with open(args.output, "w") as f:
        json.dump(report.to_dict(), f, indent=2)

    print(report.summary())
    print(f"📊 Results saved to '{args.output}'")


if __name__ == "__main__":
    asyncio.run(main())
