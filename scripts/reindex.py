#!/usr/bin/env python3
"""
Re-embed every stored prompt with the configured embedding provider.

Run after switching EMBEDDING_MODEL or EMBEDDING_PROVIDER. The query cache
should be cleared as well, since cached query vectors come from the old model.

Usage:
    EMBEDDING_MODEL=gemini-embedding-001 python scripts/reindex.py --concurrency 4 --interval 0.2
"""

import argparse
import asyncio
import json

from prompt_search.api.dependencies import build_embedding_provider
from prompt_search.config import configure_logging, settings
from prompt_search.repositories import RedisRecordStore
from prompt_search.services import EmbeddingCache, IntervalThrottle, ReindexService


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument(
        "--concurrency",
        type=int,
        default=settings.reindex_concurrency,
        help="Maximum prompts embedded at once",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=settings.reindex_interval,
        help="Minimum seconds between provider calls",
    )
    return parser.parse_args()


async def main() -> None:
    args = parse_args()
    configure_logging()

    provider = build_embedding_provider()
    store = RedisRecordStore.create()
    try:
        service = ReindexService(
            store=store,
            embedding_cache=EmbeddingCache(store=store, provider=provider, dimension=provider.dimension),
            concurrency=args.concurrency,
            throttle=IntervalThrottle(args.interval),
        )
        report = await service.run()
    finally:
        await store.close()
        close = getattr(provider, "close", None)
        if close is not None:
            await close()

    print(json.dumps(report.to_dict(), indent=2))
    print(f"✨ Re-indexing complete: {report.updated}/{report.total} updated")


if __name__ == "__main__":
    asyncio.run(main())
