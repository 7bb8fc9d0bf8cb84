"""
Ranker benchmarking utilities.

Compares the store-side (remote) ranking function against the in-process
(local) ranker on the same queries: latency of each path, rows pulled over
the wire by the local path, embedding cache behaviour, and whether both
rankings agree. When a record store is given, its lexical keyword search
runs alongside as a baseline.
"""

import logging
import time
from dataclasses import dataclass, field

from prompt_search.entities import ScoreWeights, SearchResultEntity
from prompt_search.protocols import RecordStore
from prompt_search.services import CachePolicy, EmbeddingCache, LocalRanker, RemoteRanker

logger = logging.getLogger(__name__)

DEFAULT_QUERIES = [
    "How to optimize Python code?",
    "Help me write a professional email",
    "Creative story about a lost king",
    "Excel formulas for complex math",
    "Debugging javascript memory leaks",
    "Career advice for junior developers",
    "Latex code for tables",
    "Marketing strategy for software",
    "Interpret a dream about flying",
    "Side scrolling game logic",
]

# Single-word queries for comparing semantic and keyword search
KEYWORD_QUERIES = [
    "Python",
    "Email",
    "Dream",
    "LaTeX",
    "Fantasy",
    "Game",
    "Bugs",
    "Parallel",
    "Excel",
    "Career",
]


def rankings_agree(
    remote: list[SearchResultEntity],
    local: list[SearchResultEntity],
    tolerance: float = 1e-6,
) -> bool:
    """True if both rankings list the same ids in the same order with close scores."""
    if [r.id for r in remote] != [r.id for r in local]:
        return False
    return all(abs(a.score - b.score) <= tolerance for a, b in zip(remote, local))


@dataclass
class QueryBenchmark:
    """Measurements for a single query."""

    query: str
    cache_hit: bool
    fetch_time_ms: float
    remote_latency_ms: float
    local_latency_ms: float
    rows_fetched: int
    results_returned: int
    agree: bool
    semantic_top_id: int | None = None
    keyword_latency_ms: float = 0.0
    keyword_results: int = 0
    keyword_top_id: int | None = None

    @property
    def speedup(self) -> float:
        """How many times faster the remote path was."""
        if self.remote_latency_ms == 0:
            return 0.0
        return self.local_latency_ms / self.remote_latency_ms

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "query": self.query,
            "cache": {
                "is_hit": self.cache_hit,
                "fetch_time_ms": round(self.fetch_time_ms, 2),
            },
            "performance": {
                "db_side_latency_ms": round(self.remote_latency_ms, 2),
                "server_side_latency_ms": round(self.local_latency_ms, 2),
                "keyword_db_latency_ms": round(self.keyword_latency_ms, 2),
                "speed_improvement_factor": f"{self.speedup:.2f}x",
            },
            "data_transfer": {
                "rows_fetched_from_db": self.rows_fetched,
                "results_returned_to_user": self.results_returned,
            },
            "found": {
                "semantic": self.results_returned,
                "keyword": self.keyword_results,
            },
            "results": {
                "semantic_top_id": self.semantic_top_id,
                "keyword_top_id": self.keyword_top_id,
            },
            "rankings_agree": self.agree,
        }


@dataclass
class BenchmarkReport:
    """Aggregate of a benchmark run."""

    results: list[QueryBenchmark] = field(default_factory=list)

    @property
    def cache_hits(self) -> int:
        return sum(1 for r in self.results if r.cache_hit)

    @property
    def avg_remote_latency_ms(self) -> float:
        if not self.results:
            return 0.0
        return sum(r.remote_latency_ms for r in self.results) / len(self.results)

    @property
    def avg_local_latency_ms(self) -> float:
        if not self.results:
            return 0.0
        return sum(r.local_latency_ms for r in self.results) / len(self.results)

    @property
    def avg_keyword_latency_ms(self) -> float:
        if not self.results:
            return 0.0
        return sum(r.keyword_latency_ms for r in self.results) / len(self.results)

    @property
    def all_agree(self) -> bool:
        return all(r.agree for r in self.results)

    def to_dict(self) -> list[dict]:
        return [r.to_dict() for r in self.results]

    def summary(self) -> str:
        """Get a formatted summary of the run."""
        return f"""
Ranker Benchmark Summary:
=========================
Queries:              {len(self.results)}
Cache Hits:           {self.cache_hits}
Avg Remote Latency:   {self.avg_remote_latency_ms:.2f}ms
Avg Local Latency:    {self.avg_local_latency_ms:.2f}ms
Avg Keyword Latency:  {self.avg_keyword_latency_ms:.2f}ms
Rankings Agree:       {self.all_agree}
"""


class RankerBenchmark:
    """Benchmark the remote ranker against the local one."""

    def __init__(
        self,
        embedding_cache: EmbeddingCache,
        remote: RemoteRanker,
        local: LocalRanker,
        tolerance: float = 1e-6,
        store: RecordStore | None = None,
    ) -> None:
        """
        Initialize the benchmark.

        Args:
            embedding_cache: Cache used to resolve query vectors.
            remote: Store-side ranker.
            local: In-process ranker.
            tolerance: Maximum score difference for the rankings to agree.
            store: Record store for the keyword baseline. If None, it is skipped.
        """
        self.embedding_cache = embedding_cache
        self.remote = remote
        self.local = local
        self.tolerance = tolerance
        self.store = store

    async def warm_up(self, weights: ScoreWeights | None = None) -> None:
        """Prime the store and provider connections with a throwaway search."""
        vector, _ = await self.embedding_cache.resolve("warmup", CachePolicy.QUERY)
        await self.remote.rank(vector, weights or ScoreWeights(), 1)

    async def run_query(self, query: str, weights: ScoreWeights, k: int) -> QueryBenchmark:
        """
        Benchmark a single query.

        Args:
            query: The query text.
            weights: Score weights for both rankers.
            k: Number of results.

        Returns:
            QueryBenchmark with timings and agreement.
        """
        start = time.perf_counter()
        vector, was_hit = await self.embedding_cache.resolve(query, CachePolicy.QUERY)
        fetch_time_ms = (time.perf_counter() - start) * 1000

        start = time.perf_counter()
        remote_results = await self.remote.rank(vector, weights, k)
        remote_ms = (time.perf_counter() - start) * 1000

        start = time.perf_counter()
        local_results = await self.local.rank(vector, weights, k)
        local_ms = (time.perf_counter() - start) * 1000

        keyword_results: list[SearchResultEntity] = []
        keyword_ms = 0.0
        if self.store is not None:
            start = time.perf_counter()
            keyword_results = await self.store.keyword_search(query, k)
            keyword_ms = (time.perf_counter() - start) * 1000

        agree = rankings_agree(remote_results, local_results, self.tolerance)
        if not agree:
            logger.warning("Rankers disagree for query %r", query)

        return QueryBenchmark(
            query=query,
            cache_hit=was_hit,
            fetch_time_ms=fetch_time_ms,
            remote_latency_ms=remote_ms,
            local_latency_ms=local_ms,
            rows_fetched=self.local.last_candidate_count,
            results_returned=len(remote_results),
            agree=agree,
            semantic_top_id=remote_results[0].id if remote_results else None,
            keyword_latency_ms=keyword_ms,
            keyword_results=len(keyword_results),
            keyword_top_id=keyword_results[0].id if keyword_results else None,
        )

    async def run(
        self,
        queries: list[str] | None = None,
        weights: ScoreWeights | None = None,
        k: int = 5,
        warm_up: bool = True,
    ) -> BenchmarkReport:
        """
        Benchmark every query sequentially.

        Args:
            queries: Query texts. Defaults to DEFAULT_QUERIES.
            weights: Score weights. Defaults to alpha=0.7.
            k: Number of results per query.
            warm_up: Run a throwaway search first.

        Returns:
            BenchmarkReport with one entry per query.
        """
        weights = weights or ScoreWeights(0.7)
        if warm_up:
            await self.warm_up(weights)

        report = BenchmarkReport()
        for query in queries or DEFAULT_QUERIES:
            result = await self.run_query(query, weights, k)
            logger.info(
                "Benchmarked %r: remote %.2fms, local %.2fms",
                query,
                result.remote_latency_ms,
                result.local_latency_ms,
            )
            report.results.append(result)
        return report
