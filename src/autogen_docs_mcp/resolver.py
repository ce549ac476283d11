"""Resolution of a free-text query into AutoGen documentation hits.

Strategies run strictly in order and the first non-empty one wins:
1. searchindex.js lookup
2. Native search.html page
3. Fallback crawl over curated pages

A strategy failure of any kind is treated as "no results" and the cascade
moves on; ``resolve`` itself never raises.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from urllib.parse import quote

import httpx
from loguru import logger

from autogen_docs_mcp.config import settings
from autogen_docs_mcp.models import SearchResult
from autogen_docs_mcp.sources.crawler import classify_query, crawl_fallback
from autogen_docs_mcp.sources.extractor import extract_search_results
from autogen_docs_mcp.sources.fetcher import create_client, fetch
from autogen_docs_mcp.sources.search_index import search_structured_index


@dataclass(frozen=True)
class StrategyOutcome:
    """Results of one strategy.

    ``base`` is the URL subtree its results must stay inside; None means
    the requested version's tree.
    """

    name: str
    results: list[SearchResult] = field(default_factory=list)
    ok: bool = True
    base: str | None = None


Strategy = Callable[[httpx.AsyncClient, str, int, str], Awaitable[StrategyOutcome]]


async def _index_strategy(
    client: httpx.AsyncClient, query: str, limit: int, version: str
) -> StrategyOutcome:
    results, ok = await search_structured_index(client, query, limit, version)
    return StrategyOutcome("search_index", results, ok)


async def _search_page_strategy(
    client: httpx.AsyncClient, query: str, limit: int, version: str
) -> StrategyOutcome:
    base_url = settings.get_version_url(version)
    encoded = quote(query, safe="")
    fetched = await fetch(client, f"{base_url}/search.html?q={encoded}")
    if not fetched.ok:
        return StrategyOutcome("search_page", ok=False)
    return StrategyOutcome(
        "search_page", extract_search_results(fetched.text, base_url, limit)
    )


async def _crawl_strategy(
    client: httpx.AsyncClient, query: str, limit: int, version: str
) -> StrategyOutcome:
    results = await crawl_fallback(client, query, limit, version)
    return StrategyOutcome(
        "crawl", results, base=classify_query(query, version).link_base
    )


STRATEGIES: tuple[Strategy, ...] = (
    _index_strategy,
    _search_page_strategy,
    _crawl_strategy,
)


def finalize(
    results: list[SearchResult],
    limit: int,
    base: str | None = None,
) -> list[SearchResult]:
    """Drop entries outside ``base``, dedup by URL (first wins), cap at ``limit``.

    ``base`` defaults to the whole docs site.
    """
    seen: set[str] = set()
    final: list[SearchResult] = []
    for result in results:
        if len(final) >= limit:
            break
        if result.url in seen or not settings.is_docs_url(result.url, base):
            continue
        seen.add(result.url)
        final.append(result)
    return final


async def _run_strategy(
    strategy: Strategy,
    client: httpx.AsyncClient,
    query: str,
    limit: int,
    version: str,
) -> StrategyOutcome:
    try:
        return await strategy(client, query, limit, version)
    except Exception as e:
        logger.warning(f"Strategy {strategy.__name__} failed, falling through: {e}")
        return StrategyOutcome(strategy.__name__, ok=False)


async def resolve(
    query: str,
    limit: int = 10,
    version: str = "stable",
) -> list[SearchResult]:
    """Search AutoGen documentation.

    Args:
        query: Free-text query
        limit: Maximum number of results
        version: Documentation tree, e.g. "stable", "dev", "0.4.0"

    Returns:
        Up to ``limit`` results with unique URLs; empty when nothing matched
    """
    if limit <= 0 or not query.strip():
        return []

    logger.info(f"Searching AutoGen {version} docs: {query}")

    async with create_client() as client:
        for strategy in STRATEGIES:
            outcome = await _run_strategy(strategy, client, query, limit, version)
            base = outcome.base or settings.get_version_url(version)
            final = finalize(outcome.results, limit, base)
            if final:
                logger.info(
                    f"Found {len(final)} results via {outcome.name} for: {query}"
                )
                return final
            logger.debug(
                f"No results via {outcome.name} (ok={outcome.ok}), trying next"
            )

    logger.info(f"No results for: {query}")
    return []
