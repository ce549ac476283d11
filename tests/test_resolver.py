"""Tests for src/autogen_docs_mcp/resolver.py."""

import typing
from unittest.mock import AsyncMock, patch
from urllib.parse import quote

import httpx
import pytest

from autogen_docs_mcp.models import SearchResult
from autogen_docs_mcp.resolver import (
    STRATEGIES,
    StrategyOutcome,
    finalize,
    resolve,
)

ROOT = "https://microsoft.github.io/autogen"
STABLE = f"{ROOT}/stable"
INDEX_URL = f"{STABLE}/searchindex.js"
USER_GUIDE = f"{STABLE}/user-guide/index.html"

SEARCH_PAGE_HTML = """
<html><body><div>
  <h2>Searching</h2>
  <ul>
    <li><a href="user-guide/agentchat-user-guide/teams.html">Teams</a> (Guide page)</li>
    <li><a href="python/autogen_agentchat.teams.html">autogen_agentchat.teams</a></li>
  </ul>
</div></body></html>
"""


@pytest.fixture
def serve(make_client, monkeypatch):
    """Patch the resolver's client factory to serve canned pages."""

    def _serve(pages=None):
        client = make_client(pages)
        monkeypatch.setattr("autogen_docs_mcp.resolver.create_client", lambda: client)
        return client

    return _serve


def _requested(client) -> list[str]:
    return [c.args[0] for c in client.get.call_args_list]


def _search_page_url(query: str, version: str = "stable") -> str:
    return f"{ROOT}/{version}/search.html?q={quote(query, safe='')}"


# -----------------------------------------------------------------------
# Strategy order
# -----------------------------------------------------------------------


def test_strategy_order():
    assert [s.__name__ for s in STRATEGIES] == [
        "_index_strategy",
        "_search_page_strategy",
        "_crawl_strategy",
    ]


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_strategy_signature(strategy):
    hints = typing.get_type_hints(strategy)
    assert hints == {
        "client": httpx.AsyncClient,
        "query": str,
        "limit": int,
        "version": str,
        "return": StrategyOutcome,
    }


@pytest.mark.asyncio
async def test_index_hit_stops_cascade(serve, sample_index):
    client = serve({INDEX_URL: sample_index})

    results = await resolve("agent", limit=5, version="stable")

    assert results[0] == SearchResult(
        title="Agent Introduction",
        url=f"{STABLE}/python/agent-intro.html",
        snippet="API Reference",
        category="API Reference",
    )
    assert _requested(client) == [INDEX_URL]


@pytest.mark.asyncio
async def test_malformed_index_falls_through_to_search_page(serve):
    client = serve(
        {
            INDEX_URL: 'Search.setIndex({"docnames": ["python/agent-intro"], "tit',
            _search_page_url("teams"): SEARCH_PAGE_HTML,
        }
    )

    results = await resolve("teams", limit=5)

    assert [r.title for r in results] == ["Teams", "autogen_agentchat.teams"]
    assert results[0].category == "Guide page"
    assert _requested(client) == [INDEX_URL, _search_page_url("teams")]


@pytest.mark.asyncio
async def test_index_no_match_falls_through(serve, sample_index):
    client = serve(
        {
            INDEX_URL: sample_index,
            _search_page_url("collaborate"): SEARCH_PAGE_HTML,
        }
    )

    results = await resolve("collaborate", limit=5)

    assert results
    assert _requested(client) == [INDEX_URL, _search_page_url("collaborate")]


@pytest.mark.asyncio
async def test_everything_empty_runs_crawl_then_returns_empty(serve):
    client = serve()

    results = await resolve("xyznonexistenttermabc123", limit=5)

    assert results == []
    requested = _requested(client)
    assert requested[:2] == [INDEX_URL, _search_page_url("xyznonexistenttermabc123")]
    assert USER_GUIDE in requested
    assert len(requested) == 2 + 7


@pytest.mark.asyncio
async def test_crawl_result_returned(serve):
    html = "<main><h2 id='agents'>Agents</h2><p>Agents talk.</p></main>"
    serve({USER_GUIDE: html})

    results = await resolve("agent", limit=5)

    assert [r.url for r in results] == [f"{USER_GUIDE}#agents"]


@pytest.mark.asyncio
async def test_mcp_query_all_pages_fail(serve):
    client = serve()

    results = await resolve("mcp", limit=5, version="stable")

    assert results == []
    requested = _requested(client)
    assert f"{ROOT}/docs/ecosystem/integrations" in requested
    assert USER_GUIDE not in requested


@pytest.mark.asyncio
async def test_version_is_substituted(serve):
    client = serve()

    assert await resolve("agent", limit=3, version="nonexistent-version-123") == []
    assert _requested(client)[0] == f"{ROOT}/nonexistent-version-123/searchindex.js"


# -----------------------------------------------------------------------
# Limits and guards
# -----------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.parametrize("limit", [0, 1, 2, 15])
async def test_limit_respected(serve, sample_index, limit):
    serve({INDEX_URL: sample_index})

    results = await resolve("a", limit=limit)

    assert len(results) <= limit


@pytest.mark.asyncio
async def test_zero_limit_does_not_fetch(serve):
    client = serve()
    assert await resolve("agent", limit=0) == []
    assert await resolve("agent", limit=-1) == []
    client.get.assert_not_called()


@pytest.mark.asyncio
async def test_blank_query_does_not_fetch(serve):
    client = serve()
    assert await resolve("", limit=5) == []
    assert await resolve("   ", limit=5) == []
    client.get.assert_not_called()


@pytest.mark.asyncio
async def test_idempotent(serve, sample_index):
    serve({INDEX_URL: sample_index})
    first = await resolve("agent teams", limit=5)
    second = await resolve("agent teams", limit=5)
    assert first == second


@pytest.mark.asyncio
async def test_strategy_exception_falls_through(serve):
    serve()
    boom = AsyncMock(side_effect=RuntimeError("boom"))
    boom.__name__ = "_boom"
    fallback = AsyncMock(
        return_value=StrategyOutcome(
            "fallback", [SearchResult("A", f"{STABLE}/a.html", "s")]
        )
    )

    with patch("autogen_docs_mcp.resolver.STRATEGIES", (boom, fallback)):
        results = await resolve("agent", limit=5)

    assert [r.title for r in results] == ["A"]
    fallback.assert_awaited_once()


@pytest.mark.asyncio
async def test_all_strategies_raise(serve):
    serve()
    boom = AsyncMock(side_effect=RuntimeError("boom"))
    boom.__name__ = "_boom"

    with patch("autogen_docs_mcp.resolver.STRATEGIES", (boom, boom, boom)):
        assert await resolve("agent", limit=5) == []
    assert boom.await_count == 3


@pytest.mark.asyncio
async def test_off_site_only_results_fall_through(serve):
    serve()
    off_site = AsyncMock(
        return_value=StrategyOutcome(
            "off_site", [SearchResult("X", "https://example.com/x", "s")]
        )
    )
    on_site = AsyncMock(
        return_value=StrategyOutcome(
            "on_site", [SearchResult("A", f"{STABLE}/a.html", "s")]
        )
    )

    with patch("autogen_docs_mcp.resolver.STRATEGIES", (off_site, on_site)):
        results = await resolve("agent", limit=5)

    assert [r.title for r in results] == ["A"]


# -----------------------------------------------------------------------
# URL scope
# -----------------------------------------------------------------------

MIXED_VERSIONS_HTML = """
<div><h2>Searching</h2><ul>
  <li><a href="../0.2/docs/agents.html">Agents in 0.2</a></li>
  <li><a href="/autogen/dev/user-guide/agents.html">Agents in dev</a></li>
  <li><a href="user-guide/agents.html">Agents</a></li>
</ul></div>
"""


@pytest.mark.asyncio
async def test_results_stay_in_requested_version(serve):
    serve({_search_page_url("agents"): MIXED_VERSIONS_HTML})

    results = await resolve("agents", limit=5, version="stable")

    assert [r.url for r in results] == [f"{STABLE}/user-guide/agents.html"]
    assert all(r.url.startswith(f"{STABLE}/") for r in results)


@pytest.mark.asyncio
async def test_other_version_hits_fall_through(serve):
    html = (
        "<div><h2>Searching</h2>"
        "<a href='../0.2/docs/agents.html'>Agents in 0.2</a></div>"
    )
    client = serve({_search_page_url("agents"): html})

    assert await resolve("agents", limit=5, version="stable") == []
    assert USER_GUIDE in _requested(client)


@pytest.mark.asyncio
async def test_strategy_results_outside_version_dropped(serve):
    serve()
    mixed = AsyncMock(
        return_value=StrategyOutcome(
            "mixed",
            [
                SearchResult("Dev", f"{ROOT}/dev/a.html", "s"),
                SearchResult("Stable", f"{STABLE}/a.html", "s"),
            ],
        )
    )

    with patch("autogen_docs_mcp.resolver.STRATEGIES", (mixed,)):
        results = await resolve("agent", limit=5, version="stable")

    assert [r.title for r in results] == ["Stable"]


@pytest.mark.asyncio
async def test_domain_specific_results_use_docs_root(serve):
    integrations = f"{ROOT}/docs/ecosystem/integrations"
    html = "<main><h2 id='mcp'>MCP workbench</h2><p>Tools over MCP.</p></main>"
    serve({integrations: html})

    results = await resolve("mcp", limit=5, version="stable")

    assert [r.url for r in results] == [f"{integrations}#mcp"]


@pytest.mark.asyncio
async def test_search_page_query_fully_escaped(serve):
    client = serve()

    await resolve("agents/teams & tools", limit=5)

    assert _requested(client)[1] == (
        f"{STABLE}/search.html?q=agents%2Fteams%20%26%20tools"
    )


# -----------------------------------------------------------------------
# finalize
# -----------------------------------------------------------------------


def test_finalize_dedups_by_url_first_wins():
    results = [
        SearchResult("A", f"{STABLE}/a.html", "first"),
        SearchResult("B", f"{STABLE}/b.html", "s"),
        SearchResult("A again", f"{STABLE}/a.html", "second"),
    ]
    final = finalize(results, 10)
    assert [r.snippet for r in final] == ["first", "s"]


def test_finalize_drops_off_site_and_truncates():
    results = [
        SearchResult("X", "https://github.com/microsoft/autogen", "s"),
        SearchResult("A", f"{STABLE}/a.html", "s"),
        SearchResult("B", f"{STABLE}/b.html", "s"),
        SearchResult("C", f"{STABLE}/c.html", "s"),
    ]
    assert [r.title for r in finalize(results, 2)] == ["A", "B"]


def test_finalize_scoped_to_base():
    results = [
        SearchResult("Old", f"{ROOT}/0.2/docs/a.html", "s"),
        SearchResult("A", f"{STABLE}/a.html", "s"),
    ]
    assert [r.title for r in finalize(results, 10, STABLE)] == ["A"]
    assert [r.title for r in finalize(results, 10)] == ["Old", "A"]
