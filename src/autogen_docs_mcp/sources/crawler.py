"""Fallback crawl over curated AutoGen documentation pages.

Used when neither the search index nor the native search page produced
anything. Pages are fetched one at a time in priority order.
"""

import httpx
from loguru import logger

from autogen_docs_mcp.config import settings
from autogen_docs_mcp.models import (
    ClassifiedQuery,
    DomainSpecificQuery,
    PageDescriptor,
    SearchResult,
    StandardQuery,
)
from autogen_docs_mcp.sources.extractor import (
    extract_content_matches,
    extract_link_matches,
    extract_related_matches,
    parse_html,
)
from autogen_docs_mcp.sources.fetcher import fetch

# Queries mentioning any of these are routed to the ecosystem pages
DOMAIN_MARKERS: tuple[str, ...] = ("mcp", "model context protocol", "autogen_ext")

DOMAIN_RELATED_TERMS: tuple[str, ...] = (
    "autogen_ext",
    "tools",
    "extensions",
    "contrib",
    "ecosystem",
)

# (path under docs_root, category)
_DOMAIN_PAGES: tuple[tuple[str, str], ...] = (
    ("docs/ecosystem/integrations", "MCP Integrations"),
    ("docs/reference/agentchat/contrib", "Contrib Modules"),
    ("docs/ecosystem/community", "Community"),
    ("docs/tutorial/code-executors", "Code Executors"),
    ("docs/tutorial/tool-use", "Tool Use"),
    ("docs/ecosystem/ecosystem", "Ecosystem"),
    ("docs/Getting-Started", "Getting Started"),
    ("docs/tutorial/introduction", "Tutorial"),
    ("docs/Use-Cases/agent_chat", "Agent Chat"),
    ("docs/Installation", "Installation"),
    ("docs/FAQ", "FAQ"),
    ("docs/Migration-Guide", "Migration"),
    ("blog", "Blog"),
)

# (path under the version base URL, category)
_STANDARD_PAGES: tuple[tuple[str, str], ...] = (
    ("user-guide/index.html", "User Guide"),
    ("user-guide/core-user-guide/index.html", "Core Guide"),
    ("user-guide/agentchat-user-guide/index.html", "AgentChat Guide"),
    ("reference/index.html", "API Reference"),
    ("reference/agentchat/index.html", "AgentChat API"),
    ("reference/autogen_core/index.html", "Core API"),
    ("tutorials/index.html", "Tutorials"),
)

_CONTENT_SELECTOR = "main, .content, article"


def _pages(base_url: str, paths: tuple[tuple[str, str], ...]) -> tuple[PageDescriptor, ...]:
    return tuple(
        PageDescriptor(url=f"{base_url}/{path}", category=category)
        for path, category in paths
    )


def is_domain_specific(query: str) -> bool:
    query_lower = query.lower()
    return any(marker in query_lower for marker in DOMAIN_MARKERS)


def classify_query(query: str, version: str) -> ClassifiedQuery:
    """Pick the page set (and link base) the crawl will use for ``query``."""
    if is_domain_specific(query):
        root = settings.docs_root.rstrip("/")
        return DomainSpecificQuery(
            query=query,
            pages=_pages(root, _DOMAIN_PAGES),
            link_base=root,
            related_terms=DOMAIN_RELATED_TERMS,
        )

    base_url = settings.get_version_url(version)
    return StandardQuery(
        query=query,
        pages=_pages(base_url, _STANDARD_PAGES),
        link_base=base_url,
    )


def _content_text(soup) -> str:
    """Lowercased main-content text; whole body when no content wrapper."""
    containers = soup.select(_CONTENT_SELECTOR)
    if containers:
        return "".join(c.get_text() for c in containers).lower()
    return soup.get_text().lower()


def _scan_page(
    html: str,
    page: PageDescriptor,
    classified: ClassifiedQuery,
    limit: int,
    results: list[SearchResult],
) -> None:
    soup = parse_html(html)
    for element in soup(["script", "style"]):
        element.decompose()

    matches_query = classified.query.lower() in _content_text(soup)
    if matches_query:
        extract_content_matches(soup, page, classified.query, limit, results)

    # Domain queries also pick up adjacent ecosystem docs
    if isinstance(classified, DomainSpecificQuery):
        page_text = soup.get_text().lower()
        for term in classified.related_terms:
            if len(results) >= limit:
                break
            if term in page_text:
                extract_related_matches(soup, page, term, limit, results)

    if matches_query:
        extract_link_matches(
            soup, page, classified.query, limit, classified.link_base, results
        )


async def crawl_fallback(
    client: httpx.AsyncClient,
    query: str,
    limit: int,
    version: str,
) -> list[SearchResult]:
    """Crawl the curated pages for ``query``.

    Args:
        client: Shared AsyncClient
        query: User query
        limit: Maximum number of results
        version: Documentation version

    Returns:
        Results deduplicated by URL, at most ``limit``
    """
    classified = classify_query(query, version)
    logger.info(
        f"Fallback crawl ({type(classified).__name__}) over "
        f"{len(classified.pages)} pages for: {query}"
    )

    results: list[SearchResult] = []
    for page in classified.pages:
        if len(results) >= limit:
            break

        fetched = await fetch(client, page.url)
        if not fetched.ok:
            continue

        try:
            _scan_page(fetched.text, page, classified, limit, results)
        except Exception as e:
            logger.error(f"Failed to search page {page.url}: {e}")

    seen: set[str] = set()
    unique: list[SearchResult] = []
    for result in results:
        if result.url in seen:
            continue
        seen.add(result.url)
        unique.append(result)

    return unique[:limit]
