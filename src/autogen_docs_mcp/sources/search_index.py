"""Lookup against the Sphinx ``searchindex.js`` published with the docs.

This is the cheapest and most precise strategy, so it always runs first.
"""

import json
import re

import httpx
from loguru import logger

from autogen_docs_mcp.config import settings
from autogen_docs_mcp.models import SearchIndexTable, SearchResult
from autogen_docs_mcp.sources.fetcher import fetch

_SET_INDEX_RE = re.compile(r"Search\.setIndex\((.*)\);?$", re.MULTILINE)

_TITLE_WEIGHT = 3
_DOCNAME_WEIGHT = 2

# Checked in order, first match wins
_DOCNAME_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("python/", "API Reference"),
    ("user-guide/", "User Guide"),
    ("tutorials/", "Tutorial"),
    ("components/", "Core Guide"),
)
_DEFAULT_CATEGORY = "Documentation"


def categorize_docname(docname: str) -> str:
    """Map a document path to a coarse category."""
    for segment, category in _DOCNAME_CATEGORIES:
        if segment in docname:
            return category
    return _DEFAULT_CATEGORY


def query_terms(query: str) -> list[str]:
    """Lowercase whitespace-separated terms, empties dropped."""
    return query.lower().split()


def parse_search_index(content: str) -> SearchIndexTable | None:
    """Extract the titles/docnames table from a ``searchindex.js`` payload.

    Returns None when the payload is not a ``Search.setIndex(...)`` call,
    the JSON does not parse, or the two columns do not pair up.
    """
    match = _SET_INDEX_RE.search(content)
    if not match:
        logger.debug("searchindex.js: Search.setIndex(...) not found")
        return None

    try:
        data = json.loads(match.group(1))
    except json.JSONDecodeError as e:
        logger.debug(f"searchindex.js: invalid JSON: {e}")
        return None

    if not isinstance(data, dict):
        return None

    titles = data.get("titles")
    docnames = data.get("docnames")
    if not isinstance(titles, list) or not isinstance(docnames, list):
        return None
    if len(titles) != len(docnames):
        logger.debug(
            f"searchindex.js: {len(titles)} titles vs {len(docnames)} docnames"
        )
        return None
    if not all(isinstance(t, str) for t in titles) or not all(
        isinstance(d, str) for d in docnames
    ):
        return None

    return SearchIndexTable(titles=tuple(titles), docnames=tuple(docnames))


def _title_term_count(result: SearchResult, terms: list[str]) -> int:
    title = result.title.lower()
    return sum(1 for term in terms if term in title)


def search_index(
    table: SearchIndexTable,
    query: str,
    base_url: str,
    limit: int,
) -> list[SearchResult]:
    """Score every indexed document against the query.

    Documents get +3 per term found in the title and +2 per term found in
    the docname; zero-score documents are dropped. The survivors are then
    ordered by how many terms their title contains. Untitled entries are
    skipped.
    """
    terms = query_terms(query)
    if not terms or limit <= 0:
        return []

    results: list[SearchResult] = []
    for title, docname in table.entries():
        title = title.strip()
        if not title:
            continue
        title_lower = title.lower()
        docname_lower = docname.lower()

        score = 0
        for term in terms:
            if term in title_lower:
                score += _TITLE_WEIGHT
            if term in docname_lower:
                score += _DOCNAME_WEIGHT
        if score == 0:
            continue

        category = categorize_docname(docname)
        results.append(
            SearchResult(
                title=title,
                url=f"{base_url}/{docname}.html",
                snippet=category,
                category=category,
            )
        )

    # Stable: ties keep index order
    results.sort(key=lambda r: _title_term_count(r, terms), reverse=True)
    return results[:limit]


async def search_structured_index(
    client: httpx.AsyncClient,
    query: str,
    limit: int,
    version: str,
) -> tuple[list[SearchResult], bool]:
    """Fetch ``searchindex.js`` for ``version`` and search it.

    Returns:
        (results, ok) where ok is False on fetch or parse failure
    """
    base_url = settings.get_version_url(version)
    fetched = await fetch(client, f"{base_url}/searchindex.js")
    if not fetched.ok:
        return [], False

    table = parse_search_index(fetched.text)
    if table is None:
        logger.info("Could not parse search index, trying fallback")
        return [], False

    results = search_index(table, query, base_url, limit)
    logger.debug(f"Search index: {len(results)} matches in {len(table)} documents")
    return results, True
