"""HTML extraction of search hits from rendered documentation pages.

Two modes:
- ``extract_search_results``: the Sphinx ``search.html`` results section
- ``extract_content_matches``, ``extract_related_matches`` and
  ``extract_link_matches``: any docs page, used by the fallback crawl in
  that order
"""

import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from autogen_docs_mcp.config import settings
from autogen_docs_mcp.models import (
    PLACEHOLDER_SNIPPET,
    PageDescriptor,
    SearchResult,
    clip,
)

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
BLOCK_TAGS = ["p", "div"]

# Heading that introduces the results list on search.html
SEARCH_SECTION_MARKER = "Searching"

_PARENTHETICAL_RE = re.compile(r"\(([^)]+)\)")
_WHITESPACE_RE = re.compile(r"\s+")

_MIN_BLOCK_LENGTH = 50
_MIN_RELATED_LENGTH = 20
_MIN_LINK_TITLE_LENGTH = 3
_MIN_PARENT_CONTEXT = 50
_FALLBACK_PAGE_TITLE = "AutoGen Documentation"


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _text(element: Tag) -> str:
    return element.get_text().strip()


def _collapse(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def _title(element: Tag) -> str:
    return _collapse(element.get_text())


def resolve_link(href: str, base_url: str) -> str:
    """Make ``href`` absolute against a base directory URL."""
    return urljoin(base_url.rstrip("/") + "/", href)


def _with_fragment(url: str, element: Tag | None) -> str:
    element_id = element.get("id") if element is not None else None
    if element_id:
        return f"{url}#{element_id}"
    return url


def _previous_heading(element: Tag) -> Tag | None:
    return element.find_previous_sibling(HEADING_TAGS)


def _is_heading(element: Tag) -> bool:
    return element.name in HEADING_TAGS


# ---------------------------------------------------------------------------
# Mode (a): native search page
# ---------------------------------------------------------------------------


def _find_search_section(soup: BeautifulSoup) -> Tag | None:
    for heading in soup.find_all(HEADING_TAGS):
        if SEARCH_SECTION_MARKER in heading.get_text():
            return heading.parent
    return None


def extract_search_results(
    html: str,
    base_url: str,
    limit: int,
) -> list[SearchResult]:
    """Extract hits from a rendered ``search.html`` page.

    Links are resolved against ``base_url`` and anything outside that
    version's tree is dropped. A parenthetical in the link's parent, such as
    "(Python module, in autogen_core)", becomes both category and snippet.

    Args:
        html: Raw page HTML
        base_url: Version base URL
        limit: Maximum number of results

    Returns:
        List of results in page order
    """
    results: list[SearchResult] = []
    if limit <= 0:
        return results

    section = _find_search_section(parse_html(html))
    if section is None:
        return results

    for link in section.find_all("a", href=True):
        if len(results) >= limit:
            break

        title = _title(link)
        href = link["href"].strip()
        if not title or not href:
            continue

        url = resolve_link(href, base_url)
        if not settings.is_docs_url(url, base_url):
            continue

        category: str | None = None
        snippet = ""

        parent = link.parent
        if parent is not None:
            match = _PARENTHETICAL_RE.search(parent.get_text())
            if match:
                category = match.group(1)
                snippet = category

        if not snippet:
            sibling = link.find_next_sibling()
            if sibling is not None:
                snippet = clip(sibling.get_text())

        results.append(
            SearchResult(
                title=title,
                url=url,
                snippet=snippet or PLACEHOLDER_SNIPPET,
                category=category,
            )
        )

    return results


# ---------------------------------------------------------------------------
# Mode (b): generic documentation page
# ---------------------------------------------------------------------------


def page_title(soup: BeautifulSoup) -> str:
    """<title> text, else the first <h1>, else empty."""
    if soup.title is not None:
        title = _title(soup.title)
        if title:
            return title
    h1 = soup.find("h1")
    return _title(h1) if h1 is not None else ""


def _append_unique(
    results: list[SearchResult],
    seen: set[tuple[str, str]],
    result: SearchResult,
) -> None:
    key = (result.url, result.title)
    if key in seen:
        return
    seen.add(key)
    results.append(result)


def _scan_headings(soup, page, query_lower, limit, results, seen) -> None:
    for heading in soup.find_all(HEADING_TAGS):
        if len(results) >= limit:
            return

        heading_text = _title(heading)
        if query_lower not in heading_text.lower():
            continue

        following = heading.find_next_sibling()
        context = ""
        if following is not None and following.name in BLOCK_TAGS:
            context = clip(following.get_text())

        _append_unique(
            results,
            seen,
            SearchResult(
                title=heading_text,
                url=_with_fragment(page.url, heading),
                snippet=context or f"{page.category}: {heading_text}",
                category=page.category,
            ),
        )


def _scan_blocks(soup, page, query_lower, limit, results, seen) -> None:
    fallback_title = page_title(soup) or _FALLBACK_PAGE_TITLE

    for block in soup.find_all(BLOCK_TAGS):
        if len(results) >= limit:
            return

        text = _text(block)
        if len(text) <= _MIN_BLOCK_LENGTH or query_lower not in text.lower():
            continue

        heading = _previous_heading(block)
        title = _title(heading) if heading is not None else ""

        _append_unique(
            results,
            seen,
            SearchResult(
                title=title or fallback_title,
                url=_with_fragment(page.url, heading),
                snippet=clip(text),
                category=page.category,
            ),
        )


def _link_context(link: Tag) -> str:
    parent = link.parent
    if parent is None:
        return ""

    context = _text(parent)
    # Short parent (e.g. a bare <li>): use the text around it instead
    if len(context) < _MIN_PARENT_CONTEXT and parent.parent is not None:
        context = "".join(
            sibling.get_text()
            for sibling in parent.parent.find_all(recursive=False)
            if sibling is not parent
        )
    return clip(context)


def _scan_links(soup, page, query_lower, limit, link_base, results, seen) -> None:
    for link in soup.find_all("a", href=True):
        if len(results) >= limit:
            return

        title = _title(link)
        href = link["href"].strip()
        if not href or len(title) < _MIN_LINK_TITLE_LENGTH:
            continue

        url = resolve_link(href, link_base)
        if not settings.is_docs_url(url, link_base):
            continue

        if query_lower not in title.lower() and query_lower not in url.lower():
            continue

        _append_unique(
            results,
            seen,
            SearchResult(
                title=title,
                url=url,
                snippet=_link_context(link) or PLACEHOLDER_SNIPPET,
                category=page.category,
            ),
        )


def extract_content_matches(
    soup: BeautifulSoup,
    page: PageDescriptor,
    query: str,
    limit: int,
    results: list[SearchResult],
) -> None:
    """Collect headings and text blocks mentioning ``query`` from one page.

    Appends to ``results`` until it holds ``limit`` entries, headings first.
    Duplicate (url, title) pairs are skipped.
    """
    query_lower = query.lower()
    seen = {(r.url, r.title) for r in results}

    if len(results) < limit:
        _scan_headings(soup, page, query_lower, limit, results, seen)
    if len(results) < limit:
        _scan_blocks(soup, page, query_lower, limit, results, seen)


def extract_link_matches(
    soup: BeautifulSoup,
    page: PageDescriptor,
    query: str,
    limit: int,
    link_base: str,
    results: list[SearchResult],
) -> None:
    """Collect links whose text or target mentions ``query``.

    Relative links resolve against ``link_base`` and only links inside it
    are kept.
    """
    seen = {(r.url, r.title) for r in results}
    if len(results) < limit:
        _scan_links(soup, page, query.lower(), limit, link_base, results, seen)


def extract_related_matches(
    soup: BeautifulSoup,
    page: PageDescriptor,
    term: str,
    limit: int,
    results: list[SearchResult],
) -> None:
    """Collect elements mentioning ``term`` rather than the user query.

    Headings are titled by their own text; other blocks by the nearest
    preceding heading, or "<category>: <term>".
    """
    term_lower = term.lower()
    seen = {(r.url, r.title) for r in results}

    for element in soup.find_all(HEADING_TAGS + BLOCK_TAGS):
        if len(results) >= limit:
            return

        text = _text(element)
        if len(text) <= _MIN_RELATED_LENGTH or term_lower not in text.lower():
            continue

        if _is_heading(element):
            title = _title(element)
        else:
            heading = _previous_heading(element)
            title = _title(heading) if heading is not None else ""

        _append_unique(
            results,
            seen,
            SearchResult(
                title=title or f"{page.category}: {term}",
                url=_with_fragment(page.url, element),
                snippet=clip(text),
                category=page.category,
            ),
        )
