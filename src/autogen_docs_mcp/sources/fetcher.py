"""HTTP fetching for documentation resources.

Failures never raise: a non-2xx status or a transport error comes back as
``FetchResult(ok=False)`` so callers can move on to the next candidate.
"""

from dataclasses import dataclass

import httpx
from loguru import logger

from autogen_docs_mcp.config import settings


@dataclass(frozen=True)
class FetchResult:
    url: str
    text: str = ""
    ok: bool = False
    status: int | None = None
    error: str | None = None


def create_client() -> httpx.AsyncClient:
    """Build the client shared by every fetch of one resolution."""
    return httpx.AsyncClient(
        timeout=settings.fetch_timeout,
        follow_redirects=True,
        headers={"User-Agent": settings.user_agent},
    )


async def fetch(client: httpx.AsyncClient, url: str) -> FetchResult:
    """Fetch ``url`` and return its body text.

    Args:
        client: Open AsyncClient (see ``create_client``)
        url: Fully-qualified URL

    Returns:
        FetchResult with ``ok=True`` only for 2xx responses
    """
    try:
        resp = await client.get(url)
    except httpx.HTTPError as e:
        logger.debug(f"Fetch failed for {url}: {e}")
        return FetchResult(url=url, error=str(e) or type(e).__name__)

    if not 200 <= resp.status_code < 300:
        logger.debug(f"Fetch {url} returned HTTP {resp.status_code}")
        return FetchResult(
            url=url,
            status=resp.status_code,
            error=f"HTTP {resp.status_code}",
        )

    return FetchResult(url=url, text=resp.text, ok=True, status=resp.status_code)
