"""Pytest configuration and fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
def make_client():
    """Build a fake httpx.AsyncClient serving canned pages.

    ``pages`` maps URL -> body text, ``(status, body)`` tuple, or an
    exception instance to raise. Unknown URLs answer 404.

    Example usage::

        client = make_client({"https://example.com/a": "body"})
        result = await fetch(client, "https://example.com/a")
    """

    def _make(pages: dict | None = None):
        pages = pages or {}

        async def _get(url, *args, **kwargs):
            entry = pages.get(url, (404, "Not Found"))
            if isinstance(entry, Exception):
                raise entry
            status, text = (200, entry) if isinstance(entry, str) else entry
            response = MagicMock()
            response.status_code = status
            response.text = text
            return response

        client = AsyncMock()
        client.get = AsyncMock(side_effect=_get)
        client.__aenter__.return_value = client
        client.__aexit__.return_value = None
        return client

    return _make


@pytest.fixture
def sample_index():
    """searchindex.js payload as published by Sphinx."""
    return (
        'Search.setIndex({"docnames": ['
        '"python/agent-intro", '
        '"user-guide/agentchat-user-guide/teams", '
        '"tutorials/first-agent", '
        '"components/model-clients", '
        '"index"'
        '], "titles": ['
        '"Agent Introduction", '
        '"Teams", '
        '"Building your first agent", '
        '"Model Clients", '
        '"AutoGen"'
        '], "terms": {"agent": [0, 2]}})'
    )
