"""AutoGen Docs MCP Server - Main server definition."""

import sys

from loguru import logger
from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from autogen_docs_mcp.config import settings
from autogen_docs_mcp.models import SearchResult
from autogen_docs_mcp.resolver import resolve

# Configure logging (stdout belongs to the stdio transport)
logger.remove()
logger.add(sys.stderr, level=settings.log_level)

OVERVIEW_URI = f"{settings.get_version_url('stable')}/"


def format_results(results: list[SearchResult], query: str, version: str) -> str:
    """Render results as the numbered text block returned to the client."""
    if not results:
        return f'No results found for "{query}" in AutoGen {version} documentation.'

    blocks = []
    for index, result in enumerate(results, start=1):
        category = f" ({result.category})" if result.category else ""
        blocks.append(
            f"{index}. **{result.title}**{category}\n"
            f"   URL: {result.url}\n"
            f"   {result.snippet}\n"
        )

    formatted = "\n".join(blocks)
    return (
        f'Found {len(results)} result(s) for "{query}" in AutoGen {version} '
        f"documentation:\n\n{formatted}"
    )


def overview_text() -> str:
    stable = settings.get_version_url("stable")
    return f"""AutoGen Documentation Overview

Microsoft AutoGen is a framework for creating multi-agent conversational AI systems.

Key Documentation Sections:
- Reference: {stable}/reference/
- Getting Started: {stable}/user-guide/
- Tutorials: {stable}/tutorials/
- API Reference: {stable}/reference/

To search for specific information, use the search_autogen_docs tool with your query.
The search results will provide direct links to the relevant documentation pages."""


# Initialize MCP server
mcp = FastMCP(
    name="autogen-doc-server",
    instructions=(
        "AutoGen documentation search. "
        "Use `search_autogen_docs` to find pages in the Microsoft AutoGen docs; "
        "read the `autogen-docs-overview` resource for the main sections."
    ),
)


@mcp.tool(
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=True,
        idempotentHint=True,
    ),
)
async def search_autogen_docs(
    query: str,
    limit: int = 10,
    version: str = "stable",
) -> str:
    """Search AutoGen documentation for relevant information.
    - query: Search query to find relevant AutoGen documentation
    - limit: Maximum number of results to return (default: 10)
    - version: AutoGen version to search (default: 'stable', e.g. 'dev', 'v0.4.0')
    """
    try:
        results = await resolve(query, limit=limit, version=version)
    except Exception as e:
        logger.error(f"Search failed for {query!r}: {e}")
        return f"Error searching AutoGen documentation: {e}"
    return format_results(results, query, version)


@mcp.resource(
    OVERVIEW_URI,
    name="autogen-docs-overview",
    description=(
        "Overview of Microsoft AutoGen documentation structure and key sections"
    ),
    mime_type="text/plain",
)
def docs_overview() -> str:
    """AutoGen Documentation Overview."""
    return overview_text()


def main() -> None:
    """Entry point for the MCP server."""
    logger.info("AutoGen Documentation MCP Server running on stdio")
    mcp.run()


if __name__ == "__main__":
    main()
