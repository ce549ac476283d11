"""AutoGen Docs MCP Server entry point."""

import asyncio
import sys


def _search(args: list[str]) -> None:
    """Run one resolution and print the formatted result.

    Usage:
        autogen-docs-mcp search multi-agent conversation
    """
    from autogen_docs_mcp.config import settings
    from autogen_docs_mcp.resolver import resolve
    from autogen_docs_mcp.server import format_results

    query = " ".join(args)
    if not query.strip():
        print("Usage: autogen-docs-mcp search <query>", file=sys.stderr)
        sys.exit(2)

    version = settings.default_version
    results = asyncio.run(resolve(query, limit=settings.default_limit, version=version))
    print(format_results(results, query, version))


def _cli() -> None:
    """CLI dispatcher: server (default) or search subcommand."""
    if len(sys.argv) >= 2 and sys.argv[1] == "search":
        _search(sys.argv[2:])
    else:
        from autogen_docs_mcp.server import main

        main()


if __name__ == "__main__":
    _cli()
