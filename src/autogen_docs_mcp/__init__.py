"""AutoGen Docs MCP Server - search Microsoft AutoGen documentation."""

from importlib.metadata import version

from autogen_docs_mcp.__main__ import _cli as main
from autogen_docs_mcp.resolver import resolve
from autogen_docs_mcp.server import mcp

__version__ = version("autogen-docs-mcp")
__all__ = ["mcp", "main", "resolve", "__version__"]
