"""Configuration settings for the AutoGen Docs MCP Server."""

from urllib.parse import urlparse

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """AutoGen Docs MCP Server configuration.

    Environment variables:
    - DOCS_ROOT: Documentation site root, versions live underneath it
        (default: https://microsoft.github.io/autogen)
    - DEFAULT_VERSION: Documentation tree searched when none is given
    - DEFAULT_LIMIT: Result limit used by the CLI
    - USER_AGENT: Identification header sent with every request
    - FETCH_TIMEOUT: HTTP transport timeout in seconds
    - LOG_LEVEL: loguru level for the stderr sink
    """

    # Documentation site
    docs_root: str = "https://microsoft.github.io/autogen"
    default_version: str = "stable"
    default_limit: int = 10

    # HTTP
    user_agent: str = "Mozilla/5.0 (compatible; AutoGen-MCP-Search/1.0)"
    fetch_timeout: float = 30.0

    # Logging
    log_level: str = "INFO"

    model_config = {"env_prefix": "", "case_sensitive": False}

    # --- URL helpers ---

    def get_version_url(self, version: str | None = None) -> str:
        """Get the base URL of one documentation tree.

        The version is substituted as-is; an unknown version simply
        produces URLs that 404.
        """
        return f"{self.docs_root.rstrip('/')}/{version or self.default_version}"

    def is_docs_url(self, url: str, base: str | None = None) -> bool:
        """Check that a URL points inside the documentation site.

        ``base`` narrows the check to one subtree, e.g. a single version
        (``get_version_url("stable")``). Defaults to ``docs_root``.
        """
        root = urlparse(base or self.docs_root)
        try:
            parsed = urlparse(url)
        except ValueError:
            return False

        if parsed.scheme not in ("http", "https"):
            return False
        if (parsed.hostname or "") != (root.hostname or ""):
            return False

        root_path = root.path.rstrip("/")
        return parsed.path == root_path or parsed.path.startswith(f"{root_path}/")


settings = Settings()
