"""Data models for AutoGen documentation search."""

from dataclasses import asdict, dataclass, field

# Snippets are display text, keep them short
SNIPPET_LENGTH = 200
PLACEHOLDER_SNIPPET = "AutoGen documentation"


@dataclass(frozen=True)
class SearchResult:
    """A single resolved documentation hit."""

    title: str
    url: str
    snippet: str
    category: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SearchIndexTable:
    """Document titles and names from a Sphinx ``searchindex.js``.

    Both tuples are paired by position.
    """

    titles: tuple[str, ...]
    docnames: tuple[str, ...]

    def __len__(self) -> int:
        return len(self.docnames)

    def entries(self):
        return zip(self.titles, self.docnames, strict=True)


@dataclass(frozen=True)
class PageDescriptor:
    """A curated page visited by the fallback crawl."""

    url: str
    category: str


@dataclass(frozen=True)
class StandardQuery:
    """Query crawled over the version-scoped documentation tree."""

    query: str
    pages: tuple[PageDescriptor, ...]
    link_base: str


@dataclass(frozen=True)
class DomainSpecificQuery:
    """MCP / extension query crawled over the ecosystem pages.

    Also scans every page for ``related_terms`` so that adjacent docs show
    up even when the literal query is absent.
    """

    query: str
    pages: tuple[PageDescriptor, ...]
    link_base: str
    related_terms: tuple[str, ...] = field(default=())


ClassifiedQuery = StandardQuery | DomainSpecificQuery


def clip(text: str, length: int = SNIPPET_LENGTH) -> str:
    """Trim text and bound it to ``length`` characters."""
    return text.strip()[:length]
