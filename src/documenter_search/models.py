"""Data models for documentation search index entries."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Entry:
    """Represents one documentation anchor in the search index."""

    location: str
    page: str = ""
    title: str = ""
    text: str = ""
    category: str = ""

    @property
    def path(self) -> str:
        """Return the location without its fragment."""
        return self.location.partition("#")[0]

    @property
    def anchor(self) -> str:
        """Return the in-page fragment, without the leading '#'."""
        return self.location.partition("#")[2]


@dataclass(frozen=True)
class SearchResult:
    """Represents a ranked search result."""

    entry: Entry
    title_hits: int
    occurrences: int
    position: int
    snippet: str
