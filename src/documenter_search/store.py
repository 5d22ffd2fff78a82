"""In-memory store for a loaded documentation search index."""

import logging
import re
from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from documenter_search.models import Entry

logger = logging.getLogger(__name__)

DEFAULT_FIELD = "docs"
OPTIONAL_FIELDS = ("page", "title", "text", "category")

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


class MalformedIndexError(ValueError):
    """Raised when a search index artifact does not match the expected shape."""


class IndexStore:
    """Holds the ordered, read-only sequence of index entries."""

    def __init__(self, entries: Sequence[Entry]) -> None:
        """Initialise store with already validated entries.

        Args:
            entries: Entries in producer order.
        """
        self._entries = tuple(entries)

    def all(self) -> tuple[Entry, ...]:
        """Return all entries in their original order.

        Returns:
            Tuple of Entry instances.
        """
        return self._entries

    def get(self, location: str) -> Entry | None:
        """Retrieve the first entry with the given location.

        Args:
            location: Relative location, including any fragment.

        Returns:
            Entry instance or None if not found.
        """
        for entry in self._entries:
            if entry.location == location:
                return entry
        return None

    def pages(self) -> list[str]:
        """Return distinct page names in first-seen order."""
        return list(dict.fromkeys(entry.page for entry in self._entries))

    def categories(self) -> list[str]:
        """Return distinct categories in first-seen order."""
        return list(dict.fromkeys(entry.category for entry in self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"IndexStore(entries={len(self._entries)})"


def load(raw: Any, field: str = DEFAULT_FIELD) -> IndexStore:
    """Build an IndexStore from a decoded search index artifact.

    Args:
        raw: Decoded artifact, a mapping holding the entry sequence.
        field: Name of the top-level field holding the entries.

    Returns:
        IndexStore with one Entry per artifact record.

    Raises:
        MalformedIndexError: If the artifact shape is invalid.
    """
    if not isinstance(raw, Mapping):
        msg = f"Search index must be a mapping, got {type(raw).__name__}"
        raise MalformedIndexError(msg)
    if field not in raw:
        msg = f"Search index is missing top-level field: {field!r}"
        raise MalformedIndexError(msg)

    records = raw[field]
    if isinstance(records, (str, bytes)) or not isinstance(records, Sequence):
        msg = f"Search index field {field!r} must be a sequence, got {type(records).__name__}"
        raise MalformedIndexError(msg)

    entries = [_parse_entry(index, record) for index, record in enumerate(records)]

    seen: set[str] = set()
    duplicates = 0
    for entry in entries:
        if entry.location in seen:
            duplicates += 1
        seen.add(entry.location)
    if duplicates:
        logger.warning("Search index contains %d entries with duplicate locations", duplicates)

    logger.info("Loaded %d search index entries", len(entries))
    return IndexStore(entries)


def _parse_entry(index: int, record: Any) -> Entry:
    """Validate one artifact record and convert it to an Entry.

    Args:
        index: Position of the record, for error messages.
        record: Decoded record.

    Returns:
        Entry instance with absent optional fields set to empty strings.

    Raises:
        MalformedIndexError: If the record is invalid.
    """
    if not isinstance(record, Mapping):
        msg = f"Entry {index} must be a mapping, got {type(record).__name__}"
        raise MalformedIndexError(msg)
    if "location" not in record:
        msg = f"Entry {index} is missing 'location'"
        raise MalformedIndexError(msg)

    location = record["location"]
    if not isinstance(location, str):
        msg = f"Entry {index} has a non-string 'location'"
        raise MalformedIndexError(msg)
    if location.startswith("/") or _SCHEME_RE.match(location):
        msg = f"Entry {index} location is not a relative path: {location!r}"
        raise MalformedIndexError(msg)

    values: dict[str, str] = {}
    for name in OPTIONAL_FIELDS:
        value = record.get(name)
        if value is None:
            value = ""
        elif not isinstance(value, str):
            msg = f"Entry {index} field {name!r} must be a string, got {type(value).__name__}"
            raise MalformedIndexError(msg)
        values[name] = value

    return Entry(location=location, **values)
