"""Query matching and ranking over a loaded documentation search index."""

import logging
import re
from functools import lru_cache
from typing import Any

from documenter_search.models import Entry, SearchResult
from documenter_search.store import IndexStore

logger = logging.getLogger(__name__)

SNIPPET_WIDTH = 160
MARK_OPEN = "<mark>"
MARK_CLOSE = "</mark>"
ELLIPSIS = "..."

# Letters and digits only; underscore is a separator.
_SEPARATOR_RE = re.compile(r"[\W_]+")


def tokenize(text: str) -> list[str]:
    """Case-fold text and split it on runs of non-alphanumeric characters.

    Args:
        text: Raw query or entry text.

    Returns:
        List of non-empty tokens.
    """
    return [token for token in _SEPARATOR_RE.split(text.casefold()) if token]


@lru_cache(maxsize=8192)
def normalize(text: str) -> str:
    """Return the normalized form of text used for substring matching.

    Args:
        text: Raw query or entry text.

    Returns:
        Tokens joined by single spaces.
    """
    return " ".join(tokenize(text))


def query_terms(query: Any) -> list[str]:
    """Extract distinct query terms in first-seen order.

    Args:
        query: User query. Anything other than a string yields no terms.

    Returns:
        List of normalized terms.
    """
    if not isinstance(query, str):
        return []
    return list(dict.fromkeys(tokenize(query)))


def search(store: IndexStore, query: str) -> list[Entry]:
    """Return entries matching every query term, best first.

    Args:
        store: Loaded index store.
        query: User query string.

    Returns:
        Ranked, location-deduplicated list of entries.
    """
    return [result.entry for result in search_results(store, query)]


def search_results(
    store: IndexStore,
    query: str,
    category: str | None = None,
    limit: int | None = None,
) -> list[SearchResult]:
    """Match and rank entries, returning scored results with snippets.

    Ranking orders by title term hits, then total term occurrences across
    title and text, then original insertion order.

    Args:
        store: Loaded index store.
        query: User query string.
        category: Optional category filter.
        limit: Optional maximum number of results.

    Returns:
        List of SearchResult instances ordered by relevance.
    """
    terms = query_terms(query)
    if not terms or (limit is not None and limit <= 0):
        return []

    scored: list[tuple[int, int, int, Entry]] = []
    for position, entry in enumerate(store.all()):
        if category is not None and entry.category != category:
            continue
        title = normalize(entry.title)
        haystack = f"{title} {normalize(entry.text)}"
        if not all(term in haystack for term in terms):
            continue
        title_hits = sum(1 for term in terms if term in title)
        occurrences = sum(haystack.count(term) for term in terms)
        scored.append((title_hits, occurrences, position, entry))

    scored.sort(key=lambda item: (-item[0], -item[1], item[2]))

    results: list[SearchResult] = []
    seen: set[str] = set()
    for title_hits, occurrences, position, entry in scored:
        if entry.location in seen:
            continue
        seen.add(entry.location)
        results.append(
            SearchResult(
                entry=entry,
                title_hits=title_hits,
                occurrences=occurrences,
                position=position,
                snippet=make_snippet(entry.text, terms),
            )
        )
        if limit is not None and len(results) >= limit:
            break

    logger.debug("Query %r matched %d entries", query, len(results))
    return results


def make_snippet(text: str, terms: list[str], width: int = SNIPPET_WIDTH) -> str:
    """Build a highlighted excerpt of text around the first matched term.

    Args:
        text: Entry text.
        terms: Normalized query terms.
        width: Maximum excerpt length before highlighting.

    Returns:
        Excerpt with matches wrapped in highlight marks.
    """
    text = " ".join(text.split())
    if not text:
        return ""
    if not terms:
        return text[:width] + (ELLIPSIS if len(text) > width else "")

    spans = _match_spans(text, terms)
    start = 0 if not spans else max(0, spans[0][0] - width // 4)
    end = min(len(text), start + width)

    parts: list[str] = []
    cursor = start
    for span_start, span_end in spans:
        if span_start < cursor or span_end > end:
            continue
        parts.append(text[cursor:span_start])
        parts.append(f"{MARK_OPEN}{text[span_start:span_end]}{MARK_CLOSE}")
        cursor = span_end
    parts.append(text[cursor:end])

    prefix = ELLIPSIS if start > 0 else ""
    suffix = ELLIPSIS if end < len(text) else ""
    return f"{prefix}{''.join(parts)}{suffix}"


def _match_spans(text: str, terms: list[str]) -> list[tuple[int, int]]:
    """Find term matches in the case-folded text, as spans of the original text.

    Case folding can expand a character (e.g. 'ß' to 'ss'), so each folded
    position is mapped back to the character it came from.

    Args:
        text: Original text.
        terms: Normalized query terms.

    Returns:
        Start and end offsets into text, in order.
    """
    folded_parts: list[str] = []
    offsets: list[int] = []
    for index, char in enumerate(text):
        folded = char.casefold()
        folded_parts.append(folded)
        offsets.extend([index] * len(folded))
    folded_text = "".join(folded_parts)

    # Longest first so overlapping terms highlight the wider match.
    alternatives = sorted(terms, key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(term) for term in alternatives))
    return [(offsets[match.start()], offsets[match.end() - 1] + 1) for match in pattern.finditer(folded_text)]
