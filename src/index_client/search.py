"""Full-text search over the local bookmark index."""
from collections.abc import Iterable

from index_client.models import IndexEntry


def _haystack(entry: IndexEntry) -> str:
    return " ".join([entry.title, entry.url, entry.domain, *entry.tags]).lower()


def search_entries(
    entries: Iterable[IndexEntry],
    query: str = "",
    tags: list[str] | None = None,
    limit: int | None = None,
) -> list[IndexEntry]:
    """
    Search local index entries.

    Every whitespace-separated term of `query` must appear (case-insensitive)
    in the title, URL, domain or tags. Every tag in `tags` must be present.
    Results are newest first.
    """
    terms = query.lower().split()
    required_tags = {tag.lower().strip() for tag in tags or [] if tag.strip()}

    matches = []
    for entry in entries:
        if required_tags and not required_tags.issubset(entry.tags):
            continue
        haystack = _haystack(entry)
        if all(term in haystack for term in terms):
            matches.append(entry)

    matches.sort(key=lambda entry: entry.id, reverse=True)
    if limit is not None:
        return matches[:limit]
    return matches
