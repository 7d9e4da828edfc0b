"""API helper utilities."""
from api.helpers.pagination import bookmark_page, next_page_url, parse_tags_query

__all__ = [
    "bookmark_page",
    "next_page_url",
    "parse_tags_query",
]
