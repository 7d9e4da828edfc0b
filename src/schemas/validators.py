"""
Shared validation functions for Pydantic schemas.

Entity-specific validators remain in their respective schema modules.
"""
import re

from core.config import get_settings

# Tag format: lowercase alphanumeric with hyphens (e.g., 'machine-learning', 'web-dev')
TAG_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")

# Deliberately loose: anything shaped like "scheme://host.tld..." is accepted,
# stricter URL validation rejects too many real-world bookmarks.
URL_PATTERN = re.compile(r"^[A-Za-z0-9-]+://.*\..*")


def validate_and_normalize_tag(tag: str) -> str:
    """
    Normalize and validate a single tag.

    Args:
        tag: The tag string to validate.

    Returns:
        The normalized tag (lowercase, trimmed).

    Raises:
        ValueError: If tag is empty or has invalid format.
    """
    normalized = tag.lower().strip()
    if not normalized:
        raise ValueError("Tag name cannot be empty")
    if not TAG_PATTERN.match(normalized):
        raise ValueError(
            f"Invalid tag format: '{normalized}'. "
            "Use lowercase letters, numbers, and hyphens only (e.g., 'machine-learning').",
        )
    return normalized


def validate_and_normalize_tags(tags: list[str]) -> list[str]:
    """
    Normalize and validate a list of tags.

    Empty strings are skipped silently and duplicates (after normalization)
    are dropped, keeping the first occurrence.

    Raises:
        ValueError: If any tag has invalid format.
    """
    normalized: list[str] = []
    for tag in tags:
        trimmed = tag.lower().strip()
        if not trimmed:
            continue
        name = validate_and_normalize_tag(trimmed)
        if name not in normalized:
            normalized.append(name)
    return normalized


def validate_url(url: str) -> str:
    """Validate that a bookmark URL looks like an absolute URL."""
    url = url.strip()
    if not URL_PATTERN.match(url):
        raise ValueError(f"Invalid URL: '{url}'")
    return url


def validate_title(title: str) -> str:
    """Validate that a title is not blank and not too long."""
    title = title.strip()
    if not title:
        raise ValueError("Title cannot be empty")
    settings = get_settings()
    if len(title) > settings.max_title_length:
        raise ValueError(
            f"Title exceeds maximum length of {settings.max_title_length:,} characters "
            f"(got {len(title):,} characters).",
        )
    return title
