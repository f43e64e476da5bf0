"""URL slug generation for organization names."""

import re

MAX_SLUG_LENGTH = 50

_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHEN_RUNS = re.compile(r"-+")

# Registration accepts a caller-chosen slug; it must already be in this shape.
SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")


def generate_slug(name: str) -> str:
    """Derive a URL-safe slug from a human-readable name.

    Lower-cases the name, drops everything except letters, digits, whitespace
    and hyphens, turns whitespace runs into single hyphens, collapses repeated
    hyphens, trims hyphens from both ends and truncates to 50 characters.

    Examples:
        >>> generate_slug("Acme, Inc.!!")
        'acme-inc'
        >>> generate_slug("  A   B  ")
        'a-b'
    """
    slug = _DISALLOWED.sub("", name.lower())
    slug = _WHITESPACE.sub("-", slug.strip())
    slug = _HYPHEN_RUNS.sub("-", slug).strip("-")
    return slug[:MAX_SLUG_LENGTH].rstrip("-")
