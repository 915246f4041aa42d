"""Slug generation for store URLs.

A slug is derived from the store name with python-slugify (lowercase,
transliterated to ASCII, separators collapsed to single hyphens), after
dropping apostrophes so "Joe's Pizza" becomes `joes-pizza`.

Collisions are resolved by counting existing slugs that share the base
(`base`, `base-2`, `base-3`, ...) and suffixing `-<count + 1>`.
Counting is not atomic: two concurrent writers with the same base name can
end up with the same slug.
"""

from collections.abc import Iterable
import re

from slugify import slugify

# Used when a name has no sluggable characters (e.g. "!!!" or emoji only)
FALLBACK_SLUG = "store"

APOSTROPHES = [["'", ""], ["’", ""], ["‘", ""]]


def slugify_name(value: str) -> str:
    """Normalize a display name into a URL-safe slug.

    Example:
        >>> slugify_name("Joe's Pizza")
        'joes-pizza'
    """
    if not value:
        return ""
    return slugify(value, replacements=APOSTROPHES)


def base_slug(name: str) -> str:
    """Slug for `name` before collision suffixing; never empty."""
    return slugify_name(name) or FALLBACK_SLUG


def slug_pattern(base: str) -> re.Pattern[str]:
    """Case-insensitive pattern matching `base` and its numbered variants."""
    return re.compile(rf"^({re.escape(base)})((-[0-9]*$)?)$", re.IGNORECASE)


def compute_slug(existing_slugs: Iterable[str | None], name: str) -> str:
    """Compute the slug for `name` given the slugs already in use.

    Args:
        existing_slugs: Slugs of the other stores (any superset of the ones
            sharing the base is fine; non-matching values are ignored).
        name: Candidate store name.

    Returns:
        `base` if nothing matches, otherwise `base-<matches + 1>`.
    """
    base = base_slug(name)
    pattern = slug_pattern(base)
    matches = sum(1 for slug in existing_slugs if slug and pattern.match(slug))
    if matches:
        return f"{base}-{matches + 1}"
    return base
