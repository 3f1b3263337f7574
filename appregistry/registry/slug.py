"""Slug normalization for raw app titles.

Turns an arbitrary user-typed title into the canonical identifier used as the
registry key and as the generated app's directory name::

    normalize("BUILD me a")   -> "build-me-a"
    normalize("is Make me")   -> "is-make-me"
    normalize("BULDMEA")      -> "buldmea"
"""

from __future__ import annotations

import re

from .exceptions import InvalidTitle

_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")
_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def normalize(raw_title: str) -> str:
    """Convert a raw title to a lower-case, hyphen-separated slug.

    Every maximal run of characters outside ``[a-z0-9]`` (after lower-casing)
    becomes a single hyphen, and hyphens at either end are stripped.  Because
    whole runs are replaced at once, doubled separators never produce
    ``--`` in the output.

    Args:
        raw_title: The untrimmed title exactly as the user supplied it.

    Returns:
        A non-empty slug matching ``[a-z0-9]+(-[a-z0-9]+)*``.

    Raises:
        InvalidTitle: If the title has no ASCII letter or digit (e.g. ``"..."``
            or whitespace only).
    """
    slug = _NON_ALNUM_RUN.sub("-", raw_title.lower()).strip("-")
    if not slug:
        raise InvalidTitle(raw_title)
    return slug


def is_valid_slug(value: str) -> bool:
    """Return ``True`` if *value* is already in canonical slug form."""
    return bool(_SLUG_PATTERN.match(value))
