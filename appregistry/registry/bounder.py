"""Fixed-budget truncation for free-text metadata fields."""

from __future__ import annotations

from .exceptions import TextBoundViolation

DEFAULT_DESCRIPTION_MAX_CHARS = 62


def bound(text: str, max_chars: int = DEFAULT_DESCRIPTION_MAX_CHARS) -> str:
    """Return *text* cut to at most *max_chars* characters.

    The cut is hard: no word-boundary search and no ellipsis marker, so a
    description may end mid-word.  Text already within budget is returned
    unchanged.

    Raises:
        ValueError: If *max_chars* is negative.
    """
    if max_chars < 0:
        raise ValueError("max_chars must be >= 0")
    if len(text) <= max_chars:
        return text
    return text[:max_chars]


def ensure_bounded(text: str, max_chars: int = DEFAULT_DESCRIPTION_MAX_CHARS) -> str:
    """Check that a caller-supplied, pre-bounded *text* respects the budget.

    Returns the text unchanged so the call can be used inline.

    Raises:
        TextBoundViolation: If ``len(text) > max_chars``.
    """
    if len(text) > max_chars:
        raise TextBoundViolation(len(text), max_chars)
    return text
