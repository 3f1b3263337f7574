"""Exceptions raised by the app registration core.

Every failure that can leave ``normalize``/``resolve``/``build_record`` or a
``Registry`` operation derives from :class:`RegistrationError`, so callers at
the boundary (CLI, HTTP handler) can catch one type and report it.
"""

from __future__ import annotations


class RegistrationError(Exception):
    """Base class for all registration failures."""


class InvalidTitle(RegistrationError):
    """Raised when a raw title normalizes to an empty slug candidate."""

    def __init__(self, raw_title: str) -> None:
        self.raw_title = raw_title
        super().__init__(
            f"Title {raw_title!r} contains no ASCII letters or digits and cannot be used as an app name."
        )


class RegistryCorruption(RegistrationError):
    """Raised when the registry already violates its unique-key invariant.

    Not recoverable locally; the operator must repair the registry store.
    """


class TextBoundViolation(RegistrationError):
    """Raised when a supposedly bounded text exceeds its character budget."""

    def __init__(self, length: int, max_chars: int) -> None:
        self.length = length
        self.max_chars = max_chars
        super().__init__(
            f"Text of {length} characters exceeds the {max_chars}-character budget."
        )


class StaleRecord(RegistrationError):
    """Raised when a pre-built record can no longer be committed.

    Happens when another registration claimed the slug (or advanced the
    sequence counter) between ``build`` and ``insert``.  Rebuild and retry.
    """

    def __init__(self, slug: str, reason: str) -> None:
        self.slug = slug
        self.reason = reason
        super().__init__(f"Record '{slug}' is stale: {reason}")


class AppNotFound(RegistrationError, KeyError):
    """Raised when an operation names a slug that is not registered."""

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(slug)

    def __str__(self) -> str:
        return f"No app registered under '{self.slug}'."
