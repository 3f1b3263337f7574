"""Metadata record construction.

``build_record`` composes normalization, collision resolution and bounding
into one validated :class:`AppRecord`.  It never inserts: callers preview the
record first and commit it with ``Registry.insert`` (or use
``Registry.register`` to do both atomically).
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from .bounder import DEFAULT_DESCRIPTION_MAX_CHARS, bound
from .models import AppRecord
from .resolver import resolve
from .slug import normalize


class RegistryView(Protocol):
    """The read-only slice of a registry the builder depends on."""

    def slugs(self) -> Iterable[str]: ...

    def next_sequence(self) -> int: ...


def build_record(
    raw_title: str,
    raw_description: str,
    registry: RegistryView,
    *,
    max_chars: int = DEFAULT_DESCRIPTION_MAX_CHARS,
) -> AppRecord:
    """Build the record a registration of *raw_title* would produce right now.

    Args:
        raw_title: Untrimmed user title.
        raw_description: Untrimmed user description.
        registry: Current registry snapshot (key set and sequence counter).
        max_chars: Description budget.

    Returns:
        A frozen ``AppRecord`` with a slug unused in *registry*.

    Raises:
        InvalidTitle: If the title has no ASCII letter or digit.
        RegistryCorruption: If the registry holds duplicate slugs.
    """
    title = raw_title.strip()
    candidate = normalize(title)
    slug = resolve(candidate, registry.slugs())
    description = bound(raw_description.strip(), max_chars)
    return AppRecord(
        slug=slug,
        title=title,
        description=description,
        sequence=registry.next_sequence(),
    )

