"""Slug collision resolution against the set of registered slugs."""

from __future__ import annotations

from collections.abc import Iterable

from .exceptions import RegistryCorruption

FIRST_SUFFIX = 2


def resolve(candidate: str, existing: Iterable[str]) -> str:
    """Return *candidate*, or the first free ``candidate-N`` for N = 2, 3, ...

    Existing records are never renamed or evicted; uniqueness is obtained only
    by suffixing the newcomer.  The loop always terminates because *existing*
    is finite.

    Args:
        candidate: A normalized slug candidate.
        existing: The slugs currently registered.  A ``Registry`` can be
            passed directly; iterating it yields its records' slugs.

    Raises:
        RegistryCorruption: If *existing* contains the same slug twice.
    """
    taken: set[str] = set()
    for slug in existing:
        if slug in taken:
            raise RegistryCorruption(f"Duplicate slug '{slug}' found in registry.")
        taken.add(slug)

    if candidate not in taken:
        return candidate

    counter = FIRST_SUFFIX
    while True:
        suffixed = f"{candidate}-{counter}"
        if suffixed not in taken:
            return suffixed
        counter += 1
