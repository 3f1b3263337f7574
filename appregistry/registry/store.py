"""The app registry: process-wide owner of every ``AppRecord``.

The registry maps slug -> record, iterates in ``sequence`` order, and
serializes "resolve candidate slug -> insert" behind a single lock so two
concurrent registrations of the same title can never both claim the same
slug.

Persisted form (JSON)::

    {
      "version": 1,
      "last_sequence": 2,
      "apps": {
        "build-me-a": {"title": "BUILD me a", "description": "...", "sequence": 1},
        "buldmea":    {"title": "BULDMEA",    "description": "...", "sequence": 2}
      }
    }
"""

from __future__ import annotations

import json
import threading
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..utils import load_json
from .bounder import DEFAULT_DESCRIPTION_MAX_CHARS, ensure_bounded
from .builder import build_record
from .exceptions import AppNotFound, RegistryCorruption, StaleRecord
from .models import AppRecord

FORMAT_VERSION = 1
ENTRY_FIELDS = frozenset({"title", "description", "sequence"})


class Registry:
    """Thread-safe mapping of slug to immutable ``AppRecord``.

    Records are never edited after insertion.  A different title needs a new
    registration; removal happens only through :meth:`deregister`.  The
    sequence counter only moves forward, so sequences freed by
    deregistration are not handed out again.
    """

    def __init__(
        self,
        records: Iterable[AppRecord] = (),
        *,
        last_sequence: int = 0,
        max_description_chars: int = DEFAULT_DESCRIPTION_MAX_CHARS,
    ) -> None:
        self.max_description_chars = max_description_chars
        self._records: dict[str, AppRecord] = {}
        self._lock = threading.RLock()
        self._last_sequence = 0

        seen_sequences: set[int] = set()
        for record in sorted(records, key=lambda r: r.sequence):
            if record.slug in self._records:
                raise RegistryCorruption(f"Duplicate slug '{record.slug}' found in registry.")
            if record.sequence in seen_sequences:
                raise RegistryCorruption(
                    f"Sequence {record.sequence} is assigned to more than one app."
                )
            seen_sequences.add(record.sequence)
            self._records[record.slug] = record
            self._last_sequence = record.sequence

        # 0 means "not recorded"; derive the counter from the records.
        if last_sequence and last_sequence < self._last_sequence:
            raise RegistryCorruption(
                f"last_sequence {last_sequence} is behind the highest record "
                f"sequence {self._last_sequence}."
            )
        self._last_sequence = max(self._last_sequence, last_sequence)

    # -- Read access -------------------------------------------------------

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, slug: object) -> bool:
        return slug in self._records

    def __iter__(self) -> Iterator[str]:
        """Iterate slugs in ``sequence`` order."""
        return iter(self.slugs())

    def get(self, slug: str) -> AppRecord | None:
        return self._records.get(slug)

    def __getitem__(self, slug: str) -> AppRecord:
        try:
            return self._records[slug]
        except KeyError:
            raise AppNotFound(slug) from None

    def records(self) -> list[AppRecord]:
        """Return every record, ordered by ``sequence``."""
        with self._lock:
            return sorted(self._records.values(), key=lambda r: r.sequence)

    def slugs(self) -> list[str]:
        """Return every registered slug, ordered by ``sequence``."""
        return [record.slug for record in self.records()]

    @property
    def last_sequence(self) -> int:
        return self._last_sequence

    def next_sequence(self) -> int:
        """The sequence the next inserted record will receive."""
        return self._last_sequence + 1

    # -- Mutation ----------------------------------------------------------

    def preview(self, raw_title: str, raw_description: str) -> AppRecord:
        """Build the record a registration would produce, without committing it."""
        with self._lock:
            return build_record(
                raw_title,
                raw_description,
                self,
                max_chars=self.max_description_chars,
            )

    def insert(self, record: AppRecord) -> AppRecord:
        """Commit a record previously obtained from ``build_record``/``preview``.

        Raises:
            TextBoundViolation: If the description exceeds this registry's budget.
            StaleRecord: If the slug was claimed, or the sequence counter moved
                past the record's sequence, since the record was built.
        """
        ensure_bounded(record.description, self.max_description_chars)
        with self._lock:
            if record.slug in self._records:
                raise StaleRecord(record.slug, "slug is already registered")
            if record.sequence <= self._last_sequence:
                raise StaleRecord(
                    record.slug,
                    f"sequence {record.sequence} is not after {self._last_sequence}",
                )
            self._records[record.slug] = record
            self._last_sequence = record.sequence
            return record

    def register(self, raw_title: str, raw_description: str) -> AppRecord:
        """Build and insert a record as one atomic step.

        Raises:
            InvalidTitle: If the title normalizes to an empty slug.  The
                registry is left unchanged.
        """
        with self._lock:
            record = self.preview(raw_title, raw_description)
            return self.insert(record)

    def deregister(self, slug: str) -> AppRecord:
        """Remove and return the record registered under *slug*."""
        with self._lock:
            try:
                return self._records.pop(slug)
            except KeyError:
                raise AppNotFound(slug) from None

    # -- Persistence -------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted JSON structure, apps ordered by sequence."""
        with self._lock:
            return {
                "version": FORMAT_VERSION,
                "last_sequence": self._last_sequence,
                "apps": {record.slug: record.to_entry() for record in self.records()},
            }

    @classmethod
    def from_dict(
        cls,
        data: Any,
        *,
        max_description_chars: int = DEFAULT_DESCRIPTION_MAX_CHARS,
    ) -> "Registry":
        """Rebuild a registry from :meth:`to_dict` output.

        Raises:
            RegistryCorruption: If *data* is not an object, on an unknown
                format version, a malformed entry or counter, or a broken
                uniqueness/ordering invariant.
        """
        if not isinstance(data, dict):
            raise RegistryCorruption(
                f"Registry root must be an object, got {type(data).__name__}."
            )

        version = data.get("version", FORMAT_VERSION)
        if version != FORMAT_VERSION:
            raise RegistryCorruption(f"Unsupported registry format version: {version!r}")

        last_sequence = data.get("last_sequence", 0)
        # bool is an int subclass; true/false is not a counter
        if (
            not isinstance(last_sequence, int)
            or isinstance(last_sequence, bool)
            or last_sequence < 0
        ):
            raise RegistryCorruption(
                f"Registry 'last_sequence' must be a non-negative integer, got {last_sequence!r}."
            )

        apps = data.get("apps", {})
        if not isinstance(apps, dict):
            raise RegistryCorruption("Registry 'apps' must be a mapping of slug to entry.")

        records: list[AppRecord] = []
        for slug, entry in apps.items():
            if not isinstance(entry, dict):
                raise RegistryCorruption(f"Entry for '{slug}' is not an object.")
            unexpected = set(entry) - ENTRY_FIELDS
            if unexpected:
                raise RegistryCorruption(
                    f"Entry for '{slug}' has unexpected fields: {', '.join(sorted(unexpected))}"
                )
            try:
                records.append(AppRecord.from_entry(slug, entry))
            except ValidationError as exc:
                raise RegistryCorruption(f"Invalid entry for '{slug}': {exc}") from exc

        return cls(
            records,
            last_sequence=last_sequence,
            max_description_chars=max_description_chars,
        )

    @classmethod
    def load(
        cls,
        path: str | Path,
        *,
        max_description_chars: int = DEFAULT_DESCRIPTION_MAX_CHARS,
    ) -> "Registry":
        """Load a registry file; a missing file yields an empty registry."""
        file_path = Path(path)
        if not file_path.exists():
            return cls(max_description_chars=max_description_chars)
        try:
            data = load_json(file_path, object_pairs_hook=_reject_duplicate_keys)
        except json.JSONDecodeError as exc:
            raise RegistryCorruption(f"Registry file {file_path} is not valid JSON: {exc}") from exc
        return cls.from_dict(data, max_description_chars=max_description_chars)


def _reject_duplicate_keys(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    """``json`` object hook that refuses objects with a repeated key."""
    result: dict[str, Any] = {}
    for key, value in pairs:
        if key in result:
            raise RegistryCorruption(f"Duplicate key '{key}' in registry file.")
        result[key] = value
    return result
