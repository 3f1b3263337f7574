"""Tests for the registry (appregistry.registry.store).

Tests cover:
- register / preview / insert / deregister
- sequence ordering and monotonicity
- StaleRecord and TextBoundViolation on insert
- concurrent registration of the same title
- to_dict / from_dict / load persistence and corruption detection
"""

from __future__ import annotations

import json
import threading
from pathlib import Path

import pytest

from appregistry.registry import (
    AppNotFound,
    AppRecord,
    InvalidTitle,
    Registry,
    RegistryCorruption,
    StaleRecord,
    TextBoundViolation,
)

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


class TestRegister:
    def test_register_inserts(self, empty_registry: Registry):
        record = empty_registry.register("BUILD me a", "a log tool")
        assert record.slug == "build-me-a"
        assert empty_registry["build-me-a"] == record
        assert len(empty_registry) == 1

    def test_same_title_twice_gets_distinct_slugs(self, empty_registry: Registry):
        first = empty_registry.register("BUILD me a", "one")
        second = empty_registry.register("build ME a!", "two")
        assert first.slug == "build-me-a"
        assert second.slug == "build-me-a-2"
        assert second.sequence == first.sequence + 1

    def test_third_collision(self, empty_registry: Registry):
        slugs = [empty_registry.register("App", "").slug for _ in range(3)]
        assert slugs == ["app", "app-2", "app-3"]

    def test_invalid_title_leaves_registry_unchanged(self, populated_registry: Registry):
        before = populated_registry.to_dict()
        with pytest.raises(InvalidTitle):
            populated_registry.register("...", "description")
        assert populated_registry.to_dict() == before

    def test_iteration_follows_sequence(self, empty_registry: Registry, sample_prompts):
        for title, description in sample_prompts:
            empty_registry.register(title, description)
        assert list(empty_registry) == ["build-me-a", "buldmea", "is-make-me", "fittrack"]
        assert [r.sequence for r in empty_registry.records()] == [1, 2, 3, 4]

    def test_description_bounded_with_registry_budget(self):
        registry = Registry(max_description_chars=5)
        record = registry.register("App", "abcdefgh")
        assert record.description == "abcde"


class TestPreviewAndInsert:
    def test_preview_does_not_commit(self, empty_registry: Registry):
        record = empty_registry.preview("BUILD me a", "desc")
        assert record.slug == "build-me-a"
        assert "build-me-a" not in empty_registry
        assert empty_registry.next_sequence() == 1

    def test_validate_then_commit(self, empty_registry: Registry):
        record = empty_registry.preview("BUILD me a", "desc")
        assert empty_registry.insert(record) == record
        assert empty_registry.get("build-me-a") == record
        assert empty_registry.last_sequence == 1

    def test_stale_slug(self, empty_registry: Registry):
        preview = empty_registry.preview("App", "")
        empty_registry.register("App", "")
        with pytest.raises(StaleRecord):
            empty_registry.insert(preview)

    def test_stale_sequence(self, empty_registry: Registry):
        preview = empty_registry.preview("First", "")
        empty_registry.register("Second", "")
        with pytest.raises(StaleRecord):
            empty_registry.insert(preview)

    def test_insert_rejects_unbounded_description(self, empty_registry: Registry):
        record = AppRecord(slug="app", title="App", description="x" * 63, sequence=1)
        with pytest.raises(TextBoundViolation):
            empty_registry.insert(record)
        assert len(empty_registry) == 0


class TestDeregister:
    def test_deregister_removes(self, populated_registry: Registry):
        removed = populated_registry.deregister("buldmea")
        assert removed.slug == "buldmea"
        assert "buldmea" not in populated_registry
        assert len(populated_registry) == 2

    def test_unknown_slug(self, populated_registry: Registry):
        with pytest.raises(AppNotFound) as exc_info:
            populated_registry.deregister("nope")
        assert isinstance(exc_info.value, KeyError)

    def test_sequence_not_reused(self, populated_registry: Registry):
        populated_registry.deregister("build-me-a-2")
        record = populated_registry.register("Another", "")
        assert record.sequence == 4

    def test_freed_slug_can_be_registered_again(self, populated_registry: Registry):
        populated_registry.deregister("buldmea")
        assert populated_registry.register("BULDMEA", "").slug == "buldmea"

    def test_getitem_unknown(self, empty_registry: Registry):
        with pytest.raises(AppNotFound):
            empty_registry["missing"]


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------


class TestConcurrency:
    def test_parallel_registrations_never_collide(self, empty_registry: Registry):
        barrier = threading.Barrier(8)
        results: list[AppRecord] = []
        results_lock = threading.Lock()

        def worker() -> None:
            barrier.wait()
            for _ in range(10):
                record = empty_registry.register("Same Title", "")
                with results_lock:
                    results.append(record)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        slugs = [r.slug for r in results]
        assert len(slugs) == 80
        assert len(set(slugs)) == 80
        assert sorted(r.sequence for r in results) == list(range(1, 81))


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class TestPersistence:
    def test_to_dict_layout(self, populated_registry: Registry):
        data = populated_registry.to_dict()
        assert data["version"] == 1
        assert data["last_sequence"] == 3
        assert list(data["apps"]) == ["build-me-a", "buldmea", "build-me-a-2"]
        assert data["apps"]["buldmea"] == {
            "title": "BULDMEA",
            "description": "log analytics",
            "sequence": 2,
        }

    def test_round_trip(self, populated_registry: Registry, tmp_path: Path):
        path = tmp_path / "registry.json"
        path.write_text(json.dumps(populated_registry.to_dict()), encoding="utf-8")
        loaded = Registry.load(path)
        assert loaded.records() == populated_registry.records()
        assert loaded.last_sequence == populated_registry.last_sequence

    def test_round_trip_keeps_counter_after_deregister(self, populated_registry: Registry):
        populated_registry.deregister("build-me-a-2")
        loaded = Registry.from_dict(populated_registry.to_dict())
        assert loaded.next_sequence() == 4

    def test_missing_file_is_empty(self, tmp_path: Path):
        registry = Registry.load(tmp_path / "absent.json")
        assert len(registry) == 0

    def test_duplicate_keys_in_file(self, tmp_path: Path):
        path = tmp_path / "registry.json"
        path.write_text(
            '{"version": 1, "apps": {'
            '"app": {"title": "A", "description": "", "sequence": 1},'
            '"app": {"title": "B", "description": "", "sequence": 2}}}',
            encoding="utf-8",
        )
        with pytest.raises(RegistryCorruption):
            Registry.load(path)

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "registry.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(RegistryCorruption):
            Registry.load(path)

    @pytest.mark.parametrize("raw", ["[]", "null", '"registry"', "3", '[{"slug": "keep-me"}]'])
    def test_non_object_root(self, tmp_path: Path, raw: str):
        path = tmp_path / "registry.json"
        path.write_text(raw, encoding="utf-8")
        with pytest.raises(RegistryCorruption):
            Registry.load(path)

    @pytest.mark.parametrize("value", ["abc", None, [1], 1.7, True, -1])
    def test_malformed_counter(self, value):
        data = {
            "last_sequence": value,
            "apps": {"a": {"title": "A", "description": "", "sequence": 1}},
        }
        with pytest.raises(RegistryCorruption):
            Registry.from_dict(data)

    def test_entry_cannot_rename_its_key(self):
        data = {
            "apps": {"alpha": {"slug": "beta", "title": "A", "description": "", "sequence": 1}}
        }
        with pytest.raises(RegistryCorruption, match="slug"):
            Registry.from_dict(data)

    def test_entry_with_unknown_field(self):
        data = {
            "apps": {"alpha": {"title": "A", "description": "", "sequence": 1, "owner": "x"}}
        }
        with pytest.raises(RegistryCorruption, match="owner"):
            Registry.from_dict(data)

    def test_duplicate_sequence(self):
        data = {
            "apps": {
                "a": {"title": "A", "description": "", "sequence": 1},
                "b": {"title": "B", "description": "", "sequence": 1},
            }
        }
        with pytest.raises(RegistryCorruption):
            Registry.from_dict(data)

    def test_invalid_slug_key(self):
        data = {"apps": {"Not A Slug": {"title": "A", "description": "", "sequence": 1}}}
        with pytest.raises(RegistryCorruption):
            Registry.from_dict(data)

    def test_unknown_version(self):
        with pytest.raises(RegistryCorruption):
            Registry.from_dict({"version": 99, "apps": {}})

    def test_counter_behind_records(self):
        data = {
            "last_sequence": 1,
            "apps": {"a": {"title": "A", "description": "", "sequence": 5}},
        }
        with pytest.raises(RegistryCorruption):
            Registry.from_dict(data)

    def test_missing_counter_derived_from_records(self):
        data = {"apps": {"a": {"title": "A", "description": "", "sequence": 5}}}
        assert Registry.from_dict(data).next_sequence() == 6

    def test_duplicate_records_in_constructor(self):
        record = AppRecord(slug="a", title="A", description="", sequence=1)
        other = AppRecord(slug="a", title="B", description="", sequence=2)
        with pytest.raises(RegistryCorruption):
            Registry([record, other])
