"""
SQLite item store tests.

Runs against a migrated temporary database.
"""

from __future__ import annotations

from pathlib import Path
from uuid import uuid4

import pytest

from waypoint.adapters.sqlite.migrator import SQLiteMigrator
from waypoint.adapters.sqlite.store import CHILDREN_DELETED, SQLiteItemStore
from waypoint.components.redirects import derive_item_name
from waypoint.core.entities import MAX_ITEM_NAME_LENGTH

TEMPLATE_ID = uuid4()


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    path = str(tmp_path / "store.db")
    SQLiteMigrator(path).run_migrations()
    return path


@pytest.fixture
def store(db_path: str) -> SQLiteItemStore:
    return SQLiteItemStore(db_path)


@pytest.fixture
def root_id(store: SQLiteItemStore):
    item_id = uuid4()
    store.ensure_root(item_id, "root")
    return item_id


class TestMigrator:
    def test_applies_each_migration_once(self, tmp_path: Path) -> None:
        path = str(tmp_path / "fresh.db")
        migrator = SQLiteMigrator(path)

        first = migrator.run_migrations()
        second = migrator.run_migrations()

        assert first == ["0001_items.sql", "0002_search_index.sql"]
        assert second == []

    def test_failed_migration_raises(self, tmp_path: Path) -> None:
        migrations = tmp_path / "migrations"
        migrations.mkdir()
        (migrations / "0001_broken.sql").write_text("CREATE TABLEX nope;")

        with pytest.raises(RuntimeError, match="0001_broken.sql"):
            SQLiteMigrator(str(tmp_path / "x.db"), str(migrations)).run_migrations()

    def test_down_section_is_ignored(self, tmp_path: Path) -> None:
        migrations = tmp_path / "migrations"
        migrations.mkdir()
        (migrations / "0001_t.sql").write_text(
            "-- Up\nCREATE TABLE t (id INTEGER);\n-- Down\nDROP TABLE t;\n"
        )
        path = str(tmp_path / "x.db")

        SQLiteMigrator(path, str(migrations)).run_migrations()

        store_conn = SQLiteItemStore(path)._get_conn()
        try:
            row = store_conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' AND name = 't'"
            ).fetchone()
        finally:
            store_conn.close()
        assert row == {"name": "t"}


class TestEnsureRoot:
    def test_creates_once(self, store: SQLiteItemStore) -> None:
        item_id = uuid4()

        store.ensure_root(item_id, "redirects")
        store.ensure_root(item_id, "redirects")

        item = store.get(item_id)
        assert item is not None
        assert item.parent_id is None
        assert item.name == "redirects"
        assert store.last_history_seq() == 1


class TestCreateAndGet:
    def test_round_trip(self, store: SQLiteItemStore, root_id) -> None:
        item_id = store.create(root_id, "page", TEMPLATE_ID, {"title": "Hello"})

        item = store.get(item_id)

        assert item is not None
        assert item.parent_id == root_id
        assert item.name == "page"
        assert item.template_id == TEMPLATE_ID
        assert item.fields == {"title": "Hello"}

    def test_get_unknown_returns_none(self, store: SQLiteItemStore) -> None:
        assert store.get(uuid4()) is None

    def test_name_collision_gets_suffix(self, store: SQLiteItemStore, root_id) -> None:
        first = store.create(root_id, "page", TEMPLATE_ID, {})
        second = store.create(root_id, "page", TEMPLATE_ID, {})
        third = store.create(root_id, "page", TEMPLATE_ID, {})

        names = [store.get(i).name for i in (first, second, third)]

        assert names == ["page", "page-2", "page-3"]

    def test_same_name_under_other_parent_is_kept(
        self, store: SQLiteItemStore, root_id
    ) -> None:
        other_root = uuid4()
        store.ensure_root(other_root, "other")

        store.create(root_id, "page", TEMPLATE_ID, {})
        item_id = store.create(other_root, "page", TEMPLATE_ID, {})

        assert store.get(item_id).name == "page"

    def test_suffixed_name_stays_within_limit(self, store: SQLiteItemStore, root_id) -> None:
        name = derive_item_name("website", "/" + "a" * 200)
        assert name == derive_item_name("website", "/" + "a" * 199 + ".")

        first = store.create(root_id, name, TEMPLATE_ID, {})
        second = store.create(root_id, name, TEMPLATE_ID, {})
        third = store.create(root_id, name, TEMPLATE_ID, {})

        names = [store.get(i).name for i in (first, second, third)]
        assert names[0] == name
        assert names[1].endswith("-2")
        assert names[2].endswith("-3")
        assert all(len(n) <= MAX_ITEM_NAME_LENGTH for n in names)
        assert len(set(names)) == 3

    def test_recycled_sibling_frees_name(self, store: SQLiteItemStore, root_id) -> None:
        first = store.create(root_id, "page", TEMPLATE_ID, {})
        store.soft_delete(first)

        second = store.create(root_id, "page", TEMPLATE_ID, {})

        assert store.get(second).name == "page"

    def test_get_children_sorted_by_name(self, store: SQLiteItemStore, root_id) -> None:
        store.create(root_id, "b", TEMPLATE_ID, {})
        store.create(root_id, "a", TEMPLATE_ID, {})

        assert [i.name for i in store.get_children(root_id)] == ["a", "b"]


class TestUpdate:
    def test_merges_fields(self, store: SQLiteItemStore, root_id) -> None:
        item_id = store.create(root_id, "page", TEMPLATE_ID, {"a": "1", "b": "2"})

        store.update(item_id, {"b": "3", "c": "4"})

        assert store.get(item_id).fields == {"a": "1", "b": "3", "c": "4"}

    def test_unknown_item_records_nothing(self, store: SQLiteItemStore) -> None:
        before = store.last_history_seq()

        store.update(uuid4(), {"a": "1"})

        assert store.last_history_seq() == before


class TestDeletes:
    def test_soft_delete_recycles_subtree(self, store: SQLiteItemStore, root_id) -> None:
        parent = store.create(root_id, "parent", TEMPLATE_ID, {})
        child = store.create(parent, "child", TEMPLATE_ID, {})

        store.soft_delete(parent)

        assert store.get(parent) is None
        assert store.get(child) is None
        assert {i.id for i in store.get_recycled()} == {parent, child}

    def test_restore_brings_subtree_back(self, store: SQLiteItemStore, root_id) -> None:
        parent = store.create(root_id, "parent", TEMPLATE_ID, {})
        child = store.create(parent, "child", TEMPLATE_ID, {})
        store.soft_delete(parent)
        seq = store.last_history_seq()

        store.restore(parent)

        assert store.get(parent) is not None
        assert store.get(child) is not None
        restored = {e.item_id for e in store.history_since(seq)}
        assert restored == {parent, child}

    def test_restore_renames_when_name_was_reused(
        self, store: SQLiteItemStore, root_id
    ) -> None:
        first = store.create(root_id, "website--old", TEMPLATE_ID, {"old_url": "/old"})
        store.soft_delete(first)
        second = store.create(root_id, "website--old", TEMPLATE_ID, {"old_url": "/old"})

        store.restore(first)

        assert store.get(second).name == "website--old"
        restored = store.get(first)
        assert restored is not None
        assert restored.name == "website--old-2"
        assert restored.fields == {"old_url": "/old"}
        assert store.get_recycled() == []

    def test_restore_keeps_name_when_free(self, store: SQLiteItemStore, root_id) -> None:
        item_id = store.create(root_id, "page", TEMPLATE_ID, {})
        store.soft_delete(item_id)

        store.restore(item_id)

        assert store.get(item_id).name == "page"

    def test_hard_delete_cascades(self, store: SQLiteItemStore, root_id) -> None:
        parent = store.create(root_id, "parent", TEMPLATE_ID, {})
        child = store.create(parent, "child", TEMPLATE_ID, {})

        store.hard_delete(parent)

        assert store.get(parent) is None
        assert store.get(child) is None
        assert store.get_recycled() == []

    def test_delete_children_keeps_parent(self, store: SQLiteItemStore, root_id) -> None:
        store.create(root_id, "a", TEMPLATE_ID, {})
        store.create(root_id, "b", TEMPLATE_ID, {})

        store.delete_children(root_id)

        assert store.get(root_id) is not None
        assert store.get_children(root_id) == []
        last = store.history_since(store.last_history_seq() - 1)
        assert [(e.item_id, e.action) for e in last] == [(root_id, CHILDREN_DELETED)]


class TestHistory:
    def test_every_write_is_recorded_in_order(self, store: SQLiteItemStore, root_id) -> None:
        item_id = store.create(root_id, "page", TEMPLATE_ID, {})
        store.update(item_id, {"a": "1"})
        store.soft_delete(item_id)

        actions = [(e.item_id, e.action) for e in store.history_since(0)]

        assert actions == [
            (root_id, "created"),
            (item_id, "created"),
            (item_id, "updated"),
            (item_id, "recycled"),
        ]
