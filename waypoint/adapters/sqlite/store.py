"""
SQLite item store.

Items form a tree through parent_id. Every write appends to item_history,
which the search index replays to catch up with the store.

Name collisions among live siblings are resolved by renaming the new (or
restored) item with a numeric suffix: "name", "name-2", "name-3", ...
The base is shortened so a suffixed name never exceeds MAX_ITEM_NAME_LENGTH.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from waypoint.core.entities import MAX_ITEM_NAME_LENGTH, Item

logger = logging.getLogger(__name__)

CHILDREN_DELETED = "children_deleted"


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


@dataclass(frozen=True)
class HistoryEntry:
    seq: int
    item_id: UUID
    action: str


_SUBTREE = """
    WITH RECURSIVE subtree(id) AS (
        SELECT ?
        UNION ALL
        SELECT items.id FROM items JOIN subtree ON items.parent_id = subtree.id
    )
"""


class SQLiteItemStore:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    @staticmethod
    def _now() -> str:
        return datetime.now(UTC).isoformat()

    def _record(self, conn: sqlite3.Connection, item_id: UUID, action: str) -> None:
        conn.execute(
            "INSERT INTO item_history (item_id, action, created_at) VALUES (?, ?, ?)",
            (str(item_id), action, self._now()),
        )

    @staticmethod
    def _map_row(row: dict[str, Any]) -> Item:
        return Item(
            id=UUID(row["id"]),
            parent_id=UUID(row["parent_id"]) if row["parent_id"] else None,
            name=row["name"],
            template_id=UUID(row["template_id"]) if row["template_id"] else None,
            fields=json.loads(row["fields_json"]),
        )

    # --- Reads ---

    def get(self, item_id: UUID) -> Item | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM items WHERE id = ? AND recycled = 0", (str(item_id),)
            ).fetchone()
            return self._map_row(row) if row else None
        finally:
            conn.close()

    def get_children(self, parent_id: UUID) -> list[Item]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM items WHERE parent_id = ? AND recycled = 0 ORDER BY name",
                (str(parent_id),),
            ).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            conn.close()

    def get_all(self) -> list[Item]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM items WHERE recycled = 0").fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            conn.close()

    def get_recycled(self) -> list[Item]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM items WHERE recycled = 1").fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            conn.close()

    def history_since(self, seq: int) -> list[HistoryEntry]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT seq, item_id, action FROM item_history WHERE seq > ? ORDER BY seq",
                (seq,),
            ).fetchall()
            return [HistoryEntry(r["seq"], UUID(r["item_id"]), r["action"]) for r in rows]
        finally:
            conn.close()

    def last_history_seq(self) -> int:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT MAX(seq) AS seq FROM item_history").fetchone()
            return row["seq"] or 0
        finally:
            conn.close()

    # --- Writes ---

    def ensure_root(self, item_id: UUID, name: str, template_id: UUID | None = None) -> Item:
        """Create a top-level item if it does not exist yet."""
        existing = self.get(item_id)
        if existing is not None:
            return existing

        conn = self._get_conn()
        try:
            now = self._now()
            conn.execute(
                """
                INSERT INTO items (id, parent_id, name, template_id, fields_json,
                                   recycled, created_at, updated_at)
                VALUES (?, NULL, ?, ?, '{}', 0, ?, ?)
                ON CONFLICT(id) DO UPDATE SET recycled = 0, updated_at = excluded.updated_at
            """,
                (str(item_id), name, str(template_id) if template_id else None, now, now),
            )
            self._record(conn, item_id, "created")
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

        logger.info("Provisioned root item %s (%s)", item_id, name)
        return Item(id=item_id, parent_id=None, name=name, template_id=template_id)

    def _free_name(self, conn: sqlite3.Connection, parent_id: UUID | None, name: str) -> str:
        """First of name, name-2, name-3, ... not used by a live sibling."""
        if parent_id is None:
            return name
        candidate = name
        suffix = 1
        while conn.execute(
            "SELECT 1 FROM items WHERE parent_id = ? AND name = ? AND recycled = 0",
            (str(parent_id), candidate),
        ).fetchone():
            suffix += 1
            tail = f"-{suffix}"
            candidate = name[: MAX_ITEM_NAME_LENGTH - len(tail)] + tail
        return candidate

    def create(
        self,
        parent_id: UUID,
        name: str,
        template_id: UUID,
        fields: dict[str, str],
    ) -> UUID:
        item_id = uuid4()
        conn = self._get_conn()
        try:
            # Serialise writers so the free-name check and insert cannot interleave
            conn.execute("BEGIN IMMEDIATE")
            final_name = self._free_name(conn, parent_id, name)
            if final_name != name:
                logger.info("Item name %r taken under %s; using %r", name, parent_id, final_name)

            now = self._now()
            conn.execute(
                """
                INSERT INTO items (id, parent_id, name, template_id, fields_json,
                                   recycled, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, 0, ?, ?)
            """,
                (
                    str(item_id),
                    str(parent_id),
                    final_name,
                    str(template_id),
                    json.dumps(fields),
                    now,
                    now,
                ),
            )
            self._record(conn, item_id, "created")
            conn.commit()
            return item_id
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def update(self, item_id: UUID, fields: dict[str, str]) -> None:
        conn = self._get_conn()
        try:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                "SELECT fields_json FROM items WHERE id = ? AND recycled = 0", (str(item_id),)
            ).fetchone()
            if not row:
                conn.rollback()
                return

            merged = json.loads(row["fields_json"])
            merged.update(fields)
            conn.execute(
                "UPDATE items SET fields_json = ?, updated_at = ? WHERE id = ?",
                (json.dumps(merged), self._now(), str(item_id)),
            )
            self._record(conn, item_id, "updated")
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def soft_delete(self, item_id: UUID) -> None:
        conn = self._get_conn()
        try:
            conn.execute("BEGIN IMMEDIATE")
            conn.execute(
                _SUBTREE + "UPDATE items SET recycled = 1, updated_at = ? "
                "WHERE id IN (SELECT id FROM subtree)",
                (str(item_id), self._now()),
            )
            self._record(conn, item_id, "recycled")
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def restore(self, item_id: UUID) -> None:
        """
        Bring an item (and its descendants) back from the recycle bin.

        A restored item whose name was reused by a live sibling in the
        meantime is renamed the same way create() renames.
        """
        conn = self._get_conn()
        try:
            conn.execute("BEGIN IMMEDIATE")
            rows = conn.execute(
                _SUBTREE + "SELECT items.id, items.parent_id, items.name "
                "FROM subtree JOIN items ON items.id = subtree.id",
                (str(item_id),),
            ).fetchall()
            now = self._now()
            for row in rows:
                restored_id = UUID(row["id"])
                parent_id = UUID(row["parent_id"]) if row["parent_id"] else None
                final_name = self._free_name(conn, parent_id, row["name"])
                if final_name != row["name"]:
                    logger.info(
                        "Item name %r taken under %s; restoring %s as %r",
                        row["name"],
                        parent_id,
                        restored_id,
                        final_name,
                    )
                conn.execute(
                    "UPDATE items SET recycled = 0, name = ?, updated_at = ? WHERE id = ?",
                    (final_name, now, row["id"]),
                )
                self._record(conn, restored_id, "restored")
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def hard_delete(self, item_id: UUID) -> None:
        conn = self._get_conn()
        try:
            # Descendants go through ON DELETE CASCADE
            conn.execute("DELETE FROM items WHERE id = ?", (str(item_id),))
            self._record(conn, item_id, "deleted")
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def delete_children(self, parent_id: UUID) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM items WHERE parent_id = ?", (str(parent_id),))
            self._record(conn, parent_id, CHILDREN_DELETED)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
