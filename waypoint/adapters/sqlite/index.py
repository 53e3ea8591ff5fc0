"""
SQLite search index.

Holds document snapshots of store items in its own tables, with SQL indexes
on field (name, value) pairs and on ancestor ids so filtered queries do not
scan every document.

The index only changes when sync() or rebuild() runs, so it trails the
store between syncs. sync() replays the store's item_history from the last
processed entry.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, Protocol
from uuid import UUID

from waypoint.core.entities import IndexDocument, Item
from waypoint.core.ports import FieldEquals, HasTemplate, InCollection, IndexFilter

from .store import CHILDREN_DELETED, HistoryEntry, dict_factory

logger = logging.getLogger(__name__)

LAST_SEQ_KEY = "last_history_seq"


class HistorySourcePort(Protocol):
    """Store side of index synchronisation."""

    def get(self, item_id: UUID) -> Item | None: ...

    def get_all(self) -> list[Item]: ...

    def history_since(self, seq: int) -> list[HistoryEntry]: ...

    def last_history_seq(self) -> int: ...


def _compile(filters: tuple[IndexFilter, ...]) -> tuple[str, list[str]]:
    """Translate filters into a WHERE clause and its parameters."""
    clauses: list[str] = []
    params: list[str] = []

    for f in filters:
        if isinstance(f, InCollection):
            clauses.append(
                "d.item_id IN (SELECT item_id FROM search_document_paths "
                "WHERE ancestor_id = ? AND item_id != ancestor_id)"
            )
            params.append(str(f.collection_id))
        elif isinstance(f, HasTemplate):
            clauses.append("d.template_id = ?")
            params.append(str(f.template_id))
        elif isinstance(f, FieldEquals):
            clauses.append(
                "d.item_id IN (SELECT item_id FROM search_document_fields "
                "WHERE name = ? AND value = ?)"
            )
            params.extend([f.name, f.value])
        else:
            raise ValueError(f"Unknown filter type: {type(f)}")

    where = " AND ".join(clauses) if clauses else "1 = 1"
    return where, params


class SQLiteSearchIndex:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    @staticmethod
    def _map_row(row: dict[str, Any]) -> IndexDocument:
        return IndexDocument(
            item_id=UUID(row["item_id"]),
            template_id=UUID(row["template_id"]) if row["template_id"] else None,
            paths=tuple(UUID(p) for p in row["paths"].split("/") if p),
            fields=json.loads(row["fields_json"]),
        )

    # --- Queries ---

    def query(self, *filters: IndexFilter) -> list[IndexDocument]:
        where, params = _compile(filters)
        conn = self._get_conn()
        try:
            rows = conn.execute(
                f"SELECT d.* FROM search_documents d WHERE {where}", params
            ).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            conn.close()

    def count(self) -> int:
        conn = self._get_conn()
        try:
            return conn.execute("SELECT COUNT(*) AS n FROM search_documents").fetchone()["n"]
        finally:
            conn.close()

    def last_seq(self) -> int:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT value FROM search_index_state WHERE key = ?", (LAST_SEQ_KEY,)
            ).fetchone()
            return row["value"] if row else 0
        finally:
            conn.close()

    # --- Writes ---

    def _put(self, conn: sqlite3.Connection, document: IndexDocument) -> None:
        item_id = str(document.item_id)
        conn.execute("DELETE FROM search_documents WHERE item_id = ?", (item_id,))
        conn.execute(
            "INSERT INTO search_documents (item_id, template_id, paths, fields_json) "
            "VALUES (?, ?, ?, ?)",
            (
                item_id,
                str(document.template_id) if document.template_id else None,
                "/".join(str(p) for p in document.paths),
                json.dumps(document.fields),
            ),
        )
        conn.executemany(
            "INSERT INTO search_document_paths (item_id, ancestor_id) VALUES (?, ?)",
            [(item_id, str(p)) for p in set(document.paths)],
        )
        conn.executemany(
            "INSERT INTO search_document_fields (item_id, name, value) VALUES (?, ?, ?)",
            [(item_id, name, value) for name, value in document.fields.items()],
        )

    def _remove_subtree(
        self, conn: sqlite3.Connection, item_id: UUID, include_self: bool = True
    ) -> None:
        sql = (
            "DELETE FROM search_documents WHERE item_id IN "
            "(SELECT item_id FROM search_document_paths WHERE ancestor_id = ?)"
        )
        if not include_self:
            sql += " AND item_id != ?"
            conn.execute(sql, (str(item_id), str(item_id)))
        else:
            conn.execute(sql, (str(item_id),))

    def _set_last_seq(self, conn: sqlite3.Connection, seq: int) -> None:
        conn.execute(
            "INSERT INTO search_index_state (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
            (LAST_SEQ_KEY, seq),
        )

    def add(self, document: IndexDocument) -> None:
        conn = self._get_conn()
        try:
            self._put(conn, document)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def remove(self, item_id: UUID) -> None:
        """Remove a document and every document below it."""
        conn = self._get_conn()
        try:
            self._remove_subtree(conn, item_id)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    # --- Synchronisation ---

    @staticmethod
    def _paths(store: HistorySourcePort, item: Item) -> tuple[UUID, ...] | None:
        """Ancestor ids root first, ending with the item; None if detached."""
        paths = [item.id]
        parent_id = item.parent_id
        while parent_id is not None:
            if parent_id in paths:
                raise ValueError(f"Cycle in item tree at {parent_id}")
            parent = store.get(parent_id)
            if parent is None:
                return None
            paths.append(parent.id)
            parent_id = parent.parent_id
        return tuple(reversed(paths))

    def _document(self, store: HistorySourcePort, item: Item) -> IndexDocument | None:
        paths = self._paths(store, item)
        if paths is None:
            return None
        return IndexDocument(
            item_id=item.id,
            template_id=item.template_id,
            paths=paths,
            fields=dict(item.fields),
        )

    def sync(self, store: HistorySourcePort) -> int:
        """
        Apply store changes made since the last sync.

        Returns:
            Number of history entries applied.
        """
        entries = store.history_since(self.last_seq())
        if not entries:
            return 0

        conn = self._get_conn()
        try:
            for entry in entries:
                if entry.action == CHILDREN_DELETED:
                    self._remove_subtree(conn, entry.item_id, include_self=False)
                    continue

                item = store.get(entry.item_id)
                document = self._document(store, item) if item is not None else None
                if document is None:
                    self._remove_subtree(conn, entry.item_id)
                else:
                    self._put(conn, document)

            self._set_last_seq(conn, entries[-1].seq)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

        logger.info("Index synced %d change(s) up to #%d", len(entries), entries[-1].seq)
        return len(entries)

    def rebuild(self, store: HistorySourcePort) -> int:
        """
        Re-index every live item from scratch.

        Returns:
            Number of documents indexed.
        """
        seq = store.last_history_seq()
        items = store.get_all()

        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM search_documents")
            indexed = 0
            for item in items:
                document = self._document(store, item)
                if document is not None:
                    self._put(conn, document)
                    indexed += 1
            self._set_last_seq(conn, seq)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

        logger.info("Index rebuilt with %d document(s)", indexed)
        return indexed
