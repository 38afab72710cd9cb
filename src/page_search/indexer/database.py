"""SQLite storage adapter for the full-text page index."""

import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import ClassVar

from page_search.indexer.models import IndexedDocument, PageRename, SearchHit

INDEX_TABLE = "pages_fts"
STAGING_TABLE = "pages_fts_rebuild"

# Column order is part of the persisted layout: path, locale, title, description, content
INDEX_TABLE_SQL = """
CREATE VIRTUAL TABLE {table} USING fts5(
    path,
    locale,
    title,
    description,
    content,
    tokenize = 'unicode61'
)
"""


class Database:
    """SQLite database holding the page index.

    A single connection is shared by every caller and guarded by a lock, so
    the adapter can be driven from worker threads (``asyncio.to_thread``).
    Each write runs in its own transaction and is committed immediately.
    """

    engine_type = "sqlite"
    FTS5_COMPILE_OPTION = "ENABLE_FTS5"

    _ALLOWED_TABLES: ClassVar[set[str]] = {INDEX_TABLE, STAGING_TABLE}

    def __init__(self, db_path: Path):
        """Initialize database handle; the connection is opened lazily."""
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    def _get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode = WAL")
        return self._conn

    @contextmanager
    def _read_cursor(self) -> Iterator[sqlite3.Cursor]:
        """Get a cursor for read operations."""
        with self._lock:
            cursor = self._get_connection().cursor()
            try:
                yield cursor
            finally:
                cursor.close()

    @contextmanager
    def _write_cursor(self) -> Iterator[sqlite3.Cursor]:
        """Get a cursor for write operations, committing on success."""
        with self._lock:
            conn = self._get_connection()
            cursor = conn.cursor()
            try:
                yield cursor
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            finally:
                cursor.close()

    def _table(self, table: str) -> str:
        if table not in self._ALLOWED_TABLES:
            raise ValueError(f"Unknown index table: {table!r}")
        return table

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    # Capability and schema operations

    def supports_full_text_search(self) -> bool:
        """Check whether the linked SQLite library was built with FTS5."""
        with self._read_cursor() as cursor:
            cursor.execute("PRAGMA compile_options")
            options = {row[0] for row in cursor.fetchall()}
        return self.FTS5_COMPILE_OPTION in options

    def has_index_table(self, table: str = INDEX_TABLE) -> bool:
        with self._read_cursor() as cursor:
            cursor.execute(
                "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
                (self._table(table),),
            )
            return cursor.fetchone() is not None

    def create_index_table(self, table: str = INDEX_TABLE) -> None:
        with self._write_cursor() as cursor:
            cursor.execute(INDEX_TABLE_SQL.format(table=self._table(table)))

    def drop_index_table(self, table: str = INDEX_TABLE, missing_ok: bool = False) -> None:
        clause = "IF EXISTS " if missing_ok else ""
        with self._write_cursor() as cursor:
            cursor.execute(f"DROP TABLE {clause}{self._table(table)}")

    def swap_index_table(self, staging: str = STAGING_TABLE, live: str = INDEX_TABLE) -> None:
        """Replace the live table with the staging table in one transaction."""
        staging, live = self._table(staging), self._table(live)
        with self._write_cursor() as cursor:
            cursor.execute("BEGIN")
            cursor.execute(f"DROP TABLE IF EXISTS {live}")
            cursor.execute(f"ALTER TABLE {staging} RENAME TO {live}")

    def truncate(self, table: str = INDEX_TABLE) -> None:
        """Remove every row from an index table."""
        with self._write_cursor() as cursor:
            cursor.execute(f"DELETE FROM {self._table(table)}")

    # Document operations

    def insert_document(self, doc: IndexedDocument, table: str = INDEX_TABLE) -> int:
        """Insert a row; returns the affected row count."""
        with self._write_cursor() as cursor:
            cursor.execute(
                f"""INSERT INTO {self._table(table)}
                (path, locale, title, description, content)
                VALUES (?, ?, ?, ?, ?)""",
                (doc.path, doc.locale, doc.title, doc.description, doc.content),
            )
            return cursor.rowcount

    def update_document(self, doc: IndexedDocument) -> int:
        """Update the searchable fields of the row keyed by (path, locale)."""
        with self._write_cursor() as cursor:
            cursor.execute(
                f"""UPDATE {INDEX_TABLE}
                SET title = ?, description = ?, content = ?
                WHERE path = ? AND locale = ?""",
                (doc.title, doc.description, doc.content, doc.path, doc.locale),
            )
            return cursor.rowcount

    def delete_document(self, path: str, locale: str) -> int:
        """Delete at most one row keyed by (path, locale)."""
        with self._write_cursor() as cursor:
            cursor.execute(
                f"""DELETE FROM {INDEX_TABLE}
                WHERE rowid = (
                    SELECT rowid FROM {INDEX_TABLE}
                    WHERE path = ? AND locale = ?
                    LIMIT 1
                )""",
                (path, locale),
            )
            return cursor.rowcount

    def rename_document(self, rename: PageRename) -> int:
        """Move rows to a new (path, locale) key, keeping their content."""
        with self._write_cursor() as cursor:
            cursor.execute(
                f"""UPDATE {INDEX_TABLE}
                SET path = ?, locale = ?
                WHERE path = ? AND locale = ?""",
                (
                    rename.destination_path,
                    rename.destination_locale_code,
                    rename.path,
                    rename.locale_code,
                ),
            )
            return cursor.rowcount

    def get_document(self, path: str, locale: str) -> IndexedDocument | None:
        """Get the indexed row for (path, locale)."""
        with self._read_cursor() as cursor:
            cursor.execute(
                f"""SELECT path, locale, title, description, content
                FROM {INDEX_TABLE}
                WHERE path = ? AND locale = ?""",
                (path, locale),
            )
            row = cursor.fetchone()
            if row:
                return IndexedDocument(
                    path=row["path"],
                    locale=row["locale"],
                    title=row["title"],
                    description=row["description"],
                    content=row["content"],
                )
            return None

    def count_documents(self, table: str = INDEX_TABLE) -> int:
        with self._read_cursor() as cursor:
            cursor.execute(f"SELECT COUNT(*) FROM {self._table(table)}")
            return cursor.fetchone()[0]

    # Search operations

    def search(self, query: str) -> list[SearchHit]:
        """
        Match ``query`` against the content column, best match first.

        ``query`` uses FTS5 syntax and is passed through unchanged, so a
        malformed expression raises ``sqlite3.OperationalError``.
        """
        with self._read_cursor() as cursor:
            cursor.execute(
                f"""SELECT rowid AS id, path, locale, title, description
                FROM {INDEX_TABLE}
                WHERE content MATCH ?
                ORDER BY rank""",
                (query,),
            )
            return [
                SearchHit(
                    id=row["id"],
                    path=row["path"],
                    locale=row["locale"],
                    title=row["title"],
                    description=row["description"],
                )
                for row in cursor.fetchall()
            ]
