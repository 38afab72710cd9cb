"""Corpus store: the source of the pages that get indexed."""

import asyncio
import logging
import sqlite3
import threading
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Protocol

from page_search.indexer.models import SourceDocument

logger = logging.getLogger(__name__)

PAGES_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS pages (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    path             TEXT NOT NULL,
    locale_code      TEXT NOT NULL,
    title            TEXT NOT NULL DEFAULT '',
    description      TEXT NOT NULL DEFAULT '',
    rendered_content TEXT NOT NULL DEFAULT '',
    is_published     INTEGER NOT NULL DEFAULT 1,
    is_private       INTEGER NOT NULL DEFAULT 0,
    UNIQUE (path, locale_code)
);

CREATE INDEX IF NOT EXISTS idx_pages_visibility ON pages(is_published, is_private);
"""


class PageStore(Protocol):
    """Anything that can stream the pages eligible for indexing."""

    def stream_eligible_pages(self) -> AsyncIterator[SourceDocument]:
        """Yield published, non-private pages in a stable order."""
        ...


class SQLitePageStore:
    """Reads pages from a ``pages`` table in a SQLite database.

    Pages are streamed with keyset pagination (``id > last_id``), one batch
    per query, so the corpus is never held in memory and no read cursor
    stays open while the index is being written.
    """

    def __init__(self, db_path: Path, batch_size: int = 100):
        if batch_size < 1:
            raise ValueError(f"Batch size must be positive, got {batch_size}")
        self.db_path = db_path
        self.batch_size = batch_size
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def _get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode = WAL")
        return self._conn

    def initialize(self) -> None:
        """Create the pages table if it does not exist."""
        with self._lock:
            self._get_connection().executescript(PAGES_SCHEMA_SQL)

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def _fetch_batch(self, after_id: int) -> list[sqlite3.Row]:
        with self._lock:
            cursor = self._get_connection().execute(
                """SELECT id, path, locale_code, title, description, rendered_content,
                    is_published, is_private
                FROM pages
                WHERE is_published = 1 AND is_private = 0 AND id > ?
                ORDER BY id
                LIMIT ?""",
                (after_id, self.batch_size),
            )
            try:
                return cursor.fetchall()
            finally:
                cursor.close()

    async def stream_eligible_pages(self) -> AsyncIterator[SourceDocument]:
        last_id = 0
        while True:
            rows = await asyncio.to_thread(self._fetch_batch, last_id)
            if not rows:
                return
            logger.debug("Fetched %d pages after id %d", len(rows), last_id)
            for row in rows:
                yield SourceDocument(
                    path=row["path"],
                    locale_code=row["locale_code"],
                    title=row["title"],
                    description=row["description"],
                    rendered_content=row["rendered_content"],
                    is_published=bool(row["is_published"]),
                    is_private=bool(row["is_private"]),
                )
            last_id = rows[-1]["id"]
