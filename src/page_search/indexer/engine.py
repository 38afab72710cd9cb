"""Search engine: index lifecycle, page hooks, queries and rebuilds."""

import asyncio
import logging
import sqlite3

from page_search.errors import (
    ActivationError,
    CapabilityMissingError,
    IndexSchemaError,
    QueryExecutionError,
    RebuildFailure,
)
from page_search.indexer.database import INDEX_TABLE, STAGING_TABLE, Database
from page_search.indexer.extractor import ContentExtractor, HtmlContentExtractor
from page_search.indexer.models import IndexedDocument, PageRename, QueryResult
from page_search.indexer.pages import PageStore
from page_search.indexer.rebuild import RebuildPipeline

logger = logging.getLogger(__name__)


class SearchEngine:
    """
    Keeps a SQLite FTS5 index in sync with a corpus of pages.

    The host calls ``activate()`` and ``init()`` once at startup, the page
    hooks (``created``, ``updated``, ``deleted``, ``renamed``) on every
    corpus change, and ``rebuild()`` to regenerate the index from scratch.

    Hooks are single statements without cross-document locking: concurrent
    events on the same (path, locale) are last-writer-wins, and ordering is
    the caller's responsibility.
    """

    REQUIRED_ENGINE = "sqlite"

    def __init__(
        self,
        db: Database,
        pages: PageStore,
        extractor: ContentExtractor | None = None,
        rebuild_concurrency: int = 1,
        rebuild_shadow: bool = False,
    ):
        """
        Initialize the engine.

        Args:
            db: Storage adapter that owns the index table
            pages: Corpus store streamed by ``rebuild()``
            extractor: Converts rendered pages to plain text (HTML by default)
            rebuild_concurrency: Maximum documents in flight during a rebuild
            rebuild_shadow: Rebuild into a staging table and swap it in on success
        """
        if rebuild_concurrency < 1:
            raise ValueError(
                f"Rebuild concurrency must be positive, got {rebuild_concurrency}"
            )

        self.db = db
        self.pages = pages
        self.extractor = extractor or HtmlContentExtractor()
        self.rebuild_concurrency = rebuild_concurrency
        self.rebuild_shadow = rebuild_shadow

    # Lifecycle

    async def activate(self) -> None:
        """Check that the storage engine can host the index."""
        if self.db.engine_type != self.REQUIRED_ENGINE:
            raise ActivationError(
                f"Must use a {self.REQUIRED_ENGINE} database to activate this engine, "
                f"got {self.db.engine_type!r}"
            )
        if not await asyncio.to_thread(self.db.supports_full_text_search):
            raise CapabilityMissingError("SQLite must be built with the FTS5 module")
        logger.info("Search engine activated")

    async def init(self) -> None:
        """Create the index table unless it already exists."""
        logger.info("Initializing search index...")
        try:
            if not await asyncio.to_thread(self.db.has_index_table):
                logger.info("Creating index table %s", INDEX_TABLE)
                await asyncio.to_thread(self.db.create_index_table)
        except sqlite3.Error as e:
            raise IndexSchemaError(f"Cannot create index table: {e}") from e
        logger.info("Search index initialization completed")

    async def deactivate(self) -> None:
        """Drop the index table. Queries fail until ``init()`` runs again."""
        logger.info("Dropping index tables...")
        try:
            await asyncio.to_thread(self.db.drop_index_table, STAGING_TABLE, True)
            await asyncio.to_thread(self.db.drop_index_table)
        except sqlite3.Error as e:
            raise IndexSchemaError(f"Cannot drop index table: {e}") from e
        logger.info("Index tables have been dropped")

    # Queries

    async def query(self, q: str) -> QueryResult:
        """
        Run a full-text query against page content.

        Raises:
            QueryExecutionError: The query is malformed or the engine failed.
        """
        try:
            hits = await asyncio.to_thread(self.db.search, q)
        except (sqlite3.Error, UnicodeEncodeError) as e:
            logger.warning("Search engine error for query %r: %s", q, e)
            raise QueryExecutionError(str(e)) from e
        return QueryResult(results=hits)

    # Page hooks

    async def created(self, doc: IndexedDocument) -> int:
        """Index a new page. The caller guarantees the key is not indexed yet."""
        return await asyncio.to_thread(self.db.insert_document, doc)

    async def updated(self, doc: IndexedDocument) -> int:
        """Refresh a page's searchable fields; 0 if the page is not indexed."""
        count = await asyncio.to_thread(self.db.update_document, doc)
        if not count:
            logger.debug("Update ignored, %s [%s] is not indexed", doc.path, doc.locale)
        return count

    async def deleted(self, doc: IndexedDocument) -> int:
        count = await asyncio.to_thread(self.db.delete_document, doc.path, doc.locale)
        if not count:
            logger.debug("Delete ignored, %s [%s] is not indexed", doc.path, doc.locale)
        return count

    async def renamed(self, rename: PageRename) -> int:
        count = await asyncio.to_thread(self.db.rename_document, rename)
        if not count:
            logger.debug(
                "Rename ignored, %s [%s] is not indexed", rename.path, rename.locale_code
            )
        return count

    # Rebuild

    async def rebuild(self) -> int:
        """
        Regenerate the index from every published, non-private page.

        In the default mode the live table is truncated first, so queries
        running during the rebuild see a partial index, and a failure
        leaves only the documents indexed before it. In shadow mode the
        live table is replaced only once the whole corpus was indexed.

        Returns:
            Number of documents indexed.

        Raises:
            RebuildFailure: A page could not be extracted or inserted.
        """
        logger.info("Rebuilding index...")
        if self.rebuild_shadow:
            count = await self._rebuild_shadow()
        else:
            try:
                await asyncio.to_thread(self.db.truncate)
            except sqlite3.Error as e:
                raise RebuildFailure(f"Cannot truncate index: {e}") from e
            count = await self._pipeline(INDEX_TABLE).run()
        logger.info("Index rebuilt successfully: %d documents", count)
        return count

    def _pipeline(self, table: str) -> RebuildPipeline:
        return RebuildPipeline(
            self.db,
            self.pages,
            self.extractor,
            concurrency=self.rebuild_concurrency,
            table=table,
        )

    async def _rebuild_shadow(self) -> int:
        try:
            await asyncio.to_thread(self.db.drop_index_table, STAGING_TABLE, True)
            await asyncio.to_thread(self.db.create_index_table, STAGING_TABLE)
        except sqlite3.Error as e:
            raise RebuildFailure(f"Cannot create staging table: {e}") from e

        try:
            count = await self._pipeline(STAGING_TABLE).run()
        except BaseException:
            logger.warning("Discarding staging table, live index left untouched")
            await asyncio.to_thread(self.db.drop_index_table, STAGING_TABLE, True)
            raise

        try:
            await asyncio.to_thread(self.db.swap_index_table)
        except sqlite3.Error as e:
            raise RebuildFailure(f"Cannot swap rebuilt index into place: {e}", count) from e
        return count
