"""Streaming rebuild of the page index."""

import asyncio
import logging
from contextlib import aclosing

from page_search.errors import RebuildFailure
from page_search.indexer.database import INDEX_TABLE, Database
from page_search.indexer.extractor import ContentExtractor
from page_search.indexer.models import IndexedDocument, SourceDocument
from page_search.indexer.pages import PageStore

logger = logging.getLogger(__name__)


class RebuildPipeline:
    """
    Streams every eligible page through the extractor into an index table.

    The corpus stream only advances while fewer than ``concurrency``
    documents are in flight, so memory use is bounded by the concurrency
    and not by the corpus size. With the default concurrency of 1, pages
    are inserted strictly in the order the store yields them.

    The first failure halts the stream. Documents already in flight are
    allowed to finish, everything written so far stays in the table, and
    ``RebuildFailure`` is raised. There is no rollback.
    """

    def __init__(
        self,
        db: Database,
        pages: PageStore,
        extractor: ContentExtractor,
        concurrency: int = 1,
        table: str = INDEX_TABLE,
    ):
        if concurrency < 1:
            raise ValueError(f"Rebuild concurrency must be positive, got {concurrency}")

        self.db = db
        self.pages = pages
        self.extractor = extractor
        self.concurrency = concurrency
        self.table = table
        self.indexed = 0

    async def run(self) -> int:
        """Index the whole eligible corpus, returning the document count."""
        self.indexed = 0
        pending: set[asyncio.Task[None]] = set()
        read_order: dict[asyncio.Task[None], int] = {}
        try:
            async with aclosing(self.pages.stream_eligible_pages()) as stream:
                async for page in stream:
                    task = asyncio.create_task(self._index_page(page))
                    read_order[task] = len(read_order)
                    pending.add(task)
                    if len(pending) >= self.concurrency:
                        done, pending = await asyncio.wait(
                            pending, return_when=asyncio.FIRST_COMPLETED
                        )
                        _raise_first_failure(done, read_order)

            if pending:
                done, pending = await asyncio.wait(pending)
                _raise_first_failure(done, read_order)
        except Exception as exc:
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
            logger.error("Rebuild halted after %d documents: %s", self.indexed, exc)
            raise RebuildFailure(
                f"Rebuild halted after {self.indexed} documents: {exc}",
                indexed=self.indexed,
            ) from exc
        finally:
            # Only non-empty when the rebuild itself was cancelled
            for task in pending:
                task.cancel()

        return self.indexed

    async def _index_page(self, page: SourceDocument) -> None:
        doc = IndexedDocument(
            path=page.path,
            locale=page.locale_code,
            title=page.title,
            description=page.description,
            content=self.extractor.extract(page.rendered_content),
        )
        await asyncio.to_thread(self.db.insert_document, doc, self.table)
        self.indexed += 1
        logger.debug("Indexed %s [%s]", page.path, page.locale_code)


def _raise_first_failure(
    done: set[asyncio.Task[None]], read_order: dict[asyncio.Task[None], int]
) -> None:
    """Raise the failure of the earliest-read page among finished tasks."""
    # Every exception is retrieved so none is reported as unhandled
    failures = []
    for task in done:
        exc = task.exception()
        if exc is not None:
            failures.append((read_order[task], exc))
    if failures:
        raise min(failures, key=lambda failure: failure[0])[1]
