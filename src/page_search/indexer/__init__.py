"""
Indexer module for page-search.

This module keeps the SQLite FTS5 page index in sync with the page corpus:
lifecycle, per-page hooks, ranked queries and streaming rebuilds.
"""

from page_search.indexer.database import INDEX_TABLE, STAGING_TABLE, Database
from page_search.indexer.engine import SearchEngine
from page_search.indexer.extractor import ContentExtractor, HtmlContentExtractor
from page_search.indexer.models import (
    IndexedDocument,
    PageRename,
    QueryResult,
    SearchHit,
    SourceDocument,
)
from page_search.indexer.pages import PageStore, SQLitePageStore
from page_search.indexer.rebuild import RebuildPipeline

__all__ = [
    "INDEX_TABLE",
    "STAGING_TABLE",
    "ContentExtractor",
    "Database",
    "HtmlContentExtractor",
    "IndexedDocument",
    "PageRename",
    "PageStore",
    "QueryResult",
    "RebuildPipeline",
    "SQLitePageStore",
    "SearchEngine",
    "SearchHit",
    "SourceDocument",
]
