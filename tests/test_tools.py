"""Tests for MCP tools."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from page_search.errors import RebuildFailure
from page_search.indexer import Database, IndexedDocument, SearchEngine, SQLitePageStore
from page_search.tools import rebuild_pages, search_pages


@pytest.fixture
def engine(tmp_path: Path):
    db_path = tmp_path / "search.db"
    db = Database(db_path)
    pages = SQLitePageStore(db_path)
    pages.initialize()
    db.create_index_table()
    for i in range(5):
        db.insert_document(IndexedDocument(f"/p{i}", "en", f"Page {i}", "", "common text"))
    yield SearchEngine(db, pages)
    pages.close()
    db.close()


class TestSearchTool:
    @pytest.mark.asyncio
    async def test_search_returns_matches(self, engine: SearchEngine):
        payload = await search_pages(engine, "common")

        assert payload["query"] == "common"
        assert payload["totalHits"] == 5
        assert len(payload["results"]) == 5
        assert payload["suggestions"] == []

    @pytest.mark.asyncio
    async def test_search_applies_limit(self, engine: SearchEngine):
        payload = await search_pages(engine, "common", limit=2)

        assert len(payload["results"]) == 2
        assert payload["totalHits"] == 5

    @pytest.mark.asyncio
    async def test_search_clamps_non_positive_limit(self, engine: SearchEngine):
        for limit in (0, -1):
            payload = await search_pages(engine, "common", limit=limit)
            assert len(payload["results"]) == 1

    @pytest.mark.asyncio
    async def test_unencodable_search_returns_error(self, engine: SearchEngine):
        payload = await search_pages(engine, "common \ud800")
        assert payload["error"].startswith("Search failed")

    @pytest.mark.asyncio
    async def test_failed_search_is_distinct_from_no_matches(self, engine: SearchEngine):
        empty = await search_pages(engine, "absent")
        failed = await search_pages(engine, '"unterminated')

        assert "error" not in empty
        assert empty["totalHits"] == 0
        assert failed["error"].startswith("Search failed")
        assert "results" not in failed


class TestRebuildTool:
    @pytest.mark.asyncio
    async def test_rebuild_reports_count(self, engine: SearchEngine):
        assert await rebuild_pages(engine) == {"indexed": 0}

    @pytest.mark.asyncio
    async def test_rebuild_reports_failure(self):
        engine = AsyncMock()
        engine.rebuild.side_effect = RebuildFailure("Rebuild halted after 3 documents", 3)

        result = await rebuild_pages(engine)

        assert result["indexed"] == 3
        assert "halted" in result["error"]
