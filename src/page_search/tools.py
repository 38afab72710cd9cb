"""MCP tools for the page-search server.

This module defines the tools exposed by the MCP server:
- search: Full-text search across all indexed pages using FTS5
- rebuild_index: Regenerate the index from the page corpus
"""

import logging

from fastmcp import FastMCP

from page_search.errors import QueryExecutionError, RebuildFailure
from page_search.indexer import SearchEngine

logger = logging.getLogger(__name__)


async def search_pages(engine: SearchEngine, query: str, limit: int = 20) -> dict:
    """Run a query and shape the result for MCP clients.

    A failed query yields an ``error`` key instead of an empty result set.
    """
    try:
        result = await engine.query(query)
    except QueryExecutionError as e:
        return {"query": query, "error": f"Search failed: {e}"}

    limit = max(1, limit)
    payload = result.to_dict()
    payload["results"] = payload["results"][:limit]
    payload["query"] = query
    return payload


async def rebuild_pages(engine: SearchEngine) -> dict:
    """Rebuild the whole index, reporting how many pages were indexed."""
    try:
        indexed = await engine.rebuild()
    except RebuildFailure as e:
        return {"indexed": e.indexed, "error": str(e)}
    return {"indexed": indexed}


def register_tools(mcp: FastMCP, engine: SearchEngine) -> None:
    """Register all tools with the FastMCP server.

    Args:
        mcp: FastMCP server instance
        engine: Activated and initialized search engine
    """

    @mcp.tool()
    async def search(query: str, limit: int = 20) -> dict:
        """Search page content using full-text search.

        Uses SQLite FTS5 ranking (BM25), best match first.

        Args:
            query: Search query (FTS5 syntax supported)
            limit: Maximum number of results to return (default: 20)

        Returns:
            Search result with:
            - results: Matches with id, path, locale, title and description
            - suggestions: Alternate queries (currently always empty)
            - totalHits: Number of matches before the limit was applied
            - error: Present only when the query could not be executed
        """
        return await search_pages(engine, query, limit)

    @mcp.tool()
    async def rebuild_index() -> dict:
        """Rebuild the search index from all published, non-private pages.

        Returns:
            - indexed: Number of pages indexed
            - error: Present only when the rebuild was aborted
        """
        logger.info("Rebuild requested through MCP")
        return await rebuild_pages(engine)
