"""Main entry point for the page-search MCP server."""

import argparse
import asyncio
import logging
import sys

from fastmcp import FastMCP

from page_search.config import Config
from page_search.errors import SearchEngineError
from page_search.indexer import Database, SearchEngine, SQLitePageStore
from page_search.tools import register_tools

logger = logging.getLogger(__name__)


def build_engine(config: Config) -> SearchEngine:
    """Wire the storage adapter, corpus store and engine from config."""
    db = Database(config.search_db)
    pages = SQLitePageStore(config.search_db, batch_size=config.stream_batch_size)
    pages.initialize()
    return SearchEngine(
        db,
        pages,
        rebuild_concurrency=config.rebuild_concurrency,
        rebuild_shadow=config.rebuild_shadow,
    )


async def prepare_engine(engine: SearchEngine, force_rebuild: bool = False) -> None:
    """Activate and initialize the engine, rebuilding an empty index."""
    await engine.activate()
    await engine.init()

    doc_count = await asyncio.to_thread(engine.db.count_documents)
    if force_rebuild or doc_count == 0:
        if doc_count == 0:
            logger.info("Index is empty, performing initial rebuild...")
        count = await engine.rebuild()
        logger.info("Initial rebuild complete: %d documents indexed", count)


def create_server(config: Config, force_rebuild: bool = False) -> FastMCP:
    """Create and configure the MCP server with all components.

    Args:
        config: Configuration instance with all settings.
        force_rebuild: Rebuild the index even when it already has documents.
    """
    mcp = FastMCP(
        name="pageSearch",
        instructions=(
            "pageSearch provides full-text search over a store of pages. Use the "
            "search tool to find pages by content, and rebuild_index to regenerate "
            "the index from the page store."
        ),
    )

    logger.info("Initializing search database at %s", config.search_db)
    engine = build_engine(config)
    asyncio.run(prepare_engine(engine, force_rebuild=force_rebuild))

    logger.info("Registering tools...")
    register_tools(mcp, engine)

    logger.info("Server configured successfully")
    return mcp


def main() -> None:
    """Main function - starts the MCP server."""
    # Configure logging here to avoid side effects on import
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="page-search - MCP server for page search")
    parser.add_argument(
        "--rebuild",
        action="store_true",
        help="Force a full index rebuild before starting",
    )
    args = parser.parse_args()

    try:
        config = Config.from_env()
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(2)

    logger.info("=" * 50)
    logger.info("page-search starting...")
    logger.info("  SEARCH_DB:   %s", config.search_db)
    logger.info("  SEARCH_PORT: %s", config.search_port)
    logger.info("  CONCURRENCY: %d", config.rebuild_concurrency)
    logger.info("  SHADOW:      %s", config.rebuild_shadow)
    logger.info("=" * 50)

    try:
        mcp = create_server(config, force_rebuild=args.rebuild)
    except SearchEngineError:
        logger.exception("Search engine could not start")
        sys.exit(1)

    try:
        logger.info("Starting MCP server on port %s...", config.search_port)
        mcp.run(transport="sse", host="0.0.0.0", port=config.search_port)
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        sys.exit(0)
    except Exception:
        logger.exception("Server error")
        sys.exit(1)


if __name__ == "__main__":
    main()
