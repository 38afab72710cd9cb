"""Example host wiring the page hooks to the search engine.

This example shows how a content store calls the engine on page events.
Run with: uv run python examples/page_events.py
"""

import asyncio
import tempfile
from pathlib import Path

from page_search.indexer import (
    Database,
    HtmlContentExtractor,
    IndexedDocument,
    PageRename,
    SearchEngine,
    SQLitePageStore,
)


async def run(db_path: Path) -> None:
    pages = SQLitePageStore(db_path)
    pages.initialize()
    engine = SearchEngine(Database(db_path), pages)

    await engine.activate()
    await engine.init()

    # Hooks receive already extracted text
    extractor = HtmlContentExtractor()
    home = IndexedDocument(
        path="home",
        locale="en",
        title="Home",
        description="Landing page",
        content=extractor.extract("<h1>Welcome</h1><p>Hello world</p>"),
    )
    await engine.created(home)
    await engine.renamed(PageRename("home", "en", "start", "en"))

    result = await engine.query("hello")
    for hit in result.results:
        print(f"{hit.path} [{hit.locale}] {hit.title}")


if __name__ == "__main__":
    with tempfile.TemporaryDirectory() as tmpdir:
        asyncio.run(run(Path(tmpdir) / "search.db"))
