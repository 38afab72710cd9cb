"""
page-search - full-text search index manager for a store of pages.

Keeps a SQLite FTS5 index in sync with a changing corpus of pages and answers
ranked text queries against it.

Stack:
- Python + FastMCP (host surface)
- SQLite FTS5 (search index)
- BeautifulSoup (rendered HTML to plain text)
"""

__version__ = "0.1.0"
