"""Data models for the indexer."""

from dataclasses import dataclass, field


@dataclass
class SourceDocument:
    """A page record as read from the corpus store."""

    path: str
    locale_code: str
    title: str = ""
    description: str = ""
    rendered_content: str = ""
    is_published: bool = True
    is_private: bool = False


@dataclass
class IndexedDocument:
    """A row of the full-text index, keyed by (path, locale)."""

    path: str
    locale: str
    title: str = ""
    description: str = ""
    content: str = ""  # Normalized plain text

    @property
    def key(self) -> tuple[str, str]:
        return (self.path, self.locale)


@dataclass
class PageRename:
    """Identity change of an indexed page."""

    path: str
    locale_code: str
    destination_path: str
    destination_locale_code: str


@dataclass
class SearchHit:
    """A single ranked match."""

    id: int  # FTS5 rowid
    path: str
    locale: str
    title: str
    description: str


@dataclass
class QueryResult:
    """Ranked matches for one query, best match first."""

    results: list[SearchHit] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    @property
    def total_hits(self) -> int:
        return len(self.results)

    def to_dict(self) -> dict:
        """Serialize with the wire key names used by search clients."""
        return {
            "results": [
                {
                    "id": hit.id,
                    "path": hit.path,
                    "locale": hit.locale,
                    "title": hit.title,
                    "description": hit.description,
                }
                for hit in self.results
            ],
            "suggestions": list(self.suggestions),
            "totalHits": self.total_hits,
        }
