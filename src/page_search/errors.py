"""Exceptions raised by the search engine."""


class SearchEngineError(Exception):
    """Base class for all search engine errors."""


class ActivationError(SearchEngineError):
    """The storage engine cannot host the search index."""


class CapabilityMissingError(ActivationError):
    """The storage engine lacks the full-text extension."""


class IndexSchemaError(SearchEngineError):
    """Creating, dropping or swapping the index table failed."""


class QueryExecutionError(SearchEngineError):
    """A search query could not be executed.

    Raised for malformed FTS5 syntax as well as engine failures, so that a
    failed query is never mistaken for a query with zero matches.
    """


class RebuildFailure(SearchEngineError):
    """A full index rebuild was aborted.

    Attributes:
        indexed: Number of documents written before the rebuild halted.
    """

    def __init__(self, message: str, indexed: int = 0):
        super().__init__(message)
        self.indexed = indexed
