"""mdindex - CJK-aware full-text search over a directory of documents."""

from mdindex.config import Settings
from mdindex.domain.search import SearchHit, SearchPage, SearchResult
from mdindex.engine import initialize, query
from mdindex.index_handle import IndexHandle


__all__ = [
    "IndexHandle",
    "SearchHit",
    "SearchPage",
    "SearchResult",
    "Settings",
    "initialize",
    "query",
]
