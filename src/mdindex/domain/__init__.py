"""Domain layer - indexed documents and search response value objects.

No infrastructure dependencies live here: no file I/O, no caches, no event loop.
"""

from mdindex.domain.model import Document
from mdindex.domain.search import SearchHit, SearchPage, SearchResult


__all__ = [
    "Document",
    "SearchHit",
    "SearchPage",
    "SearchResult",
]
