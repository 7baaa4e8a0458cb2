"""In-memory inverted index over a dense, ordinal-addressed document table.

Postings map each token to the set of document ordinals containing it, where
an ordinal is the document's current position in the table. Removing a
document shifts every later ordinal down by one, so the whole posting map is
rebuilt from scratch on every removal. That keeps ordinal bookkeeping trivially
correct at the price of O(total remaining tokens) per deletion.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import logging
import math

from mdindex.domain.model import Document
from mdindex.domain.search import SearchHit, SearchPage, SearchResult
from mdindex.search.phrase import count_matching_lines, count_phrase_occurrences, iter_matching_lines
from mdindex.search.tokenizer import is_phrase_query, tokenize


logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 15
DEFAULT_MAX_HITS = 3


@dataclass(frozen=True, slots=True)
class _Candidate:
    ordinal: int
    document: Document
    matches: int


class InvertedIndex:
    """Document table plus token postings with dual-mode search."""

    def __init__(self) -> None:
        self._documents: list[Document] = []
        self._by_path: dict[str, Document] = {}
        self._postings: dict[str, set[int]] = {}

    @classmethod
    def from_documents(cls, documents: Iterable[Document]) -> InvertedIndex:
        """Restore a table in the given order and derive postings from it.

        Later duplicates of a path replace nothing; the first occurrence wins.
        """
        index = cls()
        for document in documents:
            if document.path in index._by_path:
                logger.debug("Ignoring duplicate document %s", document.path)
                continue
            index._documents.append(document)
            index._by_path[document.path] = document
        index._rebuild_postings()
        return index

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, path: object) -> bool:
        return path in self._by_path

    @property
    def documents(self) -> tuple[Document, ...]:
        """Documents in ordinal order."""
        return tuple(self._documents)

    @property
    def paths(self) -> list[str]:
        return [document.path for document in self._documents]

    def get(self, path: str) -> Document | None:
        return self._by_path.get(path)

    def postings(self, token: str) -> frozenset[int]:
        """Return the ordinals of documents containing ``token``."""
        return frozenset(self._postings.get(token, ()))

    def token_count(self) -> int:
        return len(self._postings)

    def copy(self) -> InvertedIndex:
        """Return an independent scratch copy (documents are shared, they are immutable)."""
        clone = InvertedIndex()
        clone._documents = list(self._documents)
        clone._by_path = dict(self._by_path)
        clone._postings = {token: set(ordinals) for token, ordinals in self._postings.items()}
        return clone

    def add_document(self, path: str, name: str, content: str, mod_time: float) -> int:
        """Append a document and index its tokens.

        Returns:
            The ordinal assigned to the new document.

        Raises:
            ValueError: if ``path`` is already indexed; callers remove it first.
        """
        return self.add(Document(path=path, name=name, content=content, mod_time=mod_time))

    def add(self, document: Document) -> int:
        """Append an already built document; same contract as :meth:`add_document`."""
        if document.path in self._by_path:
            raise ValueError(f"Document already indexed: {document.path}")

        ordinal = len(self._documents)
        self._documents.append(document)
        self._by_path[document.path] = document
        for token in tokenize(document.content):
            self._postings.setdefault(token, set()).add(ordinal)
        return ordinal

    def remove_document(self, path: str) -> bool:
        """Remove a document and rebuild every posting list.

        Returns:
            False when ``path`` was not indexed (no-op), True otherwise.
        """
        if path not in self._by_path:
            return False

        ordinal = next(i for i, document in enumerate(self._documents) if document.path == path)
        del self._documents[ordinal]
        del self._by_path[path]
        self._rebuild_postings()
        return True

    def _rebuild_postings(self) -> None:
        postings: dict[str, set[int]] = {}
        for ordinal, document in enumerate(self._documents):
            for token in tokenize(document.content):
                postings.setdefault(token, set()).add(ordinal)
        self._postings = postings

    def search(
        self,
        query: str,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_hits: int = DEFAULT_MAX_HITS,
    ) -> SearchPage:
        """Search documents and return one page of ranked results.

        Queries with two or more CJK characters use phrase mode: a document
        qualifies only when the literal query occurs inside one of its lines,
        ranked by the number of occurrences. Every other query uses token
        mode: the union of the postings of every query token, ranked by the
        number of lines containing the literal query. Token-mode candidates
        are kept even when that count is zero.

        Ties keep ordinal order. Each result carries at most ``max_hits``
        matching lines in file order.
        """
        if not query:
            return SearchPage.empty()

        if is_phrase_query(query):
            candidates = self._phrase_candidates(query)
        else:
            candidates = self._token_candidates(query)

        # sorted() is stable, so equal counts keep ordinal order
        ranked = sorted(candidates, key=lambda candidate: -candidate.matches)

        total = len(ranked)
        page_size = max(1, page_size)
        total_pages = math.ceil(total / page_size)
        page_num = max(1, min(page, total_pages))
        start = (page_num - 1) * page_size

        results = [
            self._build_result(candidate.document, query, max_hits) for candidate in ranked[start : start + page_size]
        ]
        return SearchPage(results=results, page=page_num, total_pages=total_pages, total=total)

    def _phrase_candidates(self, query: str) -> list[_Candidate]:
        candidates: list[_Candidate] = []
        for ordinal, document in enumerate(self._documents):
            count = count_phrase_occurrences(document.content, query)
            if count > 0:
                candidates.append(_Candidate(ordinal=ordinal, document=document, matches=count))
        return candidates

    def _token_candidates(self, query: str) -> list[_Candidate]:
        ordinals: set[int] = set()
        for token in tokenize(query):
            ordinals.update(self._postings.get(token, ()))

        candidates: list[_Candidate] = []
        for ordinal in sorted(ordinals):
            document = self._documents[ordinal]
            candidates.append(
                _Candidate(
                    ordinal=ordinal,
                    document=document,
                    matches=count_matching_lines(document.content, query),
                )
            )
        return candidates

    @staticmethod
    def _build_result(document: Document, query: str, max_hits: int) -> SearchResult:
        hits: list[SearchHit] = []
        for line_num, line in iter_matching_lines(document.content, query):
            if len(hits) >= max_hits:
                break
            hits.append(SearchHit(line_num=line_num, content=line))
        return SearchResult(path=document.path, name=document.name, hits=hits)
