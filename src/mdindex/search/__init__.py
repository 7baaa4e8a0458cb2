"""
Search indexing and query package.

This package provides a pure-Python search core:
- tokenizer: CJK character and ASCII word tokenization
- phrase: literal line matching used for ranking and hit extraction
- inverted_index: ordinal-addressed document table, postings, paginated search
"""

from mdindex.search.inverted_index import InvertedIndex
from mdindex.search.tokenizer import count_cjk, is_phrase_query, tokenize


__all__ = [
    "InvertedIndex",
    "count_cjk",
    "is_phrase_query",
    "tokenize",
]
