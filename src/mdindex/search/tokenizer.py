"""Tokenizer for the CJK-aware inverted index.

CJK scripts have no whitespace word boundaries, so every CJK character is
emitted as its own token. Everything else is lowercased and split into ASCII
word runs. Both passes run over the same text and their outputs are merged
into a single token set. There is no stemming and no stop-word removal.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
import re
from typing import Protocol


# Han ideographs, Hiragana, Katakana, Hangul syllables
CJK_PATTERN = re.compile(r"[\u4e00-\u9fff\u3040-\u309f\u30a0-\u30ff\uac00-\ud7af]")
ASCII_WORD_PATTERN = re.compile(r"[A-Za-z0-9_]+")


class Tokenizer(Protocol):
    """Protocol implemented by tokenizer passes."""

    def __call__(self, text: str) -> Iterator[str]:  # pragma: no cover - interface definition
        ...


class CjkCharTokenizer:
    """Emit every CJK character as a single-character token."""

    def __call__(self, text: str) -> Iterator[str]:
        for match in CJK_PATTERN.finditer(text):
            yield match.group(0)


class AsciiWordTokenizer:
    """Lowercase the text and emit ASCII word runs."""

    def __call__(self, text: str) -> Iterator[str]:
        for match in ASCII_WORD_PATTERN.finditer(text.lower()):
            yield match.group(0)


class TokenSetPipeline:
    """Run several tokenizer passes over the same text and merge the output."""

    def __init__(self, passes: Sequence[Tokenizer]) -> None:
        self.passes = list(passes)

    def __call__(self, text: str) -> set[str]:
        tokens: set[str] = set()
        for tokenizer in self.passes:
            tokens.update(tokenizer(text))
        return tokens


_DEFAULT_PIPELINE = TokenSetPipeline([CjkCharTokenizer(), AsciiWordTokenizer()])


def tokenize(text: str) -> set[str]:
    """Turn raw text into its token set (duplicates collapsed)."""
    if not text:
        return set()
    return _DEFAULT_PIPELINE(text)


def count_cjk(text: str) -> int:
    """Count CJK characters in ``text``."""
    return len(CJK_PATTERN.findall(text))


def is_phrase_query(query: str) -> bool:
    """Return True when a query must be matched as an exact phrase.

    Queries with two or more CJK characters would otherwise match every
    document containing any one of those characters anywhere.
    """
    return count_cjk(query) >= 2
