"""Literal line matching used for ranking and hit extraction.

Both search modes rank and display documents by how often the literal query
text appears line by line, independent of which tokens put a document in the
candidate set.
"""

from __future__ import annotations

from collections.abc import Iterator


def split_lines(content: str) -> list[str]:
    """Split content on newlines, keeping empty lines so numbering stays 1-based."""
    return content.split("\n")


def count_phrase_occurrences(content: str, phrase: str) -> int:
    """Count non-overlapping occurrences of ``phrase`` summed over every line.

    Occurrences never span a line break.
    """
    if not phrase:
        return 0
    return sum(line.count(phrase) for line in split_lines(content))


def count_matching_lines(content: str, phrase: str) -> int:
    """Count lines containing ``phrase`` at least once."""
    if not phrase:
        return 0
    return sum(1 for line in split_lines(content) if phrase in line)


def iter_matching_lines(content: str, phrase: str) -> Iterator[tuple[int, str]]:
    """Yield ``(line_number, stripped_line)`` for every line containing ``phrase``.

    Line numbers are 1-based and follow file order.
    """
    if not phrase:
        return
    for index, line in enumerate(split_lines(content)):
        if phrase in line:
            yield index + 1, line.strip()
