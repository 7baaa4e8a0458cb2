"""Unit tests for literal line matching."""

import pytest

from mdindex.search.phrase import (
    count_matching_lines,
    count_phrase_occurrences,
    iter_matching_lines,
    split_lines,
)


@pytest.mark.unit
class TestCountPhraseOccurrences:
    def test_counts_are_non_overlapping(self):
        assert count_phrase_occurrences("aaaa", "aa") == 2

    def test_sums_over_lines(self):
        assert count_phrase_occurrences("搜索 搜索\n没有\n搜索", "搜索") == 3

    def test_occurrences_never_span_lines(self):
        assert count_phrase_occurrences("ab\ncd", "bc") == 0
        assert count_phrase_occurrences("搜\n索", "搜索") == 0

    def test_empty_phrase_counts_nothing(self):
        assert count_phrase_occurrences("anything", "") == 0


@pytest.mark.unit
class TestMatchingLines:
    def test_count_matching_lines_counts_each_line_once(self):
        assert count_matching_lines("needle needle\nhay\nneedle", "needle") == 2

    def test_matching_is_case_sensitive(self):
        assert count_matching_lines("Needle", "needle") == 0

    def test_iter_matching_lines_numbers_from_one_and_strips(self):
        content = "intro\n   needle here  \nhay\n\tneedle again"

        assert list(iter_matching_lines(content, "needle")) == [(2, "needle here"), (4, "needle again")]

    def test_split_lines_keeps_empty_lines(self):
        assert split_lines("a\n\nb\n") == ["a", "", "b", ""]

    def test_carriage_returns_are_stripped_from_hits(self):
        assert list(iter_matching_lines("needle\r\nother\r\n", "needle")) == [(1, "needle")]
