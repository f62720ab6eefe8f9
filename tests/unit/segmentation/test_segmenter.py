"""
Unit tests for document segmentation.

Covers boundary priority, offset invariants, overlap and argument checks.
"""

import pytest

from redaction_layer.segmentation.segmenter import (
    Segmenter,
    find_natural_boundary,
    segment,
    segment_stats,
    validate_segments,
)


PROSE = "Sarah met the coach on Monday. They talked about goals and feedback.\n\n"


def prose_of_length(length: int) -> str:
    return (PROSE * (length // len(PROSE) + 1))[:length]


class TestFindNaturalBoundary:
    """Boundary priority: paragraph > sentence > word > hard cut."""

    def test_prefers_paragraph_break(self):
        text = "aaa\n\nbbb. ccc ddd"
        assert find_natural_boundary(text, len(text), len(text)) == 5

    def test_sentence_end(self):
        assert find_natural_boundary("One. Two three", 12, 10) == 5

    def test_word_boundary(self):
        assert find_natural_boundary("alpha beta gamma", 16, 10) == 11

    def test_hard_cut_without_boundary(self):
        assert find_natural_boundary("abcdefghij", 8, 5) == 8

    def test_zero_lookback_is_hard_cut(self):
        assert find_natural_boundary("alpha beta gamma", 12, 0) == 12

    def test_boundary_closest_to_target_wins(self):
        text = "a b c d e f"
        assert find_natural_boundary(text, len(text), len(text)) == 10


class TestSegment:
    """Tests for the segment() function."""

    def test_short_text_is_single_segment(self):
        segments = segment("short text", 100, 10)
        assert len(segments) == 1
        assert segments[0].start_offset == 0
        assert segments[0].end_offset == 10
        assert segments[0].text == "short text"

    def test_empty_text_is_single_empty_segment(self):
        segments = segment("", 100, 10)
        assert len(segments) == 1
        assert segments[0].text == ""

    def test_text_equal_to_max_size_is_single_segment(self):
        assert len(segment("x" * 100, 100, 10)) == 1

    def test_twelve_thousand_chars_without_boundaries(self):
        text = "a" * 12000
        segments = segment(text, 5000, 500)

        assert [(s.start_offset, s.end_offset) for s in segments] == [
            (0, 5000),
            (4500, 9500),
            (9000, 12000),
        ]

    def test_twelve_thousand_chars_of_prose(self):
        text = prose_of_length(12000)
        segments = segment(text, 5000, 500)

        assert len(segments) == 3
        assert validate_segments(segments, text) == []

    def test_consecutive_segments_share_exactly_the_overlap(self):
        text = prose_of_length(20000)
        segments = segment(text, 3000, 300)

        for current, nxt in zip(segments, segments[1:]):
            assert current.end_offset - nxt.start_offset == 300

    def test_segments_cover_document_and_respect_max_size(self):
        text = prose_of_length(25000)
        segments = segment(text, 4000, 400)

        assert segments[0].start_offset == 0
        assert segments[-1].end_offset == len(text)
        assert all(s.length <= 4000 for s in segments)
        assert [s.index for s in segments] == list(range(len(segments)))
        for s in segments:
            assert text[s.start_offset:s.end_offset] == s.text

    def test_zero_overlap(self):
        text = "b" * 1000
        segments = segment(text, 300, 0)

        assert validate_segments(segments, text) == []
        for current, nxt in zip(segments, segments[1:]):
            assert current.end_offset == nxt.start_offset

    def test_cuts_at_paragraph_when_available(self):
        text = prose_of_length(12000)
        segments = segment(text, 5000, 500)

        assert segments[0].text.endswith("\n\n")

    @pytest.mark.parametrize(
        "max_size,overlap_size",
        [(0, 0), (-1, 0), (100, -1), (100, 100), (100, 150)],
    )
    def test_invalid_sizes_raise(self, max_size, overlap_size):
        with pytest.raises(ValueError):
            segment("some text", max_size, overlap_size)


class TestSegmentHelpers:

    def test_segment_stats(self):
        stats = segment_stats(segment("a" * 12000, 5000, 500))
        assert stats["count"] == 3
        assert stats["max_size"] == 5000
        assert stats["min_size"] == 3000

    def test_segment_stats_empty(self):
        assert segment_stats([])["count"] == 0

    def test_validate_segments_reports_gap(self):
        text = "a" * 100
        first, second = segment(text, 60, 10)
        shifted = second.model_copy(update={"start_offset": second.start_offset + 20})

        problems = validate_segments([first, shifted], text)
        assert any("gap" in p for p in problems)

    def test_validate_segments_empty(self):
        assert validate_segments([], "abc") == ["no segments"]


class TestSegmenter:

    def test_reads_sizes_from_settings(self, make_settings):
        segmenter = Segmenter(make_settings(MAX_SEGMENT_SIZE=1000, OVERLAP_SIZE=100))
        segments = segmenter.segment("a" * 2500)

        assert [(s.start_offset, s.end_offset) for s in segments] == [
            (0, 1000),
            (900, 1900),
            (1800, 2500),
        ]
