"""
Unit tests for document statistics.
"""

from document_reader import calculate_stats
from document_reader.stats import estimated_read_minutes


class TestEstimatedReadMinutes:
    def test_boundaries(self):
        assert estimated_read_minutes(0) == 0
        assert estimated_read_minutes(1) == 1
        assert estimated_read_minutes(225) == 1
        assert estimated_read_minutes(226) == 2

    def test_from_text(self):
        assert calculate_stats(" ".join(["word"] * 225)).estimated_read_minutes == 1
        assert calculate_stats(" ".join(["word"] * 226)).estimated_read_minutes == 2


class TestCalculateStats:
    def test_counts(self):
        text = "Warm up\n400 easy\n\n\nMain set\n8x100  free\n"
        stats = calculate_stats(text)

        assert stats.words == 8
        assert stats.characters == len(text)
        assert stats.characters_no_spaces == len("Warmup400easyMainset8x100free")
        assert stats.lines == 7
        assert stats.paragraphs == 2

    def test_blank_line_with_spaces_separates_paragraphs(self):
        assert calculate_stats("one\n   \ntwo").paragraphs == 2

    def test_empty_text(self):
        stats = calculate_stats("")
        assert stats.words == 0
        assert stats.characters == 0
        assert stats.paragraphs == 0
        assert stats.lines == 1
        assert stats.estimated_read_minutes == 0

    def test_whitespace_only_text_has_no_words(self):
        stats = calculate_stats(" \t\n ")
        assert stats.words == 0
        assert stats.characters_no_spaces == 0
