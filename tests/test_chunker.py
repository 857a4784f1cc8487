"""
Unit tests for text chunking.

Tests for:
- Chunker strategies (none, sentence, paragraph, fixed)
- Trimming and empty-chunk filtering
- chunk_texts flattening and mapping
"""

import pytest

from embedkit.domain.models import ChunkStrategy
from embedkit.infrastructure.chunkers.text_chunker import Chunker, chunk_texts


class TestDefaultChunker:
    """Tests for default settings."""

    def test_defaults(self):
        chunker = Chunker.default()

        assert chunker.strategy == ChunkStrategy.NONE
        assert chunker.max_size == 512
        assert chunker.overlap == 50
        assert chunker.trim_space is True


class TestNoneStrategy:
    """The none strategy bypasses all post-processing."""

    def test_returns_text_unchanged(self):
        assert Chunker(strategy=ChunkStrategy.NONE).chunk("a. b.") == ["a. b."]

    def test_does_not_trim(self):
        assert Chunker(strategy=ChunkStrategy.NONE, trim_space=True).chunk("  padded  ") == ["  padded  "]

    def test_empty_string_yields_one_empty_chunk(self):
        assert Chunker(strategy=ChunkStrategy.NONE).chunk("") == [""]


class TestSentenceStrategy:
    """Tests for sentence splitting."""

    def test_three_sentences(self):
        chunker = Chunker(strategy=ChunkStrategy.SENTENCE, trim_space=True)
        chunks = chunker.chunk("First sentence. Second sentence. Third sentence.")

        assert chunks == ["First sentence.", "Second sentence.", "Third sentence."]

    def test_all_terminators(self):
        chunker = Chunker(strategy=ChunkStrategy.SENTENCE)
        assert chunker.chunk("Hello world! How are you? Fine.") == ["Hello world!", "How are you?", "Fine."]

    def test_terminator_not_followed_by_space_does_not_split(self):
        chunker = Chunker(strategy=ChunkStrategy.SENTENCE)
        assert chunker.chunk("Pi is 3.14 roughly.") == ["Pi is 3.14 roughly."]

    def test_abbreviation_followed_by_space_splits(self):
        chunker = Chunker(strategy=ChunkStrategy.SENTENCE)
        assert chunker.chunk("e.g. this") == ["e.g.", "this"]

    def test_trailing_text_without_terminator_is_kept(self):
        chunker = Chunker(strategy=ChunkStrategy.SENTENCE)
        assert chunker.chunk("Done. And then") == ["Done.", "And then"]

    def test_newline_counts_as_whitespace(self):
        chunker = Chunker(strategy=ChunkStrategy.SENTENCE)
        assert chunker.chunk("One.\nTwo.") == ["One.", "Two."]

    def test_without_trim_keeps_leading_space(self):
        chunker = Chunker(strategy=ChunkStrategy.SENTENCE, trim_space=False)
        assert chunker.chunk("A. B.") == ["A.", " B."]

    def test_empty_string_yields_no_chunks(self):
        assert Chunker(strategy=ChunkStrategy.SENTENCE).chunk("") == []

    def test_whitespace_only_yields_no_chunks(self):
        assert Chunker(strategy=ChunkStrategy.SENTENCE).chunk("   \n\t ") == []


class TestParagraphStrategy:
    """Tests for paragraph splitting."""

    def test_splits_on_blank_lines(self):
        chunker = Chunker(strategy=ChunkStrategy.PARAGRAPH)
        text = "First paragraph.\n\nSecond paragraph.\n\nThird."

        assert chunker.chunk(text) == ["First paragraph.", "Second paragraph.", "Third."]

    def test_drops_empty_paragraphs(self):
        chunker = Chunker(strategy=ChunkStrategy.PARAGRAPH)
        assert chunker.chunk("P1\n\n\n\nP2\n\n   \n\nP3") == ["P1", "P2", "P3"]

    def test_single_newline_does_not_split(self):
        chunker = Chunker(strategy=ChunkStrategy.PARAGRAPH)
        assert chunker.chunk("line one\nline two") == ["line one\nline two"]

    def test_paragraphs_are_trimmed_even_without_trim_flag(self):
        chunker = Chunker(strategy=ChunkStrategy.PARAGRAPH, trim_space=False)
        assert chunker.chunk("  a  \n\n  b  ") == ["a", "b"]

    def test_empty_string_yields_no_chunks(self):
        assert Chunker(strategy=ChunkStrategy.PARAGRAPH).chunk("") == []


class TestFixedStrategy:
    """Tests for fixed-size windows."""

    def test_two_windows_without_overlap(self):
        chunker = Chunker(strategy=ChunkStrategy.FIXED, max_size=10, overlap=0)
        text = "abcdefghijklmnopqrst"
        chunks = chunker.chunk(text)

        assert len(chunks) == 2
        assert len(chunks[0]) == 10
        assert chunks == ["abcdefghij", "klmnopqrst"]

    def test_overlapping_windows(self):
        chunker = Chunker(strategy=ChunkStrategy.FIXED, max_size=10, overlap=2)
        text = "abcdefghijklmnopqrst"

        # step 8: windows start at 0, 8, 16
        assert chunker.chunk(text) == ["abcdefghij", "ijklmnopqr", "qrst"]

    def test_overlap_not_smaller_than_size_means_no_overlap(self):
        chunker = Chunker(strategy=ChunkStrategy.FIXED, max_size=5, overlap=5)
        assert chunker.chunk("abcdefghij") == ["abcde", "fghij"]

    def test_short_text_is_one_chunk(self):
        chunker = Chunker(strategy=ChunkStrategy.FIXED, max_size=10, overlap=0)
        assert chunker.chunk("short") == ["short"]

    def test_text_of_exact_size_is_one_chunk(self):
        chunker = Chunker(strategy=ChunkStrategy.FIXED, max_size=10, overlap=3)
        assert chunker.chunk("a" * 10) == ["a" * 10]

    def test_non_positive_max_size_returns_whole_text(self):
        # Degrades to a single chunk instead of rejecting the configuration.
        text = "x" * 100
        assert Chunker(strategy=ChunkStrategy.FIXED, max_size=0).chunk(text) == [text]
        assert Chunker(strategy=ChunkStrategy.FIXED, max_size=-5).chunk(text) == [text]

    def test_windows_count_code_points(self):
        chunker = Chunker(strategy=ChunkStrategy.FIXED, max_size=10, overlap=0)
        chunks = chunker.chunk("é" * 15)

        assert [len(c) for c in chunks] == [10, 5]

    def test_windows_are_trimmed_and_blank_windows_dropped(self):
        chunker = Chunker(strategy=ChunkStrategy.FIXED, max_size=4, overlap=0)
        assert chunker.chunk("ab      cd") == ["ab", "cd"]

    def test_last_window_reaches_end(self):
        chunker = Chunker(strategy=ChunkStrategy.FIXED, max_size=7, overlap=3, trim_space=False)
        text = "0123456789abcdef"
        chunks = chunker.chunk(text)

        assert chunks[-1].endswith("f")
        assert all(len(c) <= 7 for c in chunks)


class TestChunkTexts:
    """Tests for flattening chunks across texts."""

    def test_mapping_follows_text_then_chunk_order(self):
        chunker = Chunker(strategy=ChunkStrategy.SENTENCE)
        chunks, mapping = chunk_texts(chunker, ["a. b.", "c", "d. e. f."])

        assert chunks == ["a.", "b.", "c", "d.", "e.", "f."]
        assert mapping == [0, 0, 1, 2, 2, 2]

    def test_texts_without_chunks_have_no_mapping_entries(self):
        chunker = Chunker(strategy=ChunkStrategy.SENTENCE)
        chunks, mapping = chunk_texts(chunker, ["one.", "   ", "two."])

        assert chunks == ["one.", "two."]
        assert mapping == [0, 2]

    def test_mapping_length_matches_chunks(self):
        chunker = Chunker(strategy=ChunkStrategy.FIXED, max_size=3, overlap=1)
        chunks, mapping = chunk_texts(chunker, ["abcdefgh", "xy", ""])

        assert len(chunks) == len(mapping)
        assert mapping == sorted(mapping)

    def test_empty_input(self):
        assert chunk_texts(Chunker(), []) == ([], [])
