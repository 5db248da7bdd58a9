"""Tests for splitting document text into chunks."""

import pytest

from exam_extraction.models.extraction import RawDocument
from exam_extraction.services.chunker import chunk_document, split_into_chunks


def _lines_of(chunks):
    """Lines of a multi-chunk result, in order."""
    return "\n".join(chunks).split("\n")


class TestSplitIntoChunks:
    """Test suite for split_into_chunks."""

    @pytest.mark.parametrize("text", ["a", "Ali,5,90\nAyşe,6,95", "x" * 8000])
    def test_short_text_is_single_chunk(self, text):
        """Text within the budget comes back unchanged as one chunk."""
        assert split_into_chunks(text) == [text]

    def test_empty_text_gives_no_chunks(self):
        assert split_into_chunks("") == []

    def test_invalid_budget_raises(self):
        with pytest.raises(ValueError):
            split_into_chunks("abc", 0)

    def test_lines_reconstruct_original(self):
        """Concatenated chunks reproduce the original line sequence in order."""
        lines = [f"Öğrenci {i},{i % 40},{i * 3}" for i in range(500)]
        text = "\n".join(lines)

        chunks = split_into_chunks(text, 300)

        assert len(chunks) > 1
        assert _lines_of(chunks) == lines

    def test_chunks_respect_budget_and_are_not_empty(self):
        lines = [("row %d " % i) * (i % 7 + 1) for i in range(300)]
        text = "\n".join(lines)

        chunks = split_into_chunks(text, 120)

        for chunk in chunks:
            assert chunk
            assert len(chunk) <= 120

    def test_line_of_exactly_the_budget_fits(self):
        chunks = split_into_chunks("a" * 10 + "\nb", 10)

        assert chunks == ["a" * 10, "b"]
        assert all(len(chunk) <= 10 for chunk in chunks)

    def test_oversized_line_is_kept_whole(self):
        """A line longer than the budget becomes its own chunk, not truncated."""
        long_line = "L" * 50
        text = "short\n" + long_line + "\nend"

        chunks = split_into_chunks(text, 20)

        assert chunks == ["short", long_line, "end"]

    def test_blank_lines_are_kept_and_never_alone(self):
        text = "a" * 10 + "\n\n" + "b" * 5 + "\n\n\n" + "c" * 9

        chunks = split_into_chunks(text, 10)

        assert all(chunk for chunk in chunks)
        assert _lines_of(chunks) == text.split("\n")

    def test_trailing_newline_ends_last_line(self):
        text = "aaaa\nbbbb\ncccc\n"

        chunks = split_into_chunks(text, 10)

        assert chunks == ["aaaa\nbbbb", "cccc"]

    def test_twenty_thousand_characters_make_three_chunks(self):
        """20,000 characters of 100-char lines with an 8,000 budget -> 3 chunks."""
        line = "9" * 99
        text = "\n".join([line] * 200)
        assert len(text) == 19999

        chunks = split_into_chunks(text, 8000)

        assert len(chunks) == 3
        assert _lines_of(chunks) == [line] * 200

    def test_greedy_flush_boundary(self):
        """A line that exactly fills the remaining budget stays in the chunk."""
        text = "aaaa\nbbbbb\ncc"  # "aaaa\nbbbbb" is exactly 10 characters

        assert split_into_chunks(text, 10) == ["aaaa\nbbbbb", "cc"]


class TestChunkDocument:
    """Test suite for chunk_document."""

    def test_chunks_are_indexed_in_order(self):
        document = RawDocument(file_name="deneme.txt", content="aaaa\nbbbb\ncccc")

        chunks = chunk_document(document, 10)

        assert [c.index for c in chunks] == [0, 1]
        assert all(c.total == 2 for c in chunks)
        assert chunks[1].text == "cccc"

    def test_empty_document(self):
        assert chunk_document(RawDocument(file_name="bos.txt", content="")) == []
