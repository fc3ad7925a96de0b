"""Tests for data models."""

import pytest
import numpy as np
from dataclasses import FrozenInstanceError
from sectiondiff.core.models import (
    Chunk,
    SectionVector,
    MatchedPair,
    AlignmentResult,
    DiffKind,
    DiffEntry,
)


class TestChunk:
    """Tests for the Chunk dataclass."""

    def test_create_chunk(self):
        """Should create a chunk with all fields."""
        chunk = Chunk(order=0, text="Hello world", start_index=0, end_index=11)
        assert chunk.order == 0
        assert chunk.text == "Hello world"
        assert chunk.title is None

    def test_char_count(self):
        """char_count should return text length."""
        chunk = Chunk(order=0, text="Hello", start_index=0, end_index=5)
        assert chunk.char_count == 5

    def test_word_count(self):
        """word_count should return approximate word count."""
        chunk = Chunk(order=0, text="Hello world foo bar", start_index=0, end_index=19)
        assert chunk.word_count == 4

    def test_label_with_title(self):
        """Label should quote the title and show the id."""
        chunk = Chunk(order=2, text="Fees apply.", start_index=0, end_index=11, title="Fees")
        assert chunk.label == "'Fees' (ID: 2)"

    def test_label_without_title(self):
        """Label should fall back to the id alone."""
        chunk = Chunk(order=3, text="Body", start_index=0, end_index=4)
        assert chunk.label == "ID: 3"

    def test_blank_title_is_ignored(self):
        """A whitespace title should be treated as missing."""
        chunk = Chunk(order=1, text="Body", start_index=0, end_index=4, title="  ")
        assert chunk.label == "ID: 1"

    def test_chunk_is_frozen(self):
        """Chunks should be immutable."""
        chunk = Chunk(order=0, text="Hello", start_index=0, end_index=5)
        with pytest.raises(FrozenInstanceError):
            chunk.text = "changed"


class TestSectionVector:
    """Tests for the SectionVector dataclass."""

    def test_dimension(self):
        """dimension should be the vector length."""
        sv = SectionVector(chunk_order=0, vector=np.zeros(8, dtype=np.float32))
        assert sv.dimension == 8


class TestAlignmentResult:
    """Tests for the AlignmentResult dataclass."""

    def test_defaults_are_empty(self):
        """A new result should have empty lists and the default threshold."""
        result = AlignmentResult()
        assert result.matched_pairs == []
        assert result.unmatched_a == []
        assert result.unmatched_b == []
        assert result.skipped_a == []
        assert result.threshold == pytest.approx(0.80)

    def test_claimed_b_orders(self):
        """claimed_b_orders should list B orders of matched pairs."""
        a = Chunk(order=0, text="a", start_index=0, end_index=1)
        b = Chunk(order=4, text="b", start_index=0, end_index=1)
        result = AlignmentResult(matched_pairs=[MatchedPair(chunk_a=a, chunk_b=b, similarity=0.9)])
        assert result.claimed_b_orders() == {4}


class TestDiffEntry:
    """Tests for the DiffEntry dataclass."""

    def test_unchanged_is_hidden(self):
        """UNCHANGED entries should not be visible."""
        assert not DiffEntry(kind=DiffKind.UNCHANGED).is_visible

    @pytest.mark.parametrize("kind", [DiffKind.CHANGED, DiffKind.ADDED, DiffKind.DELETED, DiffKind.SKIPPED])
    def test_other_kinds_are_visible(self, kind):
        """Every other kind should be visible."""
        assert DiffEntry(kind=kind).is_visible

    def test_kind_values(self):
        """Kinds should serialize to lowercase names."""
        assert [k.value for k in DiffKind] == ["unchanged", "changed", "added", "deleted", "skipped"]
