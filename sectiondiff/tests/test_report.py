"""Tests for report rendering."""

import pytest
from sectiondiff.core.models import Chunk, DiffEntry, DiffKind
from sectiondiff.core.report import (
    ComparisonReport,
    render_text,
    to_records,
    entry_label,
    NO_DIFFERENCES_MESSAGE,
)
from sectiondiff.core.segmenter import DomainHint
from sectiondiff.core.summarizer import SUMMARY_ERROR_MARKER


def _chunk(order, text="body", title=None):
    return Chunk(order=order, text=text, start_index=0, end_index=len(text), title=title)


CHANGED = DiffEntry(
    kind=DiffKind.CHANGED,
    chunk_a=_chunk(2, title="Fees"),
    chunk_b=_chunk(2, title="Fees"),
    narrative="* Monthly fee raised from $10 to $12",
    similarity=0.93,
)
UNCHANGED = DiffEntry(kind=DiffKind.UNCHANGED, chunk_a=_chunk(0), chunk_b=_chunk(0), similarity=1.0)
DELETED = DiffEntry(kind=DiffKind.DELETED, chunk_a=_chunk(3, title="Warranty"), snippet="No warranty is given.")
ADDED = DiffEntry(kind=DiffKind.ADDED, chunk_b=_chunk(4), snippet="Either party may terminate.")
SKIPPED = DiffEntry(kind=DiffKind.SKIPPED, chunk_a=_chunk(5))


class TestEntryLabel:
    """Tests for entry labels."""

    def test_pair_label(self):
        assert entry_label(CHANGED) == "A: 'Fees' (ID: 2) vs B: 'Fees' (ID: 2)"

    def test_added_label(self):
        assert entry_label(ADDED) == "B: ID: 4"

    def test_deleted_label(self):
        assert entry_label(DELETED) == "A: 'Warranty' (ID: 3)"


class TestRenderText:
    """Tests for the delimited text rendering."""

    def test_changed_block(self):
        assert render_text([CHANGED]) == (
            "--- Section Comparison (A: 'Fees' (ID: 2) vs B: 'Fees' (ID: 2)) ---\n"
            "* Monthly fee raised from $10 to $12"
        )

    def test_deleted_block(self):
        assert render_text([DELETED]) == (
            "--- Section Deleted (from A: 'Warranty' (ID: 3)) ---\n"
            "Content Snippet:\n```\nNo warranty is given.\n```"
        )

    def test_added_block(self):
        assert render_text([ADDED]) == (
            "--- Section Added (in B: ID: 4) ---\n"
            "Content Snippet:\n```\nEither party may terminate.\n```"
        )

    def test_skipped_block(self):
        assert render_text([SKIPPED]) == "--- Section Skipped (from A: ID: 5) due to missing embedding ---"

    def test_unchanged_is_not_rendered(self):
        assert render_text([UNCHANGED, ADDED]) == render_text([ADDED])

    def test_blocks_joined_by_blank_line(self):
        text = render_text([CHANGED, DELETED])
        assert text == render_text([CHANGED]) + "\n\n" + render_text([DELETED])

    def test_no_differences(self):
        assert render_text([]) == NO_DIFFERENCES_MESSAGE
        assert render_text([UNCHANGED]) == NO_DIFFERENCES_MESSAGE

    def test_error_marker_is_rendered(self):
        failed = DiffEntry(
            kind=DiffKind.CHANGED,
            chunk_a=_chunk(1),
            chunk_b=_chunk(1),
            narrative=SUMMARY_ERROR_MARKER,
            summary_failed=True,
        )
        assert SUMMARY_ERROR_MARKER in render_text([failed])


class TestToRecords:
    """Tests for the structured rendering."""

    def test_changed_record(self):
        record = to_records([CHANGED])[0]
        assert record == {
            "kind": "changed",
            "label": "A: 'Fees' (ID: 2) vs B: 'Fees' (ID: 2)",
            "content": "* Monthly fee raised from $10 to $12",
            "order_a": 2,
            "order_b": 2,
            "title_a": "Fees",
            "title_b": "Fees",
            "similarity": 0.93,
            "summary_failed": False,
        }

    def test_added_record(self):
        record = to_records([ADDED])[0]
        assert record["kind"] == "added"
        assert record["order_a"] is None
        assert record["content"] == "Either party may terminate."

    def test_unchanged_hidden_by_default(self):
        assert [r["kind"] for r in to_records([UNCHANGED, SKIPPED])] == ["skipped"]

    def test_include_unchanged(self):
        records = to_records([UNCHANGED, SKIPPED], include_unchanged=True)
        assert [r["kind"] for r in records] == ["unchanged", "skipped"]


class TestComparisonReport:
    """Tests for the ComparisonReport dataclass."""

    def test_counts(self):
        report = ComparisonReport(entries=[CHANGED, UNCHANGED, DELETED, ADDED, ADDED])
        assert report.counts == {"unchanged": 1, "changed": 1, "added": 2, "deleted": 1, "skipped": 0}
        assert report.count(DiffKind.ADDED) == 2

    def test_has_differences(self):
        assert ComparisonReport(entries=[CHANGED]).has_differences
        assert not ComparisonReport(entries=[UNCHANGED]).has_differences
        assert not ComparisonReport().has_differences

    def test_defaults(self):
        report = ComparisonReport()
        assert report.domain == DomainHint.GENERIC
        assert report.threshold == pytest.approx(0.80)
        assert report.to_text() == NO_DIFFERENCES_MESSAGE

    def test_delegates_rendering(self):
        report = ComparisonReport(entries=[UNCHANGED, DELETED])
        assert report.to_text() == render_text([DELETED])
        assert report.to_records() == to_records([DELETED])
