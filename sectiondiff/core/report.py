"""
Rendering of comparison results.

Diff entries stay structured until the boundary. Two renderings exist:

- to_records(): list of plain dicts (kind, label, content, ...) for
  downstream consumers
- render_text(): the delimited text blocks used by the earlier report
  presentation, e.g.

    --- Section Comparison (A: 'Fees' (ID: 2) vs B: 'Fees' (ID: 2)) ---
    * Monthly fee raised from $10 to $12

UNCHANGED entries are never rendered as text.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from sectiondiff.core.models import DiffEntry, DiffKind
from sectiondiff.core.segmenter import DomainHint


NO_DIFFERENCES_MESSAGE = (
    "No differences identified between the documents based on the comparison criteria."
)


def entry_label(entry: DiffEntry) -> str:
    """Identify the section(s) an entry refers to."""
    if entry.kind in (DiffKind.CHANGED, DiffKind.UNCHANGED):
        return f"A: {entry.chunk_a.label} vs B: {entry.chunk_b.label}"
    if entry.kind == DiffKind.ADDED:
        return f"B: {entry.chunk_b.label}"
    return f"A: {entry.chunk_a.label}"


def entry_content(entry: DiffEntry) -> str:
    """Main content of an entry: narrative, snippet or skip notice."""
    if entry.kind == DiffKind.CHANGED:
        return entry.narrative or ""
    if entry.kind in (DiffKind.ADDED, DiffKind.DELETED):
        return entry.snippet or ""
    if entry.kind == DiffKind.SKIPPED:
        return "Section skipped due to missing embedding"
    return ""


def _render_block(entry: DiffEntry) -> str:
    if entry.kind == DiffKind.CHANGED:
        return (
            f"--- Section Comparison (A: {entry.chunk_a.label} vs B: {entry.chunk_b.label}) ---\n"
            f"{entry.narrative}"
        )
    if entry.kind == DiffKind.DELETED:
        return (
            f"--- Section Deleted (from A: {entry.chunk_a.label}) ---\n"
            f"Content Snippet:\n```\n{entry.snippet}\n```"
        )
    if entry.kind == DiffKind.ADDED:
        return (
            f"--- Section Added (in B: {entry.chunk_b.label}) ---\n"
            f"Content Snippet:\n```\n{entry.snippet}\n```"
        )
    if entry.kind == DiffKind.SKIPPED:
        return f"--- Section Skipped (from A: {entry.chunk_a.label}) due to missing embedding ---"
    return ""


def render_text(entries: Sequence[DiffEntry]) -> str:
    """
    Render entries as delimited text blocks.

    Returns:
        Report text, or NO_DIFFERENCES_MESSAGE when no entry is visible
    """
    blocks = [_render_block(entry) for entry in entries if entry.is_visible]
    text = "\n\n".join(block for block in blocks if block).strip()
    return text or NO_DIFFERENCES_MESSAGE


def to_records(entries: Sequence[DiffEntry], include_unchanged: bool = False) -> List[Dict[str, Any]]:
    """
    Convert entries to plain dicts.

    Args:
        entries: Entries from classify()
        include_unchanged: Also emit UNCHANGED entries

    Returns:
        One dict per entry with kind, label, content, orders, similarity
        and summary_failed
    """
    records: List[Dict[str, Any]] = []
    for entry in entries:
        if not include_unchanged and not entry.is_visible:
            continue
        records.append({
            "kind": entry.kind.value,
            "label": entry_label(entry),
            "content": entry_content(entry),
            "order_a": entry.chunk_a.order if entry.chunk_a is not None else None,
            "order_b": entry.chunk_b.order if entry.chunk_b is not None else None,
            "title_a": entry.chunk_a.title if entry.chunk_a is not None else None,
            "title_b": entry.chunk_b.title if entry.chunk_b is not None else None,
            "similarity": entry.similarity,
            "summary_failed": entry.summary_failed,
        })
    return records


@dataclass
class ComparisonReport:
    """
    Complete result of comparing two documents.

    This is the primary return type from compare_documents().

    Attributes:
        entries: Classified entries (A order, then additions in B order)
        domain: Domain profile both documents were segmented with
        chunk_count_a: Number of chunks in document A
        chunk_count_b: Number of chunks in document B
        threshold: Similarity threshold used for alignment
    """
    entries: List[DiffEntry] = field(default_factory=list)
    domain: DomainHint = DomainHint.GENERIC
    chunk_count_a: int = 0
    chunk_count_b: int = 0
    threshold: float = 0.80

    def count(self, kind: DiffKind) -> int:
        """Number of entries of one kind."""
        return sum(1 for entry in self.entries if entry.kind == kind)

    @property
    def counts(self) -> Dict[str, int]:
        return {kind.value: self.count(kind) for kind in DiffKind}

    @property
    def has_differences(self) -> bool:
        return any(entry.is_visible for entry in self.entries)

    def to_records(self, include_unchanged: bool = False) -> List[Dict[str, Any]]:
        return to_records(self.entries, include_unchanged=include_unchanged)

    def to_text(self) -> str:
        return render_text(self.entries)
