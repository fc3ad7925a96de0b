"""
Data models for the section comparison engine.

These dataclasses define the records passed between the segmenter, the
aligner and the classifier. They are intentionally simple and transparent;
chunks and diff entries are frozen so no stage can mutate another stage's
output.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Set
from enum import Enum
import numpy as np
from numpy.typing import NDArray


# Type alias for embedding vectors
Vector = NDArray[np.float32]


@dataclass(frozen=True)
class Chunk:
    """
    A contiguous span of document text produced by segmentation.

    Attributes:
        order: Position of this chunk in the document (0-indexed, contiguous)
        text: The chunk text, equal to original[start_index:end_index]
        start_index: Starting character offset in the original document
        end_index: Ending character offset (exclusive) in the original document
        title: Heading line that opened this chunk's section, if any
    """
    order: int
    text: str
    start_index: int
    end_index: int
    title: Optional[str] = None

    @property
    def char_count(self) -> int:
        """Number of characters in this chunk."""
        return len(self.text)

    @property
    def word_count(self) -> int:
        """Approximate number of words in this chunk."""
        return len(self.text.split())

    @property
    def label(self) -> str:
        """Identifier used in reports: title and id, or id alone."""
        title = (self.title or "").strip()
        if title:
            return f"'{title}' (ID: {self.order})"
        return f"ID: {self.order}"


@dataclass(frozen=True, eq=False)
class SectionVector:
    """
    Embedding vector for one chunk.

    Attributes:
        chunk_order: The `order` of the chunk this vector belongs to
        vector: 1-D float32 embedding
    """
    chunk_order: int
    vector: Vector

    @property
    def dimension(self) -> int:
        return int(self.vector.shape[0]) if self.vector.ndim == 1 else 0


@dataclass(frozen=True)
class MatchedPair:
    """An accepted A-to-B correspondence and its cosine similarity."""
    chunk_a: Chunk
    chunk_b: Chunk
    similarity: float


@dataclass
class AlignmentResult:
    """
    Outcome of aligning two documents' chunks.

    Attributes:
        matched_pairs: Accepted pairs in A order; each B chunk appears at most once
        unmatched_a: A chunks with no claimed partner (candidate deletions)
        unmatched_b: B chunks nobody claimed (candidate additions), in B order
        skipped_a: A chunks excluded from matching for lack of a usable vector
        threshold: Similarity threshold the alignment was computed with
    """
    matched_pairs: List[MatchedPair] = field(default_factory=list)
    unmatched_a: List[Chunk] = field(default_factory=list)
    unmatched_b: List[Chunk] = field(default_factory=list)
    skipped_a: List[Chunk] = field(default_factory=list)
    threshold: float = 0.80

    def claimed_b_orders(self) -> Set[int]:
        """Orders of B chunks that were claimed by a matched pair."""
        return {pair.chunk_b.order for pair in self.matched_pairs}


class DiffKind(Enum):
    """Classification of a chunk in the comparison result."""
    UNCHANGED = "unchanged"
    CHANGED = "changed"
    ADDED = "added"
    DELETED = "deleted"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class DiffEntry:
    """
    One categorized entry of a document comparison.

    Attributes:
        kind: What happened to the section
        chunk_a: Section from document A (None for ADDED)
        chunk_b: Section from document B (None for DELETED and SKIPPED)
        narrative: Summarizer output, only for CHANGED
        similarity: Cosine similarity of the pair, for CHANGED and UNCHANGED
        snippet: Truncated section text, for ADDED and DELETED
        summary_failed: True when narrative is the inline error marker
    """
    kind: DiffKind
    chunk_a: Optional[Chunk] = None
    chunk_b: Optional[Chunk] = None
    narrative: Optional[str] = None
    similarity: Optional[float] = None
    snippet: Optional[str] = None
    summary_failed: bool = False

    @property
    def is_visible(self) -> bool:
        """Whether this entry shows up in the rendered report."""
        return self.kind != DiffKind.UNCHANGED
