"""
Core section comparison engine.

This module provides the foundational logic for:
- Document segmentation with domain-specific heading detection
- Chunk embedding
- Cosine similarity and greedy section alignment
- Diff classification and narrative summaries
- Report rendering
"""

from sectiondiff.core.segmenter import segment, detect_domain, DomainHint, SegmentationProfile
from sectiondiff.core.embeddings import embed_chunks, Embedder, EmbeddingError
from sectiondiff.core.similarity import cosine_similarity, DimensionMismatchError
from sectiondiff.core.aligner import align
from sectiondiff.core.classifier import classify, truncate_text
from sectiondiff.core.summarizer import Summarizer, SummarizationError, NO_CHANGE_SENTINEL
from sectiondiff.core.report import ComparisonReport, render_text, to_records
from sectiondiff.core.engine import compare_documents, ComparisonRunner
from sectiondiff.core.models import (
    Chunk,
    SectionVector,
    MatchedPair,
    AlignmentResult,
    DiffKind,
    DiffEntry,
)

__all__ = [
    # Segmentation
    "segment",
    "detect_domain",
    "DomainHint",
    "SegmentationProfile",
    # Embedding and alignment
    "embed_chunks",
    "Embedder",
    "EmbeddingError",
    "cosine_similarity",
    "DimensionMismatchError",
    "align",
    # Classification and reporting
    "classify",
    "truncate_text",
    "Summarizer",
    "SummarizationError",
    "NO_CHANGE_SENTINEL",
    "ComparisonReport",
    "render_text",
    "to_records",
    # Orchestration
    "compare_documents",
    "ComparisonRunner",
    # Models
    "Chunk",
    "SectionVector",
    "MatchedPair",
    "AlignmentResult",
    "DiffKind",
    "DiffEntry",
]
