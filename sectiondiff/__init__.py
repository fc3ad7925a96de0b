"""
sectiondiff - Section-Level Semantic Document Comparison

Splits two versions of a long document into sections, aligns the sections
by embedding similarity and reports which ones changed, appeared or
disappeared, with a narrative of each change.
"""

from sectiondiff.core.engine import (
    compare_documents,
    ComparisonRunner,
    ComparisonHandle,
    ComparisonError,
    ComparisonCancelledError,
)
from sectiondiff.core.config import ComparisonConfig, load_config
from sectiondiff.core.models import Chunk, DiffEntry, DiffKind, AlignmentResult
from sectiondiff.core.segmenter import segment, detect_domain, DomainHint
from sectiondiff.core.embeddings import Embedder, SentenceTransformerEmbedder, EmbeddingError
from sectiondiff.core.summarizer import Summarizer, OllamaSummarizer, SummarizationError
from sectiondiff.core.similarity import DimensionMismatchError
from sectiondiff.core.report import ComparisonReport

__version__ = "0.1.0"
__all__ = [
    # Comparison
    "compare_documents",
    "ComparisonRunner",
    "ComparisonHandle",
    "ComparisonError",
    "ComparisonCancelledError",
    "ComparisonReport",
    # Configuration
    "ComparisonConfig",
    "load_config",
    # Segmentation
    "segment",
    "detect_domain",
    "DomainHint",
    "Chunk",
    # Collaborator contracts
    "Embedder",
    "SentenceTransformerEmbedder",
    "EmbeddingError",
    "Summarizer",
    "OllamaSummarizer",
    "SummarizationError",
    "DimensionMismatchError",
    # Results
    "DiffEntry",
    "DiffKind",
    "AlignmentResult",
]
