"""
Main comparison engine orchestrating the full analysis pipeline.

This module provides the high-level API for comparing two versions of a
document. It coordinates:
1. Domain resolution and segmentation of both documents
2. Embedding generation for every chunk
3. Greedy section alignment
4. Classification and narrative summaries
5. Report assembly

The primary entry point is compare_documents(), which takes raw text inputs
and returns a ComparisonReport. ComparisonRunner wraps it for background use:
each submission returns a handle around a Future, so the caller decides how
to track queued/processing/done states.

Design Principles:
- Single responsibility: orchestration only, delegates to specialized modules
- All or nothing: a failed or cancelled comparison never returns partial entries
- No shared mutable state between comparisons
"""

import logging
import threading
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from typing import Optional, Union

from sectiondiff.core.aligner import align
from sectiondiff.core.classifier import classify
from sectiondiff.core.config import ComparisonConfig
from sectiondiff.core.embeddings import Embedder, SentenceTransformerEmbedder, embed_chunks
from sectiondiff.core.report import ComparisonReport
from sectiondiff.core.segmenter import DomainHint, detect_domain, get_profile, segment
from sectiondiff.core.summarizer import OllamaSummarizer, Summarizer


logger = logging.getLogger(__name__)

# Default number of comparisons a runner executes at once
DEFAULT_MAX_CONCURRENT = 2


class ComparisonError(Exception):
    """Raised when the comparison pipeline fails."""
    pass


class ComparisonCancelledError(ComparisonError):
    """Raised when a comparison is cancelled before it completes."""
    pass


def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise CancelledError()


def resolve_domain(
    domain_hint: Union[DomainHint, str, None],
    text_a: Optional[str],
    text_b: Optional[str],
) -> DomainHint:
    """
    Pick the domain both documents are segmented with.

    An explicit hint wins; otherwise the domain is detected from document A,
    then from document B if A gives no signal.
    """
    if domain_hint is not None:
        return DomainHint.parse(domain_hint)

    detected = detect_domain(text_a)
    if detected == DomainHint.GENERIC:
        detected = detect_domain(text_b)
    logger.info("Detected document domain: %s", detected.value)
    return detected


def compare_documents(
    text_a: Optional[str],
    text_b: Optional[str],
    embedder: Optional[Embedder] = None,
    summarizer: Optional[Summarizer] = None,
    domain_hint: Union[DomainHint, str, None] = None,
    config: Optional[ComparisonConfig] = None,
    cancel_event: Optional[threading.Event] = None,
) -> ComparisonReport:
    """
    Compare two versions of a document section by section.

    This is the main entry point for the comparison engine. It:
    1. Resolves the domain and segments both documents with the same profile
    2. Embeds every chunk (chunks whose embedding fails are skipped)
    3. Aligns A's chunks to B's chunks
    4. Summarizes matched pairs and classifies every chunk
    5. Wraps the entries in a ComparisonReport

    Args:
        text_a: Original document text
        text_b: New document text
        embedder: Embedding collaborator (default: sentence-transformer model
                  from config)
        summarizer: Narrative collaborator (default: Ollama from config)
        domain_hint: LEGAL / FINANCIAL / MEDICAL / GENERIC (enum or string);
                     detected from the text when omitted
        config: Comparison settings
        cancel_event: Set from another thread to abandon the comparison

    Returns:
        ComparisonReport with classified entries

    Raises:
        DimensionMismatchError: If embeddings of the two documents have
                                different dimensions
        ComparisonCancelledError: If cancel_event was set before completion

    Example:
        >>> report = compare_documents(old_contract, new_contract, domain_hint="legal")
        >>> print(report.to_text())
    """
    cfg = config or ComparisonConfig()
    embedder = embedder or SentenceTransformerEmbedder(cfg.embedding_model)
    summarizer = summarizer or OllamaSummarizer(model=cfg.ollama_model, host=cfg.ollama_host)

    domain = resolve_domain(domain_hint, text_a, text_b)
    profile = get_profile(domain).with_limits(cfg.max_chunk_chars, cfg.overlap_chars)

    try:
        _check_cancelled(cancel_event)

        # Step 1: Segment both documents with the same profile
        chunks_a = segment(text_a, domain, profile=profile)
        chunks_b = segment(text_b, domain, profile=profile)
        logger.info(
            "Comparing documents (%s): %d chunks in A, %d chunks in B",
            domain.value, len(chunks_a), len(chunks_b),
        )

        # Step 2: Embed chunks
        vectors_a = embed_chunks(chunks_a, embedder, cfg.embed_workers, cancel_event)
        vectors_b = embed_chunks(chunks_b, embedder, cfg.embed_workers, cancel_event)
        _check_cancelled(cancel_event)

        # Step 3: Align sections
        alignment = align(chunks_a, vectors_a, chunks_b, vectors_b, cfg.similarity_threshold)

        # Step 4: Classify and summarize
        entries = classify(
            alignment,
            summarizer,
            snippet_length=cfg.snippet_length,
            max_workers=cfg.summary_workers,
            cancel_event=cancel_event,
        )
        _check_cancelled(cancel_event)
    except CancelledError as e:
        logger.info("Comparison cancelled")
        raise ComparisonCancelledError("Comparison was cancelled before completion") from e

    # Step 5: Build and return report
    report = ComparisonReport(
        entries=entries,
        domain=domain,
        chunk_count_a=len(chunks_a),
        chunk_count_b=len(chunks_b),
        threshold=cfg.similarity_threshold,
    )
    logger.info("Comparison finished: %s", report.counts)
    return report


class ComparisonHandle:
    """
    Handle for a comparison submitted to a ComparisonRunner.

    Wraps the Future holding the ComparisonReport and the event used to
    cancel the comparison cooperatively.
    """

    def __init__(self, future: Future, cancel_event: threading.Event):
        self.future = future
        self._cancel_event = cancel_event

    def cancel(self) -> bool:
        """
        Request cancellation.

        A queued comparison never starts; a running one stops at its next
        checkpoint and fails with ComparisonCancelledError. Cancellation is
        best-effort: a comparison that has already passed its last
        checkpoint (classification done, report being assembled) still
        completes, and result() returns the full report.

        Returns:
            False if the comparison had already finished; True means
            cancellation was requested, not that it took effect
        """
        if self.future.done():
            return False
        self._cancel_event.set()
        self.future.cancel()
        return True

    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: Optional[float] = None) -> ComparisonReport:
        """
        Wait for the report.

        Raises:
            ComparisonCancelledError: If the comparison was cancelled
            Any exception raised by the comparison itself
        """
        try:
            return self.future.result(timeout=timeout)
        except CancelledError as e:
            raise ComparisonCancelledError("Comparison was cancelled before it started") from e


class ComparisonRunner:
    """
    Bounded worker pool for running comparisons in the background.

    Collaborators are shared by all submissions; they must be stateless
    (the bundled embedder and summarizer are).

    Example:
        >>> with ComparisonRunner(max_concurrent=2) as runner:
        ...     handle = runner.submit(old_text, new_text, domain_hint="financial")
        ...     report = handle.result()
    """

    def __init__(
        self,
        embedder: Optional[Embedder] = None,
        summarizer: Optional[Summarizer] = None,
        config: Optional[ComparisonConfig] = None,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
    ):
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be at least 1, got {max_concurrent}")
        self.config = config or ComparisonConfig()
        self.embedder = embedder or SentenceTransformerEmbedder(self.config.embedding_model)
        self.summarizer = summarizer or OllamaSummarizer(
            model=self.config.ollama_model,
            host=self.config.ollama_host,
        )
        self._executor = ThreadPoolExecutor(
            max_workers=max_concurrent,
            thread_name_prefix="comparison",
        )

    def submit(
        self,
        text_a: Optional[str],
        text_b: Optional[str],
        domain_hint: Union[DomainHint, str, None] = None,
    ) -> ComparisonHandle:
        """Queue a comparison and return its handle immediately."""
        cancel_event = threading.Event()
        future = self._executor.submit(
            compare_documents,
            text_a,
            text_b,
            embedder=self.embedder,
            summarizer=self.summarizer,
            domain_hint=domain_hint,
            config=self.config,
            cancel_event=cancel_event,
        )
        return ComparisonHandle(future, cancel_event)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "ComparisonRunner":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)
