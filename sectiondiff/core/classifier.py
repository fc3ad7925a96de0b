"""
Classification of an alignment into diff entries.

Turns an AlignmentResult into an ordered list of DiffEntry records:

- Matched pair, summarizer returns the sentinel -> UNCHANGED
- Matched pair, any other narrative             -> CHANGED
- Unmatched A chunk                             -> DELETED
- Unmatched B chunk                             -> ADDED
- A chunk without an embedding                  -> SKIPPED

Entries for A's chunks come first in A order, followed by ADDED entries in
B order. Summarizer calls are independent, so they run in a bounded thread
pool; a failing call becomes an inline error narrative instead of aborting
the comparison.
"""

import logging
import threading
from concurrent.futures import CancelledError, ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence, Tuple

from sectiondiff.core.models import AlignmentResult, DiffEntry, DiffKind, MatchedPair
from sectiondiff.core.summarizer import (
    SUMMARY_ERROR_MARKER,
    SummarizationError,
    Summarizer,
    is_no_change,
)


logger = logging.getLogger(__name__)

# Maximum snippet length for added/deleted sections
DEFAULT_SNIPPET_LENGTH = 200

# Default number of concurrent summarizer calls
DEFAULT_SUMMARY_WORKERS = 4

ELLIPSIS = "..."


def truncate_text(text: Optional[str], max_length: int = DEFAULT_SNIPPET_LENGTH) -> str:
    """
    Shorten text for a report snippet.

    Cuts at the last whitespace at or before max_length when that boundary
    lies beyond half of max_length, otherwise hard-cuts at max_length.
    An ellipsis is appended whenever the text was shortened.
    """
    if not text:
        return ""
    if len(text) <= max_length:
        return text

    boundary = -1
    for i in range(max_length, -1, -1):
        if text[i].isspace():
            boundary = i
            break

    if boundary > max_length // 2:
        return text[:boundary] + ELLIPSIS
    return text[:max_length] + ELLIPSIS


def _summarize_pair(
    summarizer: Summarizer,
    pair: MatchedPair,
    cancel_event: Optional[threading.Event],
) -> Tuple[str, bool]:
    """
    Get the narrative for one pair.

    Returns:
        (narrative, failed) where failed marks the inline error narrative
    """
    if cancel_event is not None and cancel_event.is_set():
        raise CancelledError()

    try:
        narrative = summarizer.summarize(pair.chunk_a.text, pair.chunk_b.text)
        if narrative is None or not narrative.strip():
            raise SummarizationError("Summarizer returned an empty narrative")
        return narrative.strip(), False
    except Exception as e:
        logger.error(
            "Failed to summarize section pair (A:%d, B:%d): %s",
            pair.chunk_a.order, pair.chunk_b.order, e, exc_info=True,
        )
        return SUMMARY_ERROR_MARKER, True


def summarize_pairs(
    pairs: Sequence[MatchedPair],
    summarizer: Summarizer,
    max_workers: int = DEFAULT_SUMMARY_WORKERS,
    cancel_event: Optional[threading.Event] = None,
) -> List[Tuple[str, bool]]:
    """
    Summarize all matched pairs concurrently.

    Returns:
        (narrative, failed) tuples in the same order as pairs

    Raises:
        CancelledError: If cancel_event is set before all calls started
    """
    if not pairs:
        return []

    workers = max(1, min(max_workers, len(pairs)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="summarize") as executor:
        futures = [
            executor.submit(_summarize_pair, summarizer, pair, cancel_event)
            for pair in pairs
        ]
        return [future.result() for future in futures]


def classify(
    alignment: AlignmentResult,
    summarizer: Summarizer,
    snippet_length: int = DEFAULT_SNIPPET_LENGTH,
    max_workers: int = DEFAULT_SUMMARY_WORKERS,
    cancel_event: Optional[threading.Event] = None,
) -> List[DiffEntry]:
    """
    Classify every chunk of an alignment.

    Args:
        alignment: Result of align()
        summarizer: Narrative collaborator for matched pairs
        snippet_length: Maximum snippet length for ADDED/DELETED entries
        max_workers: Maximum concurrent summarizer calls
        cancel_event: Set to stop before further summarizer calls start

    Returns:
        DiffEntry list: A-side entries in A order, then ADDED in B order
    """
    narratives = summarize_pairs(alignment.matched_pairs, summarizer, max_workers, cancel_event)

    by_order: Dict[int, DiffEntry] = {}

    for pair, (narrative, failed) in zip(alignment.matched_pairs, narratives):
        if not failed and is_no_change(narrative):
            logger.debug("No significant changes between A:%d and B:%d", pair.chunk_a.order, pair.chunk_b.order)
            entry = DiffEntry(
                kind=DiffKind.UNCHANGED,
                chunk_a=pair.chunk_a,
                chunk_b=pair.chunk_b,
                similarity=pair.similarity,
            )
        else:
            entry = DiffEntry(
                kind=DiffKind.CHANGED,
                chunk_a=pair.chunk_a,
                chunk_b=pair.chunk_b,
                narrative=narrative,
                similarity=pair.similarity,
                summary_failed=failed,
            )
        by_order[pair.chunk_a.order] = entry

    for chunk in alignment.unmatched_a:
        by_order[chunk.order] = DiffEntry(
            kind=DiffKind.DELETED,
            chunk_a=chunk,
            snippet=truncate_text(chunk.text, snippet_length),
        )

    for chunk in alignment.skipped_a:
        by_order[chunk.order] = DiffEntry(kind=DiffKind.SKIPPED, chunk_a=chunk)

    entries = [by_order[order] for order in sorted(by_order)]
    entries.extend(
        DiffEntry(
            kind=DiffKind.ADDED,
            chunk_b=chunk,
            snippet=truncate_text(chunk.text, snippet_length),
        )
        for chunk in sorted(alignment.unmatched_b, key=lambda c: c.order)
    )
    return entries
