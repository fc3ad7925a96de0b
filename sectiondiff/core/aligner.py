"""
Cross-document section alignment.

Pairs each section of document A with at most one section of document B by
embedding similarity.

Algorithm:
1. Walk A's chunks strictly in order
2. For each chunk with a usable vector, find its single nearest neighbour
   among ALL of B's vectors (claimed or not)
3. Accept the pair if the similarity reaches the threshold and that B chunk
   has not been claimed by an earlier A chunk
4. Otherwise the A chunk is unmatched; it is not rerouted to its second-best
   candidate
5. B chunks nobody claimed are unmatched

The greedy first-come-first-served policy is order dependent: when two A
chunks share a nearest neighbour, the earlier one wins and the later one is
reported as deleted even if its score qualified. Because the claimed set is
shared state, the pass runs sequentially.
"""

import logging
from typing import Dict, List, Sequence, Set

import numpy as np

from sectiondiff.core.models import AlignmentResult, Chunk, MatchedPair, SectionVector, Vector
from sectiondiff.core.similarity import ensure_same_dimension, nearest_neighbor


logger = logging.getLogger(__name__)

# Minimum cosine similarity for two sections to count as the same section
DEFAULT_SIMILARITY_THRESHOLD = 0.80


def _vector_lookup(vectors: Sequence[SectionVector]) -> Dict[int, Vector]:
    """Map chunk order to vector, dropping empty vectors."""
    lookup: Dict[int, Vector] = {}
    for sv in vectors:
        vector = np.asarray(sv.vector, dtype=np.float32).ravel()
        if vector.size > 0:
            lookup[sv.chunk_order] = vector
    return lookup


def align(
    chunks_a: Sequence[Chunk],
    vectors_a: Sequence[SectionVector],
    chunks_b: Sequence[Chunk],
    vectors_b: Sequence[SectionVector],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> AlignmentResult:
    """
    Align the chunks of two documents one-to-one by cosine similarity.

    Args:
        chunks_a: Chunks of the original document
        vectors_a: Vectors for chunks_a (chunks without one are skipped)
        chunks_b: Chunks of the new document
        vectors_b: Vectors for chunks_b (chunks without one cannot be matched)
        threshold: Minimum similarity for a pair to be accepted

    Returns:
        AlignmentResult with matched pairs in A order

    Raises:
        ValueError: If threshold is outside [-1, 1]
        DimensionMismatchError: If the vectors do not share one dimension
    """
    if not -1.0 <= threshold <= 1.0:
        raise ValueError(f"threshold must be within [-1, 1], got {threshold}")

    lookup_a = _vector_lookup(vectors_a)
    lookup_b = _vector_lookup(vectors_b)
    ensure_same_dimension(list(lookup_a.values()) + list(lookup_b.values()))

    ordered_a = sorted(chunks_a, key=lambda c: c.order)
    ordered_b = sorted(chunks_b, key=lambda c: c.order)
    candidates: List[Chunk] = [c for c in ordered_b if c.order in lookup_b]
    candidate_vectors = [lookup_b[c.order] for c in candidates]

    result = AlignmentResult(threshold=threshold)
    claimed: Set[int] = set()

    for chunk in ordered_a:
        vector = lookup_a.get(chunk.order)
        if vector is None:
            logger.warning("Skipping chunk A:%d, it has no embedding", chunk.order)
            result.skipped_a.append(chunk)
            continue

        match = nearest_neighbor(vector, candidate_vectors)
        if match is None:
            logger.debug("Chunk A:%d has no candidate in document B", chunk.order)
            result.unmatched_a.append(chunk)
            continue

        index, score = match
        best = candidates[index]
        if score < threshold:
            logger.debug(
                "Best match for A:%d is B:%d at %.3f, below threshold %.2f",
                chunk.order, best.order, score, threshold,
            )
            result.unmatched_a.append(chunk)
        elif best.order in claimed:
            logger.debug(
                "Best match for A:%d is B:%d at %.3f, but it is already claimed",
                chunk.order, best.order, score,
            )
            result.unmatched_a.append(chunk)
        else:
            claimed.add(best.order)
            result.matched_pairs.append(MatchedPair(chunk_a=chunk, chunk_b=best, similarity=score))

    result.unmatched_b = [c for c in ordered_b if c.order not in claimed]

    logger.info(
        "Aligned %d pairs (%d unmatched in A, %d unmatched in B, %d skipped)",
        len(result.matched_pairs), len(result.unmatched_a),
        len(result.unmatched_b), len(result.skipped_a),
    )
    return result
