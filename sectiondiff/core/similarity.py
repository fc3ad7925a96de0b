"""
Cosine similarity calculations.

This module provides the similarity computation used by the aligner.

Mathematical Background:
Cosine similarity measures the angle between two vectors:
    cos(theta) = (A . B) / (||A|| * ||B||)

Interpretation:
- 1.0: Identical direction (same semantic meaning)
- 0.0: Orthogonal (unrelated)
- -1.0: Opposite direction (rare for text embeddings)

Conventions:
- A zero-magnitude vector has similarity 0 with everything, including itself
- Vectors of different length cannot be compared; that signals two
  incompatible embedding spaces and raises DimensionMismatchError
"""

from typing import Iterable, List, Optional, Sequence, Tuple
import numpy as np

from sectiondiff.core.models import Vector


class DimensionMismatchError(ValueError):
    """Raised when vectors from different embedding spaces are compared."""
    pass


def cosine_similarity(vec_a: Vector, vec_b: Vector) -> float:
    """
    Compute cosine similarity between two vectors.

    Args:
        vec_a: First embedding vector
        vec_b: Second embedding vector

    Returns:
        Cosine similarity score in [-1.0, 1.0]; 0.0 if either vector has
        zero magnitude

    Raises:
        DimensionMismatchError: If vectors have different dimensions
    """
    vec_a = np.asarray(vec_a, dtype=np.float32)
    vec_b = np.asarray(vec_b, dtype=np.float32)

    if vec_a.shape != vec_b.shape:
        raise DimensionMismatchError(
            f"Vector dimension mismatch: {vec_a.shape} vs {vec_b.shape}"
        )

    norm_a = np.linalg.norm(vec_a)
    norm_b = np.linalg.norm(vec_b)

    if norm_a == 0 or norm_b == 0:
        return 0.0

    similarity = np.dot(vec_a, vec_b) / (norm_a * norm_b)

    # Clamp to [-1, 1] to handle floating point errors
    return float(np.clip(similarity, -1.0, 1.0))


def ensure_same_dimension(vectors: Iterable[Vector]) -> Optional[int]:
    """
    Check that all vectors share one dimension.

    Returns:
        The shared dimension, or None when there are no vectors

    Raises:
        DimensionMismatchError: If more than one dimension is present
    """
    dimensions = sorted({int(np.asarray(v).shape[0]) for v in vectors})
    if len(dimensions) > 1:
        raise DimensionMismatchError(
            f"Embeddings have mixed dimensions {dimensions}; "
            "all vectors in a comparison must come from the same model"
        )
    return dimensions[0] if dimensions else None


def compute_similarities(query_vec: Vector, candidate_vecs: Sequence[Vector]) -> List[float]:
    """
    Compute cosine similarity between one vector and each candidate.

    Returns:
        List of similarity scores, same order as candidate_vecs
    """
    return [cosine_similarity(query_vec, vec) for vec in candidate_vecs]


def nearest_neighbor(
    query_vec: Vector,
    candidate_vecs: Sequence[Vector],
) -> Optional[Tuple[int, float]]:
    """
    Find the single most similar candidate.

    Ties go to the earliest candidate, which keeps alignment deterministic.

    Returns:
        (index, similarity) of the best candidate, or None if there are none
    """
    if not candidate_vecs:
        return None

    similarities = compute_similarities(query_vec, candidate_vecs)
    best = int(np.argmax(similarities))
    return best, similarities[best]
