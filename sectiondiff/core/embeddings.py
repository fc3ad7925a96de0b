"""
Embedding generation for document chunks.

The aligner only needs a way to turn chunk text into a fixed-dimension
vector. That contract is the Embedder class; any object with a compatible
embed() method can be used, which keeps the engine testable without a model.

The bundled implementation uses local sentence-transformer models:

Model Selection:
The default model (BAAI/bge-base-en-v1.5) is chosen for:
- Strong performance on MTEB semantic similarity benchmarks
- 768-dimensional embeddings
- Good balance of accuracy and speed on CPU

Embedding Behavior:
- Embeddings are L2-normalized by sentence-transformers
- Every vector in one comparison must come from the same model, otherwise
  the aligner rejects them as a dimension mismatch

Chunk embedding is a pure transform per chunk, so embed_chunks() runs it in
a bounded thread pool and hands back vectors in chunk order.
"""

import logging
import threading
from concurrent.futures import CancelledError, ThreadPoolExecutor
from typing import List, Optional, Sequence

import numpy as np
from sentence_transformers import SentenceTransformer

from sectiondiff.core.models import Chunk, SectionVector, Vector


logger = logging.getLogger(__name__)

# Default embedding model - production quality, good accuracy
DEFAULT_MODEL = "BAAI/bge-base-en-v1.5"

# Default number of concurrent embedding calls per document
DEFAULT_EMBED_WORKERS = 4

# Module-level model cache to avoid reloading
_model_cache: dict[str, SentenceTransformer] = {}
_model_lock = threading.Lock()


class EmbeddingError(Exception):
    """Raised when embedding generation fails."""
    pass


class Embedder:
    """
    Contract for turning chunk text into a fixed-dimension vector.

    Implementations must return a 1-D sequence of floats of the same length
    for every call, and raise EmbeddingError when the model fails.
    """

    model_name: str = "unknown"

    def embed(self, text: str) -> Vector:
        raise NotImplementedError


def _get_model(model_name: str) -> SentenceTransformer:
    """
    Get or load a sentence-transformer model.

    Models are cached at module level to avoid expensive reloading. The
    lock keeps concurrent workers from loading the same model twice.

    Args:
        model_name: Name of the sentence-transformer model

    Returns:
        Loaded SentenceTransformer model

    Raises:
        EmbeddingError: If model cannot be loaded
    """
    with _model_lock:
        if model_name not in _model_cache:
            try:
                _model_cache[model_name] = SentenceTransformer(model_name)
            except Exception as e:
                raise EmbeddingError(f"Failed to load model '{model_name}': {e}") from e
        return _model_cache[model_name]


def get_model_info(model_name: str = DEFAULT_MODEL) -> dict:
    """
    Get information about an embedding model.

    Returns:
        Dict with model_name and embedding_dim
    """
    model = _get_model(model_name)
    return {
        "model_name": model_name,
        "embedding_dim": model.get_sentence_embedding_dimension(),
    }


def clear_model_cache() -> None:
    """
    Clear the model cache to free memory.

    Call this if you need to release GPU/CPU memory used by loaded models.
    """
    with _model_lock:
        _model_cache.clear()


def validate_vector(raw) -> Vector:
    """
    Convert embedder output to a float32 vector and reject degenerate output.

    Raises:
        EmbeddingError: If the output is not a non-empty, finite 1-D vector
    """
    try:
        vector = np.asarray(raw, dtype=np.float32)
    except (TypeError, ValueError) as e:
        raise EmbeddingError(f"Embedding is not a numeric vector: {e}") from e

    if vector.ndim != 1 or vector.size == 0:
        raise EmbeddingError(f"Embedding has degenerate shape {vector.shape}")
    if not np.all(np.isfinite(vector)):
        raise EmbeddingError("Embedding contains non-finite values")
    return vector


class SentenceTransformerEmbedder(Embedder):
    """Embedder backed by a local sentence-transformer model."""

    def __init__(self, model_name: str = DEFAULT_MODEL):
        self.model_name = model_name

    @property
    def dimension(self) -> int:
        return get_model_info(self.model_name)["embedding_dim"]

    def embed(self, text: str) -> Vector:
        """
        Generate an embedding vector for a single text.

        Raises:
            EmbeddingError: If text is empty or embedding fails
        """
        if not text or not text.strip():
            raise EmbeddingError("Cannot embed empty text")

        model = _get_model(self.model_name)

        try:
            embedding = model.encode(
                text,
                convert_to_numpy=True,
                normalize_embeddings=True,  # L2 normalize for cosine similarity
                show_progress_bar=False,
            )
        except Exception as e:
            raise EmbeddingError(f"Failed to generate embedding: {e}") from e
        return validate_vector(embedding)


def _embed_chunk(
    embedder: Embedder,
    chunk: Chunk,
    cancel_event: Optional[threading.Event],
) -> Optional[SectionVector]:
    """
    Embed one chunk, returning None when the embedder fails.

    Any exception raised by the embedder skips the chunk.
    """
    if cancel_event is not None and cancel_event.is_set():
        raise CancelledError()

    if not chunk.text.strip():
        return None

    try:
        vector = validate_vector(embedder.embed(chunk.text))
    except EmbeddingError as e:
        logger.warning("Skipping chunk %d: embedding failed: %s", chunk.order, e)
        return None
    except Exception as e:
        logger.error(
            "Skipping chunk %d: embedder raised %s: %s",
            chunk.order, type(e).__name__, e, exc_info=True,
        )
        return None
    return SectionVector(chunk_order=chunk.order, vector=vector)


def embed_chunks(
    chunks: Sequence[Chunk],
    embedder: Embedder,
    max_workers: int = DEFAULT_EMBED_WORKERS,
    cancel_event: Optional[threading.Event] = None,
) -> List[SectionVector]:
    """
    Embed every chunk of a document in a bounded worker pool.

    Chunks whose embedding fails are logged and left out of the result; the
    aligner reports them as skipped.

    Args:
        chunks: Chunks from segment()
        embedder: Embedding collaborator
        max_workers: Maximum concurrent embed() calls
        cancel_event: Set to stop before further embed() calls start

    Returns:
        SectionVectors in chunk order

    Raises:
        CancelledError: If cancel_event is set before all chunks are embedded
    """
    if not chunks:
        return []

    workers = max(1, min(max_workers, len(chunks)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="embed") as executor:
        results = list(executor.map(
            lambda chunk: _embed_chunk(embedder, chunk, cancel_event),
            chunks,
        ))

    vectors = [v for v in results if v is not None]
    if len(vectors) < len(chunks):
        logger.warning("Embedded %d of %d chunks", len(vectors), len(chunks))
    return vectors
