"""
Comparison settings.

Defaults live in the modules that use them; ComparisonConfig collects them so
a caller can override any of them in one place. load_config() reads
overrides from the environment (and a .env file, if present):

    SECTIONDIFF_SIMILARITY_THRESHOLD   float, default 0.80
    SECTIONDIFF_SNIPPET_LENGTH         int, default 200
    SECTIONDIFF_EMBED_WORKERS          int, default 4
    SECTIONDIFF_SUMMARY_WORKERS        int, default 4
    SECTIONDIFF_MAX_CHUNK_CHARS        int, default: per domain
    SECTIONDIFF_OVERLAP_CHARS          int, default: per domain
    SECTIONDIFF_EMBEDDING_MODEL        sentence-transformer model name
    OLLAMA_HOST                        default http://localhost:11434
    OLLAMA_MODEL                       default qwen2.5:7b
"""

import os
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from dotenv import load_dotenv

from sectiondiff.core.aligner import DEFAULT_SIMILARITY_THRESHOLD
from sectiondiff.core.classifier import DEFAULT_SNIPPET_LENGTH, DEFAULT_SUMMARY_WORKERS
from sectiondiff.core.embeddings import DEFAULT_EMBED_WORKERS, DEFAULT_MODEL
from sectiondiff.core.summarizer import DEFAULT_OLLAMA_HOST, DEFAULT_OLLAMA_MODEL


ENV_PREFIX = "SECTIONDIFF_"

T = TypeVar("T")


@dataclass
class ComparisonConfig:
    """
    Settings for one or more document comparisons.

    Attributes:
        similarity_threshold: Minimum cosine similarity for a section match
        snippet_length: Maximum snippet length for added/deleted sections
        embed_workers: Concurrent embedding calls per document
        summary_workers: Concurrent summarizer calls per comparison
        max_chunk_chars: Overrides the domain's chunk size cap
        overlap_chars: Overrides the domain's fixed-window overlap
        embedding_model: Model for the default sentence-transformer embedder
        ollama_host: Server for the default summarizer
        ollama_model: Model for the default summarizer
    """
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    snippet_length: int = DEFAULT_SNIPPET_LENGTH
    embed_workers: int = DEFAULT_EMBED_WORKERS
    summary_workers: int = DEFAULT_SUMMARY_WORKERS
    max_chunk_chars: Optional[int] = None
    overlap_chars: Optional[int] = None
    embedding_model: str = DEFAULT_MODEL
    ollama_host: str = DEFAULT_OLLAMA_HOST
    ollama_model: str = DEFAULT_OLLAMA_MODEL

    def __post_init__(self):
        if not -1.0 <= self.similarity_threshold <= 1.0:
            raise ValueError(f"similarity_threshold must be within [-1, 1], got {self.similarity_threshold}")
        if self.snippet_length <= 0:
            raise ValueError(f"snippet_length must be positive, got {self.snippet_length}")
        if self.embed_workers < 1 or self.summary_workers < 1:
            raise ValueError("worker counts must be at least 1")
        if self.max_chunk_chars is not None and self.max_chunk_chars <= 0:
            raise ValueError(f"max_chunk_chars must be positive, got {self.max_chunk_chars}")
        if self.overlap_chars is not None and self.overlap_chars < 0:
            raise ValueError(f"overlap_chars cannot be negative, got {self.overlap_chars}")


def _env(name: str, convert: Callable[[str], T], default: T) -> T:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return convert(raw.strip())
    except ValueError as e:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from e


def load_config(env_file: Optional[str] = None) -> ComparisonConfig:
    """
    Build a ComparisonConfig from environment variables.

    Args:
        env_file: Path of a .env file to load first (default: search for .env)

    Raises:
        ValueError: If a variable cannot be parsed or is out of range
    """
    load_dotenv(dotenv_path=env_file)

    return ComparisonConfig(
        similarity_threshold=_env(ENV_PREFIX + "SIMILARITY_THRESHOLD", float, DEFAULT_SIMILARITY_THRESHOLD),
        snippet_length=_env(ENV_PREFIX + "SNIPPET_LENGTH", int, DEFAULT_SNIPPET_LENGTH),
        embed_workers=_env(ENV_PREFIX + "EMBED_WORKERS", int, DEFAULT_EMBED_WORKERS),
        summary_workers=_env(ENV_PREFIX + "SUMMARY_WORKERS", int, DEFAULT_SUMMARY_WORKERS),
        max_chunk_chars=_env(ENV_PREFIX + "MAX_CHUNK_CHARS", int, None),
        overlap_chars=_env(ENV_PREFIX + "OVERLAP_CHARS", int, None),
        embedding_model=_env(ENV_PREFIX + "EMBEDDING_MODEL", str, DEFAULT_MODEL),
        ollama_host=_env("OLLAMA_HOST", str, DEFAULT_OLLAMA_HOST),
        ollama_model=_env("OLLAMA_MODEL", str, DEFAULT_OLLAMA_MODEL),
    )
