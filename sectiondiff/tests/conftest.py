"""Shared fakes for the embedding and summarization collaborators."""

import re
import threading
import zlib

import numpy as np
import pytest

from sectiondiff.core.embeddings import Embedder, EmbeddingError
from sectiondiff.core.summarizer import NO_CHANGE_SENTINEL, Summarizer


class BagOfWordsEmbedder(Embedder):
    """
    Deterministic embedder: hashed counts of lowercase alphabetic words.

    Digits and punctuation are ignored, so "Revenue was $10." and
    "Revenue was $12." embed identically.
    """

    model_name = "bag-of-words"

    def __init__(self, dimension: int = 64, fail_on: str = None):
        self.dimension = dimension
        self.fail_on = fail_on
        self.calls = 0
        self._lock = threading.Lock()

    def embed(self, text):
        with self._lock:
            self.calls += 1
        if self.fail_on and self.fail_on in text:
            raise EmbeddingError(f"model refused text containing {self.fail_on!r}")
        vector = np.zeros(self.dimension, dtype=np.float32)
        for token in re.findall(r"[a-z]+", text.lower()):
            vector[zlib.crc32(token.encode()) % self.dimension] += 1.0
        return vector


class ScriptedSummarizer(Summarizer):
    """
    Summarizer returning the sentinel for identical texts and a bullet
    otherwise. Specific pairs can be overridden, and texts containing
    `fail_on` raise.
    """

    def __init__(self, overrides=None, fail_on: str = None):
        self.overrides = overrides or {}
        self.fail_on = fail_on
        self.calls = []
        self._lock = threading.Lock()

    def summarize(self, text_a, text_b):
        with self._lock:
            self.calls.append((text_a, text_b))
        if self.fail_on and (self.fail_on in text_a or self.fail_on in text_b):
            raise RuntimeError("summarizer backend unavailable")
        if (text_a, text_b) in self.overrides:
            return self.overrides[(text_a, text_b)]
        if text_a == text_b:
            return NO_CHANGE_SENTINEL
        return f"* Section changed from {len(text_a)} to {len(text_b)} characters"


@pytest.fixture
def embedder():
    return BagOfWordsEmbedder()


@pytest.fixture
def summarizer():
    return ScriptedSummarizer()


@pytest.fixture
def embedder_factory():
    return BagOfWordsEmbedder


@pytest.fixture
def summarizer_factory():
    return ScriptedSummarizer
